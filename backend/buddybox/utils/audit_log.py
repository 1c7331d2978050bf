import json
import logging
from datetime import datetime, timezone
from typing import Any, Literal, Optional

from .request_id import get_request_id

AuditAction = Literal[
    "booking.confirmed",
    "booking.cancelled",
    "slot.holiday_toggled",
    "slot.undo_applied",
    "day.blocked",
    "day.holiday_marked",
    "promo.saved",
    "promo.removed",
]
AuditInitiator = Literal["customer", "staff"]


def _build_logger() -> logging.Logger:
    audit = logging.getLogger("audit")
    audit.setLevel(logging.INFO)
    if not audit.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(message)s"))
        audit.addHandler(handler)
    audit.propagate = False
    return audit


_audit_logger = _build_logger()


def _status(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(getattr(value, "value", value))


def emit_audit_log(
    *,
    action: AuditAction,
    initiator: AuditInitiator,
    slot_id: Optional[str] = None,
    slot_date: Optional[str] = None,
    transaction_id: Optional[str] = None,
    mobile: Optional[str] = None,
    status_from: Any = None,
    status_to: Any = None,
    message: Optional[str] = None,
    extra: Optional[dict[str, Any]] = None,
) -> None:
    """
    Write one JSON line to the `audit` logger.

    Empty fields are left out. `extra` keys are merged at the top level.
    Raises RuntimeError when the record cannot be written so callers can fail
    the request instead of losing the trail.
    """
    record: dict[str, Any] = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "level": "info",
        "action": action,
        "initiator": initiator,
        "request_id": get_request_id(),
        "slot_id": slot_id,
        "slot_date": slot_date,
        "transaction_id": transaction_id,
        "mobile": mobile,
        "status_from": _status(status_from),
        "status_to": _status(status_to),
        "message": message,
        **(extra or {}),
    }
    try:
        _audit_logger.info(json.dumps({k: v for k, v in record.items() if v is not None}, ensure_ascii=True))
    except Exception as exc:
        raise RuntimeError("failed to emit audit log") from exc
