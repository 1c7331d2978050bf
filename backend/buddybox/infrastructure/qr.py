from __future__ import annotations

import io
from urllib.parse import quote, urlencode

import qrcode

from ..domain.errors import QrGenerationFailedError


def build_payment_uri(*, payee: str, payee_name: str, amount: int, note: str) -> str:
    params = {"pa": payee, "pn": payee_name, "am": f"{amount}.00", "cu": "INR", "tn": note}
    return "upi://pay?" + urlencode(params, quote_via=quote)


def render_payment_qr(uri: str) -> bytes:
    """Render `uri` as a PNG. Raises QrGenerationFailedError; callers may retry."""
    if not uri:
        raise QrGenerationFailedError("payment uri is empty")
    try:
        qr = qrcode.QRCode(
            version=None,
            error_correction=qrcode.constants.ERROR_CORRECT_M,
            box_size=10,
            border=4,
        )
        qr.add_data(uri)
        qr.make(fit=True)
        img = qr.make_image(fill_color="black", back_color="white")
        buffer = io.BytesIO()
        img.save(buffer, format="PNG")
    except Exception as exc:
        raise QrGenerationFailedError("could not render payment code") from exc
    return buffer.getvalue()
