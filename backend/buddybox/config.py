from functools import lru_cache
import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field


load_dotenv()


class Settings(BaseModel):
    database_url: str = Field(default="sqlite+aiosqlite:///./buddybox.db")
    echo_sql: bool = Field(default=False)
    admin_password: str = Field(default="buddybox-admin")
    auth_secret: str = Field(default="change-me")
    auth_algorithm: str = Field(default="HS256")
    redis_url: str = Field(default="redis://localhost:6379/0")
    sync_freshness_seconds: int = Field(default=300, ge=1)
    sync_retention_seconds: int = Field(default=86400, ge=1)
    payment_delay_seconds: float = Field(default=3.0, ge=0)
    upi_payee: str = Field(default="buddybox@upi")
    upi_payee_name: str = Field(default="Buddy Box")
    venue_timezone: str = Field(default="Asia/Kolkata")


@lru_cache
def get_settings() -> Settings:
    defaults = Settings.model_fields
    return Settings(
        database_url=os.getenv("DATABASE_URL", defaults["database_url"].default),
        echo_sql=bool(int(os.getenv("ECHO_SQL", "0"))),
        admin_password=os.getenv("ADMIN_PASSWORD", defaults["admin_password"].default),
        auth_secret=os.getenv("AUTH_SECRET", defaults["auth_secret"].default),
        auth_algorithm=os.getenv("AUTH_ALGORITHM", defaults["auth_algorithm"].default),
        redis_url=os.getenv("REDIS_URL", defaults["redis_url"].default),
        sync_freshness_seconds=int(os.getenv("SYNC_FRESHNESS_SECONDS", "300")),
        sync_retention_seconds=int(os.getenv("SYNC_RETENTION_SECONDS", "86400")),
        payment_delay_seconds=float(os.getenv("PAYMENT_DELAY_SECONDS", "3")),
        upi_payee=os.getenv("UPI_PAYEE", defaults["upi_payee"].default),
        upi_payee_name=os.getenv("UPI_PAYEE_NAME", defaults["upi_payee_name"].default),
        venue_timezone=os.getenv("VENUE_TIMEZONE", defaults["venue_timezone"].default),
    )
