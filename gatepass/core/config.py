import os

from dotenv import load_dotenv


load_dotenv()


def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_list(value: str | None, default: list[str]) -> list[str]:
    if value is None:
        return default
    return [item.strip() for item in value.split(",") if item.strip()]


APP_ENV = os.getenv("APP_ENV", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./gatepass.db")
DATABASE_SSLMODE = os.getenv("DATABASE_SSLMODE", "")
DATABASE_POOL_PRE_PING = _get_bool(os.getenv("DATABASE_POOL_PRE_PING"), default=True)

API_PREFIX = os.getenv("API_PREFIX", "/api")
CORS_ALLOW_ORIGINS = _get_list(os.getenv("CORS_ALLOW_ORIGINS"), default=["*"])

TWILIO_ACCOUNT_SID = os.getenv("TWILIO_ACCOUNT_SID", "")
TWILIO_AUTH_TOKEN = os.getenv("TWILIO_AUTH_TOKEN", "")
TWILIO_PHONE_NUMBER = os.getenv("TWILIO_PHONE_NUMBER", "")

ALERT_MESSAGE = os.getenv(
    "ALERT_MESSAGE",
    "Greetings from IIIT Bhubaneswar. This is to inform you that your ward is currently outside "
    "the campus or, if you are a visitor, you are presently inside the campus. Kindly ensure that "
    "students return to campus promptly and visitors exit the premises at the earliest. We "
    "appreciate your cooperation in maintaining campus safety and discipline.",
)


def validate_runtime_config() -> None:
    if APP_ENV.lower() != "production":
        return
    missing = [
        name
        for name, value in (
            ("TWILIO_ACCOUNT_SID", TWILIO_ACCOUNT_SID),
            ("TWILIO_AUTH_TOKEN", TWILIO_AUTH_TOKEN),
            ("TWILIO_PHONE_NUMBER", TWILIO_PHONE_NUMBER),
        )
        if not value
    ]
    if missing:
        raise RuntimeError(f"{', '.join(missing)} must be set in production.")
