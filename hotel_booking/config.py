import os

from dotenv import load_dotenv

load_dotenv()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
DEBUG = LOG_LEVEL == "DEBUG"
# json or console; console is the default only when debugging
LOG_FORMAT = os.getenv("LOG_FORMAT", "console" if DEBUG else "json").lower()
SERVICE_NAME = os.getenv("SERVICE_NAME", "hotel-booking")

# Checked when the engine is built, so tests can run against an injected engine
DATABASE_URL = os.getenv("DATABASE_URL")

ALLOWED_ORIGINS_RAW = os.getenv("ALLOWED_ORIGINS", "*")
ALLOWED_ORIGINS: list[str] = [origin.strip() for origin in ALLOWED_ORIGINS_RAW.split(",")]

# Tokens are issued by the identity provider; we only verify them
JWT_SECRET = os.getenv("JWT_SECRET", "")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")

BOOKING_HORIZON_DAYS = int(os.getenv("BOOKING_HORIZON_DAYS", "365"))
DEFAULT_ROOM_CAPACITY = int(os.getenv("DEFAULT_ROOM_CAPACITY", "10"))
MAX_ROOMS_PER_BOOKING = int(os.getenv("MAX_ROOMS_PER_BOOKING", "10"))
MAX_GUESTS_PER_BOOKING = int(os.getenv("MAX_GUESTS_PER_BOOKING", "20"))

DEFAULT_PAGE_LIMIT = int(os.getenv("DEFAULT_PAGE_LIMIT", "20"))
MAX_PAGE_LIMIT = int(os.getenv("MAX_PAGE_LIMIT", "100"))

DEFAULT_CURRENCY = os.getenv("DEFAULT_CURRENCY", "USD")

# First key of pg_advisory_xact_lock(int, int); the room_id is the second
ROOM_LOCK_NAMESPACE = int(os.getenv("ROOM_LOCK_NAMESPACE", "4201"))

NOTIFICATION_WEBHOOK_URL = os.getenv("NOTIFICATION_WEBHOOK_URL")

PAYMENT_WEBHOOK_USERNAME = os.getenv("PAYMENT_WEBHOOK_USERNAME")
PAYMENT_WEBHOOK_PASSWORD = os.getenv("PAYMENT_WEBHOOK_PASSWORD")
