import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))

class Config:
    # Secrets
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-only-change-me")

    # SQLite database file stored next to the app as turfbook.db
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        "sqlite:///" + os.path.join(BASE_DIR, "turfbook.db")
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Bounded waits on the store; a hung connection surfaces as an error
    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_pre_ping": True,
        "pool_timeout": int(os.getenv("DB_POOL_TIMEOUT", "10")),
    }

    # Session cookie name for the admin auth token
    AUTH_COOKIE_NAME = "turfbook_session"

    # 8 hours session lifetime
    SESSION_LIFETIME_SECONDS = 8 * 60 * 60

    # Idle timeout: 30 minutes
    IDLE_TIMEOUT_SECONDS = 30 * 60

    BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))

    # Session/cookie security defaults
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"
    SESSION_COOKIE_SECURE = os.getenv("SESSION_COOKIE_SECURE", "false").lower() == "true"

    # Business calendar
    TIMEZONE = os.getenv("TIMEZONE", "Asia/Kolkata")
    BOOKING_HORIZON_DAYS = 90

    # Grounds and the sports sharing each of them
    GROUND_SPORTS = {
        "match": ["Cricket", "Football"],
        "practice": ["Cricket", "Football", "Badminton"],
    }

    # Pricing (INR, per slot)
    BASE_PRICES = {
        "match": 1200,
        "practice": 250,
    }
    WEEKDAY_DISCOUNT_PERCENT = 30       # Monday to Thursday
    WEEKEND_DISCOUNT_PERCENT = 10       # Friday to Sunday
    ADVANCE_PAYMENT = 200               # match bookings: paid online, rest at the turf
    DAY_CACHE_MAX_ENTRIES = 100
    DAY_CACHE_TTL_SECONDS = 60 * 60

    # No permissions row means every admin action is allowed
    PERMISSIONS_FAIL_OPEN = os.getenv("PERMISSIONS_FAIL_OPEN", "true").lower() == "true"

    # Stripe
    STRIPE_SECRET_KEY = os.getenv("STRIPE_SECRET_KEY")
    STRIPE_WEBHOOK_SECRET = os.getenv("STRIPE_WEBHOOK_SECRET")
    STRIPE_SUCCESS_URL = os.getenv("STRIPE_SUCCESS_URL")
    STRIPE_CANCEL_URL = os.getenv("STRIPE_CANCEL_URL")
    STRIPE_TIMEOUT_SECONDS = int(os.getenv("STRIPE_TIMEOUT_SECONDS", "15"))
    CURRENCY = "INR"

    # Email (SMTP)
    SMTP_HOST = os.getenv("SMTP_HOST")
    SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
    SMTP_USERNAME = os.getenv("SMTP_USERNAME")
    SMTP_PASSWORD = os.getenv("SMTP_PASSWORD")
    SMTP_FROM_EMAIL = os.getenv("SMTP_FROM_EMAIL")
    SMTP_USE_TLS = os.getenv("SMTP_USE_TLS", "true").lower() == "true"
    SMTP_TIMEOUT_SECONDS = 10

    # Links in outgoing emails
    PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "http://localhost:5000")

    # Reviews
    REVIEWS_PER_PHONE_PER_DAY = 3

    # Basic app settings
    DEBUG = False


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SQLALCHEMY_ENGINE_OPTIONS = {}
    STRIPE_SECRET_KEY = "sk_test_dummy"
    STRIPE_WEBHOOK_SECRET = "whsec_dummy"
    STRIPE_SUCCESS_URL = "http://localhost/pay/success"
    STRIPE_CANCEL_URL = "http://localhost/pay/cancel"
    SMTP_HOST = None
    BCRYPT_ROUNDS = 4
