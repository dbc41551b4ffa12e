import os
import secrets


def _csv(value: str):
    return [item.strip() for item in value.split(",") if item.strip()]


class Config:
    """
    Unified configuration class for development and production environments.
    Reads settings primarily from environment variables, with sensible defaults.
    """

    # --- General & Security ---
    SECRET_KEY = os.environ.get('SECRET_KEY', secrets.token_hex(16))
    FLASK_ENV = os.environ.get("FLASK_ENV", "development").lower()
    DEBUG = FLASK_ENV != "production"
    TESTING = False

    # --- Logging ---
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
    LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

    # --- Database Configuration ---
    # Local fallback: different SQLite DB for dev vs prod
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL") or (
        f"sqlite:///{'ecocred_dev.db' if DEBUG else 'ecocred.db'}"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # --- Celery ---
    CELERY_BROKER_URL = os.environ.get("CELERY_BROKER_URL", "redis://localhost:6379/0")
    CELERY_RESULT_BACKEND = os.environ.get("CELERY_RESULT_BACKEND", CELERY_BROKER_URL)
    CELERY_TASK_ALWAYS_EAGER = os.environ.get("CELERY_TASK_ALWAYS_EAGER", "false").lower() == "true"

    # --- Rate Limiting ---
    RATELIMIT_ENABLED = True
    RATELIMIT_STORAGE_URI = os.environ.get("RATELIMIT_STORAGE_URI", "memory://")
    RATELIMIT_DEFAULT = os.environ.get("RATELIMIT_DEFAULT", "100 per hour;20 per minute")

    # --- CORS Origins ---
    CORS_ORIGINS = _csv(os.environ.get("CORS_ORIGINS", "http://localhost:5173,http://localhost:3000"))

    # --- API access for the write-through service ---
    LEDGER_API_KEYS = _csv(os.environ.get("LEDGER_API_KEYS", ""))

    # --- Ledger parameters (seeded into system_settings by bootstrap_ledger) ---
    PLATFORM_OWNER_ADDRESS = os.environ.get(
        "PLATFORM_OWNER_ADDRESS", "0x00000000000000000000000000000000000000a1"
    )
    VERIFICATION_THRESHOLD = int(os.environ.get("VERIFICATION_THRESHOLD", 1))
    MARKETPLACE_FEE_BPS = int(os.environ.get("MARKETPLACE_FEE_BPS", 250))
    STAKING_REWARD_RATE_BPS = int(os.environ.get("STAKING_REWARD_RATE_BPS", 500))
    VOTING_PERIOD_SECONDS = int(os.environ.get("VOTING_PERIOD_SECONDS", 7 * 24 * 60 * 60))
    QUORUM_THRESHOLD_CREDITS = int(os.environ.get("QUORUM_THRESHOLD_CREDITS", 1000))
    PROPOSAL_THRESHOLD_CREDITS = int(os.environ.get("PROPOSAL_THRESHOLD_CREDITS", 10000))
    BADGE_BASE_URI = os.environ.get("BADGE_BASE_URI", "https://example.com/metadata/")
    # Empty means the platform owner collects marketplace fees.
    PLATFORM_FEE_RECIPIENT = os.environ.get("PLATFORM_FEE_RECIPIENT", "")
    CREDIT_EXPIRATION_SECONDS = int(os.environ.get("CREDIT_EXPIRATION_SECONDS", 365 * 24 * 60 * 60))
    REPUTATION_STRATEGY = os.environ.get("REPUTATION_STRATEGY", "flat").lower()


class TestingConfig(Config):
    TESTING = True
    DEBUG = False
    SECRET_KEY = "test-secret"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    CELERY_BROKER_URL = "memory://"
    CELERY_RESULT_BACKEND = "cache+memory://"
    CELERY_TASK_ALWAYS_EAGER = True
    RATELIMIT_ENABLED = False
    LEDGER_API_KEYS = ["test-api-key"]
    PLATFORM_OWNER_ADDRESS = "0x00000000000000000000000000000000000000a1"
