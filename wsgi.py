import logging

from dotenv import load_dotenv

# Environment must be loaded before the config module is imported.
load_dotenv()

from ecocred.factory import create_app  # noqa: E402

logger = logging.getLogger(__name__)

try:
    app = create_app()
    logger.info("✅ Ledger WSGI application created.")
except Exception as e:
    logger.exception("🚨 Could not create the ledger application: %s", str(e))
    raise

# Celery worker entry point: celery -A wsgi.celery worker
celery = app.extensions["celery"]
