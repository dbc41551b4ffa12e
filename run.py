# run.py
import os

from dotenv import load_dotenv

# Config reads the environment at import time, so load .env first.
load_dotenv()

from ecocred.extensions import db  # noqa: E402
from ecocred.factory import create_app  # noqa: E402
from ecocred.systems.bootstrap import bootstrap_ledger  # noqa: E402

app = create_app()


def prepare_dev_ledger():
    """Creates tables and bootstraps the ledger against the local dev database."""
    with app.app_context():
        db.create_all()
        bootstrap_ledger()


# Production runs wsgi:app under Gunicorn with migrations applied.
if __name__ == '__main__':
    if os.environ.get("LEDGER_AUTO_BOOTSTRAP", "true").lower() == "true":
        prepare_dev_ledger()

    port = int(os.environ.get('PORT', 5001))
    app.run(host='0.0.0.0', port=port, debug=app.config.get("DEBUG", False))
