# ecocred/factory.py
import logging

import click
from flask import Flask, jsonify
from flask.cli import AppGroup
from werkzeug.exceptions import HTTPException

from ecocred.config import Config
from ecocred.errors import LedgerError
from ecocred.extensions import cors, db, limiter, make_celery, migrate, swagger
from ecocred.routes import register_routes
from ecocred.systems.verification import verification_ledger

logger = logging.getLogger(__name__)

ledger_cli = AppGroup("ledger", help="Ledger maintenance commands.")


@ledger_cli.command("bootstrap")
@click.option("--now", type=int, default=None, help="Block timestamp for the genesis block (unix seconds).")
def bootstrap_command(now):
    """Create the genesis block and seed ledger settings, minters and the first admin."""
    from ecocred.systems.bootstrap import bootstrap_ledger
    result = bootstrap_ledger(now=now)
    click.echo(f"bootstrapped={result['bootstrapped']} owner={result['owner']}")


@ledger_cli.command("verify-chain")
def verify_chain_command():
    """Re-derive every block hash and report the first inconsistency."""
    from ecocred.systems.chain import verify_chain
    result = verify_chain()
    click.echo(f"valid={result['valid']} height={result['height']} problems={result['problems']}")
    if not result["valid"]:
        raise SystemExit(1)


@ledger_cli.command("rebuild-leaderboard")
def rebuild_leaderboard_command():
    from ecocred.tasks import rebuild_leaderboard_now
    click.echo(f"entries={rebuild_leaderboard_now()}")


@ledger_cli.command("expire-credits")
@click.option("--now", type=int, default=None, help="Expire batches lapsed at this time (unix seconds).")
def expire_credits_command(now):
    from ecocred.tasks import expire_due_credits_now
    click.echo(f"holders={expire_due_credits_now(now=now)}")


def setup_logging(app: Flask) -> None:
    logging.basicConfig(level=app.config["LOG_LEVEL"], format=app.config["LOG_FORMAT"])
    logging.getLogger().setLevel(app.config["LOG_LEVEL"])


def register_error_handlers(app: Flask) -> None:

    @app.errorhandler(LedgerError)
    def handle_ledger_error(e: LedgerError):
        return jsonify(e.to_dict()), e.http_status

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return jsonify({"status": "error", "error": e.name, "message": e.description}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(e: Exception):
        logger.exception(f"💥 Unhandled error: {e}")
        return jsonify({
            "status": "error",
            "error": "InternalServerError",
            "message": "An internal server error occurred.",
        }), 500


def create_app(config_class=Config):
    """Creates and configures the Flask application."""
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_class)
    setup_logging(app)

    # Initialize Flask extensions
    db.init_app(app)
    migrate.init_app(app, db)
    cors.init_app(app, origins=app.config["CORS_ORIGINS"])
    limiter.init_app(app)
    swagger.init_app(app)
    logger.info("✅ Core Flask extensions initialized.")

    with app.app_context():
        make_celery(app)
        import ecocred.tasks  # noqa: F401  registers Celery tasks
        logger.info("✅ Celery initialized.")

        verification_ledger.init_app(app)
        logger.info("✅ Ledger systems initialized.")

    register_routes(app)
    register_error_handlers(app)
    app.cli.add_command(ledger_cli)
    logger.info("✅ Blueprints registered successfully.")

    logger.info("🚀 Flask app created successfully!")
    return app
