# ecocred/routes/__init__.py
"""
This module imports all blueprint instances from the route modules
and provides a function to register them on the Flask app.
"""
import logging
from flask import Flask

# --- Import all of the blueprints ---
from .credit_routes import credits_bp
from .action_routes import actions_bp
from .marketplace_routes import marketplace_bp
from .staking_routes import staking_bp
from .retirement_routes import retirement_bp
from .access_routes import access_bp
from .governance_routes import governance_bp
from .badge_routes import badges_bp
from .analytics_routes import analytics_bp
from .chain_routes import chain_bp
from .status_routes import status_bp
from .expiration_routes import expiration_bp

logger = logging.getLogger(__name__)


def register_routes(app: Flask):
    """Register all blueprints with the Flask app."""

    # The url_prefix is already defined in each blueprint.
    app.register_blueprint(credits_bp)
    app.register_blueprint(actions_bp)
    app.register_blueprint(marketplace_bp)
    app.register_blueprint(staking_bp)
    app.register_blueprint(retirement_bp)
    app.register_blueprint(access_bp)
    app.register_blueprint(governance_bp)
    app.register_blueprint(badges_bp)
    app.register_blueprint(analytics_bp)
    app.register_blueprint(chain_bp)
    app.register_blueprint(status_bp)
    app.register_blueprint(expiration_bp)

    logger.info("✅ All application blueprints registered.")
