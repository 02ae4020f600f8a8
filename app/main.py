import argparse
import logging
from datetime import datetime
from typing import Callable, Optional

from flask import Flask, jsonify
from werkzeug.middleware.proxy_fix import ProxyFix

from config_manager import ConfigManager
from app.logging_config import setup_logging
from app.quota.factory import create_quota_module
from app.deployment.factory import create_deployment_module

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Application factory
# -----------------------------------------------------------------------------


def create_app(
    config_manager: Optional[ConfigManager] = None,
    clock: Callable[[], datetime] = datetime.now,
    session=None,
) -> Flask:
    """Build the Flask application with the quota and deployment modules."""
    config_manager = config_manager or ConfigManager()
    deploy_config = config_manager.get_deploy_config()
    quota_settings = config_manager.get_quota_settings()

    flask_app = Flask(__name__)
    # Only the proto/host hops are trusted; X-Forwarded-For is read raw for fingerprinting
    flask_app.wsgi_app = ProxyFix(flask_app.wsgi_app, x_for=0, x_proto=1, x_host=1)

    quota_module = create_quota_module(
        daily_limit=quota_settings.daily_limit,
        cooldown_seconds=quota_settings.cooldown_seconds,
        eviction_hours=quota_settings.eviction_hours,
        clock=clock
    )

    deployment_module = create_deployment_module(
        quota_manager=quota_module["manager"],
        token=deploy_config.token or None,
        api_base=deploy_config.api_base,
        provider_domain=deploy_config.provider_domain,
        timeout_seconds=deploy_config.timeout_seconds,
        session=session
    )

    flask_app.register_blueprint(deployment_module["blueprint"])
    flask_app.extensions["site_drop"] = {
        "quota": quota_module,
        "deployment": deployment_module,
    }

    @flask_app.get("/actuator/health")
    def actuator_health():
        """Health check endpoint for monitoring tools and cloud platforms."""
        return jsonify({
            "status": "UP",
            "service": "site-drop"
        }), 200

    return flask_app


app = create_app()

# -----------------------------------------------------------------------------
# Entry point
# -----------------------------------------------------------------------------

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Static site deployment service")
    parser.add_argument("--port", type=int, help="Port to run the server on")
    parser.add_argument("--host", type=str, help="Host to bind the server to")
    parser.add_argument("--debug", action="store_true", help="Enable debug mode")
    args = parser.parse_args()

    app_config = ConfigManager().get_app_config()
    if args.port:
        app_config.port = args.port
    if args.host:
        app_config.host = args.host
    if args.debug:
        app_config.debug = args.debug

    setup_logging(app_config.debug)
    logger.info("Serving deployments on %s:%s", app_config.host, app_config.port)
    app.run(
        host=app_config.host,
        port=app_config.port,
        debug=app_config.debug
    )
