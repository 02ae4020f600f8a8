import logging

from flask import Blueprint, request, jsonify, make_response

from .models import DeployRequest
from .services import DeploymentService, QUOTA_CHECK_NAME

logger = logging.getLogger(__name__)

STATUS_BY_ERROR = {
    "missing_fields": 400,
    "invalid_name": 400,
    "cooldown": 429,
    "quota_exhausted": 429,
    "invalid_archive": 400,
    "missing_index": 400,
    "unsupported_file_type": 400,
    "missing_credential": 500,
    "name_taken": 400,
    "provider_error": 500,
}

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def create_deployment_routes(deployment_service: DeploymentService):
    """Create Flask routes for site deployment."""

    deployment_bp = Blueprint('deployment', __name__)

    @deployment_bp.after_request
    def add_cors_headers(response):
        response.headers.update(CORS_HEADERS)
        return response

    # Routing errors never reach blueprint handlers, so this is registered app-wide
    @deployment_bp.app_errorhandler(405)
    def method_not_allowed(error):
        response = jsonify({"error": "Method not allowed"})
        response.status_code = 405
        response.headers.update(CORS_HEADERS)
        if getattr(error, "valid_methods", None):
            response.headers["Allow"] = ", ".join(error.valid_methods)
        return response

    @deployment_bp.route("/api/deploy", methods=["POST", "OPTIONS"])
    def deploy_site():
        """Deploy an uploaded HTML page or ZIP archive."""
        if request.method == "OPTIONS":
            return make_response("", 200)

        try:
            deploy_request = DeployRequest.from_json(request.get_json(silent=True))
            client_id = deployment_service.quota_manager.identify_request()

            if deploy_request.name == QUOTA_CHECK_NAME:
                result = deployment_service.check_quota(client_id)
                return jsonify(result.to_quota_response())

            result = deployment_service.deploy(deploy_request, client_id)
            if result.success:
                return jsonify(result.to_response())

            status_code = STATUS_BY_ERROR.get(result.error, 500)
            return jsonify(result.to_response()), status_code

        except Exception as e:
            logger.exception("Unhandled error while deploying")
            return jsonify({
                "error": f"Server error: {str(e)}"
            }), 500

    return deployment_bp
