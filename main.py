import os
import logging
from flask import Flask, Response, request, jsonify
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from werkzeug.exceptions import HTTPException

from notion_toggl_proxy import config
from notion_toggl_proxy.dispatch import dispatch
from notion_toggl_proxy.errors import ProxyError
from notion_toggl_proxy.upstream import RelayResult

# Logging
logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger("notion-toggl-proxy")

# ----------------------
# App Setup
# ----------------------
app = Flask(__name__)
app.config["MAX_CONTENT_LENGTH"] = config.MAX_REQUEST_BYTES
app.config["RATELIMIT_ENABLED"] = config.RATE_LIMIT_ENABLED
app.config["RATELIMIT_STORAGE_URI"] = "memory://"

CORS(
    app,
    origins=config.FRONTEND_ORIGIN,
    methods=["GET", "POST", "OPTIONS", "PATCH"],
    allow_headers=["Content-Type", "Authorization"],
    send_wildcard=config.FRONTEND_ORIGIN == "*",
)

# ----------------------
# Rate Limiter
# ----------------------
limiter = Limiter(
    app=app,
    key_func=get_remote_address,
    default_limits=[config.RATE_LIMIT]
)

# ----------------------
# Helpers
# ----------------------
def to_response(result: RelayResult):
    """Render a relay or workflow result without reshaping the upstream body."""
    if result.body is None:
        return Response(status=result.status)
    if isinstance(result.body, str):
        return Response(result.body, status=result.status, content_type=result.content_type or "text/plain")
    return jsonify(result.body), result.status

# ----------------------
# Error Handlers
# ----------------------
@app.errorhandler(ProxyError)
def handle_proxy_error(e):
    return jsonify(e.to_dict()), e.status_code

@app.errorhandler(HTTPException)
def handle_http_error(e):
    return jsonify({"message": e.description}), e.code

@app.errorhandler(Exception)
def handle_unexpected_error(e):
    logger.exception("Unhandled proxy error: %s", e)
    return jsonify({"message": "Internal Server Error during proxy execution."}), 500

# ----------------------
# Endpoints
# ----------------------
@app.route("/", methods=["GET"])
def health_check():
    return jsonify({"status": "proxy-running"}), 200

@app.route("/api/proxy", methods=["POST"])
@limiter.limit(config.RATE_LIMIT)
def proxy():
    # Validate JSON body
    data = request.get_json(silent=True)
    if data is None:
        return jsonify({"message": "Invalid JSON body."}), 400

    return to_response(dispatch(data))


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", "8080")))
