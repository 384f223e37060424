import logging
from datetime import datetime

from flask import Flask, jsonify, request

import config
import database
from errors import StreamError, VolunteerError

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# App setup
# ---------------------------------------------------------------------------

app = Flask(__name__)
app.secret_key = config.SECRET_KEY
app.json.sort_keys = False


# ---------------------------------------------------------------------------
# Context processors & middleware
# ---------------------------------------------------------------------------

@app.before_request
def log_request():
    logger.info(f"{request.method} {request.path}")


@app.after_request
def add_security_headers(response):
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    if response.mimetype == "application/pdf":
        response.headers["Cache-Control"] = "no-cache, no-store, must-revalidate"
    return response


@app.route("/health")
def health():
    return jsonify({"ok": True, "time": datetime.now().isoformat()})


# ---------------------------------------------------------------------------
# Error Handlers
# ---------------------------------------------------------------------------

@app.errorhandler(VolunteerError)
def volunteer_error(e):
    if isinstance(e, StreamError):
        logger.exception(f"Report stream failed: {e}")
    return jsonify({"error": str(e)}), e.status_code


@app.errorhandler(404)
def not_found(e):
    return jsonify({"error": "Not found"}), 404


# ---------------------------------------------------------------------------
# Register Blueprints
# ---------------------------------------------------------------------------

from routes.volunteers import volunteers_bp
from routes.reports import reports_bp

app.register_blueprint(volunteers_bp)
app.register_blueprint(reports_bp)


# ---------------------------------------------------------------------------
# Init
# ---------------------------------------------------------------------------

database.init_db()

if __name__ == "__main__":
    app.run(debug=False, host="0.0.0.0", port=config.PORT)
