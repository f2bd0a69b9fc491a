import base64, binascii

from flask import Flask, request, jsonify
from flask_cors import CORS
from werkzeug.exceptions import RequestEntityTooLarge

from phyassist.config import ServiceConfig
from phyassist.errors import ConfigurationError, ValidationError

MISSING_FIELDS = "Missing image, mimeType, or question in request."
BAD_IMAGE = "The image payload is not valid base64 data."
INTERNAL_ERROR = "An internal error occurred while analyzing the solution."
ORIGIN_REJECTED = "Origin not allowed."

ALLOWED_MIME = {"image/png", "image/jpeg"}
MIME_ALIASES = {"image/jpg": "image/jpeg"}


def normalize_mime(mime_type: str) -> str:
    mime = (mime_type or "").strip().lower()
    return MIME_ALIASES.get(mime, mime)


def parse_feedback_request(p) -> tuple:
    """Return ``(question, image_b64, mime_type)`` from a JSON body, or raise ValidationError."""
    if not isinstance(p, dict):
        p = {}
    image = str(p.get("image", "") or "").strip()
    mime_type = normalize_mime(str(p.get("mimeType", "") or ""))
    question = str(p.get("question", "") or "").strip()

    if not image or not mime_type or not question:
        raise ValidationError(MISSING_FIELDS)
    if mime_type not in ALLOWED_MIME:
        raise ValidationError(f"Unsupported mimeType: {mime_type}. Allowed: {', '.join(sorted(ALLOWED_MIME))}")
    try:
        decoded = base64.b64decode(image, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValidationError(BAD_IMAGE) from e
    if not decoded:
        raise ValidationError(BAD_IMAGE)
    return question, image, mime_type


def create_app(config: ServiceConfig) -> Flask:
    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = config.max_content_mb * 1024 * 1024
    app.config["PHYASSIST"] = config

    CORS(app, resources={r"/api/*": {"origins": [config.allowed_origin]}})

    # ---------- ORIGIN GATE ----------
    @app.before_request
    def reject_foreign_origin():
        origin = request.headers.get("Origin")
        if origin is not None and origin.rstrip("/") != config.allowed_origin:
            app.logger.warning("Rejected request from origin %s", origin)
            return jsonify(error=ORIGIN_REJECTED), 403
        return None

    @app.errorhandler(RequestEntityTooLarge)
    def too_large(_e):
        return jsonify(error=f"The image is too large (limit {config.max_content_mb} MB)."), 413

    # ---------- HEALTH ----------
    @app.get("/health")
    def health():
        return "ok", 200

    # ---------- FEEDBACK ----------
    @app.post("/api/feedback")
    def feedback():
        try:
            question, image, mime_type = parse_feedback_request(request.get_json(silent=True))
        except ValidationError as e:
            return jsonify(error=str(e)), 400

        try:
            if config.model is None:
                raise ConfigurationError("OPENAI_API_KEY is missing; cannot analyze solution")
            feedback_text = config.model.generate(question, image, mime_type)
        except ConfigurationError as e:
            app.logger.error("%s", e)
            return jsonify(error=INTERNAL_ERROR), 500
        except Exception:
            app.logger.exception("Error generating feedback")
            return jsonify(error=INTERNAL_ERROR), 500

        return jsonify(feedback=feedback_text), 200

    return app
