import logging

from flask import Blueprint, Response, current_app, jsonify, request

from ai_agents.services.models import GenerationRequest
from server.errors import AuthError
from server.services.auth_service import extract_cron_secret, verify_cron_secret

logger = logging.getLogger(__name__)

api_blueprint = Blueprint("api", __name__)

SERVICES_KEY = "research_services"

_STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "X-Accel-Buffering": "no",
}


def _services():
    return current_app.extensions[SERVICES_KEY]


@api_blueprint.get("/health")
def healthcheck():
    """Lightweight health probe for uptime checks."""
    return jsonify({"status": "ok"}), 200


@api_blueprint.post("/research")
def generate_research():
    """
    Stream a research package for a topic:
    {
      "topic": "Operation Paperclip",
      "style": "true-crime, slow burn" | null
    }
    Each event is a line ``data: <json>`` followed by a blank line.
    """
    payload = request.get_json(silent=True) or {}
    topic = payload.get("topic")
    style = payload.get("style")
    if not isinstance(topic, str) or not topic.strip():
        return jsonify({"error": "Topic is required"}), 400
    if style is not None and not isinstance(style, str):
        return jsonify({"error": "Style must be a string"}), 400

    try:
        pipeline = _services().build_pipeline()
    except ValueError as exc:
        logger.error("Cannot start research pipeline: %s", exc)
        return jsonify({"error": str(exc)}), 500

    body = pipeline.stream(GenerationRequest(topic=topic.strip(), style=(style or "").strip() or None))
    return Response(body, mimetype="text/event-stream", headers=_STREAM_HEADERS)


@api_blueprint.get("/cron/daily-idea")
def daily_idea():
    services = _services()
    try:
        verify_cron_secret(
            extract_cron_secret(request.args, request.headers),
            services.settings.CRON_SECRET,
        )
    except AuthError:
        return jsonify({"error": "Unauthorized"}), 401

    try:
        result = services.build_daily_service().run()
    except Exception as exc:
        logger.exception("Daily idea run failed")
        return jsonify({"error": str(exc) or "An unexpected error occurred"}), 500
    return jsonify(result.to_dict()), 200


@api_blueprint.get("/ideas")
def list_ideas():
    search = request.args.get("search") or None
    try:
        ideas = _services().repository.get_all_ideas(search)
    except Exception as exc:
        logger.exception("Listing ideas failed")
        return jsonify({"error": str(exc)}), 500
    return jsonify({"ideas": [idea.to_dict() for idea in ideas]}), 200


@api_blueprint.get("/ideas/<idea_id>")
def get_idea(idea_id: str):
    try:
        idea = _services().repository.get_idea_by_id(idea_id)
    except Exception as exc:
        logger.exception("Loading idea %s failed", idea_id)
        return jsonify({"error": str(exc)}), 500
    if not idea:
        return jsonify({"error": "Idea not found"}), 404
    return jsonify({"idea": idea.to_dict()}), 200


@api_blueprint.delete("/ideas/<idea_id>")
def delete_idea(idea_id: str):
    try:
        deleted = _services().repository.delete_idea(idea_id)
    except Exception as exc:
        logger.exception("Deleting idea %s failed", idea_id)
        return jsonify({"error": str(exc)}), 500
    if not deleted:
        return jsonify({"error": "Idea not found"}), 404
    return jsonify({"success": True}), 200
