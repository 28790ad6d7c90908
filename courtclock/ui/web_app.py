"""
Web application module for the Courtside Match Clock.

This module contains the Flask web server that serves the scoreboard page
and provides JSON API endpoints for the clock, scores, settings, profiles,
match history and activation.
"""
import logging
import os
import threading
from typing import Optional

from flask import Flask, send_from_directory, jsonify, request

from ..services import (
    ActivationRequiredError, MatchSession, ServiceFactory, ThreadingTimerBackend
)
from ..services.entitlement_gate import format_key
from ..utils.constants import WEB_HOST, WEB_PORT

logger = logging.getLogger(__name__)

STATIC_FOLDER = os.path.join(os.path.dirname(__file__), "static")


def create_session(factory: Optional[ServiceFactory] = None) -> MatchSession:
    """Create a session ticking on background timer threads."""
    factory = factory or ServiceFactory()
    lock = threading.RLock()
    return factory.create_session(ThreadingTimerBackend(lock), lock=lock)


def create_app(session: Optional[MatchSession] = None, static_folder: str = STATIC_FOLDER) -> Flask:
    """
    Create and configure the Flask application with API endpoints.

    Args:
        session: Session to serve; a file-backed, self-ticking one by default
        static_folder: Directory to serve static files from

    Returns:
        Configured Flask application instance
    """
    app = Flask(__name__, static_folder=static_folder, static_url_path="")
    session = session or create_session()
    app.config["MATCH_SESSION"] = session

    @app.route("/")
    def index():
        """Serve the scoreboard page."""
        response = send_from_directory(static_folder, "index.html")
        response.headers['Cache-Control'] = 'no-cache, no-store, must-revalidate'
        return response

    @app.errorhandler(ActivationRequiredError)
    def activation_required(e):
        return jsonify({
            "success": False,
            "error": str(e),
            "device_id": session.gate.device_id,
        }), 403

    # ==================== State ==================== #

    @app.route("/api/state", methods=["GET"])
    def get_state():
        """Get the full scoreboard state."""
        try:
            return jsonify({"success": True, **session.snapshot()})
        except Exception as e:
            logger.exception("State request failed")
            return jsonify({"success": False, "error": str(e)}), 500

    # ==================== Clock ==================== #

    @app.route("/api/clock/toggle", methods=["POST"])
    def toggle_clock():
        """Start a match from pre-game, otherwise pause or resume."""
        session.toggle()
        return jsonify({"success": True, "clock": session.snapshot()["clock"]})

    @app.route("/api/clock/skip", methods=["POST"])
    def skip_phase():
        """Advance to the next phase immediately."""
        session.skip()
        return jsonify({"success": True, "clock": session.snapshot()["clock"]})

    @app.route("/api/clock/reset", methods=["POST"])
    def reset_match():
        """Reset the clock to pre-game and both scores to zero."""
        session.reset_match()
        return jsonify({"success": True, "message": "Match reset"})

    # ==================== Scores ==================== #

    @app.route("/api/score", methods=["POST"])
    def adjust_score():
        """Apply a +1/-1 step to one side."""
        try:
            data = request.get_json(silent=True) or {}
            score = session.adjust_score(data.get("side"), int(data.get("delta", 0)))
            return jsonify({"success": True, "side": data.get("side"), "score": score})
        except (TypeError, ValueError) as e:
            return jsonify({"success": False, "error": str(e)}), 400

    @app.route("/api/score/swipe", methods=["POST"])
    def swipe_score():
        """Resolve a vertical drag on a score into at most one step."""
        try:
            data = request.get_json(silent=True) or {}
            side = data.get("side")
            score = session.swipe_score(side, float(data["start_y"]), float(data["end_y"]))
            return jsonify({"success": True, "side": side, "score": score})
        except KeyError as e:
            return jsonify({"success": False, "error": f"Missing field {e}"}), 400
        except (TypeError, ValueError) as e:
            return jsonify({"success": False, "error": str(e)}), 400

    @app.route("/api/sound/mute", methods=["POST"])
    def set_muted():
        """Silence or restore the boundary sound."""
        data = request.get_json(silent=True) or {}
        muted = data.get("muted")
        if not isinstance(muted, bool):
            return jsonify({"success": False, "error": "muted must be true or false"}), 400
        return jsonify({"success": True, "muted": session.set_muted(muted)})

    # ==================== Settings & teams ==================== #

    @app.route("/api/settings", methods=["GET"])
    def get_settings():
        return jsonify({"success": True, "settings": session.state.settings.to_json()})

    @app.route("/api/settings", methods=["POST"])
    def update_settings():
        """Change phase lengths or sound; applies from the next phase."""
        try:
            data = request.get_json(silent=True) or {}
            settings = session.update_settings(**data)
            return jsonify({"success": True, "settings": settings.to_json()})
        except (TypeError, ValueError) as e:
            return jsonify({"success": False, "error": str(e)}), 400

    @app.route("/api/teams/<side>", methods=["POST"])
    def update_team(side):
        """Edit a team's name, colours or logo reference."""
        try:
            data = request.get_json(silent=True) or {}
            team = session.update_team(side, **data)
            return jsonify({"success": True, "team": team.to_json()})
        except (TypeError, ValueError) as e:
            return jsonify({"success": False, "error": str(e)}), 400

    # ==================== Profiles ==================== #

    @app.route("/api/profiles", methods=["GET"])
    def list_profiles():
        return jsonify({
            "success": True,
            "profiles": [p.to_json() for p in session.state.profiles],
        })

    @app.route("/api/profiles", methods=["POST"])
    def save_profile():
        """Save current settings and teams under a name."""
        try:
            data = request.get_json(silent=True) or {}
            profile = session.save_profile(data.get("profile_name", ""))
            return jsonify({"success": True, "profile": profile.to_json()})
        except ValueError as e:
            return jsonify({"success": False, "error": str(e)}), 400

    @app.route("/api/profiles/<profile_id>/load", methods=["POST"])
    def load_profile(profile_id):
        try:
            profile = session.load_profile(profile_id)
            return jsonify({"success": True, "profile": profile.to_json()})
        except KeyError:
            return jsonify({"success": False, "error": f"Profile '{profile_id}' not found"}), 404

    @app.route("/api/profiles/<profile_id>", methods=["DELETE"])
    def delete_profile(profile_id):
        try:
            session.delete_profile(profile_id)
            return jsonify({"success": True, "message": "Profile deleted"})
        except KeyError:
            return jsonify({"success": False, "error": f"Profile '{profile_id}' not found"}), 404

    # ==================== Match history ==================== #

    @app.route("/api/history", methods=["GET"])
    def get_history():
        """Match results, newest first."""
        return jsonify({
            "success": True,
            "history": [g.to_json() for g in reversed(session.state.history)],
        })

    @app.route("/api/history", methods=["POST"])
    def record_game():
        """Record the current score as a result."""
        stat = session.record_current_game()
        return jsonify({"success": True, "game": stat.to_json()})

    @app.route("/api/history", methods=["DELETE"])
    def clear_history():
        session.clear_history()
        return jsonify({"success": True, "message": "History cleared"})

    @app.route("/api/history/<game_id>", methods=["DELETE"])
    def delete_game(game_id):
        try:
            session.delete_game(game_id)
            return jsonify({"success": True, "message": "Result deleted"})
        except KeyError:
            return jsonify({"success": False, "error": f"Result '{game_id}' not found"}), 404

    # ==================== Activation ==================== #

    @app.route("/api/activation", methods=["GET"])
    def activation_status():
        return jsonify({
            "success": True,
            "device_id": session.gate.device_id,
            **session.activation_status().to_json(),
        })

    @app.route("/api/activation", methods=["POST"])
    def activate():
        """Submit an activation key; whitespace is ignored."""
        data = request.get_json(silent=True) or {}
        key = str(data.get("key", ""))
        if session.activate(key):
            return jsonify({"success": True, **session.activation_status().to_json()})
        return jsonify({
            "success": False,
            "error": "Invalid activation key",
            "key": format_key(key),
        }), 400

    return app


def run_web_app(host: str = WEB_HOST, port: int = WEB_PORT, static_folder: str = STATIC_FOLDER) -> None:
    """
    Run the web application.

    Args:
        host: Host address to bind to (default: localhost only)
        port: Port number to listen on
        static_folder: Directory containing the scoreboard page
    """
    app = create_app(static_folder=static_folder)
    logger.info("Serving %s on http://%s:%s", static_folder, host, port)
    try:
        app.run(host=host, port=port, debug=False)
    finally:
        app.config["MATCH_SESSION"].close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    run_web_app()
