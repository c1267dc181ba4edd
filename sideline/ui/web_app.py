"""
Web application module for the Sideline Lineup application.

This module contains the Flask server exposing the match operations as a
JSON API. It serves no pages of its own: a client polls ``GET /api/state``
once a second to refresh the clock and playing times, and every mutating
endpoint returns the fresh snapshot.
"""
import logging
from typing import Any, Callable, Dict, Optional

from flask import Flask, jsonify, request

from ..models.formation import FIELD_COORDS_UP, FORMATIONS, field_layout
from ..services import JsonFileStore, LineupError, MatchService, PersistenceError
from ..utils import DEFAULT_DATA_DIR, DEFAULT_HOST, DEFAULT_PORT

logger = logging.getLogger(__name__)


def create_app(
    service: Optional[MatchService] = None,
    data_dir: str = DEFAULT_DATA_DIR,
) -> Flask:
    """
    Create and configure the Flask application with API endpoints.

    Args:
        service: Match service to serve; when omitted one is created over a
                 JSON file store in ``data_dir`` and loaded
        data_dir: Directory for the file store

    Returns:
        Configured Flask application instance
    """
    if service is None:
        service = MatchService(JsonFileStore(data_dir)).load()

    app = Flask(__name__)
    app.config["MATCH_SERVICE"] = service

    def _payload() -> Dict[str, Any]:
        data = request.get_json(silent=True)
        return data if isinstance(data, dict) else {}

    def _mutate(action: Callable[[], Any], message: str):
        """Run one operation and answer with the resulting snapshot."""
        try:
            action()
        except LineupError as e:
            return jsonify({"success": False, "error": str(e)}), 400
        except PersistenceError as e:
            # Nothing changed; show the caller the state it is still in
            return jsonify({
                "success": False,
                "error": str(e),
                "state": service.snapshot(),
            }), 503
        except Exception as e:
            logger.exception("Unexpected error: %s", e)
            return jsonify({"success": False, "error": str(e)}), 500
        return jsonify({"success": True, "message": message, "state": service.snapshot()})

    # ==================== API Endpoints ==================== #

    @app.route("/api/state", methods=["GET"])
    def get_state():
        """Current snapshot; read-only and safe to poll."""
        response = jsonify({"success": True, "state": service.snapshot()})
        response.headers["Cache-Control"] = "no-cache, no-store, must-revalidate"
        return response

    @app.route("/api/formations", methods=["GET"])
    def get_formations():
        """Every formation with its positions laid out for an orientation."""
        orientation = request.args.get("orientation", service.match_state.orientation)
        return jsonify({
            "success": True,
            "formations": {
                key: {
                    "positions": list(FORMATIONS[key]),
                    "spots": [s.to_dict() for s in field_layout(key, orientation)],
                }
                for key in FIELD_COORDS_UP
            },
        })

    @app.route("/api/attendance", methods=["POST"])
    def set_attendance():
        """Check a player in or out."""
        data = _payload()
        player_id = data.get("player_id")
        if not player_id:
            return jsonify({"success": False, "error": "player_id is required"}), 400
        present = data.get("present", True)
        if not isinstance(present, bool):
            return jsonify({"success": False, "error": "present must be true or false"}), 400
        return _mutate(
            lambda: service.set_attendance(player_id, present),
            f"{player_id} marked {'present' if present else 'absent'}",
        )

    @app.route("/api/assignments", methods=["POST"])
    def assign():
        """Put a player on a position."""
        data = _payload()
        position = data.get("position")
        player_id = data.get("player_id")
        if not position or not player_id:
            return jsonify({
                "success": False,
                "error": "position and player_id are required",
            }), 400
        return _mutate(
            lambda: service.assign(position, player_id),
            f"{player_id} assigned to {position}",
        )

    @app.route("/api/assignments/<position>", methods=["DELETE"])
    def clear(position: str):
        """Empty a position."""
        return _mutate(lambda: service.clear(position), f"{position} cleared")

    @app.route("/api/players/<player_id>/unassign", methods=["POST"])
    def unassign(player_id: str):
        """Take a player off the field."""
        return _mutate(lambda: service.unassign(player_id), f"{player_id} unassigned")

    @app.route("/api/clock/start", methods=["POST"])
    def start_clock():
        return _mutate(service.start, "Clock started")

    @app.route("/api/clock/pause", methods=["POST"])
    def pause_clock():
        return _mutate(service.pause, "Clock paused")

    @app.route("/api/clock/reset", methods=["POST"])
    def reset_clock():
        """Reset the clock; requires ``{"confirm": true}``."""
        if _payload().get("confirm") is not True:
            return jsonify({
                "success": False,
                "error": "Reset must be confirmed",
                "state": service.snapshot(),
            }), 400
        return _mutate(lambda: service.reset(confirm=True), "Clock reset")

    @app.route("/api/formation", methods=["POST"])
    def change_formation():
        formation = _payload().get("formation")
        if not isinstance(formation, str):
            return jsonify({"success": False, "error": "formation is required"}), 400
        return _mutate(
            lambda: service.change_formation(formation),
            f"Formation set to {formation}",
        )

    @app.route("/api/orientation", methods=["POST"])
    def set_orientation():
        orientation = _payload().get("orientation")
        if not isinstance(orientation, str):
            return jsonify({"success": False, "error": "orientation is required"}), 400
        return _mutate(
            lambda: service.set_orientation(orientation),
            f"Orientation set to {orientation}",
        )

    return app


def run_web_app(
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
    data_dir: str = DEFAULT_DATA_DIR,
) -> None:
    """
    Run the web application.

    Args:
        host: Host address to bind to (default: localhost only)
        port: Port number to listen on
        data_dir: Directory holding the saved match
    """
    app = create_app(data_dir=data_dir)
    logger.info("Serving on http://%s:%s (data in %s)", host, port, data_dir)
    app.run(host=host, port=port, debug=False)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    run_web_app()
