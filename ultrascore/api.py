from flask import Blueprint, Response, current_app, jsonify, request

from . import ingestion
from .protocol import TEAM_A, TEAM_B

api = Blueprint("api", __name__)

STORE_KEY = "ultrascore.store"


def get_store():
    return current_app.extensions[STORE_KEY]


@api.after_app_request
def allow_cors(response):
    response.headers["Access-Control-Allow-Origin"] = "*"
    response.headers["Access-Control-Allow-Headers"] = (
        "Origin, X-Requested-With, Content-Type, Accept"
    )
    return response


def _flatten_general(general):
    flattened = {k: v for k, v in general.items() if k not in {TEAM_A, TEAM_B}}
    for team in (TEAM_A, TEAM_B):
        values = general.get(team, {})
        flattened[f"{team}Score"] = values.get("score")
        flattened[f"{team}Foul"] = values.get("foul")
        flattened[f"{team}Timeout"] = values.get("timeout")
        flattened[f"{team}Possession"] = values.get("possession")
    return flattened


@api.route("/api/game", methods=["GET"])
def get_game():
    return jsonify(get_store().snapshot())


@api.route("/api/score", methods=["GET"])
def get_score():
    general = get_store().snapshot()["general"]
    return jsonify([_flatten_general(general)])


@api.route("/api/reset", methods=["POST"])
def reset_game():
    get_store().reset()
    return jsonify({"status": "reset"})


@api.route("/api/listener", methods=["GET", "POST"])
def listener_config():
    if request.method == "GET":
        return jsonify(ingestion.get_listener_status())

    payload = request.get_json(silent=True) or {}
    udp_port = payload.get("udp_port", ingestion.DEFAULT_UDP_PORT)

    try:
        udp_port = int(udp_port)
    except (TypeError, ValueError):
        return jsonify({"error": "invalid port"}), 400

    if udp_port < 1 or udp_port > 65535:
        return jsonify({"error": "invalid port"}), 400

    ingestion.start_udp_listener(get_store(), udp_port)
    return jsonify({"status": "Listener restarted", "udp_port": udp_port})


@api.route("/health", methods=["GET"])
def health():
    return Response("OK", mimetype="text/plain")
