import os
import secrets
from dataclasses import dataclass


def _to_int(value, default):
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _to_bool(value, default=False):
    if value is None:
        return default
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


def _to_port(value, default):
    port = _to_int(value, default)
    if port < 1 or port > 65535:
        return default
    return port


@dataclass(frozen=True)
class AppConfig:
    flask_host: str
    flask_port: int
    flask_debug: bool
    flask_secret_key: str
    udp_host: str
    udp_port: int
    log_level: str


def load_config(environ=None):
    env = os.environ if environ is None else environ

    host = env.get("FLASK_HOST", "0.0.0.0")
    port = _to_port(env.get("FLASK_PORT", env.get("HTTP_PORT", "3000")), 3000)
    debug = _to_bool(env.get("FLASK_DEBUG", "0"), default=False)
    secret_key = env.get("FLASK_SECRET_KEY") or secrets.token_hex(32)

    udp_host = env.get("ULTRASCORE_UDP_HOST", "0.0.0.0")
    udp_port = _to_port(
        env.get("ULTRASCORE_UDP_PORT", env.get("UDP_PORT", "2800")), 2800
    )

    log_level = str(env.get("LOG_LEVEL", "INFO")).strip().upper() or "INFO"

    return AppConfig(
        flask_host=host,
        flask_port=port,
        flask_debug=debug,
        flask_secret_key=secret_key,
        udp_host=udp_host,
        udp_port=udp_port,
        log_level=log_level,
    )


CONFIG = load_config()
