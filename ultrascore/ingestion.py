import logging
import socket
import threading

from .config import CONFIG
from .protocol import GENERAL, COURT, PENALTIES, PLAYERS, Applied, Skip, decode_frame

_logger = logging.getLogger(__name__)

DEFAULT_UDP_HOST = CONFIG.udp_host
DEFAULT_UDP_PORT = CONFIG.udp_port
MAX_DATAGRAM = 4096


# --- handle_datagram ---


def handle_datagram(store, data):
    """Decode one datagram and merge it into ``store``.

    Malformed or unknown frames come back as Skip and leave the store
    untouched. A frame is merged in a single store call, so it is applied
    whole or not at all.
    """
    decoded = decode_frame(data)
    if isinstance(decoded, Skip):
        _logger.debug("Dropped %d-byte datagram: %s", len(data), decoded.reason)
        return decoded

    section, team, record = decoded
    if section == GENERAL:
        store.merge_general(record.to_dict())
    elif section == PLAYERS:
        store.merge_roster(team, [entry.to_dict() for entry in record])
    elif section == PENALTIES:
        store.merge_penalties(team, [entry.to_dict() for entry in record])
    elif section == COURT:
        store.merge_court(team, record)

    return Applied(section, team)


# --- UDP listener ---

_udp_stop_event = threading.Event()
_udp_thread = None
_udp_socket = None
_udp_port = None
_udp_lock = threading.Lock()


def udp_listener(store, host, port, stop_event):
    global _udp_socket, _udp_port

    sock = None
    try:
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, port))
        sock.settimeout(1.0)
    except OSError as exc:
        _logger.error("Failed to start UDP listener on %s:%s: %s", host, port, exc)
        if sock is not None:
            sock.close()
        if _udp_port == port:
            _udp_port = None
        return

    _udp_socket = sock
    _logger.info("UDP listener bound to %s:%s", host, port)

    try:
        while not stop_event.is_set():
            try:
                data, addr = sock.recvfrom(MAX_DATAGRAM)
            except socket.timeout:
                continue
            except OSError as exc:
                if not stop_event.is_set():
                    _logger.warning("UDP receive error: %s", exc)
                break

            try:
                handle_datagram(store, data)
            except Exception:
                _logger.exception("Error handling datagram from %s:%s", *addr)
    finally:
        try:
            sock.close()
        except OSError:
            pass
        _logger.info("UDP listener on %s:%s stopped", host, port)


def start_udp_listener(store, port=None, host=None):
    global _udp_thread, _udp_port
    port = DEFAULT_UDP_PORT if port is None else port
    host = DEFAULT_UDP_HOST if host is None else host

    stop_udp_listener()
    with _udp_lock:
        _udp_stop_event.clear()
        _udp_thread = threading.Thread(
            target=udp_listener,
            args=(store, host, port, _udp_stop_event),
            daemon=True,
        )
        _udp_port = port
        _udp_thread.start()


def stop_udp_listener():
    global _udp_thread, _udp_socket, _udp_port
    with _udp_lock:
        _udp_stop_event.set()

        if _udp_socket is not None:
            try:
                _udp_socket.close()
            except OSError:
                pass
            _udp_socket = None

        if _udp_thread is not None:
            _udp_thread.join(timeout=2)
            _udp_thread = None
        _udp_port = None


def get_listener_status():
    with _udp_lock:
        running = _udp_thread is not None and _udp_thread.is_alive()
        return {"running": running, "udp_port": _udp_port}
