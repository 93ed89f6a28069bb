"""Broadcast sample Ultra Score frames to a local listener for bench testing."""

import argparse
import logging
import socket
import time

from ultrascore.protocol import (
    CAT_COURT_A,
    CAT_GENERAL,
    build_frame,
    encode_court,
)

_logger = logging.getLogger("simulate_udp")


def build_general_payload(now=None):
    now = time.time() if now is None else now
    millis = int(now * 1000)
    period = int(now / 5) % 16
    long_clock = millis % 4000 < 2000

    if long_clock:
        timer = [9, 56, 7]  # shown as 09:57
        shot = [20, 7]  # shown as 21
    else:
        timer = [0, 59, 5]  # shown as 59.5
        shot = [4, 3]  # shown as 4.3

    return bytes(
        [period, 0x11]
        + timer
        + shot
        + [0, 0, 0]  # timeout, reserved
        + [88, 79]  # scores
        + [2, 3]  # fouls
        + [1, 0]  # timeouts
        + [1, 0]  # possession
    )


def build_court_payload():
    return encode_court([("7", True)])


def main(argv=None):
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=2800)
    parser.add_argument("--interval", type=float, default=2.0)
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")
    _logger.info("Simulating UDP broadcasts to %s:%s", args.host, args.port)

    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        while True:
            for frame in (
                build_frame(CAT_GENERAL, build_general_payload()),
                build_frame(CAT_COURT_A, build_court_payload()),
            ):
                sock.sendto(frame, (args.host, args.port))
                _logger.info("Sent packet size: %d", len(frame))
            time.sleep(args.interval)
    except KeyboardInterrupt:
        pass
    finally:
        sock.close()


if __name__ == "__main__":
    main()
