"""UDP service that answers every datagram with the current time."""

from __future__ import annotations

import argparse
import itertools
import logging
import socket
import sys
import time
from typing import Sequence

from netlab.reverse import decode_text, encode_text

HOST = "127.0.0.1"
PORT = 8000
SIZE = 50
REQUEST = "time"
INTERVAL = 5.0

log = logging.getLogger(__name__)


def format_ctime(timestamp: float | None = None) -> str:
    """Local time in ctime form with its trailing newline; now if no timestamp."""
    return time.ctime(timestamp) + "\n"


def _check_count(count: int | None) -> None:
    if count is not None and count < 0:
        raise ValueError("count must not be negative")


def serve(host: str = HOST, port: int = PORT, count: int | None = None) -> int:
    """Answer datagrams with the current time; stop after count answers if given."""
    _check_count(count)
    served = 0
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as server:
        server.bind((host, port))
        log.info("listening on %s:%d", *server.getsockname()[:2])
        while count is None or served < count:
            client = server.recvfrom(SIZE)[1]
            reply = format_ctime()
            try:
                server.sendto(encode_text(reply, SIZE), client)
            except OSError as exc:
                log.warning("failed to send time to client: %s", exc)
                continue
            served += 1
            log.info("current time : %s sent", reply.rstrip("\n"))
    return served


def request_time(host: str = HOST, port: int = PORT) -> str:
    """Ask the server for the time and return its reply."""
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        sock.sendto(encode_text(REQUEST, SIZE), (host, port))
        return decode_text(sock.recvfrom(SIZE)[0])


def _poll(host: str, port: int, count: int | None, interval: float) -> int:
    """Request the time count times (forever if None); return the number of failures."""
    failures = 0
    for attempt in itertools.count() if count is None else range(count):
        if attempt:
            time.sleep(interval)
        try:
            reply = request_time(host, port)
        except OSError as exc:
            failures += 1
            print(f"failed to receive time from server: {exc}", file=sys.stderr)
        else:
            print(f"time received : {reply.rstrip()} from server")
    return failures


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="netlab-time", description=__doc__)
    parser.add_argument("--host", default=HOST)
    parser.add_argument("--port", type=int, default=PORT)
    commands = parser.add_subparsers(dest="command", required=True)
    server = commands.add_parser("serve", help="run the time server")
    server.add_argument("--count", type=int, default=None, help="stop after this many answers")
    client = commands.add_parser("request", help="ask the server for the time repeatedly")
    client.add_argument("--count", type=int, default=None, help="number of requests (default: forever)")
    client.add_argument("--interval", type=float, default=INTERVAL, help="seconds between requests")
    args = parser.parse_args(argv)

    try:
        if args.command == "serve":
            logging.basicConfig(level=logging.INFO, format="%(message)s")
            serve(args.host, args.port, args.count)
            return 0
        _check_count(args.count)
    except (OSError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 1 if _poll(args.host, args.port, args.count, args.interval) else 0


if __name__ == "__main__":
    sys.exit(main())