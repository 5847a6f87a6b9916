"""Sort an integer array, or summarise it, through a TCP server."""

from __future__ import annotations

import argparse
import logging
import math
import socket
import struct
import sys
from dataclasses import dataclass
from typing import Iterable, Sequence

HOST = "127.0.0.1"
PORT = 8000
MAX_LENGTH = 10
"""Largest array a server accepts."""

_INT = struct.Struct("<i")
_FLOAT = struct.Struct("<f")

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Stats:
    """Largest, smallest and mean value of an array."""

    maximum: int
    minimum: int
    average: float


def _to_single(value: float) -> float:
    try:
        return _FLOAT.unpack(_FLOAT.pack(value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def bubble_sort(values: Iterable[int]) -> list[int]:
    """Return the values in ascending order."""
    return sorted(int(value) for value in values)


def summarize(values: Iterable[int]) -> Stats:
    """Maximum, minimum and single-precision mean of a non-empty array."""
    items = [int(value) for value in values]
    if not items:
        raise ValueError("cannot summarise an empty array")
    return Stats(max(items), min(items), _to_single(sum(items) / len(items)))


def encode_ints(values: Iterable[int]) -> bytes:
    """Pack integers as consecutive 4-byte little-endian signed values."""
    items = [int(value) for value in values]
    try:
        return struct.pack(f"<{len(items)}i", *items)
    except struct.error as exc:
        raise ValueError(f"values must fit in 32 bits: {exc}") from None


def decode_ints(data: bytes) -> list[int]:
    """Unpack consecutive 4-byte little-endian signed integers."""
    if len(data) % _INT.size:
        raise ValueError(f"length {len(data)} is not a multiple of {_INT.size}")
    return [value for (value,) in _INT.iter_unpack(data)]


def _recv_exact(sock: socket.socket, size: int) -> bytes:
    data = bytearray()
    while len(data) < size:
        chunk = sock.recv(size - len(data))
        if not chunk:
            raise ConnectionError(f"connection closed after {len(data)} of {size} bytes")
        data.extend(chunk)
    return bytes(data)


def _check_length(length: int) -> None:
    if not 0 <= length <= MAX_LENGTH:
        raise ValueError(f"array length must be between 0 and {MAX_LENGTH}, got {length}")


def _read_request(conn: socket.socket) -> list[int]:
    (length,) = decode_ints(_recv_exact(conn, _INT.size))
    _check_length(length)
    log.info("array length received: %d", length)
    values = decode_ints(_recv_exact(conn, length * _INT.size))
    log.info("array received: %s", "\t".join(map(str, values)))
    return values


def _request_payload(values: Iterable[int]) -> tuple[int, bytes]:
    items = [int(value) for value in values]
    _check_length(len(items))
    return len(items), encode_ints([len(items)]) + encode_ints(items)


def serve_sort(host: str = HOST, port: int = PORT) -> list[int]:
    """Answer one client with its array sorted; return the sorted array."""
    with socket.create_server((host, port), backlog=5) as server:
        log.info("listening on %s:%d", *server.getsockname()[:2])
        conn, _ = server.accept()
        with conn:
            result = bubble_sort(_read_request(conn))
            conn.sendall(encode_ints(result))
        log.info("sent the sorted array to client")
        return result


def serve_stats(host: str = HOST, port: int = PORT) -> Stats:
    """Answer one client with the maximum, minimum and mean of its array."""
    with socket.create_server((host, port), backlog=5) as server:
        log.info("listening on %s:%d", *server.getsockname()[:2])
        conn, _ = server.accept()
        with conn:
            stats = summarize(_read_request(conn))
            conn.sendall(
                encode_ints([stats.maximum, stats.minimum]) + _FLOAT.pack(stats.average)
            )
        log.info("sent max %d, min %d, avg %f", stats.maximum, stats.minimum, stats.average)
        return stats


def request_sort(values: Iterable[int], host: str = HOST, port: int = PORT) -> list[int]:
    """Send an array to a sorting server and return its answer."""
    length, payload = _request_payload(values)
    with socket.create_connection((host, port)) as sock:
        sock.sendall(payload)
        return decode_ints(_recv_exact(sock, length * _INT.size))


def request_stats(values: Iterable[int], host: str = HOST, port: int = PORT) -> Stats:
    """Send an array to a statistics server and return its answer."""
    length, payload = _request_payload(values)
    if not length:
        raise ValueError("cannot summarise an empty array")
    with socket.create_connection((host, port)) as sock:
        sock.sendall(payload)
        maximum, minimum = decode_ints(_recv_exact(sock, 2 * _INT.size))
        (average,) = _FLOAT.unpack(_recv_exact(sock, _FLOAT.size))
    return Stats(maximum, minimum, average)


def _prompt_values() -> list[int]:
    print("enter the array length")
    tokens = sys.stdin.readline().split()
    if not tokens:
        raise ValueError("no array length given")
    length = int(tokens[0])
    _check_length(length)
    print("enter the array:")
    values: list[int] = []
    while len(values) < length:
        line = sys.stdin.readline()
        if not line:
            raise ValueError(f"expected {length} values, got {len(values)}")
        values.extend(int(token) for token in line.split())
    return values[:length]


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="netlab-arrays",
        description="Sort or summarise an integer array through a TCP server.",
    )
    parser.add_argument("--host", default=HOST)
    parser.add_argument("--port", type=int, default=PORT)
    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("serve-sort", help="run the sorting server")
    commands.add_parser("serve-stats", help="run the statistics server")
    for name in ("sort", "stats"):
        sub = commands.add_parser(name, help=f"ask a server to {name} an array")
        sub.add_argument("values", nargs="*", type=int)
    args = parser.parse_args(argv)

    try:
        if args.command == "serve-sort":
            logging.basicConfig(level=logging.INFO, format="%(message)s")
            serve_sort(args.host, args.port)
        elif args.command == "serve-stats":
            logging.basicConfig(level=logging.INFO, format="%(message)s")
            serve_stats(args.host, args.port)
        else:
            values = args.values or _prompt_values()
            if args.command == "sort":
                result = request_sort(values, args.host, args.port)
                print("received sorted array:")
                print("\t".join(map(str, result)))
            else:
                stats = request_stats(values, args.host, args.port)
                print(f"received max:{stats.maximum}")
                print(f"received min:{stats.minimum}")
                print(f"received avg:{stats.average:f}")
    except (OSError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())