"""Reverse a string through a relay server over TCP or UDP."""

from __future__ import annotations

import argparse
import logging
import socket
import sys
from typing import Sequence

HOST = "127.0.0.1"
TCP_PORT = 10001
TCP_SIZE = 20
UDP_PORT = 8000
UDP_SIZE = 50
PROBE = "Test Message"
"""What a UDP fetcher sends to ask for the reversed string."""

log = logging.getLogger(__name__)


def reverse_text(text: str) -> str:
    """Return the text with its characters in reverse order."""
    return text[::-1]


def encode_text(text: str, size: int) -> bytes:
    """Encode text as a NUL-padded buffer of exactly size bytes."""
    if "\0" in text:
        raise ValueError("text must not contain NUL characters")
    data = text.encode("utf-8")
    if len(data) >= size:
        raise ValueError(f"text must be shorter than {size} bytes, got {len(data)}")
    return data.ljust(size, b"\0")


def decode_text(data: bytes) -> str:
    """Decode a NUL-terminated buffer."""
    return data.split(b"\0", 1)[0].decode("utf-8", errors="replace")


def _recv_upto(sock: socket.socket, size: int) -> bytes:
    """Read until size bytes arrive or the peer closes."""
    data = b""
    while len(data) < size and (chunk := sock.recv(size - len(data))):
        data += chunk
    return data


def _reversed(text: str) -> str:
    result = reverse_text(text)
    log.info("data received is %s, reverse is %s", text, result)
    return result


def serve_tcp(host: str = HOST, port: int = TCP_PORT) -> str:
    """Take a string from one client, hand its reverse to the next; return it."""
    with socket.create_server((host, port), backlog=5) as server:
        log.info("listening on %s:%d", *server.getsockname()[:2])
        with server.accept()[0] as conn:
            result = _reversed(decode_text(_recv_upto(conn, TCP_SIZE)))
        with server.accept()[0] as conn:
            conn.sendall(encode_text(result, TCP_SIZE))
    log.info("data sent")
    return result


def serve_udp(host: str = HOST, port: int = UDP_PORT) -> str:
    """Take a string in one datagram, answer the next datagram with its reverse."""
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as server:
        server.bind((host, port))
        log.info("listening on %s:%d", *server.getsockname()[:2])
        result = _reversed(decode_text(server.recvfrom(UDP_SIZE)[0]))
        requester = server.recvfrom(UDP_SIZE)[1]
        server.sendto(encode_text(result, UDP_SIZE), requester)
    log.info("reversed string sent")
    return result


def send_text_tcp(text: str, host: str = HOST, port: int = TCP_PORT) -> None:
    """Connect to the server and send it a string."""
    payload = encode_text(text, TCP_SIZE)
    with socket.create_connection((host, port)) as sock:
        sock.sendall(payload)


def fetch_reversed_tcp(host: str = HOST, port: int = TCP_PORT) -> str:
    """Connect to the server and read the reversed string."""
    with socket.create_connection((host, port)) as sock:
        return decode_text(_recv_upto(sock, TCP_SIZE))


def send_text_udp(text: str, host: str = HOST, port: int = UDP_PORT) -> None:
    """Send a string to the server in one datagram."""
    payload = encode_text(text, UDP_SIZE)
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        sock.sendto(payload, (host, port))


def fetch_reversed_udp(host: str = HOST, port: int = UDP_PORT) -> str:
    """Ask the server for the reversed string and wait for the answer."""
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        sock.sendto(encode_text(PROBE, UDP_SIZE), (host, port))
        return decode_text(sock.recvfrom(UDP_SIZE)[0])


def _prompt_text() -> str:
    print("enter a message")
    tokens = sys.stdin.readline().split()
    if not tokens:
        raise ValueError("no message given")
    return tokens[0]


_SERVERS = {"tcp": serve_tcp, "udp": serve_udp}
_SENDERS = {"tcp": send_text_tcp, "udp": send_text_udp}
_FETCHERS = {"tcp": fetch_reversed_tcp, "udp": fetch_reversed_udp}
_PORTS = {"tcp": TCP_PORT, "udp": UDP_PORT}


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="netlab-reverse", description=__doc__)
    parser.add_argument("--host", default=HOST)
    parser.add_argument("--port", type=int, default=None)
    commands = parser.add_subparsers(dest="command", required=True)
    for action in ("serve", "send", "fetch"):
        for transport in _PORTS:
            sub = commands.add_parser(f"{action}-{transport}", help=f"{action} over {transport.upper()}")
            if action == "send":
                sub.add_argument("text", nargs="?")
    args = parser.parse_args(argv)

    action, transport = args.command.split("-")
    port = args.port if args.port is not None else _PORTS[transport]
    try:
        if action == "serve":
            logging.basicConfig(level=logging.INFO, format="%(message)s")
            print(f"reversed string sent: {_SERVERS[transport](args.host, port)}")
        elif action == "send":
            text = args.text if args.text is not None else _prompt_text()
            _SENDERS[transport](text, args.host, port)
            print("message sent to server")
        else:
            print(f"reversed string:{_FETCHERS[transport](args.host, port)}")
    except (OSError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())