"""A toy mail exchange: a line-per-command server and the client that talks to it."""

from __future__ import annotations

import argparse
import logging
import socket
import sys
from dataclasses import dataclass
from typing import Sequence

HOST = "127.0.0.1"
PORT = 8080
BUFFER_SIZE = 1024
ADDRESS_LIMIT = 99
"""Longest sender or receiver the server keeps."""
MESSAGE_LIMIT = 1023
"""Longest message body the server keeps."""

log = logging.getLogger(__name__)


@dataclass
class SmtpSession:
    """State of one client's conversation with the server."""

    sender: str = ""
    receiver: str = ""
    message: str = ""
    finished: bool = False

    def handle(self, command: str) -> str:
        """Apply one command and return the server's reply."""
        if self.finished:
            raise RuntimeError("session has already ended")
        if command.startswith("HELO "):
            return "HELLO,your request received"
        if command.startswith("MAIL FROM: "):
            self.sender = command[len("MAIL FROM: "):][:ADDRESS_LIMIT]
            return "from address received"
        if command.startswith("TO: "):
            self.receiver = command[len("TO: "):][:ADDRESS_LIMIT]
            return "to address received"
        if command.startswith("MSG: "):
            self.message = command[len("MSG: "):][:MESSAGE_LIMIT]
            return "message received"
        if command == "QUIT":
            self.finished = True
            return "Quit received,closing connection"
        return "Unknown command"


def _decode(data: bytes) -> str:
    return data.split(b"\0", 1)[0].decode("utf-8", errors="replace")


def serve(host: str = HOST, port: int = PORT) -> SmtpSession:
    """Serve one client until it quits or disconnects; return its session."""
    with socket.create_server((host, port), backlog=5) as server:
        log.info("SMTP server listening on %s:%d", *server.getsockname()[:2])
        conn, _ = server.accept()
        session = SmtpSession()
        with conn:
            log.info("connected to client")
            while not session.finished:
                data = conn.recv(BUFFER_SIZE - 1)
                if not data:
                    log.info("client disconnected")
                    break
                command = _decode(data)
                log.info("Client:%s", command)
                payload = session.handle(command).encode("utf-8")
                if session.finished:
                    payload += b"\0"
                conn.sendall(payload)
    if session.finished:
        log.info("from:%s\nto:%s\nmessage:%s", session.sender, session.receiver, session.message)
    return session


def send_mail(
    domain: str,
    sender: str,
    receiver: str,
    message: str,
    host: str = HOST,
    port: int = PORT,
) -> list[tuple[str, str]]:
    """Deliver one message; return each command sent with the server's reply."""
    commands = [
        f"HELO {domain}",
        f"MAIL FROM: {sender}",
        f"TO: {receiver}",
        f"MSG: {message.split(chr(10), 1)[0]}",
        "QUIT",
    ]
    for command in commands:
        if len(command.encode("utf-8")) >= BUFFER_SIZE:
            raise ValueError(f"command longer than {BUFFER_SIZE - 1} bytes")
    transcript = []
    with socket.create_connection((host, port)) as sock:
        for command in commands:
            sock.sendall(command.encode("utf-8"))
            data = sock.recv(BUFFER_SIZE)
            if not data:
                raise ConnectionError(f"server closed the connection after {command!r}")
            transcript.append((command, _decode(data)))
    return transcript


def _prompt_word(prompt: str) -> str:
    print(prompt)
    tokens = sys.stdin.readline().split()
    if not tokens:
        raise ValueError(f"nothing given for: {prompt}")
    return tokens[0]


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="netlab-smtp",
        description="Run the mail server or send one message to it.",
    )
    parser.add_argument("--host", default=HOST)
    parser.add_argument("--port", type=int, default=PORT)
    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("serve", help="serve one client")
    client = commands.add_parser("send", help="send one message")
    client.add_argument("--domain")
    client.add_argument("--sender")
    client.add_argument("--receiver")
    client.add_argument("--message")
    args = parser.parse_args(argv)

    try:
        if args.command == "serve":
            logging.basicConfig(level=logging.INFO, format="%(message)s")
            session = serve(args.host, args.port)
            print(f"from:{session.sender}\nto:{session.receiver}\nmessage:{session.message}")
            return 0
        domain = args.domain or _prompt_word("enter domain")
        sender = args.sender or _prompt_word("enter sender")
        receiver = args.receiver or _prompt_word("enter receiver")
        if args.message is None:
            print("enter message")
            message = sys.stdin.readline().rstrip("\n")
        else:
            message = args.message
        for command, reply in send_mail(domain, sender, receiver, message, args.host, args.port):
            print(f"Client: {command}")
            print(f"Server: {reply}")
    except (OSError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())