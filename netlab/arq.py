"""Automatic repeat request: an acknowledging server with simulated loss, and ARQ clients."""

from __future__ import annotations

import argparse
import logging
import random
import socket
import sys
from typing import Sequence

from netlab.reverse import decode_text, encode_text

HOST = "127.0.0.1"
PORT = 8000
MESSAGE_SIZE = 100
WINDOW = 4
TIMEOUT = 3.0
LOSS_RATE = 0.30
"""Share of messages the server pretends to lose."""

log = logging.getLogger(__name__)


def ack_for(message: str) -> str:
    """The acknowledgement the server sends for a message."""
    if message.startswith("Frame"):
        return "ACK " + message[6:]
    return "ACK"


class AckResponder:
    """Decides, message by message, whether to acknowledge or simulate a loss."""

    def __init__(self, loss_rate: float = LOSS_RATE, seed: int | None = None) -> None:
        if not 0.0 <= loss_rate <= 1.0:
            raise ValueError("loss rate must be between 0 and 1")
        self.loss_rate = loss_rate
        self._random = random.Random(seed)

    def respond(self, message: str) -> str | None:
        """Return the acknowledgement, or None when the message counts as lost."""
        if self._random.random() < self.loss_rate:
            return None
        return ack_for(message)


def _recv_exact(sock: socket.socket, size: int) -> bytes | None:
    """Read size bytes; None if the peer closed the connection first."""
    data = bytearray()
    while len(data) < size:
        chunk = sock.recv(size - len(data))
        if not chunk:
            return None
        data.extend(chunk)
    return bytes(data)


def serve(
    host: str = HOST, port: int = PORT, loss_rate: float = LOSS_RATE, seed: int | None = None
) -> int:
    """Acknowledge one client's messages until it disconnects; return how many arrived."""
    responder = AckResponder(loss_rate, seed)
    received = 0
    with socket.create_server((host, port), backlog=5) as server:
        log.info("listening on %s:%d", *server.getsockname()[:2])
        conn, _ = server.accept()
        with conn:
            log.info("connection accepted")
            while True:
                data = _recv_exact(conn, MESSAGE_SIZE)
                if data is None:
                    log.info("client disconnected")
                    break
                received += 1
                message = decode_text(data)
                log.info("message received:%s", message)
                ack = responder.respond(message)
                if ack is None:
                    log.info("simulating packet loss. ACK not sent")
                    continue
                conn.sendall(encode_text(ack, MESSAGE_SIZE))
                log.info("ACK sent :%s", ack)
    return received


class ArqClient:
    """Sends messages over a connected socket and retransmits until acknowledged."""

    def __init__(self, sock: socket.socket, max_attempts: int | None = None) -> None:
        if max_attempts is not None and max_attempts <= 0:
            raise ValueError("max_attempts must be positive")
        self._sock = sock
        self.max_attempts = max_attempts

    @classmethod
    def connect(
        cls,
        host: str = HOST,
        port: int = PORT,
        timeout: float = TIMEOUT,
        max_attempts: int | None = None,
    ) -> "ArqClient":
        sock = socket.create_connection((host, port))
        sock.settimeout(timeout)
        return cls(sock, max_attempts)

    def close(self) -> None:
        self._sock.close()

    def __enter__(self) -> "ArqClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _exchange(self, message: str) -> str | None:
        """Send one message; return the reply, or None on timeout."""
        self._sock.sendall(encode_text(message, MESSAGE_SIZE))
        log.info("sent:%s", message)
        try:
            data = _recv_exact(self._sock, MESSAGE_SIZE)
        except TimeoutError:
            return None
        if data is None:
            raise ConnectionError("server closed the connection")
        return decode_text(data)

    def _check_attempts(self, attempts: int) -> None:
        if self.max_attempts is not None and attempts >= self.max_attempts:
            raise TimeoutError(f"no acknowledgement after {attempts} attempts")

    def stop_and_wait(self, message: str) -> int:
        """Send until acknowledged; return the number of transmissions."""
        attempts = 0
        while True:
            attempts += 1
            if self._exchange(message) == "ACK":
                log.info("ACK received")
                return attempts
            log.info("timeout or packet loss, retransmitting, attempts:%d", attempts)
            self._check_attempts(attempts)

    def go_back_n(self, base: int, window: int = WINDOW) -> int:
        """Send a window of frames, resending all of it until every frame is acknowledged.

        Returns the number of rounds.
        """
        if window <= 0:
            raise ValueError("window must be positive")
        rounds = 0
        while True:
            rounds += 1
            acked = sum(
                1 for frame in range(base, base + window) if self._exchange(f"Frame{frame}") is not None
            )
            if acked == window:
                return rounds
            log.info("error, retransmitting")
            self._check_attempts(rounds)

    def selective_repeat(self, base: int, window: int = WINDOW) -> int:
        """Send a window of frames, resending only the unacknowledged ones.

        Returns the total number of transmissions.
        """
        if window <= 0:
            raise ValueError("window must be positive")
        pending = list(range(base, base + window))
        transmissions = 0
        rounds = 0
        while pending:
            if rounds:
                self._check_attempts(rounds)
            rounds += 1
            missing = []
            for frame in pending:
                transmissions += 1
                if self._exchange(f"Frame{frame}") is None:
                    missing.append(frame)
                else:
                    log.info("ack received for frame %d", frame)
            pending = missing
        return transmissions


def _ask(prompt: str) -> str:
    print(prompt)
    line = sys.stdin.readline()
    if not line:
        raise EOFError
    tokens = line.split()
    return tokens[0] if tokens else ""


def _menu(client: ArqClient) -> None:
    while True:
        print("\n--- MENU ---")
        print("1. Stop-and-Wait ARQ\n2. Go-Back-N ARQ\n3. Selective Repeat ARQ\n4. Exit")
        choice = _ask("Enter your choice: ")
        if choice == "1":
            while (message := _ask("enter a message: (exit to stop)")) != "exit":
                print(f"ACK received after {client.stop_and_wait(message)} attempt(s)")
        elif choice in ("2", "3"):
            while (base := int(_ask("enter the base value:"))) != -1:
                if choice == "2":
                    print(f"window acknowledged after {client.go_back_n(base)} round(s)")
                else:
                    print(f"window acknowledged after {client.selective_repeat(base)} transmission(s)")
        elif choice == "4":
            return
        else:
            print("Invalid choice!")


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="netlab-arq", description="ARQ protocols over TCP.")
    parser.add_argument("--host", default=HOST)
    parser.add_argument("--port", type=int, default=PORT)
    commands = parser.add_subparsers(dest="command", required=True)
    server = commands.add_parser("serve", help="run the acknowledging server")
    server.add_argument("--loss-rate", type=float, default=LOSS_RATE)
    server.add_argument("--seed", type=int, default=None)
    client = commands.add_parser("client", help="run the interactive client")
    client.add_argument("--timeout", type=float, default=TIMEOUT)
    args = parser.parse_args(argv)

    try:
        if args.command == "serve":
            logging.basicConfig(level=logging.INFO, format="%(message)s")
            serve(args.host, args.port, args.loss_rate, args.seed)
        else:
            with ArqClient.connect(args.host, args.port, args.timeout) as arq:
                print("Connected to server.")
                try:
                    _menu(arq)
                except EOFError:
                    pass
    except (OSError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())