"""Word-limited chat servers, one answered by an operator and one that broadcasts."""

from __future__ import annotations

import argparse
import logging
import socket
import sys
import threading
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, Sequence

from netlab.reverse import decode_text

HOST = "127.0.0.1"
PORT = 8000
BUFFER_SIZE = 50
REPLY_SIZE = 1024
WORD_LIMIT = 25

GREETING = "Server communication Started!\n"
INVALID_START = "invalid start command!\n"
TERMINATED = "connection terminated\n"
LIMIT_EXCEEDED = "Max limit Exceeded!!!\n"
RECEIVED = "Message Received\n"

log = logging.getLogger(__name__)
_stdin_lock = threading.Lock()


def count_words(text: str) -> int:
    """Number of space-separated words in text."""
    return sum(1 for token in text.split(" ") if token)


def _ask_operator(text: str) -> str:
    with _stdin_lock:
        print(text)
        print("enter your message:")
        return sys.stdin.readline()


@dataclass
class ChatSession:
    """One client's conversation: a start command, then messages up to a word limit.

    Without a reply_source every accepted message is acknowledged.
    """

    reply_source: Callable[[str], str] | None = None
    word_limit: int = WORD_LIMIT
    word_count: int = 0
    started: bool = False
    finished: bool = False

    def handle(self, line: str) -> str:
        """Apply one received line and return the reply."""
        if self.finished:
            raise RuntimeError("session has already ended")
        if not self.started:
            if line == "start":
                self.started = True
                return GREETING
            self.finished = True
            return INVALID_START
        text = line.split("\n", 1)[0]
        if text == "stop":
            self.finished = True
            return TERMINATED
        words = count_words(text)
        if self.word_count + words > self.word_limit:
            self.finished = True
            return LIMIT_EXCEEDED
        self.word_count += words
        if self.reply_source is None:
            return RECEIVED
        return self.reply_source(text)


def _pack(line: str) -> bytes:
    return line.encode("utf-8")[: BUFFER_SIZE - 1].ljust(BUFFER_SIZE, b"\0")


def _recv_block(sock: socket.socket) -> bytes:
    data = bytearray()
    while len(data) < BUFFER_SIZE:
        chunk = sock.recv(BUFFER_SIZE - len(data))
        if not chunk:
            break
        data.extend(chunk)
    return bytes(data)


def _run_session(
    conn: socket.socket, session: ChatSession, on_line: Callable[[str], None] | None = None
) -> None:
    while not session.finished:
        data = _recv_block(conn)
        if not data:
            log.info("client disconnected")
            return
        line = decode_text(data)
        log.info("%s", line.rstrip("\n"))
        if session.started and on_line is not None:
            on_line(line)
        conn.sendall(session.handle(line).encode("utf-8"))


def _serve_one(conn: socket.socket, session: ChatSession) -> None:
    with conn:
        try:
            _run_session(conn, session)
        except OSError as exc:
            log.warning("client failed: %s", exc)


def serve_chat(
    host: str = HOST, port: int = PORT, reply_source: Callable[[str], str] | None = None
) -> None:
    """Serve clients forever, each in its own thread; replies come from reply_source."""
    source = reply_source or _ask_operator
    with socket.create_server((host, port), backlog=5) as server:
        log.info("server listening on %s:%d", *server.getsockname()[:2])
        while True:
            conn, _ = server.accept()
            log.info("new client accepted")
            threading.Thread(target=_serve_one, args=(conn, ChatSession(source)), daemon=True).start()


class BroadcastChatServer:
    """Chat server that relays each client's messages to every other client."""

    def __init__(self, host: str = HOST, port: int = PORT, word_limit: int = WORD_LIMIT) -> None:
        self._server = socket.create_server((host, port), backlog=5)
        self._server.settimeout(0.2)
        self.address: tuple[str, int] = self._server.getsockname()[:2]
        self.word_limit = word_limit
        self._clients: list[socket.socket | None] = []
        self._lock = threading.Lock()
        self._stop = threading.Event()

    def serve_forever(self) -> None:
        """Accept clients until shutdown is called."""
        try:
            while not self._stop.is_set():
                try:
                    conn, _ = self._server.accept()
                except TimeoutError:
                    continue
                conn.settimeout(None)
                with self._lock:
                    index = len(self._clients)
                    self._clients.append(conn)
                log.info("new client %d accepted", index)
                threading.Thread(target=self._handle, args=(conn, index), daemon=True).start()
        finally:
            self._server.close()

    def shutdown(self) -> None:
        """Ask serve_forever to stop."""
        self._stop.set()

    def __enter__(self) -> "BroadcastChatServer":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()
        self._server.close()

    def _broadcast(self, sender: int, line: str) -> None:
        payload = f"Client {sender}: {line}".encode("utf-8")[: REPLY_SIZE - 1]
        with self._lock:
            others = [c for i, c in enumerate(self._clients) if i != sender and c is not None]
        for other in others:
            try:
                other.sendall(payload)
            except OSError:
                pass

    def _handle(self, conn: socket.socket, index: int) -> None:
        session = ChatSession(None, self.word_limit)
        try:
            _run_session(conn, session, lambda line: self._broadcast(index, line))
        except OSError as exc:
            log.warning("client %d failed: %s", index, exc)
        finally:
            with self._lock:
                self._clients[index] = None
            conn.close()


def _recv_reply(sock: socket.socket) -> str:
    return decode_text(sock.recv(REPLY_SIZE))


def run_client(lines: Iterable[str], host: str = HOST, port: int = PORT) -> Iterator[str]:
    """Start a chat, send each line and yield the greeting and every reply."""
    with socket.create_connection((host, port)) as sock:
        sock.sendall(_pack("start"))
        greeting = _recv_reply(sock)
        yield greeting
        if greeting != GREETING:
            return
        for line in lines:
            if not line.endswith("\n"):
                line += "\n"
            sock.sendall(_pack(line))
            if line == "stop\n":
                return
            reply = _recv_reply(sock)
            if not reply:
                return
            yield reply
            if "Max limit" in reply:
                return


def _prompted_lines() -> Iterator[str]:
    while True:
        print("Enter your message(stop to exit) :", end="", flush=True)
        line = sys.stdin.readline()
        if not line:
            return
        yield line


def _multi_client(host: str, port: int) -> None:
    with socket.create_connection((host, port)) as sock:
        sock.sendall(_pack("start"))
        print(_recv_reply(sock), end="")
        done = threading.Event()

        def receive() -> None:
            while not done.is_set():
                try:
                    text = _recv_reply(sock)
                except OSError:
                    break
                if not text:
                    break
                print(f"\n{text}", end="", flush=True)
                if text == LIMIT_EXCEEDED:
                    break
            done.set()

        threading.Thread(target=receive, daemon=True).start()
        for line in _prompted_lines():
            if done.is_set():
                break
            sock.sendall(_pack(line))
            if line == "stop\n":
                break
        done.set()


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="netlab-chat", description="Word-limited chat over TCP.")
    parser.add_argument("--host", default=HOST)
    parser.add_argument("--port", type=int, default=PORT)
    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("serve", help="run the operator-answered server")
    commands.add_parser("client", help="chat with the operator-answered server")
    commands.add_parser("broadcast-serve", help="run the broadcasting server")
    commands.add_parser("multi-client", help="chat on the broadcasting server")
    args = parser.parse_args(argv)

    try:
        if args.command == "serve":
            logging.basicConfig(level=logging.INFO, format="%(message)s")
            serve_chat(args.host, args.port)
        elif args.command == "broadcast-serve":
            logging.basicConfig(level=logging.INFO, format="%(message)s")
            server = BroadcastChatServer(args.host, args.port)
            try:
                server.serve_forever()
            except KeyboardInterrupt:
                server.shutdown()
        elif args.command == "client":
            for reply in run_client(_prompted_lines(), args.host, args.port):
                print(reply, end="")
        else:
            _multi_client(args.host, args.port)
    except OSError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())