import socket
import threading
import time

import pytest

from netlab.smtp import SmtpSession, send_mail, serve

HOST = "127.0.0.1"


def _free_port():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind((HOST, 0))
        return sock.getsockname()[1]


def test_helo_reply():
    session = SmtpSession()
    assert session.handle("HELO example.com") == "HELLO,your request received"


def test_mail_from_stores_sender():
    session = SmtpSession()
    assert session.handle("MAIL FROM: alice@example.com") == "from address received"
    assert session.sender == "alice@example.com"


def test_to_stores_receiver():
    session = SmtpSession()
    assert session.handle("TO: bob@example.com") == "to address received"
    assert session.receiver == "bob@example.com"


def test_msg_stores_message():
    session = SmtpSession()
    assert session.handle("MSG: hello there") == "message received"
    assert session.message == "hello there"


def test_unknown_command():
    session = SmtpSession()
    assert session.handle("RCPT bob") == "Unknown command"
    assert not session.finished


def test_quit_finishes_session():
    session = SmtpSession()
    assert session.handle("QUIT") == "Quit received,closing connection"
    assert session.finished


def test_quit_must_match_exactly():
    session = SmtpSession()
    assert session.handle("QUIT now") == "Unknown command"
    assert not session.finished


def test_handle_after_quit_raises():
    session = SmtpSession()
    session.handle("QUIT")
    with pytest.raises(RuntimeError):
        session.handle("HELO example.com")


def test_sender_is_truncated():
    session = SmtpSession()
    session.handle("MAIL FROM: " + "a" * 150)
    assert len(session.sender) == 99
    assert set(session.sender) == {"a"}


def test_send_mail_rejects_overlong_command():
    with pytest.raises(ValueError):
        send_mail("example.com", "a@example.com", "b@example.com", "x" * 2000, HOST, _free_port())


def test_exchange_over_network():
    port = _free_port()
    outcome = {}

    def run():
        outcome["session"] = serve(HOST, port)

    thread = threading.Thread(target=run, daemon=True)
    thread.start()

    deadline = time.monotonic() + 5
    while True:
        try:
            transcript = send_mail(
                "example.com", "alice@example.com", "bob@example.com", "hi bob\nignored", HOST, port
            )
            break
        except ConnectionRefusedError:
            if time.monotonic() > deadline:
                raise
            time.sleep(0.02)
    thread.join(5)

    assert [reply for _, reply in transcript] == [
        "HELLO,your request received",
        "from address received",
        "to address received",
        "message received",
        "Quit received,closing connection",
    ]
    assert transcript[3][0] == "MSG: hi bob"
    session = outcome["session"]
    assert session.finished
    assert (session.sender, session.receiver, session.message) == (
        "alice@example.com",
        "bob@example.com",
        "hi bob",
    )