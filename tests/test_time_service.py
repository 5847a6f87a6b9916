import logging
import socket
import threading
import time

import pytest

from netlab import time_service

HOST = "127.0.0.1"
CTIME_FORMAT = "%a %b %d %H:%M:%S %Y"


class ServerThread(threading.Thread):
    """Runs the time server on a fresh port and waits until it listens."""

    def __init__(self, count):
        super().__init__(daemon=True)
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as probe:
            probe.bind((HOST, 0))
            self.port = probe.getsockname()[1]
        self.count = count
        self.served = None
        self.listening = threading.Event()

    def run(self):
        self.served = time_service.serve(HOST, self.port, self.count)

    def __enter__(self):
        logger = logging.getLogger("netlab.time_service")
        self._saved_level = logger.level
        self._handler = logging.Handler()
        self._handler.emit = lambda record: record.getMessage().startswith("listening") and self.listening.set()
        logger.setLevel(logging.INFO)
        logger.addHandler(self._handler)
        self.start()
        assert self.listening.wait(5)
        return self

    def __exit__(self, *exc_info):
        self.join(5)
        logger = logging.getLogger("netlab.time_service")
        logger.removeHandler(self._handler)
        logger.setLevel(self._saved_level)
        assert not self.is_alive()


def parse_stamp(text):
    return time.mktime(time.strptime(text.strip(), CTIME_FORMAT))


@pytest.mark.parametrize("timestamp", [0, 1_000_000_000, 1_700_000_000])
def test_format_ctime_matches_local_time(timestamp):
    text = time_service.format_ctime(timestamp)
    assert text.endswith("\n")
    assert len(text) == 25
    assert time.strptime(text.strip(), CTIME_FORMAT)[:6] == time.localtime(timestamp)[:6]


def test_format_ctime_defaults_to_now():
    before = time.time()
    stamp = parse_stamp(time_service.format_ctime())
    assert before - 2 <= stamp <= time.time() + 2


def test_serve_rejects_negative_count():
    with pytest.raises(ValueError):
        time_service.serve(HOST, 0, -1)


def test_serve_answers_requests():
    before = time.time()
    with ServerThread(2) as server:
        replies = [time_service.request_time(HOST, server.port) for _ in range(2)]
    after = time.time()
    assert server.served == 2
    for reply in replies:
        assert reply.endswith("\n")
        assert before - 2 <= parse_stamp(reply) <= after + 2


def test_serve_with_zero_count_returns_immediately():
    assert time_service.serve(HOST, 0, 0) == 0


def test_main_request_prints_reply(capsys):
    with ServerThread(1) as server:
        code = time_service.main(
            ["--host", HOST, "--port", str(server.port), "request", "--count", "1", "--interval", "0"]
        )
    assert code == 0
    assert server.served == 1
    out = capsys.readouterr().out
    assert out.startswith("time received : ")
    assert out.rstrip().endswith("from server")


def test_main_request_rejects_negative_count(capsys):
    assert time_service.main(["request", "--count", "-3"]) == 1
    assert "error:" in capsys.readouterr().err