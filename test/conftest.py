"""
Pytest configuration and shared fixtures for the guessing game.
"""

import os
import socket
import sys
import time

import pytest

# Add src to path for testing
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from guessgame.server.network import NetworkServer  # noqa: E402
from guessgame.shared.protocols import LineConnection  # noqa: E402


class FixedRandom:
    """Stand-in generator that always draws the same secret."""

    def __init__(self, value):
        self.value = value

    def randint(self, a, b):
        return self.value


class FakeConnection:
    """Scripted in-memory connection used to drive a GameSession."""

    def __init__(self, lines=(), addr=("10.0.0.1", 5000)):
        self.lines = list(lines)
        self.addr = addr
        self.sent = []
        self.close_calls = 0
        self.closed = False

    def recv_line(self):
        if not self.lines:
            return None
        return self.lines.pop(0)

    def send_message(self, message):
        self.sent.append(message)

    def close(self):
        self.close_calls += 1
        self.closed = True


def connect(address, timeout=5.0):
    """Open a test connection that never blocks forever."""
    sock = socket.create_connection(address, timeout=timeout)
    return LineConnection(sock, address)


def wait_until(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


@pytest.fixture
def fixed_rng():
    return FixedRandom


@pytest.fixture
def fake_connection():
    return FakeConnection


@pytest.fixture
def server_factory():
    """Start servers on ephemeral localhost ports and stop them afterwards."""
    servers = []

    def _start(rng_factory=None, **kwargs):
        server = NetworkServer("127.0.0.1", 0, rng_factory=rng_factory, **kwargs)
        servers.append(server)
        server.start()
        return server

    yield _start
    for server in servers:
        server.stop()


@pytest.fixture
def server(server_factory):
    """A running server whose sessions all use the secret 42."""
    return server_factory(rng_factory=lambda: FixedRandom(42))
