import socket
import sys
import threading
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

sys.path.append(str(Path(__file__).resolve().parents[1]))

from app.api.deps import get_metrics
from app.core.config import Settings
from app.core.metrics import MetricsEmitter
from app.db.session import EntryStore
from app.main import create_app


class RecordingEmitter(MetricsEmitter):
    def __init__(self) -> None:
        self.samples: list[tuple[str, str, float, list[str] | None]] = []
        self._lock = threading.Lock()

    def increment(self, metric: str, tags: list[str] | None = None) -> None:
        with self._lock:
            self.samples.append(("counter", metric, 1, tags))

    def histogram(self, metric: str, value: float, tags: list[str] | None = None) -> None:
        with self._lock:
            self.samples.append(("histogram", metric, value, tags))


def _free_udp_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest.fixture()
def closed_udp_port() -> int:
    return _free_udp_port()


@pytest.fixture()
def collector():
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(("127.0.0.1", 0))
    sock.settimeout(2.0)
    yield sock
    sock.close()


@pytest.fixture()
def test_settings() -> Settings:
    return Settings(statsd_bind_port=0, statsd_port=_free_udp_port())


@pytest.fixture()
def store() -> EntryStore:
    entry_store = EntryStore()
    entry_store.initialize()
    yield entry_store
    entry_store.dispose()


@pytest.fixture()
def recorded_metrics() -> RecordingEmitter:
    return RecordingEmitter()


@pytest.fixture()
def client(test_settings, recorded_metrics) -> TestClient:
    app = create_app(test_settings)
    app.dependency_overrides[get_metrics] = lambda: recorded_metrics
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
