import logging
import socket
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from datadog.dogstatsd import DogStatsd

from app.core.config import Settings

logger = logging.getLogger("app.metrics")


class MetricsEmitter(ABC):
    @abstractmethod
    def increment(self, metric: str, tags: list[str] | None = None) -> None:
        raise NotImplementedError

    @abstractmethod
    def histogram(self, metric: str, value: float, tags: list[str] | None = None) -> None:
        raise NotImplementedError

    def close(self) -> None:
        return None


class DogStatsdEmitter(MetricsEmitter):
    """Sends DogStatsD datagrams from a fixed local address to the collector.

    The UDP socket is opened on first use, bound to ``bind_address`` and
    connected to the collector. A bind or connect failure surfaces from the
    emitting call, not from construction.
    """

    def __init__(
        self,
        bind_address: tuple[str, int],
        collector_address: tuple[str, int],
        namespace: str | None = None,
    ) -> None:
        self._bind_address = bind_address
        self._collector_address = collector_address
        self._client = DogStatsd(
            host=collector_address[0],
            port=collector_address[1],
            namespace=namespace,
            disable_telemetry=True,
            disable_buffering=True,
        )
        self._socket_lock = threading.Lock()
        self._socket: socket.socket | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "DogStatsdEmitter":
        return cls(
            bind_address=(settings.statsd_bind_host, settings.statsd_bind_port),
            collector_address=(settings.statsd_host, settings.statsd_port),
            namespace=settings.statsd_namespace,
        )

    def _ensure_socket(self) -> None:
        with self._socket_lock:
            # The client drops its socket after a send error.
            if self._socket is not None and self._client.socket is self._socket:
                return
            if self._socket is not None:
                self._socket.close()
                self._socket = None
            sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
            try:
                sock.setblocking(False)
                sock.bind(self._bind_address)
                sock.connect(self._collector_address)
            except OSError:
                sock.close()
                raise
            self._socket = sock
            self._client.socket = sock

    def increment(self, metric: str, tags: list[str] | None = None) -> None:
        self._ensure_socket()
        self._client.increment(metric, tags=tags)

    def histogram(self, metric: str, value: float, tags: list[str] | None = None) -> None:
        self._ensure_socket()
        self._client.histogram(metric, value, tags=tags)

    def close(self) -> None:
        with self._socket_lock:
            if self._socket is None:
                return
            self._client.socket = None
            self._socket.close()
            self._socket = None


def emit_best_effort(send: Callable[..., Any], metric: str, *args: Any, **kwargs: Any) -> None:
    try:
        send(metric, *args, **kwargs)
    except Exception:
        logger.warning("metric_emit_failed metric=%s", metric, exc_info=True)
