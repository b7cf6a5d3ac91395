from fastapi import Request

from app.core.metrics import MetricsEmitter
from app.db.session import EntryStore


def get_store(request: Request) -> EntryStore:
    return request.app.state.store


def get_metrics(request: Request) -> MetricsEmitter:
    return request.app.state.metrics
