import time

from app.core.metrics import MetricsEmitter, emit_best_effort
from app.db.session import SEED_ENTRY_ID, EntryStore

PAGE_VIEWS_METRIC = "web.page_views"
QUERY_TIME_METRIC = "database.query.time"


def get_front_page_name(store: EntryStore, metrics: MetricsEmitter, entry_id: int = SEED_ENTRY_ID) -> str:
    """Count the page view, look up the entry and report how long the lookup took.

    The query time is reported in whole seconds, truncated. Both samples are
    sent even when the lookup fails; the lookup error is then re-raised.
    """
    emit_best_effort(metrics.increment, PAGE_VIEWS_METRIC, tags=[f"tag:{PAGE_VIEWS_METRIC}"])

    start = time.monotonic()
    try:
        return store.lookup_name_by_id(entry_id)
    finally:
        elapsed_seconds = int(time.monotonic() - start)
        emit_best_effort(
            metrics.histogram,
            QUERY_TIME_METRIC,
            elapsed_seconds,
            tags=[f"tag:{QUERY_TIME_METRIC}"],
        )
