from fastapi import APIRouter, Depends, status
from fastapi.responses import PlainTextResponse

from app.api.deps import get_metrics, get_store
from app.core.metrics import MetricsEmitter
from app.db.session import EntryStore
from app.services.entry_service import get_front_page_name

router = APIRouter(tags=["entries"])


@router.get("/", response_class=PlainTextResponse, status_code=status.HTTP_200_OK)
def front_page(
    store: EntryStore = Depends(get_store),
    metrics: MetricsEmitter = Depends(get_metrics),
) -> str:
    return get_front_page_name(store=store, metrics=metrics)
