"""Endpoint SSE de actualizaciones en tiempo real"""
from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from app.core.config import settings
from app.services.notifier import ChangeNotifier, event_stream, get_notifier

router = APIRouter()


@router.get("/events")
async def stream_events(notifier: ChangeNotifier = Depends(get_notifier)):
    """
    Stream text/event-stream: un evento "connected" al conectar y luego
    ``{type, data, timestamp}`` por cada cambio publicado.
    """
    return StreamingResponse(
        event_stream(notifier, settings.SSE_PING_INTERVAL),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )
