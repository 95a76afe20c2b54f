"""Server-Sent Events stream of data-change notifications."""

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from datakeeper.application.services import SSEManager
from datakeeper.infrastructure.dependencies import get_sse_manager

router = APIRouter(prefix="/events", tags=["Events"])


@router.get("/stream")
async def event_stream(
    sse: SSEManager = Depends(get_sse_manager),
) -> StreamingResponse:
    """SSE endpoint relaying data-change events to every open tab.

    Clients connect via EventSource and receive events such as
    'company-data-changed' or 'backup-created' as they are published.
    """
    return StreamingResponse(
        sse.subscribe(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )
