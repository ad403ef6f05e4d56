"""FastAPI router streaming table change notifications via Server-Sent Events."""

import asyncio
from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import StreamingResponse

from carecoord.config import AppSettings, get_app_settings
from carecoord.db.changes.feed import ChangeEvent, ChangeFeed, get_change_feed
from carecoord.db.constants import Table
from carecoord.utils.logger import logger
from carecoord.utils.sse import SSEEvent

router = APIRouter(prefix="/changes", tags=["Changes"])


async def stream_changes(
    request: Request,
    feed: ChangeFeed,
    table: str,
    heartbeat_interval: float,
) -> AsyncGenerator[str, None]:
    """
    Yield one SSE ``change`` event per row change on ``table``.

    A ``heartbeat`` event is sent whenever ``heartbeat_interval`` seconds pass
    without a change. The subscription is always released when the stream ends.
    """
    queue: asyncio.Queue[ChangeEvent] = asyncio.Queue()
    subscription = feed.subscribe(table, queue.put_nowait)
    try:
        while not await request.is_disconnected():
            try:
                change = await asyncio.wait_for(queue.get(), timeout=heartbeat_interval)
            except TimeoutError:
                yield SSEEvent(event="heartbeat", data="keep-alive").format()
                continue
            yield SSEEvent(event="change", data=change.model_dump_json()).format()
    finally:
        subscription.unsubscribe()
        logger.debug("Change stream closed", table=table)


@router.get("/{table}")
async def watch_table(
    table: str,
    request: Request,
    feed: Annotated[ChangeFeed, Depends(get_change_feed)],
    settings: Annotated[AppSettings, Depends(get_app_settings)],
) -> StreamingResponse:
    """
    Stream insert/update/delete notifications for a watched table.

    Args:
        table: One of inventory_items, service_schedule, chat_messages

    Returns:
        StreamingResponse: SSE stream of ChangeEvent JSON payloads

    Raises:
        HTTPException: 404 if the table is not watched
    """
    if table not in {t.value for t in Table}:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown table: {table}",
        )

    logger.info("Change stream opened", table=table)
    return StreamingResponse(
        stream_changes(
            request, feed, table, settings.change_stream_heartbeat_seconds
        ),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )
