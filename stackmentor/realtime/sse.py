"""Eventos en tiempo real por SSE.

Cada cliente abre ``GET /events?token=<jwt>`` (EventSource no deja poner cabeceras)
y solo recibe los eventos dirigidos a su usuario.
"""

import asyncio
import json
from typing import Any, Dict, Iterable

import anyio
from fastapi import APIRouter, HTTPException
from sse_starlette.sse import EventSourceResponse

from stackmentor.core.logging import get_module_logger
from stackmentor.core.security import decode_access_token

router = APIRouter(tags=["realtime"])
logger = get_module_logger()

# cola de cada conexión -> usuario dueño
_subscribers: Dict[asyncio.Queue, int] = {}


async def publish(event_type: str, payload: Dict[str, Any], user_ids: Iterable[int]) -> None:
    targets = set(user_ids)
    for queue, owner in list(_subscribers.items()):
        if owner not in targets:
            continue
        try:
            queue.put_nowait({"event": event_type, "data": payload})
        except asyncio.QueueFull:
            # cliente que no consume: lo soltamos
            _subscribers.pop(queue, None)


def publish_from_sync(event_type: str, payload: Dict[str, Any], user_ids: Iterable[int]) -> None:
    """Para rutas síncronas (threadpool de FastAPI)."""
    try:
        anyio.from_thread.run(publish, event_type, payload, list(user_ids))
    except RuntimeError:
        # fuera de un worker de anyio (scripts, servicios llamados a mano) no hay a quién avisar
        logger.debug("publish_skipped_no_event_loop", event_type=event_type)


def subscriber_count() -> int:
    return len(_subscribers)


@router.get("/events")
async def sse_events(token: str):
    user_id = decode_access_token(token)
    if user_id is None:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    queue: asyncio.Queue = asyncio.Queue(maxsize=100)
    _subscribers[queue] = user_id

    async def generator():
        try:
            while True:
                msg = await queue.get()
                yield {
                    "event": msg["event"],
                    "data": json.dumps(msg["data"], ensure_ascii=False, default=str),
                }
        finally:
            _subscribers.pop(queue, None)

    return EventSourceResponse(generator())
