"""
Session request handling

Serves the two actor-local sub-paths of a session once the router has
stripped the identifier: ``/`` for the page and ``/events`` for the stream.
"""

import logging

from starlette.background import BackgroundTask
from starlette.requests import Request
from starlette.responses import Response, StreamingResponse

from ..core.protocol import EVENT_STREAM_MEDIA_TYPE, STREAM_HEADERS
from ..core.session import CounterSession
from ..errors import LiveCounterError
from .page import counter_page

logger = logging.getLogger(__name__)

PAGE_PATH = "/"
EVENTS_PATH = "/events"


def normalize_path(sub_path: str) -> str:
    """Drop empty path segments, e.g. ``events/`` becomes ``/events``."""
    return "/" + "/".join(segment for segment in sub_path.split("/") if segment)


async def handle_session_request(session: CounterSession, sub_path: str, request: Request):
    """Dispatch an actor-local sub-path."""
    sub_path = normalize_path(sub_path)
    if sub_path == PAGE_PATH:
        return counter_page(str(request.url))
    if sub_path == EVENTS_PATH:
        return await open_event_stream(session)
    return Response("Not found", status_code=404)


async def open_event_stream(session: CounterSession) -> Response:
    """Attach a new subscriber and stream its updates to the client."""
    subscriber = session.new_subscriber()
    try:
        await session.attach(subscriber)
    except LiveCounterError as e:
        logger.error(f"Could not attach to session {session.session_id}: {e}")
        subscriber.cancel()
        return Response("Counter unavailable", status_code=503)

    return StreamingResponse(
        subscriber.stream(),
        media_type=EVENT_STREAM_MEDIA_TYPE,
        headers=STREAM_HEADERS,
        background=BackgroundTask(subscriber.cancel)
    )
