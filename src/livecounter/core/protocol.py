"""
Wire format for counter updates.

Each update is a bare server-sent event record carrying the decimal value.
"""

from datastar_py import SSE_HEADERS

EVENT_STREAM_MEDIA_TYPE = "text/event-stream"

STREAM_HEADERS = dict(SSE_HEADERS)


def encode_update(value: int) -> str:
    """Serialize a counter value as an SSE data record."""
    return f"data: {value}\n\n"
