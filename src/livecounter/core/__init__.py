"""
LiveCounter Core Module

Session actors, subscribers and the update wire format.
"""

from .protocol import encode_update, EVENT_STREAM_MEDIA_TYPE, STREAM_HEADERS
from .subscriber import Subscriber
from .session import CounterSession, COUNTER_KEY
from .registry import SessionRegistry

__all__ = [
    "encode_update",
    "EVENT_STREAM_MEDIA_TYPE",
    "STREAM_HEADERS",
    "Subscriber",
    "CounterSession",
    "COUNTER_KEY",
    "SessionRegistry",
]
