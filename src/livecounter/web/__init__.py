"""
LiveCounter Web Module

FastHTML routing, page shell and event stream responses.
"""

from .app import create_app, configure_routes, new_session_id
from .handlers import handle_session_request, open_event_stream
from .page import counter_page

__all__ = [
    "create_app",
    "configure_routes",
    "new_session_id",
    "handle_session_request",
    "open_event_stream",
    "counter_page",
]
