"""
Page shell served at a session's root path.

The page shows the live counter and the URL to share; the client script
subscribes to the session's event stream relative to the current path.
"""

from fasthtml.common import Div, H1, Main, P, Script, Style, Title

PAGE_TITLE = "Resumable Counter Stream"

PAGE_CSS = """
body { font-family: sans-serif; max-width: 800px; margin: 0 auto; padding: 2rem; }
#counter { font-size: 2rem; margin: 1rem 0; }
#sessionUrl { margin: 1rem 0; word-break: break-all; }
"""

STREAM_CLIENT_JS = """
const counter = document.getElementById('counter');
const base = window.location.pathname.replace(/\\/+$/, '');
const source = new EventSource(base + '/events');

source.onmessage = (event) => {
  counter.textContent = event.data;
};

source.onerror = (error) => {
  console.error('EventSource error:', error);
  counter.textContent = 'Connection error. Please refresh.';
  source.close();
};
"""


def counter_page(session_url: str):
    """Build the page for a session, echoing the URL it was requested at."""
    return (
        Title(PAGE_TITLE),
        Style(PAGE_CSS),
        Main(
            H1(PAGE_TITLE),
            Div("Connecting...", id="counter"),
            Div(
                P("Share this URL to continue the session in another browser:"),
                Div(session_url, id="sessionUrl"),
            ),
        ),
        Script(STREAM_CLIENT_JS),
    )
