"""
FastHTML application

Creates the web app: the root mints a session identifier and redirects to
it; ``/{session_id}/...`` strips the identifier and forwards the remaining
sub-path to that session's actor.
"""

import logging
from typing import Optional
from uuid import uuid4

from fasthtml.common import FastHTML
from starlette.requests import Request
from starlette.responses import RedirectResponse

from ..config import ApplicationConfig, get_config
from ..core.registry import SessionRegistry
from ..persistence import ScalarStore, create_store
from .handlers import handle_session_request

logger = logging.getLogger(__name__)


def new_session_id() -> str:
    return str(uuid4())


def configure_routes(app: FastHTML, registry: SessionRegistry) -> FastHTML:
    """Register the session routes on ``app``."""
    rt = app.route

    @rt("/", methods=["get"])
    async def new_session(request: Request):
        session_id = new_session_id()
        logger.info(f"Created session {session_id}")
        return RedirectResponse(f"/{session_id}", status_code=302)

    @rt("/{session_id}", methods=["get"])
    async def session_root(session_id: str, request: Request):
        return await handle_session_request(registry.get(session_id), "/", request)

    @rt("/{session_id}/{sub_path:path}", methods=["get"])
    async def session_path(session_id: str, sub_path: str, request: Request):
        return await handle_session_request(registry.get(session_id), f"/{sub_path}", request)

    return app


def create_app(config: Optional[ApplicationConfig] = None, store: Optional[ScalarStore] = None) -> FastHTML:
    """
    Create the LiveCounter application.

    Args:
        config: Application configuration, defaults to ``get_config()``
        store: Durable store, defaults to the one named by ``config.persistence``

    Returns:
        The FastHTML app; its registry is available as ``app.state.registry``
    """
    if config is None:
        config = get_config()
    if store is None:
        store = create_store(config.persistence)
    registry = SessionRegistry(store, config.session)

    async def lifespan(app):
        registry.start_cleanup()
        try:
            yield
        finally:
            await registry.shutdown()
            await store.close()

    app = FastHTML(
        debug=config.debug,
        htmx=False,
        secret_key=config.get_secret_key(),
        lifespan=lifespan
    )
    app.state.config = config
    app.state.registry = registry

    return configure_routes(app, registry)
