"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request

from impromptu_presenter.api.models import NoticeView, SessionView, TopicRequest
from impromptu_presenter.app_logging import configure_logging
from impromptu_presenter.containers import AppContainer
from impromptu_presenter.domain.errors import InvalidTransitionError


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        try:
            await app.state.container.close_resources()
        except Exception:
            logger.exception("Failed to close resources")

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/session")
    async def get_session(request: Request) -> SessionView:
        """Return the current session state."""
        state_container: AppContainer = request.app.state.container
        return SessionView.from_session(state_container.presenter_service.session)

    @app.post("/session/topic")
    async def submit_topic(payload: TopicRequest, request: Request) -> SessionView:
        """Submit a topic and generate slide images."""
        state_container: AppContainer = request.app.state.container
        try:
            session = await state_container.presenter_service.submit_topic(
                payload.topic
            )
        except InvalidTransitionError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        return SessionView.from_session(session)

    @app.post("/session/reset")
    async def reset_session(request: Request) -> SessionView:
        """Abandon the current attempt and return to idle."""
        state_container: AppContainer = request.app.state.container
        session = state_container.presenter_service.reset()
        return SessionView.from_session(session)

    @app.get("/session/notices")
    async def drain_notices(request: Request) -> list[NoticeView]:
        """Return pending notices and clear them."""
        state_container: AppContainer = request.app.state.container
        return [
            NoticeView.from_notice(notice)
            for notice in state_container.notice_board.drain()
        ]

    return app
