"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import date
from uuid import UUID

from fastapi import FastAPI, HTTPException, Query, Request, status
from fastapi.responses import FileResponse, JSONResponse, RedirectResponse, Response

from dreamcatcher.api.schemas import (
    CaptureOut,
    DreamOut,
    ModeIn,
    NoteIn,
    TextIn,
    TranscriptIn,
)
from dreamcatcher.app_logging import configure_logging
from dreamcatcher.containers import AppContainer
from dreamcatcher.domain.capture import TranscriptUpdate
from dreamcatcher.domain.dreams import TAG_VOCABULARY
from dreamcatcher.services.capture import InvalidTransition
from dreamcatcher.services.images import ImageStore
from dreamcatcher.services.journal import DreamNotFoundError


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        try:
            app.state.container.capture_session.restore_draft()
        except Exception:
            logger.exception("Failed to restore text draft")
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(InvalidTransition)
    async def invalid_transition(_: Request, exc: InvalidTransition) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)}
        )

    @app.exception_handler(DreamNotFoundError)
    async def dream_not_found(_: Request, exc: DreamNotFoundError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"detail": f"Dream not found: {exc}"},
        )

    @app.exception_handler(ValueError)
    async def invalid_value(_: Request, exc: ValueError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": str(exc)},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/tags")
    async def tags() -> dict[str, list[str]]:
        """Return the tag vocabulary."""
        return {"tags": list(TAG_VOCABULARY)}

    @app.get("/capture")
    async def capture_state(request: Request) -> CaptureOut:
        """Return the current capture session."""
        return _capture_out(request)

    @app.post("/capture/start")
    async def capture_start(request: Request) -> CaptureOut:
        """Start receiving transcript updates."""
        await _container(request).capture_session.start_recording()
        return _capture_out(request)

    @app.post("/capture/transcript", status_code=status.HTTP_202_ACCEPTED)
    async def capture_transcript(payload: TranscriptIn, request: Request) -> None:
        """Queue a partial transcript from the recognizer."""
        _container(request).capture_session.publish(
            TranscriptUpdate(text=payload.text, level=payload.level)
        )

    @app.post("/capture/stop")
    async def capture_stop(request: Request) -> CaptureOut:
        """Stop recording and apply pending transcript updates."""
        await _container(request).capture_session.stop_recording()
        return _capture_out(request)

    @app.put("/capture/note")
    async def capture_note(payload: NoteIn, request: Request) -> CaptureOut:
        """Attach a note to the recording."""
        _container(request).capture_session.set_note(payload.note)
        return _capture_out(request)

    @app.put("/capture/mode")
    async def capture_mode(payload: ModeIn, request: Request) -> CaptureOut:
        """Switch between audio and text input."""
        _container(request).capture_session.set_input_mode(payload.mode)
        return _capture_out(request)

    @app.put("/capture/text")
    async def capture_text(payload: TextIn, request: Request) -> CaptureOut:
        """Update the typed description."""
        _container(request).capture_session.set_text(payload.text)
        return _capture_out(request)

    @app.post("/capture/submit")
    async def capture_submit(request: Request) -> CaptureOut:
        """Process the captured dream."""
        snapshot = await _container(request).capture_session.submit()
        return CaptureOut.from_snapshot(snapshot)

    @app.post("/capture/retry")
    async def capture_retry(request: Request) -> CaptureOut:
        """Re-run processing after a failure."""
        snapshot = await _container(request).capture_session.retry()
        return CaptureOut.from_snapshot(snapshot)

    @app.post("/capture/tags/{tag}")
    async def capture_toggle_tag(tag: str, request: Request) -> DreamOut:
        """Toggle a tag on the draft."""
        record = _container(request).capture_session.toggle_tag(tag)
        return DreamOut.from_record(record)

    @app.get("/capture/image")
    async def capture_image(request: Request) -> Response:
        """Serve the draft's illustration."""
        state_container = _container(request)
        draft = state_container.capture_session.draft
        if draft is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return _image_response(state_container.image_store, draft.image_ref)

    @app.post("/capture/save", status_code=status.HTTP_201_CREATED)
    async def capture_save(request: Request) -> DreamOut:
        """Save the draft to the journal."""
        record = _container(request).capture_session.save()
        return DreamOut.from_record(record)

    @app.post("/capture/discard")
    async def capture_discard(request: Request) -> CaptureOut:
        """Throw away the draft."""
        _container(request).capture_session.discard()
        return _capture_out(request)

    @app.get("/dreams")
    async def list_dreams(
        request: Request, tag: str | None = None, day: date | None = None
    ) -> dict[str, list[DreamOut]]:
        """List saved dreams newest first."""
        records = _container(request).journal_service.list_dreams(tag=tag, day=day)
        return {"dreams": [DreamOut.from_record(record) for record in records]}

    @app.get("/dreams/days")
    async def dream_days(
        request: Request, month: str = Query(pattern=r"^\d{4}-\d{2}$")
    ) -> dict[str, list[date]]:
        """List the days of a month (YYYY-MM) that have dreams."""
        year, month_number = (int(part) for part in month.split("-"))
        days = _container(request).journal_service.dream_days(year, month_number)
        return {"days": days}

    @app.get("/dreams/{dream_id}")
    async def dream_detail(dream_id: UUID, request: Request) -> DreamOut:
        """Return a saved dream."""
        return DreamOut.from_record(_container(request).journal_service.get(dream_id))

    @app.delete("/dreams/{dream_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_dream(dream_id: UUID, request: Request) -> None:
        """Delete a saved dream."""
        _container(request).journal_service.delete(dream_id)

    @app.post("/dreams/{dream_id}/tags/{tag}")
    async def toggle_dream_tag(dream_id: UUID, tag: str, request: Request) -> DreamOut:
        """Toggle a tag on a saved dream."""
        record = _container(request).journal_service.toggle_tag(dream_id, tag)
        return DreamOut.from_record(record)

    @app.get("/dreams/{dream_id}/image")
    async def dream_image(dream_id: UUID, request: Request) -> Response:
        """Serve a saved dream's illustration."""
        state_container = _container(request)
        record = state_container.journal_service.get(dream_id)
        return _image_response(state_container.image_store, record.image_ref)

    return app


def _container(request: Request) -> AppContainer:
    return request.app.state.container


def _capture_out(request: Request) -> CaptureOut:
    return CaptureOut.from_snapshot(_container(request).capture_session.snapshot())


def _image_response(store: ImageStore, image_ref: str) -> Response:
    """Return the local file for a reference, or redirect to a remote one."""
    path = store.resolve(image_ref)
    if path is not None:
        return FileResponse(path)
    if image_ref.startswith(("http://", "https://")):
        return RedirectResponse(image_ref)
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
