"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from dreamcatcher.adapters.image_http_client import HttpxImageFetcher
from dreamcatcher.adapters.local_image_store import LocalImageStore
from dreamcatcher.adapters.openai_chat_client import OpenAIChatClient
from dreamcatcher.adapters.supabase_draft_repository import SupabaseDraftRepository
from dreamcatcher.adapters.supabase_dream_repository import SupabaseDreamRepository
from dreamcatcher.config import Settings
from dreamcatcher.services.capture import CaptureSession
from dreamcatcher.services.completions import CompletionService
from dreamcatcher.services.drafts import DraftService
from dreamcatcher.services.images import ImageService, ImageStore
from dreamcatcher.services.journal import JournalService
from dreamcatcher.services.workflow import DreamWorkflow


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    image_store: ImageStore
    journal_service: JournalService
    capture_session: CaptureSession
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    chat_client = OpenAIChatClient.create(
        api_key=resolved_settings.openai_api_key,
        base_url=resolved_settings.openai_base_url,
        model=resolved_settings.openai_model,
        temperature=resolved_settings.openai_temperature,
        timeout=resolved_settings.openai_timeout_seconds,
    )
    image_fetcher = HttpxImageFetcher.create(
        timeout=resolved_settings.image_timeout_seconds
    )
    image_store = LocalImageStore(resolved_settings.storage_dir)
    workflow = DreamWorkflow(
        completion_service=CompletionService(
            client=chat_client,
            analysis_language=resolved_settings.analysis_language,
        ),
        image_service=ImageService(
            fetcher=image_fetcher,
            store=image_store,
            base_url=resolved_settings.image_base_url,
        ),
    )
    journal_service = JournalService(
        repository=SupabaseDreamRepository(supabase_client),
        timezone_name=resolved_settings.timezone,
    )
    draft_service = DraftService(SupabaseDraftRepository(supabase_client))
    capture_session = CaptureSession(
        workflow=workflow,
        journal=journal_service,
        drafts=draft_service,
        debug_errors=resolved_settings.environment == "local",
    )

    async def close_resources() -> None:
        await chat_client.close()
        await image_fetcher.close()

    return AppContainer(
        settings=resolved_settings,
        image_store=image_store,
        journal_service=journal_service,
        capture_session=capture_session,
        close_resources=close_resources,
    )
