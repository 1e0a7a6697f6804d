"""Orchestrates the AI calls that turn a dream description into a card."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass

from dreamcatcher.domain.capture import ProcessingStep
from dreamcatcher.domain.dreams import DreamRecord
from dreamcatcher.services.completions import CompletionService
from dreamcatcher.services.images import ImageService

logger = logging.getLogger(__name__)

CONNECTION_ERROR_MESSAGE = "网络连接似乎有点问题，请检查网络后重试。"

StepCallback = Callable[[ProcessingStep], None]


class DreamProcessingError(RuntimeError):
    """Retryable failure of the dream workflow."""

    def __init__(self, user_message: str = CONNECTION_ERROR_MESSAGE) -> None:
        super().__init__(user_message)
        self.user_message = user_message


@dataclass
class DreamWorkflow:
    """Produces a draft dream record from a description."""

    completion_service: CompletionService
    image_service: ImageService

    async def process(
        self,
        text: str,
        note: str = "",
        text_content: str = "",
        on_step: StepCallback | None = None,
    ) -> DreamRecord:
        """Analyze the dream and illustrate it, returning an unsaved record.

        Analysis and prompt optimization run concurrently; image generation
        starts once the prompt is ready and is joined with the analysis.
        """
        if not text.strip():
            raise ValueError("Dream description is empty")
        notify = on_step or (lambda _step: None)
        notify(ProcessingStep.OPTIMIZING)

        analysis_task = asyncio.create_task(
            self.completion_service.analyze_dream(text)
        )
        prompt_task = asyncio.create_task(self.completion_service.optimize_prompt(text))
        image_task: asyncio.Task[str] | None = None
        try:
            prompt = await prompt_task
            notify(ProcessingStep.GENERATING)
            image_task = asyncio.create_task(self.image_service.generate(prompt))
            image_ref, analysis = await asyncio.gather(image_task, analysis_task)
        except Exception as exc:
            started = [
                task
                for task in (analysis_task, prompt_task, image_task)
                if task is not None
            ]
            for task in started:
                task.cancel()
            await asyncio.gather(*started, return_exceptions=True)
            logger.exception("Dream processing failed")
            raise DreamProcessingError() from exc

        return DreamRecord(
            original_text=note.strip() or text,
            optimized_prompt=prompt,
            image_ref=image_ref,
            interpretation=analysis.interpretation,
            story=analysis.story,
            psychological_mapping=analysis.psychological_mapping,
            action_suggestion=analysis.action_suggestion,
            text_content=text_content,
        )
