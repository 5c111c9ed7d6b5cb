"""
orchestrator.py — One listing run: uploads → analysis → copy + 10 mockups.

    set_uploads / add_uploads / remove_upload
            │
        analyze()                 IDLE → ANALYZING → ANALYZED   (or FAILED)
            │
    generate_assets()             ANALYZED → GENERATING → DONE
      ├─ copy task  ─────────────────────────────┐  (fire-and-forget)
      └─ prompt planner ─→ 10 placeholders ─→ 10 mockup tasks
                                                  │
                              gather(return_exceptions=True) → usage +1
            │
    regenerate(image_id)          one mockup, other items untouched

Every run-superseding action (new uploads, re-analysis, analysis edit, new
generation) bumps the run token. In-flight work carries the token it was
launched under, and mockup tasks also carry a per-image attempt number, so a
late result from an abandoned run or an older regeneration is dropped
instead of overwriting newer state. Mockups are patched by id, never by
position.
"""

from __future__ import annotations

import asyncio
import dataclasses
import logging
import re
import uuid
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Sequence, TypeVar

from .encoder import accept_uploads, encode_image
from .errors import LimitReached, NotAnalyzed, NoUploads, WatermarkRenderError
from .models import (
    AnalysisResult,
    CopyResult,
    EncodedImage,
    GeneratedImage,
    ImageStatus,
    MockupPrompt,
)
from .usage import UsageStore
from .watermark import apply_watermark
from .zip_exporter import ExportBundle, build_export_bundle

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str], None]
ImageCallback = Callable[[GeneratedImage], None]

T = TypeVar("T")


class RunState(str, Enum):
    IDLE = "idle"
    ANALYZING = "analyzing"
    ANALYZED = "analyzed"
    GENERATING = "generating"
    DONE = "done"
    FAILED = "failed"


def images_for_prompt(index: int, images: Sequence[T]) -> List[T]:
    """Prompt 0 is the bundle shot and gets every image; the rest cycle through them one at a time."""
    if not images:
        raise ValueError("images_for_prompt needs at least one image")
    if index == 0:
        return list(images)
    return [images[(index - 1) % len(images)]]


class ListingOrchestrator:
    """
    Holds the state of one listing session and runs its async stages.

    `service` is anything with the GeminiService coroutine methods
    (analyze_images, generate_copy, generate_mockup_prompts, generate_mockup).
    """

    def __init__(
        self,
        service,
        usage: UsageStore,
        on_progress: Optional[ProgressCallback] = None,
        on_image: Optional[ImageCallback] = None,
        watermark: Callable[[str], str] = apply_watermark,
    ) -> None:
        self.service = service
        self.usage = usage
        self.on_progress = on_progress
        self.on_image = on_image
        self.watermark = watermark

        self.uploads: List[Path] = []
        self.analysis: Optional[AnalysisResult] = None
        self.copy: Optional[CopyResult] = None
        self.prompts: List[MockupPrompt] = []
        self.state = RunState.IDLE
        self.error: Optional[str] = None
        self.copy_error: Optional[str] = None
        self.loading_message = ""

        self._images: Dict[str, GeneratedImage] = {}      # id → image, prompt order
        self._tasks: Dict[str, asyncio.Task] = {}
        self._attempts: Dict[str, int] = {}
        self._copy_task: Optional[asyncio.Task] = None
        self._run = 0

    @property
    def images(self) -> List[GeneratedImage]:
        return list(self._images.values())

    @property
    def run_token(self) -> int:
        return self._run

    # ── Uploads ───────────────────────────────────────────────────────────────

    def set_uploads(self, paths: Iterable[Path]) -> List[Path]:
        return self._accept(paths, existing=())

    def add_uploads(self, paths: Iterable[Path]) -> List[Path]:
        return self._accept(paths, existing=self.uploads)

    def remove_upload(self, index: int) -> List[Path]:
        uploads = list(self.uploads)
        del uploads[index]
        self.uploads = uploads
        self._start_over()
        return self.uploads

    def _accept(self, paths: Iterable[Path], existing: Sequence[Path]) -> List[Path]:
        """Keep the acceptable files; the last rejection, if any, lands in `error`."""
        self.uploads, rejection = accept_uploads(paths, existing=existing)
        self._start_over()
        self.error = str(rejection) if rejection else None
        if rejection:
            logger.warning(f"Upload rejected: {rejection}")
        return self.uploads

    def _start_over(self) -> None:
        self._supersede()
        self.analysis = None
        self._clear_assets()
        self.state = RunState.IDLE

    # ── Analysis ──────────────────────────────────────────────────────────────

    async def analyze(self) -> Optional[AnalysisResult]:
        """
        Encode the uploads and run the analysis call.

        Returns the analysis, or None when the call failed (see `error`) or a
        newer action superseded this one while it was in flight.
        """
        if not self.uploads:
            self.error = "Please upload at least one product image."
            raise NoUploads(self.error)

        self._supersede()
        token = self._run
        self.analysis = None
        self._clear_assets()
        self.error = None
        self.state = RunState.ANALYZING
        self._progress("Analyzing product design...")

        try:
            encoded = await self._encode_uploads()
            analysis = await self.service.analyze_images(encoded)
        except Exception as e:
            if token != self._run:
                return None
            logger.error(f"Analysis failed: {e}")
            self.error = str(e) or "An unknown error occurred during analysis."
            self.state = RunState.FAILED
            self._progress("")
            return None

        if token != self._run:
            return None
        self.analysis = analysis
        self.state = RunState.ANALYZED
        self._progress("")
        return analysis

    def update_analysis(self, **fields) -> AnalysisResult:
        """Apply a user edit to the analysis. Copy and mockups become stale."""
        if self.analysis is None:
            raise NotAnalyzed("Please analyze a product before editing the analysis.")
        unknown = sorted(set(fields) - set(AnalysisResult.model_fields))
        if unknown:
            raise ValueError(f"Unknown analysis field(s): {', '.join(unknown)}")
        updated =AnalysisResult.model_validate({**self.analysis.model_dump(), **fields})
        self._supersede()
        self.analysis = updated
        self._clear_assets()
        self.state = RunState.ANALYZED
        return updated

    # ── Generation ────────────────────────────────────────────────────────────

    async def generate_assets(self) -> List[GeneratedImage]:
        """
        Copy + prompt plan + 10 mockups for the current analysis.

        Raises NotAnalyzed / LimitReached before any service call. Returns the
        settled mockups; on a pipeline-level failure the mockups are cleared,
        `error` is set and the state goes back to ANALYZED.
        """
        if self.analysis is None:
            self.error = "Please analyze a product before generating assets."
            raise NotAnalyzed(self.error)
        if not self.usage.can_generate():
            raise LimitReached(self.usage.daily_limit)

        self._supersede()
        token = self._run
        analysis = self.analysis
        self._clear_assets()
        self.error = None
        self.state = RunState.GENERATING

        try:
            encoded = await self._encode_uploads()
            if token != self._run:
                return self.images

            self._progress("Generating listing copy...")
            self._copy_task = asyncio.create_task(self._run_copy(analysis, token))

            self._progress("Brainstorming mockup ideas...")
            prompts = await self.service.generate_mockup_prompts(analysis)
            if token != self._run:
                return self.images
            self.prompts = list(prompts)

            self._progress(f"Generating {len(self.prompts)} custom mockups...")
            for index, prompt in enumerate(self.prompts):
                image = GeneratedImage(id=_image_id(prompt.name, index), name=prompt.name)
                self._images[image.id] = image
                self._notify(image)

            watermark = not self.usage.is_premium()
            for index, image_id in enumerate(list(self._images)):
                self._launch(image_id, index, encoded, token, watermark)

            await asyncio.gather(self._copy_task, *self._tasks.values(), return_exceptions=True)

        except Exception as e:
            if token != self._run:
                return self.images
            logger.error(f"Asset generation failed: {e}")
            self.error = str(e) or "An unknown error occurred during generation."
            self._images = {}
            self._tasks = {}
            self.prompts = []
            self.state = RunState.ANALYZED
            self._progress("")
            return []

        if token != self._run:
            return self.images

        if not self.usage.is_premium():
            self.usage.increment_usage()
        self.state = RunState.DONE
        self._progress("")
        return self.images

    async def regenerate(self, image_id: str) -> GeneratedImage:
        """
        Re-run one mockup with its original prompt and image binding.

        Other mockups and the copy are untouched; usage is not incremented.
        Raises KeyError for an unknown id, ValueError while the mockup is still
        pending and LimitReached when a free user has no generations left.
        """
        if image_id not in self._images:
            raise KeyError(f"Could not find image {image_id!r} to regenerate")
        if self._images[image_id].status == ImageStatus.PENDING:
            raise ValueError(f"{self._images[image_id].name} is still generating")
        if not self.usage.can_generate():
            raise LimitReached(self.usage.daily_limit)

        token = self._run
        index = list(self._images).index(image_id)
        name = self._images[image_id].name
        self._patch(image_id, status=ImageStatus.PENDING, base64=None)

        try:
            encoded = await self._encode_uploads()
        except Exception as e:
            if token == self._run and image_id in self._images:
                logger.error(f"Failed to regenerate {name}: {e}")
                self._patch(image_id, status=ImageStatus.FAILED, base64=None)
                self.error = f"Failed to regenerate image: {name}"
            return self._images.get(image_id)
        if token != self._run:
            return self._images.get(image_id)

        task = self._launch(image_id, index, encoded, token, not self.usage.is_premium())
        attempt = self._attempts[image_id]
        await task

        image = self._images.get(image_id)
        if (
            image is not None
            and image.status == ImageStatus.FAILED
            and self._is_current(image_id, token, attempt)
        ):
            self.error = f"Failed to regenerate image: {name}"
        return image

    def export_bundle(self) -> ExportBundle:
        return build_export_bundle(self.images, self.copy, self.analysis)

    # ── Tasks ─────────────────────────────────────────────────────────────────

    async def _run_copy(self, analysis: AnalysisResult, token: int) -> None:
        try:
            copy = await self.service.generate_copy(analysis)
        except Exception as e:
            if token == self._run:
                logger.error(f"Failed to generate copy: {e}")
                self.copy_error = "Failed to generate listing copy."
                self.error = self.copy_error
            return
        if token == self._run:
            self.copy = copy

    def _launch(
        self,
        image_id: str,
        index: int,
        encoded: Sequence[EncodedImage],
        token: int,
        watermark: bool,
    ) -> asyncio.Task:
        attempt = self._attempts.get(image_id, 0) + 1
        self._attempts[image_id] = attempt
        task = asyncio.create_task(
            self._render(image_id, self.prompts[index], images_for_prompt(index, encoded),
                         token, attempt, watermark)
        )
        self._tasks[image_id] = task
        return task

    async def _render(
        self,
        image_id: str,
        prompt: MockupPrompt,
        images: List[EncodedImage],
        token: int,
        attempt: int,
        watermark: bool,
    ) -> None:
        try:
            data = await self.service.generate_mockup(images, prompt.prompt)
        except Exception as e:
            if self._is_current(image_id, token, attempt):
                logger.warning(f"Failed to generate {prompt.name}: {e}")
                self._patch(image_id, status=ImageStatus.FAILED, base64=None)
            return

        if not self._is_current(image_id, token, attempt):
            return
        if watermark:
            data = await self._watermarked(data)
            if not self._is_current(image_id, token, attempt):
                return
        self._patch(image_id, status=ImageStatus.COMPLETED, base64=data)

    async def _watermarked(self, data: str) -> str:
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, self.watermark, data)
        except WatermarkRenderError as e:
            logger.warning(f"Watermark skipped, using original image: {e}")
            return data

    async def _encode_uploads(self) -> List[EncodedImage]:
        loop = asyncio.get_running_loop()
        return list(await asyncio.gather(
            *(loop.run_in_executor(None, encode_image, p) for p in self.uploads)
        ))

    # ── Internal helpers ──────────────────────────────────────────────────────

    def _supersede(self) -> None:
        self._run += 1
        self._tasks = {}
        self._attempts = {}
        self._copy_task = None

    def _clear_assets(self) -> None:
        self.copy = None
        self.copy_error = None
        self.prompts = []
        self._images = {}

    def _is_current(self, image_id: str, token: int, attempt: int) -> bool:
        return (
            token == self._run
            and image_id in self._images
            and self._attempts.get(image_id) == attempt
        )

    def _patch(self, image_id: str, **changes) -> None:
        image = dataclasses.replace(self._images[image_id], **changes)
        self._images[image_id] = image
        self._notify(image)

    def _notify(self, image: GeneratedImage) -> None:
        if self.on_image:
            self.on_image(image)

    def _progress(self, msg: str) -> None:
        self.loading_message = msg
        if self.on_progress:
            self.on_progress(msg)


def _image_id(name: str, index: int) -> str:
    slug = re.sub(r"\s+", "-", name)
    return f"{slug}-{index}-{uuid.uuid4().hex[:8]}"
