from __future__ import annotations

import asyncio
import io
from collections import Counter
from datetime import date
from typing import List, Optional

import pytest
from PIL import Image

from etsy_optimizer.encoder import to_data_uri
from etsy_optimizer.errors import MalformedModelResponse, NoImageReturned
from etsy_optimizer.models import AnalysisResult, CopyResult, MockupPrompt
from etsy_optimizer.usage import InMemoryRepository, UsageStore

TAGS = [
    "wedding invitation", "boho wedding", "floral invite", "canva template",
    "editable invite", "rustic wedding", "printable invite", "wedding suite",
    "save the date", "greenery wedding", "diy invitation", "digital download",
    "minimalist invite",
]


def png_bytes(size=(64, 48), mode="RGB", color=(200, 120, 80)) -> bytes:
    buf = io.BytesIO()
    Image.new(mode, size, color).save(buf, format="PNG")
    return buf.getvalue()


def png_data_uri(size=(64, 48), mode="RGB") -> str:
    return to_data_uri(png_bytes(size, mode), "image/png")


class Clock:
    """Settable stand-in for the store's `today` callable."""

    def __init__(self, today: date) -> None:
        self.value = today

    def __call__(self) -> date:
        return self.value


class FakeService:
    """In-memory stand-in for GeminiService; records every call."""

    def __init__(
        self,
        analysis: AnalysisResult,
        copy: CopyResult,
        prompts: List[MockupPrompt],
        fail_prompts=(),
        copy_error: Optional[Exception] = None,
        planner_error: Optional[Exception] = None,
        gate: Optional[asyncio.Event] = None,
    ) -> None:
        self.analysis = analysis
        self.copy = copy
        self.prompts = prompts
        self.fail_prompts = set(fail_prompts)
        self.copy_error = copy_error
        self.planner_error = planner_error
        self.gate = gate
        self.calls = Counter()
        self.mockup_calls = []

    async def analyze_images(self, images):
        self.calls["analyze"] += 1
        return self.analysis

    async def generate_copy(self, analysis):
        self.calls["copy"] += 1
        await asyncio.sleep(0)
        if self.copy_error:
            raise self.copy_error
        return self.copy

    async def generate_mockup_prompts(self, analysis):
        self.calls["prompts"] += 1
        if self.planner_error:
            raise self.planner_error
        return list(self.prompts)

    async def generate_mockup(self, images, prompt):
        self.calls["mockup"] += 1
        self.mockup_calls.append((list(images), prompt))
        if self.gate is not None:
            await self.gate.wait()
        await asyncio.sleep(0)
        if prompt in self.fail_prompts:
            raise NoImageReturned("Image generation failed. The model did not return an image.")
        return png_data_uri()


@pytest.fixture
def analysis() -> AnalysisResult:
    return AnalysisResult(
        theme="Boho Floral Wedding Invitation",
        dominant_colors=["#F4E1D2", "#A3B18A", "#588157", "#3A5A40", "#DAD7CD"],
        key_text=["You're Invited", "Save the Date"],
        event_type="Wedding",
        product_type="Digital Template",
    )


@pytest.fixture
def copy_result() -> CopyResult:
    return CopyResult(
        title="Boho Wedding Invitation Template, Editable Canva Invite",
        description="✨ Instant download\n🎨 Edit in Canva",
        tags=TAGS,
        materials=["Digital File", "Canva Template"],
    )


@pytest.fixture
def prompts() -> List[MockupPrompt]:
    return [MockupPrompt(name=f"Mockup {i}", prompt=f"scene {i}") for i in range(10)]


@pytest.fixture
def clock() -> Clock:
    return Clock(date(2026, 3, 14))


@pytest.fixture
def store(clock) -> UsageStore:
    return UsageStore(InMemoryRepository(), today=clock)


@pytest.fixture
def uploads(tmp_path):
    paths = []
    for i in range(2):
        p = tmp_path / f"design_{i}.png"
        p.write_bytes(png_bytes(color=(40 * i, 90, 160)))
        paths.append(p)
    return paths


@pytest.fixture
def malformed() -> MalformedModelResponse:
    return MalformedModelResponse("Could not generate mockup ideas. The model returned an invalid format.")
