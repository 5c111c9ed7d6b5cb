"""
Gemini service — the four generative calls behind a listing run.

  analyze_images          — product images → AnalysisResult
  generate_copy           — AnalysisResult → CopyResult (title, description, tags, materials)
  generate_mockup_prompts — AnalysisResult → 10 ordered MockupPrompts
  generate_mockup         — bound images + one prompt → data URI of the rendered mockup

All calls go through the async client (`client.aio`) so the orchestrator can
keep many of them in flight on one event loop. Transport errors propagate
untouched; a response that can't be coerced into the expected shape raises
MalformedModelResponse, and an image call without inline image data raises
NoImageReturned.
"""

from __future__ import annotations

import base64
import os
from typing import List, Optional, Sequence, Type, TypeVar

import json_repair
from google import genai
from google.genai import types
from pydantic import BaseModel
from rich.console import Console

from .errors import MalformedModelResponse, NoImageReturned
from .models import AnalysisResult, CopyResult, EncodedImage, MockupPlan, MockupPrompt
from .prompts import (
    ANALYSIS_INSTRUCTION,
    build_copy_prompt,
    build_mockup_plan_prompt,
    build_mockup_prompt,
)

console = Console()

TEXT_MODEL = os.environ.get("ETSY_OPTIMIZER_TEXT_MODEL", "gemini-2.5-flash")
IMAGE_MODEL = os.environ.get("ETSY_OPTIMIZER_IMAGE_MODEL", "gemini-2.5-flash-image")

T = TypeVar("T", bound=BaseModel)


def _strip_fences(raw: str) -> str:
    text = raw.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else text[3:]
        if text.endswith("```"):
            text = text[:-3]
        text = text.strip()
    return text


def parse_structured(raw: Optional[str], schema: Type[T], what: str) -> T:
    """Coerce a JSON-ish model response into `schema` or raise MalformedModelResponse."""
    text = _strip_fences(raw or "")
    if not text:
        raise MalformedModelResponse(f"Could not {what}. The model returned no content.")
    try:
        return schema.model_validate(json_repair.loads(text))
    except (ValueError, TypeError) as e:
        console.print(f"  [yellow]⚠ Failed to parse {schema.__name__} JSON: {text[:200]}[/yellow]")
        raise MalformedModelResponse(f"Could not {what}. The model returned an invalid format.") from e


def _image_parts(images: Sequence[EncodedImage]) -> List[types.Part]:
    return [types.Part.from_bytes(data=img.data, mime_type=img.mime_type) for img in images]


class GeminiService:
    """Thin async wrapper around one genai.Client."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        client: Optional[genai.Client] = None,
        text_model: str = TEXT_MODEL,
        image_model: str = IMAGE_MODEL,
    ) -> None:
        self.client = client or genai.Client(api_key=api_key or os.environ["GEMINI_API_KEY"])
        self.text_model = text_model
        self.image_model = image_model

    async def _generate_structured(self, contents, schema: Type[T], what: str) -> T:
        response = await self.client.aio.models.generate_content(
            model=self.text_model,
            contents=contents,
            config=types.GenerateContentConfig(
                response_mime_type="application/json",
                response_schema=schema,
            ),
        )
        return parse_structured(response.text, schema, what)

    async def analyze_images(self, images: Sequence[EncodedImage]) -> AnalysisResult:
        if not images:
            raise ValueError("analyze_images needs at least one image")
        contents = _image_parts(images) + [types.Part.from_text(text=ANALYSIS_INSTRUCTION)]
        return await self._generate_structured(contents, AnalysisResult, "analyze the image")

    async def generate_copy(self, analysis: AnalysisResult) -> CopyResult:
        return await self._generate_structured(
            build_copy_prompt(analysis), CopyResult, "generate listing copy"
        )

    async def generate_mockup_prompts(self, analysis: AnalysisResult) -> List[MockupPrompt]:
        plan = await self._generate_structured(
            build_mockup_plan_prompt(analysis), MockupPlan, "generate mockup ideas"
        )
        return plan.prompts

    async def generate_mockup(self, images: Sequence[EncodedImage], prompt: str) -> str:
        contents = _image_parts(images) + [
            types.Part.from_text(text=build_mockup_prompt(prompt, len(images)))
        ]
        response = await self.client.aio.models.generate_content(
            model=self.image_model,
            contents=contents,
            config=types.GenerateContentConfig(
                response_modalities=["IMAGE", "TEXT"],
            ),
        )
        for candidate in response.candidates or []:
            content = getattr(candidate, "content", None)
            for part in (content.parts if content else None) or []:
                inline = getattr(part, "inline_data", None)
                if inline and inline.data:
                    data = inline.data
                    if isinstance(data, bytes):
                        data = base64.b64encode(data).decode("ascii")
                    mime = inline.mime_type or "image/png"
                    return f"data:{mime};base64,{data}"

        raise NoImageReturned("Image generation failed. The model did not return an image.")
