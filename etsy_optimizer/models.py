"""
Data model shared by the services, the orchestrator and the exporter.

Pydantic models double as Gemini response schemas (AnalysisResult,
CopyResult, MockupPlan); their validators normalise what the model returns
and turn anything unusable into a ValidationError, which the service layer
reports as MalformedModelResponse.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from .categories import (
    PRODUCT_TYPE_LABELS,
    ProductCategory,
    category_for,
    normalize_product_type,
)

MOCKUP_COUNT = 10
TAG_COUNT = 13
TAG_MAX_CHARS = 20
MATERIAL_MAX_CHARS = 20

ProductTypeLabel = Literal[
    "Digital Template",
    "Printable Art",
    "Stickers",
    "SVG/Cut File",
    "Jewelry & Accessories",
    "Clothing & Apparel",
    "Home & Living",
    "Handmade Goods",
    "Vintage",
    "Craft Supplies",
    "Physical Product",
]

PlanType = Literal["free", "pro", "lifetime"]
PAID_PLANS = ("pro", "lifetime")


# ── Uploaded images ───────────────────────────────────────────────────────────

@dataclass(frozen=True)
class EncodedImage:
    data: bytes       # raw file bytes, sent as an inline part
    mime_type: str    # image/png or image/jpeg


# ── Gemini structured outputs ─────────────────────────────────────────────────

class AnalysisResult(BaseModel):
    theme: str = Field(
        description=(
            "A concise, marketable description of the design's theme and style, "
            "e.g. 'Minimalist Wedding Invitation', '90s Hip Hop Birthday Party'."
        )
    )
    dominant_colors: List[str] = Field(
        description="5 dominant HEX color codes from the design, from most to least prominent."
    )
    key_text: List[str] = Field(
        description="Key text phrases or descriptive elements from the design, e.g. 'You're Invited'."
    )
    event_type: str = Field(
        description=(
            "The occasion, use case, or purpose, e.g. 'Home Decor', 'Gift Giving', "
            "'Birthday Party', 'Wedding', 'Halloween Party'."
        )
    )
    product_type: ProductTypeLabel = Field(
        description="The Etsy product category. Must be one of: " + ", ".join(PRODUCT_TYPE_LABELS) + "."
    )
    style: Optional[str] = Field(default=None, description="Visual style in 2-4 words.")
    target_audience: Optional[str] = Field(default=None, description="Who is most likely to buy this.")

    @field_validator("dominant_colors", mode="before")
    @classmethod
    def _normalize_hex(cls, value):
        colors = []
        for raw in value or []:
            h = str(raw).strip().upper()
            if not h:
                continue
            if not h.startswith("#"):
                h = "#" + h
            colors.append(h)
        return colors

    @field_validator("product_type", mode="before")
    @classmethod
    def _normalize_product_type(cls, value):
        return normalize_product_type(value)

    @property
    def category(self) -> ProductCategory:
        return category_for(self.product_type)

    def to_metadata(self) -> Dict[str, object]:
        """Metadata record written into the export archive (camelCase keys)."""
        record: Dict[str, object] = {
            "theme": self.theme,
            "dominantColors": list(self.dominant_colors),
            "keyText": list(self.key_text),
            "eventType": self.event_type,
            "productType": self.product_type,
            "category": self.category.value,
        }
        if self.style:
            record["style"] = self.style
        if self.target_audience:
            record["targetAudience"] = self.target_audience
        return record


class CopyResult(BaseModel):
    title: str = Field(
        description=(
            "One highly-optimized, concise Etsy title (under 140 characters) that uses "
            "natural language SEO. Clearly state the product type and key benefits."
        )
    )
    description: str = Field(
        description=(
            "A comprehensive Etsy description. Start with a strong hook. Use emoji-prefixed "
            "bullet points for what's included, key features and benefits. Include sections "
            "like 'How It Works', 'What You Receive', shipping info or care instructions as appropriate."
        )
    )
    tags: List[str] = Field(
        description=(
            "Exactly 13 SEO-optimized, multi-word Etsy tags. CRITICAL: each tag MUST be "
            "20 characters or less (including spaces)."
        )
    )
    materials: List[str] = Field(
        description=(
            "Materials for Etsy's materials field. CRITICAL: each material MUST be "
            "20 characters or less (including spaces)."
        )
    )

    @field_validator("tags", mode="before")
    @classmethod
    def _normalize_tags(cls, value):
        seen = set()
        tags: List[str] = []
        for raw in value or []:
            tag = " ".join(str(raw).split())
            if not tag or len(tag) > TAG_MAX_CHARS or tag.lower() in seen:
                continue
            seen.add(tag.lower())
            tags.append(tag)
        if len(tags) < TAG_COUNT:
            raise ValueError(f"expected {TAG_COUNT} usable tags, got {len(tags)}")
        return tags[:TAG_COUNT]

    @field_validator("materials", mode="before")
    @classmethod
    def _normalize_materials(cls, value):
        materials = []
        for raw in value or []:
            m = " ".join(str(raw).split())
            if m and len(m) <= MATERIAL_MAX_CHARS:
                materials.append(m)
        return materials


class MockupPrompt(BaseModel):
    name: str = Field(description="A short, descriptive name for the mockup, e.g. 'Coffee Shop Table Mockup'.")
    prompt: str = Field(
        description=(
            "A detailed prompt for an AI image generator. It must instruct the generator to "
            "place the user's product design into the scene and reflect the design's theme, "
            "style and context."
        )
    )


class MockupPlan(BaseModel):
    prompts: List[MockupPrompt] = Field(description="Exactly 10 unique and creative mockup prompts.")

    @field_validator("prompts")
    @classmethod
    def _exactly_ten(cls, value):
        if len(value) < MOCKUP_COUNT:
            raise ValueError(f"expected {MOCKUP_COUNT} mockup prompts, got {len(value)}")
        return value[:MOCKUP_COUNT]


# ── Generated mockups ─────────────────────────────────────────────────────────

class ImageStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class GeneratedImage:
    id: str
    name: str
    base64: Optional[str] = None                # data URI once completed
    status: ImageStatus = ImageStatus.PENDING


# ── Entitlement ───────────────────────────────────────────────────────────────

class UserState(BaseModel):
    plan: PlanType = "free"
    daily_usage: int = Field(default=0, ge=0)
    last_usage_date: date
    email: Optional[str] = None
    subscription_id: Optional[str] = None

    @property
    def is_premium(self) -> bool:
        return self.plan in PAID_PLANS
