import pytest
from pydantic import ValidationError

from conftest import TAGS
from etsy_optimizer.categories import (
    PRODUCT_TYPE_LABELS,
    TEMPLATES,
    ProductCategory,
    category_for,
    template_for,
)
from etsy_optimizer.models import (
    MOCKUP_COUNT,
    TAG_COUNT,
    AnalysisResult,
    CopyResult,
    MockupPlan,
    MockupPrompt,
)


def _copy(tags, materials=("Paper",)):
    return CopyResult(title="t", description="d", tags=list(tags), materials=list(materials))


def test_tags_are_trimmed_deduplicated_and_capped():
    raw = ["  Wedding   Invitation "] + TAGS + ["WEDDING INVITATION", "this tag is far too long to use"]
    copy = _copy(raw)
    assert len(copy.tags) == TAG_COUNT
    assert copy.tags[0] == "Wedding Invitation"
    assert "wedding invitation" not in copy.tags
    assert all(len(t) <= 20 for t in copy.tags)


def test_too_few_usable_tags_is_rejected():
    with pytest.raises(ValidationError):
        _copy(TAGS[:10] + ["x" * 25, "y" * 30, "z" * 21])


def test_long_materials_are_dropped():
    copy = _copy(TAGS, materials=["Cardstock", "Premium matte archival paper stock", " Ink "])
    assert copy.materials == ["Cardstock", "Ink"]


def test_analysis_normalises_colors_and_product_type():
    a = AnalysisResult(
        theme="Retro Sticker Pack",
        dominant_colors=["ff6b6b", "#20b2aa", "  #ffffff "],
        key_text=["Stay Rad"],
        event_type="Gift Giving",
        product_type="stickers",
    )
    assert a.dominant_colors == ["#FF6B6B", "#20B2AA", "#FFFFFF"]
    assert a.product_type == "Stickers"
    assert a.category == ProductCategory.STICKERS


def test_unknown_product_type_becomes_physical_product(analysis):
    edited = AnalysisResult.model_validate({**analysis.model_dump(), "product_type": "Spaceship"})
    assert edited.product_type == "Physical Product"
    assert edited.category == ProductCategory.PHYSICAL_PRODUCT


def test_metadata_uses_camel_case(analysis):
    meta = analysis.to_metadata()
    assert meta["dominantColors"] == analysis.dominant_colors
    assert meta["keyText"] == analysis.key_text
    assert meta["eventType"] == "Wedding"
    assert meta["productType"] == "Digital Template"
    assert meta["category"] == "digital_template"
    assert "style" not in meta


def test_model_schema_uses_field_names():
    properties = AnalysisResult.model_json_schema()["properties"]
    assert {"dominant_colors", "key_text", "event_type", "product_type"} <= set(properties)
    assert "dominantColors" not in properties
    parsed = AnalysisResult.model_validate({
        "theme": "Halloween Party",
        "dominant_colors": ["#000000"],
        "key_text": ["Boo"],
        "event_type": "Halloween",
        "product_type": "Digital Template",
    })
    assert parsed.to_metadata()["dominantColors"] == ["#000000"]


def test_mockup_plan_truncates_to_ten_and_rejects_fewer():
    many = [MockupPrompt(name=f"n{i}", prompt=f"p{i}") for i in range(12)]
    assert len(MockupPlan(prompts=many).prompts) == MOCKUP_COUNT
    with pytest.raises(ValidationError):
        MockupPlan(prompts=many[:9])


def test_every_label_maps_to_a_template_with_ten_shots():
    assert category_for("Handmade Goods") == ProductCategory.PHYSICAL_PRODUCT
    for label in PRODUCT_TYPE_LABELS:
        template = template_for(category_for(label))
        assert len(template.shots) == MOCKUP_COUNT
    assert set(TEMPLATES) == set(ProductCategory)
