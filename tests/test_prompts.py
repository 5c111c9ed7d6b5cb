from etsy_optimizer.categories import ProductCategory, template_for
from etsy_optimizer.prompts import (
    ANALYSIS_INSTRUCTION,
    build_copy_prompt,
    build_mockup_plan_prompt,
    build_mockup_prompt,
)


def test_analysis_instruction_lists_categories():
    assert "SVG/Cut File" in ANALYSIS_INSTRUCTION
    assert "Physical Product" in ANALYSIS_INSTRUCTION


def test_copy_prompt_follows_category(analysis):
    prompt = build_copy_prompt(analysis)
    assert template_for(ProductCategory.DIGITAL_TEMPLATE).copy_emphasis in prompt
    assert analysis.theme in prompt

    jewelry = analysis.model_copy(update={"product_type": "Jewelry & Accessories"})
    assert template_for(ProductCategory.JEWELRY).copy_emphasis in build_copy_prompt(jewelry)


def test_plan_prompt_numbers_all_ten_shots(analysis):
    prompt = build_mockup_plan_prompt(analysis)
    shots = template_for(analysis.category).shots
    for i, shot in enumerate(shots, start=1):
        assert f"{i}. {shot}" in prompt
    assert "#F4E1D2" in prompt


def test_mockup_prompt_wording_depends_on_image_count():
    single = build_mockup_prompt("on a desk", 1)
    bundle = build_mockup_prompt("on a desk", 3)
    assert "single provided product design" in single
    assert "bundle" in bundle
    assert single.endswith("Creative Prompt: on a desk")
    assert bundle.endswith("Creative Prompt: on a desk")
