# prompts.py
# Prompt text for the four Gemini calls. Category-specific wording lives in
# categories.py; response shapes live in models.py.

from __future__ import annotations

from .categories import PRODUCT_TYPE_LABELS, template_for
from .models import MOCKUP_COUNT, TAG_COUNT, TAG_MAX_CHARS, AnalysisResult

ANALYSIS_INSTRUCTION = (
    "Analyze this product image(s) for an Etsy listing. Identify: "
    "1) Theme/style, "
    "2) Dominant colors (5 HEX codes), "
    "3) Key text or descriptive elements, "
    "4) Occasion/use case, "
    f"5) Product category ({', '.join(PRODUCT_TYPE_LABELS)}). "
    "Multiple images are variations of the same product."
)

BUNDLE_MOCKUP_RULES = """\
You are a professional mockup generator. Your task is to place the provided product images onto a single background to create a composite "bundle" or "collection" image.
**CRITICAL RULE: You MUST treat the provided images as final, physical prints. DO NOT redraw, regenerate, blend, or alter the content within the images in any way. The text and design on them must be preserved with 100% accuracy.**
Follow the creative prompt below to determine the background and scene, but apply the critical rule above all else.
Creative Prompt: {prompt}"""

SINGLE_MOCKUP_RULES = """\
You are a professional mockup generator. Your task is to place the single provided product design into a realistic mockup scene.
**CRITICAL RULE: You MUST treat the provided image as a final, physical print. DO NOT redraw, regenerate, or alter the content of the image. The text and design must be preserved with 100% accuracy.**
Follow the creative prompt below to create the final image.
Creative Prompt: {prompt}"""


def _analysis_block(analysis: AnalysisResult, with_colors: bool) -> str:
    lines = [
        f"- Theme: {analysis.theme}",
        f"- Product Type: {analysis.product_type}",
        f"- Occasion/Use: {analysis.event_type}",
    ]
    if with_colors:
        lines.append(f"- Dominant Colors: {', '.join(analysis.dominant_colors)}")
    lines.append(f"- Key Elements: {', '.join(analysis.key_text)}")
    if analysis.style:
        lines.append(f"- Style: {analysis.style}")
    if analysis.target_audience:
        lines.append(f"- Target Audience: {analysis.target_audience}")
    return "\n".join(lines)


def build_copy_prompt(analysis: AnalysisResult) -> str:
    template = template_for(analysis.category)
    return (
        f"{template.copy_emphasis}\n\n"
        "Based on the following product analysis, generate compelling Etsy listing copy.\n"
        "Analysis:\n"
        f"{_analysis_block(analysis, with_colors=False)}\n\n"
        "Follow Etsy's latest SEO guidelines. Create:\n"
        "- ONE concise, keyword-rich title (under 140 characters)\n"
        "- ONE comprehensive description with clear sections and emoji bullet points\n"
        f"- {TAG_COUNT} optimized multi-word tags (each {TAG_MAX_CHARS} characters or less)\n"
        f"- A materials list appropriate for this product type (each {TAG_MAX_CHARS} characters or less)"
    )


def build_mockup_plan_prompt(analysis: AnalysisResult) -> str:
    template = template_for(analysis.category)
    shots = "\n".join(f"{i}. {shot}" for i, shot in enumerate(template.shots, start=1))
    colors = ", ".join(analysis.dominant_colors)
    return (
        f"Based on the product analysis, generate {MOCKUP_COUNT} diverse, creative mockup ideas "
        "for an Etsy listing.\n\n"
        "Product Analysis:\n"
        f"{_analysis_block(analysis, with_colors=True)}\n\n"
        f"{template.heading} Generate {MOCKUP_COUNT} prompts, in this order:\n"
        f"{shots}\n\n"
        "The first prompt is a bundle shot that shows every uploaded variation together.\n"
        f"For each, generate a detailed AI image prompt incorporating the theme ({analysis.theme}) "
        f"and colors ({colors})."
    )


def build_mockup_prompt(prompt: str, image_count: int) -> str:
    rules = BUNDLE_MOCKUP_RULES if image_count > 1 else SINGLE_MOCKUP_RULES
    return rules.format(prompt=prompt)
