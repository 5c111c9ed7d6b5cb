"""
categories.py — Closed set of Etsy product categories.

The analysis schema constrains `product_type` to one of PRODUCT_TYPE_LABELS.
Every label maps to exactly one ProductCategory, and every category owns one
CategoryTemplate: the copy emphasis line and the 10 ordered mockup shots the
planner asks Gemini to elaborate.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple


class ProductCategory(str, Enum):
    DIGITAL_TEMPLATE = "digital_template"
    PRINTABLE_ART = "printable_art"
    SVG_CUT_FILE = "svg_cut_file"
    STICKERS = "stickers"
    JEWELRY = "jewelry"
    CLOTHING = "clothing"
    HOME_DECOR = "home_decor"
    VINTAGE = "vintage"
    CRAFT_SUPPLIES = "craft_supplies"
    PHYSICAL_PRODUCT = "physical_product"


# Label offered to the model → category. Order is the order shown in prompts.
PRODUCT_TYPE_LABELS: Dict[str, ProductCategory] = {
    "Digital Template":      ProductCategory.DIGITAL_TEMPLATE,
    "Printable Art":         ProductCategory.PRINTABLE_ART,
    "Stickers":              ProductCategory.STICKERS,
    "SVG/Cut File":          ProductCategory.SVG_CUT_FILE,
    "Jewelry & Accessories": ProductCategory.JEWELRY,
    "Clothing & Apparel":    ProductCategory.CLOTHING,
    "Home & Living":         ProductCategory.HOME_DECOR,
    "Handmade Goods":        ProductCategory.PHYSICAL_PRODUCT,
    "Vintage":               ProductCategory.VINTAGE,
    "Craft Supplies":        ProductCategory.CRAFT_SUPPLIES,
    "Physical Product":      ProductCategory.PHYSICAL_PRODUCT,
}

DEFAULT_PRODUCT_TYPE = "Physical Product"


def normalize_product_type(value: object) -> str:
    """Return the canonical label for `value`, matching case-insensitively.

    Anything that is not one of the known labels becomes DEFAULT_PRODUCT_TYPE.
    """
    text = str(value or "").strip().lower()
    for label in PRODUCT_TYPE_LABELS:
        if label.lower() == text:
            return label
    return DEFAULT_PRODUCT_TYPE


def category_for(product_type: str) -> ProductCategory:
    return PRODUCT_TYPE_LABELS[normalize_product_type(product_type)]


@dataclass(frozen=True)
class CategoryTemplate:
    heading: str                 # how the prompt introduces the product
    copy_emphasis: str           # what the listing copy should stress
    shots: Tuple[str, ...]       # 10 mockup ideas, index 0 is the bundle/hero shot


TEMPLATES: Dict[ProductCategory, CategoryTemplate] = {
    ProductCategory.DIGITAL_TEMPLATE: CategoryTemplate(
        heading="This is a DIGITAL TEMPLATE (editable in Canva).",
        copy_emphasis=(
            "This is an EDITABLE CANVA TEMPLATE. Emphasize: instant download, easy "
            "customization, lifetime access, no Canva Pro required."
        ),
        shots=(
            "Hero Thumbnail - Premium bundle shot on modern surface",
            "What's Included Infographic - List of deliverables",
            "How It Works Infographic - 3-step guide",
            "Editable Features Infographic - Callouts showing editable elements",
            "Lifestyle Mockup - Design in context",
            "Device Mockup - Phone & tablet with Canva app",
            "Desktop Mockup - Laptop with Canva interface",
            "Social Media Preview - Instagram post mockup",
            "Thank You Card - Matching review request card",
            "Print & Share Ideas - Options infographic",
        ),
    ),
    ProductCategory.PRINTABLE_ART: CategoryTemplate(
        heading="This is PRINTABLE ART.",
        copy_emphasis=(
            "This is PRINTABLE ART. Emphasize: instant download, high resolution, "
            "multiple sizes, print-ready files."
        ),
        shots=(
            "Hero Frame Display - Art in beautiful frame on styled wall",
            "Gallery Wall Mockup - Part of curated gallery arrangement",
            "Room Context Shot - Art in styled room",
            "Size Comparison - Multiple frame sizes",
            "Lifestyle Vignette - With plants, books, decor",
            "What's Included - File formats and sizes",
            "How to Print - Download, print, frame guide",
            "Gift Presentation - Wrapped as gift",
            "Detail Close-up - Print quality",
            "Seasonal Styling - With seasonal decor",
        ),
    ),
    ProductCategory.SVG_CUT_FILE: CategoryTemplate(
        heading="This is an SVG/CUT FILE.",
        copy_emphasis=(
            "This is an SVG/CUT FILE for Cricut/Silhouette. Emphasize: compatible "
            "formats (SVG, PNG, DXF, EPS), instant download, scalable."
        ),
        shots=(
            "Hero Product Display - Finished projects on multiple materials",
            "Cricut/Silhouette Mockup - On cutting machine",
            "T-Shirt Application - Heat transfer vinyl",
            "Tumbler/Mug Mockup - Vinyl on drinkware",
            "Car Decal Preview - Vehicle sticker",
            "Wood Sign Project - Cut or stenciled",
            "Paper Craft Application - Card/scrapbook use",
            "File Formats Included - SVG, PNG, DXF, EPS",
            "Size Scalability - Various sizes",
            "Color Variations - Different colors",
        ),
    ),
    ProductCategory.STICKERS: CategoryTemplate(
        heading="These are STICKERS.",
        copy_emphasis=(
            "These are STICKERS. Emphasize: material quality (vinyl, matte, glossy), "
            "waterproof, size options, uses (laptop, water bottle, planner)."
        ),
        shots=(
            "Hero Sticker Sheet - Collection on clean background",
            "Laptop Application - On laptop lid",
            "Water Bottle Display - On hydro flask",
            "Planner/Journal Use - Decorating pages",
            "Phone Case Styling - On or around phone",
            "Size Reference - Next to coin/pen",
            "Packaging Preview - Ready to ship",
            "Material Quality - Vinyl/matte/glossy closeup",
            "Weatherproof Demo - With water droplets",
            "Gift Set Display - Arranged as gift",
        ),
    ),
    ProductCategory.JEWELRY: CategoryTemplate(
        heading="This is JEWELRY/ACCESSORIES.",
        copy_emphasis=(
            "This is JEWELRY/ACCESSORIES. Emphasize: materials (sterling silver, "
            "gold-filled, gemstones), dimensions, hypoallergenic, gift-ready packaging."
        ),
        shots=(
            "Hero Product Shot - On elegant display",
            "Model Wearing - Showing scale and styling",
            "Detail Macro Shot - Craftsmanship closeup",
            "Gift Box Presentation - Ready to give",
            "Lifestyle Flat Lay - With flowers, fabric",
            "Size Reference - Next to ruler/common object",
            "Styling Options - Multiple ways to wear",
            "Material Close-up - Metal quality/shine",
            "Collection Display - With coordinating pieces",
            "Occasion Styling - For specific events",
        ),
    ),
    ProductCategory.CLOTHING: CategoryTemplate(
        heading="This is CLOTHING/APPAREL.",
        copy_emphasis=(
            "This is CLOTHING/APPAREL. Emphasize: fabric composition, sizing, care "
            "instructions, print/embroidery quality, fit description."
        ),
        shots=(
            "Hero Model Shot - Worn in styled setting",
            "Flat Lay Display - With accessories",
            "Detail Close-up - Fabric, stitching, print",
            "Hanger/Rack Display - On stylish hanger",
            "Back View - Showing full garment",
            "Styled Outfit - Complete look",
            "Size Range - Fit demonstration",
            "Folded/Packaged - Ready to ship",
            "Lifestyle Action - Model in motion",
            "Care Tag/Label - Brand details",
        ),
    ),
    ProductCategory.HOME_DECOR: CategoryTemplate(
        heading="This is HOME & LIVING.",
        copy_emphasis=(
            "This is HOME & LIVING. Emphasize: dimensions, materials, "
            "installation/display options, room styling ideas, care instructions."
        ),
        shots=(
            "Hero Room Setting - In styled room",
            "Detail Close-up - Texture and craftsmanship",
            "Scale Reference - With furniture",
            "Multiple Angles - Front, side, top views",
            "Lifestyle Vignette - With decor, plants",
            "Seasonal Styling - Holiday/seasonal decor",
            "Gift Presentation - Wrapped as gift",
            "In-Use Shot - Being used as intended",
            "Color/Style Variants - Options available",
            "Packaging - How it arrives",
        ),
    ),
    ProductCategory.VINTAGE: CategoryTemplate(
        heading="This is VINTAGE.",
        copy_emphasis=(
            "This is VINTAGE. Emphasize: age/era, condition details, provenance, "
            "measurements, authenticity. Be honest about imperfections."
        ),
        shots=(
            "Hero Vintage Shot - Era-appropriate styling",
            "Detail Close-ups - Marks, labels, patina",
            "Condition Documentation - Any wear/character",
            "Size/Scale Reference - With ruler",
            "Styled Modern - In modern decor",
            "Styled Period - Period-appropriate setting",
            "Multiple Angles - Full rotation",
            "Functionality Demo - If functional",
            "Collection Context - With vintage items",
            "Natural Light Shot - True colors",
        ),
    ),
    ProductCategory.CRAFT_SUPPLIES: CategoryTemplate(
        heading="These are CRAFT SUPPLIES.",
        copy_emphasis=(
            "These are CRAFT SUPPLIES. Emphasize: quantity, dimensions/weights, "
            "material, suggested uses, compatibility with other supplies."
        ),
        shots=(
            "Hero Supply Display - Attractively arranged",
            "Quantity/Count Shot - How many included",
            "Size Reference - Next to ruler",
            "Color/Variety Display - Full range",
            "Project Example - Finished project",
            "Detail Quality - Material closeup",
            "Packaging - How they arrive",
            "Work in Progress - Being used",
            "Compatibility Demo - With tools",
            "Comparison Shot - Value demonstration",
        ),
    ),
    ProductCategory.PHYSICAL_PRODUCT: CategoryTemplate(
        heading="This is a PHYSICAL PRODUCT.",
        copy_emphasis=(
            "This is a PHYSICAL PRODUCT. Emphasize: materials, dimensions, quality "
            "craftsmanship, shipping details, handmade aspects."
        ),
        shots=(
            "Hero Product Shot - Clean, professional",
            "Lifestyle Context - In use",
            "Detail Close-up - Quality details",
            "Scale Reference - Size context",
            "Multiple Angles - Various viewpoints",
            "Packaging Display - Shipping/gift",
            "In-Use Action - Being used",
            "Styled Flat Lay - With props",
            "Gift Presentation - Gift-ready",
            "Feature Highlight - Key benefit",
        ),
    ),
}


def template_for(category: ProductCategory) -> CategoryTemplate:
    return TEMPLATES[category]
