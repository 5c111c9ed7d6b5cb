"""
zip_exporter.py — Bundle listing assets into a ZIP file.

Creates organized ZIP with:
  generated_mockups/  — every completed mockup, <name_with_underscores>.png|jpg
  listing_copy/       — title.txt, description.txt, tags.csv, materials.csv
  metadata.json       — the product analysis
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
import re
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from .errors import NothingToExport
from .models import AnalysisResult, CopyResult, GeneratedImage, ImageStatus

logger = logging.getLogger(__name__)

ZIP_NAME = "Etsy_Design_Optimizer_Assets.zip"
IMAGES_FOLDER = "generated_mockups"
COPY_FOLDER = "listing_copy"
METADATA_FILE = "metadata.json"


@dataclass
class ExportBundle:
    """What the orchestrator hands to the archive writer."""
    images: List[Tuple[str, str, bool]] = field(default_factory=list)   # (filename, data, is_base64)
    copy_files: List[Tuple[str, str]] = field(default_factory=list)     # (filename, text)
    metadata: Optional[str] = None                                      # analysis JSON


def mockup_filename(image: GeneratedImage) -> str:
    ext = "png" if (image.base64 or "").startswith("data:image/png") else "jpg"
    stem = re.sub(r"\s+", "_", image.name)
    return f"{stem}.{ext}"


def build_export_bundle(
    images: Sequence[GeneratedImage],
    copy: Optional[CopyResult],
    analysis: Optional[AnalysisResult],
) -> ExportBundle:
    """
    Collect exportable assets. Only completed mockups are included.

    Raises NothingToExport when there is neither a completed mockup nor copy.
    """
    completed = [img for img in images if img.status == ImageStatus.COMPLETED]
    if not completed and copy is None:
        raise NothingToExport("No assets have been generated to download.")

    bundle = ExportBundle()
    for img in completed:
        if not img.base64:
            continue
        payload = img.base64.split(",", 1)[1] if "," in img.base64 else img.base64
        bundle.images.append((mockup_filename(img), payload, True))

    if copy is not None:
        bundle.copy_files = [
            ("title.txt", copy.title),
            ("description.txt", copy.description),
            ("tags.csv", ",".join(copy.tags)),
            ("materials.csv", ",".join(copy.materials)),
        ]

    if analysis is not None:
        bundle.metadata = json.dumps(analysis.to_metadata(), indent=2)

    return bundle


def create_listing_zip(bundle: ExportBundle, output_dir: Path) -> Optional[Path]:
    """
    Write `bundle` to output_dir/Etsy_Design_Optimizer_Assets.zip.

    Returns:
        Path to created ZIP file, or None on failure.
    """
    zip_path = Path(output_dir) / ZIP_NAME
    try:
        zip_path.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(zip_path, "w", zipfile.ZIP_DEFLATED) as zf:
            # Mockups
            for filename, data, is_base64 in bundle.images:
                raw = base64.b64decode(data) if is_base64 else data.encode("utf-8")
                zf.writestr(f"{IMAGES_FOLDER}/{filename}", raw)

            # Copy
            for filename, text in bundle.copy_files:
                zf.writestr(f"{COPY_FOLDER}/{filename}", text)

            # Analysis
            if bundle.metadata is not None:
                zf.writestr(METADATA_FILE, bundle.metadata)

    except (OSError, binascii.Error) as e:
        logger.warning(f"ZIP creation failed: {e}")
        return None

    logger.info(f"ZIP created: {zip_path.name} ({zip_path.stat().st_size // 1024} KB)")
    return zip_path
