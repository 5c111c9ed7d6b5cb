"""
encoder.py — Uploaded files → inline image parts for Gemini.

accept_uploads() is the upload boundary (PNG/JPEG only, at most MAX_FILES);
encode_image() assumes an accepted file and only fails when it can't be read.
"""

from __future__ import annotations

import base64
import binascii
import re
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

from .errors import ReadError, TooManyFiles, UnsupportedMediaType, UploadError
from .models import EncodedImage

MAX_FILES = 5

MIME_BY_EXT = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
}

_DATA_URI_RE = re.compile(r"^data:(?P<mime>[\w/+.-]+);base64,(?P<data>.*)$", re.DOTALL)


def mime_for(path: Path) -> str:
    mime = MIME_BY_EXT.get(Path(path).suffix.lower())
    if mime is None:
        raise UnsupportedMediaType(f"{Path(path).name}: please upload valid PNG or JPG files")
    return mime


def accept_uploads(
    paths: Iterable[Path], existing: Sequence[Path] = ()
) -> Tuple[List[Path], Optional[UploadError]]:
    """Validate new uploads against what is already uploaded.

    Returns (combined list, last rejection or None). Non PNG/JPEG files are
    skipped with UnsupportedMediaType; once MAX_FILES is reached the rest of
    the batch is dropped with TooManyFiles.
    """
    accepted = list(existing)
    rejection: Optional[UploadError] = None
    for p in paths:
        p = Path(p)
        if len(accepted) >= MAX_FILES:
            rejection = TooManyFiles(f"You can upload a maximum of {MAX_FILES} images.")
            break
        try:
            mime_for(p)
        except UnsupportedMediaType as e:
            rejection = e
            continue
        accepted.append(p)
    return accepted, rejection


def encode_image(path: Path) -> EncodedImage:
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise ReadError(f"Could not read {path.name}: {e}") from e
    return EncodedImage(data=data, mime_type=MIME_BY_EXT.get(path.suffix.lower(), "image/png"))


# ── Data URIs ─────────────────────────────────────────────────────────────────

def to_data_uri(data: bytes, mime_type: str) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def from_data_uri(uri: str) -> Tuple[bytes, str]:
    """Split a `data:<mime>;base64,<payload>` URI into (bytes, mime)."""
    m = _DATA_URI_RE.match(uri or "")
    if not m:
        raise ValueError("not a base64 data URI")
    try:
        return base64.b64decode(m.group("data"), validate=True), m.group("mime")
    except binascii.Error as e:
        raise ValueError(f"invalid base64 payload: {e}") from e
