"""
errors.py — Error taxonomy for the listing pipeline.

  UploadError            — bad upload, recovered locally (user re-prompted)
    UnsupportedMediaType — not a PNG/JPEG
    TooManyFiles         — more than MAX_FILES uploads
  ReadError              — unreadable file, aborts the current action only
  MalformedModelResponse — Gemini returned an unparseable / wrong-shape payload
  NoImageReturned        — one mockup call came back without an image
  WatermarkRenderError   — watermarking failed; caller falls back to the original
  LimitReached           — free-tier daily limit hit (upsell, not a generic error)
  NotAnalyzed            — generation requested before analysis
  NoUploads              — analysis requested with nothing uploaded
  NothingToExport        — ZIP requested before any asset exists
"""

from __future__ import annotations


class EtsyOptimizerError(Exception):
    """Base class for every error raised by this package."""


class UploadError(EtsyOptimizerError):
    pass


class UnsupportedMediaType(UploadError):
    pass


class TooManyFiles(UploadError):
    pass


class ReadError(EtsyOptimizerError):
    pass


class MalformedModelResponse(EtsyOptimizerError):
    pass


class NoImageReturned(EtsyOptimizerError):
    pass


class WatermarkRenderError(EtsyOptimizerError):
    pass


class LimitReached(EtsyOptimizerError):
    def __init__(self, limit: int) -> None:
        super().__init__(f"Daily free limit of {limit} generations reached")
        self.limit = limit


class NotAnalyzed(EtsyOptimizerError):
    pass


class NoUploads(EtsyOptimizerError):
    pass


class NothingToExport(EtsyOptimizerError):
    pass
