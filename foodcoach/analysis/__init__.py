from __future__ import annotations

from .client import AnalysisError, VisionAnalysisClient
from .images import ImagePayload, ImageRejected, load_image
from .models import AnalysisResult

__all__ = [
    "AnalysisError",
    "AnalysisResult",
    "ImagePayload",
    "ImageRejected",
    "VisionAnalysisClient",
    "load_image",
]
