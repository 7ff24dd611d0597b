from __future__ import annotations
from dataclasses import dataclass, replace
from enum import Enum
import os

from dotenv import load_dotenv

from .exceptions import InvalidConfig

# Load environment variables
load_dotenv()

DEFAULT_QUALITY = float(os.getenv("GRIDSPLIT_DEFAULT_QUALITY", "0.92"))


class OutputFormat(Enum):
    """Supported tile encodings: (Pillow format name, file extension, MIME type, lossy)."""
    PNG = ("PNG", "png", "image/png", False)
    JPEG = ("JPEG", "jpg", "image/jpeg", True)
    WEBP = ("WEBP", "webp", "image/webp", True)

    def __init__(self, pil_format: str, extension: str, mime: str, lossy: bool):
        self.pil_format = pil_format
        self.extension = extension
        self.mime = mime
        self.lossy = lossy

    @classmethod
    def from_mime(cls, mime: str) -> OutputFormat:
        for fmt in cls:
            if fmt.mime == mime.lower():
                return fmt
        raise InvalidConfig(f"Unsupported output MIME type: {mime}")


@dataclass(frozen=True)
class EncodeOptions:
    """Output format plus quality in [0, 1] (ignored for lossless formats)."""
    format: OutputFormat = OutputFormat.PNG
    quality: float = DEFAULT_QUALITY

    def __post_init__(self):
        if not 0.0 <= self.quality <= 1.0:
            raise InvalidConfig(f"quality must be within 0..1, got {self.quality}")

    @property
    def pil_quality(self) -> int:
        """Map [0, 1] onto Pillow's 1..100 quality scale."""
        return max(1, min(100, int(round(self.quality * 100))))

    def with_changes(self, **changes) -> EncodeOptions:
        return replace(self, **changes)
