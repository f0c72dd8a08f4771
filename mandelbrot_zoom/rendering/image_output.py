"""
Image export for rendered pixel buffers.

PNG files carry the render parameters as a JSON text chunk; JPEG files get a
companion ``.json`` file since they cannot hold rich metadata.
"""

import numpy as np
from typing import Dict, Any, Optional, Tuple
from pathlib import Path
from dataclasses import dataclass, asdict, field
import json
import logging
from datetime import datetime

from PIL import Image, PngImagePlugin

logger = logging.getLogger(__name__)

METADATA_KEY = "MandelbrotMetadata"


@dataclass
class RenderMetadata:
    """Metadata for a saved render."""

    requested_bounds: Tuple[float, float, float, float]  # real_min, real_max, imag_min, imag_max
    adjusted_bounds: Tuple[float, float, float, float]
    resolution: Tuple[int, int]  # width, height
    max_iterations: int
    backend: str
    render_time_seconds: float
    zoom_depth: int = 0

    timestamp: str = ""
    software_version: str = "1.0.0"
    extra: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Set default timestamp if not provided."""
        if not self.timestamp:
            self.timestamp = datetime.now().isoformat()

    def to_dict(self) -> Dict[str, Any]:
        """Convert metadata to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RenderMetadata':
        """Create metadata from dictionary."""
        data = dict(data)
        for key in ('requested_bounds', 'adjusted_bounds', 'resolution'):
            if key in data:
                data[key] = tuple(data[key])
        return cls(**data)

    def to_json(self, indent: int = 2) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, json_str: str) -> 'RenderMetadata':
        """Create metadata from JSON string."""
        return cls.from_dict(json.loads(json_str))


class ImageExporter:
    """Writes RGBA arrays to disk with optional metadata."""

    def __init__(self):
        """Initialize image exporter."""
        self.supported_formats = {
            '.png': self._save_png,
            '.jpg': self._save_jpeg,
            '.jpeg': self._save_jpeg,
        }

    def save_image(self, rgba: np.ndarray, filepath: Path,
                   metadata: Optional[RenderMetadata] = None,
                   quality: int = 95) -> Path:
        """
        Save an RGBA image array to file.

        Args:
            rgba: uint8 array of shape (height, width, 4)
            filepath: Output file path; the suffix selects the format
            metadata: Render metadata to embed
            quality: JPEG quality (1-100)

        Returns:
            The path written
        """
        filepath = Path(filepath)
        suffix = filepath.suffix.lower()

        if suffix not in self.supported_formats:
            supported = ', '.join(self.supported_formats.keys())
            raise ValueError(f"Unsupported format '{suffix}'. Supported: {supported}")

        if rgba.ndim != 3 or rgba.shape[2] != 4 or rgba.dtype != np.uint8:
            raise ValueError(f"Expected uint8 RGBA image array (H, W, 4), got {rgba.dtype} {rgba.shape}")

        pil_image = Image.fromarray(rgba)
        filepath.parent.mkdir(parents=True, exist_ok=True)

        save_method = self.supported_formats[suffix]
        save_method(pil_image, filepath, metadata, quality)

        logger.info(f"Saved image: {filepath} ({pil_image.size[0]}x{pil_image.size[1]})")
        return filepath

    def _save_png(self, pil_image: Image.Image, filepath: Path,
                  metadata: Optional[RenderMetadata], quality: int) -> None:
        """Save as PNG with metadata."""
        pnginfo = PngImagePlugin.PngInfo()

        if metadata:
            pnginfo.add_text("Title", "Mandelbrot set")
            pnginfo.add_text("Software", f"mandelbrot-zoom v{metadata.software_version}")
            pnginfo.add_text("Creation Time", metadata.timestamp)
            pnginfo.add_text(METADATA_KEY, metadata.to_json())

        pil_image.save(filepath, "PNG", pnginfo=pnginfo)

    def _save_jpeg(self, pil_image: Image.Image, filepath: Path,
                   metadata: Optional[RenderMetadata], quality: int) -> None:
        """Save as JPEG, metadata goes to a companion JSON file."""
        pil_image.convert('RGB').save(filepath, "JPEG", quality=quality, optimize=True)

        if metadata:
            json_path = filepath.with_suffix('.json')
            with open(json_path, 'w') as f:
                f.write(metadata.to_json())
            logger.info(f"Saved metadata: {json_path}")

    def load_metadata(self, filepath: Path) -> Optional[RenderMetadata]:
        """
        Read the metadata written by :meth:`save_image`.

        Returns:
            The metadata, or None when the file carries none
        """
        filepath = Path(filepath)
        if filepath.suffix.lower() == '.png':
            with Image.open(filepath) as img:
                raw = img.text.get(METADATA_KEY)
        else:
            json_path = filepath.with_suffix('.json')
            raw = json_path.read_text() if json_path.exists() else None

        if raw is None:
            return None
        return RenderMetadata.from_json(raw)
