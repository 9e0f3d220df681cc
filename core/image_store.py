"""
Image Store Module
Baseline storage and artifact persistence for visual regression runs.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union
from PIL import Image

logger = logging.getLogger(__name__)

def load_image(path: Union[str, Path]) -> Image.Image:
    """
    Decode an image file into an RGB image.

    Raises:
        FileNotFoundError: If the file does not exist
        OSError: If the file is empty, unreadable, not a valid image or too large to decode
    """
    path = Path(path)
    try:
        with Image.open(path) as img:
            img.load()
            return img.convert("RGB")
    except Image.DecompressionBombError as e:
        raise OSError(str(e)) from e

def save_image(image: Image.Image, path: Union[str, Path]) -> Path:
    """Write an image as PNG, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    image.save(path, format="PNG")
    return path

class BaselineStore(ABC):
    """Key-value store of reference images"""

    @abstractmethod
    def path_for(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    def exists(self, key: str) -> bool:
        pass

    @abstractmethod
    def load(self, key: str) -> Optional[Image.Image]:
        """Return the baseline image, or None when no baseline exists"""
        pass

    @abstractmethod
    def save(self, key: str, image: Image.Image) -> str:
        pass

class FileBaselineStore(BaselineStore):
    """Baselines kept as <key>.png files in a directory"""

    def __init__(self, baseline_dir: Union[str, Path]):
        self.baseline_dir = Path(baseline_dir)

    def path_for(self, key: str) -> str:
        return str(self.baseline_dir / f"{key}.png")

    def exists(self, key: str) -> bool:
        return Path(self.path_for(key)).is_file()

    def load(self, key: str) -> Optional[Image.Image]:
        path = Path(self.path_for(key))
        if not path.is_file():
            return None
        return load_image(path)

    def save(self, key: str, image: Image.Image) -> str:
        path = save_image(image, self.path_for(key))
        logger.info(f"Baseline saved: {path}")
        return str(path)

class ArtifactSink(ABC):
    """Destination for captured screenshots and generated diff images"""

    @abstractmethod
    def save_actual(self, name: str, image: Image.Image, timestamp: str) -> str:
        pass

    @abstractmethod
    def save_diff(self, name: str, image: Image.Image, timestamp: str) -> str:
        pass

class FileArtifactSink(ArtifactSink):
    def __init__(self, actual_dir: Union[str, Path], diff_dir: Union[str, Path]):
        self.actual_dir = Path(actual_dir)
        self.diff_dir = Path(diff_dir)

    def save_actual(self, name: str, image: Image.Image, timestamp: str) -> str:
        path = save_image(image, self.actual_dir / f"{name}_{timestamp}.png")
        logger.info(f"Screenshot saved: {path}")
        return str(path)

    def save_diff(self, name: str, image: Image.Image, timestamp: str) -> str:
        path = save_image(image, self.diff_dir / f"{name}_diff_{timestamp}.png")
        logger.info(f"Diff image saved: {path}")
        return str(path)
