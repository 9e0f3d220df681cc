"""
Visual Comparator Module
Pixel-exact screenshot comparison against baselines.

A pixel is different when any of its RGB channels differ. The score is the share
of differing pixels over the baseline's area; the diff image paints differing
pixels solid red and copies the baseline everywhere else.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Tuple, Union
import numpy as np
from PIL import Image

from core.image_store import ArtifactSink, BaselineStore, load_image
from core.screenshot import ScreenshotSource
from models.comparison import ComparisonOutcome, ComparisonResult

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 0.05
DIFF_COLOR = (255, 0, 0)
TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"

def _validate_threshold(threshold: float) -> float:
    if threshold is None or not 0.0 <= threshold <= 1.0:
        raise ValueError(f"Threshold must be within [0, 1], got {threshold}")
    return float(threshold)

def _validate_image(image: Optional[Image.Image], label: str) -> Image.Image:
    if image is None:
        raise ValueError(f"{label} image is required")
    if image.width <= 0 or image.height <= 0:
        raise ValueError(f"{label} image has zero area ({image.width}x{image.height})")
    return image.convert("RGB") if image.mode != "RGB" else image

def resize_to_match(image: Image.Image, size: Tuple[int, int]) -> Image.Image:
    """Stretch image to size with nearest-neighbour sampling."""
    return image.resize(size, Image.Resampling.NEAREST)

def diff_images(baseline: Image.Image, actual: Image.Image) -> Tuple[int, Image.Image]:
    """
    Compare two RGB images of identical size.

    Returns:
        Number of differing pixels and the red-highlight diff image
    """
    baseline_pixels = np.asarray(baseline, dtype=np.uint8)
    actual_pixels = np.asarray(actual, dtype=np.uint8)

    different = np.any(baseline_pixels != actual_pixels, axis=2)

    diff_pixels = baseline_pixels.copy()
    diff_pixels[different] = DIFF_COLOR

    return int(np.count_nonzero(different)), Image.fromarray(diff_pixels)

class VisualComparator:
    """Compares screenshots with baselines and optionally persists the artifacts"""

    def __init__(self, threshold: float = DEFAULT_THRESHOLD, artifact_sink: Optional[ArtifactSink] = None):
        self.threshold = _validate_threshold(threshold)
        self.artifact_sink = artifact_sink

    def compare(self, baseline: Image.Image, actual: Image.Image,
                threshold: Optional[float] = None, name: Optional[str] = None,
                baseline_path: Optional[str] = None) -> ComparisonResult:
        """
        Compare an actual image with its baseline.

        Args:
            baseline: Reference image, its dimensions define the comparison grid
            actual: Image under test, resized to the baseline when dimensions differ
            threshold: Maximum accepted difference, defaults to the comparator threshold
            name: Artifact name; the actual and diff images are persisted when a sink is set
            baseline_path: Where the baseline came from, reported back in the result

        Returns:
            ComparisonResult with passed == (diff_percentage <= threshold)

        Raises:
            ValueError: For an out of range threshold or a missing or zero-area image
        """
        threshold = self.threshold if threshold is None else _validate_threshold(threshold)
        baseline = _validate_image(baseline, "Baseline")
        actual = _validate_image(actual, "Actual")
        label = name or "image"

        resized = actual.size != baseline.size
        if resized:
            logger.warning(f"Image dimensions don't match for {label}: baseline {baseline.size}, "
                           f"actual {actual.size}. Resizing actual image to match baseline.")
            actual = resize_to_match(actual, baseline.size)

        differing_pixels, diff_image = diff_images(baseline, actual)
        total_pixels = baseline.width * baseline.height
        diff_percentage = differing_pixels / total_pixels
        passed = diff_percentage <= threshold

        actual_path = diff_path = None
        if self.artifact_sink is not None and name:
            timestamp = datetime.now().strftime(TIMESTAMP_FORMAT)
            try:
                actual_path = self.artifact_sink.save_actual(name, actual, timestamp)
                diff_path = self.artifact_sink.save_diff(name, diff_image, timestamp)
            except OSError as e:
                logger.error(f"Failed to save comparison artifacts for {label}: {e}")
                return ComparisonResult.failure(ComparisonOutcome.IO_ERROR, str(e))

        logger.info(f"Image comparison for {label}: Difference: {diff_percentage * 100:.2f}%, "
                    f"Threshold: {threshold * 100:.2f}%, Result: {'PASSED' if passed else 'FAILED'}")

        result = ComparisonResult(
            passed=passed,
            diff_percentage=diff_percentage,
            baseline_path=baseline_path,
            actual_path=actual_path,
            diff_path=diff_path
        )
        return (result
                .with_metadata('threshold', threshold)
                .with_metadata('differing_pixels', differing_pixels)
                .with_metadata('total_pixels', total_pixels)
                .with_metadata('width', baseline.width)
                .with_metadata('height', baseline.height)
                .with_metadata('resized', resized))

    def compare_files(self, baseline_path: Union[str, Path], actual_path: Union[str, Path],
                      threshold: Optional[float] = None, name: Optional[str] = None) -> ComparisonResult:
        """Compare two image files; missing or unreadable files yield the failure result."""
        threshold = self.threshold if threshold is None else _validate_threshold(threshold)

        if not Path(baseline_path).is_file():
            logger.warning(f"Baseline does not exist: {baseline_path}")
            return ComparisonResult.failure(ComparisonOutcome.NO_BASELINE)

        try:
            baseline = load_image(baseline_path)
            actual = load_image(actual_path)
            return self.compare(baseline, actual, threshold, name, baseline_path=str(baseline_path))
        except (OSError, ValueError) as e:
            logger.error(f"Failed to compare {baseline_path} with {actual_path}: {e}")
            return ComparisonResult.failure(ComparisonOutcome.IO_ERROR, str(e))

    def compare_with_baseline(self, baseline_store: BaselineStore, key: str, actual: Image.Image,
                              threshold: Optional[float] = None) -> ComparisonResult:
        """Compare an image with the stored baseline for key."""
        threshold = self.threshold if threshold is None else _validate_threshold(threshold)

        try:
            baseline = baseline_store.load(key)
            if baseline is None:
                logger.warning(f"Baseline does not exist for: {key}")
                return ComparisonResult.failure(ComparisonOutcome.NO_BASELINE)
            return self.compare(baseline, actual, threshold, key, baseline_path=baseline_store.path_for(key))
        except (OSError, ValueError) as e:
            logger.error(f"Failed to compare {key} with baseline: {e}")
            return ComparisonResult.failure(ComparisonOutcome.IO_ERROR, str(e))

    def capture_and_compare(self, screenshot_source: ScreenshotSource, baseline_store: BaselineStore,
                            key: str, threshold: Optional[float] = None) -> ComparisonResult:
        """Capture the current screen and compare it with the stored baseline for key."""
        threshold = self.threshold if threshold is None else _validate_threshold(threshold)

        if not baseline_store.exists(key):
            logger.warning(f"Baseline does not exist for: {key}")
            return ComparisonResult.failure(ComparisonOutcome.NO_BASELINE)

        try:
            actual = screenshot_source.capture_screenshot()
        except Exception as e:
            logger.error(f"Failed to capture screenshot for {key}: {e}")
            return ComparisonResult.failure(ComparisonOutcome.IO_ERROR, str(e))

        return self.compare_with_baseline(baseline_store, key, actual, threshold)

    def save_baseline(self, screenshot_source: ScreenshotSource, baseline_store: BaselineStore,
                      key: str) -> Optional[str]:
        """Capture the current screen and store it as the baseline for key."""
        try:
            image = screenshot_source.capture_screenshot()
            return baseline_store.save(key, image)
        except Exception as e:
            logger.error(f"Failed to save baseline for {key}: {e}")
            return None
