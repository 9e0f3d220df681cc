"""
Visual Check Provider Module
Capability interface for window-level visual checks.

Checks are grouped in a test session: open_test, any number of check_window
calls, then close_test (all checks passed) or abort_test.
"""

import logging
import random
from abc import ABC, abstractmethod
from typing import Dict, Optional
from PIL import Image

from core.image_store import BaselineStore
from core.visual_comparator import VisualComparator
from models.comparison import ComparisonResult

logger = logging.getLogger(__name__)

def mask_api_key(api_key: Optional[str]) -> str:
    if not api_key or len(api_key) <= 8:
        return "********"
    return f"{api_key[:4]}...{api_key[-4:]}"

class VisualCheckProvider(ABC):
    def __init__(self):
        self.app_name: Optional[str] = None
        self.test_name: Optional[str] = None
        self.results: Dict[str, bool] = {}

    @property
    def is_open(self) -> bool:
        return self.test_name is not None

    def open_test(self, app_name: str, test_name: str) -> bool:
        logger.info(f"Opening visual test: {app_name} - {test_name}")
        self.app_name = app_name
        self.test_name = test_name
        self.results = {}
        return True

    def check_window(self, tag: str, image: Image.Image) -> bool:
        if not self.is_open:
            logger.warning("Visual test not opened")
            return False

        passed = self._check(tag, image)
        if passed:
            logger.info(f"Visual check passed: {tag}")
        else:
            logger.warning(f"Visual check failed: {tag}")
        self.results[tag] = passed
        return passed

    @abstractmethod
    def _check(self, tag: str, image: Image.Image) -> bool:
        pass

    def close_test(self) -> bool:
        """End the session; True when every check passed."""
        if not self.is_open:
            logger.warning("Visual test not opened")
            return False

        all_passed = all(self.results.values())
        if all_passed:
            logger.info(f"Visual test passed: {self.test_name}")
        else:
            logger.warning(f"Visual test failed: {self.test_name}")
        self.test_name = None
        return all_passed

    def abort_test(self) -> None:
        if self.is_open:
            logger.info(f"Aborting visual test: {self.test_name}")
        self.test_name = None
        self.results = {}

    def get_results(self) -> Dict[str, bool]:
        return dict(self.results)

class SimulatedVisualCheckProvider(VisualCheckProvider):
    """Stand-in for a hosted visual AI service; checks pass at random with pass_rate"""

    def __init__(self, api_key: str, pass_rate: float = 0.8, seed: Optional[int] = None):
        super().__init__()
        if not 0.0 <= pass_rate <= 1.0:
            raise ValueError(f"pass_rate must be within [0, 1], got {pass_rate}")
        self.api_key = api_key
        self.pass_rate = pass_rate
        self._random = random.Random(seed)

    def open_test(self, app_name: str, test_name: str) -> bool:
        if not self.api_key:
            logger.warning("Visual AI API key not configured. Set VISUAL_AI_API_KEY in the environment.")
            return False
        logger.info(f"Visual AI API key set: {mask_api_key(self.api_key)}")
        return super().open_test(app_name, test_name)

    def _check(self, tag: str, image: Image.Image) -> bool:
        return self._random.random() < self.pass_rate

class BaselineVisualCheckProvider(VisualCheckProvider):
    """Checks windows against stored baselines keyed <test_name>_<tag>"""

    def __init__(self, comparator: VisualComparator, baseline_store: BaselineStore,
                 threshold: Optional[float] = None):
        super().__init__()
        self.comparator = comparator
        self.baseline_store = baseline_store
        self.threshold = threshold
        self.comparisons: Dict[str, ComparisonResult] = {}

    def baseline_key(self, tag: str) -> str:
        return f"{self.test_name}_{tag}".replace(" ", "_")

    def open_test(self, app_name: str, test_name: str) -> bool:
        self.comparisons = {}
        return super().open_test(app_name, test_name)

    def _check(self, tag: str, image: Image.Image) -> bool:
        result = self.comparator.compare_with_baseline(
            self.baseline_store, self.baseline_key(tag), image, self.threshold
        )
        self.comparisons[tag] = result.with_metadata('tag', tag).with_metadata('app_name', self.app_name)
        return result.passed
