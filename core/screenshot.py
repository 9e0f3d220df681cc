"""
Screenshot Module
Captures screenshots of the application under test using Playwright.
"""

import io
import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional
from PIL import Image
from playwright.sync_api import sync_playwright

from config.settings import settings

logger = logging.getLogger(__name__)

class ScreenshotSource(ABC):
    """Produces an image of the current screen on demand"""

    @abstractmethod
    def capture_screenshot(self) -> Image.Image:
        pass

class PlaywrightScreenshotSource(ScreenshotSource):
    """Screenshot of a Playwright page, or of one element when a selector is given"""

    def __init__(self, page: Any, selector: Optional[str] = None, full_page: bool = False):
        self.page = page
        self.selector = selector
        self.full_page = full_page

    def capture_screenshot(self) -> Image.Image:
        if self.selector:
            png_bytes = self.page.locator(self.selector).first.screenshot()
        else:
            png_bytes = self.page.screenshot(full_page=self.full_page)

        with Image.open(io.BytesIO(png_bytes)) as img:
            img.load()
            image = img.convert("RGB")

        logger.info(f"Screenshot captured: {image.width}x{image.height}"
                    + (f" ({self.selector})" if self.selector else ""))
        return image

@contextmanager
def browser_page(url: Optional[str] = None, config: Dict[str, Any] = None) -> Iterator[Any]:
    """
    Launch a browser, open a page and navigate to url.

    Args:
        url: Page to open, defaults to settings.BASE_URL
        config: Overrides for settings.get_browser_config()

    Yields:
        Playwright Page
    """
    browser_config = settings.get_browser_config()
    browser_config.update(config or {})
    url = url or settings.BASE_URL

    with sync_playwright() as playwright:
        browser_type = getattr(playwright, browser_config['browser_type'])
        browser = browser_type.launch(headless=browser_config['headless'])
        try:
            context = browser.new_context(viewport=browser_config['viewport'])
            page = context.new_page()
            page.set_default_timeout(browser_config['timeout'])
            logger.info(f"Opening {url} in {browser_config['browser_type']}")
            page.goto(url, wait_until="networkidle")
            yield page
        finally:
            browser.close()
