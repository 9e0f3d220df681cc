import io
import struct
import zlib
from typing import Any, Dict, List, Optional

from PIL import Image

from core.screenshot import ScreenshotSource

WHITE = (255, 255, 255)
BLACK = (0, 0, 0)

def solid_image(width: int, height: int, color=WHITE) -> Image.Image:
    return Image.new("RGB", (width, height), color)

def png_bytes(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()

def _png_chunk(kind: bytes, data: bytes) -> bytes:
    return struct.pack(">I", len(data)) + kind + data + struct.pack(">I", zlib.crc32(kind + data) & 0xFFFFFFFF)

def oversized_png(width: int = 20000, height: int = 20000) -> bytes:
    """PNG whose header declares width x height with no pixel data behind it"""
    header = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    return (b"\x89PNG\r\n\x1a\n" + _png_chunk(b"IHDR", header)
            + _png_chunk(b"IDAT", zlib.compress(b"")) + _png_chunk(b"IEND", b""))

class StaticScreenshotSource(ScreenshotSource):
    """Returns the same image on every capture"""

    def __init__(self, image: Image.Image):
        self.image = image
        self.captures = 0

    def capture_screenshot(self) -> Image.Image:
        self.captures += 1
        return self.image.copy()

class FailingScreenshotSource(ScreenshotSource):
    def capture_screenshot(self) -> Image.Image:
        raise RuntimeError("browser crashed")

class FakeElement:
    """Minimal stand-in for a Playwright ElementHandle"""

    def __init__(self, tag: str = "div", text: str = "", attrs: Dict[str, str] = None,
                 children: Dict[str, List["FakeElement"]] = None, value: str = ""):
        self.tag = tag
        self.text = text
        self.attrs = attrs or {}
        self.children = children or {}
        self.value = value

    def get_attribute(self, name: str) -> Optional[str]:
        return self.attrs.get(name)

    def evaluate(self, expression: str) -> Any:
        return self.tag.upper()

    def inner_text(self) -> str:
        return self.text

    def input_value(self) -> str:
        return self.value

    def query_selector(self, selector: str) -> Optional["FakeElement"]:
        matches = self.children.get(selector, [])
        return matches[0] if matches else None

    def query_selector_all(self, selector: str) -> List["FakeElement"]:
        return list(self.children.get(selector, []))

class FakeLocator:
    def __init__(self, screenshot_bytes: bytes):
        self.screenshot_bytes = screenshot_bytes

    @property
    def first(self) -> "FakeLocator":
        return self

    def screenshot(self) -> bytes:
        return self.screenshot_bytes

class FakePage(FakeElement):
    """Minimal stand-in for a Playwright Page"""

    def __init__(self, title: str = "", url: str = "https://hr.example.com/",
                 children: Dict[str, List[FakeElement]] = None,
                 screenshot_image: Image.Image = None, element_images: Dict[str, Image.Image] = None):
        super().__init__(tag="html", children=children)
        self._title = title
        self.url = url
        self.screenshot_image = screenshot_image
        self.element_images = element_images or {}
        self.screenshot_calls: List[Dict[str, Any]] = []

    def title(self) -> str:
        return self._title

    def screenshot(self, full_page: bool = False) -> bytes:
        self.screenshot_calls.append({'full_page': full_page})
        return png_bytes(self.screenshot_image)

    def locator(self, selector: str) -> FakeLocator:
        return FakeLocator(png_bytes(self.element_images[selector]))

