import pytest
from PIL import Image

from helpers import BLACK, solid_image

@pytest.fixture
def white_2x2() -> Image.Image:
    return solid_image(2, 2)

@pytest.fixture
def one_black_pixel_2x2() -> Image.Image:
    image = solid_image(2, 2)
    image.putpixel((0, 0), BLACK)
    return image
