import io

import pytest
from PIL import Image

from theme_map.palette import Palette
from theme_map.settings import Settings


@pytest.fixture
def black_white_settings():
    return Settings(palette=Palette.from_hex(["#000000", "#ffffff"]), palette_affinity=1.0)


@pytest.fixture
def png_bytes():
    def encode(image: Image.Image) -> bytes:
        buffer = io.BytesIO()
        image.save(buffer, "PNG")
        return buffer.getvalue()

    return encode
