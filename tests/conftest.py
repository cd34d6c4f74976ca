import pytest
import sys
from pathlib import Path
from PIL import Image

# Add src to sys.path so we can import pixert
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

from pixert.export.memory import MemoryGallery  # noqa: E402


# Common test fixtures
@pytest.fixture
def photo():
    """A 240x320 RGB image with a horizontal gradient, so tiles differ."""
    img = Image.new("RGB", (240, 320))
    for x in range(240):
        for y in range(0, 320, 40):
            img.putpixel((x, y), (x, y % 256, 128))
    return img


@pytest.fixture
def photo_path(tmp_path: Path, photo):
    """The gradient photo saved as a JPEG file."""
    img_path = tmp_path / "photo.jpg"
    photo.save(img_path, format="JPEG")
    return img_path


@pytest.fixture
def memory_gallery():
    """Empty writable in-memory gallery."""
    return MemoryGallery()
