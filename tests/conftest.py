"""测试配置文件。

提供测试所需的fixtures和配置。所有图片都在 tmp_path 中即时生成。
"""

from io import BytesIO
from pathlib import Path

import pytest
from PIL import Image, ImageDraw


def _to_bytes(img: Image.Image, fmt: str, **params) -> bytes:
    buffer = BytesIO()
    img.save(buffer, format=fmt, **params)
    return buffer.getvalue()


def make_pattern_image(size: tuple[int, int] = (200, 200)) -> Image.Image:
    """重复色块图案，颜色较多，用于量化测试"""
    img = Image.new("RGB", size, color="white")
    draw = ImageDraw.Draw(img)
    width, height = size
    for i in range(0, width, 10):
        for j in range(0, height, 10):
            color = ((i * 3) % 256, (j * 5) % 256, ((i + j) * 7) % 256)
            draw.rectangle([i, j, i + 9, j + 9], fill=color)
    return img


@pytest.fixture
def solid_png_bytes() -> bytes:
    """100×100 纯色 PNG"""
    return _to_bytes(Image.new("RGB", (100, 100), color=(200, 40, 40)), "PNG")


@pytest.fixture
def solid_jpeg_bytes() -> bytes:
    """100×100 纯色 JPEG"""
    return _to_bytes(Image.new("RGB", (100, 100), color=(40, 120, 200)), "JPEG", quality=95)


@pytest.fixture
def pattern_png_bytes() -> bytes:
    return _to_bytes(make_pattern_image(), "PNG")


@pytest.fixture
def transparent_png_bytes() -> bytes:
    """带半透明圆形的 RGBA 图片"""
    img = Image.new("RGBA", (120, 120), color=(0, 0, 0, 0))
    draw = ImageDraw.Draw(img)
    for i in range(5):
        x = y = i * 20
        draw.ellipse([x, y, x + 40, y + 40], fill=(255 - i * 40, 100, i * 50, 120 + i * 20))
    return _to_bytes(img, "PNG")


@pytest.fixture
def batch_dir(tmp_path: Path) -> Path:
    """3 张有效图片加 1 个零字节的 .png"""
    images_dir = tmp_path / "images"
    nested = images_dir / "nested"
    nested.mkdir(parents=True)

    make_pattern_image((80, 80)).save(images_dir / "pattern.png", "PNG")
    Image.new("RGB", (64, 64), color="green").save(images_dir / "photo.jpg", "JPEG")
    Image.new("RGB", (50, 50), color="blue").save(nested / "icon.bmp", "BMP")
    (images_dir / "broken.png").write_bytes(b"")
    (images_dir / "notes.txt").write_text("not an image")

    return images_dir


@pytest.fixture
def png_file(tmp_path: Path) -> Path:
    path = tmp_path / "single.png"
    make_pattern_image((60, 60)).save(path, "PNG")
    return path
