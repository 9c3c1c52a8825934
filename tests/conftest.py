import io
import random
from collections.abc import Callable

import pytest
from PIL import Image
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from safeshrink.processor.file_loader import BytesSourceFile


def _make_image(width: int, height: int, mode: str = "RGB", seed: int = 7) -> Image.Image:
    """Deterministic noisy gradient, so lossy codecs have real work to do.

    Large sizes are upscaled from a tile of at most 256px per side.
    """
    rng = random.Random(seed)
    tile_w, tile_h = min(width, 256), min(height, 256)
    pixels = bytearray()
    for y in range(tile_h):
        for x in range(tile_w):
            base = (x * 255 // max(tile_w - 1, 1) + y * 255 // max(tile_h - 1, 1)) // 2
            for _ in range(len(mode)):
                pixels.append((base + rng.randint(-40, 40)) % 256)
    image = Image.frombytes(mode, (tile_w, tile_h), bytes(pixels))
    if (tile_w, tile_h) != (width, height):
        image = image.resize((width, height), resample=Image.Resampling.BICUBIC)
    return image


def _encode(image: Image.Image, format: str, **params: object) -> bytes:
    buf = io.BytesIO()
    image.save(buf, format=format, **params)
    return buf.getvalue()


def _make_pdf(page_sizes: list[tuple[int, int]]) -> bytes:
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=page_sizes[0])
    for number, size in enumerate(page_sizes, start=1):
        c.setPageSize(size)
        c.drawString(20, 20, f"Page {number}")
        c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture()
def image_bytes_factory() -> Callable[..., bytes]:
    """Build encoded test images: factory(width, height, format, mode=, seed=, **save_params)."""

    def factory(
        width: int, height: int, format: str, mode: str = "RGB", seed: int = 7, **params: object
    ) -> bytes:
        return _encode(_make_image(width, height, mode, seed), format, **params)

    return factory


@pytest.fixture()
def pdf_factory() -> Callable[[list[tuple[int, int]]], bytes]:
    return _make_pdf


@pytest.fixture()
def png_bytes() -> bytes:
    return _encode(_make_image(64, 48), "PNG")


@pytest.fixture()
def rgba_png_bytes() -> bytes:
    return _encode(_make_image(40, 30, mode="RGBA"), "PNG")


@pytest.fixture()
def jpeg_bytes() -> bytes:
    return _encode(_make_image(64, 48), "JPEG", quality=95)


@pytest.fixture()
def large_jpeg_bytes() -> bytes:
    return _encode(_make_image(2400, 1600, seed=3), "JPEG", quality=90)


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Generate a minimal single-page PDF with known text content."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Hello PDF World")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def multi_page_pdf_bytes() -> bytes:
    """Three pages, each with a different size."""
    return _make_pdf([(300, 400), (500, 250), (612, 792)])


@pytest.fixture()
def empty_pdf_bytes() -> bytes:
    """Generate a valid PDF with no text content (blank page)."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture()
def png_source(png_bytes: bytes) -> BytesSourceFile:
    return BytesSourceFile("photo.png", png_bytes, "image/png")


@pytest.fixture()
def jpeg_source(jpeg_bytes: bytes) -> BytesSourceFile:
    return BytesSourceFile("photo.jpg", jpeg_bytes, "image/jpeg")


@pytest.fixture()
def pdf_source(sample_pdf_bytes: bytes) -> BytesSourceFile:
    return BytesSourceFile("report.pdf", sample_pdf_bytes, "application/pdf")
