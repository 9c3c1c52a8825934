import io

from PIL import Image

from safeshrink.transcode.exceptions import EncodeError

_ALPHA_MODES = frozenset({"RGBA", "LA", "PA", "RGBa", "La"})


def encode_image(image: Image.Image, format: str, **params: object) -> bytes:
    """Serialize a Pillow image, treating empty output as a failure."""
    buf = io.BytesIO()
    try:
        image.save(buf, format=format, **params)
    except Exception as exc:
        raise EncodeError(f"Failed to encode {format}: {exc}") from exc
    data = buf.getvalue()
    if not data:
        raise EncodeError(f"Failed to encode {format}: encoder returned no data")
    return data


def encode_jpeg(image: Image.Image, quality: int) -> bytes:
    return encode_image(flatten_to_rgb(image), "JPEG", quality=quality)


def flatten_to_rgb(image: Image.Image) -> Image.Image:
    """Drop transparency the way a canvas JPEG export does (onto black)."""
    if image.mode == "RGB":
        return image
    has_alpha = image.mode in _ALPHA_MODES or (
        image.mode == "P" and "transparency" in image.info
    )
    if not has_alpha:
        return image.convert("RGB")
    rgba = image.convert("RGBA")
    background = Image.new("RGBA", rgba.size, (0, 0, 0, 255))
    return Image.alpha_composite(background, rgba).convert("RGB")
