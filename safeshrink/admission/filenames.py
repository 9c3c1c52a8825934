"""Filename checks shared by the validator, the scanner and the export side."""

import re

from safeshrink.admission.models import MediaType
from safeshrink.admission.signatures import extension_for

MAX_FILENAME_LENGTH = 255
MAX_SANITIZED_LENGTH = 100

EXECUTABLE_EXTENSIONS: tuple[str, ...] = (
    "exe", "bat", "cmd", "com", "pif", "scr", "vbs", "js", "jar", "app", "deb", "pkg", "dmg",
)

_UNSAFE_CHARS_RE = re.compile(r'[<>:"/\\|?*\x00-\x1f]')
_LEADING_DOTS_RE = re.compile(r"^\.+")
_DOUBLE_EXTENSION_RE = re.compile(r"\.[a-zA-Z]{2,4}\.[a-zA-Z]{2,4}$")
_BIDI_CONTROL_RE = re.compile("[\u200e\u200f\u202a-\u202e]")


def has_unsafe_characters(name: str) -> bool:
    return _UNSAFE_CHARS_RE.search(name) is not None


def has_executable_extension(
    name: str,
    extensions: tuple[str, ...] = EXECUTABLE_EXTENSIONS,
) -> bool:
    _, dot, suffix = name.rpartition(".")
    return bool(dot) and suffix.lower() in extensions


def has_double_extension(name: str) -> bool:
    return _DOUBLE_EXTENSION_RE.search(name) is not None


def has_bidi_controls(name: str) -> bool:
    return _BIDI_CONTROL_RE.search(name) is not None


def sanitize_filename(name: str) -> str:
    """Make a name safe to hand to a download collaborator.

    Unsafe characters become ``_``, leading dots are dropped and the result is
    capped at 100 characters. An empty result falls back to ``file``.
    """
    sanitized = _UNSAFE_CHARS_RE.sub("_", name)
    sanitized = _LEADING_DOTS_RE.sub("", sanitized)[:MAX_SANITIZED_LENGTH]
    return sanitized or "file"


def suggested_filename(media_type: MediaType, timestamp_ms: int) -> str:
    return sanitize_filename(f"compressed_{timestamp_ms}.{extension_for(media_type)}")
