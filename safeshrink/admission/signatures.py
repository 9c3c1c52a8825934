from safeshrink.admission.models import FileSignature, MediaType

HEADER_LENGTH = 16

# Order matters: the first matching prefix decides the media type.
SIGNATURE_CATALOG: tuple[FileSignature, ...] = (
    FileSignature(b"\xff\xd8\xff", MediaType.JPEG, "jpg"),
    FileSignature(b"\x89PNG\r\n\x1a\n", MediaType.PNG, "png"),
    FileSignature(b"GIF8", MediaType.GIF, "gif"),
    FileSignature(b"RIFF", MediaType.WEBP, "webp"),
    FileSignature(b"%PDF", MediaType.PDF, "pdf"),
)


def match_signature(
    header: bytes,
    catalog: tuple[FileSignature, ...] = SIGNATURE_CATALOG,
) -> FileSignature | None:
    """Return the first catalog entry whose prefix starts ``header``."""
    for signature in catalog:
        if signature.matches(header):
            return signature
    return None


def extension_for(media_type: MediaType) -> str:
    for signature in SIGNATURE_CATALOG:
        if signature.media_type is media_type:
            return signature.extension
    raise ValueError(f"No signature registered for {media_type.value}")
