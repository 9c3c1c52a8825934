class TranscodeError(Exception):
    """Base exception for transcoding failures."""


class SourceDecodeError(TranscodeError):
    """Raised when the accepted source cannot be decoded or rasterized."""


class EncodeError(TranscodeError):
    """Raised when the encoder produces no output."""
