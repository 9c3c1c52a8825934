import mimetypes
from abc import ABC, abstractmethod
from pathlib import Path


class SourceFile(ABC):
    """Byte-addressable handle to an untrusted input file."""

    name: str
    declared_media_type: str

    @property
    @abstractmethod
    def size_bytes(self) -> int:
        """Total size of the file in bytes."""

    @abstractmethod
    def read(self, offset: int, length: int) -> bytes:
        """Return up to ``length`` bytes starting at ``offset``.

        Reads past the end are truncated; a negative offset is clamped to 0.
        """

    def read_all(self) -> bytes:
        return self.read(0, self.size_bytes)

    def tail(self, length: int) -> bytes:
        return self.read(max(0, self.size_bytes - length), length)


class BytesSourceFile(SourceFile):
    """In-memory source, e.g. an upload already held by the caller."""

    def __init__(self, name: str, data: bytes, declared_media_type: str = "") -> None:
        self.name = name
        self.declared_media_type = declared_media_type
        self._data = bytes(data)

    @property
    def size_bytes(self) -> int:
        return len(self._data)

    def read(self, offset: int, length: int) -> bytes:
        start = max(0, offset)
        return self._data[start : start + max(0, length)]


class PathSourceFile(SourceFile):
    """Source backed by a file on disk; every read reopens the file."""

    def __init__(self, path: Path, declared_media_type: str | None = None) -> None:
        self._path = path
        self.name = path.name
        if declared_media_type is None:
            declared_media_type = mimetypes.guess_type(path.name)[0] or ""
        self.declared_media_type = declared_media_type

    @property
    def size_bytes(self) -> int:
        return self._path.stat().st_size

    def read(self, offset: int, length: int) -> bytes:
        with self._path.open("rb") as fh:
            fh.seek(max(0, offset))
            return fh.read(max(0, length))


def snapshot(source: SourceFile, max_bytes: int | None = None) -> BytesSourceFile:
    """Read ``source`` once into an immutable in-memory copy.

    At most ``max_bytes + 1`` bytes are read, enough for a size gate to see that
    the file is over the limit without holding all of it.
    """
    if isinstance(source, BytesSourceFile):
        return source
    length = source.size_bytes if max_bytes is None else max_bytes + 1
    return BytesSourceFile(source.name, source.read(0, length), source.declared_media_type)


class FileLoader:
    """Resolves a local path into a SourceFile handle."""

    def load(self, path: Path, declared_media_type: str | None = None) -> SourceFile:
        """Open a local file as an untrusted source.

        Raises:
            FileNotFoundError: if nothing exists at ``path``.
            IsADirectoryError: if ``path`` is a directory.
        """
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")
        if path.is_dir():
            raise IsADirectoryError(f"Expected a file, got a directory: {path}")
        return PathSourceFile(path, declared_media_type=declared_media_type)
