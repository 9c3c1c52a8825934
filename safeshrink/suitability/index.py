from collections.abc import Sequence

from safeshrink.suitability.catalog import DEFAULT_TARGET_SERVICES, TargetService
from safeshrink.transcode.models import TranscodeResult


def suitable_services(
    size_bytes: int,
    width: int,
    height: int,
    catalog: Sequence[TargetService] = DEFAULT_TARGET_SERVICES,
) -> list[TargetService]:
    """Services whose width, height and size bounds all admit the output."""
    return [service for service in catalog if service.accepts(size_bytes, width, height)]


def suitable_for_result(
    result: TranscodeResult,
    catalog: Sequence[TargetService] = DEFAULT_TARGET_SERVICES,
) -> list[TargetService]:
    # multi-page documents carry no aggregate dimensions
    if result.dimensions is None:
        return []
    width, height = result.dimensions
    return suitable_services(result.size_bytes, width, height, catalog)
