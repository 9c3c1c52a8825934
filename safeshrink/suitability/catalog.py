from dataclasses import dataclass

MIB = 1024 * 1024


@dataclass(frozen=True)
class TargetService:
    """Size constraints of a downstream service a file may be shared to."""

    key: str
    name: str
    max_width: int
    max_height: int
    max_size_bytes: int
    description: str = ""

    def accepts(self, size_bytes: int, width: int, height: int) -> bool:
        return (
            size_bytes <= self.max_size_bytes
            and width <= self.max_width
            and height <= self.max_height
        )


DEFAULT_TARGET_SERVICES: tuple[TargetService, ...] = (
    TargetService("square-social", "Square social post", 1080, 1080, 8 * MIB, "Max 8MB, 1080x1080px"),
    TargetService("chat", "Chat messenger", 1024, 1024, 10 * MIB, "Max 10MB, 1024x1024px"),
    TargetService("web", "Web", 1200, 800, 15 * MIB, "Max 15MB, 1200x800px"),
    TargetService("mobile", "Mobile", 750, 1334, 5 * MIB, "Max 5MB, 750x1334px"),
    TargetService("email", "Email", 800, 600, 5 * MIB, "Max 5MB, 800x600px"),
    TargetService("video-thumbnail", "Video thumbnail", 1280, 720, 20 * MIB, "Max 20MB, 1280x720px"),
    TargetService("social-card", "Social link card", 1200, 630, 8 * MIB, "Max 8MB, 1200x630px"),
    TargetService("print", "Print", 1920, 1080, 10 * MIB, "Max 10MB, 1920x1080px"),
)
