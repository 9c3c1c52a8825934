import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from safeshrink.admission.exceptions import RuleLoadError

_DEFAULT_RULES_DIR = Path(__file__).parent / "rules"
_VALID_TARGETS = frozenset({"text", "bytes"})


@dataclass(frozen=True)
class PatternRule:
    """A tagged dangerous-content pattern.

    ``text`` rules run against the decoded content window; ``bytes`` rules run
    against the raw window and are used for binary magic such as PE headers.
    """

    tag: str
    target: str
    regex: re.Pattern[Any]

    def search(self, text: str, raw: bytes) -> bool:
        subject: str | bytes = text if self.target == "text" else raw
        return self.regex.search(subject) is not None


@dataclass(frozen=True)
class ThreatRules:
    version: str
    executable_extensions: tuple[str, ...]
    dangerous_patterns: tuple[PatternRule, ...]
    suspicious_strings: tuple[str, ...]
    suspicious_threshold: int
    entropy_threshold: float
    entropy_sample_chars: int
    structure_window_bytes: int


def load_threat_rules(path: Path | None = None) -> ThreatRules:
    """Load a versioned threat rule table from JSON.

    Args:
        path: Rule file location. Defaults to the bundled threat_rules.json.

    Raises:
        RuleLoadError: if the file cannot be read or does not describe a
            valid rule table.
    """
    if path is None:
        path = _DEFAULT_RULES_DIR / "threat_rules.json"
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise RuleLoadError(f"Failed to read threat rules: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise RuleLoadError(f"Threat rules are not valid JSON: {exc}") from exc
    if not isinstance(raw, dict):
        raise RuleLoadError("Threat rules must be a JSON object")
    return build_threat_rules(raw)


def build_threat_rules(data: dict[str, Any]) -> ThreatRules:
    try:
        return ThreatRules(
            version=str(data["version"]),
            executable_extensions=tuple(ext.lower() for ext in data["executable_extensions"]),
            dangerous_patterns=tuple(_build_pattern(item) for item in data["dangerous_patterns"]),
            suspicious_strings=tuple(s.lower() for s in data["suspicious_strings"]),
            suspicious_threshold=int(data.get("suspicious_threshold", 2)),
            entropy_threshold=float(data.get("entropy_threshold", 7.5)),
            entropy_sample_chars=int(data.get("entropy_sample_chars", 1000)),
            structure_window_bytes=int(data.get("structure_window_bytes", 512)),
        )
    except RuleLoadError:
        raise
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise RuleLoadError(f"Malformed threat rules: {exc!r}") from exc


def _build_pattern(item: dict[str, Any]) -> PatternRule:
    tag = item["tag"]
    target = item.get("target", "text")
    if target not in _VALID_TARGETS:
        raise RuleLoadError(f"Rule '{tag}': target must be one of {sorted(_VALID_TARGETS)}")
    flags = re.IGNORECASE if item.get("ignore_case", False) else 0
    source: str | bytes = item["pattern"]
    if target == "bytes":
        source = item["pattern"].encode("latin-1")
    try:
        regex = re.compile(source, flags)
    except re.error as exc:
        raise RuleLoadError(f"Rule '{tag}': invalid pattern: {exc}") from exc
    return PatternRule(tag=tag, target=target, regex=regex)
