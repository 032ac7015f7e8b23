"""Configuration parsing and defaults for rendersafe."""

from dataclasses import dataclass, field
import json
from pathlib import Path
from typing import List, Optional, Tuple

from .protocols import ProtocolRule, build_rules

POLICY_VERSION = "0.1.0"


class ConfigError(ValueError):
    """Raised when configuration parsing or validation fails."""

    pass


@dataclass(frozen=True)
class UrlPolicy:
    """Additional protocol prefixes layered on top of the built-in tables."""

    extra_dangerous_protocols: List[str] = field(default_factory=list)
    extra_safe_protocols: List[str] = field(default_factory=list)
    allow_bare_relative: bool = True

    def rules(self) -> Tuple[ProtocolRule, ...]:
        """Return the ordered rule list for this policy."""

        return build_rules(self.extra_dangerous_protocols, self.extra_safe_protocols)


@dataclass(frozen=True)
class AuditPolicy:
    """Controls the JSONL rejection audit log."""

    enabled: bool = True


@dataclass(frozen=True)
class RendersafeConfig:
    """Root configuration object for rendersafe."""

    url_policy: UrlPolicy = field(default_factory=UrlPolicy)
    audit: AuditPolicy = field(default_factory=AuditPolicy)


DEFAULT_CONFIG = RendersafeConfig()


def load_config(path: Path) -> RendersafeConfig:
    """Load configuration from a JSON-compatible YAML file path."""

    if not path.exists():
        return DEFAULT_CONFIG

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigError("config must be JSON-compatible YAML") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"config could not be read: {path}") from exc
    if not isinstance(data, dict):
        raise ConfigError("config must be a JSON object")
    return config_from_dict(data)


def config_from_dict(data: dict) -> RendersafeConfig:
    """Parse configuration from a Python dict."""

    url = _as_section(data, "url")
    extra_dangerous = _as_prefix_list(
        url.get("extra_dangerous_protocols"), "url.extra_dangerous_protocols"
    )
    extra_safe = _as_prefix_list(url.get("extra_safe_protocols"), "url.extra_safe_protocols")
    allow_bare_relative = url.get("allow_bare_relative", True)
    if not isinstance(allow_bare_relative, bool):
        raise ConfigError("url.allow_bare_relative must be a boolean")

    audit = _as_section(data, "audit")
    audit_enabled = audit.get("enabled", True)
    if not isinstance(audit_enabled, bool):
        raise ConfigError("audit.enabled must be a boolean")

    return RendersafeConfig(
        url_policy=UrlPolicy(
            extra_dangerous_protocols=extra_dangerous,
            extra_safe_protocols=extra_safe,
            allow_bare_relative=allow_bare_relative,
        ),
        audit=AuditPolicy(enabled=audit_enabled),
    )


def _as_section(data: dict, name: str) -> dict:
    """Fetch an optional nested object, defaulting to empty."""

    section = data.get(name, {})
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigError(f"{name} must be an object")
    return section


def _as_prefix_list(value: Optional[object], name: str) -> List[str]:
    """Validate a list of non-empty protocol prefixes and lower-case them."""

    if value is None:
        return []
    if not isinstance(value, list) or any(not isinstance(item, str) for item in value):
        raise ConfigError(f"{name} must be a list of strings")
    prefixes = [item.strip().lower() for item in value]
    if any(not prefix for prefix in prefixes):
        raise ConfigError(f"{name} must not contain empty prefixes")
    return prefixes
