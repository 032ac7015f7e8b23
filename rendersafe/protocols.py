"""Ordered protocol rules for URL classification."""

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

SAFE = "SAFE"
RELATIVE = "RELATIVE"
DANGEROUS = "DANGEROUS"
UNRECOGNIZED = "UNRECOGNIZED"
EMPTY = "EMPTY"

DANGEROUS_PROTOCOLS = (
    "javascript:",
    "data:text/html",
    "vbscript:",
    "file:",
    "about:",
)

SAFE_PROTOCOLS = (
    "http://",
    "https://",
    "data:image/",
    "/",
    "./",
    "../",
)


@dataclass(frozen=True)
class ProtocolRule:
    """A single prefix rule and the classification it yields."""

    prefix: str
    classification: str


def build_rules(
    extra_dangerous: Iterable[str] = (),
    extra_safe: Iterable[str] = (),
) -> Tuple[ProtocolRule, ...]:
    """Build the ordered rule list: dangerous prefixes first, then safe ones."""

    dangerous = list(DANGEROUS_PROTOCOLS) + [p.lower() for p in extra_dangerous]
    safe = list(SAFE_PROTOCOLS) + [p.lower() for p in extra_safe]
    rules = [ProtocolRule(prefix, DANGEROUS) for prefix in dangerous]
    rules.extend(ProtocolRule(prefix, SAFE) for prefix in safe)
    return tuple(rules)


DEFAULT_RULES = build_rules()


def classify_url(
    lowered: str,
    rules: Tuple[ProtocolRule, ...] = DEFAULT_RULES,
    allow_bare_relative: bool = True,
) -> Tuple[str, Optional[str]]:
    """Return the classification and matching prefix for a lower-cased URL.

    The first matching rule wins. Strings matching no rule are treated as bare
    relative paths when they contain no colon at all.
    """

    for rule in rules:
        if lowered.startswith(rule.prefix):
            return rule.classification, rule.prefix
    if allow_bare_relative and ":" not in lowered:
        return RELATIVE, None
    return UNRECOGNIZED, None
