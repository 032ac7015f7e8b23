"""Plain-text sanitization helpers."""

import re
from typing import Optional

_TAG_RE = re.compile(r"<[^>]*>")

# Order matters: "&amp;" runs after the bracket entities, so "&amp;lt;" decodes
# to "&lt;" and stays that way.
ENTITY_TABLE = (
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&amp;", "&"),
    ("&quot;", '"'),
    ("&#x27;", "'"),
    ("&#x2F;", "/"),
)


def strip_tags(text: str) -> str:
    """Remove every ``<...>`` span from text."""

    return _TAG_RE.sub("", text)


def decode_entities(text: str) -> str:
    """Decode the fixed entity table in order."""

    for entity, literal in ENTITY_TABLE:
        text = text.replace(entity, literal)
    return text


def sanitize_text(text: Optional[str]) -> str:
    """Strip tags, decode basic entities, then strip any tags they revealed.

    Best-effort only: attribute vectors and encoding tricks beyond the entity
    table are not handled. Never returns ``None``.
    """

    if not isinstance(text, str) or not text:
        return ""
    sanitized = strip_tags(text)
    sanitized = decode_entities(sanitized)
    return strip_tags(sanitized)
