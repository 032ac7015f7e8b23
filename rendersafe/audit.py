"""Rejection audit events and JSONL logging."""

import hashlib
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional

from .config import POLICY_VERSION

REJECTION_ATTR = "rendersafe_rejection"


@dataclass(frozen=True)
class AuditEvent:
    """Structured audit record for a single rejected input."""

    timestamp: str
    kind: str
    classification: str
    protocol: Optional[str]
    content_hash: str
    policy_version: str


def _content_hash(text: str) -> str:
    """Hash the rejected value so the log never carries it verbatim."""

    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def build_audit_event(rejection: Dict[str, object], timestamp: Optional[str] = None) -> AuditEvent:
    """Build an audit event from the rejection payload attached to a log record."""

    event_time = timestamp or datetime.now(timezone.utc).isoformat()
    return AuditEvent(
        timestamp=event_time,
        kind=str(rejection.get("kind", "url")),
        classification=str(rejection["classification"]),
        protocol=rejection.get("protocol"),
        content_hash=_content_hash(str(rejection.get("value", ""))),
        policy_version=POLICY_VERSION,
    )


def audit_event_to_json(event: AuditEvent) -> str:
    """Serialize an audit event to a JSON string."""

    return json.dumps(event.__dict__, sort_keys=True, ensure_ascii=True)


class AuditHandler(logging.Handler):
    """Append-only JSONL writer for sanitizer rejection records.

    Records without a rejection payload are ignored, so the handler can sit on
    a shared logger.
    """

    def __init__(self, path: Path, level: int = logging.WARNING) -> None:
        """Initialize a handler that appends to the given path."""

        super().__init__(level=level)
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def emit(self, record: logging.LogRecord) -> None:
        rejection = getattr(record, REJECTION_ATTR, None)
        if not isinstance(rejection, dict):
            return
        try:
            payload = audit_event_to_json(build_audit_event(rejection))
            with self.path.open("a", encoding="utf-8") as handle:
                handle.write(payload + "\n")
        except (OSError, KeyError, TypeError, ValueError):
            self.handleError(record)
