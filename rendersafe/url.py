"""URL scheme classification and sanitization."""

import logging
from typing import Optional

from .audit import REJECTION_ATTR
from .config import UrlPolicy
from .protocols import DANGEROUS, DEFAULT_RULES, EMPTY, RELATIVE, SAFE, classify_url
from .types import UrlVerdict

_logger = logging.getLogger(__name__)

# Space separators, line terminators and BOM. Unlike str.strip(), \x1c-\x1f and \x85 are kept.
TRIM_CHARS = (
    "\t\n\v\f\r \u00a0\u1680"
    "\u2000\u2001\u2002\u2003\u2004\u2005\u2006\u2007\u2008\u2009\u200a"
    "\u2028\u2029\u202f\u205f\u3000\ufeff"
)


def inspect_url(
    url: Optional[str],
    policy: Optional[UrlPolicy] = None,
    logger: Optional[logging.Logger] = None,
) -> UrlVerdict:
    """Classify a candidate URL and return the verdict with the cleaned value.

    Dangerous prefixes are checked before safe ones. Rejections are reported as
    warnings on ``logger``; no input raises.
    """

    log = logger or _logger
    if not isinstance(url, str):
        return UrlVerdict(url=None, classification=EMPTY)
    trimmed = url.strip(TRIM_CHARS)
    if not trimmed:
        return UrlVerdict(url=None, classification=EMPTY)

    if policy is None:
        classification, prefix = classify_url(trimmed.lower(), DEFAULT_RULES)
    else:
        classification, prefix = classify_url(
            trimmed.lower(), policy.rules(), allow_bare_relative=policy.allow_bare_relative
        )

    if classification in (SAFE, RELATIVE):
        return UrlVerdict(url=trimmed, classification=classification, matched_protocol=prefix)

    extra = {REJECTION_ATTR: _rejection(trimmed, classification, prefix)}
    if classification == DANGEROUS:
        log.warning("Blocked potentially malicious URL with protocol: %s", prefix, extra=extra)
    else:
        log.warning("Blocked URL with unsafe protocol: %r", trimmed, extra=extra)
    return UrlVerdict(url=None, classification=classification, matched_protocol=prefix)


def sanitize_url(
    url: Optional[str],
    policy: Optional[UrlPolicy] = None,
    logger: Optional[logging.Logger] = None,
) -> Optional[str]:
    """Return the trimmed URL if its scheme is safe, otherwise ``None``."""

    return inspect_url(url, policy=policy, logger=logger).url


def _rejection(url: str, classification: str, prefix: Optional[str]) -> dict:
    return {"kind": "url", "value": url, "classification": classification, "protocol": prefix}
