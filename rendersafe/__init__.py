from .audit import AuditHandler
from .config import (
    AuditPolicy,
    ConfigError,
    POLICY_VERSION,
    RendersafeConfig,
    UrlPolicy,
    load_config,
)
from .protocols import (
    DANGEROUS,
    DANGEROUS_PROTOCOLS,
    EMPTY,
    RELATIVE,
    SAFE,
    SAFE_PROTOCOLS,
    UNRECOGNIZED,
)
from .sanitize import sanitize_text, strip_tags
from .server import (
    RendersafeContext,
    RendersafeServer,
    build_tool_handlers,
    load_context,
    main,
    serve_stdio,
)
from .types import UrlVerdict
from .url import inspect_url, sanitize_url

__all__ = [
    "AuditHandler",
    "AuditPolicy",
    "ConfigError",
    "DANGEROUS",
    "DANGEROUS_PROTOCOLS",
    "EMPTY",
    "POLICY_VERSION",
    "RELATIVE",
    "RendersafeConfig",
    "RendersafeContext",
    "RendersafeServer",
    "SAFE",
    "SAFE_PROTOCOLS",
    "UNRECOGNIZED",
    "UrlPolicy",
    "UrlVerdict",
    "build_tool_handlers",
    "inspect_url",
    "load_config",
    "load_context",
    "main",
    "sanitize_text",
    "sanitize_url",
    "serve_stdio",
    "strip_tags",
]
