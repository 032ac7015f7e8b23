"""Line-delimited JSON stdio server exposing the sanitizers."""

from dataclasses import asdict, dataclass, is_dataclass
import inspect
import json
import logging
from pathlib import Path
import sys
from typing import Callable, Dict, IO, Optional, Set

from .audit import AuditHandler
from .config import RendersafeConfig, load_config
from .sanitize import sanitize_text
from .types import UrlVerdict
from .url import inspect_url, sanitize_url

DEFAULT_CONFIG_PATH = Path("config/rendersafe.yaml")
DEFAULT_DATA_DIR = Path(".rendersafe")
SERVER_LOGGER_NAME = "rendersafe.server"


@dataclass(frozen=True)
class RendersafeContext:
    """Runtime context holding config and the diagnostic logger."""

    config: RendersafeConfig
    logger: logging.Logger
    audit_path: Optional[Path]


def load_context(
    config_path: Optional[Path] = None,
    data_dir: Optional[Path] = None,
) -> RendersafeContext:
    """Load configuration and wire the audit log onto the server logger."""

    resolved_config = load_config(config_path or DEFAULT_CONFIG_PATH)
    logger = logging.getLogger(SERVER_LOGGER_NAME)
    audit_path = None
    if resolved_config.audit.enabled:
        logs_dir = (data_dir or DEFAULT_DATA_DIR) / "logs"
        logs_dir.mkdir(parents=True, exist_ok=True)
        audit_path = logs_dir / "audit.jsonl"
        _attach_audit_handler(logger, audit_path)
    return RendersafeContext(config=resolved_config, logger=logger, audit_path=audit_path)


def _attach_audit_handler(logger: logging.Logger, path: Path) -> None:
    """Attach an AuditHandler for path unless one is already present."""

    for handler in logger.handlers:
        if isinstance(handler, AuditHandler) and handler.path == path:
            return
    logger.addHandler(AuditHandler(path))


def build_tool_handlers(context: RendersafeContext) -> Dict[str, Callable[..., object]]:
    """Build tool handler callables bound to the runtime context."""

    policy = context.config.url_policy
    logger = context.logger

    # Requests supply only the input; policy and logger stay bound to the context.
    def tool_sanitize_url(url: Optional[str] = None) -> Optional[str]:
        return sanitize_url(url, policy=policy, logger=logger)

    def tool_inspect_url(url: Optional[str] = None) -> UrlVerdict:
        return inspect_url(url, policy=policy, logger=logger)

    def tool_sanitize_text(text: Optional[str] = None) -> str:
        return sanitize_text(text)

    return {
        "sanitize_url": tool_sanitize_url,
        "inspect_url": tool_inspect_url,
        "sanitize_text": tool_sanitize_text,
    }


class RendersafeServer:
    """Dispatch tool calls from JSON requests."""

    def __init__(self, handlers: Dict[str, Callable[..., object]]) -> None:
        """Initialize the server with tool handlers."""

        self._handlers = handlers

    def handle_request(self, request: Dict[str, object]) -> Dict[str, object]:
        """Handle a single tool request payload."""

        request_id = request.get("id")
        tool = request.get("tool")
        args = request.get("args", {})
        if not isinstance(tool, str):
            return self._error(request_id, "INVALID_REQUEST", "missing tool name")
        if not isinstance(args, dict):
            return self._error(request_id, "INVALID_REQUEST", "args must be an object")
        handler = self._handlers.get(tool)
        if handler is None:
            return self._error(request_id, "UNKNOWN_TOOL", f"unknown tool: {tool}")
        unexpected = sorted(set(args) - _parameter_names(handler))
        if unexpected:
            return self._error(
                request_id, "INVALID_REQUEST", f"unexpected args for {tool}: {', '.join(unexpected)}"
            )
        try:
            result = handler(**args)
        except Exception as exc:
            return self._error(request_id, "TOOL_ERROR", str(exc))
        return {"id": request_id, "result": self._serialize(result)}

    def _serialize(self, result: object) -> object:
        """Serialize dataclass results to plain dicts."""

        if is_dataclass(result):
            return asdict(result)
        return result

    def _error(self, request_id: object, code: str, message: str) -> Dict[str, object]:
        """Create a standard error payload."""

        return {"id": request_id, "error": {"code": code, "message": message}}


def _parameter_names(handler: Callable[..., object]) -> Set[str]:
    """Names a handler accepts as keyword arguments."""

    try:
        parameters = inspect.signature(handler).parameters.values()
    except (TypeError, ValueError):
        return set()
    return {
        p.name
        for p in parameters
        if p.kind in (inspect.Parameter.POSITIONAL_OR_KEYWORD, inspect.Parameter.KEYWORD_ONLY)
    }

def serve_stdio(
    server: RendersafeServer,
    input_stream: IO[str] = sys.stdin,
    output_stream: IO[str] = sys.stdout,
) -> None:
    """Serve line-delimited JSON requests over stdio."""

    for line in input_stream:
        line = line.strip()
        if not line:
            continue
        try:
            request = json.loads(line)
        except json.JSONDecodeError as exc:
            response = {"id": None, "error": {"code": "INVALID_JSON", "message": str(exc)}}
        else:
            if not isinstance(request, dict):
                response = {
                    "id": None,
                    "error": {"code": "INVALID_REQUEST", "message": "request must be an object"},
                }
            else:
                response = server.handle_request(request)
        output_stream.write(json.dumps(response, ensure_ascii=True) + "\n")
        output_stream.flush()


def main(argv: Optional[list] = None) -> int:
    """CLI entrypoint for the stdio sanitizer server."""

    import argparse

    parser = argparse.ArgumentParser(description="rendersafe stdio sanitizer server")
    parser.add_argument(
        "--config",
        dest="config_path",
        default=str(DEFAULT_CONFIG_PATH),
        help="Path to config/rendersafe.yaml (JSON-compatible YAML)",
    )
    parser.add_argument(
        "--data-dir",
        dest="data_dir",
        default=str(DEFAULT_DATA_DIR),
        help="Path to data directory (.rendersafe by default)",
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Diagnostic log level written to stderr",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level, stream=sys.stderr)
    context = load_context(
        config_path=Path(args.config_path),
        data_dir=Path(args.data_dir),
    )
    server = RendersafeServer(build_tool_handlers(context))
    serve_stdio(server)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
