import io
import json
import logging
import tempfile
from pathlib import Path
import unittest

from rendersafe.audit import AuditHandler
from rendersafe.server import (
    RendersafeServer,
    build_tool_handlers,
    load_context,
    serve_stdio,
)


class ServerTests(unittest.TestCase):
    def tearDown(self) -> None:
        logger = logging.getLogger("rendersafe.server")
        for handler in list(logger.handlers):
            if isinstance(handler, AuditHandler):
                logger.removeHandler(handler)
                handler.close()

    def _write_config(self, tmp_path: Path, data: dict) -> Path:
        config_dir = tmp_path / "config"
        config_dir.mkdir()
        config_path = config_dir / "rendersafe.yaml"
        config_path.write_text(json.dumps(data), encoding="utf-8")
        return config_path

    def test_load_context_reads_config(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            tmp_path = Path(tmpdir)
            config_path = self._write_config(
                tmp_path, {"url": {"extra_safe_protocols": ["mailto:"]}}
            )
            context = load_context(config_path=config_path, data_dir=tmp_path / "data")
            self.assertEqual(context.config.url_policy.extra_safe_protocols, ["mailto:"])
            self.assertTrue((tmp_path / "data" / "logs").exists())
            self.assertEqual(context.audit_path, tmp_path / "data" / "logs" / "audit.jsonl")

    def test_load_context_does_not_duplicate_audit_handler(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            tmp_path = Path(tmpdir)
            config_path = self._write_config(tmp_path, {})
            load_context(config_path=config_path, data_dir=tmp_path / "data")
            context = load_context(config_path=config_path, data_dir=tmp_path / "data")
            audit_handlers = [
                h for h in context.logger.handlers if isinstance(h, AuditHandler)
            ]
            self.assertEqual(len(audit_handlers), 1)

    def test_audit_disabled_skips_log_dir(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            tmp_path = Path(tmpdir)
            config_path = self._write_config(tmp_path, {"audit": {"enabled": False}})
            context = load_context(config_path=config_path, data_dir=tmp_path / "data")
            self.assertIsNone(context.audit_path)
            self.assertFalse((tmp_path / "data" / "logs").exists())

    def test_tool_handlers_use_context_policy(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            tmp_path = Path(tmpdir)
            config_path = self._write_config(
                tmp_path, {"url": {"extra_safe_protocols": ["mailto:"]}}
            )
            context = load_context(config_path=config_path, data_dir=tmp_path / "data")
            handlers = build_tool_handlers(context)

            self.assertEqual(handlers["sanitize_url"]("mailto:a@b.c"), "mailto:a@b.c")
            self.assertIsNone(handlers["sanitize_url"]("javascript:alert(1)"))
            self.assertEqual(handlers["sanitize_text"]("<b>hi</b>"), "hi")

            lines = context.audit_path.read_text(encoding="utf-8").splitlines()
            self.assertEqual(len(lines), 1)
            self.assertEqual(json.loads(lines[0])["protocol"], "javascript:")

    def test_request_args_cannot_replace_bound_policy_or_logger(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            tmp_path = Path(tmpdir)
            config_path = self._write_config(
                tmp_path,
                {
                    "url": {
                        "allow_bare_relative": False,
                        "extra_dangerous_protocols": ["https://evil.example"],
                    }
                },
            )
            context = load_context(config_path=config_path, data_dir=tmp_path / "data")
            server = RendersafeServer(build_tool_handlers(context))

            requests = [
                {"id": 1, "tool": "sanitize_url", "args": {"url": "evil/path", "policy": None}},
                {"id": 2, "tool": "inspect_url", "args": {"url": "evil/path", "policy": None}},
                {"id": 3, "tool": "sanitize_url", "args": {"url": "javascript:x", "logger": None}},
                {"id": 4, "tool": "sanitize_text", "args": {"text": "x", "policy": None}},
            ]
            for request in requests:
                with self.subTest(request=request):
                    response = server.handle_request(request)
                    self.assertNotIn("result", response)
                    self.assertEqual(response["error"]["code"], "INVALID_REQUEST")

            response = server.handle_request(
                {"id": 5, "tool": "sanitize_url", "args": {"url": "evil/path"}}
            )
            self.assertIsNone(response["result"])
            response = server.handle_request(
                {"id": 6, "tool": "sanitize_url", "args": {"url": "https://evil.example/x"}}
            )
            self.assertIsNone(response["result"])

            lines = context.audit_path.read_text(encoding="utf-8").splitlines()
            self.assertEqual(len(lines), 2)


class RequestDispatchTests(unittest.TestCase):
    def setUp(self) -> None:
        self.server = RendersafeServer(
            {
                "sanitize_text": lambda text: text.upper(),
                "explode": lambda: 1 / 0,
            }
        )

    def test_dispatches_tool(self) -> None:
        response = self.server.handle_request(
            {"id": 7, "tool": "sanitize_text", "args": {"text": "ok"}}
        )
        self.assertEqual(response, {"id": 7, "result": "OK"})

    def test_error_payloads(self) -> None:
        cases = [
            ({"id": 1}, "INVALID_REQUEST"),
            ({"id": 2, "tool": "sanitize_text", "args": []}, "INVALID_REQUEST"),
            ({"id": 3, "tool": "missing"}, "UNKNOWN_TOOL"),
            ({"id": 4, "tool": "explode"}, "TOOL_ERROR"),
            ({"id": 5, "tool": "sanitize_text", "args": {"bogus": 1}}, "INVALID_REQUEST"),
        ]
        for request, code in cases:
            with self.subTest(request=request):
                response = self.server.handle_request(request)
                self.assertEqual(response["id"], request["id"])
                self.assertEqual(response["error"]["code"], code)


class StdioTests(unittest.TestCase):
    def test_serve_stdio_round_trip(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            tmp_path = Path(tmpdir)
            context = load_context(
                config_path=tmp_path / "missing.yaml", data_dir=tmp_path / "data"
            )
            try:
                server = RendersafeServer(build_tool_handlers(context))
                requests = [
                    {"id": 1, "tool": "sanitize_url", "args": {"url": " /a "}},
                    {"id": 2, "tool": "inspect_url", "args": {"url": "vbscript:x"}},
                    {"id": 3, "tool": "sanitize_text", "args": {"text": "a &lt;b&gt; c"}},
                ]
                input_stream = io.StringIO(
                    "\n".join(json.dumps(r) for r in requests) + "\n\nnot json\n[1]\n"
                )
                output_stream = io.StringIO()
                serve_stdio(server, input_stream=input_stream, output_stream=output_stream)
            finally:
                for handler in list(context.logger.handlers):
                    if isinstance(handler, AuditHandler):
                        context.logger.removeHandler(handler)
                        handler.close()

            responses = [json.loads(line) for line in output_stream.getvalue().splitlines()]
            self.assertEqual(len(responses), 5)
            self.assertEqual(responses[0]["result"], "/a")
            self.assertEqual(
                responses[1]["result"],
                {"url": None, "classification": "DANGEROUS", "matched_protocol": "vbscript:"},
            )
            self.assertEqual(responses[2]["result"], "a  c")
            self.assertEqual(responses[3]["error"]["code"], "INVALID_JSON")
            self.assertEqual(responses[4]["error"]["code"], "INVALID_REQUEST")
