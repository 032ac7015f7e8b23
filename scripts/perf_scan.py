#!/usr/bin/env python3
"""Simple performance baseline for rendersafe sanitizers."""

from __future__ import annotations

import argparse
import json
import logging
import random
import time
from typing import Callable, Dict, List

from rendersafe.sanitize import sanitize_text
from rendersafe.url import sanitize_url


_BENIGN_SNIPPETS = [
    "This document provides a brief overview of the project.",
    "Installation steps &amp; notes are listed below.",
    "Please see the documentation for more details.",
    "Scores are &quot;final&quot; once published.",
]

_MARKUP_SNIPPETS = [
    "<script>alert(1)</script>",
    "&lt;img src=x onerror=alert(1)&gt;",
    "<b>bold</b>",
    "<a href=\"javascript:void(0)\">click</a>",
]

_URLS = [
    "https://example.com/avatar.png",
    "  http://example.com/a?b=c  ",
    "/static/img/logo.svg",
    "images/tile.png",
    "javascript:alert(1)",
    "data:text/html;base64,PHNjcmlwdD4=",
    "mailto:someone@example.com",
    "data:image/png;base64,iVBORw0KGgo=",
]


def _build_text(target_bytes: int, inject_every: int) -> str:
    chunks: List[str] = []
    size = 0
    i = 0
    while size < target_bytes:
        if inject_every and i % inject_every == 0:
            chunk = random.choice(_MARKUP_SNIPPETS)
        else:
            chunk = random.choice(_BENIGN_SNIPPETS)
        chunks.append(chunk)
        size += len(chunk) + 1
        i += 1
    return " ".join(chunks)


def _time(fn: Callable[[], object], runs: int) -> Dict[str, float]:
    durations: List[float] = []
    for _ in range(runs):
        start = time.perf_counter()
        fn()
        durations.append(time.perf_counter() - start)
    durations.sort()
    return {
        "min_ms": durations[0] * 1000.0,
        "p50_ms": durations[len(durations) // 2] * 1000.0,
        "max_ms": durations[-1] * 1000.0,
    }


def _sanitize_urls(count: int, logger: logging.Logger) -> None:
    for i in range(count):
        sanitize_url(_URLS[i % len(_URLS)], logger=logger)


def main() -> int:
    parser = argparse.ArgumentParser(description="rendersafe perf baseline.")
    parser.add_argument("--sizes", nargs="+", type=int, default=[100_000, 500_000, 1_000_000])
    parser.add_argument("--runs", type=int, default=5)
    parser.add_argument("--inject-every", type=int, default=10)
    parser.add_argument("--url-count", type=int, default=100_000)
    parser.add_argument(
        "--output",
        type=str,
        default="",
        help="Optional path to write results as JSON.",
    )
    args = parser.parse_args()

    # Silence rejection warnings while timing.
    quiet = logging.getLogger("rendersafe.perf")
    quiet.disabled = True

    print("rendersafe perf baseline")
    print(f"sizes={args.sizes} bytes, runs={args.runs}, inject_every={args.inject_every}")

    results: Dict[str, Dict[str, float]] = {}
    for size in args.sizes:
        text = _build_text(size, args.inject_every)
        stats = _time(lambda: sanitize_text(text), args.runs)
        results[f"text_{size}"] = stats
        print(
            f"  text size={size} min={stats['min_ms']:.2f}ms "
            f"p50={stats['p50_ms']:.2f}ms max={stats['max_ms']:.2f}ms"
        )

    stats = _time(lambda: _sanitize_urls(args.url_count, quiet), args.runs)
    results[f"url_{args.url_count}"] = stats
    print(
        f"  urls count={args.url_count} min={stats['min_ms']:.2f}ms "
        f"p50={stats['p50_ms']:.2f}ms max={stats['max_ms']:.2f}ms"
    )

    if args.output:
        output_path = args.output
        with open(output_path, "w", encoding="utf-8") as handle:
            json.dump(
                {
                    "sizes": args.sizes,
                    "runs": args.runs,
                    "inject_every": args.inject_every,
                    "url_count": args.url_count,
                    "results": results,
                },
                handle,
                indent=2,
                sort_keys=True,
            )
        print(f"\nWrote results to {output_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
