"""CLI entry point: python -m llmreader [FILE] [options]"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

import yaml

from llmreader import settings

logger = logging.getLogger(__name__)

# Exit codes mirror the HTTP statuses of the error taxonomy
EXIT_OK = 0
EXIT_INTERNAL = 1
EXIT_INVALID_INPUT = 2
EXIT_NO_ARTICLE = 3

_EXIT_BY_STATUS = {400: EXIT_INVALID_INPUT, 404: EXIT_NO_ARTICLE, 500: EXIT_INTERNAL}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="llmreader",
        description=(
            "Extract the article from an HTML document and print it as a\n"
            "structured JSON record or as clean, LLM-ready plain text."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("file", nargs="?", default=None, metavar="FILE",
                        help="HTML file to read ('-' for stdin)")
    parser.add_argument("--url", default=None, metavar="URL",
                        help="Original page URL, used to resolve relative links")
    parser.add_argument("--strip", action="store_true", default=False,
                        help="Print only the normalized plain text")
    parser.add_argument("--request", default=None, metavar="FILE",
                        help=(
                            "JSON/YAML request payload with html, url, "
                            "readabilityOptions and sanitizeOptions keys"
                        ))
    parser.add_argument("--readability-options", default=None, metavar="FILE",
                        help="JSON/YAML file with extraction options")
    parser.add_argument("--sanitize-options", default=None, metavar="FILE",
                        help="JSON/YAML file with sanitizer options")
    parser.add_argument("--engine", default=settings.DEFAULT_ENGINE, metavar="NAME",
                        help=f"Extraction engine (default: {settings.DEFAULT_ENGINE})")
    parser.add_argument("--log-level", default=settings.LOG_LEVEL,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        metavar="{DEBUG,INFO,WARNING,ERROR}",
                        help=f"Logging level (default: {settings.LOG_LEVEL})")
    return parser


def load_payload(path: str) -> Any:
    """Load a JSON or YAML document from *path* (JSON is valid YAML)."""
    return yaml.safe_load(Path(path).read_text(encoding="utf-8"))


def _read_html(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8", errors="replace")


def _print_error(body: dict[str, Any]) -> None:
    from rich.console import Console

    Console(stderr=True).print_json(data=body)


def _gather_request(args: argparse.Namespace) -> dict[str, Any]:
    """Merge the --request payload with explicit flags (flags win)."""
    request: dict[str, Any] = {}
    if args.request:
        payload = load_payload(args.request)
        if isinstance(payload, dict):
            request.update(payload)
        else:
            logger.warning("Ignoring --request payload that is not a mapping")

    if args.file:
        request["html"] = _read_html(args.file)
    if args.url:
        request["url"] = args.url
    if args.readability_options:
        request["readabilityOptions"] = load_payload(args.readability_options)
    if args.sanitize_options:
        request["sanitizeOptions"] = load_payload(args.sanitize_options)
    return request


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format=settings.LOG_FORMAT,
        stream=sys.stderr,
    )

    from llmreader.pipeline import ArticlePipeline, ExtractionError
    from llmreader.plugins import get_engine

    try:
        extractor = get_engine(args.engine)
    except ValueError as exc:
        _print_error({"error": str(exc)})
        return EXIT_INTERNAL

    try:
        request = _gather_request(args)
    except (OSError, yaml.YAMLError) as exc:
        _print_error({"error": "Could not read input.", "details": str(exc)})
        return EXIT_INTERNAL

    pipeline = ArticlePipeline(extractor=extractor)
    try:
        result = pipeline.process(
            request.get("html"),
            request.get("url"),
            request.get("readabilityOptions"),
            request.get("sanitizeOptions"),
        )
    except ExtractionError as exc:
        _print_error(exc.to_dict())
        return _EXIT_BY_STATUS.get(exc.status, EXIT_INTERNAL)

    output = result.render(strip=args.strip)
    if isinstance(output, str):
        sys.stdout.write(output)
        if output and not output.endswith("\n"):
            sys.stdout.write("\n")
    else:
        sys.stdout.write(json.dumps(output, ensure_ascii=False, indent=2) + "\n")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
