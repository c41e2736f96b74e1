"""Command-line entry point.

Generates JSON-LD for one HTML file at a time. Page metadata comes from the
command line; the generated schema is written to stdout and logs go to stderr.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

from jsonldgen import __version__
from jsonldgen.app import lifespan
from jsonldgen.config import Settings
from jsonldgen.models.payload import TYPE_HINTS, PageMetadata
from jsonldgen.pages import InMemoryPageSource

if TYPE_CHECKING:
    from jsonldgen.state import AppState


def _read_text(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


def _page_from_args(args: argparse.Namespace) -> PageMetadata:
    return PageMetadata(
        title=args.title or args.entity_id,
        url=args.url,
        page_type=args.page_type,
        excerpt=args.excerpt,
        modified_at=args.modified_at,
        type_hint=args.type_hint,
    )


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False, default=str))


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def _analyzed(args: argparse.Namespace) -> dict[str, Any] | None:
    return json.loads(_read_text(args.analyzed)) if args.analyzed else None


async def _generate(state: AppState, args: argparse.Namespace) -> int:
    analyzed = _analyzed(args)
    result = await state.orchestrator.generate(
        args.entity_id,
        _read_text(args.html),
        state.settings.generation,
        force=args.force,
        analyzed_content=analyzed,
    )
    if not result.success:
        print(json.dumps(result.to_dict(), ensure_ascii=False), file=sys.stderr)
        return 1
    print(result.schema)
    return 0


async def _status(state: AppState, args: argparse.Namespace) -> int:
    status = await state.orchestrator.cache_status(
        args.entity_id,
        _read_text(args.html),
        state.settings.generation,
        analyzed_content=_analyzed(args),
    )
    _print_json(
        {
            "entity_id": args.entity_id,
            "has_schema": status.has_schema,
            "is_current": status.is_current,
            "generated_at": status.generated_at.isoformat() if status.generated_at else None,
        }
    )
    return 0


async def _invalidate(state: AppState, args: argparse.Namespace) -> int:
    await state.orchestrator.invalidate(args.entity_id)
    return 0


async def _test_connection(state: AppState, args: argparse.Namespace) -> int:
    provider = state.registry.get_active(state.settings.generation)
    if provider is None:
        print(f"Provider not found: {state.settings.generation.provider}", file=sys.stderr)
        return 1
    result = await provider.test_connection(state.settings.generation)
    if result.success:
        print(result.message)
        return 0
    print(result.error, file=sys.stderr)
    return 1


async def _run(args: argparse.Namespace) -> int:
    settings = Settings()
    pages = InMemoryPageSource()
    if getattr(args, "entity_id", None) and hasattr(args, "title"):
        pages.add(args.entity_id, _page_from_args(args))

    async with lifespan(settings, pages) as state:
        return await args.func(state, args)


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jsonldgen",
        description="Generate schema.org JSON-LD for web pages with an LLM provider.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    page = argparse.ArgumentParser(add_help=False)
    page.add_argument("html", help="HTML file with the page body ('-' for stdin)")
    page.add_argument("--id", dest="entity_id", required=True, help="Stable page identifier")
    page.add_argument("--title", default="", help="Page title (defaults to the id)")
    page.add_argument("--url", default="", help="Canonical page URL")
    page.add_argument("--page-type", default="page", help="Host content type, e.g. post or page")
    page.add_argument("--excerpt", default="", help="Page excerpt or summary")
    page.add_argument("--modified-at", default="", help="Last-modified timestamp")
    page.add_argument(
        "--type-hint",
        default="auto",
        choices=TYPE_HINTS,
        help="Preferred root schema.org type",
    )

    subparsers = parser.add_subparsers(dest="command", title="commands")

    generate_parser = subparsers.add_parser(
        "generate", parents=[page], help="Generate (or reuse cached) JSON-LD for a page"
    )
    generate_parser.add_argument(
        "--force", action="store_true", help="Bypass the cache"
    )
    generate_parser.add_argument(
        "--analyzed", help="JSON file with pre-analyzed content (switches to analyzed mode)"
    )
    generate_parser.set_defaults(func=_generate)

    status_parser = subparsers.add_parser(
        "status", parents=[page], help="Show whether the cached schema is current"
    )
    status_parser.add_argument(
        "--analyzed", help="JSON file with the pre-analyzed content used for generation"
    )
    status_parser.set_defaults(func=_status)

    invalidate_parser = subparsers.add_parser("invalidate", help="Drop the cached schema")
    invalidate_parser.add_argument("--id", dest="entity_id", required=True)
    invalidate_parser.set_defaults(func=_invalidate)

    test_parser = subparsers.add_parser(
        "test-connection", help="Check the active provider's API key and endpoint"
    )
    test_parser.set_defaults(func=_test_connection)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    try:
        exit_code = asyncio.run(_run(args))
    except (OSError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(2)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
