"""CLI entrypoints for vibeedit commands."""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import replace
from pathlib import Path

from .config import ConfigError, StoreConfig, VibeEditConfig, load_config
from .logging import configure_logging
from .orchestrator import EditOrchestrator, Outcome

DEFAULT_STORE_DIR = Path(".vibeedit") / "store"


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=argparse.SUPPRESS if suppress_default else False,
        help="Increase log verbosity for troubleshooting.",
    )


def _add_project_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--project", required=True, help="Project identifier.")


def _add_html_option(parser: argparse.ArgumentParser, *, required: bool) -> None:
    parser.add_argument(
        "--html",
        type=Path,
        required=required,
        help="Path to the project's HTML document.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vibeedit",
        description="Apply natural-language edits to web documents as small validated diffs.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("."),
        help="Path to .vibeedit.yml or the directory containing it (defaults to current directory).",
    )
    parser.add_argument("--log-file", type=Path, help="Also write detailed logs to this file.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    submit_parser = subparsers.add_parser("submit", help="Submit an edit request.")
    _add_verbose_option(submit_parser, suppress_default=True)
    _add_project_option(submit_parser)
    submit_parser.add_argument("--user", required=True, help="Requesting user identifier.")
    _add_html_option(submit_parser, required=False)
    submit_parser.add_argument("--asset-url", help="URL of an uploaded asset the edit should use.")
    submit_parser.add_argument("prompt", help="Natural-language edit request.")

    for name, help_text in (
        ("apply", "Mark a pending edit as applied."),
        ("revert", "Mark a pending edit as reverted."),
    ):
        status_parser = subparsers.add_parser(name, help=help_text)
        _add_verbose_option(status_parser, suppress_default=True)
        _add_project_option(status_parser)
        status_parser.add_argument("edit_id", help="Identifier returned by submit.")

    history_parser = subparsers.add_parser("history", help="List recent edits for a project.")
    _add_verbose_option(history_parser, suppress_default=True)
    _add_project_option(history_parser)
    history_parser.add_argument("--limit", type=int, help="Maximum number of edits to list.")

    reindex_parser = subparsers.add_parser("reindex", help="Rebuild a project's section index.")
    _add_verbose_option(reindex_parser, suppress_default=True)
    _add_project_option(reindex_parser)
    _add_html_option(reindex_parser, required=True)

    index_parser = subparsers.add_parser("index", help="Show a project's section index.")
    _add_verbose_option(index_parser, suppress_default=True)
    _add_project_option(index_parser)

    metrics_parser = subparsers.add_parser("metrics", help="Show aggregate edit metrics.")
    _add_verbose_option(metrics_parser, suppress_default=True)

    errors_parser = subparsers.add_parser("errors", help="List unresolved error log entries.")
    _add_verbose_option(errors_parser, suppress_default=True)
    errors_parser.add_argument("--limit", type=int, help="Maximum number of entries to list.")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP service.")
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="0.0.0.0", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for vibeedit commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    try:
        config = load_config(args.config)
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")
    config = _with_durable_store(config)

    if args.command == "serve":
        from .service import run_service

        run_service(
            host=args.host,
            port=args.port,
            orchestrator_factory=lambda: EditOrchestrator.from_config(config),
        )
        return

    orchestrator = EditOrchestrator.from_config(config)
    try:
        outcome = _dispatch(orchestrator, args)
    except (OSError, UnicodeDecodeError) as exc:
        parser.exit(1, f"vibeedit {args.command} failed: {exc}\n")

    print(json.dumps(outcome.to_dict(), indent=2))
    if not outcome.success:
        parser.exit(1)


def _dispatch(orchestrator: EditOrchestrator, args: argparse.Namespace) -> Outcome:
    command = args.command
    if command == "submit":
        html = _read_html(args.html) if args.html else None
        return orchestrator.submit_edit(
            args.project, args.user, args.prompt, html, asset_url=args.asset_url
        )
    if command == "apply":
        return orchestrator.apply_edit(args.project, args.edit_id)
    if command == "revert":
        return orchestrator.revert_edit(args.project, args.edit_id)
    if command == "history":
        return orchestrator.get_history(args.project, args.limit)
    if command == "reindex":
        return orchestrator.reindex(args.project, _read_html(args.html))
    if command == "index":
        return orchestrator.get_index(args.project)
    if command == "metrics":
        return orchestrator.get_metrics()
    if command == "errors":
        return orchestrator.get_error_logs(args.limit)
    raise ValueError(f"Unknown command {command!r}")  # pragma: no cover - argparse enforces choices


def _with_durable_store(config: VibeEditConfig) -> VibeEditConfig:
    """Default to a JSON store under the config root when none is configured."""
    if config.store.path is not None:
        return config
    return replace(config, store=StoreConfig(path=config.root / DEFAULT_STORE_DIR))


def _read_html(path: Path) -> str:
    return path.read_text(encoding="utf-8")


if __name__ == "__main__":
    main(sys.argv[1:])
