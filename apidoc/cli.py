"""CLI entrypoints for apidoc commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import ApiDocConfig, load_config
from .errors import AccessError, ConfigError, GenerationCancelled
from .logging import configure_logging, get_logger
from .orchestrator import Orchestrator
from .renderers import available_formats


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="apidoc",
        description="Generate API documentation from Python and Java sources.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_parser = subparsers.add_parser(
        "generate",
        help="Scan a source tree and render API documentation.",
    )
    _add_verbose_option(generate_parser, suppress_default=True)
    generate_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the source root (defaults to current directory).",
    )
    generate_parser.add_argument(
        "-f",
        "--format",
        dest="formats",
        action="append",
        choices=available_formats(),
        help="Output format; repeat for several (default: from config or markdown).",
    )
    generate_parser.add_argument(
        "-o",
        "--output-dir",
        type=Path,
        help="Directory to write rendered files into (default: print to stdout).",
    )
    generate_parser.add_argument(
        "--config",
        type=Path,
        help="Explicit configuration file instead of <path>/.apidoc.yml.",
    )
    generate_parser.add_argument(
        "--include-private",
        action="store_true",
        default=None,
        help="Document private declarations as well.",
    )
    generate_parser.add_argument(
        "--log-file",
        type=Path,
        help="Also write logs to this file.",
    )

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP service.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for apidoc commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=getattr(args, "log_file", None))
    logger = get_logger("cli")

    if args.command == "generate":
        try:
            config = _resolve_config(args)
            result = Orchestrator().generate(args.path, config)
        except (ConfigError, AccessError) as exc:
            parser.exit(1, f"apidoc generate failed: {exc}\n")
        except GenerationCancelled as exc:  # pragma: no cover - interactive interrupt
            parser.exit(1, f"{exc}\n")

        for diagnostic in result.diagnostics:
            logger.warning("%s", diagnostic)
        if result.written:
            for path in result.written:
                print(f"Documentation written to {_relativize(path)}")
        else:
            for output in result.outputs:
                sys.stdout.write(output.content)
    elif args.command == "serve":  # pragma: no cover - integration path
        from .service.app import run_service

        run_service(host=args.host, port=args.port)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _resolve_config(args: argparse.Namespace) -> ApiDocConfig:
    root = Path(args.path).expanduser()
    if args.config is not None:
        if not args.config.is_file():
            raise ConfigError(f"Configuration file not found: {args.config}")
        config = load_config(args.config)
    elif root.is_dir():
        config = load_config(root)
    else:
        config = ApiDocConfig(root=root)
    if args.formats:
        config.formats = list(args.formats)
    if args.output_dir is not None:
        config.output_dir = args.output_dir.expanduser().resolve()
    if args.include_private is not None:
        config.include_private = True
    return config


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
