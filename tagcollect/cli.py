"""CLI entrypoints for tagcollect commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import CollectConfig, ConfigError, TagCollectConfig, load_config
from .exporter import AttributeExporter
from .loader import LoaderError, load_program
from .logging import configure_logging
from .models import MissingBodyError


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


def _add_collect_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("program", help="Program dump to read (.json, .yml or .yaml).")
    parser.add_argument(
        "--no-bodies",
        action="store_true",
        help="Skip statement and operand tags inside method bodies.",
    )
    parser.add_argument(
        "--no-keys",
        action="store_true",
        help="Do not emit colour keys from class-level key tags.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to .tagcollect.yml (defaults to the program dump's directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tagcollect",
        description="Collect IR tags into XML attribute documents.",
    )
    _add_verbose_option(parser)
    parser.add_argument("--log-file", default=None, help="Also write logs to this file.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    export_parser = subparsers.add_parser(
        "export",
        help="Write one attributes document per class.",
    )
    _add_verbose_option(export_parser, suppress_default=True)
    _add_collect_options(export_parser)
    export_parser.add_argument(
        "--output-dir",
        default=None,
        help="Directory for the XML documents (overrides the configured directory).",
    )

    print_parser = subparsers.add_parser(
        "print",
        help="Print attribute documents to stdout.",
    )
    _add_verbose_option(print_parser, suppress_default=True)
    _add_collect_options(print_parser)
    print_parser.add_argument(
        "--class",
        dest="class_name",
        default=None,
        help="Only print the named class.",
    )

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP service.")
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    return parser


def _load_config(args: argparse.Namespace) -> TagCollectConfig:
    config_path = Path(args.config) if args.config else Path(args.program).parent
    return load_config(config_path)


def _build_exporter(args: argparse.Namespace, config: TagCollectConfig) -> AttributeExporter:
    collect = CollectConfig(
        include_bodies=config.collect.include_bodies and not args.no_bodies,
        keys=config.collect.keys and not args.no_keys,
    )
    return AttributeExporter(collect=collect, output=config.output)


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for tagcollect commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    log_file = Path(args.log_file) if args.log_file else None

    if args.command == "serve":
        configure_logging(verbose=bool(args.verbose), log_file=log_file)
        from .service import run_service

        run_service(host=args.host, port=args.port)
        return

    try:
        config = _load_config(args)
    except ConfigError as exc:
        parser.exit(1, f"tagcollect {args.command} failed: {exc}\n")

    configure_logging(
        verbose=bool(args.verbose) or config.logging.verbose,
        log_file=log_file or config.logging.file,
    )

    try:
        exporter = _build_exporter(args, config)
        program = load_program(Path(args.program))
    except FileNotFoundError as exc:
        parser.exit(1, f"{exc}\n")
    except LoaderError as exc:
        parser.exit(1, f"tagcollect {args.command} failed: {exc}\n")

    try:
        if args.command == "export":
            output_dir = Path(args.output_dir) if args.output_dir else None
            results = exporter.export(program, output_dir)
            for result in results:
                if result.path is None:
                    print(f"{result.class_name}: skipped (no tags)")
                else:
                    print(
                        f"{result.class_name}: {_relativize(result.path)} "
                        f"({result.attributes} attributes, {result.keys} keys)"
                    )
        elif args.command == "print":
            classes = program.classes
            if args.class_name is not None:
                selected = program.find_class(args.class_name)
                if selected is None:
                    parser.exit(1, f"Unknown class: {args.class_name}\n")
                classes = [selected]
            for program_class in classes:
                sys.stdout.write(exporter.render_class(program_class))
        else:  # pragma: no cover - argparse enforces choices
            parser.exit(1, "Unknown command\n")
    except (LoaderError, MissingBodyError) as exc:
        parser.exit(1, f"tagcollect {args.command} failed: {exc}\nRun with --verbose for more details.\n")


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
