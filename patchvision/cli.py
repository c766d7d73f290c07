"""
PatchVision — command line entry point.

Applies structured patch requests to files and reports the result.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from patchvision.config.settings import load_settings
from patchvision.core.errors import EditingError, InputMalformedError
from patchvision.core.safe_patch_engine import PatchResponse, SafePatchEngine
from patchvision.ui import colors
from patchvision.utils.diff_utils import render_diff

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_REJECTED = 1
EXIT_USAGE = 2


def _configure_logging(level: str, verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else getattr(logging, level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _render(response: PatchResponse, color: bool) -> str:
    text = response.to_text()
    if not color:
        return text
    head, _, rest = text.partition("\n")
    tone = colors.SUCCESS_FG if response.committed else colors.ERROR_FG
    head = colors.glow(head, tone)
    diff = response.diff.rstrip("\n")
    if response.committed and diff and rest.endswith(diff):
        return head + "\n" + rest[: len(rest) - len(diff)] + render_diff(diff)
    return head + ("\n" + rest if rest else "")


def _read_request_source(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


# =====================================================================
#  COMMANDS
# =====================================================================

def cmd_apply(args: argparse.Namespace) -> int:
    settings = load_settings(args.config)
    _configure_logging(settings.log_level, args.verbose)
    if args.dry_run:
        settings.dry_run = True

    engine = SafePatchEngine(working_dir=args.dir, settings=settings)
    color = not args.no_color and sys.stdout.isatty()

    responses: List[PatchResponse] = []
    for source in args.requests:
        try:
            raw = _read_request_source(source)
        except OSError as e:
            print(f"patchvision: cannot read {source}: {e}", file=sys.stderr)
            return EXIT_USAGE
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as e:
            error = InputMalformedError(f"{source} is not valid JSON: {e}")
            responses.append(PatchResponse(source, False, errors=[error]))
            continue
        # A file holds one request or a list applied in order.
        items = payload if isinstance(payload, list) else [payload]
        responses.extend(engine.apply_many(items))

    if args.json:
        print(json.dumps([r.to_dict() for r in responses], indent=2))
    else:
        print("\n\n".join(_render(r, color) for r in responses))

    return EXIT_OK if all(r.committed for r in responses) else EXIT_REJECTED


def cmd_generated(args: argparse.Namespace) -> int:
    settings = load_settings(args.config)
    _configure_logging(settings.log_level, args.verbose)

    engine = SafePatchEngine(working_dir=args.dir, settings=settings)
    path = engine._validate_path(args.path)
    content = engine.files.read(path)
    if content is None:
        print(f"patchvision: {args.path} does not exist", file=sys.stderr)
        return EXIT_USAGE

    grammar = engine.grammars.for_path(path)
    generated = engine.autogen.is_generated(content, grammar)
    print(f"{args.path}: {'autogenerated' if generated else 'not autogenerated'}")
    return EXIT_OK


# =====================================================================
#  CLI ENTRY WITH SUBCOMMANDS
# =====================================================================

def _create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="patchvision",
        description="PatchVision — apply structured, atomic text patches to files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  patchvision apply request.json          # Apply one request file
  patchvision apply a.json b.json         # Clipboards carry over between files
  cat request.json | patchvision apply -  # Read the request from stdin
  patchvision generated api.pb.go         # Check for generated-file markers
        """
    )

    parser.add_argument(
        "--version",
        action="version",
        version="patchvision 1.0.0"
    )

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--dir",
        type=str,
        help="Directory that relative paths are resolved against"
    )
    common.add_argument(
        "--config",
        type=str,
        help="Config file (JSON or YAML)"
    )
    common.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Debug logging on stderr"
    )

    subparsers = parser.add_subparsers(
        dest="command",
        help="Available commands"
    )

    # apply
    parser_apply = subparsers.add_parser(
        "apply",
        parents=[common],
        help="Apply patch requests"
    )
    parser_apply.add_argument(
        "requests",
        nargs="+",
        metavar="REQUEST",
        help="Request file holding one request or a list of them ('-' for stdin)"
    )
    parser_apply.add_argument(
        "--dry-run",
        action="store_true",
        help="Resolve and show the diff without writing, overriding config"
    )
    parser_apply.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output"
    )
    parser_apply.add_argument(
        "--json",
        action="store_true",
        help="Print responses as JSON"
    )

    # generated
    parser_generated = subparsers.add_parser(
        "generated",
        parents=[common],
        help="Report whether a file looks autogenerated"
    )
    parser_generated.add_argument(
        "path",
        help="File to inspect"
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point with subcommand routing."""
    parser = _create_parser()
    args = parser.parse_args(argv)

    try:
        if args.command == "apply":
            return cmd_apply(args)
        elif args.command == "generated":
            return cmd_generated(args)
    except (FileNotFoundError, ValueError) as e:
        print(f"patchvision: {e}", file=sys.stderr)
        return EXIT_USAGE
    except EditingError as e:
        print(f"patchvision: {e}", file=sys.stderr)
        return EXIT_USAGE

    parser.print_help()
    return EXIT_USAGE


if __name__ == "__main__":
    sys.exit(main())
