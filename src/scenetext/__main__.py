from __future__ import annotations

"""Command line entry point: `python -m scenetext <command> <file>`."""

import argparse
import logging
import sys
from pathlib import Path

from .config import Settings, configure_logging, load_settings
from .errors import SceneFileError
from .fileio import read_document, write_document
from .model import Document, Prim
from .references import resolve_references
from .writer import write_text

logger = logging.getLogger("scenetext.cli")


def _describe(prim: Prim, depth: int) -> list[str]:
    pad = "  " * depth
    line = f'{pad}{prim.kind} "{prim.name}"'
    if prim.transform is not None:
        line += f" at ({', '.join(f'{v:g}' for v in prim.transform.position)})"
    if prim.has_references:
        line += " -> " + ", ".join(ref.syntax for ref in prim.references)
    lines = [line]
    for name in sorted(prim.attributes):
        attribute = prim.attributes[name]
        lines.append(f"{pad}  .{name} ({attribute.value_kind})")
    for child in prim.children:
        lines.extend(_describe(child, depth + 1))
    return lines


def _show(document: Document) -> list[str]:
    stage = document.stage
    lines = [
        f"defaultPrim: {stage.default_prim or '-'}",
        f"metersPerUnit: {stage.meters_per_unit:g}",
        f"upAxis: {stage.up_axis}",
    ]
    for prim in document.root_prims:
        lines.extend(_describe(prim, 0))
    return lines


def _refs(document: Document, base: Path) -> list[str]:
    lines = []
    for prim in document.walk():
        for reference, resolved in zip(prim.references, resolve_references(prim, base)):
            lines.append(f"{prim.name}\t{reference.file_path}\t{resolved}")
    return lines


def _run(args: argparse.Namespace, settings: Settings) -> int:
    document = read_document(args.path, settings)

    if args.command == "show":
        print("\n".join(_show(document)))
    elif args.command == "check":
        # Serialising enforces the writable kind set and required attributes.
        write_text(document, settings)
        count = sum(1 for _ in document.walk())
        print(f"OK {args.path}: {len(document.root_prims)} root prims, {count} prims")
    elif args.command == "format":
        if args.output is None:
            sys.stdout.write(write_text(document, settings))
        else:
            write_document(document, args.output, settings)
            print(f"Wrote {args.output}")
    elif args.command == "refs":
        lines = _refs(document, Path(args.path).resolve().parent)
        if lines:
            print("\n".join(lines))
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="scenetext",
        description="Inspect, validate and canonicalise `#usda 1.0` scene files.",
    )
    parser.add_argument("--env-file", type=Path, default=None, help="optional .env file with SCENETEXT_* settings")
    parser.add_argument("--debug", action="store_true", help="log at DEBUG level")
    sub = parser.add_subparsers(dest="command", required=True)

    show = sub.add_parser("show", help="print stage metadata and the prim tree")
    show.add_argument("path", type=Path)

    check = sub.add_parser("check", help="parse the file and verify it can be written back")
    check.add_argument("path", type=Path)

    fmt = sub.add_parser("format", help="rewrite the file in canonical form")
    fmt.add_argument("path", type=Path)
    fmt.add_argument("-o", "--output", type=Path, default=None, help="output file; stdout when omitted")

    refs = sub.add_parser("refs", help="list references resolved against the file's directory")
    refs.add_argument("path", type=Path)
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    settings = load_settings(args.env_file)
    if args.debug:
        settings = Settings(file_extension=settings.file_extension, indent=settings.indent, log_level="DEBUG")
    configure_logging(settings)

    try:
        return _run(args, settings)
    except SceneFileError as exc:
        logger.debug(f"{args.command} failed", exc_info=True)
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
