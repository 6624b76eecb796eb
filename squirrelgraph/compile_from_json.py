"""
compile_from_json.py: CLI for the squirrelgraph compiler
=========================================================
Compiles a saved graph / project JSON file into a Squirrel ``.nut`` script.

Usage
-----
    squirrelgraph-compile <graph.json> [options]
    python -m squirrelgraph.compile_from_json <graph.json> [options]

Options
-------
    --out        <dir>    Output directory (default: $SQUIRRELGRAPH_OUT_DIR or compiled/)
    --print               Print the generated source to stdout instead of writing a file
    --strict              Treat unknown node types as errors (default: warnings only)
    --embed               Prepend a metadata header and embed the project document
    --name       <name>   Output file stem (default: project name, else the JSON file stem)
    --log-level  <level>  DEBUG, INFO, WARNING, ... (default: $SQUIRRELGRAPH_LOG_LEVEL or INFO)

Examples
--------
    # Compile to compiled/my_mod.nut:
    squirrelgraph-compile graphs/my_mod.json

    # Keep the graph restorable from the .nut file:
    squirrelgraph-compile graphs/my_mod.json --embed --out mods/my_mod/scripts/vscripts/

    # Print the generated source without writing a file:
    squirrelgraph-compile graphs/my_mod.json --print
"""

from __future__ import annotations

import argparse
import json
import logging
import re
import sys
from pathlib import Path

from squirrelgraph.compiler import compile_ir_report
from squirrelgraph.compiler.deserialiser import json_to_ir
from squirrelgraph.compiler.schema import SchemaError, validate_file
from squirrelgraph.config import configure_logging, load_settings
from squirrelgraph.project_embed import embed_project, metadata_header

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="squirrelgraph-compile",
        description="Compile a squirrelgraph JSON graph to Squirrel source.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    p.add_argument(
        "graph_json",
        metavar="graph.json",
        help="Path to the graph JSON file to compile.",
    )
    p.add_argument(
        "--out",
        metavar="DIR",
        default=None,
        help="Output directory for the compiled .nut file.",
    )
    p.add_argument(
        "--print",
        dest="print_only",
        action="store_true",
        help="Print generated source to stdout instead of writing a file.",
    )
    p.add_argument(
        "--strict",
        action="store_true",
        default=None,
        help="Treat unknown node types as errors rather than warnings.",
    )
    p.add_argument(
        "--embed",
        action="store_true",
        default=None,
        help="Prepend a metadata header and embed the project data in the output.",
    )
    p.add_argument(
        "--name",
        default=None,
        help="Output file stem (default: the project name, else the JSON file stem).",
    )
    p.add_argument(
        "--log-level",
        default=None,
        help="Logging level (DEBUG, INFO, WARNING, ERROR).",
    )
    return p


def _name_to_filename(name: str) -> str:
    """Turn 'My Mod-Weapons' → 'my_mod_weapons.nut'."""
    safe = re.sub(r"[^a-z0-9]+", "_", name.lower()).strip("_") or "graph"
    return f"{safe}.nut"


def main(argv=None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    settings = load_settings()

    configure_logging(args.log_level or settings.log_level)
    strict = settings.strict if args.strict is None else args.strict
    embed = settings.embed_project if args.embed is None else args.embed

    json_path = Path(args.graph_json)
    if not json_path.exists():
        print(f"[error] File not found: {json_path}", file=sys.stderr)
        return 1

    # ── Validate JSON ────────────────────────────────────────────────────────
    try:
        data = validate_file(json_path, strict=strict)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        print(f"[error] Invalid JSON: {exc}", file=sys.stderr)
        return 1
    except SchemaError as exc:
        print(f"[error] Schema validation failed: {exc}", file=sys.stderr)
        return 1

    graph = json_to_ir(data)
    metadata = data.get("metadata") or {}
    name = args.name or metadata.get("name") or data.get("name") or json_path.stem
    logger.info("graph  : %s", name)
    logger.info("nodes  : %d", len(graph.nodes))
    logger.info("conns  : %d (%d dangling)", len(graph.connections), len(graph.dangling))

    # ── Compile ──────────────────────────────────────────────────────────────
    report = compile_ir_report(graph)
    for err in report.errors:
        print(f"[error] {err.function_name}: {err.message}", file=sys.stderr)

    source = report.source
    if embed:
        header = metadata_header({"name": name, **metadata}, include_graph=True)
        source = embed_project(header + source, data)

    # ── Output ───────────────────────────────────────────────────────────────
    if args.print_only:
        print(source)
        return 0 if report.ok else 1

    out_dir = Path(args.out or settings.out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    out_path = out_dir / _name_to_filename(name)
    out_path.write_text(source, encoding="utf-8")

    logger.info("wrote  : %s", out_path)
    return 0 if report.ok else 1


if __name__ == "__main__":
    sys.exit(main())
