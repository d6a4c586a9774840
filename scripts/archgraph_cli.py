#!/usr/bin/env python3
"""
archgraph CLI

Usage modes:
- Default run: load relation data, settle the layout headless, print positions or write JSON
- Validation: check graph invariants, print issues
- Stats: graph statistics (counts, degrees, hubs)
- Export: write GraphML for external tools
- Utility: show version, dry-run build only
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from archgraph_core.builder import build_from_file  # noqa: E402
from archgraph_core.config import ViewConfig, load_config  # noqa: E402
from archgraph_core.errors import DataLoadError, MalformedRecord  # noqa: E402
from archgraph_core.layout import LayoutEngine  # noqa: E402
from archgraph_core.metrics import layout_summary  # noqa: E402
from archgraph_core.viewport import Viewport  # noqa: E402

DEFAULT_DATA = ROOT / "data" / "arkitekter_byggnader.json"


def parse_args(argv: List[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        description="Build the architect/building graph and settle its layout",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    # Utilities / meta
    p.add_argument("--version", action="store_true", help="Print version and exit")
    p.add_argument("-v", "--verbose", action="count", default=0, help="Increase verbosity (-v, -vv)")

    # Primary input
    p.add_argument("data", nargs="?", default=str(DEFAULT_DATA), help="SPARQL JSON results file")
    p.add_argument("--config", type=str, default="", help="Optional YAML config file")

    # Execution
    p.add_argument("--ticks", type=int, default=0, help="Maximum ticks to run (0 = until settled)")
    p.add_argument("--seed", type=int, default=None, help="Seed for the layout jiggle")
    p.add_argument("--window", type=str, default="", help="Window size WIDTHxHEIGHT for centering")
    p.add_argument("--dry-run", action="store_true", help="Build only; do not run the layout")
    p.add_argument("--out", type=str, default="", help="Optional output JSON file path")

    # Analysis / export
    p.add_argument("--validate", action="store_true", help="Check graph invariants; with --stats both reports go to one document")
    p.add_argument("--stats", action="store_true", help="Print graph statistics")
    p.add_argument("--export-graphml", type=str, default="", help="Export the graph to GraphML at given path")

    return p.parse_args(argv)


def build_config(args: argparse.Namespace) -> ViewConfig:
    cfg = load_config(args.config) if args.config else ViewConfig()
    if args.seed is not None:
        cfg.layout.seed = int(args.seed)
    if args.window:
        w, _, h = args.window.lower().partition("x")
        cfg.viewport.initial_window_width = float(w)
        cfg.viewport.initial_window_height = float(h)
    return cfg


def setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def emit(payload: Dict[str, Any], out: str) -> None:
    if out:
        with open(out, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)
    else:
        print(json.dumps(payload, indent=2, ensure_ascii=False))


def main(argv: List[str] | None = None) -> int:
    from archgraph_core import __version__ as archgraph_version

    args = parse_args(argv)
    setup_logging(args.verbose)

    if args.version:
        print(archgraph_version)
        return 0

    cfg = build_config(args)

    logging.info("Loading relation data from %s", args.data)
    try:
        g = build_from_file(args.data)
    except (DataLoadError, MalformedRecord) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    issues: Dict[str, Any] = {}
    if args.validate:
        issues = g.validate_integrity()
        logging.info("Validation issue categories: %d", len(issues))
        validation = {"valid": not issues, "issues": issues}
        if not args.stats:
            emit(validation, args.out)
            return 1 if issues else 0
        # one document holding both reports
        emit({"validation": validation, "stats": g.get_graph_statistics()}, args.out)
    elif args.stats:
        emit(g.get_graph_statistics(), args.out)

    if args.export_graphml:
        logging.info("Exporting GraphML to %s", args.export_graphml)
        g.export_graphml(args.export_graphml)

    if args.dry_run or args.stats:
        if args.dry_run and not args.stats:
            emit({"nodes": len(g.nodes), "edges": len(g.edges)}, args.out)
        return 1 if issues else 0

    viewport = Viewport(cfg.viewport)
    engine = LayoutEngine(g, cfg.layout)
    engine.set_center(*viewport.center)

    limit = args.ticks if args.ticks > 0 else None
    while engine.running and (limit is None or engine.tick_count < limit):
        engine.step()
    logging.info("Layout stopped after %d ticks (alpha=%.5f)", engine.tick_count, engine.alpha)

    summary: Dict[str, Any] = {
        "metrics": layout_summary(engine),
        "viewport": viewport.to_dict(),
        "nodes": {
            n.id: {
                "name": g.nodes[n.id].name,
                "category": g.nodes[n.id].category.name,
                "x": n.x,
                "y": n.y,
            }
            for n in engine.nodes
        },
    }
    emit(summary, args.out)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
