"""Compute the layout of a saved mindmap and report on it.

This script:
1. Reads a backend load response (JSON) from a file
2. Hydrates a session, repairing dangling parent references
3. Computes the layered layout
4. Prints bounds, overlap and tree checks
5. Optionally writes node positions to a JSON file and reports viewport culling

Usage:
    python scripts/compute_layout.py mindmap.json
    python scripts/compute_layout.py mindmap.json --direction TB --output positions.json
    python scripts/compute_layout.py mindmap.json --viewport 1920 1080 0 0 0.5
"""

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path

from dotenv import load_dotenv

# Load .env file from project root
project_root = Path(__file__).parent.parent
load_dotenv(project_root / ".env")

# Add src to path
sys.path.insert(0, str(project_root / "src"))

from mindgraph.config import settings
from mindgraph.graph.errors import GraphError
from mindgraph.layout.engine import calculate_layout_bounds, check_overlaps
from mindgraph.models.layout import LayoutDirection
from mindgraph.models.viewport import Viewport
from mindgraph.persistence.adapter import load_mindmap_json
from mindgraph.session.orchestrator import MindmapSession
from mindgraph.viewport.stats import get_viewport_statistics


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Compute a mindmap layout from a load response")
    parser.add_argument("input", type=Path, help="Load response JSON file")
    parser.add_argument("--output", "-o", type=Path, help="Write node positions to this JSON file")
    parser.add_argument(
        "--direction",
        choices=[d.value for d in LayoutDirection],
        default=None,
        help="Override the configured layout direction",
    )
    parser.add_argument(
        "--viewport",
        nargs=5,
        type=float,
        metavar=("WIDTH", "HEIGHT", "X", "Y", "ZOOM"),
        help="Report culling statistics for this container size and camera",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    layout_config = settings.layout_config()
    if args.direction:
        layout_config = replace(layout_config, direction=LayoutDirection(args.direction))

    print(f"Reading {args.input}...")
    try:
        response = load_mindmap_json(args.input.read_bytes())
    except GraphError as e:
        print(f"Invalid mindmap: {e}")
        return 1

    session = MindmapSession(layout_config=layout_config)
    plan = session.hydrate(r.to_node() for r in response.graph_data.nodes)

    graph = session.graph
    layout = session.layout
    print(f"Mindmap: {response.name or response.id or '<unnamed>'}")
    print(f"Graph: {graph.node_count} nodes, {graph.edge_count} edges, {len(session.get_root_nodes())} roots")
    if plan.demoted:
        print(f"Demoted to root (unresolved parent): {', '.join(plan.demoted)}")
    if plan.duplicates:
        print(f"Skipped duplicate ids: {', '.join(plan.duplicates)}")

    bounds = calculate_layout_bounds(layout)
    print(
        f"Bounding box: x=[{bounds.min_x:.1f}, {bounds.max_x:.1f}], "
        f"y=[{bounds.min_y:.1f}, {bounds.max_y:.1f}] ({layout_config.direction.value})"
    )

    overlaps = check_overlaps(layout)
    print(f"Overlapping pairs: {len(overlaps)}")
    print(f"Valid tree: {session.is_graph_valid()}")

    if args.viewport:
        width, height, x, y, zoom = args.viewport
        session.set_viewport(Viewport(x=x, y=y, zoom=zoom))
        visible = session.visible_elements(width, height)
        stats = get_viewport_statistics(
            total_nodes=graph.node_count,
            visible_nodes=len(visible.visible_nodes),
            total_edges=graph.edge_count,
            visible_edges=len(visible.visible_edges),
        )
        print(
            f"Viewport: {stats.visible_nodes}/{stats.total_nodes} nodes ({stats.rendered_ratio}), "
            f"{stats.visible_edges}/{stats.total_edges} edges ({stats.edge_ratio})"
        )

    if args.output:
        payload = {
            "algorithm": layout.algorithm,
            "computedAt": layout.computed_at,
            "direction": layout_config.direction.value,
            "bounds": bounds.to_dict(),
            "nodes": {nid: nl.to_dict() for nid, nl in layout.nodes.items()},
        }
        args.output.write_text(json.dumps(payload, indent=2))
        print(f"Positions written to {args.output}")

    print("Done!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
