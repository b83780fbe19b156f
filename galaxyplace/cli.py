#!/usr/bin/env python3
"""
GalaxyPlace CLI

Command-line interface for the adaptive galaxy layout engine.

Usage:
    galaxyplace layout <sitemap.json> [options]
    galaxyplace report <sitemap.json> [options]
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from .errors import GalaxyPlaceError


def configure_logging(verbose: bool = False):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )


def load_sitemap(path_arg: str) -> Optional[List[Dict[str, Any]]]:
    """
    Load and validate page records from a sitemap JSON file.

    Returns:
        List of page records, or None if the file could not be used
    """
    from .galaxy.hierarchy import validate_sitemap

    path = Path(path_arg)
    if not path.exists():
        print(f"Error: Sitemap not found: {path}")
        return None

    try:
        with open(path, 'r', encoding='utf-8') as f:
            sitemap = json.load(f)
    except json.JSONDecodeError as e:
        print(f"Error: Invalid JSON in {path}: {e}")
        return None

    try:
        pages = validate_sitemap(sitemap)
    except GalaxyPlaceError as e:
        print(f"Error: {e}")
        return None

    print(f"Loaded sitemap: {path}")
    print(f"  Pages: {len(pages)}")
    return pages


def build_engine(args):
    """Create the layout engine from CLI options."""
    from .entity_types import get_entity_types
    from .placement.config import LayoutConfig
    from .placement.engine import AdaptivePositioning

    config = LayoutConfig.from_yaml(args.config) if args.config else LayoutConfig()
    if args.seed is not None:
        config.seed = args.seed
    types = get_entity_types(args.types) if args.types else None
    return AdaptivePositioning(config=config, types=types)


def cmd_layout(args):
    """Lay out a sitemap and write entity positions."""
    from .galaxy.abstraction import Space

    pages = load_sitemap(args.sitemap)
    if pages is None:
        return 1

    try:
        engine = build_engine(args)
    except (GalaxyPlaceError, FileNotFoundError) as e:
        print(f"Error: {e}")
        return 1

    space = Space(width=args.width, height=args.height)
    print(f"\nLaying out galaxy ({space.width:g}x{space.height:g})...")
    result = engine.layout_hierarchy(pages, space)

    metrics = result.metrics
    print(f"  Strategy: {metrics.strategy_used} ({metrics.density})")
    print(f"  Collisions resolved: {metrics.collisions_resolved} "
          f"in {metrics.iterations_used} iterations")
    if not metrics.converged:
        print(f"  Warning: {metrics.final_overlaps} overlaps remain")
    print(f"  Time: {metrics.calculation_time:.1f}ms "
          f"(score {metrics.performance_score:.1f})")

    output = json.dumps(result.to_dict(), indent=2, ensure_ascii=False)
    if args.output:
        output_path = Path(args.output)
        output_path.write_text(output, encoding='utf-8')
        print(f"\nPositions saved to: {output_path}")
    else:
        print(output)

    return 0


def cmd_report(args):
    """Print density and hierarchy diagnostics for a sitemap."""
    from .galaxy.abstraction import Space
    from .galaxy.hierarchy import HierarchyBuilder
    from .placement.density import calculate_distribution_score
    from .placement.orbital import OrbitalPlacer

    pages = load_sitemap(args.sitemap)
    if pages is None:
        return 1

    try:
        engine = build_engine(args)
    except (GalaxyPlaceError, FileNotFoundError) as e:
        print(f"Error: {e}")
        return 1

    space = Space(width=args.width, height=args.height)
    hierarchy = HierarchyBuilder(engine.types).build(pages)
    placed = OrbitalPlacer(engine.config, engine.types).place(hierarchy, space)
    density = engine.analyze_entity_density(placed, space)

    type_counts: Dict[str, int] = {}
    for entity in placed:
        type_counts[entity.type] = type_counts.get(entity.type, 0) + 1
    max_depth = max((e.depth for e in placed), default=0)

    print("\n" + "=" * 60)
    print("Galaxy Report")
    print("=" * 60)
    print(f"Entities: {len(placed)}")
    print(f"Roots: {len(hierarchy.roots)}")
    print(f"Max depth: {max_depth}")
    if hierarchy.promoted:
        print(f"Promoted to root: {', '.join(str(i) for i in hierarchy.promoted)}")
    print(f"Distribution score: {calculate_distribution_score(placed, space, engine.config):.3f}")
    print(f"Density: {density.value}")
    print("\nTypes:")
    for entity_type, count in sorted(type_counts.items()):
        known = "" if engine.types.is_known(entity_type) else " (unknown, defaults)"
        print(f"  {entity_type}: {count}{known}")
    unused = [t for t in engine.types.known_types if t not in type_counts]
    if unused:
        print(f"Unused types: {', '.join(unused)}")

    return 0


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="GalaxyPlace - Adaptive Galaxy Layout Engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  galaxyplace layout sitemap.json -o positions.json
  galaxyplace layout sitemap.json --width 1920 --height 1080 --seed 42
  galaxyplace layout sitemap.json --config layout.yaml -v
  galaxyplace report sitemap.json
        """,
    )

    parser.add_argument('--version', action='version', version='galaxyplace 0.1.0')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    def add_common(sub):
        sub.add_argument('sitemap', help='Path to sitemap JSON file')
        sub.add_argument('--width', type=float, default=1000.0, help='Canvas width in px (default: 1000)')
        sub.add_argument('--height', type=float, default=800.0, help='Canvas height in px (default: 800)')
        sub.add_argument('--config', help='Layout config overrides (YAML)')
        sub.add_argument('--types', help='Custom entity type table (YAML)')
        sub.add_argument('--seed', type=int, help='Random seed for reproducible layouts')
        sub.add_argument('-v', '--verbose', action='store_true', help='Verbose output')

    # Layout command
    layout_parser = subparsers.add_parser('layout', help='Compute entity positions')
    add_common(layout_parser)
    layout_parser.add_argument('-o', '--output', help='Output JSON path (default: stdout)')

    # Report command
    report_parser = subparsers.add_parser('report', help='Print density and hierarchy report')
    add_common(report_parser)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    configure_logging(args.verbose)

    commands = {
        'layout': cmd_layout,
        'report': cmd_report,
    }

    return commands[args.command](args)


if __name__ == '__main__':
    sys.exit(main())
