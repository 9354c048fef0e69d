"""
tdaclust Command Line Interface

Usage:
    python -m tdaclust <command> [args]

Commands:
    cluster     Cluster every series in a file by persistence landscape
    landscape   Summarize the diagram and landscape of one series
    demo        Cluster a built-in synthetic collection

Examples:
    python -m tdaclust cluster data/cases.csv --linkage average -o clusters.json
    python -m tdaclust landscape data/cases.csv --series Ontario
    python -m tdaclust demo --n-clusters 2
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

import numpy as np

from tdaclust.clustering import LINKAGES, METRICS
from tdaclust.config import ERROR_POLICIES, PipelineConfig, load_pipeline_config
from tdaclust.datasets import synthetic_collection
from tdaclust.io import load_series
from tdaclust.pipeline import ClusteringResult, TopologyPipeline
from tdaclust.topology import betti_numbers, persistence_statistics


# ============================================================
# HELPERS
# ============================================================


def _add_pipeline_options(parser: argparse.ArgumentParser):
    """Options shared by every command that runs the pipeline."""
    parser.add_argument('--config', '-c', help='Pipeline YAML config')
    parser.add_argument('--dim-lag', type=int, help='Number of delay lags d (points in R^(d+1))')
    parser.add_argument('--sample-lag', type=int, help='Delay tau in samples')
    parser.add_argument('--max-dim', dest='max_homology_dimension', type=int,
                        help='Maximum homology dimension')
    parser.add_argument('--threshold', dest='distance_threshold', type=float,
                        help='Rips distance threshold')
    parser.add_argument('--homology-dim', dest='homology_dimension', type=int,
                        help='Homology dimension summarized by the landscape')
    parser.add_argument('--resolution', dest='landscape_resolution', type=int,
                        help='Landscape samples (default 500)')
    parser.add_argument('--standardize', action='store_true', default=None,
                        help='Z-score each series before embedding')
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging')


def _add_cluster_options(parser: argparse.ArgumentParser):
    parser.add_argument('--metric', dest='distance_metric', choices=sorted(METRICS),
                        help='Landscape distance metric')
    parser.add_argument('--linkage', choices=LINKAGES, help='Linkage rule')
    parser.add_argument('--n-jobs', type=int, help='Parallel workers (-1 = all cores)')
    parser.add_argument('--on-error', choices=ERROR_POLICIES,
                        help='abort the run or exclude failing series')
    parser.add_argument('--n-clusters', '-k', type=int,
                        help='Flat clusters to report (default: best silhouette)')
    parser.add_argument('--output', '-o', help='Write results as JSON')
    parser.add_argument('--distances', help='Write the distance matrix as CSV')


def build_config(args: argparse.Namespace) -> PipelineConfig:
    """YAML config (if any) with command-line overrides applied."""
    config = load_pipeline_config(args.config) if args.config else PipelineConfig()
    overrides = {
        name: getattr(args, name, None)
        for name in (
            'dim_lag', 'sample_lag', 'max_homology_dimension', 'distance_threshold',
            'homology_dimension', 'landscape_resolution', 'standardize',
            'distance_metric', 'linkage', 'n_jobs', 'on_error',
        )
    }
    return config.with_overrides(**overrides)


def print_result(result: ClusteringResult, n_clusters: Optional[int] = None):
    dendrogram = result.dendrogram
    print(f"\nDendrogram ({dendrogram.method} linkage, {dendrogram.metric} distance)")
    print(f"  {'id':>4}  {'left':<20} {'right':<20} {'height':>12} {'size':>5}")
    for i, m in enumerate(dendrogram.merges):
        print(
            f"  {dendrogram.n_leaves + i:>4}  {dendrogram.node_label(m.left):<20} "
            f"{dendrogram.node_label(m.right):<20} {m.height:>12.6f} {m.size:>5}"
        )

    assignments = result.assignments(n_clusters)
    print(f"\nClusters (k={len(set(assignments.values()))})")
    for label in dendrogram.leaves_order():
        print(f"  {assignments[label]:>3}  {label}")

    if result.failures:
        print("\nExcluded series:")
        for label, e in result.failures.items():
            print(f"  - {label}: {type(e).__name__}: {e}")


def _write_outputs(result: ClusteringResult, args: argparse.Namespace):
    if args.output:
        with open(args.output, 'w') as f:
            json.dump(result.to_dict(args.n_clusters), f, indent=2, allow_nan=False)
        print(f"\nWrote {args.output}")
    if args.distances:
        result.distance_matrix.to_frame().write_csv(args.distances)
        print(f"Wrote {args.distances}")


def _setup_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(name)s - %(message)s',
    )


# ============================================================
# COMMANDS
# ============================================================


def cmd_cluster(args):
    """Cluster every series in an input file."""
    input_path = Path(args.input)
    if not input_path.exists():
        print(f"ERROR: Input not found: {input_path}")
        return 1

    try:
        config = build_config(args)
        series = load_series(input_path, time_column=args.time_column)
        result = TopologyPipeline(config).run(series)
    except (FileNotFoundError, ValueError) as e:
        print(f"ERROR: {e}")
        return 1

    print_result(result, args.n_clusters)
    _write_outputs(result, args)
    return 0


def cmd_landscape(args):
    """Summarize one series' diagram and landscape."""
    try:
        config = build_config(args)
        series = load_series(args.input, time_column=args.time_column, columns=[args.series])
        topo = TopologyPipeline(config).analyze_series(args.series, series[args.series])
    except (FileNotFoundError, ValueError) as e:
        print(f"ERROR: {e}")
        return 1

    print(f"\n{args.series}: {topo.n_samples} samples -> {topo.n_points} points "
          f"in R^{topo.point_cloud.shape[1]}")
    print(f"Diagram: {topo.diagram!r}")

    deaths = topo.diagram.death_times
    scale = float(np.median(deaths)) if len(deaths) else 0.0
    betti = betti_numbers(topo.diagram, scale)
    print(f"Betti numbers at median death {scale:.4f}: "
          + ', '.join(f"b{d}={c}" for d, c in betti.items()))

    for dim in range(config.max_homology_dimension + 1):
        stats = persistence_statistics(topo.diagram.select(dim))
        print(f"\nH{dim}:")
        for key, value in stats.items():
            print(f"  {key:<22} {value:.6g}")

    landscape = topo.landscape
    print(f"\nLandscape H{config.homology_dimension} level {config.landscape_level}: "
          f"{len(landscape)} samples, max={landscape.max():.6g}, sum={landscape.sum():.6g}")
    return 0


def cmd_demo(args):
    """Cluster the synthetic collection."""
    try:
        config = build_config(args)
        series = synthetic_collection(n_samples=args.n_samples, seed=args.seed)
        result = TopologyPipeline(config).run(series)
    except ValueError as e:
        print(f"ERROR: {e}")
        return 1

    print_result(result, args.n_clusters)
    _write_outputs(result, args)
    return 0


def main(argv=None):
    """tdaclust CLI entry point."""
    parser = argparse.ArgumentParser(
        prog='tdaclust',
        description='Cluster time series by persistence landscapes of their delay embeddings',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python -m tdaclust cluster data.csv --config config/pipeline.yaml
    python -m tdaclust landscape data.csv --series Ontario
    python -m tdaclust demo
        """,
    )

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    # cluster command
    cluster_parser = subparsers.add_parser(
        'cluster',
        help='Cluster every series in a CSV/TSV/parquet file',
    )
    cluster_parser.add_argument('input', help='Input file (wide or long format)')
    cluster_parser.add_argument('--time-column', help='Column ordering the samples')
    _add_pipeline_options(cluster_parser)
    _add_cluster_options(cluster_parser)

    # landscape command
    landscape_parser = subparsers.add_parser(
        'landscape',
        help='Summarize the diagram and landscape of one series',
    )
    landscape_parser.add_argument('input', help='Input file (wide or long format)')
    landscape_parser.add_argument('--series', '-s', required=True, help='Series label')
    landscape_parser.add_argument('--time-column', help='Column ordering the samples')
    _add_pipeline_options(landscape_parser)

    # demo command
    demo_parser = subparsers.add_parser(
        'demo',
        help='Cluster sines, noisy sines, noise and random walks',
    )
    demo_parser.add_argument('--n-samples', type=int, default=200, help='Samples per series')
    demo_parser.add_argument('--seed', type=int, default=0, help='Random seed')
    _add_pipeline_options(demo_parser)
    _add_cluster_options(demo_parser)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    _setup_logging(args.verbose)

    handlers = {
        'cluster': cmd_cluster,
        'landscape': cmd_landscape,
        'demo': cmd_demo,
    }

    handler = handlers.get(args.command)
    if handler:
        return handler(args)
    else:
        parser.print_help()
        return 1


if __name__ == '__main__':
    sys.exit(main())
