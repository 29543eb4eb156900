"""Cluster command: group each gene's calls into expression levels."""

import logging
import sys
from pathlib import Path

import click
from pydantic import ValidationError

from expression_curation.calls import load_calls_tsv
from expression_curation.cli._shared import apply_log_level
from expression_curation.clustering import (
    ClusteringMethod,
    cluster_calls_by_gene,
    clustering_to_frame,
)
from expression_curation.config.loader import load_config_with_overrides
from expression_curation.errors import CurationError

logger = logging.getLogger(__name__)


@click.command('cluster')
@click.argument('calls_tsv', type=click.Path(exists=True, path_type=Path))
@click.option(
    '--method',
    type=click.Choice([m.name for m in ClusteringMethod], case_sensitive=False),
    default=None,
    help='Clustering method (default: from config)'
)
@click.option(
    '--threshold',
    type=float,
    default=None,
    help='Distance threshold (default: from config)'
)
@click.option(
    '--gene',
    'gene_id',
    type=str,
    default=None,
    help='Only cluster calls of this gene id'
)
@click.pass_context
def cluster(ctx, calls_tsv, method, threshold, gene_id):
    """Cluster the calls of each gene in CALLS_TSV by rank.

    Each gene is clustered independently; cluster 0 holds the best
    (lowest) ranks.

    Examples:

        expression-curation cluster calls.tsv

        expression-curation cluster calls.tsv --method CANBERRA_DBSCAN --threshold 0.19

        expression-curation cluster calls.tsv --gene ENSG00000139618
    """
    config_path = ctx.obj['config_path']

    try:
        config = load_config_with_overrides(config_path, {
            "clustering.method": method,
            "clustering.distance_threshold": threshold,
        })
        apply_log_level(ctx, config)
        clustering_method = config.clustering.resolved_method()
        distance_threshold = config.clustering.distance_threshold

        calls = load_calls_tsv(calls_tsv)
        click.echo(click.style(f"Loaded {len(calls)} calls from {calls_tsv}", fg='green'))
        if gene_id is not None:
            calls = [c for c in calls if c.gene_id == gene_id]
            if not calls:
                click.echo(click.style(f"No calls found for gene {gene_id}", fg='yellow'))
                return

        click.echo(f"Method: {clustering_method.name}, threshold: {distance_threshold}")

        clusterings = cluster_calls_by_gene(calls, clustering_method, distance_threshold)
        for (gene, species), clustering in clusterings.items():
            df = clustering_to_frame(clustering)
            n_clusters = df["cluster_index"].max() + 1 if df.height else 0
            click.echo()
            click.echo(click.style(
                f"Gene {gene} (species {species}): {df.height} calls, {n_clusters} clusters",
                bold=True,
            ))
            click.echo("cluster\trank\tanat_entity_id\tdev_stage_id")
            for row in df.iter_rows(named=True):
                click.echo(
                    f"{row['cluster_index']}\t{row['formatted_rank']}\t"
                    f"{row['anat_entity_id'] or '-'}\t{row['dev_stage_id'] or '-'}"
                )

    except (CurationError, ValidationError, FileNotFoundError) as e:
        click.echo(click.style(f"Error clustering calls: {e}", fg='red'), err=True)
        logger.exception("Cluster command failed")
        sys.exit(1)
