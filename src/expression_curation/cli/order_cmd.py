"""Order command: print calls in rank order."""

import logging
import sys
from pathlib import Path

import click
from pydantic import ValidationError

from expression_curation.calls import filter_and_order, load_calls_tsv
from expression_curation.cli._shared import (
    apply_log_level,
    build_precision_index,
    format_call_row,
    select_species,
)
from expression_curation.config.loader import load_config
from expression_curation.errors import CurationError

logger = logging.getLogger(__name__)


@click.command('order')
@click.argument('calls_tsv', type=click.Path(exists=True, path_type=Path))
@click.option(
    '--use-precision',
    is_flag=True,
    help='Order calls tied on rank by condition precision (needs configured ontologies)'
)
@click.pass_context
def order(ctx, calls_tsv, use_precision):
    """Print calls from CALLS_TSV in rank order, duplicates removed.

    Calls are ordered by rank, gene id, species id and condition. With
    --use-precision, calls of the configured species tied on rank are
    ordered with more precise conditions first.

    Examples:

        expression-curation order calls.tsv

        expression-curation order calls.tsv --use-precision
    """
    config_path = ctx.obj['config_path']

    try:
        calls = load_calls_tsv(calls_tsv)
        click.echo(click.style(f"Loaded {len(calls)} calls from {calls_tsv}", fg='green'))

        index = None
        if use_precision:
            config = load_config(config_path)
            apply_log_level(ctx, config)
            calls = select_species(calls, config.precision.species_id)
            index = build_precision_index(config, calls)

        ordered = filter_and_order(calls, index)
        click.echo()
        click.echo(click.style("rank\tgene_id\tspecies_id\tanat_entity_id\tdev_stage_id", bold=True))
        for call in ordered:
            click.echo(format_call_row(call))

    except (CurationError, ValidationError, FileNotFoundError) as e:
        click.echo(click.style(f"Error ordering calls: {e}", fg='red'), err=True)
        logger.exception("Order command failed")
        sys.exit(1)
