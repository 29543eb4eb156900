"""Redundant command: find calls made redundant by more precise calls."""

import logging
import sys
from pathlib import Path

import click
from pydantic import ValidationError

from expression_curation.calls import load_calls_tsv, partition_calls
from expression_curation.cli._shared import (
    apply_log_level,
    build_precision_index,
    format_call_row,
    select_species,
)
from expression_curation.config.loader import load_config
from expression_curation.errors import CurationError

logger = logging.getLogger(__name__)


@click.command('redundant')
@click.argument('calls_tsv', type=click.Path(exists=True, path_type=Path))
@click.option(
    '--show-kept',
    is_flag=True,
    help='Also list the calls that are kept'
)
@click.pass_context
def redundant(ctx, calls_tsv, show_kept):
    """Identify redundant calls in CALLS_TSV.

    A call is redundant when a call of the same gene in a more precise
    condition has an equal or better rank. Conditions are related through
    the ontologies named in the configuration; only calls of the
    configured species are examined.

    Examples:

        expression-curation redundant calls.tsv

        expression-curation --config my.yaml redundant calls.tsv --show-kept
    """
    config_path = ctx.obj['config_path']

    try:
        config = load_config(config_path)
        apply_log_level(ctx, config)
        calls = load_calls_tsv(calls_tsv)
        click.echo(click.style(f"Loaded {len(calls)} calls from {calls_tsv}", fg='green'))
        calls = select_species(calls, config.precision.species_id)

        index = build_precision_index(config, calls)
        result = partition_calls(calls, index)

        click.echo()
        click.echo(click.style("Redundancy Summary:", bold=True))
        click.echo(f"  Total calls:     {result.total_calls}")
        click.echo(f"  Kept calls:      {len(result.kept)}")
        click.echo(f"  Redundant calls: {len(result.redundant)} ({result.redundant_fraction:.1%})")

        header = click.style("rank\tgene_id\tspecies_id\tanat_entity_id\tdev_stage_id", bold=True)
        if result.redundant:
            click.echo()
            click.echo(click.style("Redundant:", bold=True))
            click.echo(header)
            for call in result.redundant:
                click.echo(format_call_row(call))
        if show_kept and result.kept:
            click.echo()
            click.echo(click.style("Kept:", bold=True))
            click.echo(header)
            for call in result.kept:
                click.echo(format_call_row(call))

    except (CurationError, ValidationError, FileNotFoundError) as e:
        click.echo(click.style(f"Error identifying redundant calls: {e}", fg='red'), err=True)
        logger.exception("Redundant command failed")
        sys.exit(1)
