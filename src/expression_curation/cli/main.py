"""Main CLI entry point for expression-curation.

Provides command group with global options and subcommands for call curation.
"""

import logging
from pathlib import Path

import click

from expression_curation import __version__
from expression_curation.cli._shared import apply_log_level
from expression_curation.config.loader import load_config
from expression_curation.cli.order_cmd import order
from expression_curation.cli.redundant_cmd import redundant
from expression_curation.cli.cluster_cmd import cluster


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


@click.group()
@click.option(
    '--config',
    type=click.Path(exists=True, path_type=Path),
    default='config/default.yaml',
    help='Path to curation configuration YAML file'
)
@click.option(
    '--verbose',
    is_flag=True,
    help='Enable verbose logging (DEBUG level)'
)
@click.pass_context
def cli(ctx, config, verbose):
    """Expression-curation: ordering, redundancy filtering and clustering of gene expression calls.

    Calls are read from TSV tables; anatomy and developmental stage
    ontologies come from the relation tables named in the configuration.
    """
    ctx.ensure_object(dict)
    ctx.obj['config_path'] = config
    ctx.obj['verbose'] = verbose

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logging.debug("Verbose logging enabled")


@cli.command()
@click.pass_context
def info(ctx):
    """Display version and configuration summary."""
    config_path = ctx.obj['config_path']

    click.echo(f"Expression Curation v{__version__}")
    click.echo(f"Config: {config_path}")
    click.echo()

    try:
        config = load_config(config_path)
        apply_log_level(ctx, config)

        config_hash = config.config_hash()
        click.echo(f"Config Hash: {config_hash[:16]}...")
        click.echo()

        click.echo(click.style("Clustering:", bold=True))
        click.echo(f"  Method:             {config.clustering.method}")
        click.echo(f"  Distance Threshold: {config.clustering.distance_threshold}")
        click.echo(
            f"  Recommended:        {config.clustering.resolved_method().recommended_threshold}"
        )
        click.echo()

        click.echo(click.style("Condition Precision:", bold=True))
        click.echo(f"  Species: {config.precision.species_id}")
        click.echo(f"  Infer Ancestral Conditions: {config.precision.infer_ancestral_conditions}")
        click.echo()

        click.echo(click.style("Ontologies:", bold=True))
        click.echo(f"  Anatomical Entities: {config.ontologies.anat_entity_relations}")
        click.echo(f"  Developmental Stages: {config.ontologies.dev_stage_relations}")
        click.echo()
        click.echo(f"Log Level: {logging.getLevelName(logging.getLogger().level)}")

    except Exception as e:
        click.echo(click.style(f"Error loading config: {e}", fg='red'), err=True)
        ctx.exit(1)


# Register commands
cli.add_command(order)
cli.add_command(redundant)
cli.add_command(cluster)


if __name__ == '__main__':
    cli()
