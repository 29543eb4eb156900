"""Helpers shared by CLI commands."""

import logging

import click

from expression_curation.calls.models import ExpressionCall
from expression_curation.conditions import ConditionPrecisionIndex
from expression_curation.config.schema import CurationConfig
from expression_curation.errors import PreconditionError
from expression_curation.ontology import load_relations_tsv

logger = logging.getLogger(__name__)


def apply_log_level(ctx: click.Context, config: CurationConfig) -> None:
    """Set the root logging level from the config; --verbose keeps DEBUG."""
    if ctx.obj.get('verbose'):
        return
    logging.getLogger().setLevel(config.log_level)
    logger.debug(f"Log level set to {config.log_level} from config")


def build_precision_index(
    config: CurationConfig,
    calls: list[ExpressionCall],
) -> ConditionPrecisionIndex:
    """Build the precision index over the conditions of calls of the configured species.

    Raises:
        PreconditionError: If ontology tables are not configured
        FileNotFoundError: If an ontology table is missing
    """
    sources = config.ontologies
    if sources.anat_entity_relations is None or sources.dev_stage_relations is None:
        raise PreconditionError(
            "Both ontology relation tables must be configured",
            {"ontologies": sources.model_dump()},
        )

    anat_ontology = load_relations_tsv(sources.anat_entity_relations, "anat_entity")
    stage_ontology = load_relations_tsv(sources.dev_stage_relations, "dev_stage")

    species_id = config.precision.species_id
    conditions = {
        c.condition for c in calls
        if c.condition is not None and c.species_id in (species_id, None)
    }
    logger.info(f"Building precision index for species {species_id} over {len(conditions)} conditions")
    return ConditionPrecisionIndex(
        species_id,
        conditions,
        anat_ontology,
        stage_ontology,
        infer_ancestral_conditions=config.precision.infer_ancestral_conditions,
    )


def select_species(calls: list[ExpressionCall], species_id: str) -> list[ExpressionCall]:
    """Keep calls of one species (or without species), reporting how many were skipped."""
    selected = [c for c in calls if c.species_id in (species_id, None)]
    skipped = len(calls) - len(selected)
    if skipped:
        click.echo(click.style(
            f"  Skipping {skipped} calls not from species {species_id}", fg='yellow'
        ))
    return selected


def format_call_row(call: ExpressionCall, *extra) -> str:
    cond = call.condition
    fields = [
        call.formatted_global_mean_rank() if call.global_mean_rank is not None else "-",
        call.gene_id or "-",
        call.species_id or "-",
        (cond.anat_entity_id if cond is not None else None) or "-",
        (cond.dev_stage_id if cond is not None else None) or "-",
    ]
    fields.extend(str(e) for e in extra)
    return "\t".join(fields)
