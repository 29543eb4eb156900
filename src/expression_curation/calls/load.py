"""Load expression calls from tab-separated tables."""

from pathlib import Path

import polars as pl
import structlog

from expression_curation.calls.models import ExpressionCall, Gene
from expression_curation.conditions.models import Condition
from expression_curation.errors import PreconditionError

logger = structlog.get_logger()

CALL_COLUMNS = [
    "gene_id",
    "species_id",
    "anat_entity_id",
    "dev_stage_id",
    "global_mean_rank",
]
REQUIRED_CALL_COLUMNS = ["gene_id", "global_mean_rank"]


def _blank_to_none(value):
    if value is None:
        return None
    value = value.strip()
    return value or None


def load_calls_tsv(path: Path | str) -> list[ExpressionCall]:
    """Read expression calls from a TSV file.

    Columns: gene_id, species_id, anat_entity_id, dev_stage_id,
    global_mean_rank. species_id and both condition columns are optional;
    empty cells are read as missing values. Ranks are parsed from their
    text so their written precision is preserved.

    Args:
        path: Path to the TSV file

    Returns:
        Calls in file order

    Raises:
        FileNotFoundError: If the file doesn't exist
        PreconditionError: If required columns are missing
        NumericDomainError: If a rank is not a positive number
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Call file not found: {path}")

    df = pl.read_csv(path, separator="\t", infer_schema_length=0)

    missing = [col for col in REQUIRED_CALL_COLUMNS if col not in df.columns]
    if missing:
        raise PreconditionError(
            "Call file is missing required columns",
            {"path": str(path), "missing": missing},
        )

    # Optional columns become all-null string columns
    df = df.with_columns([
        pl.lit(None, dtype=pl.Utf8).alias(col)
        for col in CALL_COLUMNS if col not in df.columns
    ]).select(CALL_COLUMNS)

    calls = []
    for row in df.iter_rows(named=True):
        anat_entity_id = _blank_to_none(row["anat_entity_id"])
        dev_stage_id = _blank_to_none(row["dev_stage_id"])
        condition = None
        if anat_entity_id is not None or dev_stage_id is not None:
            condition = Condition(anat_entity_id, dev_stage_id)
        gene_id = _blank_to_none(row["gene_id"])
        calls.append(ExpressionCall(
            gene=Gene(gene_id, _blank_to_none(row["species_id"])) if gene_id else None,
            condition=condition,
            global_mean_rank=_blank_to_none(row["global_mean_rank"]),
        ))

    logger.info(
        "calls_loaded",
        path=str(path),
        call_count=len(calls),
        gene_count=len({(c.gene_id, c.species_id) for c in calls}),
    )
    return calls
