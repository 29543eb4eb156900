"""Load ontology relation tables."""

from pathlib import Path

import polars as pl
import structlog

from expression_curation.errors import PreconditionError
from expression_curation.ontology.graph import Ontology

logger = structlog.get_logger()

RELATION_COLUMNS = ["child_id", "parent_id"]


def load_relations_tsv(path: Path | str, name: str) -> Ontology:
    """Read a child/parent relation TSV into an Ontology.

    Expected columns: child_id, parent_id. A row with an empty parent_id
    declares a root (or an isolated entity).

    Args:
        path: Path to the TSV file
        name: Ontology label

    Returns:
        Ontology built from the relations

    Raises:
        FileNotFoundError: If the file doesn't exist
        PreconditionError: If required columns are missing
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Ontology relation file not found: {path}")

    # All columns as strings: entity ids must never be parsed as numbers
    df = pl.read_csv(path, separator="\t", infer_schema_length=0)

    missing = [col for col in RELATION_COLUMNS if col not in df.columns]
    if missing:
        raise PreconditionError(
            "Ontology relation file is missing required columns",
            {"path": str(path), "missing": missing},
        )

    df = df.select(RELATION_COLUMNS).filter(pl.col("child_id").is_not_null())

    relations = [
        (row["child_id"], row["parent_id"])
        for row in df.filter(
            pl.col("parent_id").is_not_null() & (pl.col("parent_id") != "")
        ).to_dicts()
    ]
    entity_ids = df["child_id"].unique().to_list()

    logger.info(
        "ontology_relations_loaded",
        ontology=name,
        path=str(path),
        relation_count=len(relations),
        entity_count=len(entity_ids),
    )

    return Ontology.from_relations(name, relations, entity_ids=entity_ids)
