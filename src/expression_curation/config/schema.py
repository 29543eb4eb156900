"""Pydantic models for curation configuration."""

import hashlib
import json
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from expression_curation.clustering.methods import (
    DEFAULT_CLUSTERING_METHOD,
    DEFAULT_DISTANCE_THRESHOLD,
    ClusteringMethod,
)


class ClusteringConfig(BaseModel):
    """Rank clustering settings."""

    method: str = Field(
        default=DEFAULT_CLUSTERING_METHOD.name,
        description="Clustering method name (e.g. BGEE_DIST_TO_MAX)",
    )
    distance_threshold: float = Field(
        default=DEFAULT_DISTANCE_THRESHOLD,
        gt=0.0,
        description="Distance above which a call leaves the current cluster",
    )

    @field_validator("method")
    @classmethod
    def known_method(cls, v: str) -> str:
        """Normalize the method name, rejecting unknown methods."""
        return ClusteringMethod.from_name(v).name

    def resolved_method(self) -> ClusteringMethod:
        return ClusteringMethod.from_name(self.method)


class PrecisionConfig(BaseModel):
    """Condition precision index settings."""

    species_id: str = Field(
        ...,
        min_length=1,
        description="Species of the conditions and ontologies (e.g. 9606)",
    )
    infer_ancestral_conditions: bool = Field(
        default=False,
        description="Add ancestral conditions of observed conditions to the working set",
    )


class OntologySources(BaseModel):
    """Locations of pre-computed ontology relation tables."""

    anat_entity_relations: Optional[Path] = Field(
        default=None,
        description="TSV of anatomical entity child_id/parent_id relations",
    )
    dev_stage_relations: Optional[Path] = Field(
        default=None,
        description="TSV of developmental stage child_id/parent_id relations",
    )


class CurationConfig(BaseModel):
    """Main curation configuration."""

    clustering: ClusteringConfig = Field(
        default_factory=ClusteringConfig,
        description="Rank clustering settings",
    )
    precision: PrecisionConfig = Field(
        ...,
        description="Condition precision settings",
    )
    ontologies: OntologySources = Field(
        default_factory=OntologySources,
        description="Ontology relation tables",
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Logging level for CLI runs",
    )

    def config_hash(self) -> str:
        """
        Compute SHA-256 hash of the configuration.

        Returns a deterministic hash based on all config values,
        useful for tracking which settings produced a result.
        """
        config_dict = self.model_dump(mode="python")
        config_json = json.dumps(
            config_dict,
            sort_keys=True,
            default=str,
        )
        return hashlib.sha256(config_json.encode()).hexdigest()
