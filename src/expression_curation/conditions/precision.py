"""Precision relation between conditions, bounded to a working set.

Condition B is more precise than condition A when B differs from A, B's
developmental stage is A's stage or one of its descendants, and B's
anatomical entity is A's entity or one of its descendants. The relation is
only defined over the conditions registered at construction; any query
involving another condition is a usage error.

Closures of every entity referenced by the working set are computed once at
construction, so each query is a handful of set lookups. The index is never
mutated afterwards and can be shared freely, including across threads.
"""

from itertools import product
from typing import Iterable, Optional

import structlog

from expression_curation.conditions.models import Condition
from expression_curation.errors import (
    PreconditionError,
    UnknownEntityError,
    UnregisteredConditionError,
)
from expression_curation.ontology.graph import Ontology

logger = structlog.get_logger()


class _AxisClosure:
    """Cached ancestor/descendant id sets for one ontology axis.

    A None id (condition undefined along this axis) is only related to itself.
    """

    def __init__(self, ontology: Ontology, entity_ids: Iterable[str]):
        self.ontology = ontology
        self._ancestors: dict[str, frozenset[str]] = {}
        self._direct_ancestors: dict[str, frozenset[str]] = {}
        self._descendants: dict[str, frozenset[str]] = {}
        self._direct_descendants: dict[str, frozenset[str]] = {}
        for entity_id in entity_ids:
            self._ancestors[entity_id] = ontology.ancestors_of(entity_id)
            self._direct_ancestors[entity_id] = ontology.ancestors_of(entity_id, direct_only=True)
            self._descendants[entity_id] = ontology.descendants_of(entity_id)
            self._direct_descendants[entity_id] = ontology.descendants_of(entity_id, direct_only=True)

    def ancestors_or_self(self, entity_id: Optional[str], direct_only: bool = False) -> frozenset:
        if entity_id is None:
            return frozenset([None])
        closure = self._direct_ancestors if direct_only else self._ancestors
        return closure[entity_id] | {entity_id}

    def descendants_or_self(self, entity_id: Optional[str], direct_only: bool = False) -> frozenset:
        if entity_id is None:
            return frozenset([None])
        closure = self._direct_descendants if direct_only else self._descendants
        return closure[entity_id] | {entity_id}


class ConditionPrecisionIndex:
    """Answers precision queries between conditions of a working set.

    Args:
        species_id: Species the conditions and ontologies belong to
        conditions: Observed conditions
        anat_ontology: Anatomical entity ontology of the species
        stage_ontology: Developmental stage ontology of the species
        infer_ancestral_conditions: If True, add to the working set every
            combination of ancestor-or-self anatomical entity and
            ancestor-or-self stage of each observed condition

    Raises:
        PreconditionError: If species_id is blank or no condition is provided
        UnknownEntityError: If an entity or stage id of the working set is
            absent from the supplied ontologies
    """

    def __init__(
        self,
        species_id: str,
        conditions: Iterable[Condition],
        anat_ontology: Ontology,
        stage_ontology: Ontology,
        infer_ancestral_conditions: bool = False,
    ):
        if species_id is None or not str(species_id).strip():
            raise PreconditionError("A species ID must be provided")
        observed = frozenset(conditions)
        if not observed:
            raise PreconditionError("Some conditions must be provided")

        self._species_id = species_id
        self._infer_ancestral_conditions = infer_ancestral_conditions
        self._anat_ontology = anat_ontology
        self._stage_ontology = stage_ontology

        # Observed ids must exist before their ancestors can be looked up
        self._check_entity_existence(observed)

        working_set = set(observed)
        if infer_ancestral_conditions:
            working_set |= self._infer_ancestral(observed)
            self._check_entity_existence(working_set)
        self._conditions = frozenset(working_set)

        anat_ids = {c.anat_entity_id for c in self._conditions if c.anat_entity_id is not None}
        stage_ids = {c.dev_stage_id for c in self._conditions if c.dev_stage_id is not None}
        self._anat_axis = _AxisClosure(anat_ontology, anat_ids)
        self._stage_axis = _AxisClosure(stage_ontology, stage_ids)

        by_anat: dict[Optional[str], set[Condition]] = {}
        for cond in self._conditions:
            by_anat.setdefault(cond.anat_entity_id, set()).add(cond)
        self._by_anat = {k: frozenset(v) for k, v in by_anat.items()}

        logger.info(
            "precision_index_built",
            species_id=species_id,
            observed_conditions=len(observed),
            working_set_size=len(self._conditions),
            inferred_conditions=len(self._conditions) - len(observed),
            anat_entity_count=len(anat_ids),
            dev_stage_count=len(stage_ids),
        )

    def _check_entity_existence(self, conditions: Iterable[Condition]) -> None:
        anat_ids: set[str] = set()
        stage_ids: set[str] = set()
        for cond in conditions:
            if cond.anat_entity_id is not None:
                anat_ids.add(cond.anat_entity_id)
            if cond.dev_stage_id is not None:
                stage_ids.add(cond.dev_stage_id)

        unknown = {e for e in anat_ids if not self._anat_ontology.contains(e)}
        unknown |= {s for s in stage_ids if not self._stage_ontology.contains(s)}
        if unknown:
            raise UnknownEntityError(
                "Some entities do not exist in the requested species",
                entity_ids=unknown,
                species_id=self._species_id,
            )

    def _infer_ancestral(self, observed: frozenset[Condition]) -> set[Condition]:
        inferred: set[Condition] = set()
        for cond in observed:
            anat_ids = {cond.anat_entity_id}
            if cond.anat_entity_id is not None:
                anat_ids |= self._anat_ontology.ancestors_of(cond.anat_entity_id)
            stage_ids = {cond.dev_stage_id}
            if cond.dev_stage_id is not None:
                stage_ids |= self._stage_ontology.ancestors_of(cond.dev_stage_id)
            inferred.update(
                anc for anc in (Condition(a, s) for a, s in product(anat_ids, stage_ids))
                if anc != cond
            )
        logger.debug("ancestral_conditions_inferred", count=len(inferred - observed))
        return inferred

    @property
    def species_id(self) -> str:
        return self._species_id

    @property
    def conditions(self) -> frozenset[Condition]:
        """The working set: observed plus inferred conditions."""
        return self._conditions

    @property
    def infers_ancestral_conditions(self) -> bool:
        return self._infer_ancestral_conditions

    @property
    def anat_ontology(self) -> Ontology:
        return self._anat_ontology

    @property
    def stage_ontology(self) -> Ontology:
        return self._stage_ontology

    @property
    def anat_entity_ids(self) -> frozenset[str]:
        return frozenset(c.anat_entity_id for c in self._conditions if c.anat_entity_id is not None)

    @property
    def dev_stage_ids(self) -> frozenset[str]:
        return frozenset(c.dev_stage_id for c in self._conditions if c.dev_stage_id is not None)

    def __contains__(self, condition: object) -> bool:
        return condition in self._conditions

    def __len__(self) -> int:
        return len(self._conditions)

    def _check_registered(self, *conditions: Condition) -> None:
        missing = [c for c in conditions if c not in self._conditions]
        if missing:
            raise UnregisteredConditionError(
                "Some of the provided conditions are not registered to this precision index",
                conditions=missing,
            )

    def is_more_precise(self, first: Condition, second: Condition) -> bool:
        """Whether `second` is strictly more precise than `first`.

        Raises:
            UnregisteredConditionError: If either condition is outside the working set
        """
        self._check_registered(first, second)
        if first == second:
            return False
        # Stage axis first
        if second.dev_stage_id not in self._stage_axis.descendants_or_self(first.dev_stage_id):
            return False
        return second.anat_entity_id in self._anat_axis.descendants_or_self(first.anat_entity_id)

    def compare(self, first: Condition, second: Condition) -> int:
        """Comparator placing more precise conditions first.

        Returns:
            -1 if `first` is more precise than `second`, 1 if `second` is
            more precise than `first`, 0 if equal or unrelated
        """
        if self.is_more_precise(first, second):
            return 1
        if self.is_more_precise(second, first):
            return -1
        return 0

    def descendants_of(self, condition: Condition, direct_only: bool = False) -> frozenset[Condition]:
        """Working-set conditions more precise than `condition`.

        Args:
            condition: Registered condition
            direct_only: If True, only follow direct child relations on each axis

        Raises:
            UnregisteredConditionError: If condition is outside the working set
        """
        self._check_registered(condition)
        stage_ids = self._stage_axis.descendants_or_self(condition.dev_stage_id, direct_only)
        anat_ids = self._anat_axis.descendants_or_self(condition.anat_entity_id, direct_only)
        return frozenset(
            cond
            for anat_id in anat_ids
            for cond in self._by_anat.get(anat_id, ())
            if cond.dev_stage_id in stage_ids and cond != condition
        )

    def ancestors_of(self, condition: Condition, direct_only: bool = False) -> frozenset[Condition]:
        """Working-set conditions less precise than `condition`.

        Args:
            condition: Registered condition
            direct_only: If True, only follow direct parent relations on each axis

        Raises:
            UnregisteredConditionError: If condition is outside the working set
        """
        self._check_registered(condition)
        stage_ids = self._stage_axis.ancestors_or_self(condition.dev_stage_id, direct_only)
        anat_ids = self._anat_axis.ancestors_or_self(condition.anat_entity_id, direct_only)
        return frozenset(
            cond
            for anat_id in anat_ids
            for cond in self._by_anat.get(anat_id, ())
            if cond.dev_stage_id in stage_ids and cond != condition
        )

    def __repr__(self) -> str:
        return (
            f"ConditionPrecisionIndex(species_id={self._species_id!r}, "
            f"conditions={len(self._conditions)}, "
            f"infer_ancestral_conditions={self._infer_ancestral_conditions})"
        )
