"""Condition value type: an anatomical entity observed at a developmental stage."""

from dataclasses import dataclass
from functools import total_ordering
from typing import Optional


def _nulls_last(value: Optional[str]) -> tuple[bool, str]:
    return (value is None, value or "")


@total_ordering
@dataclass(frozen=True)
class Condition:
    """Pair of (anatomical entity, developmental stage) ids.

    Either id may be None for conditions defined along a single axis
    (e.g. anatomy only). Equality and hashing use both ids; natural ordering
    is anatomy id then stage id, each ascending with None last.

    Attributes:
        anat_entity_id: Anatomical entity id (e.g. UBERON:0000955)
        dev_stage_id: Developmental stage id (e.g. HsapDv:0000087)
    """
    anat_entity_id: Optional[str] = None
    dev_stage_id: Optional[str] = None

    def sort_key(self) -> tuple:
        return (_nulls_last(self.anat_entity_id), _nulls_last(self.dev_stage_id))

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Condition):
            return NotImplemented
        return self.sort_key() < other.sort_key()

    def __str__(self) -> str:
        return f"({self.anat_entity_id}, {self.dev_stage_id})"
