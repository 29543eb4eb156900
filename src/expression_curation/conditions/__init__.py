"""Conditions and the precision relation between them."""

from expression_curation.conditions.models import Condition
from expression_curation.conditions.precision import ConditionPrecisionIndex

__all__ = [
    "Condition",
    "ConditionPrecisionIndex",
]
