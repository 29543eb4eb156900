"""Deterministic ordering of expression calls.

Calls are ordered by, in turn:
1. global mean rank, ascending
2. gene id
3. species id
4. condition precision, more precise first (only with a precision index)
5. condition natural order

Missing values sort last at every step.

Precision is a partial order, so key 4 is the number of working-set
conditions less precise than the call's condition. A condition strictly
more precise than another always has more such ancestors, so sorting on
this depth is a linear extension of the precision relation and keeps the
whole order total.
"""

from typing import Any, Iterable, Optional

from expression_curation.calls.models import ExpressionCall
from expression_curation.conditions.precision import ConditionPrecisionIndex


def _nulls_last(value: Any, empty: Any = "") -> tuple:
    return (value is None, empty if value is None else value)


def _condition_key(call: ExpressionCall) -> tuple:
    cond = call.condition
    return (cond is None, () if cond is None else cond.sort_key())


def _precision_key(call: ExpressionCall, precision_index: ConditionPrecisionIndex) -> tuple:
    cond = call.condition
    if cond is None:
        return (True, 0)
    return (False, -len(precision_index.ancestors_of(cond)))


def rank_key(
    call: ExpressionCall,
    precision_index: Optional[ConditionPrecisionIndex] = None,
) -> tuple:
    """Sort key of a call, see module docstring for the ordering.

    Raises:
        UnregisteredConditionError: If the call's condition is outside the index
    """
    precision = () if precision_index is None else _precision_key(call, precision_index)
    return (
        _nulls_last(call.global_mean_rank, 0),
        _nulls_last(call.gene_id),
        _nulls_last(call.species_id),
        precision,
        _condition_key(call),
    )


def _cmp(a: Any, b: Any) -> int:
    return (a > b) - (a < b)


class RankComparator:
    """Comparator over expression calls, for use with functools.cmp_to_key.

    Args:
        precision_index: If provided, calls tied on rank, gene and species
            are ordered with more precise conditions first
    """

    def __init__(self, precision_index: Optional[ConditionPrecisionIndex] = None):
        self.precision_index = precision_index

    def __call__(self, first: ExpressionCall, second: ExpressionCall) -> int:
        return _cmp(rank_key(first, self.precision_index), rank_key(second, self.precision_index))


def sort_calls(
    calls: Iterable[ExpressionCall],
    precision_index: Optional[ConditionPrecisionIndex] = None,
) -> list[ExpressionCall]:
    """Return a new list of calls in rank order.

    Args:
        calls: Calls to sort, left untouched
        precision_index: Optional index used to order calls by condition precision

    Returns:
        Sorted list

    Raises:
        UnregisteredConditionError: If a condition is outside the index
    """
    return sorted(calls, key=lambda call: rank_key(call, precision_index))


def filter_and_order(
    calls: Optional[Iterable[ExpressionCall]],
    precision_index: Optional[ConditionPrecisionIndex] = None,
) -> Optional[list[ExpressionCall]]:
    """De-duplicate equal calls, then sort them. None is returned as is."""
    if calls is None:
        return None
    return sort_calls(set(calls), precision_index)
