"""Identification of redundant expression calls.

A call is redundant when a call of the same gene, in a more precise
condition, has an equal or better (lower) rank: the precise call already
carries the information.
"""

import time
from dataclasses import dataclass, field
from typing import Iterable, Optional

import structlog

from expression_curation.calls.models import ExpressionCall
from expression_curation.calls.ordering import filter_and_order
from expression_curation.conditions.models import Condition
from expression_curation.conditions.precision import ConditionPrecisionIndex
from expression_curation.errors import PreconditionError

logger = structlog.get_logger()


@dataclass
class RedundancyResult:
    """Calls split into informative and redundant, both in rank order.

    Attributes:
        kept: Calls that are not redundant
        redundant: Calls made redundant by a more precise call
        total_calls: Number of calls examined
        redundant_fraction: Fraction of redundant calls (0-1)
    """
    kept: list[ExpressionCall] = field(default_factory=list)
    redundant: list[ExpressionCall] = field(default_factory=list)
    total_calls: int = 0
    redundant_fraction: float = 0.0

    def __post_init__(self):
        self.total_calls = len(self.kept) + len(self.redundant)
        if self.total_calls > 0:
            self.redundant_fraction = len(self.redundant) / self.total_calls


def _check_sorted_input(calls: list[ExpressionCall]) -> None:
    previous = None
    for position, call in enumerate(calls):
        if call.global_mean_rank is None:
            raise PreconditionError("Missing rank for call", {"position": position, "call": call})
        if call.condition is None:
            raise PreconditionError("Missing condition for call", {"position": position, "call": call})
        if previous is not None and call.global_mean_rank < previous.global_mean_rank:
            raise PreconditionError(
                "Provided calls are not sorted by rank",
                {"position": position, "rank": call.global_mean_rank,
                 "previous_rank": previous.global_mean_rank},
            )
        previous = call


def identify_redundant_calls_sorted(
    calls: Iterable[ExpressionCall],
    precision_index: ConditionPrecisionIndex,
) -> frozenset[ExpressionCall]:
    """Identify redundant calls in an already ordered list.

    The list must be ordered with `sort_calls` using the same precision
    index. The whole list is validated before any decision is made.

    Args:
        calls: Calls in rank order
        precision_index: Index the call conditions are registered to

    Returns:
        The redundant calls

    Raises:
        PreconditionError: If a call has no rank or no condition, or if ranks decrease
        UnregisteredConditionError: If a condition is outside the index
    """
    calls = list(calls)
    _check_sorted_input(calls)

    start = time.perf_counter()
    validated: dict[tuple[Optional[str], Optional[str]], set[Condition]] = {}
    redundant: set[ExpressionCall] = set()
    for call in calls:
        seen = validated.setdefault((call.gene_id, call.species_id), set())
        if seen.isdisjoint(precision_index.descendants_of(call.condition)):
            seen.add(call.condition)
        else:
            redundant.add(call)

    logger.debug(
        "redundant_calls_identified",
        call_count=len(calls),
        gene_count=len(validated),
        redundant_count=len(redundant),
        elapsed_ms=round((time.perf_counter() - start) * 1000, 3),
    )
    return frozenset(redundant)


def identify_redundant_calls(
    calls: Iterable[ExpressionCall],
    precision_index: ConditionPrecisionIndex,
) -> frozenset[ExpressionCall]:
    """Identify redundant calls in an arbitrary collection.

    Duplicates are removed and the calls ordered with the precision index
    before the scan.

    Raises:
        PreconditionError: If calls is None, or a call has no rank or condition
        UnregisteredConditionError: If a condition is outside the index
    """
    if calls is None:
        raise PreconditionError("Some calls must be provided")
    return identify_redundant_calls_sorted(filter_and_order(calls, precision_index), precision_index)


def partition_calls(
    calls: Iterable[ExpressionCall],
    precision_index: ConditionPrecisionIndex,
) -> RedundancyResult:
    """Split calls into kept and redundant lists, both in rank order."""
    ordered = filter_and_order(calls, precision_index)
    if ordered is None:
        raise PreconditionError("Some calls must be provided")
    redundant = identify_redundant_calls_sorted(ordered, precision_index)
    result = RedundancyResult(
        kept=[c for c in ordered if c not in redundant],
        redundant=[c for c in ordered if c in redundant],
    )
    logger.info(
        "redundancy_scan_complete",
        total=result.total_calls,
        kept=len(result.kept),
        redundant=len(result.redundant),
    )
    return result
