"""Expression calls: model, ordering and redundancy."""

from expression_curation.calls.load import load_calls_tsv, CALL_COLUMNS
from expression_curation.calls.models import (
    Call,
    CallData,
    DataType,
    ExpressionCall,
    ExpressionSummary,
    Gene,
    SummaryQuality,
)
from expression_curation.calls.ordering import RankComparator, filter_and_order, rank_key, sort_calls
from expression_curation.calls.provenance import ArenaEntry, CallArena
from expression_curation.calls.redundancy import (
    RedundancyResult,
    identify_redundant_calls,
    identify_redundant_calls_sorted,
    partition_calls,
)

__all__ = [
    "load_calls_tsv",
    "CALL_COLUMNS",
    "Call",
    "CallData",
    "DataType",
    "ExpressionCall",
    "ExpressionSummary",
    "Gene",
    "SummaryQuality",
    "RankComparator",
    "filter_and_order",
    "rank_key",
    "sort_calls",
    "ArenaEntry",
    "CallArena",
    "RedundancyResult",
    "identify_redundant_calls",
    "identify_redundant_calls_sorted",
    "partition_calls",
]
