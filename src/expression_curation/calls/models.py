"""Data models for genes, evidence payloads and expression calls.

Calls are frozen value objects: two calls with identical attributes are
interchangeable, can be stored in sets and used as dictionary keys.
Ranks are held as Decimal, so ranks written with different scales
(1.250 vs 1.25) compare and hash equal.
"""

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Any, Iterable, Mapping, Optional

from expression_curation.conditions.models import Condition
from expression_curation.errors import (
    InvariantViolationError,
    NumericDomainError,
    PreconditionError,
)


class DataType(str, Enum):
    """Technologies producing expression evidence."""

    AFFYMETRIX = "affymetrix"
    EST = "est"
    IN_SITU = "in_situ"
    RNA_SEQ = "rna_seq"
    FULL_LENGTH = "full_length"


class SummaryQuality(str, Enum):
    """Quality of a call summarized over its evidence. NODATA means no data."""

    NODATA = "nodata"
    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"


class ExpressionSummary(str, Enum):
    EXPRESSED = "expressed"
    NOT_EXPRESSED = "not_expressed"


@dataclass(frozen=True)
class Gene:
    """Gene identified within a species.

    Attributes:
        gene_id: Gene identifier (e.g. ENSG00000139618), unique per species only
        species_id: Species identifier (e.g. NCBI taxon 9606)
        name: Display name, not part of identity
    """
    gene_id: str
    species_id: Optional[str] = None
    name: Optional[str] = field(default=None, compare=False)

    def __str__(self) -> str:
        return f"{self.gene_id} ({self.species_id})"


@dataclass(frozen=True)
class CallData:
    """Evidence supporting a call for one data type.

    Attributes:
        data_type: Technology the evidence comes from
        data_quality: Quality of the evidence, None when unknown
        experiment_counts: Number of experiments per category (e.g.
            "present_high_self"), stored as a sorted tuple of pairs
        is_observed_data: Whether the data was observed in the condition
            itself rather than propagated from related conditions
    """
    data_type: Optional[DataType] = None
    data_quality: Optional[SummaryQuality] = None
    experiment_counts: Any = ()
    is_observed_data: Optional[bool] = None

    def __post_init__(self):
        if self.data_quality == SummaryQuality.NODATA:
            raise InvariantViolationError(
                "No data quality cannot be marked as present",
                {"data_type": self.data_type},
            )
        counts = self.experiment_counts
        items = counts.items() if isinstance(counts, Mapping) else counts
        normalized = tuple(sorted((str(k), int(v)) for k, v in items))
        negative = [k for k, v in normalized if v < 0]
        if negative:
            raise InvariantViolationError(
                "Experiment counts must be non-negative",
                {"categories": negative},
            )
        object.__setattr__(self, "experiment_counts", normalized)

    def count(self, category: str) -> int:
        """Experiment count for a category, 0 when absent."""
        return dict(self.experiment_counts).get(category, 0)


def _to_frozenset(values: Optional[Iterable]) -> frozenset:
    if values is None:
        return frozenset()
    return frozenset(values)


@dataclass(frozen=True)
class Call:
    """Base of all calls. Not instantiated directly.

    Attributes:
        gene: Gene the call is about
        condition: Condition the call is made in
        call_data: Evidence per data type
        is_observed_data: Whether the call was observed in the condition itself
        summary_call_type: Summarized call (expressed / not expressed)
        summary_quality: Summarized quality, never NODATA
        source_calls: Calls this call was derived from
    """
    gene: Optional[Gene] = None
    condition: Optional[Condition] = None
    call_data: frozenset[CallData] = frozenset()
    is_observed_data: Optional[bool] = None
    summary_call_type: Optional[ExpressionSummary] = None
    summary_quality: Optional[SummaryQuality] = None
    source_calls: frozenset["Call"] = frozenset()

    def __post_init__(self):
        if type(self) is Call:
            raise TypeError("Call is abstract, instantiate a concrete call type")
        if self.summary_quality == SummaryQuality.NODATA:
            raise InvariantViolationError(
                "No data quality cannot be marked as present",
                {"gene": self.gene, "condition": self.condition},
            )
        object.__setattr__(self, "call_data", _to_frozenset(self.call_data))
        object.__setattr__(self, "source_calls", _to_frozenset(self.source_calls))

    @property
    def gene_id(self) -> Optional[str]:
        return self.gene.gene_id if self.gene is not None else None

    @property
    def species_id(self) -> Optional[str]:
        return self.gene.species_id if self.gene is not None else None

    @property
    def data_types(self) -> frozenset[DataType]:
        return frozenset(d.data_type for d in self.call_data if d.data_type is not None)


def _to_rank(value: Any) -> Optional[Decimal]:
    if value is None:
        return None
    if isinstance(value, Decimal):
        rank = value
    else:
        try:
            # str() first so floats keep their shortest repr (1.25, not 1.25000000000000...)
            rank = Decimal(str(value))
        except InvalidOperation:
            raise NumericDomainError("Rank is not a number", {"rank": value}) from None
    if not rank.is_finite() or rank <= 0:
        raise NumericDomainError("A rank cannot be negative or zero", {"rank": value})
    return rank


@dataclass(frozen=True)
class ExpressionCall(Call):
    """Expression call carrying a global mean rank.

    Lower ranks mean higher expression. Ranks are strictly positive.

    Attributes:
        global_mean_rank: Global mean rank, None when unknown
    """
    global_mean_rank: Optional[Decimal] = None

    def __post_init__(self):
        super().__post_init__()
        object.__setattr__(self, "global_mean_rank", _to_rank(self.global_mean_rank))

    def formatted_global_mean_rank(self) -> str:
        """Rank rendered for display.

        Ranks below 10 get two decimals, below 100 one decimal, below 1000
        none; larger ranks use scientific notation with a two-decimal
        mantissa (2.01e4). Rounding is half-up.

        Raises:
            PreconditionError: If the call has no rank
        """
        rank = self.global_mean_rank
        if rank is None:
            raise PreconditionError("No rank was provided for this call", {"gene": self.gene})
        if rank < 10:
            return str(rank.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))
        if rank < 100:
            return str(rank.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))
        if rank < 1000:
            return str(rank.quantize(Decimal("1"), rounding=ROUND_HALF_UP))

        exponent = rank.adjusted()
        mantissa = rank.scaleb(-exponent).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
        if mantissa >= 10:
            mantissa = (mantissa / 10).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
            exponent += 1
        return f"{mantissa}e{exponent}"

    def __str__(self) -> str:
        return f"ExpressionCall({self.gene}, {self.condition}, rank={self.global_mean_rank})"
