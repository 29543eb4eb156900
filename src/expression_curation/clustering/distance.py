"""Distance measures between two rank scores."""

from expression_curation.errors import NumericDomainError

# Ranks at or below this value are treated as zero by the Bgee measure
MIN_BGEE_SCORE = 1e-6

# Exponent applied to the larger score by the Bgee measure
BGEE_EXPONENT = 1.03


class CanberraDistance:
    """Canberra distance |x - y| / (|x| + |y|), in [0, 1]."""

    name = "canberra"

    def compute(self, x: float, y: float) -> float:
        denominator = abs(x) + abs(y)
        if denominator == 0:
            return 0.0
        return abs(x - y) / denominator

    def __repr__(self) -> str:
        return "CanberraDistance()"


class BgeeRankDistance:
    """Ratio of the larger score, raised to 1.03, to the smaller score.

    Always above 1 for strictly positive scores. The exponent widens the
    distance between high ranks, so high ranks are split into more groups
    than a plain ratio would.
    """

    name = "bgee_rank"

    def compute(self, x: float, y: float) -> float:
        if x <= MIN_BGEE_SCORE or y <= MIN_BGEE_SCORE:
            raise NumericDomainError(
                "Bgee rank distance is only defined for strictly positive scores",
                {"x": x, "y": y},
            )
        return max(x, y) ** BGEE_EXPONENT / min(x, y)

    def __repr__(self) -> str:
        return "BgeeRankDistance()"
