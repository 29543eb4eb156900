"""Available rank clustering methods."""

from enum import Enum

from expression_curation.errors import PreconditionError


class ClusteringMethod(Enum):
    """Rank clustering methods.

    Each member carries whether its distance measure is always above 1
    (ratio-like measure) and a recommended distance threshold.
    """

    CANBERRA_DIST_TO_MIN = ("canberra_dist_to_min", False, 0.2)
    CANBERRA_DIST_TO_MAX = ("canberra_dist_to_max", False, 0.19)
    CANBERRA_DIST_TO_MEAN = ("canberra_dist_to_mean", False, 0.18)
    CANBERRA_DIST_TO_MEDIAN = ("canberra_dist_to_median", False, 0.18)
    FIXED_CANBERRA_DIST_TO_MAX = ("fixed_canberra_dist_to_max", False, 0.19)
    CANBERRA_DBSCAN = ("canberra_dbscan", False, 0.19)
    BGEE_DIST_TO_MAX = ("bgee_dist_to_max", True, 1.9)

    def __init__(self, label: str, distance_measure_above_one: bool, recommended_threshold: float):
        self.label = label
        self.distance_measure_above_one = distance_measure_above_one
        self.recommended_threshold = recommended_threshold

    @classmethod
    def from_name(cls, name: "str | ClusteringMethod") -> "ClusteringMethod":
        """Look up a method by name, case-insensitively.

        Raises:
            PreconditionError: If no method has this name
        """
        if isinstance(name, cls):
            return name
        key = str(name).strip().upper()
        if key not in cls.__members__:
            raise PreconditionError(
                "Unrecognized clustering method",
                {"method": name, "available": ", ".join(cls.__members__)},
            )
        return cls.__members__[key]


DEFAULT_CLUSTERING_METHOD = ClusteringMethod.BGEE_DIST_TO_MAX
DEFAULT_DISTANCE_THRESHOLD = 1.9
