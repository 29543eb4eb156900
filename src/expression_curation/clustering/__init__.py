"""Clustering of expression calls into expression levels by rank."""

from expression_curation.clustering.distance import BgeeRankDistance, CanberraDistance
from expression_curation.clustering.engine import (
    CLUSTER_FRAME_COLUMNS,
    cluster_calls_by_gene,
    clustering_to_frame,
    generate_rank_clustering,
    generate_rank_clustering_sorted,
    median_score,
)
from expression_curation.clustering.methods import (
    DEFAULT_CLUSTERING_METHOD,
    DEFAULT_DISTANCE_THRESHOLD,
    ClusteringMethod,
)

__all__ = [
    "BgeeRankDistance",
    "CanberraDistance",
    "CLUSTER_FRAME_COLUMNS",
    "cluster_calls_by_gene",
    "clustering_to_frame",
    "generate_rank_clustering",
    "generate_rank_clustering_sorted",
    "median_score",
    "DEFAULT_CLUSTERING_METHOD",
    "DEFAULT_DISTANCE_THRESHOLD",
    "ClusteringMethod",
]
