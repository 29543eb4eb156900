"""Clustering of one gene's expression calls by global mean rank.

Calls are walked in ascending rank order and assigned group indices
starting at 0; a group index never decreases along the walk. The
distance-based methods compare each rank to a reference score of the
current group (its minimum, its maximum, its mean or its median) and open
a new group when the distance exceeds the threshold.
"""

import math
import time
from typing import Iterable, Optional

import numpy as np
import polars as pl
import structlog
from scipy.spatial.distance import pdist, squareform
from sklearn.cluster import DBSCAN

from expression_curation.calls.models import ExpressionCall
from expression_curation.calls.ordering import filter_and_order
from expression_curation.clustering.distance import BgeeRankDistance, CanberraDistance
from expression_curation.clustering.methods import (
    DEFAULT_CLUSTERING_METHOD,
    DEFAULT_DISTANCE_THRESHOLD,
    ClusteringMethod,
)
from expression_curation.errors import PreconditionError

logger = structlog.get_logger()

# Tolerance on score differences for the fixed-delta method
SCORE_DIFF_TOLERANCE = 1e-6

CLUSTER_FRAME_COLUMNS = [
    "gene_id",
    "species_id",
    "anat_entity_id",
    "dev_stage_id",
    "global_mean_rank",
    "formatted_rank",
    "cluster_index",
]


def _check_input(calls: list[ExpressionCall], distance_threshold: float) -> None:
    if distance_threshold is None or not math.isfinite(distance_threshold) or distance_threshold <= 0:
        raise PreconditionError(
            "Distance threshold must be a positive number",
            {"distance_threshold": distance_threshold},
        )
    previous = None
    for position, call in enumerate(calls):
        if call.global_mean_rank is None:
            raise PreconditionError("Missing rank for call", {"position": position, "call": call})
        if previous is not None:
            if call.global_mean_rank < previous.global_mean_rank:
                raise PreconditionError(
                    "Provided calls are not sorted by rank",
                    {"position": position, "rank": call.global_mean_rank,
                     "previous_rank": previous.global_mean_rank},
                )
            if (call.gene_id, call.species_id) != (previous.gene_id, previous.species_id):
                raise PreconditionError(
                    "A clustering can only be performed one gene at a time",
                    {"genes": [previous.gene, call.gene]},
                )
        previous = call


def median_score(scores: list[float]) -> float:
    """Median of scores; the mean of the two central values for an even count."""
    if not scores:
        raise PreconditionError("Cannot compute the median of no scores")
    return float(np.median(scores))


def _cluster_by_distance(scores, distance_threshold, measure, reference) -> list[int]:
    indices = []
    group_index = -1
    group: list[float] = []
    for score in scores:
        create_group = not group
        if group:
            compare_to_min = False
            match reference:
                case "min":
                    ref_score = group[0]
                case "max":
                    ref_score = group[-1]
                case "mean":
                    ref_score = (sum(group) + score) / (len(group) + 1)
                    compare_to_min = True
                case "median":
                    ref_score = median_score(group + [score])
                    compare_to_min = True
                case _:
                    raise PreconditionError("Unsupported reference score", {"reference": reference})

            # Mean and median drift as the group grows: also check the
            # group's first member stays within the threshold
            if measure.compute(ref_score, score) > distance_threshold or (
                compare_to_min and measure.compute(ref_score, group[0]) > distance_threshold
            ):
                create_group = True

        if create_group:
            group_index += 1
            group = []
        group.append(score)
        indices.append(group_index)
    return indices


def _allowed_score_diff(score: float, distance_threshold: float) -> float:
    # Largest score s2 with canberra(score, s2) <= t is -score * (1 + t) / (t - 1).
    # Canberra distance never exceeds 1, so from t = 1 any score fits.
    if distance_threshold >= 1:
        return math.inf
    return -score * ((1 + distance_threshold) / (distance_threshold - 1) + 1)


def _cluster_fixed_delta(scores, distance_threshold) -> list[int]:
    indices = []
    group_index = -1
    allowed_diff = 0.0
    previous = 0.0
    for score in scores:
        if group_index == -1 or score - previous - allowed_diff >= -SCORE_DIFF_TOLERANCE:
            group_index += 1
            allowed_diff = _allowed_score_diff(score, distance_threshold)
        indices.append(group_index)
        previous = score
    return indices


def _cluster_dbscan(scores, distance_threshold) -> list[int]:
    points = np.asarray(scores, dtype=float).reshape(-1, 1)
    distances = squareform(pdist(points, metric="canberra"))
    labels = DBSCAN(
        eps=distance_threshold, min_samples=1, metric="precomputed"
    ).fit_predict(distances)

    # Renumber along ascending rank: each noise point gets its own group
    indices = []
    group_index = -1
    last_label = None
    for label in (int(v) for v in labels):
        if label == -1 or last_label is None or last_label == -1 or label != last_label:
            group_index += 1
        indices.append(group_index)
        last_label = label
    return indices


def generate_rank_clustering_sorted(
    calls: Iterable[ExpressionCall],
    method: ClusteringMethod | str = DEFAULT_CLUSTERING_METHOD,
    distance_threshold: float = DEFAULT_DISTANCE_THRESHOLD,
) -> dict[ExpressionCall, int]:
    """Cluster one gene's calls, already sorted by rank.

    Args:
        calls: Calls of a single gene, ranks non-decreasing
        method: Clustering method or its name
        distance_threshold: Distance above which a call leaves the current group

    Returns:
        Mapping call -> group index, in rank order. Empty input gives an empty mapping.

    Raises:
        PreconditionError: If the threshold is not positive, a call has no
            rank, ranks decrease, several genes are present or the method is unknown
        NumericDomainError: If the Bgee measure meets a near-zero rank
    """
    method = ClusteringMethod.from_name(method)
    calls = list(calls)
    _check_input(calls, distance_threshold)
    if not calls:
        return {}

    start = time.perf_counter()
    scores = [float(call.global_mean_rank) for call in calls]
    match method:
        case ClusteringMethod.CANBERRA_DIST_TO_MIN:
            indices = _cluster_by_distance(scores, distance_threshold, CanberraDistance(), "min")
        case ClusteringMethod.CANBERRA_DIST_TO_MAX:
            indices = _cluster_by_distance(scores, distance_threshold, CanberraDistance(), "max")
        case ClusteringMethod.CANBERRA_DIST_TO_MEAN:
            indices = _cluster_by_distance(scores, distance_threshold, CanberraDistance(), "mean")
        case ClusteringMethod.CANBERRA_DIST_TO_MEDIAN:
            indices = _cluster_by_distance(scores, distance_threshold, CanberraDistance(), "median")
        case ClusteringMethod.FIXED_CANBERRA_DIST_TO_MAX:
            indices = _cluster_fixed_delta(scores, distance_threshold)
        case ClusteringMethod.CANBERRA_DBSCAN:
            indices = _cluster_dbscan(scores, distance_threshold)
        case ClusteringMethod.BGEE_DIST_TO_MAX:
            indices = _cluster_by_distance(scores, distance_threshold, BgeeRankDistance(), "max")

    logger.debug(
        "calls_clustered",
        method=method.name,
        distance_threshold=distance_threshold,
        call_count=len(calls),
        cluster_count=indices[-1] + 1,
        elapsed_ms=round((time.perf_counter() - start) * 1000, 3),
    )
    return dict(zip(calls, indices))


def generate_rank_clustering(
    calls: Iterable[ExpressionCall],
    method: ClusteringMethod | str = DEFAULT_CLUSTERING_METHOD,
    distance_threshold: float = DEFAULT_DISTANCE_THRESHOLD,
) -> dict[ExpressionCall, int]:
    """Cluster one gene's calls given in any order.

    Duplicates are removed and calls sorted by rank before clustering.
    See generate_rank_clustering_sorted for arguments and errors.
    """
    if calls is None:
        raise PreconditionError("Some calls must be provided")
    return generate_rank_clustering_sorted(filter_and_order(calls), method, distance_threshold)


def cluster_calls_by_gene(
    calls: Iterable[ExpressionCall],
    method: ClusteringMethod | str = DEFAULT_CLUSTERING_METHOD,
    distance_threshold: float = DEFAULT_DISTANCE_THRESHOLD,
) -> dict[tuple[Optional[str], Optional[str]], dict[ExpressionCall, int]]:
    """Cluster each gene of a mixed collection independently.

    Returns:
        Mapping (gene_id, species_id) -> clustering of that gene's calls,
        genes in ascending id order
    """
    by_gene: dict[tuple[Optional[str], Optional[str]], list[ExpressionCall]] = {}
    for call in calls:
        by_gene.setdefault((call.gene_id, call.species_id), []).append(call)

    ordered_keys = sorted(by_gene, key=lambda k: tuple((v is None, v or "") for v in k))
    result = {
        key: generate_rank_clustering(by_gene[key], method, distance_threshold)
        for key in ordered_keys
    }
    logger.info(
        "genes_clustered",
        method=ClusteringMethod.from_name(method).name,
        gene_count=len(result),
        cluster_count=sum(max(c.values(), default=-1) + 1 for c in result.values()),
    )
    return result


def clustering_to_frame(clustering: dict[ExpressionCall, int]) -> pl.DataFrame:
    """Tabular view of a clustering, one row per call, sorted by cluster then rank."""
    rows = []
    for call, cluster_index in clustering.items():
        cond = call.condition
        rows.append({
            "gene_id": call.gene_id,
            "species_id": call.species_id,
            "anat_entity_id": cond.anat_entity_id if cond is not None else None,
            "dev_stage_id": cond.dev_stage_id if cond is not None else None,
            "global_mean_rank": float(call.global_mean_rank),
            "formatted_rank": call.formatted_global_mean_rank(),
            "cluster_index": cluster_index,
        })

    schema = {
        "gene_id": pl.Utf8,
        "species_id": pl.Utf8,
        "anat_entity_id": pl.Utf8,
        "dev_stage_id": pl.Utf8,
        "global_mean_rank": pl.Float64,
        "formatted_rank": pl.Utf8,
        "cluster_index": pl.Int64,
    }
    df = pl.DataFrame(rows, schema=schema)
    return df.sort(["cluster_index", "global_mean_rank"])
