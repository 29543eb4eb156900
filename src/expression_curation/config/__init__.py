from .loader import load_config, load_config_with_overrides
from .schema import CurationConfig, ClusteringConfig, PrecisionConfig, OntologySources

__all__ = [
    "load_config",
    "load_config_with_overrides",
    "CurationConfig",
    "ClusteringConfig",
    "PrecisionConfig",
    "OntologySources",
]
