"""Tests for configuration loading and validation."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from expression_curation.clustering import ClusteringMethod
from expression_curation.config import load_config, load_config_with_overrides
from expression_curation.config.schema import CurationConfig
from expression_curation.errors import PreconditionError

DEFAULT_CONFIG = Path(__file__).parent.parent / "config" / "default.yaml"


def test_load_valid_config():
    """Test loading valid default configuration."""
    config = load_config(DEFAULT_CONFIG)

    assert isinstance(config, CurationConfig)
    assert config.clustering.method == "BGEE_DIST_TO_MAX"
    assert config.clustering.distance_threshold == 1.9
    assert config.clustering.resolved_method() is ClusteringMethod.BGEE_DIST_TO_MAX
    assert config.precision.species_id == "9606"
    assert config.precision.infer_ancestral_conditions is False
    assert config.ontologies.anat_entity_relations == Path("data/example/anat_entity_relations.tsv")
    assert config.log_level == "INFO"


def test_minimal_config_defaults(tmp_path):
    """Test that only the species is required."""
    config_path = tmp_path / "minimal.yaml"
    config_path.write_text("""
precision:
  species_id: "10090"
""")

    config = load_config(config_path)

    assert config.clustering.resolved_method() is ClusteringMethod.BGEE_DIST_TO_MAX
    assert config.clustering.distance_threshold == 1.9
    assert config.ontologies.anat_entity_relations is None


def test_invalid_config_missing_field(tmp_path):
    """Test that missing required field raises ValidationError."""
    invalid_config = tmp_path / "invalid.yaml"
    invalid_config.write_text("""
clustering:
  method: CANBERRA_DBSCAN
  distance_threshold: 0.19
""")

    with pytest.raises(ValidationError) as exc_info:
        load_config(invalid_config)

    assert "precision" in str(exc_info.value)


def test_method_name_normalized(tmp_path):
    """Test that method names are case-insensitive."""
    config_path = tmp_path / "lower.yaml"
    config_path.write_text("""
clustering:
  method: canberra_dist_to_median
  distance_threshold: 0.18
precision:
  species_id: "9606"
""")

    config = load_config(config_path)

    assert config.clustering.method == "CANBERRA_DIST_TO_MEDIAN"
    assert config.clustering.resolved_method() is ClusteringMethod.CANBERRA_DIST_TO_MEDIAN


def test_unknown_method_rejected(tmp_path):
    """Test that an unknown clustering method raises ValidationError."""
    config_path = tmp_path / "bad_method.yaml"
    config_path.write_text("""
clustering:
  method: KMEANS
precision:
  species_id: "9606"
""")

    with pytest.raises(ValidationError) as exc_info:
        load_config(config_path)

    assert "method" in str(exc_info.value)


def test_non_positive_threshold_rejected(tmp_path):
    """Test that distance_threshold must be positive."""
    config_path = tmp_path / "bad_threshold.yaml"
    config_path.write_text("""
clustering:
  distance_threshold: 0
precision:
  species_id: "9606"
""")

    with pytest.raises(ValidationError) as exc_info:
        load_config(config_path)

    assert "distance_threshold" in str(exc_info.value)


def test_config_hash_deterministic():
    """Test that config hash is deterministic and changes with config."""
    config1 = load_config(DEFAULT_CONFIG)
    config2 = load_config(DEFAULT_CONFIG)

    assert config1.config_hash() == config2.config_hash()
    assert len(config1.config_hash()) == 64

    config3 = load_config_with_overrides(
        DEFAULT_CONFIG, {"clustering.distance_threshold": 2.5}
    )
    assert config3.config_hash() != config1.config_hash()


def test_config_overrides():
    """Test dotted overrides, None values leaving settings unchanged."""
    config = load_config_with_overrides(
        DEFAULT_CONFIG,
        {
            "clustering.method": "CANBERRA_DBSCAN",
            "clustering.distance_threshold": None,
            "precision.infer_ancestral_conditions": True,
            "log_level": "DEBUG",
        },
    )

    assert config.clustering.resolved_method() is ClusteringMethod.CANBERRA_DBSCAN
    assert config.clustering.distance_threshold == 1.9
    assert config.precision.infer_ancestral_conditions is True
    assert config.log_level == "DEBUG"


def test_invalid_override_rejected():
    """Test that overrides are validated."""
    with pytest.raises(ValidationError):
        load_config_with_overrides(DEFAULT_CONFIG, {"clustering.distance_threshold": -1})


def test_missing_config_file(tmp_path):
    """Test that a missing file raises FileNotFoundError."""
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "absent.yaml")


@pytest.mark.parametrize("key", ["clustering.metric", "scoring.weight", "precision.species_id.code", "verbose"])
def test_unknown_override_key_rejected(key):
    """Test that an override must name an existing setting."""
    with pytest.raises(PreconditionError) as exc_info:
        load_config_with_overrides(DEFAULT_CONFIG, {key: "x"})

    assert key in str(exc_info.value)


def test_unknown_override_key_ignored_when_unset():
    """Test that options left unset never touch the config."""
    config = load_config_with_overrides(DEFAULT_CONFIG, {"clustering.metric": None})

    assert config == load_config(DEFAULT_CONFIG)
