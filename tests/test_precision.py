"""Tests for the condition precision index."""

import pytest

from expression_curation.conditions import Condition, ConditionPrecisionIndex
from expression_curation.errors import (
    PreconditionError,
    UnknownEntityError,
    UnregisteredConditionError,
)
from expression_curation.ontology import Ontology

ENTITY = "UBERON:0001062"
BRAIN = "UBERON:0000955"
CEREBELLUM = "UBERON:0002037"
HEART = "UBERON:0000948"

LIFE_CYCLE = "UBERON:0000104"
ADULT = "HsapDv:0000087"
AGED = "HsapDv:0000088"


@pytest.fixture
def anat_ontology():
    return Ontology.from_relations(
        "anat_entity",
        [(BRAIN, ENTITY), (CEREBELLUM, BRAIN), (HEART, ENTITY)],
    )


@pytest.fixture
def stage_ontology():
    return Ontology.from_relations("dev_stage", [(ADULT, LIFE_CYCLE), (AGED, ADULT)])


@pytest.fixture
def index(anat_ontology, stage_ontology):
    """Index over a small set of observed conditions, no inference."""
    conditions = [
        Condition(ENTITY, LIFE_CYCLE),
        Condition(BRAIN, ADULT),
        Condition(CEREBELLUM, ADULT),
        Condition(CEREBELLUM, AGED),
        Condition(HEART, AGED),
        Condition(BRAIN, LIFE_CYCLE),
    ]
    return ConditionPrecisionIndex("9606", conditions, anat_ontology, stage_ontology)


def test_is_more_precise(index):
    """Test that precision requires descendant-or-self on both axes."""
    # Descendant anatomy, same stage
    assert index.is_more_precise(Condition(BRAIN, ADULT), Condition(CEREBELLUM, ADULT))
    # Same anatomy, descendant stage
    assert index.is_more_precise(Condition(CEREBELLUM, ADULT), Condition(CEREBELLUM, AGED))
    # Both axes descendant
    assert index.is_more_precise(Condition(ENTITY, LIFE_CYCLE), Condition(HEART, AGED))

    # Reverse direction
    assert not index.is_more_precise(Condition(CEREBELLUM, ADULT), Condition(BRAIN, ADULT))
    # Ancestor stage
    assert not index.is_more_precise(Condition(BRAIN, ADULT), Condition(BRAIN, LIFE_CYCLE))
    # Unrelated anatomy
    assert not index.is_more_precise(Condition(BRAIN, ADULT), Condition(HEART, AGED))


def test_is_more_precise_irreflexive(index):
    """Test that a condition is never more precise than itself."""
    for cond in index.conditions:
        assert not index.is_more_precise(cond, cond)


def test_precision_is_antisymmetric_and_transitive(index):
    """Test strict partial order properties over the whole working set."""
    conditions = list(index.conditions)
    for a in conditions:
        for b in conditions:
            if index.is_more_precise(a, b):
                assert not index.is_more_precise(b, a)
                for c in conditions:
                    if index.is_more_precise(b, c):
                        assert index.is_more_precise(a, c)


def test_compare(index):
    """Test that the more precise condition sorts first."""
    general = Condition(BRAIN, ADULT)
    precise = Condition(CEREBELLUM, ADULT)

    assert index.compare(precise, general) == -1
    assert index.compare(general, precise) == 1
    assert index.compare(general, general) == 0
    assert index.compare(Condition(CEREBELLUM, AGED), Condition(HEART, AGED)) == 0


def test_unregistered_condition_raises(index):
    """Test that queries outside the working set are rejected."""
    outside = Condition(HEART, ADULT)

    with pytest.raises(UnregisteredConditionError) as exc_info:
        index.is_more_precise(Condition(BRAIN, ADULT), outside)
    assert exc_info.value.conditions == [outside]

    with pytest.raises(UnregisteredConditionError):
        index.compare(outside, Condition(BRAIN, ADULT))
    with pytest.raises(UnregisteredConditionError):
        index.descendants_of(outside)
    with pytest.raises(UnregisteredConditionError):
        index.ancestors_of(outside)


def test_descendants_of(index):
    """Test more precise conditions within the working set, self excluded."""
    assert index.descendants_of(Condition(BRAIN, ADULT)) == frozenset({
        Condition(CEREBELLUM, ADULT),
        Condition(CEREBELLUM, AGED),
    })
    assert index.descendants_of(Condition(CEREBELLUM, AGED)) == frozenset()
    assert len(index.descendants_of(Condition(ENTITY, LIFE_CYCLE))) == 5


def test_descendants_of_direct_only(index):
    """Test that direct_only follows direct children on each axis."""
    # Cerebellum/aged is two stage steps below life cycle
    assert index.descendants_of(Condition(BRAIN, LIFE_CYCLE), direct_only=True) == frozenset({
        Condition(BRAIN, ADULT),
        Condition(CEREBELLUM, ADULT),
    })


def test_ancestors_of(index):
    """Test less precise conditions within the working set, self excluded."""
    assert index.ancestors_of(Condition(CEREBELLUM, AGED)) == frozenset({
        Condition(CEREBELLUM, ADULT),
        Condition(BRAIN, ADULT),
        Condition(BRAIN, LIFE_CYCLE),
        Condition(ENTITY, LIFE_CYCLE),
    })
    assert index.ancestors_of(Condition(CEREBELLUM, AGED), direct_only=True) == frozenset({
        Condition(CEREBELLUM, ADULT),
        Condition(BRAIN, ADULT),
    })
    assert index.ancestors_of(Condition(ENTITY, LIFE_CYCLE)) == frozenset()


def test_ancestral_condition_inference(anat_ontology, stage_ontology):
    """Test that inference adds every ancestor-or-self combination."""
    observed = Condition(CEREBELLUM, AGED)
    index = ConditionPrecisionIndex(
        "9606", [observed], anat_ontology, stage_ontology, infer_ancestral_conditions=True
    )

    expected = {
        Condition(a, s)
        for a in (CEREBELLUM, BRAIN, ENTITY)
        for s in (AGED, ADULT, LIFE_CYCLE)
    }
    assert index.conditions == frozenset(expected)
    assert index.infers_ancestral_conditions
    assert index.descendants_of(Condition(ENTITY, LIFE_CYCLE), direct_only=True) == frozenset({
        Condition(BRAIN, LIFE_CYCLE),
        Condition(ENTITY, ADULT),
        Condition(BRAIN, ADULT),
    })
    assert len(index.descendants_of(Condition(ENTITY, LIFE_CYCLE))) == 8


def test_partial_conditions(anat_ontology, stage_ontology):
    """Test that a missing axis only relates to a missing axis."""
    conditions = [Condition(BRAIN, None), Condition(CEREBELLUM, None), Condition(CEREBELLUM, ADULT)]
    index = ConditionPrecisionIndex("9606", conditions, anat_ontology, stage_ontology)

    assert index.is_more_precise(Condition(BRAIN, None), Condition(CEREBELLUM, None))
    assert not index.is_more_precise(Condition(BRAIN, None), Condition(CEREBELLUM, ADULT))
    assert index.descendants_of(Condition(BRAIN, None)) == frozenset({Condition(CEREBELLUM, None)})

    inferred = ConditionPrecisionIndex(
        "9606", [Condition(CEREBELLUM, None)], anat_ontology, stage_ontology,
        infer_ancestral_conditions=True,
    )
    assert inferred.conditions == frozenset({
        Condition(CEREBELLUM, None), Condition(BRAIN, None), Condition(ENTITY, None),
    })


def test_entity_ids(index):
    """Test the ids referenced by the working set."""
    assert index.anat_entity_ids == frozenset({ENTITY, BRAIN, CEREBELLUM, HEART})
    assert index.dev_stage_ids == frozenset({LIFE_CYCLE, ADULT, AGED})
    assert index.species_id == "9606"
    assert len(index) == 6
    assert Condition(BRAIN, ADULT) in index


def test_unknown_entity_raises(anat_ontology, stage_ontology):
    """Test that ids absent from the ontologies are reported with the species."""
    with pytest.raises(UnknownEntityError) as exc_info:
        ConditionPrecisionIndex(
            "9606",
            [Condition(BRAIN, ADULT), Condition("UBERON:9999999", "HsapDv:9999999")],
            anat_ontology,
            stage_ontology,
        )

    assert exc_info.value.species_id == "9606"
    assert exc_info.value.entity_ids == {"UBERON:9999999", "HsapDv:9999999"}


def test_blank_species_raises(anat_ontology, stage_ontology):
    """Test that a species id is required."""
    with pytest.raises(PreconditionError):
        ConditionPrecisionIndex("  ", [Condition(BRAIN, ADULT)], anat_ontology, stage_ontology)


def test_empty_conditions_raises(anat_ontology, stage_ontology):
    """Test that at least one condition is required."""
    with pytest.raises(PreconditionError):
        ConditionPrecisionIndex("9606", [], anat_ontology, stage_ontology)
