"""In-memory view over a pre-computed ontology (anatomy or developmental stages).

Ontologies are built upstream; this adapter only answers membership and
ancestor/descendant queries. Relations are stored as a networkx DiGraph
with edges going child -> parent, so graph descendants are ontology
ancestors and graph ancestors are ontology descendants.
"""

from typing import Iterable

import networkx as nx
import structlog

from expression_curation.errors import PreconditionError, UnknownEntityError

logger = structlog.get_logger()


class Ontology:
    """Read-only ontology closure exposing ancestor/descendant queries.

    Args:
        name: Label used in logs and errors (e.g. "anat_entity", "dev_stage")
        graph: DiGraph with one node per entity id and child -> parent edges

    Raises:
        PreconditionError: If the relation graph contains a cycle
    """

    def __init__(self, name: str, graph: nx.DiGraph):
        if not nx.is_directed_acyclic_graph(graph):
            raise PreconditionError(
                "Ontology relations must not contain cycles",
                {"ontology": name},
            )
        self.name = name
        self._graph = graph.copy(as_view=False)
        logger.debug(
            "ontology_loaded",
            ontology=name,
            entity_count=self._graph.number_of_nodes(),
            relation_count=self._graph.number_of_edges(),
        )

    @classmethod
    def from_relations(
        cls,
        name: str,
        relations: Iterable[tuple[str, str]],
        entity_ids: Iterable[str] = (),
    ) -> "Ontology":
        """Build an ontology from (child_id, parent_id) pairs.

        Args:
            name: Ontology label
            relations: Iterable of (child_id, parent_id) pairs
            entity_ids: Additional entity ids, e.g. roots or isolated terms

        Returns:
            Ontology instance
        """
        graph = nx.DiGraph()
        graph.add_nodes_from(entity_ids)
        graph.add_edges_from(relations)
        return cls(name, graph)

    @property
    def elements(self) -> frozenset[str]:
        """All entity ids of this ontology."""
        return frozenset(self._graph.nodes)

    def contains(self, entity_id: str) -> bool:
        return entity_id in self._graph

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._graph

    def __len__(self) -> int:
        return self._graph.number_of_nodes()

    def ancestors_of(self, entity_id: str, direct_only: bool = False) -> frozenset[str]:
        """Ids of the ancestors of an entity, the entity itself excluded.

        Args:
            entity_id: Entity to query
            direct_only: If True, only return direct parents

        Raises:
            UnknownEntityError: If entity_id is not part of this ontology
        """
        self._check(entity_id)
        if direct_only:
            return frozenset(self._graph.successors(entity_id))
        return frozenset(nx.descendants(self._graph, entity_id))

    def descendants_of(self, entity_id: str, direct_only: bool = False) -> frozenset[str]:
        """Ids of the descendants of an entity, the entity itself excluded.

        Args:
            entity_id: Entity to query
            direct_only: If True, only return direct children

        Raises:
            UnknownEntityError: If entity_id is not part of this ontology
        """
        self._check(entity_id)
        if direct_only:
            return frozenset(self._graph.predecessors(entity_id))
        return frozenset(nx.ancestors(self._graph, entity_id))

    def _check(self, entity_id: str) -> None:
        if entity_id not in self._graph:
            raise UnknownEntityError(
                f"Entity not found in ontology {self.name}",
                entity_ids={entity_id},
            )

    def __repr__(self) -> str:
        return f"Ontology(name={self.name!r}, entities={len(self)})"
