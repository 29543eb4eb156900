"""Ontology collaborator for anatomical entities and developmental stages.

Ontologies are consumed pre-built: relations are loaded from child/parent
tables and exposed through ancestor/descendant/membership queries only.
"""

from expression_curation.ontology.graph import Ontology
from expression_curation.ontology.load import load_relations_tsv, RELATION_COLUMNS

__all__ = [
    "Ontology",
    "load_relations_tsv",
    "RELATION_COLUMNS",
]
