"""Expression call curation: rank ordering, redundancy filtering and rank clustering."""

__version__ = "0.1.0"
