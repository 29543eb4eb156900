"""Handle-based store recording which calls were derived from which.

Calls are added to the arena in derivation order: a call may only name
sources that are already stored, so the recorded graph is acyclic by
construction.
"""

from dataclasses import dataclass, replace
from typing import Iterable, Iterator

from expression_curation.calls.models import Call
from expression_curation.errors import PreconditionError


@dataclass(frozen=True)
class ArenaEntry:
    """A stored call and the handles of its direct sources."""
    call: Call
    sources: tuple[int, ...] = ()


class CallArena:
    """Append-only store of calls addressed by integer handles."""

    def __init__(self):
        self._entries: list[ArenaEntry] = []

    def add(self, call: Call, sources: Iterable[int] = ()) -> int:
        """Store a call derived from already stored calls.

        Args:
            call: Call to store
            sources: Handles of the calls it was derived from

        Returns:
            Handle of the stored call

        Raises:
            PreconditionError: If a source handle is unknown
        """
        sources = tuple(dict.fromkeys(sources))
        unknown = [h for h in sources if h not in self]
        if unknown:
            raise PreconditionError(
                "Source calls must be added to the arena first",
                {"unknown_handles": unknown},
            )
        self._entries.append(ArenaEntry(call=call, sources=sources))
        return len(self._entries) - 1

    def _entry(self, handle: int) -> ArenaEntry:
        if handle not in self:
            raise PreconditionError("Unknown call handle", {"handle": handle})
        return self._entries[handle]

    def get(self, handle: int) -> Call:
        return self._entry(handle).call

    def sources_of(self, handle: int) -> tuple[int, ...]:
        """Handles of the direct sources of a call."""
        return self._entry(handle).sources

    def lineage(self, handle: int) -> list[int]:
        """Handles of all transitive sources, nearest first, each listed once."""
        seen: set[int] = set()
        ordered: list[int] = []
        frontier = list(self._entry(handle).sources)
        while frontier:
            next_frontier = []
            for source in frontier:
                if source in seen:
                    continue
                seen.add(source)
                ordered.append(source)
                next_frontier.extend(self._entries[source].sources)
            frontier = next_frontier
        return ordered

    def with_sources(self, handle: int) -> Call:
        """The stored call with its source_calls filled from the arena, recursively."""
        entry = self._entry(handle)
        if not entry.sources:
            return entry.call
        return replace(
            entry.call,
            source_calls=frozenset(self.with_sources(s) for s in entry.sources),
        )

    def __contains__(self, handle: object) -> bool:
        return (
            isinstance(handle, int)
            and not isinstance(handle, bool)
            and 0 <= handle < len(self._entries)
        )

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[int]:
        return iter(range(len(self._entries)))
