"""Lexis graph store: an arena of lexis nodes keyed by id."""

from __future__ import annotations

import dataclasses
from collections.abc import Iterator

from kirum.exceptions import DuplicateEntityError, UnknownReference
from kirum.models import Etymon, Lexis


class LexisGraph:
    """Holds lexis nodes and their etymon edges.

    Edges live on the nodes themselves as tuples of ``Etymon`` links, each
    naming its ancestor by id, so the store never holds object cycles.
    Iteration follows insertion order.
    """

    def __init__(self, nodes: dict[str, Lexis] | None = None) -> None:
        self._nodes: dict[str, Lexis] = dict(nodes or {})

    def __contains__(self, lexis_id: object) -> bool:
        return lexis_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[Lexis]:
        return iter(self._nodes.values())

    def __repr__(self) -> str:
        return f"LexisGraph({len(self._nodes)} nodes)"

    # ------------------------------------------------------------------
    # Mutation (graph assembly only)
    # ------------------------------------------------------------------

    def add_lexis(self, lexis: Lexis) -> Lexis:
        """Insert a node; ids are unique within a graph."""
        if lexis.id in self._nodes:
            raise DuplicateEntityError(f"lexis '{lexis.id}' already exists")
        self._nodes[lexis.id] = lexis
        return lexis

    def add_etymon(self, lexis_id: str, etymon: Etymon) -> Lexis:
        """Append an etymon link to an existing node."""
        lexis = self.get(lexis_id)
        updated = dataclasses.replace(lexis, etymons=lexis.etymons + (etymon,))
        self._nodes[lexis_id] = updated
        return updated

    def replace_lexis(self, lexis: Lexis) -> None:
        """Swap in a new version of an existing node."""
        self.get(lexis.id)
        self._nodes[lexis.id] = lexis

    def copy(self) -> LexisGraph:
        """Shallow copy; nodes are immutable and shared."""
        return LexisGraph(self._nodes)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, lexis_id: str, *, referrer: str | None = None) -> Lexis:
        """Get a node by id."""
        try:
            return self._nodes[lexis_id]
        except KeyError:
            raise UnknownReference(lexis_id, referrer=referrer) from None

    def iter_lexis(
        self,
        *,
        language: str | None = None,
        tag: str | None = None,
        archaic: bool | None = None,
    ) -> Iterator[Lexis]:
        """Iterate nodes with optional filters."""
        for lexis in self._nodes.values():
            if language is not None and lexis.language != language:
                continue
            if tag is not None and tag not in lexis.tags:
                continue
            if archaic is not None and lexis.archaic != archaic:
                continue
            yield lexis

    def by_language(self, language: str) -> list[Lexis]:
        return list(self.iter_lexis(language=language))

    def roots(self) -> list[Lexis]:
        """Nodes whose word does not depend on an etymon."""
        return [lexis for lexis in self._nodes.values() if lexis.word or not lexis.etymons]

    def languages(self) -> list[str]:
        seen: dict[str, None] = {}
        for lexis in self._nodes.values():
            seen.setdefault(lexis.language, None)
        return list(seen)

    def descendants(self, lexis_id: str) -> set[str]:
        """Ids of every node that derives, directly or not, from ``lexis_id``."""
        self.get(lexis_id)
        children: dict[str, list[str]] = {}
        for lexis in self._nodes.values():
            for ety in lexis.etymons:
                children.setdefault(ety.etymon, []).append(lexis.id)
        found: set[str] = set()
        stack = list(children.get(lexis_id, []))
        while stack:
            current = stack.pop()
            if current in found:
                continue
            found.add(current)
            stack.extend(children.get(current, []))
        return found

    def find_cycle(self) -> list[str] | None:
        """Return the id chain of the first etymology cycle, if any.

        Iterative depth-first search with white/grey/black marking. Links to
        unknown ids are ignored here; they are reported separately.
        """
        state: dict[str, int] = {}
        for start in self._nodes:
            if start in state:
                continue
            path: list[str] = [start]
            state[start] = 1
            pending = [iter(self._nodes[start].etymons)]
            while pending:
                ety = next(pending[-1], None)
                if ety is None:
                    state[path.pop()] = 2
                    pending.pop()
                    continue
                target = ety.etymon
                if target not in self._nodes:
                    continue
                mark = state.get(target, 0)
                if mark == 1:
                    return path[path.index(target):] + [target]
                if mark == 0:
                    state[target] = 1
                    path.append(target)
                    pending.append(iter(self._nodes[target].etymons))
        return None
