"""
Name-based identity for graph entities.

Two names denote the same entity when their trimmed, case-folded forms
(the *canonical key*) are equal. The stored display name keeps the casing
it was first written with.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from medgraph.graph.types import AnyEntity, EntityKind, GraphData


def normalize_name(name: Any) -> str:
    return name.strip() if isinstance(name, str) else ""


def canonical_key(name: Any) -> str:
    return normalize_name(name).casefold()


def contains_name(names: Iterable[str], name: str) -> bool:
    """
    Case-insensitive membership test.

    :param names: Names to search.
    :param name: Candidate name.
    :return: ``True`` if any element has the same canonical key.
    """
    key = canonical_key(name)
    return any(canonical_key(n) == key for n in names)


def union_names(existing: Optional[Iterable[Any]], incoming: Optional[Iterable[Any]]) -> List[str]:
    """
    Merge two name lists into one case-insensitively deduplicated list.

    Existing names come first in their original order, followed by incoming
    names not already present. Every kept name is trimmed; empty and
    non-string items are dropped.

    :param existing: Names already stored.
    :param incoming: Names from the incoming fragment.
    :return: The merged list.
    """
    result: List[str] = []
    seen: set[str] = set()
    for source in (existing, incoming):
        if not isinstance(source, (list, tuple)):
            continue
        for item in source:
            name = normalize_name(item)
            if not name:
                continue
            key = name.casefold()
            if key in seen:
                continue
            seen.add(key)
            result.append(name)
    return result


class IdentityResolver:
    """
    Resolves candidate names to store keys over one :class:`GraphData`.

    Keeps a case-folded index per kind built from every stored entity's
    ``name`` in insertion order, so the first stored match wins when a
    legacy snapshot holds names that differ only by case.
    """

    def __init__(self, graph: GraphData):
        self.graph = graph
        self._index: Dict[EntityKind, Dict[str, str]] = {}
        for kind in EntityKind:
            index: Dict[str, str] = {}
            for key, entity in graph.entities(kind).items():
                canonical = canonical_key(entity.name)
                if canonical:
                    index.setdefault(canonical, key)
            self._index[kind] = index

    def find_key(self, kind: EntityKind, name: Any) -> Optional[str]:
        """
        Return the store key of the entity of ``kind`` named ``name``.

        :param kind: Entity kind to search.
        :param name: Candidate name; surrounding whitespace is ignored.
        :return: Stored key (its casing may differ from ``name``) or ``None``.
        """
        canonical = canonical_key(name)
        if not canonical:
            return None
        return self._index[EntityKind.parse(kind)].get(canonical)

    def register(self, kind: EntityKind, key: str, entity: AnyEntity) -> None:
        """
        Record an entity just stored under ``key``.

        :param kind: Entity kind.
        :param key: Store key the entity was written under.
        :param entity: The stored entity.
        """
        canonical = canonical_key(entity.name)
        if canonical:
            self._index[EntityKind.parse(kind)].setdefault(canonical, key)
