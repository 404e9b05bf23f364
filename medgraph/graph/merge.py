"""
Reconciliation of incoming graph fragments into the stored graph.

A *fragment* is the loosely structured JSON a vision model produces for one
scanned label::

    {
      "medications": {"<any key>": {"name": ..., "ingredients": [...],
                                    "sideEffects": [...], "symptomsTreated": [...]}},
      "ingredients": {"<any key>": {"name": ..., "medications": [...], "description": ...}},
      "effects":     {"<any key>": {"name": ..., "medicationsCausingIt": [...],
                                    "medicationsTreatingIt": [...], "description": ...}}
    }

Mapping keys are ignored; identity comes from each record's ``name``,
compared case-insensitively. Relationship arrays are merged as
case-insensitive unions. Medications propagate their links onto ingredient
and effect records; ingredient and effect records never push links back
onto medications.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Mapping, Optional

from medgraph.common.exceptions import InvalidInputError
from medgraph.common.logger import logger
from medgraph.graph.identity import (
    IdentityResolver,
    contains_name,
    normalize_name,
    union_names,
)
from medgraph.graph.types import (
    Effect,
    EntityKind,
    GraphData,
    Ingredient,
    Medication,
)
from medgraph.storage.graph_store import GraphStore


@dataclass
class MergeSummary:
    """
    Per-kind counts of entities created and updated by one merge call.
    """
    created: Dict[str, int] = field(default_factory=lambda: {kind.value: 0 for kind in EntityKind})
    updated: Dict[str, int] = field(default_factory=lambda: {kind.value: 0 for kind in EntityKind})
    skipped: int = 0

    def record(self, kind: EntityKind, is_new: bool) -> None:
        bucket = self.created if is_new else self.updated
        bucket[kind.value] += 1


def _incoming_description(record: Mapping[str, Any], fallback: Optional[str]) -> Optional[str]:
    # a present key always overwrites; non-string values count as null
    if "description" not in record:
        return fallback
    value = record["description"]
    return value if isinstance(value, str) else None


def _records(fragment: Mapping[str, Any], kind: EntityKind) -> Iterable[Any]:
    section = fragment.get(kind.value)
    if not isinstance(section, Mapping):
        return []
    return section.values()


class MergeEngine:
    """
    Folds fragments into the graph owned by a :class:`GraphStore`.

    Each :meth:`merge` call works on a private copy of the published graph
    under the store's write lock, publishes the result in one step and then
    persists it. Persistence is best-effort: a failed write is logged and the
    merged graph is still returned.
    """

    def __init__(self, store: GraphStore):
        """
        :param store: Store holding the graph to merge into.
        """
        self.store = store
        self.last_summary: MergeSummary | None = None

    async def merge(self, fragment: Any) -> GraphData:
        """
        Merge a partial graph into the store.

        :param fragment: Mapping with optional ``medications``, ``ingredients``
            and ``effects`` sections.
        :return: The updated, published graph.
        :raises InvalidInputError: If ``fragment`` is not a mapping.
        """
        if not isinstance(fragment, Mapping):
            raise InvalidInputError(
                f"Fragment must be an object with medications, ingredients and/or effects, "
                f"got {type(fragment).__name__}"
            )

        async with self.store.write_lock:
            working = self.store.graph.copy()
            summary = self.apply(working, fragment)
            self.store.publish(working)
            await self.store.persist()

        self.last_summary = summary
        if summary.skipped:
            logger.warning(f"[MergeEngine] Skipped {summary.skipped} record(s) without a usable name")
        logger.info(
            f"[MergeEngine] Merged fragment: created={summary.created}, updated={summary.updated}, "
            f"skipped={summary.skipped}; graph now {working.counts()}"
        )
        return working

    def apply(self, graph: GraphData, fragment: Mapping[str, Any]) -> MergeSummary:
        """
        Merge ``fragment`` into ``graph`` in place.

        Medications are processed first, then ingredients, then effects.

        :param graph: Graph to mutate.
        :param fragment: Incoming partial graph.
        :return: Counts of created, updated and skipped records.
        """
        resolver = IdentityResolver(graph)
        summary = MergeSummary()

        for record in _records(fragment, EntityKind.MEDICATIONS):
            self._merge_medication(graph, resolver, record, summary)
        for record in _records(fragment, EntityKind.INGREDIENTS):
            self._merge_ingredient(graph, resolver, record, summary)
        for record in _records(fragment, EntityKind.EFFECTS):
            self._merge_effect(graph, resolver, record, summary)

        return summary

    @staticmethod
    def _incoming_name(record: Any, summary: MergeSummary) -> str:
        if not isinstance(record, Mapping):
            summary.skipped += 1
            return ""
        name = normalize_name(record.get("name"))
        if not name:
            summary.skipped += 1
        return name

    def _merge_medication(
        self,
        graph: GraphData,
        resolver: IdentityResolver,
        record: Any,
        summary: MergeSummary,
    ) -> None:
        name = self._incoming_name(record, summary)
        if not name:
            return

        existing_key = resolver.find_key(EntityKind.MEDICATIONS, name)
        existing = graph.medications.get(existing_key) if existing_key is not None else None

        if existing is not None:
            merged = Medication(
                name=name,
                ingredients=union_names(existing.ingredients, record.get("ingredients")),
                side_effects=union_names(existing.side_effects, record.get("sideEffects")),
                symptoms_treated=union_names(existing.symptoms_treated, record.get("symptomsTreated")),
            )
        else:
            merged = Medication(
                name=name,
                ingredients=union_names([], record.get("ingredients")),
                side_effects=union_names([], record.get("sideEffects")),
                symptoms_treated=union_names([], record.get("symptomsTreated")),
            )

        key = existing_key if existing_key is not None else name
        graph.medications[key] = merged
        resolver.register(EntityKind.MEDICATIONS, key, merged)
        summary.record(EntityKind.MEDICATIONS, is_new=existing is None)
        logger.debug(f"[MergeEngine] {'Updated' if existing else 'Created'} medication '{key}'")

        for ingredient_name in merged.ingredients:
            ingredient = self._ensure_ingredient(graph, resolver, ingredient_name, summary)
            if not contains_name(ingredient.medications, merged.name):
                ingredient.medications.append(merged.name)

        for effect_name in merged.side_effects:
            effect = self._ensure_effect(graph, resolver, effect_name, summary)
            if not contains_name(effect.medications_causing_it, merged.name):
                effect.medications_causing_it.append(merged.name)

        for effect_name in merged.symptoms_treated:
            effect = self._ensure_effect(graph, resolver, effect_name, summary)
            if not contains_name(effect.medications_treating_it, merged.name):
                effect.medications_treating_it.append(merged.name)

    @staticmethod
    def _ensure_ingredient(
        graph: GraphData,
        resolver: IdentityResolver,
        name: str,
        summary: MergeSummary,
    ) -> Ingredient:
        key = resolver.find_key(EntityKind.INGREDIENTS, name)
        if key is not None:
            return graph.ingredients[key]
        ingredient = Ingredient(name=name)
        graph.ingredients[name] = ingredient
        resolver.register(EntityKind.INGREDIENTS, name, ingredient)
        summary.record(EntityKind.INGREDIENTS, is_new=True)
        return ingredient

    @staticmethod
    def _ensure_effect(
        graph: GraphData,
        resolver: IdentityResolver,
        name: str,
        summary: MergeSummary,
    ) -> Effect:
        key = resolver.find_key(EntityKind.EFFECTS, name)
        if key is not None:
            return graph.effects[key]
        effect = Effect(name=name)
        graph.effects[name] = effect
        resolver.register(EntityKind.EFFECTS, name, effect)
        summary.record(EntityKind.EFFECTS, is_new=True)
        return effect

    def _merge_ingredient(
        self,
        graph: GraphData,
        resolver: IdentityResolver,
        record: Any,
        summary: MergeSummary,
    ) -> None:
        name = self._incoming_name(record, summary)
        if not name:
            return

        existing_key = resolver.find_key(EntityKind.INGREDIENTS, name)
        existing = graph.ingredients.get(existing_key) if existing_key is not None else None

        if existing is not None:
            merged = Ingredient(
                name=name,
                medications=union_names(existing.medications, record.get("medications")),
                description=_incoming_description(record, existing.description),
            )
        else:
            merged = Ingredient(
                name=name,
                medications=union_names([], record.get("medications")),
                description=_incoming_description(record, None),
            )

        key = existing_key if existing_key is not None else name
        graph.ingredients[key] = merged
        resolver.register(EntityKind.INGREDIENTS, key, merged)
        summary.record(EntityKind.INGREDIENTS, is_new=existing is None)

    def _merge_effect(
        self,
        graph: GraphData,
        resolver: IdentityResolver,
        record: Any,
        summary: MergeSummary,
    ) -> None:
        name = self._incoming_name(record, summary)
        if not name:
            return

        existing_key = resolver.find_key(EntityKind.EFFECTS, name)
        existing = graph.effects.get(existing_key) if existing_key is not None else None

        if existing is not None:
            merged = Effect(
                name=name,
                medications_causing_it=union_names(
                    existing.medications_causing_it, record.get("medicationsCausingIt")
                ),
                medications_treating_it=union_names(
                    existing.medications_treating_it, record.get("medicationsTreatingIt")
                ),
                description=_incoming_description(record, existing.description),
            )
        else:
            merged = Effect(
                name=name,
                medications_causing_it=union_names([], record.get("medicationsCausingIt")),
                medications_treating_it=union_names([], record.get("medicationsTreatingIt")),
                description=_incoming_description(record, None),
            )

        key = existing_key if existing_key is not None else name
        graph.effects[key] = merged
        resolver.register(EntityKind.EFFECTS, key, merged)
        summary.record(EntityKind.EFFECTS, is_new=existing is None)
