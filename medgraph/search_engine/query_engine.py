from __future__ import annotations

from typing import List, Optional

from rapidfuzz import fuzz, utils

from medgraph.common.exceptions import InvalidInputError
from medgraph.common.global_parameters import Settings
from medgraph.common.logger import logger
from medgraph.graph.identity import canonical_key
from medgraph.graph.types import AnyEntity, Effect, EntityKind, Ingredient, Medication
from medgraph.search_engine.types import EffectMatch, NotFound
from medgraph.storage.graph_store import GraphStore


class QueryEngine:
    """
    Read-only lookups over the published graph of a :class:`GraphStore`.

    Every call reads one published snapshot, so results never mix states
    from before and after a concurrent merge.
    """

    def __init__(
        self,
        store: GraphStore,
        score_cutoff: Optional[float] = None,
        limit: Optional[int] = None,
    ):
        """
        :param store: Store to read from.
        :param score_cutoff: Minimal fuzzy score (0..100) for search hits.
            Defaults to ``Settings.search_score_cutoff``.
        :param limit: Maximal number of search hits. Defaults to ``Settings.search_limit``.
        """
        self.store = store
        self.score_cutoff = Settings.search_score_cutoff if score_cutoff is None else score_cutoff
        self.limit = Settings.search_limit if limit is None else limit

    async def get_by_name(self, kind: EntityKind | str, name: str) -> AnyEntity | NotFound:
        """
        Find an entity by name.

        The store key is tried first as an exact match, then entity names
        are scanned case-insensitively.

        :param kind: Entity kind (``"medications"``, ``"ingredient"``, ...).
        :param name: Requested name.
        :return: The entity, or :class:`NotFound` carrying kind and name.
        :raises InvalidInputError: If ``kind`` is unknown.
        """
        kind = EntityKind.parse(kind)
        entities = self.store.graph.entities(kind)

        if name in entities:
            return entities[name]

        wanted = canonical_key(name)
        if wanted:
            for entity in entities.values():
                if canonical_key(entity.name) == wanted:
                    return entity

        return NotFound(kind=kind, name=name)

    async def get_medication(self, name: str) -> Medication | NotFound:
        return await self.get_by_name(EntityKind.MEDICATIONS, name)

    async def get_ingredient(self, name: str) -> Ingredient | NotFound:
        return await self.get_by_name(EntityKind.INGREDIENTS, name)

    async def get_effect(self, name: str) -> Effect | NotFound:
        return await self.get_by_name(EntityKind.EFFECTS, name)

    async def search_effects(self, query: str) -> List[EffectMatch]:
        """
        Fuzzy search over effect names and descriptions.

        Each effect is scored with ``rapidfuzz`` partial matching against its
        name and its description (case and punctuation ignored); the better
        score counts. Hits below ``score_cutoff`` are dropped and the rest
        are ordered by score, ties keeping store order.

        :param query: Search text; partial words and small typos are tolerated.
        :return: Ranked matches, possibly empty.
        :raises InvalidInputError: If the query is empty.
        """
        query = query.strip() if isinstance(query, str) else ""
        if not query:
            raise InvalidInputError("Search query is required.")

        matches: List[EffectMatch] = []
        for effect in self.store.graph.effects.values():
            best: EffectMatch | None = None
            for field_name, text in (("name", effect.name), ("description", effect.description)):
                if not text:
                    continue
                score = fuzz.partial_ratio(query, text, processor=utils.default_process)
                if score >= self.score_cutoff and (best is None or score > best.score):
                    best = EffectMatch(effect=effect, score=score, matched_field=field_name)
            if best is not None:
                matches.append(best)

        matches.sort(key=lambda m: m.score, reverse=True)
        if self.limit is not None:
            matches = matches[: self.limit]

        logger.debug(f"[QueryEngine] search_effects({query!r}) -> {len(matches)} hits")
        return matches

    async def search_effect_entities(self, query: str) -> List[Effect]:
        """
        Same as :meth:`search_effects`, returning only the effects.
        """
        return [match.effect for match in await self.search_effects(query)]
