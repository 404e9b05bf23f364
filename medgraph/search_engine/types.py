from dataclasses import dataclass
from typing import Any, Dict, Literal

from medgraph.graph.types import Effect, EntityKind


@dataclass(frozen=True, slots=True)
class NotFound:
    """
    Lookup outcome for a name with no matching entity.

    :param kind: Kind that was searched.
    :param name: Name as requested by the caller.
    """
    kind: EntityKind
    name: str

    def __bool__(self) -> bool:
        return False

    def to_dict(self) -> Dict[str, Any]:
        return {"error": f"{self.kind.label} not found", "name": self.name}


@dataclass(slots=True)
class EffectMatch:
    """
    One fuzzy search hit.

    :param effect: Matching effect.
    :param score: Similarity score in ``[0, 100]``.
    :param matched_field: Field that produced the best score.
    """
    effect: Effect
    score: float
    matched_field: Literal["name", "description"]
