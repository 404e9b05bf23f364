"""
Data structures for the medication knowledge graph.

The graph holds exactly three entity kinds, each keyed by a name string:

• **Medication**: a scanned product, linked to its active ingredients,
  the effects it may cause and the symptoms it treats.

• **Ingredient**: an active substance, linked back to the medications
  containing it.

• **Effect**: a side effect or a treated symptom, linked back to the
  medications causing or treating it.

All relationship fields are plain lists of names kept in first-seen order
and deduplicated case-insensitively. ``to_dict``/``from_dict`` convert
between these objects and the camelCase JSON shape used by the snapshot
file and by the vision model.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Mapping, Optional, Union

from medgraph.common.exceptions import InvalidInputError


class EntityKind(str, Enum):
    MEDICATIONS = "medications"
    INGREDIENTS = "ingredients"
    EFFECTS = "effects"

    @property
    def singular(self) -> str:
        return self.value[:-1]

    @property
    def label(self) -> str:
        return self.singular.capitalize()

    @classmethod
    def parse(cls, value: Union[str, "EntityKind"]) -> "EntityKind":
        """
        Accept an :class:`EntityKind` or its plural/singular name, case-insensitively.

        :param value: Kind or kind name, e.g. ``"effects"`` or ``"Effect"``.
        :return: Matching kind.
        :raises InvalidInputError: If the name is not one of the three kinds.
        """
        if isinstance(value, EntityKind):
            return value
        text = str(value or "").strip().lower()
        for kind in cls:
            if text in (kind.value, kind.singular):
                return kind
        raise InvalidInputError(f"Unknown entity kind: {value!r}")


def _names(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


def _name(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _description(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


@dataclass(slots=True)
class Medication:
    """
    A medication product.

    :param name: Display name, first-seen trimmed casing.
    :param ingredients: Names of active ingredients.
    :param side_effects: Names of effects the medication may cause.
    :param symptoms_treated: Names of effects the medication treats.
    """
    name: str
    ingredients: List[str] = field(default_factory=list)
    side_effects: List[str] = field(default_factory=list)
    symptoms_treated: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "ingredients": list(self.ingredients),
            "sideEffects": list(self.side_effects),
            "symptomsTreated": list(self.symptoms_treated),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Medication":
        return cls(
            name=_name(data.get("name")),
            ingredients=_names(data.get("ingredients")),
            side_effects=_names(data.get("sideEffects")),
            symptoms_treated=_names(data.get("symptomsTreated")),
        )


@dataclass(slots=True)
class Ingredient:
    """
    An active ingredient.

    :param name: Display name.
    :param medications: Names of medications containing this ingredient.
    :param description: Optional free text, last write wins.
    """
    name: str
    medications: List[str] = field(default_factory=list)
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "name": self.name,
            "medications": list(self.medications),
        }
        if self.description is not None:
            data["description"] = self.description
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Ingredient":
        return cls(
            name=_name(data.get("name")),
            medications=_names(data.get("medications")),
            description=_description(data.get("description")),
        )


@dataclass(slots=True)
class Effect:
    """
    A side effect or a treated symptom.

    :param name: Display name.
    :param medications_causing_it: Names of medications listing it as a side effect.
    :param medications_treating_it: Names of medications treating it.
    :param description: Optional free text, last write wins.
    """
    name: str
    medications_causing_it: List[str] = field(default_factory=list)
    medications_treating_it: List[str] = field(default_factory=list)
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "name": self.name,
            "medicationsCausingIt": list(self.medications_causing_it),
            "medicationsTreatingIt": list(self.medications_treating_it),
        }
        if self.description is not None:
            data["description"] = self.description
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Effect":
        return cls(
            name=_name(data.get("name")),
            medications_causing_it=_names(data.get("medicationsCausingIt")),
            medications_treating_it=_names(data.get("medicationsTreatingIt")),
            description=_description(data.get("description")),
        )


AnyEntity = Union[Medication, Ingredient, Effect]

ENTITY_CLASSES = {
    EntityKind.MEDICATIONS: Medication,
    EntityKind.INGREDIENTS: Ingredient,
    EntityKind.EFFECTS: Effect,
}


@dataclass
class GraphData:
    """
    The whole graph: one ``store key -> entity`` mapping per kind.

    Store keys are the first-seen trimmed names; identity is decided by the
    entity ``name`` field, compared case-insensitively.
    """
    medications: Dict[str, Medication] = field(default_factory=dict)
    ingredients: Dict[str, Ingredient] = field(default_factory=dict)
    effects: Dict[str, Effect] = field(default_factory=dict)

    @classmethod
    def empty(cls) -> "GraphData":
        return cls()

    def entities(self, kind: EntityKind) -> Dict[str, AnyEntity]:
        return getattr(self, EntityKind.parse(kind).value)

    def iter_entities(self) -> Iterator[tuple[EntityKind, str, AnyEntity]]:
        for kind in EntityKind:
            for key, entity in self.entities(kind).items():
                yield kind, key, entity

    def copy(self) -> "GraphData":
        return copy.deepcopy(self)

    def counts(self) -> Dict[str, int]:
        return {
            "medicationCount": len(self.medications),
            "ingredientCount": len(self.ingredients),
            "effectCount": len(self.effects),
        }

    def to_dict(self) -> Dict[str, Dict[str, Dict[str, Any]]]:
        """
        Build the snapshot document: exactly three top-level keys, each a
        mapping from store key to the entity's JSON shape.
        """
        return {
            kind.value: {key: entity.to_dict() for key, entity in self.entities(kind).items()}
            for kind in EntityKind
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GraphData":
        """
        Rebuild a graph from a snapshot-shaped mapping.

        Non-mapping sections and records are dropped, a missing or non-string ``name``
        falls back to the record key, and missing arrays default to empty.
        """
        graph = cls.empty()
        for kind in EntityKind:
            section = data.get(kind.value)
            if not isinstance(section, Mapping):
                continue
            entity_cls = ENTITY_CLASSES[kind]
            target = graph.entities(kind)
            for key, record in section.items():
                if not isinstance(record, Mapping):
                    continue
                entity = entity_cls.from_dict(record)
                if not entity.name:
                    entity.name = str(key)
                target[str(key)] = entity
        return graph
