"""Typed filter-expression trees.

A filter is a flat sequence of nodes read left to right, the way CQN
represents a ``where`` clause:

    [Ref(("entityName",)), Operator.EQ, Val("Order"), Operator.AND, Group([...])]

Parenthesized sub-expressions become ``Group`` nodes. Objects that carry
nested sequences but are neither references nor literals (``xpr``,
function calls, lists) become ``Opaque`` nodes.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Operator(Enum):
    """Operator tokens with a meaning for constraint extraction."""

    EQ = "="
    NE = "!="
    AND = "and"
    OR = "or"
    NOT = "not"


# Mapping from raw operator text to Operator members
OPERATORS: dict[str, Operator] = {op.value: op for op in Operator}


@dataclass(frozen=True)
class Ref:
    """Reference to a field, possibly through a path."""

    path: tuple[str, ...]

    @property
    def name(self) -> str:
        return self.path[0] if self.path else ""


@dataclass(frozen=True)
class Val:
    """Literal value."""

    value: Any


@dataclass(frozen=True)
class Token:
    """Any other keyword or operator (e.g. '<', 'like', 'in')."""

    text: str


@dataclass
class Group:
    """Parenthesized sub-expression."""

    items: list[FilterNode] = field(default_factory=list)


@dataclass
class Opaque:
    """Generic object holding nested sequences under named parts."""

    parts: dict[str, list[FilterNode]] = field(default_factory=dict)


FilterNode = Ref | Val | Operator | Token | Group | Opaque
FilterTree = list[FilterNode]


def _node_from_cqn(raw: Any) -> FilterNode | None:
    if isinstance(raw, str):
        op = OPERATORS.get(raw.lower())
        return op if op is not None else Token(raw)
    if isinstance(raw, dict):
        if "ref" in raw:
            ref = raw["ref"]
            if isinstance(ref, Sequence) and not isinstance(ref, str):
                return Ref(tuple(str(p) for p in ref))
            return Ref((str(ref),))
        if "val" in raw:
            return Val(raw["val"])
        parts: dict[str, list[FilterNode]] = {}
        for key, value in raw.items():
            nested = filter_tree_from_cqn(value)
            if nested is not None:
                parts[key] = nested
        return Opaque(parts)
    if isinstance(raw, (list, tuple)):
        return Group(filter_tree_from_cqn(raw) or [])
    if raw is None:
        return None
    return Token(str(raw))


def filter_tree_from_cqn(raw: Any) -> FilterTree | None:
    """Convert a raw CQN ``where`` array into typed filter nodes.

    Returns None when ``raw`` is not a sequence. Never raises.
    """
    if not isinstance(raw, (list, tuple)):
        return None
    tree: FilterTree = []
    for item in raw:
        node = _node_from_cqn(item)
        if node is not None:
            tree.append(node)
    return tree


def filter_tree_to_cqn(tree: Sequence[FilterNode]) -> list[Any]:
    """Convert typed filter nodes back into CQN."""
    result: list[Any] = []
    for node in tree:
        if isinstance(node, Ref):
            result.append({"ref": list(node.path)})
        elif isinstance(node, Val):
            result.append({"val": node.value})
        elif isinstance(node, Operator):
            result.append(node.value)
        elif isinstance(node, Token):
            result.append(node.text)
        elif isinstance(node, Group):
            result.append(filter_tree_to_cqn(node.items))
        elif isinstance(node, Opaque):
            result.append({key: filter_tree_to_cqn(items) for key, items in node.parts.items()})
    return result
