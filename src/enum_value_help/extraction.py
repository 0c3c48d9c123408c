"""Extraction of equality constants from filter-expression trees."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from enum_value_help.filters import Group, Opaque, Operator, Ref, Val

# Marks "no binding found"; a null literal is a binding and stops the scan
_ABSENT = object()


def constant_in_filter(where: Any, name: str) -> Any:
    """Find the literal bound to a field by ``name = literal`` in a filter.

    The tree is scanned depth first, left to right. At every position the
    node and its two successors are tested for the triple
    ``Ref(name) = Val(x)``; the first hit wins. Groups are searched before
    the outer scan continues, and Opaque nodes are searched part by part.

    'and' and 'or' are skipped alike, so a constant found inside one branch
    of a disjunction is returned as if it held for the whole filter. Later,
    contradicting equalities on the same field are not looked at either.
    A null literal is a match too: it ends the scan and yields None.

    Args:
        where: Filter tree. Anything that is not a sequence yields None.
        name: Field name to look for (first segment of the reference path).

    Returns:
        The bound literal, or None when there is none.
    """
    if not isinstance(where, Sequence) or isinstance(where, str):
        return None
    result = _find_constant(where, name)
    return None if result is _ABSENT else result


def _find_constant(clause: Sequence[Any], name: str) -> Any:
    for i, current in enumerate(clause):
        if i + 2 < len(clause):
            op, literal = clause[i + 1], clause[i + 2]
            if (
                isinstance(current, Ref)
                and current.name == name
                and op is Operator.EQ
                and isinstance(literal, Val)
            ):
                return literal.value

        if isinstance(current, Group):
            result = _find_constant(current.items, name)
            if result is not _ABSENT:
                return result
        elif isinstance(current, Opaque):
            for items in current.parts.values():
                result = _find_constant(items, name)
                if result is not _ABSENT:
                    return result
        elif isinstance(current, (list, tuple)):
            # untyped nested sequences are treated as groups
            result = _find_constant(current, name)
            if result is not _ABSENT:
                return result

    return _ABSENT
