"""Emission ordering for generated declarations."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence

logger = logging.getLogger(__name__)


def order_declarations(
    names: Sequence[str],
    edges: Mapping[str, Iterable[str]],
    is_simple_alias: Callable[[str], bool],
) -> list[str]:
    """Return an emission order in which dependencies precede dependents.

    The order is a depth-first topological sort over ``names`` with three
    adjustments:

    * simple aliases are skipped during the walk and appended last;
    * a name reached while it is still on the recursion stack is flagged as
      circular, and every flagged name plus anything depending on one is
      deferred to a group emitted after the acyclic part, in the order their
      visits complete;
    * names and dependencies are visited in input order, so unrelated
      declarations keep their original relative order.

    Args:
        names (Sequence[str]): Declaration names in input order.
        edges (Mapping[str, Iterable[str]]): Dependencies keyed by name.
            Edges to names outside ``names`` are ignored.
        is_simple_alias (Callable[[str], bool]): Predicate for alias declarations.

    Returns:
        list[str]: Every input name exactly once.
    """
    position = {name: index for index, name in enumerate(names)}
    visited: set[str] = set()
    visiting: set[str] = set()
    circular: set[str] = set()
    deferred_set: set[str] = set()
    ordered: list[str] = []
    deferred: list[str] = []
    aliases: list[str] = []

    def _dependencies(name: str) -> list[str]:
        known = {dep for dep in edges.get(name, ()) if dep in position and dep != name}
        return sorted(known, key=position.__getitem__)

    def _visit(name: str) -> None:
        if name in visited:
            return
        if name in visiting:
            circular.add(name)
            return
        if is_simple_alias(name):
            visited.add(name)
            aliases.append(name)
            return

        visiting.add(name)
        depends_on_deferred = name in edges.get(name, ())
        for dependency in _dependencies(name):
            _visit(dependency)
            if dependency in circular or dependency in deferred_set:
                depends_on_deferred = True
        visiting.discard(name)
        visited.add(name)

        if name in circular or depends_on_deferred:
            deferred_set.add(name)
            deferred.append(name)
        else:
            ordered.append(name)

    for name in names:
        _visit(name)

    if deferred:
        logger.debug("Deferred %d declarations involved in reference cycles", len(deferred))
    return [*ordered, *deferred, *aliases]
