"""Which items are publicly reachable, and under which importable paths."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Optional

from .model import (
    Crate,
    Enum,
    Impl,
    Import,
    Item,
    Module,
    Struct,
    StructKind,
    Trait,
    Typedef,
    Union,
    Visibility,
)
from .names import NameResolution, resolve_crate_names
from .typedefs import typedef_reexport_target

_NOT_MODULES = frozenset({"impl", "struct", "union"})


class VisibilityTracker:
    """Tracks the visible parents of every publicly reachable item."""

    def __init__(self, crate: Crate, visible_parent_ids: Mapping[str, tuple[str, ...]]):
        self._crate = crate
        self._visible_parent_ids = dict(visible_parent_ids)

    @classmethod
    def from_crate(cls, crate: Crate) -> VisibilityTracker:
        parents = compute_parent_ids_for_public_items(crate)
        # A fixed order, since callers observe the order of the results.
        return cls(crate, {key: tuple(sorted(values)) for key, values in parents.items()})

    @property
    def crate(self) -> Crate:
        return self._crate

    @property
    def visible_parent_ids(self) -> Mapping[str, tuple[str, ...]]:
        return MappingProxyType(self._visible_parent_ids)

    def publicly_importable_names(self, item_id: str) -> list[list[str]]:
        """Return every cycle-free path by which the item can be imported."""
        output: list[list[str]] = []
        if item_id in self._crate.index:
            self._collect(item_id, set(), [], output)
        return output

    def _collect(
        self, item_id: str, visiting: set[str], stack: list[str], output: list[list[str]]
    ) -> None:
        if item_id in visiting:
            return
        visiting.add(item_id)
        try:
            item = self._crate.index[item_id]
            if stack and item.kind in _NOT_MODULES:
                # The item itself is importable, but nothing it contains is.
                return

            popped: Optional[str] = None
            if isinstance(item.inner, Import):
                if item.inner.glob:
                    pushed: Optional[str] = None
                else:
                    if not stack:
                        raise ValueError(f"import {item_id!r} has no name to replace")
                    popped = stack.pop()
                    pushed = item.inner.name
            elif isinstance(item.inner, Typedef):
                if item.name is None:
                    raise ValueError(f"type alias {item_id!r} has no name")
                popped = stack.pop() if stack else None
                pushed = item.name
            else:
                pushed = item.name

            if pushed is not None:
                stack.append(pushed)
            self._collect_from_parents(item_id, visiting, stack, output)
            if pushed is not None:
                stack.pop()
            if popped is not None:
                stack.append(popped)
        finally:
            visiting.discard(item_id)

    def _collect_from_parents(
        self, item_id: str, visiting: set[str], stack: list[str], output: list[list[str]]
    ) -> None:
        if item_id == self._crate.root:
            output.append(list(reversed(stack)))
            return
        for parent_id in self._visible_parent_ids.get(item_id, ()):
            self._collect(parent_id, visiting, stack, output)


def compute_parent_ids_for_public_items(crate: Crate) -> dict[str, set[str]]:
    """Map each item reachable from a public root to the ids it is visible under."""
    parents: dict[str, set[str]] = {}
    root = crate.index.get(crate.root)
    if root is not None and root.visibility is Visibility.PUBLIC:
        state = resolve_crate_names(crate)
        _visit(crate, parents, state, set(), root, None)
    return parents


def _children(crate: Crate, item: Item) -> list[str]:
    inner = item.inner
    if isinstance(inner, Struct):
        fields = [] if inner.kind is StructKind.UNIT else [f for f in inner.fields if f is not None]
        return fields + list(inner.impls)
    if isinstance(inner, Enum):
        return list(inner.variants) + list(inner.impls)
    if isinstance(inner, Union):
        return list(inner.fields) + list(inner.impls)
    if isinstance(inner, (Trait, Impl)):
        return list(inner.items)
    return []


def _visit(
    crate: Crate,
    parents: dict[str, set[str]],
    state: NameResolution,
    visiting: set[str],
    item: Item,
    parent_id: Optional[str],
) -> None:
    if item.visibility in (Visibility.CRATE, Visibility.RESTRICTED):
        return

    item_parents = parents.setdefault(item.id, set())
    if parent_id is not None:
        item_parents.add(parent_id)

    if item.id in visiting:
        # A cycle in the import graph; this item is already being processed.
        return
    visiting.add(item.id)
    try:
        inner = item.inner
        next_items: list[Item] = []
        if isinstance(inner, Module):
            next_items.extend(crate.index[i] for i in inner.items if i in crate.index)
            # Glob-imported names have this module as their parent, not the glob.
            for definition in state.glob_imported_names_in_module.get(item.id, {}).values():
                target = crate.index.get(definition.current_id)
                if target is not None:
                    next_items.append(target)
        elif isinstance(inner, Import):
            if not inner.glob and inner.id is not None and inner.id in crate.index:
                next_items.append(crate.index[inner.id])
        elif isinstance(inner, Typedef):
            target = typedef_reexport_target(crate, inner)
            if target is not None:
                next_items.append(target)
        else:
            next_items.extend(
                crate.index[i] for i in _children(crate, item) if i in crate.index
            )

        for child in next_items:
            _visit(crate, parents, state, visiting, child, item.id)
    finally:
        visiting.discard(item.id)