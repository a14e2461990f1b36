"""Name resolution: which names each module defines or glob-imports."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Optional

from .model import Crate, Enum, Import, Item, Module, Struct, StructKind, Visibility


class Namespace(enum.Enum):
    VALUES = "values"
    TYPES = "types"


@dataclass(frozen=True)
class NamespacedName:
    """An item name together with the namespace it lives in."""

    namespace: Namespace
    name: str

    def rename(self, new_name: str) -> NamespacedName:
        return NamespacedName(self.namespace, new_name)


@dataclass(frozen=True)
class Definition:
    """Where a name points.

    ``current_id`` is the import item when the name comes from an import,
    otherwise the item itself; ``final_underlying_id`` never names an import.
    """

    current_id: str
    final_underlying_id: str

    @classmethod
    def direct(cls, item_id: str) -> Definition:
        return cls(item_id, item_id)


@dataclass
class NameResolution:
    """Names defined in modules, and the outcome of their glob imports."""

    names_defined_in_module: dict[str, dict[NamespacedName, tuple[Definition, bool]]] = field(
        default_factory=dict
    )
    modules_with_glob_imports: dict[str, set[str]] = field(default_factory=dict)
    glob_imported_names_in_module: dict[str, dict[NamespacedName, Definition]] = field(
        default_factory=dict
    )
    duplicated_glob_names_in_module: dict[str, set[NamespacedName]] = field(default_factory=dict)


_TYPE_KINDS = frozenset({"module", "union", "enum", "trait", "typedef"})
_VALUE_KINDS = frozenset({"variant", "function", "constant", "static"})
_PUBLIC_LIKE = frozenset({Visibility.PUBLIC, Visibility.DEFAULT})


def _required_name(item: Item) -> str:
    if item.name is None:
        raise ValueError(f"item {item.id!r} did not have a name")
    return item.name


def names_for_item(crate: Crate, item: Item) -> tuple[NamespacedName, ...]:
    """Return the names, per namespace, that the item defines."""
    if item.kind in _TYPE_KINDS:
        return (NamespacedName(Namespace.TYPES, _required_name(item)),)
    if item.kind in _VALUE_KINDS:
        return (NamespacedName(Namespace.VALUES, _required_name(item)),)
    if item.kind != "struct":
        return ()

    name = _required_name(item)
    as_type = NamespacedName(Namespace.TYPES, name)
    as_value = NamespacedName(Namespace.VALUES, name)
    struct = item.inner
    if not isinstance(struct, Struct) or struct.kind is StructKind.PLAIN:
        return (as_type,)
    if struct.kind is StructKind.UNIT:
        return (as_type, as_value)

    # A tuple struct's constructor is a value only if every field is public.
    nonpublic_field = any(
        crate.index[field_id].visibility is not Visibility.PUBLIC
        for field_id in struct.fields
        if field_id is not None and field_id in crate.index
    )
    return (as_type,) if nonpublic_field else (as_type, as_value)


def _final_underlying_id(crate: Crate, target: Item) -> Optional[str]:
    seen: set[str] = set()
    current = target
    while isinstance(current.inner, Import):
        if current.id in seen:
            return None
        seen.add(current.id)
        next_id = current.inner.id
        following = crate.index.get(next_id) if next_id is not None else None
        if following is None:
            return None
        current = following
    return current.id


def resolve_crate_names(crate: Crate) -> NameResolution:
    """Record every module's own names and resolve its glob imports."""
    result = NameResolution()

    for item in crate.index.values():
        if not isinstance(item.inner, Module):
            continue
        for inner_id in item.inner.items:
            inner_item = crate.index.get(inner_id)
            if inner_item is None:
                continue

            if isinstance(inner_item.inner, Import):
                imp = inner_item.inner
                if imp.glob:
                    result.modules_with_glob_imports.setdefault(item.id, set()).add(inner_id)
                    continue
                target = crate.index.get(imp.id) if imp.id is not None else None
                if target is None:
                    continue
                is_public = target.visibility in _PUBLIC_LIKE
                for name in names_for_item(crate, target):
                    final_id = _final_underlying_id(crate, target)
                    if final_id is None:
                        continue
                    result.names_defined_in_module.setdefault(item.id, {})[
                        name.rename(imp.name)
                    ] = (Definition(inner_id, final_id), is_public)
            else:
                is_public = inner_item.visibility in _PUBLIC_LIKE
                for name in names_for_item(crate, inner_item):
                    result.names_defined_in_module.setdefault(item.id, {})[name] = (
                        Definition.direct(inner_item.id),
                        is_public,
                    )

    _resolve_glob_imported_names(crate, result)
    return result


def _resolve_glob_imported_names(crate: Crate, state: NameResolution) -> None:
    for module_id, globs in state.modules_with_glob_imports.items():
        visited = {module_id}
        names: dict[NamespacedName, Definition] = {}
        duplicated: set[NamespacedName] = set()

        for glob_id in sorted(globs):
            _collect_glob_names(crate, module_id, glob_id, state, visited, names, duplicated)

        # Chains of globs may still bring in names that local definitions shadow.
        for local_name in state.names_defined_in_module.get(module_id, {}):
            names.pop(local_name, None)
            duplicated.discard(local_name)

        if names:
            state.glob_imported_names_in_module[module_id] = names
        if duplicated:
            state.duplicated_glob_names_in_module[module_id] = duplicated


def _collect_glob_names(
    crate: Crate,
    parent_module_id: str,
    glob_id: str,
    state: NameResolution,
    visited: set[str],
    names: dict[NamespacedName, Definition],
    duplicated: set[NamespacedName],
) -> None:
    glob_item = crate.index.get(glob_id)
    if glob_item is None or not isinstance(glob_item.inner, Import):
        raise ValueError(f"id {glob_id!r} is not an import")
    glob_import = glob_item.inner
    if not glob_import.glob:
        raise ValueError(f"not a glob import: {glob_import!r}")
    target_id = glob_import.id
    if target_id is None:
        raise ValueError(f"glob import {glob_id!r} has no target")

    local_names = state.names_defined_in_module.get(parent_module_id)

    target = crate.index.get(target_id)
    if target is not None and isinstance(target.inner, Enum):
        for variant_id in target.inner.variants:
            variant = crate.index.get(variant_id)
            if variant is None:
                continue
            if variant.name is None:
                raise ValueError(f"variant {variant_id!r} has no name")
            _register_name(
                local_names,
                NamespacedName(Namespace.VALUES, variant.name),
                Definition.direct(variant_id),
                names,
                duplicated,
            )
        return

    if target_id in visited:
        return
    visited.add(target_id)

    for local_name, (definition, is_public) in state.names_defined_in_module.get(target_id, {}).items():
        if is_public:
            _register_name(local_names, local_name, definition, names, duplicated)

    for nested_glob_id in sorted(state.modules_with_glob_imports.get(target_id, ())):
        _collect_glob_names(crate, target_id, nested_glob_id, state, visited, names, duplicated)


def _register_name(
    local_names: Optional[dict[NamespacedName, tuple[Definition, bool]]],
    name: NamespacedName,
    definition: Definition,
    names: dict[NamespacedName, Definition],
    duplicated: set[NamespacedName],
) -> None:
    if local_names is not None and name in local_names:
        return
    existing = names.get(name)
    if existing is not None:
        if existing.final_underlying_id != definition.final_underlying_id:
            del names[name]
            duplicated.add(name)
    elif name not in duplicated:
        names[name] = definition