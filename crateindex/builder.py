"""Programmatic construction of crates, without rustdoc JSON."""

from __future__ import annotations

import itertools
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Optional, Union as TypingUnion

from .model import (
    Constant,
    Crate,
    Enum,
    Function,
    GenericArg,
    GenericParam,
    Generics,
    Impl,
    Import,
    Item,
    ItemSummary,
    Module,
    ResolvedPath,
    Struct,
    StructKind,
    Typedef,
    Union,
    Variant,
    Visibility,
)

# Crate id under which traits from other crates are recorded in ``Crate.paths``.
_EXTERNAL_CRATE_ID = 1

GenericsLike = TypingUnion[Generics, Iterable[GenericParam]]


@dataclass
class _Draft:
    """Mutable record of an item that is still being assembled."""

    id: str
    kind: str
    name: Optional[str]
    visibility: Visibility
    children: list[str] = field(default_factory=list)
    impls: list[str] = field(default_factory=list)
    struct_kind: StructKind = StructKind.PLAIN
    generics: Generics = field(default_factory=Generics)
    import_name: str = ""
    import_target: Optional[str] = None
    glob: bool = False
    trait: Optional[ResolvedPath] = None
    typedef_target: Optional[ResolvedPath] = None


def _as_generics(generics: GenericsLike) -> Generics:
    if isinstance(generics, Generics):
        return generics
    return Generics(tuple(generics))


class CrateBuilder:
    """Assembles a Crate item by item.

    Every adding method returns the id of the new item. A ``parent`` of None
    stands for the crate root module. Enum variants get the ids
    ``f"{enum_id}::{variant_name}"``.
    """

    def __init__(self, name: str):
        self._drafts: dict[str, _Draft] = {}
        self._counter = itertools.count()
        self._paths: dict[str, ItemSummary] = {}
        self.root = self._new("module", name, Visibility.PUBLIC).id

    def _new(
        self,
        kind: str,
        name: Optional[str],
        visibility: Visibility,
        item_id: Optional[str] = None,
        **details: Any,
    ) -> _Draft:
        if item_id is None:
            item_id = f"0:{next(self._counter)}"
        if item_id in self._drafts:
            raise ValueError(f"duplicate item id {item_id!r}")
        draft = _Draft(item_id, kind, name, visibility, **details)
        self._drafts[item_id] = draft
        return draft

    def _get(self, item_id: str) -> _Draft:
        try:
            return self._drafts[item_id]
        except KeyError:
            raise ValueError(f"unknown item id {item_id!r}") from None

    def _container(self, parent: Optional[str], allowed: frozenset[str]) -> _Draft:
        draft = self._get(self.root if parent is None else parent)
        if draft.kind not in allowed:
            raise ValueError(
                f"item {draft.id!r} is a {draft.kind}, which cannot contain this item"
            )
        return draft

    def _module(self, parent: Optional[str]) -> _Draft:
        return self._container(parent, frozenset({"module"}))

    def _add_to_module(
        self, kind: str, name: str, parent: Optional[str], visibility: Visibility, **details: Any
    ) -> str:
        container = self._module(parent)
        draft = self._new(kind, name, visibility, **details)
        container.children.append(draft.id)
        return draft.id

    def module(
        self, name: str, parent: Optional[str] = None, visibility: Visibility = Visibility.PUBLIC
    ) -> str:
        """Add a module."""
        return self._add_to_module("module", name, parent, visibility)

    def struct(
        self,
        name: str,
        parent: Optional[str] = None,
        kind: StructKind = StructKind.PLAIN,
        visibility: Visibility = Visibility.PUBLIC,
        generics: GenericsLike = (),
    ) -> str:
        """Add a struct; give it fields with ``field``."""
        return self._add_to_module(
            "struct", name, parent, visibility, struct_kind=kind, generics=_as_generics(generics)
        )

    def field(self, name: str, owner: str, visibility: Visibility = Visibility.PUBLIC) -> str:
        """Add a field to a plain or tuple struct, or to a union."""
        container = self._container(owner, frozenset({"struct", "union"}))
        if container.kind == "struct" and container.struct_kind is StructKind.UNIT:
            raise ValueError(f"unit struct {owner!r} cannot have fields")
        draft = self._new("struct_field", name, visibility)
        container.children.append(draft.id)
        return draft.id

    def enum(
        self,
        name: str,
        parent: Optional[str] = None,
        variants: Iterable[str] = (),
        visibility: Visibility = Visibility.PUBLIC,
    ) -> str:
        """Add an enum together with its variants."""
        enum_id = self._add_to_module("enum", name, parent, visibility)
        container = self._drafts[enum_id]
        for variant_name in variants:
            variant = self._new(
                "variant", variant_name, Visibility.DEFAULT, item_id=f"{enum_id}::{variant_name}"
            )
            container.children.append(variant.id)
        return enum_id

    def union(
        self,
        name: str,
        parent: Optional[str] = None,
        fields: Iterable[str] = (),
        visibility: Visibility = Visibility.PUBLIC,
    ) -> str:
        """Add a union with public fields of the given names."""
        union_id = self._add_to_module("union", name, parent, visibility)
        for field_name in fields:
            self.field(field_name, union_id)
        return union_id

    def _add_value(
        self, kind: str, name: str, parent: Optional[str], visibility: Visibility
    ) -> str:
        container = self._container(parent, frozenset({"module", "impl"}))
        draft = self._new(kind, name, visibility)
        container.children.append(draft.id)
        return draft.id

    def function(
        self, name: str, parent: Optional[str] = None, visibility: Visibility = Visibility.PUBLIC
    ) -> str:
        """Add a function to a module, or a method to an impl block."""
        return self._add_value("function", name, parent, visibility)

    def constant(
        self, name: str, parent: Optional[str] = None, visibility: Visibility = Visibility.PUBLIC
    ) -> str:
        """Add a constant to a module or an impl block."""
        return self._add_value("constant", name, parent, visibility)

    def impl(
        self, owner: str, items: Iterable[str] = (), trait_name: Optional[str] = None
    ) -> str:
        """Add an impl block for a struct, enum or union.

        ``items`` names methods declared in the block. A ``trait_name`` makes it
        an impl of a trait from another crate, recorded in the crate's paths.
        """
        container = self._container(owner, frozenset({"struct", "enum", "union"}))
        trait: Optional[ResolvedPath] = None
        if trait_name is not None:
            trait_id = f"ext:{trait_name}"
            trait = ResolvedPath(trait_name, trait_id)
            self._paths[trait_id] = ItemSummary(_EXTERNAL_CRATE_ID, ("core", trait_name), "trait")
        draft = self._new("impl", None, Visibility.DEFAULT, trait=trait)
        container.impls.append(draft.id)
        method_visibility = Visibility.PUBLIC if trait is None else Visibility.DEFAULT
        for method_name in items:
            self.function(method_name, draft.id, method_visibility)
        return draft.id

    def use(
        self,
        parent: Optional[str],
        target: Optional[str],
        name: Optional[str] = None,
        glob: bool = False,
        visibility: Visibility = Visibility.PUBLIC,
    ) -> str:
        """Add an import of ``target`` into a module, renamed to ``name`` if given."""
        container = self._module(parent)
        if target is not None:
            target_draft = self._get(target)
            if name is None:
                name = target_draft.name
        elif glob:
            raise ValueError("a glob import needs a target")
        if name is None:
            raise ValueError("an import needs a name when its target has none")
        draft = self._new(
            "import", None, visibility, import_name=name, import_target=target, glob=glob
        )
        container.children.append(draft.id)
        return draft.id

    def typedef(
        self,
        name: str,
        parent: Optional[str] = None,
        target: Optional[str] = None,
        args: Optional[Iterable[GenericArg]] = None,
        generics: GenericsLike = (),
        visibility: Visibility = Visibility.PUBLIC,
    ) -> str:
        """Add a type alias.

        ``target`` is the aliased item when the aliased type is a path, with
        ``args`` as its angle-bracketed generic arguments; None for other types.
        """
        path: Optional[ResolvedPath] = None
        if target is not None:
            target_name = self._get(target).name or ""
            path = ResolvedPath(target_name, target, None if args is None else tuple(args))
        elif args is not None:
            raise ValueError("generic arguments need a target")
        return self._add_to_module(
            "typedef",
            name,
            parent,
            visibility,
            typedef_target=path,
            generics=_as_generics(generics),
        )

    def _details(self, draft: _Draft) -> Any:
        kind = draft.kind
        children = tuple(draft.children)
        if kind == "module":
            return Module(children, is_crate=draft.id == self.root)
        if kind == "struct":
            fields = () if draft.struct_kind is StructKind.UNIT else children
            return Struct(draft.struct_kind, fields, tuple(draft.impls), draft.generics)
        if kind == "enum":
            return Enum(children, tuple(draft.impls))
        if kind == "union":
            return Union(children, tuple(draft.impls))
        if kind == "variant":
            return Variant()
        if kind == "function":
            return Function()
        if kind == "constant":
            return Constant()
        if kind == "impl":
            return Impl(children, draft.trait)
        if kind == "import":
            return Import(draft.import_name, draft.import_target, draft.glob)
        if kind == "typedef":
            return Typedef(draft.typedef_target, draft.generics)
        return None

    def build(self) -> Crate:
        """Return the crate assembled so far."""
        index = {
            draft.id: Item(
                id=draft.id,
                name=draft.name,
                visibility=draft.visibility,
                inner=self._details(draft),
                kind=draft.kind,
            )
            for draft in self._drafts.values()
        }
        return Crate(root=self.root, index=index, paths=dict(self._paths))