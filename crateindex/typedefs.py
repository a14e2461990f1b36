"""Deciding when a type alias is equivalent to a plain re-export."""

from __future__ import annotations

from typing import Optional

from .model import (
    Crate,
    Enum,
    GenericParam,
    GenericParamKind,
    Item,
    Struct,
    Trait,
    Typedef,
    Union,
)

_GENERIC_OWNERS = (Struct, Enum, Trait, Union, Typedef)


def _same_param(alias_param: GenericParam, underlying_param: GenericParam) -> bool:
    if alias_param.kind is not underlying_param.kind:
        return False
    if alias_param.kind is GenericParamKind.LIFETIME:
        # Lifetimes on aliases carry no outlives bounds; nothing more to compare.
        return True
    if alias_param.kind is GenericParamKind.TYPE:
        # Bounds on alias generics are ignored by the compiler; only defaults matter.
        return alias_param.default == underlying_param.default
    return (
        alias_param.default == underlying_param.default
        and alias_param.const_type == underlying_param.const_type
    )


def typedef_reexport_target(crate: Crate, typedef: Typedef) -> Optional[Item]:
    """Return the item a type alias merely renames, or None.

    ``type Foo = Bar`` is a re-export of ``Bar``. When generic arguments are
    given, the alias must pass through all of the underlying item's
    parameters unchanged: same count, same order, same kinds and defaults.
    """
    path = typedef.target
    if path is None:
        return None
    underlying = crate.index.get(path.id)
    if underlying is None:
        return None
    if path.args is None:
        return underlying
    if path.bindings:
        # Some of the underlying parameters are pinned to specific values.
        return None

    if not isinstance(underlying.inner, _GENERIC_OWNERS):
        raise ValueError(f"unexpected underlying item kind: {underlying!r}")
    underlying_params = underlying.inner.generics.params
    alias_params = typedef.generics.params
    args = path.args

    if len(alias_params) != len(args) or len(underlying_params) != len(args):
        return None

    for alias_param, underlying_param, arg in zip(alias_params, underlying_params, args):
        if arg.kind is None or arg.name is None:
            # An inferred argument, or a concrete type instead of a parameter.
            return None
        if alias_param.name != arg.name:
            return None
        if not _same_param(alias_param, underlying_param):
            return None

    return underlying