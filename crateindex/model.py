"""Data model for rustdoc JSON crates, and parsing of the JSON format."""

from __future__ import annotations

import enum
import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional


class Visibility(enum.Enum):
    """Declared visibility of an item."""

    PUBLIC = "public"
    DEFAULT = "default"
    CRATE = "crate"
    RESTRICTED = "restricted"


class StructKind(enum.Enum):
    """Shape of a struct definition."""

    UNIT = "unit"
    TUPLE = "tuple"
    PLAIN = "plain"


class GenericParamKind(enum.Enum):
    """Kind of a generic parameter or argument."""

    LIFETIME = "lifetime"
    TYPE = "type"
    CONST = "const"


@dataclass(frozen=True)
class GenericParam:
    """A generic parameter declaration.

    ``default`` is the raw default (a type or a const expression);
    ``const_type`` is the declared type of a const parameter.
    """

    name: str
    kind: GenericParamKind
    default: Any = None
    const_type: Any = None


@dataclass(frozen=True)
class Generics:
    params: tuple[GenericParam, ...] = ()
    where_predicates: tuple[Any, ...] = ()


@dataclass(frozen=True)
class GenericArg:
    """A generic argument supplied in a path.

    ``kind`` is None for an inferred ``_`` argument. ``name`` is the lifetime,
    the generic type parameter, or the const expression; it is None when the
    argument is a concrete type rather than a generic parameter.
    """

    kind: Optional[GenericParamKind]
    name: Optional[str] = None


@dataclass(frozen=True)
class ResolvedPath:
    """A path to an item; ``args`` is None unless angle-bracketed args are given."""

    name: str
    id: str
    args: Optional[tuple[GenericArg, ...]] = None
    bindings: tuple[Any, ...] = ()


@dataclass(frozen=True)
class Module:
    items: tuple[str, ...] = ()
    is_crate: bool = False


@dataclass(frozen=True)
class Import:
    name: str
    id: Optional[str]
    glob: bool = False
    source: str = ""


@dataclass(frozen=True)
class Struct:
    """A struct; ``fields`` may hold None entries for stripped tuple fields."""

    kind: StructKind = StructKind.PLAIN
    fields: tuple[Optional[str], ...] = ()
    impls: tuple[str, ...] = ()
    generics: Generics = field(default_factory=Generics)


@dataclass(frozen=True)
class Enum:
    variants: tuple[str, ...] = ()
    impls: tuple[str, ...] = ()
    generics: Generics = field(default_factory=Generics)


@dataclass(frozen=True)
class Union:
    fields: tuple[str, ...] = ()
    impls: tuple[str, ...] = ()
    generics: Generics = field(default_factory=Generics)


@dataclass(frozen=True)
class Variant:
    kind: str = "plain"


@dataclass(frozen=True)
class Function:
    has_body: bool = True


@dataclass(frozen=True)
class Constant:
    expr: str = ""
    value: Optional[str] = None


@dataclass(frozen=True)
class Trait:
    items: tuple[str, ...] = ()
    generics: Generics = field(default_factory=Generics)
    is_auto: bool = False
    is_unsafe: bool = False
    bounds: tuple[Any, ...] = ()
    implementations: tuple[str, ...] = ()


@dataclass(frozen=True)
class Impl:
    items: tuple[str, ...] = ()
    trait: Optional[ResolvedPath] = None
    provided_trait_methods: tuple[str, ...] = ()
    for_: Any = None
    is_unsafe: bool = False


@dataclass(frozen=True)
class Typedef:
    """A type alias; ``target`` is set only when the aliased type is a path."""

    target: Optional[ResolvedPath] = None
    generics: Generics = field(default_factory=Generics)


_KIND_BY_CLASS: dict[type, str] = {
    Module: "module",
    Import: "import",
    Struct: "struct",
    Enum: "enum",
    Union: "union",
    Variant: "variant",
    Function: "function",
    Constant: "constant",
    Trait: "trait",
    Impl: "impl",
    Typedef: "typedef",
}

_KIND_ALIASES = {"use": "import", "type_alias": "typedef"}


@dataclass(frozen=True)
class Item:
    """An item of the crate index.

    ``kind`` is the rustdoc kind tag. It is derived from ``inner`` when that is
    given; kinds without a detail class (fields, statics, macros...) carry
    only the tag.
    """

    id: str
    name: Optional[str]
    visibility: Visibility
    inner: Any = None
    kind: str = ""
    crate_id: int = 0
    docs: Optional[str] = None
    attrs: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.inner is None:
            if not self.kind:
                raise ValueError(f"item {self.id!r} has neither a kind nor details")
            return
        expected = _KIND_BY_CLASS.get(type(self.inner))
        if expected is None:
            raise ValueError(f"item {self.id!r} has unsupported details: {self.inner!r}")
        if self.kind and self.kind != expected:
            raise ValueError(
                f"item {self.id!r} declared as {self.kind!r} but holds a {expected!r}"
            )
        object.__setattr__(self, "kind", expected)


@dataclass(frozen=True)
class ItemSummary:
    crate_id: int
    path: tuple[str, ...]
    kind: str


@dataclass
class Crate:
    root: str
    index: dict[str, Item]
    paths: dict[str, ItemSummary] = field(default_factory=dict)
    format_version: Optional[int] = None
    crate_version: Optional[str] = None
    includes_private: bool = False


def _id(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def _ids(values: Any) -> tuple[str, ...]:
    return tuple(str(v) for v in values or ())


def _tagged(value: Any, what: str) -> tuple[str, Any]:
    if isinstance(value, str):
        return value, None
    if isinstance(value, Mapping):
        if len(value) == 2 and "kind" in value and "inner" in value:
            return value["kind"], value["inner"]
        if len(value) == 1:
            ((tag, content),) = value.items()
            return tag, content
    raise ValueError(f"malformed {what}: {value!r}")


def _parse_visibility(value: Any) -> Visibility:
    if isinstance(value, str):
        try:
            return Visibility(value)
        except ValueError:
            pass
    elif isinstance(value, Mapping) and "restricted" in value:
        return Visibility.RESTRICTED
    raise ValueError(f"unknown visibility: {value!r}")


def _parse_generics(value: Any) -> Generics:
    if not value:
        return Generics()
    params = []
    for raw in value.get("params", ()):
        tag, content = _tagged(raw["kind"], "generic parameter kind")
        content = content or {}
        if tag == "lifetime":
            params.append(GenericParam(raw["name"], GenericParamKind.LIFETIME))
        elif tag == "type":
            params.append(
                GenericParam(raw["name"], GenericParamKind.TYPE, default=content.get("default"))
            )
        elif tag == "const":
            params.append(
                GenericParam(
                    raw["name"],
                    GenericParamKind.CONST,
                    default=content.get("default"),
                    const_type=content.get("type"),
                )
            )
        else:
            raise ValueError(f"unknown generic parameter kind: {tag!r}")
    return Generics(tuple(params), tuple(value.get("where_predicates", ())))


def _parse_generic_arg(value: Any) -> GenericArg:
    if value == "infer":
        return GenericArg(None)
    tag, content = _tagged(value, "generic argument")
    if tag == "lifetime":
        return GenericArg(GenericParamKind.LIFETIME, content)
    if tag == "type":
        type_tag, type_content = _tagged(content, "type")
        return GenericArg(GenericParamKind.TYPE, type_content if type_tag == "generic" else None)
    if tag == "const":
        return GenericArg(GenericParamKind.CONST, (content or {}).get("expr"))
    raise ValueError(f"unknown generic argument: {value!r}")


def _parse_path(value: Mapping) -> ResolvedPath:
    name = value.get("name") or value.get("path") or ""
    path_id = _id(value.get("id"))
    if path_id is None:
        raise ValueError(f"path without an id: {value!r}")
    raw_args = value.get("args")
    if raw_args is None:
        return ResolvedPath(name, path_id)
    tag, content = _tagged(raw_args, "generic arguments")
    if tag != "angle_bracketed":
        return ResolvedPath(name, path_id)
    content = content or {}
    args = tuple(_parse_generic_arg(a) for a in content.get("args", ()))
    bindings = tuple(content.get("bindings") or content.get("constraints") or ())
    return ResolvedPath(name, path_id, args, bindings)


def _parse_type_path(value: Any) -> Optional[ResolvedPath]:
    if value is None:
        return None
    tag, content = _tagged(value, "type")
    return _parse_path(content) if tag == "resolved_path" else None


def _parse_struct(content: Mapping) -> Struct:
    tag, kind_content = _tagged(content.get("kind", "unit"), "struct kind")
    if tag == "unit":
        kind, fields = StructKind.UNIT, ()
    elif tag == "tuple":
        kind, fields = StructKind.TUPLE, tuple(_id(f) for f in kind_content or ())
    elif tag == "plain":
        kind, fields = StructKind.PLAIN, _ids((kind_content or {}).get("fields"))
    else:
        raise ValueError(f"unknown struct kind: {tag!r}")
    return Struct(kind, fields, _ids(content.get("impls")), _parse_generics(content.get("generics")))


def _parse_inner(kind: str, content: Any) -> Any:
    content = content if isinstance(content, Mapping) else {}
    if kind == "module":
        return Module(_ids(content.get("items")), bool(content.get("is_crate", False)))
    if kind == "import":
        return Import(
            content.get("name", ""),
            _id(content.get("id")),
            bool(content.get("glob", False)),
            content.get("source", ""),
        )
    if kind == "struct":
        return _parse_struct(content)
    if kind == "enum":
        return Enum(
            _ids(content.get("variants")),
            _ids(content.get("impls")),
            _parse_generics(content.get("generics")),
        )
    if kind == "union":
        return Union(
            _ids(content.get("fields")),
            _ids(content.get("impls")),
            _parse_generics(content.get("generics")),
        )
    if kind == "variant":
        raw_kind = content.get("kind", "plain")
        return Variant(_tagged(raw_kind, "variant kind")[0])
    if kind == "function":
        return Function(bool(content.get("has_body", True)))
    if kind == "constant":
        return Constant(content.get("expr") or "", content.get("value"))
    if kind == "trait":
        return Trait(
            _ids(content.get("items")),
            _parse_generics(content.get("generics")),
            bool(content.get("is_auto", False)),
            bool(content.get("is_unsafe", False)),
            tuple(content.get("bounds") or ()),
            _ids(content.get("implementations")),
        )
    if kind == "impl":
        raw_trait = content.get("trait")
        return Impl(
            _ids(content.get("items")),
            _parse_path(raw_trait) if raw_trait is not None else None,
            tuple(content.get("provided_trait_methods") or ()),
            content.get("for"),
            bool(content.get("is_unsafe", False)),
        )
    if kind == "typedef":
        return Typedef(_parse_type_path(content.get("type")), _parse_generics(content.get("generics")))
    return None


def _parse_item(key: str, raw: Mapping) -> Item:
    if "kind" in raw:
        kind, content = raw["kind"], raw.get("inner")
    else:
        kind, content = _tagged(raw.get("inner"), "item details")
    kind = _KIND_ALIASES.get(kind, kind)
    return Item(
        id=_id(raw.get("id", key)),
        name=raw.get("name"),
        visibility=_parse_visibility(raw.get("visibility")),
        inner=_parse_inner(kind, content),
        kind=kind,
        crate_id=int(raw.get("crate_id", 0)),
        docs=raw.get("docs"),
        attrs=tuple(str(a) for a in raw.get("attrs") or ()),
    )


def parse_crate(data: Any) -> Crate:
    """Build a Crate from rustdoc JSON, given as a mapping, str or bytes."""
    if isinstance(data, (str, bytes, bytearray)):
        data = json.loads(data)
    if not isinstance(data, Mapping):
        raise ValueError("rustdoc JSON must be an object")
    if "root" not in data or "index" not in data:
        raise ValueError("rustdoc JSON lacks 'root' or 'index'")
    index = {str(key): _parse_item(str(key), raw) for key, raw in data["index"].items()}
    paths = {
        str(key): ItemSummary(int(raw.get("crate_id", 0)), tuple(raw.get("path", ())), raw.get("kind", ""))
        for key, raw in (data.get("paths") or {}).items()
    }
    return Crate(
        root=str(data["root"]),
        index=index,
        paths=paths,
        format_version=data.get("format_version"),
        crate_version=data.get("crate_version"),
        includes_private=bool(data.get("includes_private", False)),
    )


def load_crate(path: str | Path) -> Crate:
    """Read and parse a rustdoc JSON file."""
    return parse_crate(Path(path).read_text(encoding="utf-8"))