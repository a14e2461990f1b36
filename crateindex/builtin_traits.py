"""Stand-in trait items for common built-in traits implemented by a crate's types.

Traits from other crates, including the standard library's, are absent from a
crate's own index even when its types implement them. For the most common
built-in traits an equivalent item is created here, so that impls can still
be linked to a trait item.
"""

from __future__ import annotations

from dataclasses import dataclass

from .model import Crate, Generics, Impl, Item, Trait, Visibility


@dataclass(frozen=True)
class ManualTraitItem:
    """A built-in trait for which a stand-in item can be created."""

    name: str
    is_auto: bool = False
    is_unsafe: bool = False


# Only the traits that queries rely on; for other foreign traits it is not
# clear what a stand-in item should hold.
MANUAL_TRAIT_ITEMS: tuple[ManualTraitItem, ...] = (
    ManualTraitItem("Debug"),
    ManualTraitItem("Clone"),
    ManualTraitItem("Copy"),
    ManualTraitItem("PartialOrd"),
    ManualTraitItem("Ord"),
    ManualTraitItem("PartialEq"),
    ManualTraitItem("Eq"),
    ManualTraitItem("Hash"),
    ManualTraitItem("Send", is_auto=True, is_unsafe=True),
    ManualTraitItem("Sync", is_auto=True, is_unsafe=True),
    ManualTraitItem("Unpin", is_auto=True),
    ManualTraitItem("RefUnwindSafe", is_auto=True),
    ManualTraitItem("UnwindSafe", is_auto=True),
    ManualTraitItem("Sized"),
)

_BY_NAME = {manual.name: manual for manual in MANUAL_TRAIT_ITEMS}


def new_trait(manual_trait_item: ManualTraitItem, item_id: str, crate_id: int) -> Item:
    """Create a public trait item standing in for a built-in trait.

    Its associated items, generics, bounds and implementations are left
    empty, even though some of these traits have them in reality.
    """
    return Item(
        id=item_id,
        name=manual_trait_item.name,
        visibility=Visibility.PUBLIC,
        inner=Trait(
            items=(),
            generics=Generics(),
            is_auto=manual_trait_item.is_auto,
            is_unsafe=manual_trait_item.is_unsafe,
            bounds=(),
            implementations=(),
        ),
        crate_id=crate_id,
    )


def create_manually_inlined_builtin_traits(crate: Crate) -> dict[str, Item]:
    """Map the id of every known built-in trait that the crate implements to a stand-in item.

    A trait is included only when the crate's paths record where it lives.
    """
    result: dict[str, Item] = {}
    for item in crate.index.values():
        if not isinstance(item.inner, Impl) or item.inner.trait is None:
            continue
        path = item.inner.trait
        manual = _BY_NAME.get(path.name)
        if manual is None:
            continue
        summary = crate.paths.get(path.id)
        if summary is None:
            continue
        result[path.id] = new_trait(manual, path.id, summary.crate_id)
    return result