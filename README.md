# crateindex

`crateindex` reads rustdoc JSON and works out which items of a documented
library are publicly reachable, and under which import paths.

The name resolution it performs covers:

- plain and renaming re-exports (`pub use inner::foo as bar;`)
- glob re-exports of modules and of enum variants
- local definitions shadowing glob-imported names
- conflicts between two glob imports of different items with one name
- the separate type and value namespaces
- import cycles (only cycle-free paths are reported)
- type aliases that merely rename another item, such as
  `pub type Foo = inner::Bar;` with its generic parameters passed through
  unchanged

Methods, associated constants and fields are visible but never importable,
since structs, unions and impl blocks are not modules. Enum variants are
importable.

## Installing

```
pip install crateindex
```

There are no runtime dependencies.

## Loading data

```python
from crateindex.model import load_crate, parse_crate

crate = load_crate("target/doc/my_crate.json")   # from a file
crate = parse_crate(json_text_or_mapping)        # from str, bytes or a mapping
```

A `Crate` holds the `root` id, the `index` of `Item`s by id and the `paths`
summaries. Each `Item` has a `kind` tag and, for the kinds that have details,
an `inner` value such as `Module`, `Import`, `Struct`, `Enum`, `Typedef` or
`Impl`. Malformed input raises `ValueError`.

## Importable paths

```python
from crateindex.visibility import VisibilityTracker

tracker = VisibilityTracker.from_crate(crate)
for path in tracker.publicly_importable_names(item_id):
    print("::".join(path))
```

`tracker.visible_parent_ids` maps every publicly reachable item to the ids
it is visible under. `compute_parent_ids_for_public_items(crate)` returns
the same relation as plain sets. Nothing is reachable unless the root
module is public.

## Lower-level pieces

- `crateindex.names.resolve_crate_names(crate)` returns a `NameResolution`:
  the names each module defines, its glob imports, the names those globs
  bring in and the names that clash between globs.
- `crateindex.names.names_for_item(crate, item)` gives the `NamespacedName`s
  an item defines. A unit struct, or a tuple struct whose fields are all
  public, defines both a type and a value name.
- `crateindex.typedefs.typedef_reexport_target(crate, typedef)` returns the
  item a type alias is equivalent to re-exporting, or `None`.

## Built-in traits

Traits such as `Debug`, `Clone`, `Send` and `Sync` are not in a library's
own rustdoc index. `crateindex.builtin_traits.create_manually_inlined_builtin_traits(crate)`
creates stand-in trait items for the known ones that the crate's impls
implement, keyed by trait id, whenever `crate.paths` records the trait.

## Building crates by hand

`crateindex.builder.CrateBuilder` assembles a `Crate` in code, which is
handy for tests and experiments without running rustdoc:

```python
from crateindex.builder import CrateBuilder
from crateindex.visibility import VisibilityTracker

b = CrateBuilder("demo")
inner = b.module("inner")
foo = b.function("foo", parent=inner)
b.use(b.root, foo)
tracker = VisibilityTracker.from_crate(b.build())

sorted("::".join(p) for p in tracker.publicly_importable_names(foo))
# ['demo::foo', 'demo::inner::foo']
```

## What it does not do

The package has no index from an import path back to the items found
there, and no lookup of the methods a type gets through its impl blocks or
through provided trait methods. There is no command-line tool.

## Running the tests

```
pip install -e .[test]
pytest
```