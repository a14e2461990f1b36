import pytest

from crateindex.model import (
    Crate,
    Enum,
    Function,
    Import,
    Item,
    Module,
    Struct,
    StructKind,
    Variant,
    Visibility,
)
from crateindex.names import (
    Definition,
    Namespace,
    NamespacedName,
    names_for_item,
    resolve_crate_names,
)

PUB = Visibility.PUBLIC
PRIV = Visibility.CRATE


def T(name):
    return NamespacedName(Namespace.TYPES, name)


def V(name):
    return NamespacedName(Namespace.VALUES, name)


def module(item_id, name, *children, visibility=PUB):
    return Item(item_id, name, visibility, Module(tuple(children)))


def unit_struct(item_id, name, visibility=PUB):
    return Item(item_id, name, visibility, Struct(StructKind.UNIT))


def function(item_id, name, visibility=PUB):
    return Item(item_id, name, visibility, Function())


def use(item_id, target, name="", glob=False, visibility=PUB):
    return Item(item_id, None, visibility, Import(name, target, glob))


def crate_of(*items):
    return Crate(root=items[0].id, index={item.id: item for item in items})


def test_rename_keeps_namespace():
    assert V("foo").rename("bar") == V("bar")
    assert T("Foo").rename("Baz") == T("Baz")


def test_unit_struct_is_type_and_value():
    item = unit_struct("s", "Foo")
    assert set(names_for_item(crate_of(item), item)) == {T("Foo"), V("Foo")}


def test_plain_struct_is_only_type():
    item = Item("s", "Foo", PUB, Struct(StructKind.PLAIN))
    assert names_for_item(crate_of(item), item) == (T("Foo"),)


def test_tuple_struct_with_public_fields_is_value_too():
    field = Item("f", "0", PUB, kind="struct_field")
    item = Item("s", "Foo", PUB, Struct(StructKind.TUPLE, ("f", None)))
    assert set(names_for_item(crate_of(item, field), item)) == {T("Foo"), V("Foo")}


def test_tuple_struct_with_private_field_is_only_type():
    field = Item("f", "0", PRIV, kind="struct_field")
    item = Item("s", "Foo", PUB, Struct(StructKind.TUPLE, ("f",)))
    assert names_for_item(crate_of(item, field), item) == (T("Foo"),)


def test_tuple_struct_with_unknown_field_counts_as_public():
    item = Item("s", "Foo", PUB, Struct(StructKind.TUPLE, ("missing",)))
    assert set(names_for_item(crate_of(item), item)) == {T("Foo"), V("Foo")}


def test_function_and_module_namespaces():
    fn = function("f", "run")
    mod = module("m", "tools")
    crate = crate_of(mod, fn)
    assert names_for_item(crate, fn) == (V("run"),)
    assert names_for_item(crate, mod) == (T("tools"),)


def test_import_and_field_define_no_names():
    imp = use("u", "x", "x")
    field = Item("f", "x", PUB, kind="struct_field")
    crate = crate_of(imp, field)
    assert names_for_item(crate, imp) == ()
    assert names_for_item(crate, field) == ()


def test_nameless_item_is_rejected():
    item = Item("f", None, PUB, Function())
    with pytest.raises(ValueError):
        names_for_item(crate_of(item), item)


def test_direct_definitions_record_publicity():
    crate = crate_of(
        module("root", "demo", "pub_fn", "priv_fn"),
        function("pub_fn", "shown"),
        function("priv_fn", "hidden", visibility=PRIV),
    )
    names = resolve_crate_names(crate).names_defined_in_module["root"]
    assert names[V("shown")] == (Definition.direct("pub_fn"), True)
    assert names[V("hidden")] == (Definition.direct("priv_fn"), False)


def test_renaming_import_points_at_underlying_item():
    crate = crate_of(
        module("root", "renaming_reexport", "inner", "imp"),
        module("inner", "inner", "foo"),
        function("foo", "foo"),
        use("imp", "foo", "bar"),
    )
    names = resolve_crate_names(crate).names_defined_in_module["root"]
    assert names[V("bar")] == (Definition("imp", "foo"), True)
    assert V("foo") not in names


def test_glob_vs_glob_shadowing():
    crate = crate_of(
        module("root", "glob_vs_glob_shadowing", "a", "b", "ga", "gb"),
        module("a", "a", "a_foo", "a_bar", visibility=PRIV),
        module("b", "b", "b_foo", "b_baz", visibility=PRIV),
        unit_struct("a_foo", "Foo"),
        unit_struct("a_bar", "Bar"),
        unit_struct("b_foo", "Foo"),
        unit_struct("b_baz", "Baz"),
        use("ga", "a", glob=True),
        use("gb", "b", glob=True),
    )
    resolution = resolve_crate_names(crate)
    assert resolution.modules_with_glob_imports == {"root": {"ga", "gb"}}
    globbed = resolution.glob_imported_names_in_module["root"]
    assert set(globbed) == {T("Bar"), V("Bar"), T("Baz"), V("Baz")}
    assert globbed[T("Bar")] == Definition.direct("a_bar")
    assert resolution.duplicated_glob_names_in_module["root"] == {T("Foo"), V("Foo")}
    assert resolution.names_defined_in_module["root"][T("a")] == (Definition.direct("a"), False)


def test_same_item_through_two_globs_is_not_duplicated():
    crate = crate_of(
        module("root", "glob_vs_glob_no_shadowing_for_same_item", "a", "b", "ga", "gb"),
        module("a", "a", "foo", visibility=PRIV),
        module("b", "b", "reexp", visibility=PRIV),
        unit_struct("foo", "Foo"),
        use("reexp", "foo", "Foo"),
        use("ga", "a", glob=True),
        use("gb", "b", glob=True),
    )
    resolution = resolve_crate_names(crate)
    globbed = resolution.glob_imported_names_in_module["root"]
    assert {globbed[T("Foo")].final_underlying_id, globbed[V("Foo")].final_underlying_id} == {"foo"}
    assert "root" not in resolution.duplicated_glob_names_in_module


def test_local_item_shadows_glob_import():
    crate = crate_of(
        module("root", "overlapping_glob_and_local_item", "foo", "bar", "inner"),
        unit_struct("foo", "Foo"),
        unit_struct("bar", "Bar"),
        module("inner", "inner", "glob", "inner_foo"),
        use("glob", "root", glob=True),
        unit_struct("inner_foo", "Foo"),
    )
    globbed = resolve_crate_names(crate).glob_imported_names_in_module["inner"]
    assert globbed[T("Bar")] == Definition.direct("bar")
    assert T("Foo") not in globbed
    assert V("Foo") not in globbed


def test_enum_glob_imports_variants_as_values():
    crate = crate_of(
        module("root", "glob_reexport_enum_variants", "nested", "glob"),
        module("nested", "nested", "e", visibility=PRIV),
        Item("e", "Foo", PUB, Enum(("v1", "v2"))),
        Item("v1", "First", Visibility.DEFAULT, Variant()),
        Item("v2", "Second", Visibility.DEFAULT, Variant()),
        use("glob", "e", glob=True),
    )
    globbed = resolve_crate_names(crate).glob_imported_names_in_module["root"]
    assert globbed == {V("First"): Definition.direct("v1"), V("Second"): Definition.direct("v2")}


def test_glob_skips_private_items():
    crate = crate_of(
        module("root", "demo", "inner", "glob"),
        module("inner", "inner", "hidden", visibility=PRIV),
        function("hidden", "hidden", visibility=PRIV),
        use("glob", "inner", glob=True),
    )
    resolution = resolve_crate_names(crate)
    assert "root" not in resolution.glob_imported_names_in_module
    assert resolution.modules_with_glob_imports["root"] == {"glob"}


def test_glob_cycle_terminates():
    crate = crate_of(
        module("root", "glob_reexport_cycle", "first", "second"),
        module("first", "first", "foo", "g1"),
        module("second", "second", "bar", "g2"),
        function("foo", "foo"),
        unit_struct("bar", "Bar"),
        use("g1", "second", glob=True),
        use("g2", "first", glob=True),
    )
    resolution = resolve_crate_names(crate)
    first = resolution.glob_imported_names_in_module["first"]
    second = resolution.glob_imported_names_in_module["second"]
    assert set(first) == {T("Bar"), V("Bar")}
    assert set(second) == {V("foo")}


def test_glob_without_target_is_rejected():
    crate = crate_of(
        module("root", "demo", "glob"),
        use("glob", None, glob=True),
    )
    with pytest.raises(ValueError):
        resolve_crate_names(crate)