import pytest
from varlink.fexpr import FeatureModel
from varlink.linker import (CInterface, CSignature, Position, CInt, CDouble, CFunction, CVoid,
                            link_all)

def make(factory, imports=(), exports=(), fm=None, declared=()):
    return CInterface.from_signatures(imports, exports,
                                      fm if fm is not None else factory.base, declared)

def same_signatures(fm, left, right):
    """Same keys in the same order, conditions equivalent under fm."""
    if [s.key for s in left] != [s.key for s in right]:
        return False
    return all(fm.implies(l.fexpr.equiv(r.fexpr)).is_tautology() for l, r in zip(left, right))

# --- construction ---

def test_from_signatures_infers_imported_features(abc, factory):
    a, b, c = abc
    d = factory.feature("D")
    x = make(factory, imports=[CSignature("foo", CInt(), a & b)],
             exports=[CSignature("bar", CInt(), c)], fm=d, declared=["C"])
    assert x.imported_features == {"A", "B", "D"}
    assert x.declared_features == {"C"}
    assert x.interface_features == {"A", "B", "C", "D"}

def test_empty_interface(factory):
    empty = CInterface.empty(factory)
    assert empty.feature_model.is_base
    assert empty.imports == () and empty.exports == ()
    assert empty.is_complete()
    assert empty.is_wellformed()

def test_str_lists_sorted_signatures(factory):
    x = make(factory, imports=[CSignature("zeta", CInt(), factory.base)],
             exports=[CSignature("beta", CInt(), factory.base),
                      CSignature("alpha", CInt(), factory.base)])
    text = str(x)
    assert text.startswith("fm True\n")
    assert "imports (1)\n\tzeta: int True" in text
    assert text.index("alpha") < text.index("beta")

# --- pack ---

def test_pack_merges_duplicate_imports(abc, factory):
    a, b, _ = abc
    x = make(factory, imports=[
        CSignature("foo", CInt(), a, (Position(file="x.c", line=1),)),
        CSignature("foo", CInt(), b, (Position(file="x.c", line=7),)),
        CSignature("foo", CDouble(), b),
    ])
    packed = x.pack()
    assert [s.key for s in packed.imports] == [("foo", CInt()), ("foo", CDouble())]
    assert packed.imports[0].fexpr.equivalent_to(a | b)
    assert packed.imports[0].pos == (Position(file="x.c", line=1), Position(file="x.c", line=7))

def test_pack_drops_dead_signatures(abc, factory):
    a, b, _ = abc
    x = make(factory, fm=a,
             imports=[CSignature("foo", CInt(), ~a), CSignature("bar", CInt(), b)],
             exports=[CSignature("baz", CInt(), ~a & b), CSignature("qux", CInt(), b)])
    packed = x.pack()
    assert [s.name for s in packed.imports] == ["bar"]
    assert [s.name for s in packed.exports] == ["qux"]

def test_pack_keeps_duplicate_exports(factory):
    x = make(factory, exports=[CSignature("foo", CInt(), factory.base),
                               CSignature("foo", CInt(), factory.base)])
    assert len(x.pack().exports) == 2

def test_pack_subtracts_local_exports(abc, factory):
    a, b, _ = abc
    x = make(factory, imports=[CSignature("n", CInt(), a)], exports=[CSignature("n", CInt(), b)])
    packed = x.pack()
    assert len(packed.imports) == 1
    cond = packed.imports[0].fexpr
    assert cond.equivalent_to(a & ~b)
    assert (cond & a & ~b).is_satisfiable()
    assert not (cond & b).is_satisfiable()

def test_pack_removes_fully_shadowed_imports(abc, factory):
    a, _, _ = abc
    x = make(factory, imports=[CSignature("n", CInt(), a)],
             exports=[CSignature("n", CInt(), factory.base)])
    assert x.pack().imports == ()
    # an export of another type does not satisfy the import
    y = make(factory, imports=[CSignature("n", CInt(), a)],
             exports=[CSignature("n", CDouble(), factory.base)])
    assert len(y.pack().imports) == 1

def test_pack_removes_declared_from_imported_features(factory):
    x = CInterface(factory.base, {"A", "B"}, {"A"}, (), ())
    packed = x.pack()
    assert packed.imported_features == {"B"}
    assert packed.declared_features == {"A"}

def test_pack_is_idempotent(abc, factory):
    a, b, _ = abc
    x = make(factory, imports=[CSignature("n", CInt(), a), CSignature("m", CInt(), b)],
             exports=[CSignature("n", CInt(), b)])
    packed = x.pack()
    assert packed.pack() is packed
    unmarked = CInterface(packed.feature_model, packed.imported_features,
                          packed.declared_features, packed.imports, packed.exports)
    assert unmarked.pack() == packed

def test_pack_never_grows(abc, factory):
    a, b, c = abc
    x = make(factory, fm=a | b,
             imports=[CSignature("n", CInt(), a), CSignature("n", CInt(), c),
                      CSignature("m", CInt(), ~a & ~b)],
             exports=[CSignature("n", CInt(), c), CSignature("k", CInt(), b)])
    packed = x.pack()
    assert len(packed.imports) <= len(x.imports)
    assert len(packed.exports) <= len(x.exports)

# --- link ---

def test_link_resolves_imports(factory):
    main = make(factory, imports=[CSignature("foo", CFunction(ret=CVoid()), factory.base)],
                exports=[CSignature("main", CFunction(ret=CInt()), factory.base)])
    lib = make(factory, exports=[CSignature("foo", CFunction(ret=CVoid()), factory.base)])
    linked = main.link(lib)
    assert linked.feature_model.is_base
    assert linked.imports == ()
    assert [s.name for s in linked.exports] == ["main", "foo"]
    assert linked.is_complete()
    assert linked.is_wellformed()

def test_link_excludes_double_definitions(abc, factory):
    a, b, _ = abc
    x = make(factory, exports=[CSignature("foo", CInt(), a)])
    y = make(factory, exports=[CSignature("foo", CInt(), b)])
    linked = x.link(y)
    assert linked.feature_model.equivalent_to(~(a & b))
    assert x.is_compatible_to(y)
    assert linked.is_wellformed()

def test_link_of_exclusive_definitions_keeps_feature_model(abc, factory):
    a, _, _ = abc
    x = make(factory, exports=[CSignature("foo", CInt(), a)])
    y = make(factory, exports=[CSignature("foo", CInt(), ~a)])
    linked = x.link(y)
    assert linked.feature_model.is_base
    assert linked.is_wellformed()

def test_link_unconditional_double_definition_is_incompatible(factory):
    x = make(factory, exports=[CSignature("foo", CInt(), factory.base)])
    y = make(factory, exports=[CSignature("foo", CInt(), factory.base)])
    assert not x.link(y).feature_model.is_satisfiable()
    assert not x.is_compatible_to(y)

def test_link_type_mismatch(abc, factory):
    a, b, _ = abc
    x = make(factory, imports=[CSignature("foo", CInt(), a)])
    y = make(factory, exports=[CSignature("foo", CDouble(), b)])
    linked = x.link(y)
    assert linked.feature_model.equivalent_to(~(a & b))
    assert [s.key for s in linked.imports] == [("foo", CInt())]

def test_link_unions_features(factory):
    x = CInterface(factory.base, {"A"}, {"X"}, (), ())
    y = CInterface(factory.base, {"B", "X"}, {"Y"}, (), ())
    linked = x.link(y)
    assert linked.declared_features == {"X", "Y"}
    assert linked.imported_features == {"A", "B"}

def test_declared_features_must_be_disjoint(factory):
    x = make(factory, declared=["A"])
    y = make(factory, declared=["A"])
    assert x.link(y).feature_model.is_satisfiable()
    assert not x.is_compatible_to(y)

def test_is_compatible_to_sequence(abc, factory):
    a, _, _ = abc
    x = make(factory, exports=[CSignature("foo", CInt(), a)])
    y = make(factory, exports=[CSignature("foo", CInt(), ~a)])
    z = make(factory, exports=[CSignature("foo", CInt(), factory.base)])
    assert x.is_compatible_to([y])
    assert x.is_compatible_to([])
    # each of y and z alone would be fine, linked together they cover every configuration
    assert x.is_compatible_to(z)
    assert not x.is_compatible_to([y, z])

def test_debug_join_skips_checks(factory):
    x = make(factory, imports=[CSignature("bar", CInt(), factory.base)],
             exports=[CSignature("foo", CInt(), factory.base)])
    y = make(factory, exports=[CSignature("foo", CInt(), factory.base),
                               CSignature("bar", CInt(), factory.base)])
    joined = x.debug_join(y)
    assert joined.feature_model.is_base
    assert len(joined.imports) == 1
    assert len(joined.exports) == 3
    assert not x.link(y).feature_model.is_satisfiable()

def test_link_restriction_is_associative(abc, factory):
    a, b, c = abc
    x = make(factory, fm=a, exports=[CSignature("x", CInt(), b)])
    y = make(factory, fm=~a | b, imports=[CSignature("x", CInt(), c)])
    z = make(factory, fm=c, exports=[CSignature("z", CInt(), factory.base)])
    left = x.link(y).link(z)
    right = x.link(y.link(z))
    assert left.feature_model.equivalent_to(right.feature_model)
    assert left.feature_model.is_satisfiable() == right.feature_model.is_satisfiable()

def test_link_all(factory):
    main = make(factory, imports=[CSignature("foo", CInt(), factory.base)])
    foo = make(factory, imports=[CSignature("bar", CInt(), factory.base)],
               exports=[CSignature("foo", CInt(), factory.base)])
    bar = make(factory, exports=[CSignature("bar", CInt(), factory.base)])
    assert link_all([main, foo, bar], factory).is_complete()
    assert not link_all([main, foo], factory).is_complete()
    empty = link_all([], factory)
    assert empty.imports == () and empty.exports == ()

# --- conditional composition ---

@pytest.fixture
def split(factory):
    f = factory.feature("option1")
    g = factory.feature("option2")
    a = make(factory, imports=[CSignature("bar", CInt(), factory.base)],
             exports=[CSignature("foo", CInt(), factory.base)])
    b = make(factory, exports=[CSignature("baz", CInt(), factory.base)])
    return f, g, a, b, a.conditional(f).link(b.conditional(g))

def test_conditional_guards_signatures(split):
    f, _, a, _, _ = split
    guarded = a.conditional(f)
    assert [s.fexpr for s in guarded.imports + guarded.exports] == [f, f]
    assert guarded.feature_model.is_base

def test_conditional_only_a(split):
    f, g, a, _, linked = split
    only_a = linked.and_fm(f & ~g).pack()
    expected = a.and_fm(f & ~g).pack()
    fm = only_a.feature_model
    assert same_signatures(fm, only_a.imports, expected.imports)
    assert same_signatures(fm, only_a.exports, expected.exports)

def test_conditional_only_b(split):
    f, g, _, b, linked = split
    only_b = linked.and_fm(~f & g).pack()
    expected = b.and_fm(~f & g).pack()
    fm = only_b.feature_model
    assert same_signatures(fm, only_b.imports, expected.imports)
    assert same_signatures(fm, only_b.exports, expected.exports)

def test_conditional_both(split):
    f, g, a, b, linked = split
    both = linked.and_fm(f & g).pack()
    expected = a.link(b).and_fm(f & g).pack()
    fm = both.feature_model
    assert same_signatures(fm, both.imports, expected.imports)
    assert same_signatures(fm, both.exports, expected.exports)

def test_conditional_neither(split):
    f, g, _, _, linked = split
    neither = linked.and_fm(~f & ~g).pack()
    assert neither.imports == ()
    assert neither.exports == ()

def test_conditional_feature_model(abc, factory):
    a, b, _ = abc
    x = make(factory, fm=b).conditional(a)
    assert x.feature_model.equivalent_to(a.implies(b))

# --- predicates ---

def test_single_export_is_wellformed(factory):
    x = make(factory, exports=[CSignature("foo", CInt(), factory.base)])
    assert x.is_wellformed()
    assert x.wellformedness_violations() == []

def test_double_export_is_not_wellformed(factory):
    x = make(factory, exports=[CSignature("foo", CInt(), factory.base),
                               CSignature("foo", CInt(), factory.base)])
    assert not x.is_wellformed()
    violations = x.wellformedness_violations()
    assert [v.name for v in violations] == ["foo"]
    assert len(violations[0].signatures) == 2

def test_import_and_export_of_same_name(abc, factory):
    a, _, _ = abc
    overlapping = make(factory, imports=[CSignature("foo", CInt(), a)],
                       exports=[CSignature("foo", CInt(), a)])
    assert not overlapping.is_wellformed()
    exclusive = make(factory, imports=[CSignature("foo", CInt(), a)],
                     exports=[CSignature("foo", CInt(), ~a)])
    assert exclusive.is_wellformed()

def test_wellformedness_respects_feature_model(abc, factory):
    a, b, _ = abc
    x = make(factory, fm=~(a & b),
             exports=[CSignature("foo", CInt(), a), CSignature("foo", CInt(), b)])
    assert x.is_wellformed()
    assert not x.map_fm(lambda fm: factory.base).is_wellformed()

def test_is_complete(abc, factory):
    a, _, _ = abc
    x = make(factory, exports=[CSignature("foo", CInt(), factory.base)])
    assert x.is_complete()
    y = make(factory, imports=[CSignature("bar", CInt(), a)],
             exports=[CSignature("foo", CInt(), factory.base)])
    assert not y.is_complete()
    assert not make(factory, fm=factory.dead).is_complete()

def test_is_fully_configured(abc, factory):
    a, b, _ = abc
    exact = make(factory, fm=a, exports=[CSignature("foo", CInt(), a)])
    assert exact.is_fully_configured()
    weaker = make(factory, fm=a | b, exports=[CSignature("foo", CInt(), a)])
    assert not weaker.is_fully_configured()

def test_compatible_with_global_feature_model(abc, factory):
    a, b, _ = abc
    x = make(factory, exports=[CSignature("foo", CInt(), a)])
    y = make(factory, exports=[CSignature("foo", CInt(), b)])
    linked = x.link(y)
    assert linked.compatible_with_global_feature_model(~(a & b))
    assert linked.compatible_with_global_feature_model(~a & ~b)
    assert not linked.compatible_with_global_feature_model(factory.base)
    assert linked.compatible_with_global_feature_model(FeatureModel.from_expr(~(a & b)))
    assert not linked.compatible_with_global_feature_model(FeatureModel.empty())

def test_and_leaves_feature_model(abc, factory):
    a, b, _ = abc
    x = make(factory, fm=b, exports=[CSignature("foo", CInt(), factory.base)])
    guarded = x.and_(a)
    assert guarded.feature_model == b
    assert guarded.exports[0].fexpr == a
    assert x.and_fm(a).feature_model == a & b
