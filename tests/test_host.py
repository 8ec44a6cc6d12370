# tests/test_host.py
"""
Tests for the in-memory capability-secure substrate.
"""

import pytest

from valija.errors import FrozenObjectError, NotCallableError, ValijaTypeError
from valija.host import UNDEFINED, USELESS, HostFunction, JSObject, Primitives, positional_arity


class TestJSObject:

    def test_lookup_walks_chain(self):
        base = JSObject(props={"a": 1})
        child = JSObject(base, {"b": 2})
        assert child.lookup("a") == 1
        assert child.lookup("b") == 2
        assert child.lookup("c") is UNDEFINED
        assert child.has("a")
        assert not child.has_own("a")

    def test_enumerable_keys_order_and_shadowing(self):
        base = JSObject(props={"a": 1, "b": 2})
        child = JSObject(base, {"c": 3})
        child.put("b", 9, enumerable=False)
        # own first, then inherited; a hidden own name hides the inherited one
        assert child.enumerable_keys() == ["c", "a"]

    def test_frozen_rejects_writes_and_deletes(self):
        obj = JSObject(props={"a": 1}).freeze()
        with pytest.raises(FrozenObjectError):
            obj.put("a", 2)
        with pytest.raises(TypeError):
            obj.delete("a")
        assert obj.lookup("a") == 1

    def test_delete_reports_removal(self):
        obj = JSObject(props={"a": 1})
        assert obj.delete("a") is True
        assert obj.delete("a") is False

    def test_undefined_is_falsy_singleton(self):
        assert not UNDEFINED
        assert type(UNDEFINED)() is UNDEFINED
        assert repr(UNDEFINED) == "undefined"


class TestHostFunction:

    def test_categories_are_distinct(self, host):
        f = host.define_function("f", lambda this: 1)
        g = host.define_function("g", lambda this: 1)
        assert f.category != g.category
        assert host.func_category(f) == f.category

    def test_length_excludes_receiver(self, host):
        f = host.define_function("f", lambda this, a, b: a + b)
        assert f.arity == 2
        assert f.lookup("length") == 2
        assert not f.is_enumerable("length")

    def test_direct_call_uses_useless_receiver(self, host):
        f = host.define_function("who", lambda this: this)
        assert f() is USELESS

    def test_native_source(self, host):
        f = host.define_function("f", lambda this: 1)
        assert host.source_text(f) == "function f() {\n  [native code]\n}"

    def test_host_functions_are_frozen(self, point_ctor):
        assert point_ctor.frozen
        assert point_ctor.prototype.frozen
        with pytest.raises(FrozenObjectError):
            point_ctor.prototype.put("dist", lambda this: 0)


class TestHost:

    def test_satisfies_primitives_protocol(self, host):
        assert isinstance(host, Primitives)

    def test_freeze(self, host):
        obj = host.freeze(host.beget(host.object_prototype))
        with pytest.raises(FrozenObjectError):
            host.put(obj, "x", 1)
        assert host.arity(obj.lookup("hasOwnProperty")) == 1
        assert host.call(obj.lookup("hasOwnProperty"), obj, ["x"]) is False

    def test_type_tags(self, host, plain):
        assert host.type_tag(UNDEFINED) == "undefined"
        assert host.type_tag(None) == "object"
        assert host.type_tag(True) == "boolean"
        assert host.type_tag(3) == "number"
        assert host.type_tag(2.5) == "number"
        assert host.type_tag("s") == "string"
        assert host.type_tag(lambda: 0) == "function"
        assert host.type_tag(host.Object) == "function"
        assert host.type_tag(plain()) == "object"

    def test_enforce_type(self, host, plain):
        assert host.enforce_type(3, "number") == 3
        with pytest.raises(NotCallableError):
            host.enforce_type(plain(), "function")
        with pytest.raises(ValijaTypeError) as exc:
            host.enforce_type("s", "object", "outers")
        assert exc.value.expected_type == "object"
        assert exc.value.actual_type == "string"

    def test_beget_requires_object_or_null(self, host):
        assert host.beget(None).proto is None
        with pytest.raises(ValijaTypeError):
            host.beget(42)

    def test_super_ctor(self, host, point_ctor, point3_ctor):
        assert host.super_ctor(point3_ctor) is point_ctor
        assert host.super_ctor(point_ctor) is host.Object
        assert host.super_ctor(host.Object) is None
        assert host.super_ctor(lambda: 0) is None

    def test_method_names_skip_constructor_and_excluded(self, host, point_ctor):
        assert host.method_names(point_ctor) == ["norm", "valueOf"]
        assert host.method_names(point_ctor, exclude=("valueOf",)) == ["norm"]

    def test_own_property_names(self, host, point_ctor):
        names = host.own_property_names(point_ctor, exclude=("valueOf",))
        assert names == ["name", "length", "dimensions"]
        assert host.own_property_names(lambda: 0) == []

    def test_construct_and_instance_of(self, host, point_ctor, point3_ctor):
        p = host.construct(point3_ctor, [1, 2, 3])
        assert p.lookup("z") == 3
        assert host.instance_of(p, point3_ctor)
        assert host.instance_of(p, point_ctor)
        assert host.instance_of(p, host.Object)
        assert not host.instance_of(host.construct(point_ctor, [0, 0]), point3_ctor)

    def test_construct_rejects_plain_callables(self, host):
        with pytest.raises(ValijaTypeError):
            host.construct(lambda: 0, [])

    def test_function_constructor_unavailable(self, host):
        with pytest.raises(ValijaTypeError):
            host.construct(host.Function, ["return 1"])

    def test_direct_constructor(self, host, point_ctor, plain):
        assert host.direct_constructor(plain()) is host.Object
        assert host.direct_constructor(host.construct(point_ctor, [1, 1])) is point_ctor
        assert host.direct_constructor(JSObject()) is None
        assert host.direct_constructor(3) is None

    def test_primitive_ctor_registration(self, host):
        string = host.define_ctor("String", methods={"upper": lambda this: this.upper()})
        host.register_primitive_ctor(str, string)
        assert host.direct_constructor("abc") is string
        assert host.call(host.get("abc", "upper"), "abc", []) == "ABC"

    def test_property_of_null_raises(self, host):
        with pytest.raises(ValijaTypeError):
            host.get(None, "x")
        with pytest.raises(ValijaTypeError):
            host.put(UNDEFINED, "x", 1)

    def test_put_on_primitive_raises(self, host):
        with pytest.raises(ValijaTypeError):
            host.put("abc", "x", 1)

    def test_source_text_hook(self, host):
        def raw(dis):
            return None
        raw.__valija_source__ = "function raw($dis) {}"
        assert host.source_text(raw) == "function raw($dis) {}"

    def test_source_text_unavailable(self, host):
        assert host.source_text(len) is None

    def test_positional_arity(self):
        def f(a, b, c=1, *rest):
            return a
        assert positional_arity(f) == 2
        assert positional_arity(len) == 1
        assert isinstance(HostFunction(lambda this: 0), HostFunction)
