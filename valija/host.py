"""
valija/host.py
==============

In-memory model of the capability-secure object substrate the Valija
runtime sits on.

The runtime never mutates anything here that is frozen; it only needs
the primitives listed in the ``Primitives`` protocol.  ``Host`` is the
default implementation and is what the test-suite runs against.

This module provides:

* ``UNDEFINED``      – the ``undefined`` value
* ``JSObject``       – ordered property bag with a prototype link
* ``HostFunction``   – a genuine, frozen host callable
* ``USELESS``        – frozen receiver passed when there is no usable ``this``
* ``Primitives``     – the collaborator contract
* ``Host``           – default substrate, seeded with ``Object`` and ``Function``
"""

from __future__ import annotations

import inspect
import itertools
import logging
from typing import (
    Any,
    Callable,
    Dict,
    Hashable,
    Iterator,
    List,
    Mapping,
    Optional,
    Protocol,
    Sequence,
    Set,
    runtime_checkable,
)

from valija.errors import (
    FrozenObjectError,
    NotCallableError,
    ValijaErrorCodes,
    ValijaTypeError,
)

logger = logging.getLogger(__name__)

__all__ = [
    "UNDEFINED",
    "USELESS",
    "JSObject",
    "HostFunction",
    "Primitives",
    "Host",
    "positional_arity",
]


# ===================================================================== #
#  Values                                                               #
# ===================================================================== #

class _Undefined:
    """The ``undefined`` value.  A falsy singleton."""

    __slots__ = ()
    _instance: Optional["_Undefined"] = None

    def __new__(cls) -> "_Undefined":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "undefined"

    def __bool__(self) -> bool:
        return False


UNDEFINED = _Undefined()


class JSObject:
    """
    A property bag with a prototype link.

    Properties keep insertion order.  Each property is enumerable unless
    it was put with ``enumerable=False``.  ``freeze()`` is one-way; after
    it, ``put`` and ``delete`` raise ``FrozenObjectError``.
    """

    __slots__ = ("_proto", "_props", "_hidden", "_frozen")

    def __init__(
        self,
        proto: Optional["JSObject"] = None,
        props: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self._proto = proto
        self._props: Dict[str, Any] = dict(props or {})
        self._hidden: Set[str] = set()
        self._frozen = False

    @property
    def proto(self) -> Optional["JSObject"]:
        return self._proto

    @property
    def frozen(self) -> bool:
        return self._frozen

    def chain(self) -> Iterator["JSObject"]:
        """Yield strict ancestors, nearest first."""
        current = self._proto
        while current is not None:
            yield current
            current = current._proto

    def has_own(self, name: str) -> bool:
        return name in self._props

    def get_own(self, name: str, default: Any = UNDEFINED) -> Any:
        return self._props.get(name, default)

    def has(self, name: str) -> bool:
        if name in self._props:
            return True
        return any(name in o._props for o in self.chain())

    def lookup(self, name: str) -> Any:
        if name in self._props:
            return self._props[name]
        for ancestor in self.chain():
            if name in ancestor._props:
                return ancestor._props[name]
        return UNDEFINED

    def own_keys(self) -> List[str]:
        return list(self._props)

    def is_enumerable(self, name: str) -> bool:
        return name in self._props and name not in self._hidden

    def enumerable_keys(self) -> List[str]:
        """for-in order: own names first, then each ancestor's, skipping shadowed ones."""
        seen: Set[str] = set()
        out: List[str] = []
        obj: Optional[JSObject] = self
        while obj is not None:
            for name in obj._props:
                if name in seen:
                    continue
                seen.add(name)
                if name not in obj._hidden:
                    out.append(name)
            obj = obj._proto
        return out

    def put(self, name: str, value: Any, enumerable: bool = True) -> Any:
        if self._frozen:
            raise FrozenObjectError(name)
        self._props[name] = value
        if enumerable:
            self._hidden.discard(name)
        else:
            self._hidden.add(name)
        return value

    def delete(self, name: str) -> bool:
        if self._frozen:
            raise FrozenObjectError(name, action="delete")
        if name not in self._props:
            return False
        del self._props[name]
        self._hidden.discard(name)
        return True

    def freeze(self) -> "JSObject":
        self._frozen = True
        return self

    def __repr__(self) -> str:
        shown = ", ".join(f"{k}={v!r}" for k, v in self._props.items()
                          if k not in self._hidden and not isinstance(v, JSObject))
        return f"<JSObject {shown}>" if shown else "<JSObject>"


_CATEGORY_IDS = itertools.count(1)


def positional_arity(func: Callable[..., Any]) -> int:
    """Number of required positional parameters, or 0 if unknowable."""
    try:
        sig = inspect.signature(func)
    except (TypeError, ValueError):
        return 0
    positional = (
        inspect.Parameter.POSITIONAL_ONLY,
        inspect.Parameter.POSITIONAL_OR_KEYWORD,
    )
    return sum(
        1 for p in sig.parameters.values()
        if p.kind in positional and p.default is inspect.Parameter.empty
    )


class HostFunction(JSObject):
    """
    A genuine host callable.

    ``impl`` is invoked as ``impl(this, *args)``.  Every host function
    has a stable integer ``category``, a real ``prototype`` object, and
    hidden ``name`` / ``length`` own members.  ``Host`` freezes host
    functions and their prototypes once they are defined.
    """

    __slots__ = ("impl", "category", "prototype", "arity", "source")

    def __init__(
        self,
        impl: Callable[..., Any],
        name: str = "",
        *,
        proto: Optional[JSObject] = None,
        prototype: Optional[JSObject] = None,
        arity: Optional[int] = None,
        source: Optional[str] = None,
    ) -> None:
        super().__init__(proto)
        self.impl = impl
        self.category = next(_CATEGORY_IDS)
        self.prototype = prototype
        if arity is None:
            arity = max(positional_arity(impl) - 1, 0)
        self.arity = arity
        if source is None:
            source = f"function {name}() {{\n  [native code]\n}}"
        self.source = source
        self.put("name", name, enumerable=False)
        self.put("length", arity, enumerable=False)

    @property
    def name(self) -> str:
        return self.get_own("name", "")

    def __call__(self, *args: Any) -> Any:
        return self.impl(USELESS, *args)

    def __repr__(self) -> str:
        return f"<HostFunction {self.name or '(anonymous)'}>"


USELESS = JSObject().freeze()


# ===================================================================== #
#  Collaborator contract                                                #
# ===================================================================== #

@runtime_checkable
class Primitives(Protocol):
    """Operations the runtime requires of its object substrate."""

    def beget(self, proto: Optional[JSObject]) -> JSObject: ...
    def type_tag(self, value: Any) -> str: ...
    def enforce_type(self, value: Any, tag: str, what: str = "value") -> Any: ...
    def is_callable(self, value: Any) -> bool: ...
    def func_category(self, func: Any) -> Hashable: ...
    def super_ctor(self, func: Any) -> Any: ...
    def own_property_names(self, func: Any, exclude: Sequence[str] = ()) -> List[str]: ...
    def method_names(self, func: Any, exclude: Sequence[str] = ()) -> List[str]: ...
    def direct_constructor(self, obj: Any) -> Any: ...
    def inherits_from(self, obj: Any, proto: Any) -> bool: ...
    def instance_of(self, obj: Any, func: Any) -> bool: ...
    def call(self, func: Any, this: Any, args: Sequence[Any]) -> Any: ...
    def construct(self, ctor: Any, args: Sequence[Any]) -> Any: ...


# ===================================================================== #
#  Default substrate                                                    #
# ===================================================================== #

class Host:
    """
    The default capability-secure substrate.

    Seeds frozen ``Object`` and ``Function`` built-ins.  Further host
    constructors come from :meth:`define_ctor`; they are frozen along
    with their prototypes, so the only way to "patch" them is through
    the runtime's shadows.

    Usage::

        def init(this, x, y):
            this.put("x", x)
            this.put("y", y)

        host = Host()
        Point = host.define_ctor("Point", init, methods={
            "norm": lambda this: math.hypot(this.lookup("x"), this.lookup("y")),
        })
        p = host.construct(Point, [3, 4])
    """

    def __init__(self) -> None:
        self._primitive_ctors: Dict[type, HostFunction] = {}

        self.object_prototype = JSObject()
        self.function_prototype = JSObject(self.object_prototype)

        self.Object = HostFunction(
            self._object_impl,
            "Object",
            proto=self.function_prototype,
            prototype=self.object_prototype,
            arity=1,
        )
        self.Function = HostFunction(
            self._function_impl,
            "Function",
            proto=self.function_prototype,
            prototype=self.function_prototype,
            arity=1,
        )

        op = self.object_prototype
        op.put("constructor", self.Object, enumerable=False)
        op.put("toString", self.define_function("toString", lambda this: "[object Object]"),
               enumerable=False)
        op.put("valueOf", self.define_function("valueOf", lambda this: this),
               enumerable=False)
        op.put("hasOwnProperty",
               self.define_function("hasOwnProperty", lambda this, name: self.has_own(this, name)),
               enumerable=False)
        self.function_prototype.put("constructor", self.Function, enumerable=False)

        for obj in (op, self.function_prototype, self.Object, self.Function):
            obj.freeze()

    # -- built-in behavior -----------------------------------------------
    def _object_impl(self, this: Any, *args: Any) -> Any:
        if args and isinstance(args[0], JSObject):
            return args[0]
        if this is USELESS:
            return JSObject(self.object_prototype)
        return None

    def _function_impl(self, this: Any, *args: Any) -> Any:
        raise ValijaTypeError("Function constructor is not available inside the container")

    # -- definition helpers ----------------------------------------------
    def define_function(
        self,
        name: str,
        impl: Callable[..., Any],
        *,
        arity: Optional[int] = None,
        source: Optional[str] = None,
    ) -> HostFunction:
        """Define a frozen host function.  ``impl`` receives ``this`` first."""
        prototype = JSObject(self.object_prototype)
        func = HostFunction(
            impl, name,
            proto=self.function_prototype,
            prototype=prototype,
            arity=arity,
            source=source,
        )
        prototype.put("constructor", func, enumerable=False)
        prototype.freeze()
        return func.freeze()

    def define_ctor(
        self,
        name: str,
        init: Optional[Callable[..., Any]] = None,
        *,
        super_ctor: Optional[HostFunction] = None,
        methods: Optional[Mapping[str, Callable[..., Any]]] = None,
        statics: Optional[Mapping[str, Any]] = None,
        arity: Optional[int] = None,
        source: Optional[str] = None,
    ) -> HostFunction:
        """
        Define a frozen host constructor.

        ``methods`` become hidden members of the (frozen) prototype, the
        way built-in methods are non-enumerable.  ``statics`` become
        enumerable own members of the constructor.
        """
        parent = super_ctor.prototype if super_ctor is not None else self.object_prototype
        prototype = JSObject(parent)
        ctor = HostFunction(
            init or (lambda this, *args: None),
            name,
            proto=self.function_prototype,
            prototype=prototype,
            arity=arity,
            source=source,
        )
        prototype.put("constructor", ctor, enumerable=False)
        for mname, impl in (methods or {}).items():
            prototype.put(mname, self.define_function(mname, impl), enumerable=False)
        for sname, value in (statics or {}).items():
            ctor.put(sname, value)
        prototype.freeze()
        return ctor.freeze()

    def register_primitive_ctor(self, py_type: type, ctor: HostFunction) -> None:
        """Make ``ctor`` the direct constructor of every ``py_type`` value."""
        self._primitive_ctors[py_type] = ctor

    # -- type tags ---------------------------------------------------------
    def is_callable(self, value: Any) -> bool:
        return callable(value)

    def type_tag(self, value: Any) -> str:
        if value is UNDEFINED:
            return "undefined"
        if value is None:
            return "object"
        if isinstance(value, bool):
            return "boolean"
        if isinstance(value, (int, float)):
            return "number"
        if isinstance(value, str):
            return "string"
        if callable(value):
            return "function"
        return "object"

    def enforce_type(self, value: Any, tag: str, what: str = "value") -> Any:
        actual = self.type_tag(value)
        if actual != tag:
            if tag == "function":
                raise NotCallableError(what, actual_type=actual)
            raise ValijaTypeError(
                f"{what} must be of type {tag}",
                expected_type=tag,
                actual_type=actual,
            )
        return value

    # -- object graph ------------------------------------------------------
    def beget(self, proto: Optional[JSObject], props: Optional[Mapping[str, Any]] = None) -> JSObject:
        if proto is not None and not isinstance(proto, JSObject):
            raise ValijaTypeError(
                "prototype must be an object or null",
                expected_type="object",
                actual_type=self.type_tag(proto),
            )
        return JSObject(proto, props)

    def freeze(self, obj: JSObject) -> JSObject:
        return obj.freeze()

    def prototype_of(self, value: Any) -> Optional[JSObject]:
        """The real chain-parent of ``value``, or ``None``."""
        if isinstance(value, JSObject):
            return value.proto
        if callable(value):
            return self.function_prototype
        ctor = self._primitive_ctors.get(type(value))
        if ctor is not None:
            return ctor.prototype
        return None

    def _check_base(self, value: Any, name: str, action: str) -> None:
        if value is None or value is UNDEFINED:
            raise ValijaTypeError(
                f"cannot {action} property '{name}' of {value!r}",
                code=ValijaErrorCodes.NULL_BASE,
            )

    def has_own(self, value: Any, name: str) -> bool:
        return isinstance(value, JSObject) and value.has_own(name)

    def has(self, value: Any, name: str) -> bool:
        self._check_base(value, name, "read")
        if isinstance(value, JSObject):
            return value.has(name)
        proto = self.prototype_of(value)
        return proto is not None and proto.has(name)

    def get(self, value: Any, name: str) -> Any:
        self._check_base(value, name, "read")
        if isinstance(value, JSObject):
            return value.lookup(name)
        proto = self.prototype_of(value)
        return proto.lookup(name) if proto is not None else UNDEFINED

    def put(self, value: Any, name: str, new_value: Any) -> Any:
        self._check_base(value, name, "set")
        if not isinstance(value, JSObject):
            raise ValijaTypeError(
                f"cannot set property '{name}' on a {self.type_tag(value)}",
                code=ValijaErrorCodes.PRIMITIVE_BASE,
            )
        return value.put(name, new_value)

    def delete(self, value: Any, name: str) -> bool:
        self._check_base(value, name, "delete")
        if not isinstance(value, JSObject):
            return False
        return value.delete(name)

    def enumerable_keys(self, value: Any) -> List[str]:
        if isinstance(value, JSObject):
            return value.enumerable_keys()
        proto = self.prototype_of(value)
        return proto.enumerable_keys() if proto is not None else []

    def is_enumerable(self, value: Any, name: str) -> bool:
        return isinstance(value, JSObject) and value.is_enumerable(name)

    def inherits_from(self, obj: Any, proto: Any) -> bool:
        """True if ``proto`` is a strict ancestor of ``obj``."""
        if not isinstance(proto, JSObject):
            return False
        if isinstance(obj, JSObject):
            return any(ancestor is proto for ancestor in obj.chain())
        if callable(obj):
            start = self.function_prototype
            return start is proto or any(a is proto for a in start.chain())
        return False

    def instance_of(self, obj: Any, func: Any) -> bool:
        if isinstance(func, HostFunction) and func.prototype is not None:
            return self.inherits_from(obj, func.prototype)
        return False

    def direct_constructor(self, obj: Any) -> Any:
        """The ``constructor`` owned by ``obj``'s immediate prototype, or ``None``."""
        proto = self.prototype_of(obj)
        if proto is None or not proto.has_own("constructor"):
            return None
        return proto.get_own("constructor")

    # -- callables ---------------------------------------------------------
    def func_category(self, func: Any) -> Hashable:
        self.enforce_type(func, "function", "func_category argument")
        if isinstance(func, HostFunction):
            return func.category
        # Keyed by identity.  The shadow's pseudo-prototype holds
        # ``constructor = func``, so the id is not reused while the entry lives.
        return ("py", id(func))

    def super_ctor(self, func: Any) -> Any:
        """Nearest real ancestor constructor of ``func``, or ``None``."""
        self.enforce_type(func, "function", "super_ctor argument")
        if not isinstance(func, HostFunction) or func.prototype is None:
            return None
        parent = self.direct_constructor(func.prototype)
        if parent is func or not callable(parent):
            return None
        return parent

    def own_property_names(self, func: Any, exclude: Sequence[str] = ()) -> List[str]:
        if not isinstance(func, JSObject):
            return []
        return [name for name in func.own_keys() if name not in exclude]

    def method_names(self, func: Any, exclude: Sequence[str] = ()) -> List[str]:
        """Names of real methods owned by ``func``'s prototype."""
        if not isinstance(func, HostFunction) or func.prototype is None:
            return []
        prototype = func.prototype
        return [
            name for name in prototype.own_keys()
            if name != "constructor"
            and name not in exclude
            and callable(prototype.get_own(name))
        ]

    def call(self, func: Any, this: Any, args: Sequence[Any]) -> Any:
        self.enforce_type(func, "function")
        if isinstance(func, HostFunction):
            return func.impl(this, *args)
        return func(*args)

    def construct(self, ctor: Any, args: Sequence[Any]) -> Any:
        self.enforce_type(ctor, "function", "constructor")
        if not isinstance(ctor, HostFunction) or ctor.prototype is None:
            raise ValijaTypeError(
                f"{ctor!r} is not a constructor",
                expected_type="constructor",
                actual_type=self.type_tag(ctor),
            )
        obj = JSObject(ctor.prototype)
        result = ctor.impl(obj, *args)
        if isinstance(result, JSObject) or callable(result):
            return result
        return obj

    def arity(self, func: Any) -> int:
        if isinstance(func, HostFunction):
            return func.arity
        return positional_arity(func)

    def source_text(self, func: Any) -> Optional[str]:
        """Textual form of ``func``, or ``None`` when it has none."""
        if isinstance(func, HostFunction):
            return func.source
        text = getattr(func, "__valija_source__", None)
        if text is not None:
            return text
        try:
            return inspect.getsource(func)
        except (OSError, TypeError):
            logger.debug("no source text for %r", func)
            return None
