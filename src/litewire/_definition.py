from __future__ import annotations

import inspect
import logging
import operator
import threading
from dataclasses import dataclass, fields
from typing import TYPE_CHECKING, Any, TypeVar, overload


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

    from ._circuit import Circuit
    from ._context import Context

    C = TypeVar("C", bound=type)

    Targets = Callable[[], Sequence[type]]
    TargetsArg = Targets | Sequence[type]
    Preconstruct = Callable[[tuple[Any, ...], Context], Any]
    PreconstructAsync = Callable[[tuple[Any, ...], Context], Awaitable[Callable[[], Any]]]
    SetupHook = Callable[[Any], Any]


@dataclass
class Definition:
    """How a registered type is built and where it lives."""

    target: type
    dependencies: Targets | None = None
    preloads: Targets | None = None
    preconstruct: Preconstruct | None = None
    preconstruct_async: PreconstructAsync | None = None
    setup: SetupHook | None = None
    singleton: Circuit | None = None

    @property
    def is_async(self) -> bool:
        return self.preconstruct_async is not None or self.setup is not None

    def get_dependencies(self) -> tuple[type, ...]:
        return tuple(self.dependencies()) if self.dependencies is not None else ()

    def get_preloads(self) -> tuple[type, ...]:
        return tuple(self.preloads()) if self.preloads is not None else ()

    def forwards_from(self, circuit: Circuit) -> bool:
        return self.singleton is not None and self.singleton is not circuit


_OPTIONS = frozenset(f.name for f in fields(Definition)) - {"target"}


class Registry:
    """Process-wide store holding at most one `Definition` per type."""

    def __init__(self) -> None:
        self._definitions: dict[type, Definition] = {}
        self._lock = threading.RLock()

    def __contains__(self, target: object) -> bool:
        return target in self._definitions

    def get(self, target: type, *, create: bool = False) -> Definition | None:
        definition = self._definitions.get(target)
        if definition is not None or not create:
            return definition

        with self._lock:
            return self._definitions.setdefault(target, Definition(target))

    def set(self, target: type, **options: Any) -> Definition:
        """Create or update the definition of `target`.

        Example:
          registry.set(Service, dependencies=lambda: [Repo], singleton=circuit)

        """
        unknown = set(options) - _OPTIONS
        if unknown:
            msg = f"Unknown definition options: {', '.join(sorted(unknown))}"
            raise TypeError(msg)

        with self._lock:
            definition = self._definitions.setdefault(target, Definition(target))
            for name, value in options.items():
                setattr(definition, name, value)

        logger.debug("Wired %s (%s)", target.__qualname__, ", ".join(sorted(options)) or "no options")
        return definition

    def remove(self, target: type) -> Definition | None:
        with self._lock:
            return self._definitions.pop(target, None)


registry = Registry()


def _targets(targets: TargetsArg | None) -> Targets | None:
    if targets is None or callable(targets):
        return targets

    if isinstance(targets, (str, bytes)):
        msg = f"Expected a sequence of types or a callable returning one, got {targets!r}"
        raise TypeError(msg)

    fixed = tuple(targets)
    return lambda: fixed


def unwire(target: type) -> None:
    registry.remove(target)


def is_wired(target: type) -> bool:
    return target in registry


def set_requires(target: type, dependencies: TargetsArg) -> None:
    registry.set(target, dependencies=_targets(dependencies))


def set_standalone(target: type) -> None:
    registry.set(target, dependencies=_targets(()))


def set_singleton(target: type, circuit: Circuit | None = None) -> None:
    """Resolve `target` through `circuit` (the default circuit when omitted) from every circuit."""
    if circuit is None:
        from ._circuit import Circuit  # noqa: PLC0415

        circuit = Circuit.get_default()

    registry.set(target, singleton=circuit)


def set_preconstruct(target: type, preconstruct: Preconstruct, dependencies: TargetsArg | None = None) -> None:
    """Build `target` with `preconstruct(dependencies, context)` instead of its constructor."""
    if not callable(preconstruct):
        msg = f"Preconstruct for {target.__qualname__} must be callable"
        raise TypeError(msg)

    registry.set(
        target,
        preconstruct=preconstruct,
        preconstruct_async=None,
        dependencies=_targets(dependencies),
    )


def set_preconstruct_async(
    target: type,
    preconstruct: PreconstructAsync,
    dependencies: TargetsArg | None = None,
) -> None:
    """Build `target` asynchronously.

    `preconstruct(dependencies, context)` is awaited and must return a zero-argument
    factory; the factory runs inside the construction context and returns the instance.
    """
    if not callable(preconstruct):
        msg = f"Async preconstruct for {target.__qualname__} must be callable"
        raise TypeError(msg)

    registry.set(
        target,
        preconstruct=None,
        preconstruct_async=preconstruct,
        dependencies=_targets(dependencies),
    )


def set_setup(target: type, hook: SetupHook | str) -> None:
    """Run `hook` on every new instance of `target` before it is cached.

    `hook` is called with the instance; a method name calls that method instead.
    A hook returning a function has that function called with the instance.
    Setup always requires the async path.
    """
    if isinstance(hook, str):
        hook = operator.methodcaller(hook)
    elif not callable(hook):
        msg = f"Setup hook for {target.__qualname__} must be callable or a method name, got {hook!r}"
        raise TypeError(msg)

    registry.set(target, setup=hook)


def set_preloads(target: type, preloads: TargetsArg) -> None:
    """Resolve `preloads` alongside the dependencies of `target` on the async path."""
    registry.set(target, preloads=_targets(preloads))


# class decorators


def requires(dependencies: TargetsArg) -> Callable[[C], C]:
    def decorator(target: C) -> C:
        set_requires(target, dependencies)
        return target

    return decorator


def standalone(target: C) -> C:
    set_standalone(target)
    return target


@overload
def singleton(circuit: C) -> C: ...


@overload
def singleton(circuit: Circuit | None = None) -> Callable[[C], C]: ...


def singleton(circuit: Any = None) -> Any:
    """Bind the decorated class to a circuit.

    Usable bare (`@singleton`, default circuit) or called (`@singleton(circuit)`).
    """
    if inspect.isclass(circuit):
        set_singleton(circuit)
        return circuit

    def decorator(target: C) -> C:
        set_singleton(target, circuit)
        return target

    return decorator


def preconstruct(fn: Preconstruct, dependencies: TargetsArg | None = None) -> Callable[[C], C]:
    def decorator(target: C) -> C:
        set_preconstruct(target, fn, dependencies)
        return target

    return decorator


def preconstruct_async(fn: PreconstructAsync, dependencies: TargetsArg | None = None) -> Callable[[C], C]:
    def decorator(target: C) -> C:
        set_preconstruct_async(target, fn, dependencies)
        return target

    return decorator


def setup(hook: SetupHook | str) -> Callable[[C], C]:
    def decorator(target: C) -> C:
        set_setup(target, hook)
        return target

    return decorator


def preloads(targets: TargetsArg) -> Callable[[C], C]:
    def decorator(target: C) -> C:
        set_preloads(target, targets)
        return target

    return decorator
