from __future__ import annotations

import asyncio
import importlib
import inspect
from typing import TYPE_CHECKING, Any, TypeVar

from ._circuit import Circuit
from ._definition import set_preconstruct, set_preconstruct_async, set_requires, set_standalone
from ._provider import Providable, ProviderInfo
from ._providers import create_async_provider


if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Mapping

    from ._context import Context
    from ._definition import TargetsArg

    C = TypeVar("C", bound=type)
    Chooser = Callable[[tuple[Any, ...], Context], type]
    AsyncChooser = Callable[[tuple[Any, ...], Context], "Awaitable[type] | type"]


def combine(get_targets: Callable[[], Mapping[str, type]]) -> type[Providable]:
    """Provider class resolving a mapping of types to a dict of their values.

    Example:
      Services = combine(lambda: {"db": Database, "cache": Cache})
      services = circuit.tap(Services)  # {"db": <Database>, "cache": <Cache>}

    The provider is async when any of the targets is.
    """

    class CombineProvider(Providable):
        def __init__(self, circuit: Circuit) -> None:
            targets = dict(get_targets())
            is_async = any(circuit.is_async(target) for target in targets.values())

            def get_value(_: Context) -> Any:
                if is_async:
                    return _resolve_async(circuit, targets)
                return {key: circuit.tap(target) for key, target in targets.items()}

            self._provider = ProviderInfo(get_value, is_async=is_async)

        @property
        def provider(self) -> ProviderInfo[Any]:
            return self._provider

    set_requires(CombineProvider, lambda: [Circuit])
    return CombineProvider


async def _resolve_async(circuit: Circuit, targets: Mapping[str, type]) -> dict[str, Any]:
    values = await asyncio.gather(*(circuit.tap_async(target) for target in targets.values()))
    return dict(zip(targets, values, strict=True))


def with_circuit(circuit: Circuit, get_target: Callable[[], type]) -> type[Providable]:
    """Provider class resolving `get_target()` on `circuit`, whatever circuit taps the provider.

    Useful to pin a type to a circuit without making it a singleton.
    """

    class WithCircuit(Providable):
        def __init__(self) -> None:
            target = get_target()
            is_async = circuit.is_async(target)

            def get_value(_: Context) -> Any:
                return circuit.tap_async(target) if is_async else circuit.tap(target)

            self._provider = ProviderInfo(get_value, is_async=is_async)

        @property
        def provider(self) -> ProviderInfo[Any]:
            return self._provider

    set_standalone(WithCircuit)
    return WithCircuit


def set_conditional(target: type, choose: Chooser, dependencies: TargetsArg | None = None) -> None:
    """Build `target` as whatever type `choose(dependencies, context)` selects.

    The selected type is resolved on the same circuit, so it is shared with
    direct resolutions of that type.
    """

    def preconstruct(resolved: tuple[Any, ...], context: Context) -> Any:
        return context.circuit.tap(choose(resolved, context))

    set_preconstruct(target, preconstruct, dependencies)


def set_conditional_async(target: type, choose: AsyncChooser, dependencies: TargetsArg | None = None) -> None:
    async def preconstruct(resolved: tuple[Any, ...], context: Context) -> Callable[[], Any]:
        selected = choose(resolved, context)
        if inspect.isawaitable(selected):
            selected = await selected
        instance = await context.circuit.tap_async(selected)
        return lambda: instance

    set_preconstruct_async(target, preconstruct, dependencies)


def conditional(choose: Chooser, dependencies: TargetsArg | None = None) -> Callable[[C], C]:
    def decorator(target: C) -> C:
        set_conditional(target, choose, dependencies)
        return target

    return decorator


def conditional_async(choose: AsyncChooser, dependencies: TargetsArg | None = None) -> Callable[[C], C]:
    def decorator(target: C) -> C:
        set_conditional_async(target, choose, dependencies)
        return target

    return decorator


def lazy(module: str, name: str) -> type[Providable]:
    """Async provider importing `module` on first resolution and resolving its `name` attribute.

    Example:
      Reports = lazy("myapp.reports", "ReportService")
      reports = await circuit.tap_async(Reports)

    """

    async def load(context: Context) -> Any:
        target = getattr(importlib.import_module(module), name)
        return await context.circuit.tap_async(target)

    return create_async_provider(load)
