from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any, TypeVar

from ._definition import set_preconstruct, set_preconstruct_async, set_standalone
from ._provider import AsyncValueProvider, ValueProvider


if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from ._context import Context

T = TypeVar("T")


class BasicValueProvider(ValueProvider[T]):
    """Provider handing out a fixed `value`; subclass it and wire the subclass."""

    def __init__(self, value: T) -> None:
        self.value = value

    def get_value(self, context: Context) -> T:
        return self.value


def create_provider(get_value: Callable[[Context], T]) -> type[ValueProvider[T]]:
    """Provider class computing its value once per circuit, at construction."""

    class Provider(BasicValueProvider[T]):
        def __init__(self, context: Context) -> None:
            super().__init__(get_value(context))

    set_preconstruct(Provider, lambda _, context: Provider(context))
    return Provider


def create_async_provider(get_value: Callable[[Context], Awaitable[T]]) -> type[ValueProvider[T]]:
    """Like `create_provider` for an async `get_value`; resolve it with `tap_async` first."""

    class AsyncProvider(BasicValueProvider[T]):
        pass

    async def preconstruct(_: tuple[Any, ...], context: Context) -> Callable[[], AsyncProvider]:
        value = await get_value(context)
        return lambda: AsyncProvider(value)

    set_preconstruct_async(AsyncProvider, preconstruct)
    return AsyncProvider


def create_static_provider(value: T) -> type[ValueProvider[T]]:
    class StaticProvider(ValueProvider[T]):
        def get_value(self, context: Context) -> T:
            return value

    set_standalone(StaticProvider)
    return StaticProvider


def create_async_static_provider(value: Awaitable[T]) -> type[AsyncValueProvider[T]]:
    """Async provider for a single awaitable, awaited once and shared by every circuit."""
    shared: asyncio.Future[T] | None = None

    class AsyncStaticProvider(AsyncValueProvider[T]):
        def get_value(self, context: Context) -> Awaitable[T]:
            nonlocal shared
            if shared is None:
                shared = asyncio.ensure_future(value)
            return shared

    set_standalone(AsyncStaticProvider)
    return AsyncStaticProvider


def create_dynamic_provider(get_value: Callable[[Context], T]) -> type[ValueProvider[T]]:
    """Provider calling `get_value` on every resolution."""

    class DynamicProvider(ValueProvider[T]):
        def get_value(self, context: Context) -> T:
            return get_value(context)

    set_standalone(DynamicProvider)
    return DynamicProvider


def create_async_dynamic_provider(get_value: Callable[[Context], Awaitable[T]]) -> type[AsyncValueProvider[T]]:
    class AsyncDynamicProvider(AsyncValueProvider[T]):
        def get_value(self, context: Context) -> Awaitable[T]:
            return get_value(context)

    set_standalone(AsyncDynamicProvider)
    return AsyncDynamicProvider
