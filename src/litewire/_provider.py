from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from ._errors import InvalidProvidableError


if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from ._context import Context

T = TypeVar("T")


@dataclass(frozen=True)
class ProviderInfo(Generic[T]):
    """Tag telling a circuit to hand out `get_value(context)` instead of the instance.

    With `is_async=True`, `get_value` may return an awaitable which only
    `tap_async` can wait for.
    """

    get_value: Callable[[Context], T | Awaitable[T]]
    is_async: bool = False


class Providable(ABC):
    """Capability for instances that substitute a computed value on resolution."""

    @property
    @abstractmethod
    def provider(self) -> ProviderInfo[Any]: ...


class ValueProvider(Providable, Generic[T]):
    """Base class for sync value providers; `get_value` is called on every resolution."""

    @abstractmethod
    def get_value(self, context: Context) -> T: ...

    @property
    def provider(self) -> ProviderInfo[T]:
        return ProviderInfo(self.get_value)


class AsyncValueProvider(Providable, Generic[T]):
    """Base class for async value providers, resolvable with `tap_async` only."""

    @abstractmethod
    def get_value(self, context: Context) -> Awaitable[T]: ...

    @property
    def provider(self) -> ProviderInfo[T]:
        return ProviderInfo(self.get_value, is_async=True)


def provider_info(instance: object, target: type) -> ProviderInfo[Any] | None:
    """Return the provider tag of `instance`, `None` for plain values."""
    if not isinstance(instance, Providable):
        return None

    info = instance.provider
    if not isinstance(info, ProviderInfo) or not callable(info.get_value) or not isinstance(info.is_async, bool):
        raise InvalidProvidableError(target)

    return info
