import asyncio
import unittest

import pytest

from litewire import AsyncDependencyError, Circuit, set_setup, set_standalone, setup


class TestSetupHooks(unittest.IsolatedAsyncioTestCase):
    circuit: Circuit

    def setUp(self):
        self.circuit = Circuit()

    async def test_function_hook_runs_once_per_circuit(self):
        calls = []

        class Service:
            name = "Setup"

        def hook(instance):
            assert isinstance(instance, Service)
            calls.append(instance)

        set_setup(Service, hook)

        first = await self.circuit.tap_async(Service)
        assert first.name == "Setup"
        assert calls == [first]

        assert self.circuit.tap(Service) is first
        assert len(calls) == 1

        other = await Circuit().tap_async(Service)
        assert other is not first
        assert len(calls) == 2

    async def test_async_inline_hook(self):
        class Service:
            initialized = False

        async def hook(instance):
            await asyncio.sleep(0.01)
            instance.initialized = True

        set_setup(Service, hook)

        svc = await self.circuit.tap_async(Service)
        assert svc.initialized
        assert self.circuit.tap(Service) is svc

    async def test_hook_returning_unbound_method(self):
        class Service:
            initialized = False

            async def inline_setup(self):
                await asyncio.sleep(0.01)
                self.initialized = True

        set_setup(Service, lambda _: Service.inline_setup)

        svc = await self.circuit.tap_async(Service)
        assert svc.initialized

    async def test_method_name_hook(self):
        @setup("start")
        class Service:
            started = 0

            async def start(self):
                await asyncio.sleep(0)
                self.started += 1

        svc = await self.circuit.tap_async(Service)
        assert svc.started == 1

    async def test_setup_makes_type_async(self):
        class Service: ...

        set_standalone(Service)
        set_setup(Service, lambda instance: None)

        assert self.circuit.is_async(Service)
        with pytest.raises(AsyncDependencyError):
            self.circuit.tap(Service)

    async def test_failing_hook_leaves_cache_empty(self):
        attempts = []

        class Service: ...

        async def hook(instance):
            attempts.append(instance)
            if len(attempts) == 1:
                raise RuntimeError("setup failed")

        set_setup(Service, hook)

        with pytest.raises(RuntimeError, match="setup failed"):
            await self.circuit.tap_async(Service)
        assert not self.circuit.is_installed(Service)

        svc = await self.circuit.tap_async(Service)
        assert svc is attempts[1]
        assert svc is not attempts[0]


def test_setup_rejects_non_callable_hook():
    class Service: ...

    with pytest.raises(TypeError):
        set_setup(Service, 42)
