import pytest

from litewire import (
    Circuit,
    Registry,
    UnwiredError,
    is_wired,
    preconstruct,
    preconstruct_async,
    preloads,
    registry,
    requires,
    set_preconstruct,
    set_preconstruct_async,
    set_requires,
    set_standalone,
    standalone,
    unwire,
)


def test_registry_set_get_remove():
    reg = Registry()

    class A: ...

    assert reg.get(A) is None
    assert A not in reg

    created = reg.get(A, create=True)
    assert created.target is A
    assert reg.get(A) is created

    updated = reg.set(A, dependencies=lambda: [])
    assert updated is created
    assert updated.get_dependencies() == ()

    assert reg.remove(A) is created
    assert reg.remove(A) is None
    assert A not in reg


def test_registry_rejects_unknown_options():
    class A: ...

    with pytest.raises(TypeError):
        Registry().set(A, lifetime="transient")


def test_unwire_removes_definition():
    class A: ...

    set_standalone(A)
    assert is_wired(A)

    unwire(A)
    assert not is_wired(A)
    with pytest.raises(UnwiredError):
        Circuit().tap(A)


def test_rewiring_updates_the_single_definition():
    class A: ...

    class B: ...

    class Service:
        def __init__(self, *deps):
            self.deps = deps

    set_requires(Service, [A])
    first = registry.get(Service)
    set_requires(Service, [A, B])

    assert registry.get(Service) is first
    assert first.get_dependencies() == (A, B)


def test_dependencies_can_reference_later_types():
    class Service:
        def __init__(self, repo):
            self.repo = repo

    set_requires(Service, lambda: [Repository])

    class Repository: ...

    set_standalone(Repository)

    assert isinstance(Circuit().tap(Service).repo, Repository)


def test_dependencies_must_be_types_not_strings():
    class A: ...

    with pytest.raises(TypeError):
        set_requires(A, "Database")


def test_preconstruct_setters_replace_each_other():
    class A: ...

    async def make_async(_, __):
        return A

    set_preconstruct_async(A, make_async)
    assert registry.get(A).is_async

    set_preconstruct(A, lambda _, __: A())
    definition = registry.get(A)
    assert not definition.is_async
    assert definition.preconstruct_async is None
    assert isinstance(Circuit().tap(A), A)


def test_preconstruct_replaces_dependencies():
    class Dep: ...

    class A: ...

    set_requires(A, [Dep])
    set_preconstruct(A, lambda deps, _: A())

    assert registry.get(A).get_dependencies() == ()


def test_decorators_return_the_class():
    @standalone
    class Dep: ...

    @requires(lambda: [Dep])
    class Service:
        def __init__(self, dep):
            self.dep = dep

    @preloads([Dep])
    @preconstruct(lambda deps, _: Built(*deps), [Dep])
    class Built:
        def __init__(self, dep):
            self.dep = dep

    async def make(_, __):
        return Later

    @preconstruct_async(make)
    class Later: ...

    assert isinstance(Service, type)
    assert isinstance(Built, type)
    assert registry.get(Built).get_preloads() == (Dep,)
    assert registry.get(Later).is_async

    c = Circuit()
    assert c.tap(Service).dep is c.tap(Dep)
    assert c.tap(Built).dep is c.tap(Dep)


def test_preconstruct_setters_reject_non_callables():
    class A: ...

    with pytest.raises(TypeError):
        set_preconstruct(A, "make_a")

    with pytest.raises(TypeError):
        set_preconstruct_async(A, None)

    assert not is_wired(A)
