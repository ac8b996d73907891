import pytest

from gotenberg.context import Context, ModuleLoadError
from gotenberg.flags import FlagSet, ParsedFlags
from gotenberg.modules import ModuleDescriptor, Provisioner, Validator


class _Provisioned:
    def __init__(self, error=None):
        self.error = error
        self.calls = 0
        self.seen_ctx = None

    def descriptor(self):
        return ModuleDescriptor(id="foo", new=lambda: self)

    def provision(self, ctx):
        self.calls += 1
        self.seen_ctx = ctx
        if self.error:
            raise self.error


class _Validated:
    def __init__(self, error=None):
        self.error = error

    def descriptor(self):
        return ModuleDescriptor(id="foo", new=lambda: self)

    def validate(self):
        if self.error:
            raise self.error


def test_module_provision_error():
    mod = _Provisioned(RuntimeError("foo"))
    ctx = Context(ParsedFlags(), [mod.descriptor()])
    with pytest.raises(ModuleLoadError, match="provision module foo"):
        ctx.module(Provisioner)


def test_module_two_instead_of_one():
    mod = _Provisioned()
    ctx = Context(ParsedFlags(), [mod.descriptor(), mod.descriptor()])
    with pytest.raises(ModuleLoadError, match="one and only one"):
        ctx.module(Provisioner)


def test_module_success_and_cached():
    mod = _Provisioned()
    ctx = Context(ParsedFlags(), [mod.descriptor()])
    assert ctx.module(Provisioner) is mod
    assert ctx.module(Provisioner) is mod
    assert mod.calls == 1
    assert mod.seen_ctx is ctx
    assert ctx.module_instances() == {"foo": mod}


def test_modules_provision_error():
    mod = _Provisioned(RuntimeError("foo"))
    ctx = Context(ParsedFlags(), [mod.descriptor()])
    with pytest.raises(ModuleLoadError):
        ctx.modules(Provisioner)
    assert ctx.module_instances() == {}


def test_modules_same_descriptor_twice():
    mod = _Provisioned()
    ctx = Context(ParsedFlags(), [mod.descriptor(), mod.descriptor()])
    assert ctx.modules(Provisioner) == [mod, mod]
    assert mod.calls == 1


def test_modules_one():
    mod = _Provisioned()
    ctx = Context(ParsedFlags(), [mod.descriptor()])
    assert ctx.modules(Provisioner) == [mod]


def test_validation_error():
    mod = _Validated(ValueError("foo"))
    ctx = Context(ParsedFlags(), [mod.descriptor()])
    with pytest.raises(ModuleLoadError, match="validate module foo"):
        ctx.modules(Validator)


def test_validation_success():
    mod = _Validated()
    ctx = Context(ParsedFlags(), [mod.descriptor()])
    assert ctx.modules(Validator) == [mod]


def test_kind_filters_modules():
    mod = _Provisioned()
    ctx = Context(ParsedFlags(), [mod.descriptor()])
    assert ctx.modules(Validator) == []
    assert mod.calls == 0


def test_parsed_flags():
    flags = ParsedFlags(FlagSet("x"))
    assert Context(flags, []).parsed_flags() is flags