"""Passable state handling and pipeline short-circuiting."""

from __future__ import annotations

from dataclasses import dataclass, field

import pytest

from modelintel.config import AnalysisConfig
from modelintel.errors import InvalidStateError
from modelintel.methods import MacrosPipe, Passable, Pipeline, PipeFactory, SelfClassPipe
from modelintel.methods.pipeline import Next
from modelintel.reflection import MacroMethod, NativeMethod, RuntimeBroker, StaticForwardingMethod
from tests._helpers.expect import expect_equal, expect_false, expect_true
from tests.fixtures import models

CLOCK = "tests.fixtures.models.Clock"


@dataclass
class RecordingPipe:
    """Pipe double that records visits and optionally claims or raises."""

    name: str
    claim: bool = False
    fail_on: str | None = None
    seen: list[str] = field(default_factory=list)

    def handle(self, passable: Passable, next_: Next) -> Passable:
        self.seen.append(passable.class_ref.name)
        if self.fail_on == passable.class_ref.name:
            message = f"{self.name} failed"
            raise RuntimeError(message)
        if self.claim:
            passable.set_method(NativeMethod(passable.method_name, passable.class_ref.name, False))
            return passable
        return next_(passable)


def _passable(
    broker: RuntimeBroker,
    pipeline: Pipeline,
    cls: type,
    name: str,
    statics: tuple[str, ...] = (),
) -> Passable:
    return Passable(broker, pipeline, broker.describe(cls), name, statics=statics)


def test_pipes_run_in_order_until_one_claims(broker: RuntimeBroker) -> None:
    """A claiming pipe stops the chain and skips the destination."""
    first = RecordingPipe("first")
    second = RecordingPipe("second", claim=True)
    third = RecordingPipe("third")
    pipeline = Pipeline([first, second, third])
    reached: list[Passable] = []

    passable = _passable(broker, pipeline, models.Mailer, "send")
    result = pipeline.send(passable).then(lambda p: reached.append(p) or p)

    expect_true(result is passable)
    expect_equal((len(first.seen), len(second.seen), len(third.seen)), (1, 1, 0))
    expect_equal(reached, [])
    expect_true(passable.has_found())


def test_destination_runs_when_no_pipe_claims(broker: RuntimeBroker) -> None:
    """The destination receives the passable after every pipe passed."""
    pipeline = Pipeline([RecordingPipe("a"), RecordingPipe("b")])
    reached: list[Passable] = []
    passable = _passable(broker, pipeline, models.Mailer, "send")
    pipeline.send(passable).then(lambda p: reached.append(p) or p)
    expect_equal(reached, [passable])
    expect_false(passable.has_found())


def test_get_method_before_resolution_raises(broker: RuntimeBroker) -> None:
    """No method recorded yet is an invalid state."""
    passable = _passable(broker, Pipeline([]), models.Mailer, "send")
    with pytest.raises(InvalidStateError):
        passable.get_method()


def test_search_on_records_native_methods(broker: RuntimeBroker) -> None:
    """search_on only succeeds for methods the class defines."""
    passable = _passable(broker, Pipeline([]), models.Mail, "send")
    expect_false(passable.search_on("tests.fixtures.models.Mail"))
    expect_true(passable.search_on("tests.fixtures.models.Mailer"))
    expect_equal(passable.get_method().declaring_class, "tests.fixtures.models.Mailer")


def test_static_allowance_is_monotone(broker: RuntimeBroker) -> None:
    """Once raised, static allowance never drops."""
    passable = _passable(broker, Pipeline([]), models.Mailer, "send")
    expect_false(passable.static_allowed)
    passable.allow_static(True)
    passable.allow_static(False)
    expect_true(passable.static_allowed)


def test_send_to_pipeline_wraps_native_methods_and_merges_back(broker: RuntimeBroker) -> None:
    """A delegated native method comes back wrapped; the outer class stays bound."""
    pipeline = Pipeline([SelfClassPipe()])
    passable = _passable(broker, pipeline, models.Mail, "send")
    original = passable.class_ref

    expect_true(passable.send_to_pipeline("tests.fixtures.models.Mailer", static_allowed=True))
    method = passable.get_method()
    expect_equal(type(method), StaticForwardingMethod)
    expect_true(method.is_static)
    expect_equal(method.name, "send")
    expect_true(passable.static_allowed)
    expect_true(passable.class_ref is original)


def test_static_flag_persists_when_delegation_misses(broker: RuntimeBroker) -> None:
    """The allowance is raised before delegating, found or not."""
    pipeline = Pipeline([SelfClassPipe()])
    passable = _passable(broker, pipeline, models.Mail, "missing")
    expect_false(passable.send_to_pipeline("tests.fixtures.models.Mailer", static_allowed=True))
    expect_true(passable.static_allowed)
    expect_false(passable.has_found())


def test_configured_statics_upgrade_delegation(broker: RuntimeBroker) -> None:
    """Targets listed as always-static raise the allowance without being asked."""
    pipeline = Pipeline([SelfClassPipe()])
    upgraded = _passable(broker, pipeline, models.Scheduler, "now", statics=(CLOCK,))
    expect_true(upgraded.send_to_pipeline(CLOCK))
    expect_true(upgraded.static_allowed)

    plain = _passable(broker, pipeline, models.Scheduler, "now")
    expect_true(plain.send_to_pipeline(CLOCK))
    expect_false(plain.static_allowed)


def test_static_allowance_reaches_macros(broker: RuntimeBroker) -> None:
    """Macros resolved on a static-allowed passable are static."""
    pipeline = Pipeline([MacrosPipe()])
    passable = _passable(broker, pipeline, models.User, "recent")
    passable.allow_static(True)
    pipeline.send(passable).then(lambda p: p)
    method = passable.get_method()
    expect_equal(type(method), MacroMethod)
    expect_true(method.is_static)


def test_outer_class_restored_when_a_pipe_raises(broker: RuntimeBroker) -> None:
    """Failures inside delegation propagate and leave the outer binding intact."""
    failing = RecordingPipe("boom", fail_on="tests.fixtures.models.Mailer")
    pipeline = Pipeline([failing])
    passable = _passable(broker, pipeline, models.Mail, "send")
    original = passable.class_ref
    with pytest.raises(RuntimeError):
        passable.send_to_pipeline("tests.fixtures.models.Mailer")
    expect_true(passable.class_ref is original)
    expect_false(passable.has_found())


def test_unresolvable_targets_are_skipped(broker: RuntimeBroker) -> None:
    """A delegation target that cannot be imported yields no method."""
    passable = _passable(broker, Pipeline([SelfClassPipe()]), models.Mail, "send")
    expect_false(passable.send_to_pipeline("tests.fixtures.models.Nowhere"))


def test_pipe_factory_follows_configured_order() -> None:
    """Configured pipe names build the matching strategies in order."""
    cfg = AnalysisConfig(pipes=("macros", "self_class"))
    names = [pipe.name for pipe in PipeFactory(cfg).build()]
    expect_equal(names, ["macros", "self_class"])
