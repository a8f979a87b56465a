import pytest

from bindery import Injector, InjectorConfiguration, ResolutionError, UnresolvableTypeError


class Clock:
    def now(self) -> int:
        return 42


class Report:
    def __init__(self, stamp: int):
        self.stamp = stamp


@pytest.fixture
def injector():
    config = InjectorConfiguration()
    config.bind(Clock).to_self()
    return config.build_injector()


def test_execute_method_injects_parameters_in_order(injector):
    def make_report(clock: Clock, inj: Injector) -> Report:
        assert inj is injector
        return Report(clock.now())

    report = injector.execute_method(Report, make_report)

    assert isinstance(report, Report)
    assert report.stamp == 42


def test_execute_method_with_wrong_return_type_raises(injector):
    def make_clock(clock: Clock) -> Clock:
        return clock

    with pytest.raises(TypeError, match="wrong return type"):
        injector.execute_method(Report, make_clock)


def test_execute_method_without_return_annotation_raises(injector):
    with pytest.raises(TypeError):
        injector.execute_method(Report, lambda: Report(0))


def test_execute_method_none_return_type(injector):
    calls = []

    def side_effect(clock: Clock) -> None:
        calls.append(clock)

    assert injector.execute_method(None, side_effect) is None
    assert calls == [injector.resolve(Clock)]


def test_execute_method_wraps_exceptions(injector):
    def broken(clock: Clock) -> Report:
        msg = "no report today"
        raise KeyError(msg)

    with pytest.raises(ResolutionError) as ctx:
        injector.execute_method(Report, broken)
    assert isinstance(ctx.value.__cause__, KeyError)


def test_execute_method_unresolvable_parameter_raises(injector):
    def needs_report(report: Report) -> Report:
        return report

    with pytest.raises(UnresolvableTypeError):
        injector.execute_method(Report, needs_report)


def test_execute_method_none_raises_value_error(injector):
    with pytest.raises(ValueError, match="must not be None"):
        injector.execute_method(Report, None)


def test_execute_method_non_callable_raises_type_error(injector):
    with pytest.raises(TypeError):
        injector.execute_method(Report, 123)


def test_invoke_skips_return_type_check(injector):
    assert injector.invoke(lambda: "anything") == "anything"


def test_invoke_passes_positional_only_and_keyword_only(injector):
    def combine(clock: Clock, /, *, inj: Injector) -> tuple:
        return clock, inj

    clock, inj = injector.invoke(combine)
    assert isinstance(clock, Clock)
    assert inj is injector
