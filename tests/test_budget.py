import math

import pytest

from rendering.budget import BudgetSettings, IterationBudgetController
from utils.enums import RenderState


@pytest.fixture
def controller():
    return IterationBudgetController()


@pytest.fixture
def wide():
    # ceiling 1024
    return IterationBudgetController(BudgetSettings(cap=10))


def test_initial_state(controller):
    assert controller.budget == 25
    assert controller.state == RenderState.IDLE
    assert controller.target_duration == 0.5
    assert controller.cap == 3
    assert controller.ceiling == 8


def test_first_render_uses_unclamped_initial_budget(controller):
    assert controller.begin_render() == 25
    assert controller.is_rendering
    assert controller.finish_render(0.5) == 8
    assert controller.state == RenderState.IDLE


@pytest.mark.parametrize("duration, expected", [
    (0.1, 125),
    (0.25, 50),
    (0.5, 25),
    (5.0, 8),      # 2.5 rounds down to 2, then floor
    (1e-9, 1024),  # far below target -> ceiling
])
def test_proportional_step(wide, duration, expected):
    assert wide.adjust(duration) == expected
    assert wide.last_duration == duration


@pytest.mark.parametrize("duration", [None, 0.0, -1.0, float("nan")])
def test_unusable_durations_leave_budget(wide, duration):
    assert wide.adjust(duration) == 25
    assert wide.last_duration is None


def test_infinite_duration_goes_to_floor(wide):
    assert wide.adjust(float("inf")) == 8


def test_denormal_duration_goes_to_ceiling(wide):
    assert wide.adjust(5e-324) == 1024


def test_budget_always_within_bounds(wide):
    for exp in range(-12, 6):
        for mantissa in (1.0, 2.5, 7.3):
            budget = wide.adjust(mantissa * 10.0 ** exp)
            assert 8 <= budget <= wide.ceiling
            assert isinstance(budget, int)


def test_converges_when_time_is_linear_in_budget(wide):
    # 1 ms per iteration -> 500 iterations hit the 0.5 s target
    for _ in range(5):
        wide.adjust(wide.budget * 0.001)
    assert wide.budget == 500


def test_state_machine_misuse(controller):
    with pytest.raises(RuntimeError):
        controller.finish_render(0.5)
    controller.begin_render()
    with pytest.raises(RuntimeError):
        controller.begin_render()


def test_abort_returns_to_idle_without_adjusting(controller):
    controller.begin_render()
    controller.abort_render()
    assert controller.state == RenderState.IDLE
    assert controller.budget == 25


def test_target_steps(controller):
    assert controller.increase_target() == 1.5
    assert controller.increase_target() == 2.5
    assert controller.decrease_target() == 1.5
    assert controller.decrease_target() == 0.5
    assert controller.decrease_target() == 0.5


def test_cap_steps(controller):
    assert controller.decrease_cap() == 3
    assert controller.increase_cap() == 4
    assert controller.ceiling == 16


def test_lowering_cap_reclamps_after_first_measurement(wide):
    wide.adjust(0.01)
    assert wide.budget == 1024
    wide.decrease_cap()
    assert wide.budget == 512


def test_lowering_cap_before_first_render_keeps_initial_budget():
    controller = IterationBudgetController(BudgetSettings(cap=4))
    controller.decrease_cap()
    assert controller.budget == 25
    assert math.log2(controller.ceiling) == 3
