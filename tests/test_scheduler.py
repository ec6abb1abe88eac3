import logging

import pytest

from chip8emu.core.errors import InvalidConfiguration
from chip8emu.core.options import MachineOptions
from chip8emu.core.scheduler import Clock
from chip8emu.core.types import StepResult


class Recorder:
    def __init__(self, result=StepResult.EXECUTED):
        self.events = []
        self.result = result

    def step(self):
        self.events.append("step")
        return self.result

    def tick(self):
        self.events.append("tick")

    def count(self, name):
        return self.events.count(name)


def test_one_second_runs_cpu_and_timer_rates():
    rec = Recorder()
    clock = Clock(rec.step, rec.tick, 500, max_catchup=2.0)
    assert clock.advance(1.0) == (500, 60)
    assert rec.count("step") == 500
    assert rec.count("tick") == 60


def test_frame_sized_advances_spread_steps_evenly():
    rec = Recorder()
    clock = Clock(rec.step, rec.tick, 500)
    per_frame = [clock.advance(1 / 60)[0] for _ in range(60)]
    assert set(per_frame) <= {8, 9}
    assert clock.total_steps == 500
    assert clock.total_ticks == 60


def test_timer_rate_is_independent_of_cpu_frequency():
    for hz in (1, 60, 1000, 5000):
        rec = Recorder()
        clock = Clock(rec.step, rec.tick, hz)
        for _ in range(120):
            clock.advance(1 / 60)
        assert rec.count("tick") == 120
        assert rec.count("step") == 2 * hz


def test_tick_runs_before_a_step_due_at_the_same_instant():
    rec = Recorder()
    clock = Clock(rec.step, rec.tick, 120)
    clock.advance(1 / 60)
    assert rec.events == ["step", "tick", "step"]


def test_key_wait_drops_remaining_steps_but_timers_continue():
    rec = Recorder(StepResult.AWAITING_KEY)
    clock = Clock(rec.step, rec.tick, 500)
    for _ in range(10):
        assert clock.advance(1 / 60) == (0, 1)
    # one keyboard poll per scheduler cycle
    assert rec.count("step") == 10
    assert rec.count("tick") == 10


def test_backlog_beyond_catchup_is_dropped(caplog):
    rec = Recorder()
    clock = Clock(rec.step, rec.tick, 500)
    with caplog.at_level(logging.WARNING, logger="chip8emu.core.scheduler"):
        steps, ticks = clock.advance(1.0)
    assert (steps, ticks) == (125, 15)
    assert clock.dropped_seconds == pytest.approx(0.75)
    assert "dropping" in caplog.text


def test_long_runs_stay_exact():
    rec = Recorder()
    clock = Clock(rec.step, rec.tick, 500)
    for _ in range(1000):
        clock.advance(1 / 60)
    assert clock.total_ticks == 1000
    assert clock.total_steps == 8333


def test_negative_advance_rejected():
    clock = Clock(lambda: StepResult.EXECUTED, lambda: None, 500)
    with pytest.raises(ValueError):
        clock.advance(-0.1)


@pytest.mark.parametrize("hz", [0, 5001])
def test_cpu_frequency_bounds(hz):
    with pytest.raises(InvalidConfiguration):
        Clock(lambda: StepResult.EXECUTED, lambda: None, hz)


def test_errors_propagate_to_the_caller():
    def failing_step():
        raise RuntimeError("boom")

    clock = Clock(failing_step, lambda: None, 500)
    with pytest.raises(RuntimeError):
        clock.advance(0.1)


def test_run_until_stopped():
    rec = Recorder()
    sleeps = [0]
    clock = None

    def fake_time():
        return sleeps[0] * 0.01

    def fake_sleep(seconds):
        sleeps[0] += 1
        if sleeps[0] >= 50:
            clock.stop()

    clock = Clock(rec.step, rec.tick, 100, time_source=fake_time, sleep=fake_sleep)
    clock.run()
    assert not clock.running
    assert clock.total_ticks == 29
    assert clock.total_steps == 49


def test_cpu_frequency_message_matches_options():
    with pytest.raises(InvalidConfiguration) as from_clock:
        Clock(lambda: StepResult.EXECUTED, lambda: None, 0)
    with pytest.raises(InvalidConfiguration) as from_options:
        MachineOptions(cpu_frequency_hz=0)
    assert str(from_clock.value) == str(from_options.value)
