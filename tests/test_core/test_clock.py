"""Tests for the master animation clock."""

import pytest

from chalkboard.core.clock import MasterClock, PlaybackStatus


@pytest.fixture
def finishes():
    """Records every on_finish call."""
    return []


@pytest.fixture
def clock(finishes) -> MasterClock:
    return MasterClock(duration=1000, on_finish=finishes.append)


class TestPlayback:
    """Tests for play / tick / completion."""

    def test_initial_state(self, clock):
        """A new clock should be idle at zero progress."""
        assert clock.progress == 0.0
        assert clock.status == PlaybackStatus.IDLE
        assert not clock.is_playing

    def test_tick_advances_at_speed_over_duration(self, clock):
        """tick should add delta * speed / duration to progress."""
        clock.play()
        clock.tick(100)
        assert clock.progress == pytest.approx(0.1)
        assert clock.current_time == pytest.approx(100)

    def test_tick_ignored_when_not_playing(self, clock):
        """tick should do nothing while idle."""
        assert clock.tick(500) == 0.0

    def test_play_while_playing_is_single_run(self, clock):
        """A second play() must not start a second run or double the rate."""
        assert clock.play()
        assert not clock.play()
        clock.tick(100)
        assert clock.progress == pytest.approx(0.1)

    def test_completion(self, clock, finishes):
        """Reaching the end should complete the run and report it once."""
        clock.play()
        clock.tick(2000)
        assert clock.progress == 1.0
        assert clock.status == PlaybackStatus.COMPLETED
        assert not clock.is_playing
        assert finishes == [True]

    def test_play_after_completion_restarts(self, clock):
        """play() after completion should start again from zero."""
        clock.play()
        clock.tick(1000)
        assert clock.play()
        assert clock.progress == 0.0
        assert clock.status == PlaybackStatus.PLAYING

    def test_remaining_ms(self, clock):
        """remaining_ms should account for the current speed."""
        clock.play()
        clock.tick(250)
        clock.set_speed(2.0)
        assert clock.remaining_ms == pytest.approx(375)

    def test_advance_to_uses_timestamp_deltas(self, clock):
        """advance_to should only count time between timestamps."""
        clock.play()
        clock.advance_to(10_000)
        assert clock.progress == 0.0
        clock.advance_to(10_200)
        assert clock.progress == pytest.approx(0.2)


class TestControls:
    """Tests for pause, restart, seek and speed."""

    def test_pause_keeps_progress(self, clock, finishes):
        """Pausing should hold progress and report an unfinished run."""
        clock.play()
        clock.tick(300)
        clock.pause()
        clock.tick(300)
        assert clock.progress == pytest.approx(0.3)
        assert clock.status == PlaybackStatus.PAUSED
        assert finishes == [False]

    def test_pause_when_idle_does_nothing(self, clock, finishes):
        """Pausing an idle clock should not fire on_finish."""
        clock.pause()
        assert clock.status == PlaybackStatus.IDLE
        assert finishes == []

    def test_resume_after_pause(self, clock):
        """play() after pause should continue from the held progress."""
        clock.play()
        clock.tick(300)
        clock.pause()
        clock.play()
        clock.tick(100)
        assert clock.progress == pytest.approx(0.4)

    def test_restart(self, clock):
        """restart should return to zero and stop."""
        clock.play()
        clock.tick(600)
        clock.restart()
        assert clock.progress == 0.0
        assert clock.status == PlaybackStatus.IDLE
        assert not clock.is_playing

    def test_seek_leaves_clock_paused(self, clock):
        """Seeking should stop the run at the new progress."""
        clock.play()
        clock.seek(0.5)
        assert clock.progress == 0.5
        assert not clock.is_playing
        assert clock.status == PlaybackStatus.PAUSED

    def test_seek_clamps(self, clock):
        """Seek fractions should be clamped to [0, 1]."""
        clock.seek(2.0)
        assert clock.progress == 1.0
        clock.seek(-1.0)
        assert clock.progress == 0.0

    def test_speed_clamped(self, clock):
        """Speeds should be clamped to the configured range."""
        assert clock.set_speed(10) == 5.0
        assert clock.set_speed(0) == 0.1
        assert clock.set_speed(1.5) == 1.5

    def test_speed_change_keeps_progress(self, clock):
        """Changing speed mid-run continues from the same progress at the new rate."""
        clock.play()
        clock.tick(500)
        clock.set_speed(2.0)
        assert clock.is_playing
        assert clock.progress == pytest.approx(0.5)
        clock.tick(100)
        assert clock.progress == pytest.approx(0.7)

    def test_faster_speed_finishes_sooner(self):
        """Double speed should finish in half the host time."""
        clock = MasterClock(duration=1000, speed=2.0)
        clock.play()
        clock.tick(500)
        assert clock.status == PlaybackStatus.COMPLETED


class TestDuration:
    """Tests for duration handling."""

    def test_default_duration(self):
        """The default duration should be 5000ms."""
        assert MasterClock().duration == 5000

    def test_invalid_duration(self):
        """Non-positive durations should be rejected."""
        with pytest.raises(ValueError):
            MasterClock(duration=0)
        with pytest.raises(ValueError):
            MasterClock().set_duration(-5)

    def test_set_duration_keeps_fraction(self, clock):
        """Changing duration should keep the progress fraction."""
        clock.seek(0.5)
        clock.set_duration(4000)
        assert clock.progress == 0.5
        assert clock.current_time == 2000

    def test_state_snapshot(self, clock):
        """state() should snapshot time, status and playing flag."""
        clock.seek(0.25)
        state = clock.state()
        assert state.current_time == 250
        assert state.status == PlaybackStatus.PAUSED
        assert not state.is_playing
