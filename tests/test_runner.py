"""Tests for the session runner.

Covers: the end-to-end run scenarios, single-session ownership, cue and
notification dispatch, countdown ticks, the wake lock lifecycle, failing
ports, and history persistence.  Time is driven by a fake clock plus
explicit ``driver.poll()`` calls.
"""

import pytest

from cronos.errors import EmptyRoutine
from cronos.history.recorder import HistoryRecorder, HistoryStatus
from cronos.ports import Cue
from cronos.routines.models import BlockKind, Routine
from cronos.timer.runner import SessionRunner
from cronos.timer.session import RunnerState, START_CUE_DELAY_MS

from helpers import (
    BrokenStore, DeferredCalls, ExplodingPort, RecordingAudio, SignalCollector, make_routine,
    prep_work_routine,
)


def _elapse(runner, clock, seconds):
    clock.advance(seconds)
    runner.driver.poll()


# ═══════════════════════════════════════════════════════════════════════════
#  SCENARIOS
# ═══════════════════════════════════════════════════════════════════════════


class TestScenarios:

    def test_natural_advance_to_next_block(self, runner, clock, audio, history):
        runner.start(prep_work_routine())
        assert runner.remaining == 60

        _elapse(runner, clock, 60)

        assert runner.session.current_block_index == 1
        assert runner.remaining == 20
        assert audio.cues == [Cue.START, Cue.END, Cue.START]
        assert len(history) == 0

    def test_skip_last_block_completes(self, runner, clock, history):
        finished = SignalCollector()
        runner.session_finished.connect(finished)
        runner.start(prep_work_routine())
        _elapse(runner, clock, 60)

        runner.skip()

        assert runner.session is None
        assert runner.state == RunnerState.IDLE
        assert len(history) == 1
        entry = history.entries[0]
        assert entry.status == HistoryStatus.COMPLETED
        assert entry.total_time == 80
        assert finished.last is entry

    def test_pause_then_adjust_below_zero(self, runner, clock):
        runner.start(make_routine(("Work", 30, BlockKind.WORK)))
        runner.pause()
        assert runner.remaining == 30

        runner.adjust_time(-40)

        assert runner.remaining == 1
        assert runner.state == RunnerState.PAUSED

    def test_empty_routine_is_rejected(self, runner, audio, wake_lock):
        with pytest.raises(EmptyRoutine):
            runner.start(Routine("Nothing"))
        assert runner.session is None
        assert audio.cues == []
        assert wake_lock.acquired == 0

    def test_quit_mid_block(self, runner, clock, history):
        runner.start(prep_work_routine())
        clock.advance(5)

        entry = runner.quit()

        assert runner.session is None
        assert entry.status == HistoryStatus.ABORTED
        assert entry.total_time == 0
        assert history.entries == (entry,)

    def test_quit_after_unpolled_deadline_is_abort(self, runner, clock, audio, notifier, history):
        runner.start(prep_work_routine())
        clock.advance(61)

        entry = runner.quit()

        assert entry.status == HistoryStatus.ABORTED
        assert entry.total_time == 0
        assert audio.cues == [Cue.START]
        assert notifier.messages == []
        runner.driver.poll()
        assert len(history) == 1

    def test_full_run_by_waiting(self, runner, clock, audio, notifier, history):
        runner.start(prep_work_routine())
        _elapse(runner, clock, 60)
        _elapse(runner, clock, 20)

        assert runner.session is None
        assert history.entries[0].status == HistoryStatus.COMPLETED
        assert audio.cues.count(Cue.END) == 2
        assert notifier.messages[-1][0] == "Routine complete"


# ═══════════════════════════════════════════════════════════════════════════
#  OWNERSHIP & NO-OP COMMANDS
# ═══════════════════════════════════════════════════════════════════════════


class TestOwnership:

    def test_second_start_is_ignored(self, runner):
        first = runner.start(prep_work_routine())
        other = make_routine(("Other", 10, BlockKind.WORK), name="Other")

        assert runner.start(other) is None
        assert runner.session is first

    def test_can_start_again_after_finish(self, runner):
        runner.start(prep_work_routine())
        runner.quit()
        assert runner.start(prep_work_routine()) is not None

    @pytest.mark.parametrize("command", ["pause", "resume", "toggle_pause", "skip"])
    def test_commands_without_session_are_noops(self, runner, command):
        getattr(runner, command)()
        assert runner.state == RunnerState.IDLE

    def test_adjust_and_quit_without_session(self, runner, history):
        runner.adjust_time(10)
        assert runner.quit() is None
        assert len(history) == 0

    def test_remaining_and_progress_when_idle(self, runner):
        assert runner.remaining == 0
        assert runner.progress == 0.0


# ═══════════════════════════════════════════════════════════════════════════
#  SIGNALS & CONTROLS
# ═══════════════════════════════════════════════════════════════════════════


class TestControls:

    def test_toggle_pause(self, runner):
        runner.start(prep_work_routine())
        runner.toggle_pause()
        assert runner.state == RunnerState.PAUSED
        runner.toggle_pause()
        assert runner.state == RunnerState.RUNNING

    def test_pause_stops_the_clock(self, runner, clock):
        runner.start(prep_work_routine())
        clock.advance(10)
        runner.pause()
        clock.advance(1000)
        runner.driver.poll()
        assert runner.remaining == 50
        assert runner.session.current_block_index == 0

    def test_state_changed_emitted(self, runner):
        states = SignalCollector()
        runner.state_changed.connect(states)
        runner.start(prep_work_routine())
        runner.pause()
        runner.resume()
        runner.quit()
        assert states.items == [
            RunnerState.RUNNING, RunnerState.PAUSED, RunnerState.RUNNING, RunnerState.IDLE,
        ]

    def test_block_changed_emitted(self, runner, clock):
        blocks = SignalCollector()
        runner.block_changed.connect(blocks)
        runner.start(prep_work_routine())
        _elapse(runner, clock, 60)
        assert blocks.items == [0, 1]

    def test_adjust_time_running(self, runner, clock):
        runner.start(prep_work_routine())
        clock.advance(5)
        runner.adjust_time(30)
        assert runner.remaining == 85

    def test_on_started_callback(self, qapp, history, clock):
        started = []
        r = SessionRunner(
            history, clock=clock, defer=lambda ms, cb: cb(),
            on_started=lambda routine, when: started.append((routine.name, when)),
        )
        r.start(prep_work_routine())
        assert len(started) == 1
        assert started[0][0] == "Test routine"
        assert started[0][1].timestamp() == pytest.approx(clock())


# ═══════════════════════════════════════════════════════════════════════════
#  CUES & NOTIFICATIONS
# ═══════════════════════════════════════════════════════════════════════════


class TestCues:

    def test_start_cue_on_start(self, runner, audio):
        runner.start(prep_work_routine())
        assert audio.cues == [Cue.START]

    def test_next_start_cue_is_deferred(self, qapp, history, clock):
        audio = RecordingAudio()
        deferred = DeferredCalls()
        r = SessionRunner(history, audio=audio, clock=clock, defer=deferred)
        r.start(prep_work_routine())
        _elapse(r, clock, 60)

        assert audio.cues == [Cue.START, Cue.END]
        assert [ms for ms, _ in deferred.pending] == [START_CUE_DELAY_MS]

        deferred.run_all()
        assert audio.cues == [Cue.START, Cue.END, Cue.START]

    def test_block_notification(self, runner, clock, notifier):
        runner.start(prep_work_routine())
        _elapse(runner, clock, 60)
        assert notifier.messages == [("Block finished", "Warm-up has finished.")]

    def test_countdown_ticks(self, runner, clock, audio):
        runner.start(prep_work_routine())
        for _ in range(57):
            _elapse(runner, clock, 1)
        assert runner.remaining == 3
        _elapse(runner, clock, 0.5)
        _elapse(runner, clock, 0.5)
        _elapse(runner, clock, 1)

        assert audio.cues == [Cue.START, Cue.TICK, Cue.TICK, Cue.TICK]

    def test_resume_does_not_repeat_tick(self, runner, clock, audio):
        runner.start(prep_work_routine())
        for _ in range(57):
            _elapse(runner, clock, 1)
        runner.pause()
        runner.resume()
        runner.driver.poll()

        assert audio.cues == [Cue.START, Cue.TICK]

    def test_adjust_rearms_countdown(self, runner, clock, audio):
        runner.start(prep_work_routine())
        for _ in range(57):
            _elapse(runner, clock, 1)
        runner.adjust_time(5)
        for _ in range(5):
            _elapse(runner, clock, 1)

        assert runner.remaining == 3
        assert audio.cues == [Cue.START, Cue.TICK, Cue.TICK]

    def test_deferred_start_cue_dropped_after_quit(self, qapp, history, clock):
        audio = RecordingAudio()
        deferred = DeferredCalls()
        r = SessionRunner(history, audio=audio, clock=clock, defer=deferred)
        r.start(prep_work_routine())
        _elapse(r, clock, 60)
        r.quit()

        deferred.run_all()

        assert audio.cues == [Cue.START, Cue.END]

    def test_countdown_disabled(self, qapp, history, clock):
        audio = RecordingAudio()
        r = SessionRunner(
            history, audio=audio, clock=clock, defer=lambda ms, cb: cb(),
            countdown_cues=0,
        )
        r.start(prep_work_routine())
        for _ in range(59):
            _elapse(r, clock, 1)
        assert audio.cues == [Cue.START]

    def test_tick_signal_forwarded(self, runner, clock):
        ticks = SignalCollector()
        runner.start(prep_work_routine())
        runner.tick.connect(ticks)
        _elapse(runner, clock, 1)
        assert ticks.last == 59


# ═══════════════════════════════════════════════════════════════════════════
#  WAKE LOCK
# ═══════════════════════════════════════════════════════════════════════════


class TestWakeLock:

    def test_held_while_running(self, runner, wake_lock):
        runner.start(prep_work_routine())
        assert wake_lock.held is True
        assert runner.wake_lock_held is True

    def test_released_on_pause_and_reacquired_on_resume(self, runner, wake_lock):
        runner.start(prep_work_routine())
        runner.pause()
        assert wake_lock.released == ["lock-1"]
        runner.resume()
        assert wake_lock.acquired == 2
        assert wake_lock.held is True

    def test_kept_across_block_change(self, runner, clock, wake_lock):
        runner.start(prep_work_routine())
        _elapse(runner, clock, 60)
        assert wake_lock.acquired == 1
        assert wake_lock.released == []

    @pytest.mark.parametrize("ending", ["quit", "complete"])
    def test_released_when_session_ends(self, runner, clock, wake_lock, ending):
        runner.start(prep_work_routine())
        if ending == "quit":
            runner.quit()
        else:
            _elapse(runner, clock, 60)
            _elapse(runner, clock, 20)
        assert wake_lock.held is False
        assert runner.wake_lock_held is False


# ═══════════════════════════════════════════════════════════════════════════
#  FAILING PORTS
# ═══════════════════════════════════════════════════════════════════════════


class TestFailingPorts:

    def test_session_survives_every_port_failing(self, qapp, history, clock):
        broken = ExplodingPort()
        r = SessionRunner(
            history, audio=broken, notifier=broken, wake_lock=broken,
            clock=clock, defer=lambda ms, cb: cb(),
        )
        r.start(prep_work_routine())
        assert r.wake_lock_held is False
        _elapse(r, clock, 58)
        _elapse(r, clock, 2)
        assert r.session.current_block_index == 1
        r.pause()
        r.resume()
        r.skip()

        assert r.session is None
        assert history.entries[0].status == HistoryStatus.COMPLETED

    def test_release_failure_is_swallowed(self, qapp, history, clock):
        class BadRelease:
            def acquire(self):
                return "handle"

            def release(self, handle):
                raise OSError("gone")

        r = SessionRunner(history, wake_lock=BadRelease(), clock=clock, defer=lambda ms, cb: cb())
        r.start(prep_work_routine())
        assert r.quit().status == HistoryStatus.ABORTED
        assert r.wake_lock_held is False


# ═══════════════════════════════════════════════════════════════════════════
#  HISTORY
# ═══════════════════════════════════════════════════════════════════════════


class TestHistoryPersistence:

    @pytest.mark.parametrize("ending", ["quit", "complete"])
    def test_failed_history_write_still_finishes(self, qapp, clock, ending):
        history = HistoryRecorder(BrokenStore())
        r = SessionRunner(history, clock=clock, defer=lambda ms, cb: cb())
        states = SignalCollector()
        finished = SignalCollector()
        r.state_changed.connect(states)
        r.session_finished.connect(finished)
        r.start(make_routine(("Work", 30, BlockKind.WORK)))

        if ending == "quit":
            r.quit()
        else:
            _elapse(r, clock, 30)

        assert r.session is None
        assert states.last == RunnerState.IDLE
        assert len(finished) == 1
        assert len(history) == 1

    def test_entries_survive_reload(self, runner, clock, store):
        runner.start(prep_work_routine())
        runner.quit()
        runner.start(prep_work_routine())
        runner.skip()
        runner.skip()

        reloaded = HistoryRecorder(store)
        assert [e.status for e in reloaded.entries] == [
            HistoryStatus.ABORTED, HistoryStatus.COMPLETED,
        ]
