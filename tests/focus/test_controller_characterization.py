import datetime as dt
import unittest

from focus import (
    FocusSessionController,
    InvalidSettingsError,
    PomodoroSession,
    SessionLedger,
    TimerPhase,
    TimerSettings,
)

_NOW = dt.datetime(2026, 3, 2, 9, 30)


class _FakeHandle:
    def __init__(self, callback):
        self.callback = callback
        self.cancel_calls = 0

    @property
    def active(self) -> bool:
        return self.cancel_calls == 0

    def cancel(self) -> None:
        self.cancel_calls += 1


class _FakeScheduler:
    def __init__(self):
        self.handles: list[_FakeHandle] = []
        self.periods: list[int] = []

    def schedule(self, callback, period_ms):
        handle = _FakeHandle(callback)
        self.handles.append(handle)
        self.periods.append(period_ms)
        return handle


def _three_second_work() -> TimerSettings:
    return TimerSettings(work_minutes=0.05, short_break_minutes=0.05, long_break_minutes=0.05)


def _complete_phase(controller: FocusSessionController) -> None:
    controller.start()
    for _ in range(controller.snapshot().remaining_seconds):
        controller.tick()


class FocusSessionControllerCharacterizationTests(unittest.TestCase):
    def test_initial_state_is_paused_work_at_full_duration(self) -> None:
        controller = FocusSessionController(clock=lambda: _NOW)
        state = controller.snapshot()

        self.assertIs(TimerPhase.WORK, state.phase)
        self.assertEqual(25 * 60, state.remaining_seconds)
        self.assertFalse(state.is_running)
        self.assertEqual("", state.current_task_label)
        self.assertEqual(0, controller.completed_count)

    def test_switch_mode_resets_remaining_and_stops_for_every_phase(self) -> None:
        controller = FocusSessionController(clock=lambda: _NOW)
        settings = controller.settings
        for phase in (TimerPhase.LONG_BREAK, TimerPhase.WORK, TimerPhase.SHORT_BREAK):
            controller.start()
            controller.tick()
            state = controller.switch_mode(phase)

            self.assertIs(phase, state.phase)
            self.assertEqual(settings.duration_seconds(phase), state.remaining_seconds)
            self.assertFalse(state.is_running)

    def test_switch_mode_rejects_unparsed_values(self) -> None:
        controller = FocusSessionController(clock=lambda: _NOW)
        with self.assertRaises(TypeError):
            controller.switch_mode("long_break")  # type: ignore[arg-type]

    def test_start_is_idempotent_and_pause_keeps_remaining(self) -> None:
        controller = FocusSessionController(clock=lambda: _NOW)
        controller.start()
        controller.tick()
        controller.start()
        controller.tick()
        paused = controller.pause()
        again = controller.pause()

        self.assertFalse(paused.is_running)
        self.assertEqual(25 * 60 - 2, paused.remaining_seconds)
        self.assertEqual(paused, again)

    def test_tick_is_ignored_while_paused(self) -> None:
        controller = FocusSessionController(clock=lambda: _NOW)
        before = controller.tick()
        self.assertEqual(25 * 60, before.remaining_seconds)
        self.assertFalse(before.is_running)

    def test_three_ticks_from_three_seconds_complete_work(self) -> None:
        ledger = SessionLedger()
        controller = FocusSessionController(_three_second_work(), ledger=ledger, clock=lambda: _NOW)
        controller.start()
        self.assertEqual(3, controller.snapshot().remaining_seconds)

        controller.tick()
        controller.tick()
        state = controller.tick()

        self.assertFalse(state.is_running)
        self.assertEqual(1, len(ledger))
        self.assertIs(TimerPhase.SHORT_BREAK, state.phase)
        self.assertEqual(3, state.remaining_seconds)
        self.assertGreaterEqual(state.remaining_seconds, 0)

    def test_reset_after_pause_restores_duration_without_ledger_entry(self) -> None:
        ledger = SessionLedger()
        controller = FocusSessionController(ledger=ledger, clock=lambda: _NOW)
        controller.start()
        for _ in range(25 * 60 - 10):
            controller.tick()
        paused = controller.pause()
        self.assertEqual(10, paused.remaining_seconds)

        state = controller.reset()

        self.assertEqual(25 * 60, state.remaining_seconds)
        self.assertFalse(state.is_running)
        self.assertEqual(0, len(ledger))
        self.assertEqual(0, controller.completed_count)

    def test_four_work_completions_schedule_long_break_last(self) -> None:
        controller = FocusSessionController(
            TimerSettings(long_break_interval=4),
            clock=lambda: _NOW,
        )
        phases = []
        for expected_count in range(1, 5):
            self.assertIs(TimerPhase.WORK, controller.snapshot().phase)
            _complete_phase(controller)
            phases.append(controller.snapshot().phase)
            self.assertEqual(expected_count, controller.completed_count)
            if expected_count < 4:
                _complete_phase(controller)

        self.assertEqual(
            [
                TimerPhase.SHORT_BREAK,
                TimerPhase.SHORT_BREAK,
                TimerPhase.SHORT_BREAK,
                TimerPhase.LONG_BREAK,
            ],
            phases,
        )
        self.assertEqual(4, controller.completed_count)
        self.assertEqual(4, len(controller.sessions))
        self.assertTrue(all(session.duration_seconds == 25 * 60 for session in controller.sessions))

    def test_break_completion_returns_to_work_without_ledger_entry(self) -> None:
        controller = FocusSessionController(_three_second_work(), clock=lambda: _NOW)
        controller.switch_mode(TimerPhase.LONG_BREAK)
        _complete_phase(controller)

        state = controller.snapshot()
        self.assertIs(TimerPhase.WORK, state.phase)
        self.assertEqual(0, len(controller.sessions))
        self.assertEqual(0, controller.completed_count)

    def test_work_completion_records_label_and_clears_it(self) -> None:
        controller = FocusSessionController(_three_second_work(), clock=lambda: _NOW)
        controller.set_task_label("Linear algebra")
        _complete_phase(controller)

        session = controller.sessions[0]
        self.assertEqual("Linear algebra", session.task_label)
        self.assertTrue(session.was_completed)
        self.assertEqual(_NOW, session.completed_at)
        self.assertEqual(3, session.duration_seconds)
        self.assertEqual("", controller.snapshot().current_task_label)

    def test_empty_label_records_default_focus_session(self) -> None:
        controller = FocusSessionController(_three_second_work(), clock=lambda: _NOW)
        _complete_phase(controller)
        self.assertEqual("Focus Session", controller.sessions[0].task_label)

    def test_set_task_label_does_not_affect_timing(self) -> None:
        controller = FocusSessionController(clock=lambda: _NOW)
        controller.start()
        controller.tick()
        state = controller.set_task_label("Essay")
        self.assertTrue(state.is_running)
        self.assertEqual(25 * 60 - 1, state.remaining_seconds)
        self.assertEqual("Essay", state.current_task_label)

    def test_switch_mode_does_not_reset_completion_counter(self) -> None:
        controller = FocusSessionController(_three_second_work(), clock=lambda: _NOW)
        _complete_phase(controller)
        controller.switch_mode(TimerPhase.WORK)
        controller.switch_mode(TimerPhase.LONG_BREAK)
        self.assertEqual(1, controller.completed_count)

    def test_reinitialize_clears_counter_but_keeps_ledger(self) -> None:
        controller = FocusSessionController(_three_second_work(), clock=lambda: _NOW)
        _complete_phase(controller)
        controller.set_task_label("Next")

        state = controller.reinitialize()

        self.assertEqual(0, controller.completed_count)
        self.assertEqual(1, len(controller.sessions))
        self.assertIs(TimerPhase.WORK, state.phase)
        self.assertEqual("", state.current_task_label)
        self.assertFalse(state.is_running)

    def test_apply_settings_refreshes_idle_phase_and_clamps_running_phase(self) -> None:
        controller = FocusSessionController(clock=lambda: _NOW)
        idle = controller.apply_settings(TimerSettings(work_minutes=50))
        self.assertEqual(50 * 60, idle.remaining_seconds)

        controller.start()
        running = controller.apply_settings(TimerSettings(work_minutes=10))
        self.assertTrue(running.is_running)
        self.assertEqual(10 * 60, running.remaining_seconds)
        self.assertEqual(10 * 60, running.duration_seconds)

    def test_apply_settings_keeps_paused_progress(self) -> None:
        controller = FocusSessionController(clock=lambda: _NOW)
        controller.start()
        for _ in range(600):
            controller.tick()
        controller.pause()

        muted = controller.apply_settings(controller.settings.with_updates(sound_enabled=False))
        self.assertEqual(900, muted.remaining_seconds)
        self.assertFalse(muted.is_running)

        longer = controller.apply_settings(controller.settings.with_updates(work_minutes=50))
        self.assertEqual(900, longer.remaining_seconds)

        shorter = controller.apply_settings(controller.settings.with_updates(work_minutes=10))
        self.assertEqual(600, shorter.remaining_seconds)

    def test_rejected_settings_leave_controller_usable(self) -> None:
        controller = FocusSessionController(clock=lambda: _NOW)
        with self.assertRaises(InvalidSettingsError):
            controller.apply_settings(TimerSettings(work_minutes=float("inf")))

        state = controller.snapshot()
        self.assertEqual(25 * 60, state.remaining_seconds)
        self.assertEqual(25, controller.settings.work_minutes)

    def test_todays_focus_seconds_ignores_yesterday(self) -> None:
        yesterday = PomodoroSession(
            completed_at=_NOW - dt.timedelta(days=1),
            duration_seconds=25 * 60,
            was_completed=True,
            task_label="Old",
        )
        controller = FocusSessionController(
            _three_second_work(),
            ledger=SessionLedger([yesterday]),
            clock=lambda: _NOW,
        )
        _complete_phase(controller)
        _complete_phase(controller)
        _complete_phase(controller)

        self.assertEqual(6, controller.todays_focus_seconds())
        self.assertEqual(2, controller.todays_completed_count())
        self.assertEqual(2, len(controller.todays_sessions()))
        self.assertEqual(3, len(controller.sessions))

    def test_progress_fraction_is_clamped(self) -> None:
        controller = FocusSessionController(clock=lambda: _NOW)
        self.assertEqual(0.0, controller.progress_fraction())
        self.assertEqual(0.5, controller.progress_fraction(TimerPhase.WORK, 750))
        self.assertEqual(1.0, controller.progress_fraction(TimerPhase.WORK, -5))
        self.assertEqual(0.0, controller.progress_fraction(TimerPhase.WORK, 9999))

    def test_stats_reflect_daily_goal(self) -> None:
        controller = FocusSessionController(_three_second_work(), clock=lambda: _NOW, daily_goal=4)
        _complete_phase(controller)

        stats = controller.stats()
        self.assertEqual(1, stats.todays_completed)
        self.assertEqual(1, stats.total_completed)
        self.assertEqual(4, stats.daily_goal)
        self.assertEqual(0.25, stats.daily_goal_fraction)


class FocusSessionControllerSchedulerTests(unittest.TestCase):
    def test_start_arms_one_tick_source_at_one_second(self) -> None:
        scheduler = _FakeScheduler()
        controller = FocusSessionController(scheduler=scheduler, clock=lambda: _NOW)
        controller.start()
        controller.start()

        self.assertEqual(1, len(scheduler.handles))
        self.assertEqual([1000], scheduler.periods)

    def test_scheduled_callback_drives_tick(self) -> None:
        scheduler = _FakeScheduler()
        controller = FocusSessionController(scheduler=scheduler, clock=lambda: _NOW)
        controller.start()
        scheduler.handles[0].callback()
        self.assertEqual(25 * 60 - 1, controller.snapshot().remaining_seconds)

    def test_pause_cancels_tick_source_and_stale_callback_is_ignored(self) -> None:
        scheduler = _FakeScheduler()
        controller = FocusSessionController(scheduler=scheduler, clock=lambda: _NOW)
        controller.start()
        handle = scheduler.handles[0]
        controller.pause()

        self.assertEqual(1, handle.cancel_calls)
        handle.callback()
        self.assertEqual(25 * 60, controller.snapshot().remaining_seconds)

    def test_stale_callback_cannot_advance_a_restarted_timer(self) -> None:
        scheduler = _FakeScheduler()
        controller = FocusSessionController(scheduler=scheduler, clock=lambda: _NOW)
        controller.start()
        controller.pause()
        controller.start()

        scheduler.handles[0].callback()
        self.assertEqual(25 * 60, controller.snapshot().remaining_seconds)
        scheduler.handles[1].callback()
        self.assertEqual(25 * 60 - 1, controller.snapshot().remaining_seconds)

    def test_reset_switch_and_completion_cancel_tick_source(self) -> None:
        scheduler = _FakeScheduler()
        controller = FocusSessionController(
            _three_second_work(),
            scheduler=scheduler,
            clock=lambda: _NOW,
        )
        controller.start()
        controller.reset()
        controller.start()
        controller.switch_mode(TimerPhase.SHORT_BREAK)
        controller.start()
        for _ in range(3):
            scheduler.handles[-1].callback()

        self.assertEqual([1, 1, 1], [handle.cancel_calls for handle in scheduler.handles])
        self.assertIs(TimerPhase.WORK, controller.snapshot().phase)
        self.assertFalse(controller.snapshot().is_running)

    def test_close_stops_tick_source(self) -> None:
        scheduler = _FakeScheduler()
        controller = FocusSessionController(scheduler=scheduler, clock=lambda: _NOW)
        controller.start()
        controller.close()
        self.assertFalse(scheduler.handles[0].active)
        self.assertFalse(controller.snapshot().is_running)


class FocusSessionControllerListenerTests(unittest.TestCase):
    def test_listener_receives_ticks_and_completion(self) -> None:
        events = []
        controller = FocusSessionController(
            _three_second_work(),
            clock=lambda: _NOW,
            listener=lambda state, completion: events.append((state, completion)),
        )
        controller.set_task_label("Reading")
        _complete_phase(controller)

        self.assertEqual(3, len(events))
        self.assertIsNone(events[0][1])
        self.assertIsNone(events[1][1])
        state, completion = events[2]
        self.assertIsNotNone(completion)
        self.assertIs(TimerPhase.WORK, completion.finished_phase)
        self.assertIs(TimerPhase.SHORT_BREAK, completion.next_phase)
        self.assertEqual("Reading", completion.session.task_label)
        self.assertEqual(1, completion.completed_count)
        self.assertFalse(completion.long_break_due)
        self.assertIs(TimerPhase.SHORT_BREAK, state.phase)

    def test_user_operations_do_not_notify_listener(self) -> None:
        events = []
        controller = FocusSessionController(
            clock=lambda: _NOW,
            listener=lambda state, completion: events.append(state),
        )
        controller.start()
        controller.pause()
        controller.reset()
        controller.switch_mode(TimerPhase.SHORT_BREAK)
        self.assertEqual([], events)

    def test_listener_failure_does_not_break_tick(self) -> None:
        def broken(state, completion):
            raise RuntimeError("boom")

        controller = FocusSessionController(clock=lambda: _NOW, listener=broken)
        controller.start()
        with self.assertLogs("focus", level="ERROR"):
            state = controller.tick()
        self.assertEqual(25 * 60 - 1, state.remaining_seconds)


if __name__ == "__main__":
    unittest.main()
