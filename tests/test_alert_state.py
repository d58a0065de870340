from __future__ import annotations

import unittest

from posturecheck.alerts.state import AlertAction, AlertPhase, AlertStateMachine


def _run(machine: AlertStateMachine, stream) -> list[float]:
    fired = []
    for t, is_good in stream:
        if machine.update(is_good, t) == AlertAction.FIRE:
            fired.append(t)
    return fired


class AlertStateMachineTests(unittest.TestCase):
    def test_sustained_bad_posture_fires_after_delay_then_respects_cooldown(self) -> None:
        machine = AlertStateMachine(delay=5, cooldown=30)
        stream = [(i * 0.5, False) for i in range(81)]  # 0s .. 40s
        self.assertEqual(_run(machine, stream), [5.0, 35.0])

    def test_first_bad_frame_only_starts_the_timer(self) -> None:
        machine = AlertStateMachine(delay=0, cooldown=0)
        self.assertEqual(machine.update(False, 1.0), AlertAction.NONE)
        self.assertEqual(machine.phase, AlertPhase.ACCRUING)
        self.assertEqual(machine.update(False, 1.1), AlertAction.FIRE)
        self.assertEqual(machine.phase, AlertPhase.FIRING)

    def test_good_frame_clears_the_episode(self) -> None:
        machine = AlertStateMachine(delay=5, cooldown=30)
        _run(machine, [(0.0, False), (4.0, False)])
        self.assertEqual(machine.update(True, 4.5), AlertAction.CLEAR)
        self.assertEqual(machine.phase, AlertPhase.IDLE)
        self.assertIsNone(machine.bad_since)
        # A new episode restarts the delay.
        self.assertEqual(_run(machine, [(5.0, False), (9.0, False), (10.0, False)]), [10.0])

    def test_unknown_classification_changes_nothing(self) -> None:
        machine = AlertStateMachine(delay=5, cooldown=30)
        machine.update(False, 0.0)
        self.assertEqual(machine.update(None, 3.0), AlertAction.NONE)
        self.assertEqual(machine.bad_since, 0.0)
        self.assertEqual(machine.update(False, 5.0), AlertAction.FIRE)

    def test_cooldown_spans_episodes(self) -> None:
        machine = AlertStateMachine(delay=1, cooldown=30)
        stream = [(0.0, False), (1.0, False), (2.0, True), (3.0, False), (4.0, False), (20.0, False), (31.0, False)]
        self.assertEqual(_run(machine, stream), [1.0, 31.0])

    def test_reset_forgets_last_alert(self) -> None:
        machine = AlertStateMachine(delay=1, cooldown=30)
        _run(machine, [(0.0, False), (1.0, False)])
        machine.reset()
        self.assertIsNone(machine.last_fired)
        self.assertEqual(_run(machine, [(2.0, False), (3.0, False)]), [3.0])


if __name__ == "__main__":
    unittest.main()
