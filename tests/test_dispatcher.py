from __future__ import annotations

import unittest

from posturecheck.alerts.channels import RELAY_MESSAGE, RELAY_MESSAGE_TYPE
from posturecheck.alerts.dispatcher import (
    TITLE_ALERT,
    TITLE_DEFAULT,
    AlertDispatcher,
    PostureHint,
    TitleFlasher,
    VisualIndicator,
)
from posturecheck.alerts.state import AlertAction
from posturecheck.session import MonitorSettings


class FakeAudio:
    def __init__(self) -> None:
        self.played: list[str] = []

    def play_cue(self, cue_id: str) -> None:
        self.played.append(cue_id)


class FakeNotifier:
    def __init__(self, granted: bool = True) -> None:
        self.granted = granted
        self.sent = []

    def permission_granted(self) -> bool:
        return self.granted

    def notify(self, notification) -> bool:
        self.sent.append(notification)
        return True


class FakeRelay:
    def __init__(self) -> None:
        self.sent = []

    def send(self, payload) -> bool:
        self.sent.append(payload)
        return False


class Boom:
    def play_cue(self, cue_id: str) -> None:
        raise RuntimeError("no audio device")

    def permission_granted(self) -> bool:
        raise RuntimeError("dbus gone")

    def send(self, payload) -> bool:
        raise RuntimeError("socket closed")


class AlertDispatcherTests(unittest.TestCase):
    def _dispatcher(self, granted: bool = True):
        audio, notifier, relay = FakeAudio(), FakeNotifier(granted), FakeRelay()
        return AlertDispatcher(audio=audio, notifier=notifier, relay=relay), audio, notifier, relay

    def test_fire_uses_desktop_notification_when_permitted(self) -> None:
        dispatcher, audio, notifier, relay = self._dispatcher(granted=True)
        used = dispatcher.handle(AlertAction.FIRE, 0.0, MonitorSettings(selected_sound="ding"))
        self.assertEqual(used, ["visual", "audio", "notification", "title"])
        self.assertEqual(audio.played, ["ding"])
        self.assertEqual(len(notifier.sent), 1)
        self.assertEqual(notifier.sent[0].tag, "posture-alert")
        self.assertEqual(relay.sent, [])

    def test_fire_falls_back_to_relay_without_permission(self) -> None:
        dispatcher, _audio, notifier, relay = self._dispatcher(granted=False)
        used = dispatcher.handle(AlertAction.FIRE, 0.0, MonitorSettings())
        self.assertIn("relay", used)
        self.assertNotIn("notification", used)
        self.assertEqual(notifier.sent, [])
        self.assertEqual(relay.sent, [{"type": RELAY_MESSAGE_TYPE, "message": RELAY_MESSAGE}])

    def test_undelivered_notification_is_not_reported(self) -> None:
        class Undelivered(FakeNotifier):
            def notify(self, notification) -> bool:
                self.sent.append(notification)
                return False

        notifier, relay = Undelivered(), FakeRelay()
        dispatcher = AlertDispatcher(audio=FakeAudio(), notifier=notifier, relay=relay)
        used = dispatcher.fire(0.0, MonitorSettings())
        self.assertEqual(used, ["visual", "audio", "title"])
        self.assertEqual(len(notifier.sent), 1)
        self.assertEqual(relay.sent, [])

    def test_toggles_disable_audio_and_notifications(self) -> None:
        dispatcher, audio, notifier, relay = self._dispatcher()
        used = dispatcher.handle(AlertAction.FIRE, 0.0, MonitorSettings(sound=False, notify=False))
        self.assertEqual(used, ["visual", "title"])
        self.assertEqual((audio.played, notifier.sent, relay.sent), ([], [], []))

    def test_none_action_does_nothing(self) -> None:
        dispatcher, audio, _notifier, _relay = self._dispatcher()
        self.assertEqual(dispatcher.handle(AlertAction.NONE, 0.0, MonitorSettings()), [])
        self.assertFalse(dispatcher.indicator.visible)
        self.assertEqual(audio.played, [])

    def test_channel_failures_are_contained(self) -> None:
        boom = Boom()
        dispatcher = AlertDispatcher(audio=boom, notifier=boom, relay=boom)
        used = dispatcher.fire(0.0, MonitorSettings())
        self.assertEqual(used, ["visual", "relay", "title"])
        self.assertTrue(dispatcher.indicator.visible)

    def test_clear_hides_overlay_and_restores_title(self) -> None:
        dispatcher, *_ = self._dispatcher()
        dispatcher.fire(0.0, MonitorSettings())
        dispatcher.tick(0.9)
        self.assertEqual(dispatcher.title.title, TITLE_ALERT)
        dispatcher.handle(AlertAction.CLEAR, 1.0, MonitorSettings())
        self.assertFalse(dispatcher.indicator.visible)
        self.assertFalse(dispatcher.title.running)
        self.assertEqual(dispatcher.title.title, TITLE_DEFAULT)

    def test_auto_hide_leaves_title_flashing(self) -> None:
        dispatcher, *_ = self._dispatcher()
        dispatcher.fire(0.0, MonitorSettings())
        dispatcher.tick(4.9)
        self.assertTrue(dispatcher.indicator.visible)
        dispatcher.tick(5.0)
        self.assertFalse(dispatcher.indicator.visible)
        self.assertTrue(dispatcher.title.running)

    def test_overlay_signal_carries_hint_and_ids(self) -> None:
        dispatcher, *_ = self._dispatcher()
        signal = dispatcher.overlay(PostureHint.BAD, frozenset({0, 11}))
        self.assertFalse(signal.visible)
        self.assertEqual(signal.hint, PostureHint.BAD)
        self.assertEqual(signal.critical_ids, frozenset({0, 11}))


class TitleFlasherTests(unittest.TestCase):
    def test_alternates_every_interval(self) -> None:
        seen: list[str] = []
        flasher = TitleFlasher(on_title=seen.append)
        flasher.start(0.0)
        flasher.tick(0.5)
        self.assertEqual(flasher.title, TITLE_DEFAULT)
        flasher.tick(0.9)
        self.assertEqual(flasher.title, TITLE_ALERT)
        flasher.tick(1.7)
        self.assertEqual(flasher.title, TITLE_DEFAULT)
        flasher.tick(2.5)
        self.assertEqual(flasher.title, TITLE_ALERT)
        flasher.stop()
        self.assertEqual(seen, [TITLE_ALERT, TITLE_DEFAULT, TITLE_ALERT, TITLE_DEFAULT])

    def test_start_while_running_keeps_phase(self) -> None:
        flasher = TitleFlasher()
        flasher.start(0.0)
        flasher.start(0.85)
        flasher.tick(0.9)
        self.assertEqual(flasher.title, TITLE_ALERT)

    def test_stop_when_idle_is_silent(self) -> None:
        seen: list[str] = []
        TitleFlasher(on_title=seen.append).stop()
        self.assertEqual(seen, [])


class VisualIndicatorTests(unittest.TestCase):
    def test_reshow_extends_auto_hide(self) -> None:
        changes: list[bool] = []
        indicator = VisualIndicator(on_change=changes.append, auto_hide=5.0)
        indicator.show(0.0)
        indicator.show(3.0)
        indicator.tick(6.0)
        self.assertTrue(indicator.visible)
        indicator.tick(8.0)
        self.assertFalse(indicator.visible)
        self.assertEqual(changes, [True, False])


if __name__ == "__main__":
    unittest.main()
