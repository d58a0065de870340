from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional

from .alerts.channels import DesktopNotifier
from .alerts.dispatcher import AlertDispatcher
from .alerts.sounds import CUES, CuePlayer
from .monitor import PostureMonitor
from .profiles import PROFILES, CameraAngle
from .relay import RelayChannel
from .session import PostureSession
from .settings import RuntimeSettings, load_runtime_settings
from .storage.state_store import StateStore


logger = logging.getLogger(__name__)


def setup_logging(log_level: str = "INFO", log_path: Optional[str] = None) -> None:
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_path:
        try:
            path = Path(log_path)
            path.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(path, encoding="utf-8"))
        except OSError:
            pass
    logging.basicConfig(
        level=getattr(logging, str(log_level).upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=handlers,
        force=True,
    )


def _on_off(value: str) -> bool:
    text = value.strip().lower()
    if text in ("on", "true", "1", "yes", "y"):
        return True
    if text in ("off", "false", "0", "no", "n"):
        return False
    raise argparse.ArgumentTypeError("expected on/off")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="posturecheck",
        description="Webcam posture monitor: train good/bad posture, get alerted when you slouch.",
    )
    p.add_argument("--config", default=None, help="Runtime settings YAML (default: config/posturecheck.yaml).")
    p.add_argument("--state", default=None, help="Saved training/settings JSON file.")
    p.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ...")
    sub = p.add_subparsers(dest="cmd", required=True)

    angles = [a.value for a in CameraAngle]

    p_live = sub.add_parser("live", help="Start the live webcam monitor")
    p_live.add_argument("--camera", "--cam-index", dest="camera", default=None,
                        help="Camera index (e.g. 0, 1) or device path (e.g. /dev/video2).")
    p_live.add_argument("--width", type=int, default=None)
    p_live.add_argument("--height", type=int, default=None)
    p_live.add_argument("--angle", choices=angles, default=None, help="Camera viewpoint to start with.")
    p_live.add_argument("--no-relay", action="store_true", help="Do not connect to the relay notifier.")

    p_replay = sub.add_parser("replay", help="Run a recorded keypoint log (JSON lines) through the classifier")
    p_replay.add_argument("log", help="File with one {t, landmarks, world_landmarks} object per line")
    p_replay.add_argument("--angle", choices=angles, default=None)

    sub.add_parser("status", help="Show viewpoint, sample counts and settings")

    p_export = sub.add_parser("export", help="Export training samples and settings")
    p_export.add_argument("out")

    p_import = sub.add_parser("import", help="Import a previously exported settings file")
    p_import.add_argument("path")

    p_clear = sub.add_parser("clear", help="Delete all training samples for every viewpoint")
    p_clear.add_argument("--yes", action="store_true", help="Confirm deletion.")

    p_angle = sub.add_parser("angle", help="Set the camera viewpoint")
    p_angle.add_argument("name", choices=angles)

    p_set = sub.add_parser("set", help="Change alert settings")
    p_set.add_argument("--threshold", type=float, default=None, help="Good-posture score threshold 0..1")
    p_set.add_argument("--delay", type=float, default=None, help="Seconds of bad posture before alerting")
    p_set.add_argument("--cooldown", type=float, default=None, help="Minimum seconds between alerts")
    p_set.add_argument("--sound", type=_on_off, default=None, help="on/off")
    p_set.add_argument("--notify", type=_on_off, default=None, help="on/off")
    p_set.add_argument("--cue", choices=sorted(CUES), default=None, help="Alert sound")

    p_cues = sub.add_parser("cues", help="List alert sounds")
    p_cues.add_argument("--play", default=None, help="Play one cue by id")

    return p


def _live_dispatcher(runtime: RuntimeSettings, relay_enabled: bool) -> tuple[AlertDispatcher, Optional[RelayChannel]]:
    relay = None
    if relay_enabled and runtime.relay_enabled:
        relay = RelayChannel(runtime.relay_url, reconnect_delay=runtime.relay_reconnect_seconds)
    dispatcher = AlertDispatcher(
        audio=CuePlayer(),
        notifier=DesktopNotifier(enabled=runtime.desktop_notifications),
        relay=relay,
    )
    return dispatcher, relay


def _print_status(monitor: PostureMonitor) -> None:
    session = monitor.session
    s = session.settings
    print(f"Viewpoint:  {session.profile.label} ({session.angle.value})")
    print(f"Metrics:    {', '.join(session.profile.metric_names)}")
    for angle, profile in PROFILES.items():
        good, bad = session.store.counts(angle)
        marker = "*" if angle == session.angle else " "
        print(f" {marker} {profile.label:<16} good={good:<3} bad={bad}")
    print(f"Training:   {session.training_status()}")
    print(
        f"Alerts:     threshold={s.threshold:.2f} delay={s.alert_delay:g}s cooldown={s.alert_cooldown:g}s "
        f"sound={'on' if s.sound else 'off'} ({s.selected_sound}) notify={'on' if s.notify else 'off'}"
    )


def main(argv: list[str] | None = None) -> int:
    p = build_parser()
    args = p.parse_args(argv)

    runtime = load_runtime_settings(Path(args.config) if args.config else None)
    setup_logging(args.log_level or runtime.log_level, runtime.log_path if args.cmd == "live" else None)
    store = StateStore(path=Path(args.state or runtime.state_path))

    if args.cmd == "live":
        from .app import run_live

        dispatcher, relay = _live_dispatcher(runtime, relay_enabled=not args.no_relay)
        monitor = PostureMonitor.load(store, dispatcher=dispatcher)
        if args.angle:
            monitor.set_angle(args.angle)
        cam_arg = args.camera if args.camera is not None else runtime.camera
        cam: int | str = int(cam_arg) if str(cam_arg).isdigit() else str(cam_arg)
        if relay is not None:
            relay.start()
        try:
            run_live(
                monitor,
                camera=cam,
                width=args.width or runtime.width,
                height=args.height or runtime.height,
            )
        finally:
            if relay is not None:
                relay.stop()
        return 0

    if args.cmd == "replay":
        from .replay import run_replay

        # Replays never touch the saved state.
        monitor = PostureMonitor(PostureSession.from_config(store.load()))
        if args.angle:
            monitor.set_angle(args.angle)
        if not monitor.session.trained:
            print(monitor.session.training_status())
        events = run_replay(monitor, Path(args.log))
        for ev in events:
            score = "n/a" if ev.score is None else f"{ev.score:.2f}"
            print(f"t={ev.timestamp:8.2f}s  {ev.action.value:<5}  score={score}")
        fired = sum(1 for ev in events if ev.action.value == "fire")
        print(f"{fired} alert(s)")
        return 0

    monitor = PostureMonitor.load(store)

    if args.cmd == "status":
        _print_status(monitor)
        return 0

    if args.cmd == "export":
        out = monitor.export_config(Path(args.out))
        print(f"Exported {len(monitor.session.store)} samples to {out}")
        return 0

    if args.cmd == "import":
        result = monitor.import_config(Path(args.path))
        print(result.status_message)
        return 0 if result.ok else 1

    if args.cmd == "clear":
        if not args.yes:
            print("Refusing to clear training samples without --yes.")
            return 1
        removed = monitor.clear(confirmed=True)
        print(f"Removed {removed} samples.")
        return 0

    if args.cmd == "angle":
        angle = monitor.set_angle(args.name)
        print(f"Viewpoint: {PROFILES[angle].label}")
        print(monitor.session.training_status())
        return 0

    if args.cmd == "set":
        changes = {
            "threshold": args.threshold,
            "alert_delay": args.delay,
            "alert_cooldown": args.cooldown,
            "sound": args.sound,
            "notify": args.notify,
            "selected_sound": args.cue,
        }
        changes = {k: v for k, v in changes.items() if v is not None}
        try:
            monitor.update_settings(**changes)
        except ValueError as exc:
            print(f"Invalid setting: {exc}")
            return 1
        _print_status(monitor)
        return 0

    if args.cmd == "cues":
        if args.play:
            if args.play not in CUES:
                print(f"Unknown cue: {args.play}")
                return 1
            CuePlayer().play_cue(args.play)
            return 0
        for cue_id in sorted(CUES):
            print(f"{cue_id:<12} {CUES[cue_id].label}")
        return 0

    return 2
