#!/usr/bin/env python3
import os
import signal
import sys
import threading
from dataclasses import dataclass

from combo_watcher import ComboWatcher, default_combos
from joystick import open_gamepad, watch

# ==========================================
#        CONFIG (environment)
# ==========================================
DEFAULT_DEVICE = '/dev/input/js0'
DEFAULT_UNIT = 'chromium-kiosk.service'
DEFAULT_HOLD_MS = 250


@dataclass(frozen=True)
class Settings:
    device: str = DEFAULT_DEVICE
    unit: str = DEFAULT_UNIT
    hold_ms: int = DEFAULT_HOLD_MS


def _parse_int(value, default):
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def load_settings(environ=None):
    env = os.environ if environ is None else environ
    return Settings(
        device=env.get('GP_DEVICE') or DEFAULT_DEVICE,
        unit=env.get('CHROMIUM_UNIT') or DEFAULT_UNIT,
        hold_ms=_parse_int(env.get('COMBO_HOLD_MS'), DEFAULT_HOLD_MS),
    )


def install_signal_handlers(stop):
    """SIGINT/SIGTERM set the stop event. Returns the previous handlers."""
    def handler(signum, frame):
        stop.set()

    previous = {}
    for sig in (signal.SIGINT, signal.SIGTERM):
        previous[sig] = signal.signal(sig, handler)
    return previous


def main():
    settings = load_settings()
    print(f"[gp] starting, device={settings.device}, unit={settings.unit}, "
          f"hold={settings.hold_ms}ms", flush=True)

    try:
        device, button_map = open_gamepad(settings.device)
    except OSError as e:
        print(f"[err] cannot open {settings.device}: {e}", flush=True)
        return 1

    watcher = ComboWatcher(default_combos(settings.unit), hold_ms=settings.hold_ms)
    stop = threading.Event()
    install_signal_handlers(stop)

    print(f"[gp] listening on {device.path} ({device.name})... (Ctrl+C to stop)", flush=True)
    try:
        watch(device, button_map, watcher.on_button, stop)
    except OSError as e:
        print(f"[err] lost device {device.path}: {e}", flush=True)
        return 1
    except KeyboardInterrupt:
        pass
    finally:
        device.close()

    print("[gp] stopped", flush=True)
    return 0


if __name__ == "__main__":
    sys.exit(main())
