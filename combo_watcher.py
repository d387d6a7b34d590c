#!/usr/bin/env python3
import subprocess
import time
from collections import namedtuple

# ==========================================
#        COMBOS (joystick button numbers)
# ==========================================
# On most pads Select = 6 (Back) and Start = 7.
BASE_BUTTONS = (6, 7)

Combo = namedtuple('Combo', ['button', 'label', 'argv'])


def default_combos(unit):
    """Trigger buttons in priority order. Only the first held one fires."""
    return (
        Combo(0, 'restart ' + unit, ['systemctl', 'restart', unit]),
        Combo(2, 'poweroff', ['systemctl', 'poweroff']),
        Combo(1, 'stop ' + unit, ['systemctl', 'stop', unit]),
    )


def run_command(argv):
    """Run argv to completion and print its output.

    Returns the exit code, or -1 if the command could not be started.
    """
    cmdline = ' '.join(argv)
    try:
        proc = subprocess.run(argv, stdout=subprocess.PIPE, stderr=subprocess.PIPE,
                              universal_newlines=True, errors='replace')
    except OSError as e:
        print(f"[err] failed to run '{cmdline}': {e!r}", flush=True)
        return -1

    stdout = proc.stdout.strip()
    stderr = proc.stderr.strip()
    if stdout:
        print(f"[cmd] {stdout}", flush=True)
    if stderr:
        print(f"[cmd-err] {stderr}", flush=True)
    if proc.returncode != 0:
        print(f"[err] '{cmdline}' exited with code {proc.returncode}", flush=True)
    return proc.returncode


class ComboWatcher:
    """Turns button press/release events into at most one command per hold window."""

    def __init__(self, combos, hold_ms=250, runner=run_command, clock=time.monotonic):
        self.combos = tuple(combos)
        self.hold_ms = hold_ms
        self.pressed = set()
        self.last_action_at = None
        self._runner = runner
        self._clock = clock

    def base_pressed(self):
        return all(b in self.pressed for b in BASE_BUTTONS)

    def _debounced(self, now):
        if self.last_action_at is None:
            return False
        return (now - self.last_action_at) * 1000.0 < self.hold_ms

    def on_button(self, button, pressed):
        """Handle one button event. Returns the combo that fired, if any."""
        if pressed:
            self.pressed.add(button)
        else:
            self.pressed.discard(button)

        if not self.base_pressed():
            return None

        now = self._clock()
        if self._debounced(now):
            return None

        for combo in self.combos:
            if combo.button in self.pressed:
                self.last_action_at = now
                print(f"[gp] combo: Start+Select+{combo.button} => {combo.label}", flush=True)
                self._runner(combo.argv)
                return combo
        return None
