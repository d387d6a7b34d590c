#!/usr/bin/env python3
import os
import select
from pathlib import Path

import evdev
from evdev import ecodes

SYSFS_INPUT = '/sys/class/input'

# evdev key values
RELEASED = 0
PRESSED = 1


def resolve_event_node(path, sysfs_root=SYSFS_INPUT):
    """Returns the /dev/input/eventN node behind a /dev/input/jsN path.

    Symlinks such as /dev/input/by-id/*-joystick are followed.
    Paths that are not joydev nodes are returned as-is.
    """
    real = os.path.realpath(path)
    name = os.path.basename(real)
    if not name.startswith('js'):
        return path

    device_dir = Path(sysfs_root) / name / 'device'
    nodes = sorted(p.name for p in device_dir.glob('event*'))
    if not nodes:
        raise FileNotFoundError(f"no event device found for {path} under {device_dir}")
    return os.path.join(os.path.dirname(real), nodes[0])


def joystick_button_numbers(key_codes):
    """Maps evdev key codes to the button numbers joydev reports for them.

    joydev numbers BTN_JOYSTICK..KEY_MAX first and BTN_MISC..BTN_JOYSTICK-1
    after, so pads whose A button is BTN_SOUTH still report it as button 0.
    """
    codes = sorted(set(c for c in key_codes if c >= ecodes.BTN_MISC))
    ordered = ([c for c in codes if c >= ecodes.BTN_JOYSTICK] +
               [c for c in codes if c < ecodes.BTN_JOYSTICK])
    return {code: number for number, code in enumerate(ordered)}


def open_gamepad(path):
    """Opens the pad and returns (device, {key code: button number})."""
    device = evdev.InputDevice(resolve_event_node(path))
    key_codes = device.capabilities().get(ecodes.EV_KEY, [])
    return device, joystick_button_numbers(key_codes)


def button_events(events, button_map):
    """Yields (button, pressed) for key presses and releases of mapped buttons."""
    for event in events:
        if event.type != ecodes.EV_KEY:
            continue
        if event.value not in (PRESSED, RELEASED):
            continue  # autorepeat
        button = button_map.get(event.code)
        if button is None:
            continue
        yield button, event.value == PRESSED


def watch(device, button_map, on_button, stop, poll_interval=0.2):
    """Feeds button events to on_button until stop is set.

    OSError from the device (e.g. unplugged) propagates to the caller.
    """
    while not stop.is_set():
        r, _, _ = select.select([device.fd], [], [], poll_interval)
        if not r:
            continue
        try:
            events = list(device.read())
        except BlockingIOError:
            continue
        for button, pressed in button_events(events, button_map):
            on_button(button, pressed)
