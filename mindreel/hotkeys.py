"""
Global hotkey binding.

Settings store shortcuts as Electron-style accelerators
("Option+Command+Space", "CommandOrControl+Shift+K"). The default binder
translates them to pynput's syntax and listens with keyboard.GlobalHotKeys.
"""
import logging
import re
import sys
import threading
from typing import Callable, Optional

from mindreel.errors import RegistrationError

logger = logging.getLogger(__name__)

MODIFIERS = {
    "command": "<cmd>",
    "cmd": "<cmd>",
    "super": "<cmd>",
    "meta": "<cmd>",
    "control": "<ctrl>",
    "ctrl": "<ctrl>",
    "alt": "<alt>",
    "option": "<alt>",
    "altgr": "<alt_gr>",
    "shift": "<shift>",
}

NAMED_KEYS = {
    "space": "space",
    "tab": "tab",
    "enter": "enter",
    "return": "enter",
    "esc": "esc",
    "escape": "esc",
    "backspace": "backspace",
    "delete": "delete",
    "insert": "insert",
    "up": "up",
    "down": "down",
    "left": "left",
    "right": "right",
    "home": "home",
    "end": "end",
    "pageup": "page_up",
    "pagedown": "page_down",
}

FUNCTION_KEY = re.compile(r"^f([1-9]|1[0-9]|2[0-4])$")


def to_pynput_hotkey(accelerator: str, platform: Optional[str] = None) -> str:
    """Translate an accelerator string into pynput GlobalHotKeys syntax."""
    platform = platform or sys.platform
    parts = [part.strip() for part in accelerator.split("+")]
    if not parts or any(part == "" for part in parts):
        raise RegistrationError(accelerator, "malformed key combination")

    *modifiers, key = parts
    tokens = []
    for modifier in modifiers:
        name = modifier.lower()
        if name in ("commandorcontrol", "cmdorctrl"):
            token = "<cmd>" if platform == "darwin" else "<ctrl>"
        else:
            token = MODIFIERS.get(name)
        if token is None:
            raise RegistrationError(accelerator, f"unknown modifier '{modifier}'")
        if token not in tokens:
            tokens.append(token)

    name = key.lower()
    if name in MODIFIERS:
        raise RegistrationError(accelerator, "a shortcut needs a non-modifier key")
    if name in NAMED_KEYS:
        tokens.append(f"<{NAMED_KEYS[name]}>")
    elif FUNCTION_KEY.match(name):
        tokens.append(f"<{name}>")
    elif len(key) == 1:
        tokens.append(name)
    else:
        raise RegistrationError(accelerator, f"unsupported key '{key}'")

    return "+".join(tokens)


class HotkeyBinder:
    """Binds at most one global key combination at a time."""

    @property
    def bound_accelerator(self) -> Optional[str]:
        raise NotImplementedError

    def bind(self, accelerator: str, callback: Callable[[], None]) -> None:
        """Bind accelerator, replacing any previous binding. Raises RegistrationError."""
        raise NotImplementedError

    def unbind(self) -> None:
        raise NotImplementedError


class PynputHotkeyBinder(HotkeyBinder):
    def __init__(self):
        self._listener = None
        self._accelerator: Optional[str] = None
        self._lock = threading.Lock()

    @property
    def bound_accelerator(self) -> Optional[str]:
        return self._accelerator

    def bind(self, accelerator: str, callback: Callable[[], None]) -> None:
        hotkey = to_pynput_hotkey(accelerator)
        with self._lock:
            self._stop_listener()
            try:
                # Imported here: pynput needs a display/input backend at import time
                from pynput import keyboard

                listener = keyboard.GlobalHotKeys({hotkey: callback})
                listener.start()
            except Exception as e:
                raise RegistrationError(accelerator, str(e)) from e
            self._listener = listener
            self._accelerator = accelerator
        logger.info(f"Global shortcut bound: {accelerator} ({hotkey})")

    def unbind(self) -> None:
        with self._lock:
            accelerator = self._accelerator
            self._stop_listener()
        if accelerator:
            logger.info(f"Global shortcut released: {accelerator}")

    def _stop_listener(self) -> None:
        if self._listener is not None:
            self._listener.stop()
            self._listener = None
        self._accelerator = None
