"""
Tests for accelerator translation.
"""
import pytest

from mindreel.errors import RegistrationError
from mindreel.hotkeys import to_pynput_hotkey


class TestToPynputHotkey:
    """Tests for to_pynput_hotkey."""

    def test_default_shortcut(self):
        """The default accelerator maps to alt, cmd and space."""
        assert to_pynput_hotkey("Option+Command+Space") == "<alt>+<cmd>+<space>"

    def test_command_or_control_depends_on_platform(self):
        """CommandOrControl is cmd on macOS and ctrl elsewhere."""
        assert to_pynput_hotkey("CommandOrControl+Shift+K", platform="darwin") == "<cmd>+<shift>+k"
        assert to_pynput_hotkey("CmdOrCtrl+Shift+K", platform="linux") == "<ctrl>+<shift>+k"

    def test_case_and_spacing_are_ignored(self):
        """Key names are case and space insensitive."""
        assert to_pynput_hotkey("ctrl + ALT + j") == "<ctrl>+<alt>+j"

    def test_function_and_named_keys(self):
        """Function keys and named keys are wrapped in angle brackets."""
        assert to_pynput_hotkey("F9") == "<f9>"
        assert to_pynput_hotkey("Shift+PageDown") == "<shift>+<page_down>"
        assert to_pynput_hotkey("Alt+Return") == "<alt>+<enter>"

    def test_repeated_modifier_collapses(self):
        """Aliases of one modifier are bound once."""
        assert to_pynput_hotkey("Cmd+Command+N") == "<cmd>+n"

    @pytest.mark.parametrize("accelerator", [
        "Ctrl+",
        "+K",
        "Hyper+K",
        "Shift+Alt",
        "Ctrl+F25",
        "Ctrl+Banana",
    ])
    def test_invalid(self, accelerator):
        """Malformed accelerators raise RegistrationError."""
        with pytest.raises(RegistrationError) as excinfo:
            to_pynput_hotkey(accelerator)
        assert excinfo.value.accelerator == accelerator
