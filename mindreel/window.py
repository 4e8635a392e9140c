"""
Capture window controller.

The controller keeps the at-most-one-window rule. The native window itself is
created by a WindowHost supplied by the presentation layer; the host tells the
controller when the user closes the window through handle_close().
"""
import logging
import threading

from mindreel.models import Entry
from mindreel.scheduler import PromptScheduler
from mindreel.services.entries import EntryStore

logger = logging.getLogger(__name__)


class WindowHost:
    """Native side of the capture window."""

    def show_prompt(self) -> None:
        raise NotImplementedError

    def focus_prompt(self) -> None:
        raise NotImplementedError

    def close_prompt(self) -> None:
        raise NotImplementedError


class PromptWindowController:
    def __init__(self, host: WindowHost, entries: EntryStore, scheduler: PromptScheduler):
        self.host = host
        self.entries = entries
        self.scheduler = scheduler
        self._lock = threading.RLock()
        self._is_open = False
        scheduler.bind_controller(self)

    @property
    def is_open(self) -> bool:
        return self._is_open

    def open(self) -> bool:
        """Show the window, or focus it if one is already open.

        Returns True when a new window was shown.
        """
        with self._lock:
            if self._is_open:
                logger.info("Prompt already open; focusing it")
                self.host.focus_prompt()
                return False
            self.host.show_prompt()
            self._is_open = True
            self.scheduler.mark_prompt_open()
        logger.info("Prompt opened")
        return True

    def handle_save(self, content: str) -> Entry:
        """Persist the note and close the window.

        If the entry cannot be stored the error propagates and the window stays
        open so the text is not lost.
        """
        entry = self.entries.create(content)
        self.close()
        return entry

    def close(self) -> None:
        with self._lock:
            if not self._is_open:
                return
            self.host.close_prompt()
            self.handle_close()

    def handle_close(self) -> None:
        """Called by the host when the window has gone away."""
        with self._lock:
            if not self._is_open:
                logger.debug("Close notification with no open prompt; ignored")
                return
            self._is_open = False
            self.scheduler.mark_prompt_closed()
        logger.info("Prompt closed")
