"""
Prompt scheduler.

Decides when the capture window should appear. Three things can ask for it:
the repeating timer (APScheduler interval job), the global hotkey, and
explicit programmatic requests. All of them go through one bounded request
queue that is drained one request at a time, so the window controller never
sees two open requests at once.

Timer fires carry the generation number they were armed with. Re-arming bumps
the generation, so a fire that was already in flight when the interval changed
is ignored.
"""
import logging
import queue
import threading
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable, List, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from mindreel.config import Config
from mindreel.errors import RegistrationError
from mindreel.hotkeys import HotkeyBinder
from mindreel.models import Settings

logger = logging.getLogger(__name__)

TIMER_JOB_ID = "prompt_timer"

ErrorListener = Callable[[Exception], None]


class SchedulerState(str, Enum):
    IDLE = "idle"
    ARMED = "armed"
    PROMPT_OPEN = "prompt_open"


class TriggerSource(str, Enum):
    TIMER = "timer"
    HOTKEY = "hotkey"
    MANUAL = "manual"


def _now() -> datetime:
    return datetime.now(timezone.utc)


class PromptScheduler:
    """Owns the prompt timer and the global hotkey registration."""

    def __init__(
        self,
        config: Config,
        hotkeys: HotkeyBinder,
        scheduler: Optional[BackgroundScheduler] = None,
        clock: Callable[[], datetime] = _now,
    ):
        self.config = config
        self.hotkeys = hotkeys
        self.scheduler = scheduler or BackgroundScheduler(timezone="UTC")
        self._clock = clock

        self._requests: "queue.Queue[TriggerSource]" = queue.Queue(maxsize=config.request_queue_size)
        self._lock = threading.RLock()
        self._controller = None
        self._error_listeners: List[ErrorListener] = []

        self._running = False
        self._prompt_open = False
        self._interval_minutes = 0
        self._shortcut: Optional[str] = None
        self._generation = 0

        self.armed_at: Optional[datetime] = None
        self.last_error: Optional[Exception] = None

        self._stop_event = threading.Event()
        self._dispatcher: Optional[threading.Thread] = None

    # ------------------------------------------------------------------
    # Wiring
    # ------------------------------------------------------------------

    def bind_controller(self, controller) -> None:
        """Attach the window controller that open requests are delivered to."""
        self._controller = controller

    def add_error_listener(self, listener: ErrorListener) -> None:
        self._error_listeners.append(listener)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> SchedulerState:
        with self._lock:
            if self._prompt_open:
                return SchedulerState.PROMPT_OPEN
            if self._running:
                return SchedulerState.ARMED
            return SchedulerState.IDLE

    @property
    def running(self) -> bool:
        return self._running

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def effective_interval_minutes(self) -> int:
        """Interval of the armed timer in minutes; 0 when no timer is armed."""
        job = self.scheduler.get_job(TIMER_JOB_ID)
        if job is None:
            return 0
        return int(job.trigger.interval.total_seconds() // 60)

    @property
    def is_shortcut_registered(self) -> bool:
        return self.hotkeys.bound_accelerator is not None

    @property
    def registered_shortcut(self) -> Optional[str]:
        return self.hotkeys.bound_accelerator

    def mark_prompt_open(self) -> None:
        with self._lock:
            self._prompt_open = True

    def mark_prompt_closed(self) -> None:
        with self._lock:
            self._prompt_open = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self, run_dispatcher: bool = True) -> None:
        """Arm the timer and hotkey from the last applied settings."""
        with self._lock:
            if self._running:
                return
            if not self.scheduler.running:
                self.scheduler.start()
            self._running = True
            self._arm_timer()
            self._bind_hotkey(self._shortcut)

        if run_dispatcher:
            self._stop_event.clear()
            self._dispatcher = threading.Thread(
                target=self._dispatch_loop, name="mindreel-prompt-dispatcher", daemon=True
            )
            self._dispatcher.start()
        logger.info("Prompt scheduler started")

    def stop(self) -> None:
        """Cancel the timer, release the hotkey and stop the dispatcher."""
        self._stop_event.set()
        if self._dispatcher is not None:
            self._dispatcher.join(timeout=2)
            self._dispatcher = None

        with self._lock:
            self._cancel_timer()
            self._generation += 1
            self.hotkeys.unbind()
            if self.scheduler.running:
                self.scheduler.shutdown(wait=False)
            self._running = False
            self._prompt_open = False
        logger.info("Prompt scheduler stopped")

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def apply_settings(self, settings: Settings) -> None:
        """Re-arm the timer and hotkey for changed settings.

        Before start() the values are only remembered.
        """
        with self._lock:
            interval_changed = settings.popup_interval_minutes != self._interval_minutes
            shortcut_changed = settings.global_shortcut != self._shortcut
            self._interval_minutes = settings.popup_interval_minutes
            self._shortcut = settings.global_shortcut

            if not self._running:
                return
            if interval_changed:
                self._arm_timer()
            if shortcut_changed:
                self._bind_hotkey(self._shortcut)

    def register_shortcut(self, accelerator: Optional[str]) -> bool:
        """Bind a shortcut without touching stored settings. False on failure."""
        with self._lock:
            self._shortcut = accelerator
            return self._bind_hotkey(accelerator)

    def _arm_timer(self) -> None:
        self._cancel_timer()
        self._generation += 1

        minutes = self._interval_minutes
        if minutes <= 0:
            self.armed_at = None
            logger.info("Automatic prompts disabled")
            return

        self.armed_at = self._clock()
        trigger = IntervalTrigger(
            minutes=minutes,
            start_date=self.armed_at + timedelta(minutes=minutes),
            timezone="UTC",
        )
        self.scheduler.add_job(
            func=self._on_timer_fire,
            trigger=trigger,
            args=[self._generation],
            id=TIMER_JOB_ID,
            name="Open the capture prompt",
            replace_existing=True,
            coalesce=True,
            max_instances=1,
        )
        logger.info(f"Prompt timer armed every {minutes} minutes")

    def _cancel_timer(self) -> None:
        if self.scheduler.get_job(TIMER_JOB_ID) is not None:
            self.scheduler.remove_job(TIMER_JOB_ID)

    def _bind_hotkey(self, accelerator: Optional[str]) -> bool:
        self.hotkeys.unbind()
        if not accelerator:
            logger.info("Global shortcut disabled")
            return True
        try:
            self.hotkeys.bind(accelerator, self._on_hotkey)
        except RegistrationError as e:
            self._report_error(e)
            return False
        return True

    def _report_error(self, error: Exception) -> None:
        self.last_error = error
        logger.warning(str(error))
        for listener in list(self._error_listeners):
            listener(error)

    # ------------------------------------------------------------------
    # Open requests
    # ------------------------------------------------------------------

    def _on_timer_fire(self, generation: int) -> None:
        if generation != self._generation:
            logger.debug(f"Ignoring stale timer fire (generation {generation})")
            return
        self.request_open(TriggerSource.TIMER)

    def _on_hotkey(self) -> None:
        self.request_open(TriggerSource.HOTKEY)

    def open_now(self) -> bool:
        return self.request_open(TriggerSource.MANUAL)

    def request_open(self, source: TriggerSource) -> bool:
        """Queue an open request. Returns False if the queue was full."""
        try:
            self._requests.put_nowait(source)
        except queue.Full:
            logger.warning(f"Open request from {source.value} dropped; queue is full")
            return False
        logger.debug(f"Open requested by {source.value}")
        return True

    @property
    def pending_requests(self) -> int:
        return self._requests.qsize()

    def process_pending(self) -> int:
        """Deliver every queued request on the calling thread."""
        handled = 0
        while True:
            try:
                source = self._requests.get_nowait()
            except queue.Empty:
                return handled
            self._dispatch(source)
            handled += 1

    def _dispatch(self, source: TriggerSource) -> None:
        if self._controller is None:
            logger.warning(f"No window controller bound; ignoring {source.value} request")
            return
        self._controller.open()

    def _dispatch_loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                source = self._requests.get(timeout=0.5)
            except queue.Empty:
                continue
            try:
                self._dispatch(source)
            except Exception as e:
                logger.exception(f"Failed to open prompt for {source.value} request")
                self._report_error(e)
