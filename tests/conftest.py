"""
Shared fixtures: a temp-file SQLite database, a fake window host, a fake
hotkey binder and a paused APScheduler so timer jobs can be inspected and
fired by hand.
"""
from datetime import datetime, timezone
from typing import List

import pytest
from apscheduler.schedulers.background import BackgroundScheduler

from mindreel.config import Config
from mindreel.core import MindReelCore
from mindreel.database import Database
from mindreel.errors import RegistrationError
from mindreel.hotkeys import HotkeyBinder
from mindreel.migrations import MigrationRunner
from mindreel.scheduler import PromptScheduler
from mindreel.window import WindowHost


class FakeWindowHost(WindowHost):
    def __init__(self):
        self.shows = 0
        self.focuses = 0
        self.closes = 0
        self.on_show = None

    def show_prompt(self):
        self.shows += 1
        if self.on_show:
            self.on_show()

    def focus_prompt(self):
        self.focuses += 1

    def close_prompt(self):
        self.closes += 1


class FakeHotkeyBinder(HotkeyBinder):
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.bind_calls: List[str] = []
        self.unbind_calls = 0
        self.callback = None
        self._accelerator = None

    @property
    def bound_accelerator(self):
        return self._accelerator

    def bind(self, accelerator, callback):
        self.bind_calls.append(accelerator)
        if self.fail:
            raise RegistrationError(accelerator, "already in use by another application")
        self._accelerator = accelerator
        self.callback = callback

    def unbind(self):
        self.unbind_calls += 1
        self._accelerator = None
        self.callback = None

    def press(self):
        if self.callback:
            self.callback()


def _fire_times(trigger, start: datetime, end: datetime) -> List[datetime]:
    """Every fire time of an APScheduler trigger after start, up to and including end."""
    times = []
    next_fire = trigger.get_next_fire_time(None, start)
    while next_fire is not None and next_fire <= end:
        times.append(next_fire)
        next_fire = trigger.get_next_fire_time(next_fire, next_fire)
    return times


def _whole_second_clock() -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0)


def paused_background_scheduler() -> BackgroundScheduler:
    scheduler = BackgroundScheduler(timezone="UTC")
    scheduler.start(paused=True)
    return scheduler


@pytest.fixture
def config(tmp_path):
    return Config(data_dir=tmp_path, open_on_start=False)


@pytest.fixture
def raw_database(config):
    """Database with no migrations applied."""
    database = Database(config)
    yield database
    database.dispose()


@pytest.fixture
def database(raw_database, config):
    MigrationRunner(
        raw_database,
        settings_defaults={
            "popup_interval_minutes": config.default_popup_interval_minutes,
            "global_shortcut": config.default_global_shortcut,
        },
    ).apply_pending()
    return raw_database


@pytest.fixture
def host():
    return FakeWindowHost()


@pytest.fixture
def hotkeys():
    return FakeHotkeyBinder()


@pytest.fixture
def background():
    scheduler = paused_background_scheduler()
    yield scheduler
    if scheduler.running:
        scheduler.shutdown(wait=False)


@pytest.fixture
def prompt_scheduler(config, hotkeys, background):
    scheduler = PromptScheduler(config, hotkeys, scheduler=background, clock=_whole_second_clock)
    yield scheduler
    scheduler.stop()


@pytest.fixture
def fire_times():
    return _fire_times


@pytest.fixture
def make_core(host, hotkeys):
    cores = []

    def factory(config, start=True):
        core = MindReelCore(config, host, hotkeys=hotkeys, scheduler=paused_background_scheduler())
        cores.append(core)
        if start:
            core.startup(run_dispatcher=False)
        return core

    yield factory
    for core in cores:
        core.shutdown()


@pytest.fixture
def core(make_core, config):
    return make_core(config)
