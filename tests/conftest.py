from typing import Any, List, Optional, Tuple

import pytest

from guirlande.core.config import ServerConfig
from guirlande.core.context import build_context
from guirlande.core.documents import GuirlandeDocument, ModuleDocument, ModuleType, ProjectDocument
from guirlande.core.output import MockColorOutput
from guirlande.core.scheduler import Callback, Scheduler, TaskHandle, invoke
from guirlande.core.storage import DocumentStore, MemoryCollection
from guirlande.modules.session import ModuleSession

API_TOKEN = "secret-token"
AUTH_HEADERS = {"Authorization": f"Bearer {API_TOKEN}"}


class ManualTask(TaskHandle):
    def __init__(self, key: str, callback: Callback, due: float, interval: Optional[float]):
        self.key = key
        self.callback = callback
        self.due = due
        self.interval = interval
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    @property
    def recurring(self) -> bool:
        return self.interval is not None

    def stop(self) -> None:
        self._active = False


class ManualScheduler(Scheduler):
    """Scheduler driven by `advance()` instead of wall-clock time"""

    def __init__(self):
        self.now = 0.0
        self.tasks: List[ManualTask] = []

    def run_recurring(self, key: str, callback: Callback, interval_ms: float) -> TaskHandle:
        existing = self.recurring(key)
        if existing is not None:
            return existing
        task = ManualTask(key, callback, self.now + interval_ms, interval_ms)
        self.tasks.append(task)
        return task

    def run_once(self, callback: Callback, delay_ms: float) -> TaskHandle:
        task = ManualTask(f"timer-{len(self.tasks)}", callback, self.now + delay_ms, None)
        self.tasks.append(task)
        return task

    async def stop_all(self) -> None:
        for task in self.tasks:
            task.stop()

    def recurring(self, key: str) -> Optional[ManualTask]:
        for task in self.active_tasks:
            if task.recurring and task.key == key:
                return task
        return None

    @property
    def active_tasks(self) -> List[ManualTask]:
        return [task for task in self.tasks if task.active]

    async def advance(self, ms: float) -> None:
        """Fire every task falling due within the next `ms` milliseconds, in order"""
        target = self.now + ms
        while True:
            due = [task for task in self.active_tasks if task.due <= target]
            if not due:
                break
            task = min(due, key=lambda t: t.due)
            self.now = task.due
            if not task.recurring:
                task.stop()
            await invoke(task.callback, task.key)
            if task.recurring and task.active:
                task.due += task.interval
        self.now = target


class FakeSession(ModuleSession):
    """Session recording everything emitted to the device"""

    def __init__(self):
        super().__init__()
        self.emitted: List[Tuple[str, Any]] = []
        self.disconnect_count = 0

    def emit(self, event: str, data: Any = None) -> None:
        self.emitted.append((event, data))

    def disconnect(self) -> None:
        self.disconnect_count += 1
        self._closed = True

    def events(self, name: str) -> List[Any]:
        return [data for event, data in self.emitted if event == name]

    def drop_peer(self) -> None:
        """Simulate the device going away"""
        self._closed = True


class CountingCollection(MemoryCollection):
    """Memory collection counting persistence writes"""

    def __init__(self, name, model):
        super().__init__(name, model)
        self.writes = 0

    async def _changed(self) -> None:
        self.writes += 1


def make_store() -> DocumentStore:
    return DocumentStore(
        CountingCollection("modules", ModuleDocument),
        MemoryCollection("guirlande", GuirlandeDocument),
        MemoryCollection("projects", ProjectDocument),
    )


def make_config(**overrides) -> ServerConfig:
    data = {"random_seed": 42, "auth": {"api_tokens": [API_TOKEN]}}
    data.update(overrides)
    return ServerConfig.from_dict(data)


def make_context(config: ServerConfig, scheduler: Optional[Scheduler] = None):
    return build_context(
        config,
        store=make_store(),
        scheduler=scheduler or ManualScheduler(),
        output=MockColorOutput(config.guirlande.pins),
    )


@pytest.fixture
def config():
    return make_config()


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def context(config, scheduler):
    return make_context(config, scheduler)


@pytest.fixture
def production_context(scheduler):
    return make_context(make_config(environment="production"), scheduler)


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
async def led_strip(context):
    """Validated LED strip module"""
    module = await context.modules.create(ModuleType.LED_STRIP)
    await module.validate()
    return module


@pytest.fixture
async def weather(context):
    """Validated weather module"""
    module = await context.modules.create(ModuleType.WEATHER)
    await module.validate()
    return module
