from typing import Optional

from stacksprint.core.config_store import ConfigStore
from stacksprint.core.generation_client import GenerationClient
from stacksprint.core.preset_repository import PresetRepository
from stacksprint.core.preview import GenerationView
from stacksprint.core.scheduler import RequestScheduler
from stacksprint.utils.config import PREVIEW_DEBOUNCE_MS, PRESET_FILE
from stacksprint.utils.storage import JsonFileStore


class WorkbenchSession:
    """One configuration session: the store plus everything wired around it."""

    def __init__(self,
                 store: Optional[ConfigStore] = None,
                 client: Optional[GenerationClient] = None,
                 presets: Optional[PresetRepository] = None,
                 view: Optional[GenerationView] = None,
                 quiet_period_ms: int = PREVIEW_DEBOUNCE_MS,
                 preview_on_start: bool = True):
        self.store = store or ConfigStore()
        self.client = client or GenerationClient()
        self.presets = presets or PresetRepository(JsonFileStore(PRESET_FILE))
        self.view = view or GenerationView()
        self.scheduler = RequestScheduler(
            self.store,
            self.client,
            self.view,
            quiet_period_ms=quiet_period_ms,
            preview_on_start=preview_on_start,
        )

    @property
    def notifier(self):
        return self.view.notifier

    def start(self) -> None:
        self.scheduler.start()

    def close(self) -> None:
        self.scheduler.close()
