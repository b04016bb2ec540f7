# src/smart_todo/preferences/theme.py

from __future__ import annotations

import logging

from ..core.ports import BlobBackend
from ..storage.blob_store import Slot, read_json, remove_slot, write_json

logger = logging.getLogger(__name__)


class ThemeStore:
    """The dark/light preference. One persisted boolean, no history."""

    def __init__(self, backend: BlobBackend) -> None:
        self._backend = backend
        self.dark_mode = False

    def load(self) -> bool:
        raw = read_json(self._backend, Slot.THEME)
        if raw is None:
            return self.dark_mode
        if isinstance(raw, bool):
            self.dark_mode = raw
        else:
            logger.warning("Theme slot holds %r; keeping default.", raw)
        return self.dark_mode

    def set(self, dark_mode: bool) -> bool:
        self.dark_mode = bool(dark_mode)
        write_json(self._backend, Slot.THEME, self.dark_mode)
        logger.debug("Theme set dark_mode=%s", self.dark_mode)
        return self.dark_mode

    def toggle(self) -> bool:
        return self.set(not self.dark_mode)

    def clear(self) -> None:
        self.dark_mode = False
        remove_slot(self._backend, Slot.THEME)
