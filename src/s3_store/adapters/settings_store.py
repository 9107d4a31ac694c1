"""Settings providers: the key/value store the storage options are persisted in."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class BaseSettingsProvider:
    """Base class for settings providers (to be extended by specific implementations)"""

    def get(self, name: str, default: Any = None) -> Any:
        raise NotImplementedError

    def set(self, name: str, value: Any) -> None:
        raise NotImplementedError

    def all(self) -> Dict[str, Any]:
        raise NotImplementedError


class InMemorySettingsProvider(BaseSettingsProvider):
    """Keeps settings in a dict for the lifetime of the process."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._values: Dict[str, Any] = dict(initial or {})

    def get(self, name: str, default: Any = None) -> Any:
        return self._values.get(name, default)

    def set(self, name: str, value: Any) -> None:
        self._values[name] = value

    def all(self) -> Dict[str, Any]:
        return dict(self._values)


class JsonFileSettingsProvider(BaseSettingsProvider):
    """Persists settings as a flat JSON object on disk.

    The file is re-read on every ``get`` so separate processes (API and CLI)
    see each other's changes, and rewritten as a whole on every ``set``.
    """

    def __init__(self, settings_file: str = ".s3_store.json"):
        self.settings_file = Path(settings_file)

    def _load(self) -> Dict[str, Any]:
        if not self.settings_file.exists():
            return {}
        with open(self.settings_file, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Settings file {self.settings_file} must contain a JSON object")
        return data

    def _save(self, data: Dict[str, Any]) -> None:
        if self.settings_file.parent != Path("."):
            self.settings_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self.settings_file, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, sort_keys=True)

    def get(self, name: str, default: Any = None) -> Any:
        return self._load().get(name, default)

    def set(self, name: str, value: Any) -> None:
        data = self._load()
        data[name] = value
        self._save(data)
        logger.debug(f"Saved setting '{name}' to {self.settings_file}")

    def all(self) -> Dict[str, Any]:
        return self._load()
