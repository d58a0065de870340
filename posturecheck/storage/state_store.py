from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from ..config import (
    ConfigImportError,
    PostureConfig,
    export_payload,
    load_config,
    parse_import,
    persisted_payload,
)


logger = logging.getLogger(__name__)


@dataclass
class StateStore:
    path: Path

    def load(self) -> PostureConfig:
        if not self.path.exists():
            return PostureConfig()
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
            return load_config(payload)
        except Exception as exc:
            # Corrupt state is dropped as a whole; never half-loaded.
            logger.warning("event=load_state failed path=%s error=%s", self.path, exc)
            return PostureConfig()

    def save(self, config: PostureConfig) -> bool:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(persisted_payload(config), indent=2), encoding="utf-8")
            return True
        except Exception as exc:
            logger.warning("event=save_state failed path=%s error=%s", self.path, exc)
            return False

    @staticmethod
    def export_to(path: Path, config: PostureConfig) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(export_payload(config), indent=2, ensure_ascii=False), encoding="utf-8")
        return path

    @staticmethod
    def import_from(path: Path) -> PostureConfig:
        try:
            payload = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise ConfigImportError(f"Could not read settings file: {exc}") from exc
        return parse_import(payload)
