"""User profile persistence."""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Union

import structlog


logger = structlog.get_logger()


class JsonProfileStore:
    """Profile dictionary stored as JSON; unknown keys are preserved on save."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path).expanduser()

    def load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            return json.load(f)

    def save(self, profile: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            mode="w", dir=self.path.parent, delete=False, suffix=".tmp", encoding="utf-8"
        ) as tmp_file:
            json.dump(profile, tmp_file, indent=2, ensure_ascii=False)
            tmp_file.flush()
            os.fsync(tmp_file.fileno())
            tmp_path = tmp_file.name
        os.replace(tmp_path, self.path)

    def user_name(self) -> str:
        try:
            return self.load().get("user_name") or ""
        except (OSError, ValueError) as e:
            logger.warning("Failed to read profile", path=str(self.path), error=str(e))
            return ""


def update_user_name(profile_store, name: str) -> bool:
    """Write ``name`` into the profile when it differs; True when saved."""
    profile = profile_store.load()
    if profile.get("user_name") == name:
        return False
    profile["user_name"] = name
    profile_store.save(profile)
    logger.info("Updated profile user_name", user_name=name)
    return True
