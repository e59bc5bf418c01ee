import json
import logging
import os
from pathlib import Path
from typing import List, Sequence

from vocalflow.types import DictionaryEntry

logger = logging.getLogger(__name__)


class JsonDictionaryStorage:
    """Stores the dictionary collection as a JSON array in a single file.

    Writes go to a sibling temp file first and are moved into place with
    os.replace, so a failed save leaves the previous file intact.

    Args:
        path: Location of the dictionary file (created on first save)
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> List[DictionaryEntry]:
        if not self._path.exists():
            return []

        try:
            with open(self._path, 'r', encoding='utf-8') as f:
                raw = json.load(f)
            return [DictionaryEntry.from_dict(item) for item in raw]
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning("JsonDictionaryStorage: unreadable dictionary %s (%s), using empty collection",
                           self._path, e)
            return []

    def save(self, entries: Sequence[DictionaryEntry]) -> bool:
        tmp_path = self._path.with_suffix(self._path.suffix + '.tmp')
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, 'w', encoding='utf-8') as f:
                json.dump([entry.to_dict() for entry in entries], f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self._path)
            return True
        except OSError as e:
            logger.error("JsonDictionaryStorage: failed to save %s: %s", self._path, e)
            if tmp_path.exists():
                tmp_path.unlink()
            return False

    def clear(self) -> None:
        """Remove the stored dictionary (e.g. on sign out)."""
        if self._path.exists():
            self._path.unlink()
            logger.info("JsonDictionaryStorage: dictionary cleared")
