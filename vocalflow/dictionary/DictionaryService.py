"""
DictionaryService - user vocabulary and the recognition hints derived from it.

The collection is read from the storage collaborator on every call and each
mutation saves the whole updated collection. A mutation counts as applied only
after the save succeeded; nothing is cached in between, so a failed save leaves
no trace in later reads.
"""
import asyncio
import logging
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from vocalflow.errors import PersistenceError, ValidationError
from vocalflow.protocols import DictionaryStorage
from vocalflow.types import DictionaryEntry

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = frozenset({'word', 'pronunciation', 'context'})


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class DictionaryService:
    """
    Manages dictionary entries and renders them into provider hints.

    Args:
        storage: Persistence collaborator; None means no storage is available,
            reads return an empty collection and mutations fail
    """

    HINT_PREFIX = "Custom dictionary words to consider: "

    def __init__(self, storage: Optional[DictionaryStorage]) -> None:
        self._storage = storage

    async def get_entries(self) -> List[DictionaryEntry]:
        if self._storage is None:
            return []
        try:
            return list(await asyncio.to_thread(self._storage.load))
        except Exception:
            logger.exception("DictionaryService: storage load failed, using empty collection")
            return []

    async def add_entry(
        self,
        word: str,
        pronunciation: Optional[str] = None,
        context: Optional[str] = None
    ) -> DictionaryEntry:
        """
        Add a word to the dictionary.

        Returns:
            The stored entry with trimmed fields

        Raises:
            ValidationError: word is empty after trimming
            PersistenceError: the collection could not be saved
        """
        cleaned = _clean(word)
        if cleaned is None:
            raise ValidationError("Dictionary word must not be empty")

        entry = DictionaryEntry(
            id=uuid.uuid4().hex,
            word=cleaned,
            pronunciation=_clean(pronunciation),
            context=_clean(context),
            created_at=datetime.now(timezone.utc),
        )

        entries = await self.get_entries()
        entries.append(entry)
        if not await self._persist(entries):
            raise PersistenceError(f"Failed to save dictionary entry '{cleaned}'")

        logger.info("DictionaryService: added '%s'", cleaned)
        return entry

    async def update_entry(self, entry_id: str, updates: Dict[str, Any]) -> bool:
        """
        Partially update word, pronunciation and/or context of an entry.

        Returns:
            False if the id is absent or the save failed

        Raises:
            ValidationError: unknown field, or word empty after trimming
        """
        unknown = set(updates) - _UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update dictionary fields: {sorted(unknown)}")

        changes = {key: _clean(value) for key, value in updates.items()}
        if 'word' in changes and changes['word'] is None:
            raise ValidationError("Dictionary word must not be empty")

        entries = await self.get_entries()
        for index, entry in enumerate(entries):
            if entry.id == entry_id:
                entries[index] = replace(entry, **changes)
                break
        else:
            return False

        return await self._persist(entries)

    async def remove_entry(self, entry_id: str) -> bool:
        entries = await self.get_entries()
        remaining = [entry for entry in entries if entry.id != entry_id]
        if len(remaining) == len(entries):
            return False
        return await self._persist(remaining)

    async def render_context_hint(self) -> str:
        """
        Render all entries into one sentence for a provider's prompt field.

        Returns:
            '' for an empty dictionary, otherwise e.g.
            'Custom dictionary words to consider: "Kubernetes" (pronounced: koo-ber-net-eez) - container platform'
        """
        entries = await self.get_entries()
        if not entries:
            return ''

        words = []
        for entry in entries:
            item = f'"{entry.word}"'
            if entry.pronunciation:
                item += f' (pronounced: {entry.pronunciation})'
            if entry.context:
                item += f' - {entry.context}'
            words.append(item)

        return self.HINT_PREFIX + ', '.join(words)

    async def keywords_for_boosting(self, limit: int = 15) -> str:
        """Comma-separated words for keyword boosting, without any wrapper text."""
        entries = await self.get_entries()
        return ','.join(entry.word for entry in entries[:limit])

    async def _persist(self, entries: List[DictionaryEntry]) -> bool:
        if self._storage is None:
            logger.warning("DictionaryService: no storage available, change not saved")
            return False
        try:
            saved = await asyncio.to_thread(self._storage.save, entries)
        except Exception:
            logger.exception("DictionaryService: storage save failed")
            return False
        if not saved:
            logger.error("DictionaryService: storage rejected save of %d entries", len(entries))
        return bool(saved)
