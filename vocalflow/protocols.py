"""Protocol definitions for the collaborators of the dictation core.

This module defines structural interfaces using Python's Protocol for duck typing.
"""

from typing import Protocol, Sequence

from vocalflow.types import (
    CapturedAudio,
    DictionaryEntry,
    FocusedElement,
    ProviderId,
    TranscriptionOptions,
    TranscriptionResult,
)


class TranscriptionProvider(Protocol):
    """Speech-to-text backend.

    Implementations raise ProviderError for non-success upstream responses,
    timeouts and network failures. An answer without speech is returned as a
    TranscriptionResult with succeeded=False, never raised.
    """

    provider_id: ProviderId

    # True when the backend reads audio from a file rather than a buffer
    requires_file: bool

    async def transcribe(self, audio: CapturedAudio, options: TranscriptionOptions) -> TranscriptionResult:
        ...


class DictionaryStorage(Protocol):
    """Persistence for the whole dictionary collection.

    save() replaces the stored collection and returns False on failure.
    """

    def load(self) -> Sequence[DictionaryEntry]:
        ...

    def save(self, entries: Sequence[DictionaryEntry]) -> bool:
        ...


class AccessibilityBackend(Protocol):
    """OS accessibility query for the frontmost focused element.

    Raises AccessibilityError when the element cannot be read.
    """

    def query_focused_element(self, timeout_s: float, detailed: bool = True) -> FocusedElement:
        ...
