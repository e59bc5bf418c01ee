import re
from typing import Iterable

from vocalflow.types import DictationMode

DEFAULT_ACTION_KEYWORDS = (
    'open', 'launch', 'start', 'run', 'execute',
    'screenshot', 'capture', 'take a picture',
    'find', 'search', 'locate', 'look for',
    'organize', 'move', 'delete', 'create folder',
    'install', 'update', 'download',
    'file', 'terminal',
)


class ModeClassifier:
    """Routes a request to the text path or the tool path by action keywords.

    A keyword matches as a whole word or phrase, case-insensitively, so
    "opener" does not count as "open".
    """

    def __init__(self, action_keywords: Iterable[str] = DEFAULT_ACTION_KEYWORDS) -> None:
        keywords = sorted({k.strip().lower() for k in action_keywords if k.strip()}, key=len, reverse=True)
        alternation = '|'.join(re.escape(k).replace(r'\ ', r'\s+') for k in keywords)
        self._pattern = re.compile(rf'\b(?:{alternation})\b', re.IGNORECASE) if keywords else None

    def is_command(self, text: str) -> bool:
        if self._pattern is None:
            return False
        return self._pattern.search(text) is not None

    def classify(self, text: str) -> DictationMode:
        return DictationMode.COMMAND if self.is_command(text) else DictationMode.DICTATION
