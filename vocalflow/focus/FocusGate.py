"""
FocusGate - decides whether the focused UI element can receive dictated text.

Every query runs the accessibility backend on a worker thread under a bounded
timeout. Timeouts and any backend failure are reported as "not a text input"
so dictation never lands in a non-text target. The gate never raises.
"""
import asyncio
import logging

from vocalflow.errors import AccessibilityError
from vocalflow.protocols import AccessibilityBackend
from vocalflow.types import FocusSnapshot, FocusedElement

logger = logging.getLogger(__name__)


class FocusGate:
    """
    Args:
        backend: Accessibility collaborator
        fast_timeout_s: Timeout for hot-path checks
        detailed_timeout_s: Timeout for full element descriptions
    """

    def __init__(
        self,
        backend: AccessibilityBackend,
        fast_timeout_s: float = 0.9,
        detailed_timeout_s: float = 1.5
    ) -> None:
        self._backend = backend
        self._fast_timeout_s = fast_timeout_s
        self._detailed_timeout_s = detailed_timeout_s

    async def is_text_input_focused(self) -> bool:
        snapshot = await self.describe_focus()
        return snapshot.is_text_input

    async def is_text_input_focused_fast(self) -> bool:
        try:
            element = await self._query(self._fast_timeout_s, detailed=False)
        except (AccessibilityError, asyncio.TimeoutError, OSError) as e:
            logger.debug("FocusGate: fast check failed (%s), treating as non-text", e)
            return False
        except Exception:
            logger.exception("FocusGate: unexpected accessibility failure, treating as non-text")
            return False
        return FocusSnapshot.from_element(element).is_text_input

    async def describe_focus(self) -> FocusSnapshot:
        try:
            element = await self._query(self._detailed_timeout_s, detailed=True)
        except (AccessibilityError, asyncio.TimeoutError, OSError) as e:
            logger.debug("FocusGate: focus query failed (%s), treating as non-text", e)
            return FocusSnapshot.unavailable(str(e) or type(e).__name__)
        except Exception as e:
            logger.exception("FocusGate: unexpected accessibility failure, treating as non-text")
            return FocusSnapshot.unavailable(str(e) or type(e).__name__)

        snapshot = FocusSnapshot.from_element(element)
        logger.debug("FocusGate: app=%s role=%s text_input=%s",
                     snapshot.application, snapshot.role, snapshot.is_text_input)
        return snapshot

    async def _query(self, timeout_s: float, detailed: bool) -> FocusedElement:
        return await asyncio.wait_for(
            asyncio.to_thread(self._backend.query_focused_element, timeout_s, detailed),
            timeout=timeout_s,
        )
