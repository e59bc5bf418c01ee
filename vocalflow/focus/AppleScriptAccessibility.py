import logging
import subprocess

from vocalflow.errors import AccessibilityError
from vocalflow.types import FocusedElement

logger = logging.getLogger(__name__)

_FIELD_SEPARATOR = "|"

_DETAILED_SCRIPT = '''
tell application "System Events"
  set frontApp to (first application process whose frontmost is true)
  set appName to name of frontApp
  set focusedElement to focused of frontApp
  set elementRole to role of focusedElement
  set elementDescription to ""
  try
    set elementDescription to description of focusedElement
  end try
  set elementEdit to "unknown"
  try
    set elementEdit to (editable of focusedElement) as text
  end try
  return appName & "|" & elementRole & "|" & elementDescription & "|" & elementEdit
end tell
'''

_FAST_SCRIPT = '''
tell application "System Events"
  set focusedElement to focused of (first application process whose frontmost is true)
  set elementEdit to "unknown"
  try
    set elementEdit to (editable of focusedElement) as text
  end try
  return "|" & (role of focusedElement) & "||" & elementEdit
end tell
'''


def _parse_editable(raw: str):
    raw = raw.strip().lower()
    if raw == "true":
        return True
    if raw == "false":
        return False
    return None


class AppleScriptAccessibility:
    """Reads the focused UI element of the frontmost macOS application.

    Runs System Events scripts through osascript. Output is a single line
    "application|role|description|editable"; the fast script leaves
    application and description empty.
    """

    def __init__(self, osascript: str = "osascript") -> None:
        self._osascript = osascript

    def query_focused_element(self, timeout_s: float, detailed: bool = True) -> FocusedElement:
        script = _DETAILED_SCRIPT if detailed else _FAST_SCRIPT
        try:
            completed = subprocess.run(
                [self._osascript, "-e", script],
                capture_output=True,
                text=True,
                timeout=timeout_s,
            )
        except subprocess.TimeoutExpired as e:
            raise AccessibilityError(f"accessibility query timed out after {timeout_s}s") from e
        except OSError as e:
            raise AccessibilityError(f"cannot run {self._osascript}: {e}") from e
        except UnicodeDecodeError as e:
            raise AccessibilityError(f"undecodable accessibility output: {e}") from e

        if completed.returncode != 0:
            raise AccessibilityError(completed.stderr.strip() or f"osascript exited with {completed.returncode}")

        return self.parse_output(completed.stdout)

    @staticmethod
    def parse_output(output: str) -> FocusedElement:
        parts = output.strip().split(_FIELD_SEPARATOR)
        if len(parts) < 4:
            raise AccessibilityError(f"unexpected accessibility output: {output!r}")

        # The description may itself contain the separator
        application = parts[0]
        role = parts[1]
        editable = parts[-1]
        description = _FIELD_SEPARATOR.join(parts[2:-1])

        if not role:
            raise AccessibilityError("focused element has no role")

        return FocusedElement(
            role=role,
            application=application or "unknown",
            description=description,
            editable=_parse_editable(editable),
        )
