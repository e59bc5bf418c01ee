"""Focus subsystem - accessibility-based text input detection."""
from vocalflow.focus.AppleScriptAccessibility import AppleScriptAccessibility
from vocalflow.focus.FocusGate import FocusGate

__all__ = ['AppleScriptAccessibility', 'FocusGate']
