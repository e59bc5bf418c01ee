# tests/conftest.py
import pytest
import numpy as np

from tests.session_fixture import REFERENCE_NOW, make_tone
from vocalflow.types import CapturedAudio, SAMPLE_RATE


@pytest.fixture
def reference_now():
    return REFERENCE_NOW


@pytest.fixture
def speech_audio():
    """Two seconds of tone at 16kHz mono int16."""
    return make_tone(2000)


@pytest.fixture
def silent_audio():
    """One second of digital silence."""
    return CapturedAudio(samples=np.zeros(SAMPLE_RATE, dtype=np.int16))
