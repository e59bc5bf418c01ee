"""Audio helpers around captured push-to-talk recordings."""

import logging
import tempfile
import uuid
from dataclasses import replace
from pathlib import Path
from typing import Optional

import numpy as np
import soundfile as sf

from vocalflow.types import CapturedAudio

logger = logging.getLogger(__name__)

# int16 thresholds below which a recording counts as silence
_RMS_THRESHOLD = 30.0
_PEAK_THRESHOLD = 200
_SAMPLE_THRESHOLD = 50
_ACTIVE_RATIO_THRESHOLD = 0.001


def write_wav(audio: CapturedAudio, directory: Optional[Path] = None) -> CapturedAudio:
    """Write the samples to a 16-bit WAV file.

    Args:
        audio: Recording to persist
        directory: Target directory, system temp dir when None

    Returns:
        Copy of audio whose path points to the new file
    """
    target_dir = Path(directory) if directory is not None else Path(tempfile.gettempdir())
    target_dir.mkdir(parents=True, exist_ok=True)
    path = target_dir / f"dictation-{uuid.uuid4().hex}.wav"
    sf.write(str(path), np.asarray(audio.samples, dtype=np.int16), audio.sample_rate, subtype='PCM_16')
    logger.debug("AudioArtifact: wrote %s (%dms)", path, audio.duration_ms)
    return replace(audio, path=path)


def read_wav(path: Path) -> CapturedAudio:
    """Load a mono int16 recording; multi-channel files are averaged."""
    data, sample_rate = sf.read(str(path), dtype='int16')
    if data.ndim > 1:
        data = data.mean(axis=1).astype(np.int16)
    return CapturedAudio(samples=data, sample_rate=sample_rate, path=Path(path))


def has_significant_audio(audio: CapturedAudio) -> bool:
    """True if the recording holds more than silence or low-level noise."""
    samples = np.asarray(audio.samples, dtype=np.int16)
    if samples.size == 0:
        return False

    magnitudes = np.abs(samples.astype(np.int32))
    rms = float(np.sqrt(np.mean(magnitudes.astype(np.float64) ** 2)))
    peak = int(magnitudes.max())
    active_ratio = float(np.count_nonzero(magnitudes > _SAMPLE_THRESHOLD)) / samples.size

    logger.debug("AudioArtifact: rms=%.1f peak=%d active=%.3f%%", rms, peak, active_ratio * 100)
    return rms > _RMS_THRESHOLD or peak > _PEAK_THRESHOLD or active_ratio > _ACTIVE_RATIO_THRESHOLD
