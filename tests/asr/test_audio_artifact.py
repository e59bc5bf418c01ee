"""
Tests for audio helpers: WAV artifacts and the silence guard.
"""
import numpy as np
import soundfile as sf

from tests.session_fixture import make_tone
from vocalflow.asr.AudioArtifact import has_significant_audio, read_wav, write_wav
from vocalflow.types import CapturedAudio


class TestWavArtifacts:

    def test_write_creates_16bit_wav(self, tmp_path):
        audio = make_tone(250)

        written = write_wav(audio, tmp_path)

        assert written.path.parent == tmp_path
        info = sf.info(str(written.path))
        assert info.samplerate == 16000
        assert info.channels == 1
        assert info.subtype == 'PCM_16'

    def test_read_returns_same_samples(self, tmp_path):
        audio = make_tone(250)
        written = write_wav(audio, tmp_path)

        loaded = read_wav(written.path)

        np.testing.assert_array_equal(loaded.samples, audio.samples)
        assert loaded.duration_ms == 250

    def test_read_averages_stereo(self, tmp_path):
        path = tmp_path / "stereo.wav"
        stereo = np.stack([np.full(160, 1000, dtype=np.int16), np.full(160, 3000, dtype=np.int16)], axis=1)
        sf.write(str(path), stereo, 16000, subtype='PCM_16')

        loaded = read_wav(path)

        assert loaded.samples.ndim == 1
        assert int(loaded.samples[0]) == 2000


class TestSignificantAudio:

    def test_tone_is_significant(self, speech_audio):
        assert has_significant_audio(speech_audio) is True

    def test_silence_is_not_significant(self, silent_audio):
        assert has_significant_audio(silent_audio) is False

    def test_low_noise_is_not_significant(self):
        rng = np.random.default_rng(0)
        noise = rng.integers(-10, 10, size=16000).astype(np.int16)

        assert has_significant_audio(CapturedAudio(samples=noise)) is False

    def test_empty_recording_is_not_significant(self):
        assert has_significant_audio(CapturedAudio(samples=np.zeros(0, dtype=np.int16))) is False
