"""ASR subsystem - cloud transcription backends and audio helpers."""
from vocalflow.asr.DeepgramProvider import DeepgramProvider
from vocalflow.asr.WhisperApiProvider import WhisperApiProvider
from vocalflow.asr.AudioArtifact import has_significant_audio, read_wav, write_wav

__all__ = ['DeepgramProvider', 'WhisperApiProvider', 'has_significant_audio', 'read_wav', 'write_wav']
