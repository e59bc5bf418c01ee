"""
HostBridge - the calls the dictation core makes into its host environment.

Covers cue sounds, opening URLs in the user's browser and surfacing
user-facing notifications. Everything here is best-effort: a missing sound
file or an unavailable output device is logged, never raised.
"""
import logging
import webbrowser
from pathlib import Path
from typing import Callable, Optional
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

ALLOWED_URL_SCHEMES = ('http', 'https', 'mailto')


def _audio_backend():
    """Import playback libraries on first use; PortAudio may be missing on headless hosts."""
    import sounddevice as sd
    import soundfile as sf
    return sd, sf


class HostBridge:
    """
    Args:
        sounds_dir: Directory holding <name>.wav cue files
        sound_enabled: False turns play_sound() into a no-op
        notifier: Callback receiving user-facing messages; defaults to a log warning
    """

    def __init__(
        self,
        sounds_dir: Path,
        sound_enabled: bool = True,
        notifier: Optional[Callable[[str], None]] = None
    ) -> None:
        self._sounds_dir = sounds_dir
        self._sound_enabled = sound_enabled
        self._notifier = notifier

    def play_sound(self, name: str) -> bool:
        """Play <sounds_dir>/<name>.wav without blocking. Returns True if playback started."""
        if not self._sound_enabled:
            return False

        sound_path = self._sounds_dir / f"{name}.wav"
        if not sound_path.is_file():
            logger.debug("HostBridge: sound not found: %s", sound_path)
            return False

        try:
            sd, sf = _audio_backend()
        except OSError as e:
            logger.warning("HostBridge: audio output unavailable: %s", e)
            return False

        try:
            data, samplerate = sf.read(str(sound_path), dtype='float32')
            sd.play(data, samplerate)
        except (RuntimeError, OSError, sd.PortAudioError) as e:
            logger.warning("HostBridge: failed to play %s: %s", name, e)
            return False
        return True

    def open_external_url(self, url: str) -> bool:
        scheme = urlparse(url).scheme.lower()
        if scheme not in ALLOWED_URL_SCHEMES:
            logger.warning("HostBridge: refusing to open URL with scheme '%s'", scheme)
            return False
        return webbrowser.open(url)

    def notify(self, message: str) -> None:
        if self._notifier is not None:
            self._notifier(message)
        else:
            logger.warning("HostBridge: %s", message)
