"""vocalflow - push-to-talk dictation core: focus gating, cloud transcription and time-savings analytics."""
