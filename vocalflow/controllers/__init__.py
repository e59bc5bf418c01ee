"""Controllers - glue between host input events and the dictation core."""
from vocalflow.controllers.PushToTalkController import PushToTalkController

__all__ = ['PushToTalkController']
