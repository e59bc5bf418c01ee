"""
Tests for ModeClassifier - action keyword routing between dictation and command.
"""
import pytest

from vocalflow.ModeClassifier import ModeClassifier
from vocalflow.types import DictationMode


class TestModeClassifier:

    @pytest.mark.parametrize("text", [
        "Open Safari",
        "please take a picture of my screen",
        "look   for the invoice",
        "create folder called reports",
        "search the web for flights",
    ])
    def test_action_phrases_are_commands(self, text):
        assert ModeClassifier().classify(text) == DictationMode.COMMAND

    def test_keyword_inside_prose_still_counts_as_command(self):
        assert ModeClassifier().classify("Dear team, thanks for the update.") == DictationMode.COMMAND

    def test_empty_text_is_dictation(self):
        assert ModeClassifier().classify("") == DictationMode.DICTATION

    def test_plain_prose_is_dictation(self):
        assert ModeClassifier().classify("The weather was lovely today") == DictationMode.DICTATION

    def test_keywords_match_whole_words_only(self):
        classifier = ModeClassifier()

        assert classifier.is_command("the opener was funny") is False
        assert classifier.is_command("a finder's fee") is False

    def test_custom_keywords(self):
        classifier = ModeClassifier(["summarize"])

        assert classifier.is_command("Summarize this thread") is True
        assert classifier.is_command("open the door") is False

    def test_no_keywords_never_matches(self):
        assert ModeClassifier([]).classify("open everything") == DictationMode.DICTATION
