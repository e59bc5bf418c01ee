"""Dictionary subsystem - user vocabulary and its persistence."""
from vocalflow.dictionary.DictionaryService import DictionaryService
from vocalflow.dictionary.JsonDictionaryStorage import JsonDictionaryStorage

__all__ = ['DictionaryService', 'JsonDictionaryStorage']
