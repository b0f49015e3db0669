"""Abstract interfaces for the task verification engine."""

from abc import ABC, abstractmethod

from .models import LexicalClass, NameType


class PartOfSpeechTagger(ABC):
    """Abstract interface for the tagger behind lexical analysis."""

    @abstractmethod
    def tag_lexical_classes(self, text: str) -> list[tuple[str, LexicalClass]]:
        """
        Tag every word of the text with a coarse lexical class.

        Args:
            text: Input text to tag

        Returns:
            List of (token, lexical class) pairs in text order

        Raises:
            TaggerUnavailableError: If tagging resources are not installed
        """
        pass

    @abstractmethod
    def tag_name_types(self, text: str) -> list[tuple[str, NameType]]:
        """
        Tag every word of the text with a named-entity class.

        Words outside any named entity are tagged OTHER_WORD.

        Args:
            text: Input text to tag

        Returns:
            List of (token, name type) pairs in text order

        Raises:
            TaggerUnavailableError: If tagging resources are not installed
        """
        pass
