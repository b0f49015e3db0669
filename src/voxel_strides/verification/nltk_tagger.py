"""Part-of-speech and named-entity tagging backed by NLTK."""

import nltk
from nltk.tokenize import RegexpTokenizer

from .exceptions import TaggerUnavailableError
from .interfaces import PartOfSpeechTagger
from .logging_utils import get_logger
from .models import LexicalClass, NameType

logger = get_logger(__name__)

# Words, keeping inner hyphens and apostrophes ("warm-up", "don't")
TOKEN_PATTERN = r"[A-Za-z0-9]+(?:['-][A-Za-z0-9]+)*"

# Resources needed by pos_tag and ne_chunk on current NLTK releases
NLTK_RESOURCES = (
    "averaged_perceptron_tagger_eng",
    "maxent_ne_chunker_tab",
    "words",
)

PENN_PREFIX_CLASSES = (
    ("NN", LexicalClass.NOUN),
    ("VB", LexicalClass.VERB),
    ("JJ", LexicalClass.ADJECTIVE),
)

NE_CHUNK_LABELS = {
    "PERSON": NameType.PERSONAL_NAME,
    "GPE": NameType.PLACE_NAME,
    "LOCATION": NameType.PLACE_NAME,
    "GSP": NameType.PLACE_NAME,
    "ORGANIZATION": NameType.ORGANIZATION_NAME,
}


def penn_to_lexical_class(tag: str) -> LexicalClass:
    """Map a Penn Treebank tag to a coarse lexical class."""
    for prefix, lexical_class in PENN_PREFIX_CLASSES:
        if tag.startswith(prefix):
            return lexical_class
    return LexicalClass.OTHER


def download_resources(quiet: bool = True) -> bool:
    """
    Download the NLTK data packages the tagger needs.

    Returns:
        True if every package is available afterwards
    """
    success = True
    for resource in NLTK_RESOURCES:
        if not nltk.download(resource, quiet=quiet):
            logger.error(f"Failed to download NLTK resource '{resource}'")
            success = False
    return success


class NLTKTagger(PartOfSpeechTagger):
    """Tags task text with NLTK's perceptron tagger and NE chunker."""

    def __init__(self, token_pattern: str = TOKEN_PATTERN) -> None:
        """
        Initialize the tagger.

        Args:
            token_pattern: Regular expression matching a single word
        """
        self._tokenizer = RegexpTokenizer(token_pattern)

    def tokenize(self, text: str) -> list[str]:
        """Split text into word tokens."""
        return self._tokenizer.tokenize(text)

    def _pos_tag(self, tokens: list[str]) -> list[tuple[str, str]]:
        try:
            return nltk.pos_tag(tokens)
        except LookupError as e:
            raise TaggerUnavailableError(f"POS tagger data not installed: {e}") from e

    def tag_lexical_classes(self, text: str) -> list[tuple[str, LexicalClass]]:
        tokens = self.tokenize(text)
        if not tokens:
            return []

        return [(token, penn_to_lexical_class(tag)) for token, tag in self._pos_tag(tokens)]

    def tag_name_types(self, text: str) -> list[tuple[str, NameType]]:
        tokens = self.tokenize(text)
        if not tokens:
            return []

        tagged = self._pos_tag(tokens)
        try:
            tree = nltk.ne_chunk(tagged)
        except LookupError as e:
            raise TaggerUnavailableError(f"NE chunker data not installed: {e}") from e

        result: list[tuple[str, NameType]] = []
        for node in tree:
            if isinstance(node, nltk.Tree):
                name_type = NE_CHUNK_LABELS.get(node.label(), NameType.OTHER_NAME)
                result.extend((word, name_type) for word, _ in node.leaves())
            else:
                word, _ = node
                result.append((word, NameType.OTHER_WORD))
        return result
