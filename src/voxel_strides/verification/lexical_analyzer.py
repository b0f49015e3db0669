"""Lexical analysis of task text: keywords, entities, verbs and difficulty."""

import asyncio
from collections.abc import Iterable, Mapping
from types import MappingProxyType

from .cache_utils import LRUCache, content_hash
from .config import (
    CATEGORY_DIFFICULTY_POINTS,
    HARD_DIFFICULTY_SCORE,
    LEXICAL_CACHE_MAX_ENTRIES,
    LONG_TITLE_WORD_COUNT,
    MEDIUM_DIFFICULTY_SCORE,
    MIN_KEYWORD_LENGTH,
    PRIORITY_DIFFICULTY_POINTS,
    STOP_WORDS,
)
from .exceptions import LexicalAnalysisError
from .interfaces import PartOfSpeechTagger
from .logging_utils import get_logger
from .models import Difficulty, LexicalClass, LexicalProfile, NameType, TaskDescriptor

logger = get_logger(__name__)

KEYWORD_CLASSES = frozenset([LexicalClass.NOUN, LexicalClass.VERB, LexicalClass.ADJECTIVE])

ENTITY_BUCKETS = {
    NameType.PERSONAL_NAME: "persons",
    NameType.PLACE_NAME: "locations",
    NameType.ORGANIZATION_NAME: "organizations",
}


def is_stop_word(word: str) -> bool:
    """Check if a word is in the shared stop-word list."""
    return word.lower() in STOP_WORDS


def unique_in_order(values: Iterable[str]) -> tuple[str, ...]:
    """De-duplicate while keeping first-seen order."""
    return tuple(dict.fromkeys(values))


def empty_entities() -> dict[str, list[str]]:
    return {"persons": [], "locations": [], "organizations": [], "other": []}


def freeze_entities(entities: Mapping[str, list[str]]) -> Mapping[str, tuple[str, ...]]:
    """Read-only copy of an entity bucket mapping, safe to share from the cache."""
    return MappingProxyType({bucket: tuple(names) for bucket, names in entities.items()})


class LexicalAnalyzer:
    """
    Extracts lexical features from task text.

    Results of analyze_task are cached by task content, so editing a
    task's text or category yields a fresh profile on the next call.
    """

    def __init__(
        self,
        tagger: PartOfSpeechTagger,
        cache_size: int = LEXICAL_CACHE_MAX_ENTRIES,
    ) -> None:
        """
        Initialize the analyzer.

        Args:
            tagger: Part-of-speech / named-entity tagger
            cache_size: Maximum number of task profiles kept in memory
        """
        self._tagger = tagger
        self._cache = LRUCache(cache_size)
        self._in_flight: dict[str, asyncio.Future[LexicalProfile]] = {}

    def _is_content_word(self, word: str) -> bool:
        return len(word) >= MIN_KEYWORD_LENGTH and not is_stop_word(word)

    def _tag_lexical_classes(self, text: str) -> list[tuple[str, LexicalClass]]:
        if not text or not text.strip():
            return []
        try:
            return self._tagger.tag_lexical_classes(text)
        except LexicalAnalysisError as e:
            logger.warning(f"Lexical tagging unavailable, continuing without keywords: {e}")
            return []

    def extract_keywords(self, text: str) -> list[str]:
        """
        Extract lowercase nouns, verbs and adjectives from text.

        Args:
            text: Input text

        Returns:
            Keywords in text order (duplicates kept)
        """
        keywords = []
        for token, lexical_class in self._tag_lexical_classes(text):
            if lexical_class not in KEYWORD_CLASSES:
                continue
            word = token.lower()
            if self._is_content_word(word):
                keywords.append(word)
        return keywords

    def extract_action_verbs(self, text: str) -> list[str]:
        """Extract lowercase verbs from text, filtered like keywords."""
        verbs = []
        for token, lexical_class in self._tag_lexical_classes(text):
            if lexical_class is not LexicalClass.VERB:
                continue
            word = token.lower()
            if self._is_content_word(word):
                verbs.append(word)
        return verbs

    def extract_entities(self, text: str) -> dict[str, list[str]]:
        """
        Bucket named entities into persons, locations, organizations and other.

        Args:
            text: Input text

        Returns:
            Mapping of bucket name to entity tokens in text order
        """
        entities = empty_entities()
        if not text or not text.strip():
            return entities

        try:
            tagged = self._tagger.tag_name_types(text)
        except LexicalAnalysisError as e:
            logger.warning(f"Entity tagging unavailable, continuing without entities: {e}")
            return entities

        for token, name_type in tagged:
            bucket = ENTITY_BUCKETS.get(name_type)
            if bucket is not None:
                entities[bucket].append(token)
            elif name_type is not NameType.OTHER_WORD and not is_stop_word(token):
                entities["other"].append(token)
        return entities

    def estimate_difficulty(self, task: TaskDescriptor) -> Difficulty:
        """Score priority, category, title length and notes into a difficulty level."""
        score = PRIORITY_DIFFICULTY_POINTS[task.priority.value]
        score += CATEGORY_DIFFICULTY_POINTS.get(task.category.value, 0)

        if len(task.title.split()) > LONG_TITLE_WORD_COUNT:
            score += 1
        if task.notes:
            score += 1

        if score >= HARD_DIFFICULTY_SCORE:
            return Difficulty.HARD
        if score >= MEDIUM_DIFFICULTY_SCORE:
            return Difficulty.MEDIUM
        return Difficulty.EASY

    @staticmethod
    def cache_key(task: TaskDescriptor) -> str:
        """Content key for a task; identity is deliberately not part of it."""
        return content_hash(task.title, task.notes, task.category.value, task.priority.value)

    def analyze_task(self, task: TaskDescriptor) -> LexicalProfile:
        """
        Build (or fetch from cache) the lexical profile of a task.

        Args:
            task: Task to analyze

        Returns:
            LexicalProfile for the task's current content
        """
        key = self.cache_key(task)
        cached = self._cache.get(key)
        if cached is not None:
            logger.debug(f"Lexical profile cache hit for task {task.id}")
            return cached

        title_keywords = tuple(self.extract_keywords(task.title))
        notes_keywords = tuple(self.extract_keywords(task.notes))
        combined_text = f"{task.title} {task.notes}"

        profile = LexicalProfile(
            title_keywords=title_keywords,
            notes_keywords=notes_keywords,
            all_keywords=unique_in_order(title_keywords + notes_keywords),
            entities=freeze_entities(self.extract_entities(combined_text)),
            action_verbs=tuple(self.extract_action_verbs(combined_text)),
            difficulty=self.estimate_difficulty(task),
        )

        self._cache.put(key, profile)
        logger.debug(
            f"Analyzed task {task.id}: keywords={list(profile.all_keywords)}, "
            f"difficulty={profile.difficulty.value}"
        )
        return profile

    async def analyze_task_async(self, task: TaskDescriptor) -> LexicalProfile:
        """
        Analyze a task off the event loop.

        Concurrent calls for the same task content share one computation.
        Cancelling one caller does not cancel the shared work.
        """
        key = self.cache_key(task)
        if key in self._cache:
            return self.analyze_task(task)

        pending = self._in_flight.get(key)
        if pending is None:
            pending = asyncio.ensure_future(asyncio.to_thread(self.analyze_task, task))
            self._in_flight[key] = pending
            pending.add_done_callback(lambda _, key=key: self._in_flight.pop(key, None))
        else:
            logger.debug(f"Joining in-flight lexical analysis for task {task.id}")

        return await asyncio.shield(pending)

    def get_cache_stats(self) -> dict[str, int]:
        """Get lexical cache statistics."""
        return self._cache.get_stats()

    def clear_cache(self) -> None:
        """Drop every cached profile."""
        self._cache.clear()
        logger.debug("Lexical profile cache cleared")
