"""Tests for lexical analysis of task text."""

import asyncio
import dataclasses
import logging
from typing import Any

import pytest

from voxel_strides.verification.lexical_analyzer import (
    LexicalAnalyzer,
    is_stop_word,
    unique_in_order,
)
from voxel_strides.verification.models import (
    Difficulty,
    TaskCategory,
    TaskDescriptor,
    TaskPriority,
)


@pytest.mark.unit
class TestHelpers:
    """Test cases for module helpers."""

    def test_is_stop_word_case_insensitive(self) -> None:
        """Test is stop word case insensitive."""
        assert is_stop_word("The")
        assert is_stop_word("going")
        assert not is_stop_word("desk")

    def test_unique_in_order(self) -> None:
        """Test unique in order."""
        assert unique_in_order(["desk", "clean", "desk", "lamp"]) == ("desk", "clean", "lamp")


@pytest.mark.unit
class TestKeywordExtraction:
    """Test cases for keyword and verb extraction."""

    def test_keeps_nouns_verbs_adjectives_lowercased(self, analyzer: LexicalAnalyzer) -> None:
        """Test keeps nouns verbs adjectives lowercased."""
        assert analyzer.extract_keywords("Clean my messy Desk") == ["clean", "messy", "desk"]

    def test_drops_stop_words(self, analyzer: LexicalAnalyzer) -> None:
        """Test drops stop words."""
        assert analyzer.extract_keywords("Go to the gym") == ["gym"]

    def test_drops_short_tokens(self, analyzer: LexicalAnalyzer) -> None:
        """Test drops short tokens."""
        assert analyzer.extract_keywords("Buy a TV") == ["buy"]

    def test_keeps_duplicates_in_text_order(self, analyzer: LexicalAnalyzer) -> None:
        """Test keeps duplicates in text order."""
        assert analyzer.extract_keywords("desk and desk") == ["desk", "desk"]

    def test_empty_text_skips_tagger(self, analyzer: LexicalAnalyzer, fake_tagger: Any) -> None:
        """Test empty text skips tagger."""
        assert analyzer.extract_keywords("   ") == []
        assert fake_tagger.lexical_calls == 0

    def test_action_verbs(self, analyzer: LexicalAnalyzer) -> None:
        """Test action verbs."""
        assert analyzer.extract_action_verbs("Clean the desk and read a book") == ["clean", "read"]


@pytest.mark.unit
class TestEntityExtraction:
    """Test cases for named-entity bucketing."""

    def test_buckets_entities(self, analyzer: LexicalAnalyzer) -> None:
        """Test buckets entities."""
        entities = analyzer.extract_entities("Meet Alice in Paris with Acme on Friday")

        assert entities == {
            "persons": ["Alice"],
            "locations": ["Paris"],
            "organizations": ["Acme"],
            "other": ["Friday"],
        }

    def test_empty_text(self, analyzer: LexicalAnalyzer) -> None:
        """Test empty text."""
        assert analyzer.extract_entities("") == {
            "persons": [],
            "locations": [],
            "organizations": [],
            "other": [],
        }


@pytest.mark.unit
class TestDifficultyEstimation:
    """Test cases for difficulty estimation."""

    def test_easy_task(self, analyzer: LexicalAnalyzer) -> None:
        """Test easy task."""
        task = TaskDescriptor(title="Water plants", priority=TaskPriority.LOW)

        assert analyzer.estimate_difficulty(task) == Difficulty.EASY

    def test_medium_task(self, analyzer: LexicalAnalyzer) -> None:
        """Test medium task."""
        task = TaskDescriptor(title="Morning run", category=TaskCategory.EXERCISE)

        assert analyzer.estimate_difficulty(task) == Difficulty.MEDIUM

    def test_hard_task(self, analyzer: LexicalAnalyzer) -> None:
        """Test hard task."""
        task = TaskDescriptor(
            title="Quarterly report",
            notes="Include the sales figures",
            category=TaskCategory.WORK,
            priority=TaskPriority.HIGH,
        )

        assert analyzer.estimate_difficulty(task) == Difficulty.HARD

    def test_long_title_and_notes_add_points(self, analyzer: LexicalAnalyzer) -> None:
        """Test long title and notes add points."""
        short = TaskDescriptor(title="one two three four five six", priority=TaskPriority.LOW)
        with_notes = dataclasses.replace(short, notes="details")

        assert analyzer.estimate_difficulty(short) == Difficulty.EASY
        assert analyzer.estimate_difficulty(with_notes) == Difficulty.MEDIUM


@pytest.mark.unit
class TestAnalyzeTask:
    """Test cases for full task analysis and caching."""

    def test_profile_contents(self, analyzer: LexicalAnalyzer) -> None:
        """Test profile contents."""
        task = TaskDescriptor(title="Clean desk", notes="desk lamp with Alice")

        profile = analyzer.analyze_task(task)

        assert profile.title_keywords == ("clean", "desk")
        assert profile.notes_keywords == ("desk", "lamp", "alice")
        assert profile.all_keywords == ("clean", "desk", "lamp", "alice")
        assert profile.entities["persons"] == ("Alice",)
        assert profile.action_verbs == ("clean",)

    def test_repeat_analysis_hits_cache(self, analyzer: LexicalAnalyzer, fake_tagger: Any) -> None:
        """Test repeat analysis hits cache."""
        task = TaskDescriptor(title="Clean desk")

        first = analyzer.analyze_task(task)
        calls_after_first = fake_tagger.lexical_calls
        second = analyzer.analyze_task(task)

        assert second is first
        assert fake_tagger.lexical_calls == calls_after_first
        assert analyzer.get_cache_stats()["hits"] == 1

    def test_same_content_different_identity_shares_entry(
        self, analyzer: LexicalAnalyzer, fake_tagger: Any
    ) -> None:
        """Test same content different identity shares entry."""
        first = analyzer.analyze_task(TaskDescriptor(title="Clean desk"))
        second = analyzer.analyze_task(TaskDescriptor(title="Clean desk"))

        assert second is first

    def test_cached_entities_are_read_only(self, analyzer: LexicalAnalyzer) -> None:
        """Test cached entities cannot be mutated by a caller."""
        task = TaskDescriptor(title="Call Alice")
        profile = analyzer.analyze_task(task)

        with pytest.raises(TypeError):
            profile.entities["persons"] = ("Mallory",)  # type: ignore[index]

        assert analyzer.analyze_task(task).entities["persons"] == ("Alice",)

    def test_edited_task_is_reanalyzed(self, analyzer: LexicalAnalyzer) -> None:
        """Test edited task is reanalyzed."""
        task = TaskDescriptor(title="Clean desk")
        analyzer.analyze_task(task)

        edited = dataclasses.replace(task, title="Clean kitchen")
        profile = analyzer.analyze_task(edited)

        assert profile.title_keywords == ("clean", "kitchen")

    def test_category_change_is_reanalyzed(self, analyzer: LexicalAnalyzer) -> None:
        """Test category change is reanalyzed."""
        task = TaskDescriptor(title="Report", notes="draft", priority=TaskPriority.HIGH)
        before = analyzer.analyze_task(task)
        after = analyzer.analyze_task(dataclasses.replace(task, category=TaskCategory.WORK))

        assert before.difficulty == Difficulty.MEDIUM
        assert after.difficulty == Difficulty.HARD

    def test_clear_cache(self, analyzer: LexicalAnalyzer) -> None:
        """Test clear cache."""
        analyzer.analyze_task(TaskDescriptor(title="Clean desk"))
        analyzer.clear_cache()

        assert analyzer.get_cache_stats()["size"] == 0

    def test_unavailable_tagger_degrades_to_empty(
        self, tagger_factory: Any, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test unavailable tagger degrades to empty."""
        analyzer = LexicalAnalyzer(tagger_factory(unavailable=True))
        task = TaskDescriptor(title="Clean desk", category=TaskCategory.HOME)

        with caplog.at_level(logging.WARNING):
            profile = analyzer.analyze_task(task)

        assert profile.all_keywords == ()
        assert profile.action_verbs == ()
        assert all(not values for values in profile.entities.values())
        assert profile.difficulty == Difficulty.EASY
        assert "unavailable" in caplog.text


@pytest.mark.unit
@pytest.mark.asyncio
class TestAnalyzeTaskAsync:
    """Test cases for asynchronous analysis."""

    async def test_returns_profile(self, analyzer: LexicalAnalyzer) -> None:
        """Test returns profile."""
        profile = await analyzer.analyze_task_async(TaskDescriptor(title="Clean desk"))

        assert profile.title_keywords == ("clean", "desk")

    async def test_concurrent_calls_share_one_computation(
        self, analyzer: LexicalAnalyzer, fake_tagger: Any
    ) -> None:
        """Test concurrent calls share one computation."""
        task = TaskDescriptor(title="Clean desk", notes="and shelves")

        first, second = await asyncio.gather(
            analyzer.analyze_task_async(task), analyzer.analyze_task_async(task)
        )

        assert first is second
        assert fake_tagger.name_type_calls == 1

    async def test_different_tasks_do_not_interfere(self, analyzer: LexicalAnalyzer) -> None:
        """Test different tasks do not interfere."""
        desk, kitchen = await asyncio.gather(
            analyzer.analyze_task_async(TaskDescriptor(title="Clean desk")),
            analyzer.analyze_task_async(TaskDescriptor(title="Clean kitchen")),
        )

        assert desk.title_keywords == ("clean", "desk")
        assert kitchen.title_keywords == ("clean", "kitchen")
        assert analyzer.get_cache_stats()["size"] == 2
