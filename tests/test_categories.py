"""Tests for the category taxonomy and keyword inference."""

import pytest

from skillhub.categories import (
    CATCH_ALL_CATEGORY,
    CATEGORIES,
    CATEGORY_IDS,
    get_category_by_id,
    infer_category,
    normalize_category,
    recategorize,
    resolve_category,
)


def test_taxonomy_is_fixed_and_complete():
    assert len(CATEGORIES) == 8
    assert CATEGORY_IDS[-1] == CATCH_ALL_CATEGORY
    for category in CATEGORIES:
        assert set(category) == {"id", "name", "description", "icon", "color", "keywords"}


@pytest.mark.parametrize(
    "name,description,topics,expected",
    [
        ("pytest runner", "runs suites", [], "testing-quality"),
        ("Deploy Bot", "", [], "devops-infrastructure"),
        ("Dashboard", "Built with React", [], "frontend-development"),
        ("chess coach", "explains openings", [], CATCH_ALL_CATEGORY),
        ("", "", [], CATCH_ALL_CATEGORY),
        ("thing", "", ["graphql"], "backend-development"),
    ],
)
def test_infer_category(name, description, topics, expected):
    assert infer_category(name, description, topics) == expected


def test_infer_category_priority_is_list_order():
    # Matches both frontend ("react") and testing ("test"); frontend comes first
    assert infer_category("react test helper", "", []) == "frontend-development"


def test_infer_category_always_returns_member():
    for text in ["", "zzz", "security audit", "pdf", "SEO growth", "!!!"]:
        assert infer_category(text, text, [text]) in CATEGORY_IDS


def test_normalize_category_by_id_or_display_name():
    assert normalize_category("tools-productivity") == "tools-productivity"
    assert normalize_category("Tools & Productivity") == "tools-productivity"
    assert normalize_category("made-up") is None
    assert normalize_category(None) is None
    assert normalize_category(["list"]) is None


def test_resolve_category_uses_explicit_hint_for_inference():
    assert resolve_category("docker", "thing", "", []) == "devops-infrastructure"


def test_get_category_by_id():
    assert get_category_by_id("specialized")["name"] == "Specialized"
    assert get_category_by_id("nope") is None


def test_recategorize_migrates_unknown_categories():
    skills = {
        "a": {"name": "Jest helper", "description": "", "category": "Testing", "tags": [], "metadata": {"topics": []}},
        "b": {"name": "x", "description": "", "category": "specialized", "tags": [], "metadata": {"topics": []}},
        "c": {"name": "y", "description": "", "category": "data-ai", "tags": ["llm"], "metadata": {"topics": []}},
    }
    counts = recategorize(skills)
    assert skills["a"]["category"] == "testing-quality"
    assert skills["b"]["category"] == "specialized"
    assert skills["c"]["category"] == "ai-data-science"
    assert sum(counts.values()) == 3
