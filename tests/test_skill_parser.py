"""Tests for the SKILL.md record builder."""

import copy
import re

import jsonschema
import pytest

from skillhub.categories import CATEGORY_IDS
from skillhub.schema import validate_skill
from skillhub.skill_parser import (
    SkillParser,
    build_skill,
    generate_skill_id,
    parse_skill_md,
    repo_data_from_api,
    skill_to_index,
)

from conftest import PDF_SKILL_MD, api_repo

# ---------------------------------------------------------------------------
# Frontmatter parsing
# ---------------------------------------------------------------------------


def test_parse_skill_md_with_frontmatter():
    parsed = parse_skill_md(PDF_SKILL_MD)
    assert parsed["frontmatter"]["name"] == "PDF Tools"
    assert parsed["frontmatter"]["tags"] == ["pdf"]
    assert parsed["content"].startswith("# PDF Tools")
    assert "---" not in parsed["content"]
    assert parsed["raw"] == PDF_SKILL_MD


def test_parse_skill_md_without_frontmatter():
    parsed = parse_skill_md("# Just a heading\n\nBody text.\n")
    assert parsed["frontmatter"] == {}
    assert parsed["content"] == "# Just a heading\n\nBody text."


def test_parse_skill_md_malformed_yaml_degrades():
    text = "---\nname: [unclosed\n---\nbody\n"
    parsed = parse_skill_md(text)
    assert parsed["frontmatter"] == {}
    assert parsed["content"] == text.strip()


def test_parse_skill_md_non_mapping_frontmatter_degrades():
    text = "---\n- just\n- a list\n---\nbody\n"
    parsed = parse_skill_md(text)
    assert parsed["frontmatter"] == {}
    assert parsed["content"] == text.strip()


def test_parse_skill_md_empty_frontmatter():
    parsed = parse_skill_md("---\n---\nbody\n")
    assert parsed["frontmatter"] == {}
    assert parsed["content"] == "body"


def test_parse_skill_md_dates_are_json_safe():
    parsed = parse_skill_md("---\nname: x\ncreated: 2024-05-01\n---\nbody")
    assert parsed["frontmatter"]["created"] == "2024-05-01"


# ---------------------------------------------------------------------------
# Tags and ids
# ---------------------------------------------------------------------------


def test_extract_keywords_ranks_by_frequency():
    words = SkillParser.extract_keywords("Parse parse PARSE, files! files and the docs")
    assert words[:2] == ["parse", "files"]
    assert "and" not in words
    assert "the" not in words


def test_extract_tags_dedupes_and_lowercases():
    tags = SkillParser.extract_tags({"tags": ["PDF", "pdf", " Docs "]}, ["Docs", "claude"], "")
    assert tags == ["pdf", "docs", "claude"]


def test_extract_tags_accepts_comma_string():
    tags = SkillParser.extract_tags({"tags": "alpha, beta"}, [], "")
    assert tags == ["alpha", "beta"]


def test_tags_are_capped_at_ten():
    frontmatter = {"tags": [f"Tag{i}" for i in range(8)]}
    topics = [f"topic{i}" for i in range(8)]
    description = "extraction pipeline extraction tables documents documents summary"
    tags = SkillParser.extract_tags(frontmatter, topics, description)
    assert len(tags) == 10
    assert len(set(tags)) == 10
    assert all(t == t.lower() for t in tags)


@pytest.mark.parametrize(
    "owner,repo,slug,expected",
    [
        ("acme", "pdf-skill", None, "acme-pdf-skill"),
        ("Acme", "PDF_Skill", None, "acme-pdf-skill"),
        ("acme", "claude.skills", "code-reviewer", "acme-claude-skills-code-reviewer"),
        ("Ünï", "repo", None, "-n--repo"),
    ],
)
def test_generate_skill_id(owner, repo, slug, expected):
    skill_id = generate_skill_id(owner, repo, slug)
    assert skill_id == expected
    assert re.fullmatch(r"[a-z0-9-]+", skill_id)


# ---------------------------------------------------------------------------
# build_skill
# ---------------------------------------------------------------------------


def test_build_skill_scenario(pdf_skill):
    assert pdf_skill["id"] == "acme-pdf-skill"
    assert pdf_skill["category"] == "tools-productivity"
    assert "pdf" in pdf_skill["tags"]
    assert pdf_skill["name"] == "PDF Tools"
    assert pdf_skill["metadata"]["stars"] == 42
    assert pdf_skill["repo"]["fullName"] == "acme/pdf-skill"
    assert pdf_skill["marketplace"] == {"hasMarketplaceJson": False}
    assert pdf_skill["internal"] == {"syncedAt": "2025-06-02T00:00:00.000Z", "version": 1}


def test_build_skill_is_schema_complete(pdf_skill):
    validate_skill(pdf_skill)


def test_build_skill_falls_back_to_repo_fields(repo_data):
    skill = build_skill(repo_data, "no frontmatter at all")
    assert skill["name"] == "pdf-skill"
    assert skill["description"] == "A skill repository"
    assert skill["category"] in CATEGORY_IDS
    validate_skill(skill)


def test_build_skill_placeholder_description(repo_data):
    repo_data["description"] = ""
    skill = build_skill(repo_data, "---\nname: thing\n---\n")
    assert skill["description"] == "No description"


def test_build_skill_never_raises_on_bad_frontmatter(repo_data):
    skill = build_skill(repo_data, "---\nname: [unclosed\n---\nbody")
    assert skill["skillMd"]["frontmatter"] == {}
    validate_skill(skill)


def test_build_skill_unknown_category_is_inferred(repo_data):
    skill = build_skill(repo_data, "---\nname: Deploy Bot\ncategory: Whatever\n---\n")
    assert skill["category"] in CATEGORY_IDS
    assert skill["category"] == "devops-infrastructure"


def test_build_skill_category_display_name(repo_data):
    skill = build_skill(repo_data, "---\nname: x\ncategory: Testing & Quality\n---\n")
    assert skill["category"] == "testing-quality"


def test_build_skill_is_idempotent_apart_from_sync_time(repo_data):
    first = build_skill(repo_data, PDF_SKILL_MD)
    second = build_skill(copy.deepcopy(repo_data), PDF_SKILL_MD)
    first["internal"].pop("syncedAt")
    second["internal"].pop("syncedAt")
    assert first == second


def test_build_skill_multi_skill_repo(repo_data):
    skill = build_skill(repo_data, PDF_SKILL_MD, skill_path="engineering-team/code-reviewer/")
    assert skill["id"] == "acme-pdf-skill-engineering-team-code-reviewer"
    assert skill["repo"]["path"] == "engineering-team/code-reviewer"
    assert skill["repo"]["url"] == "https://github.com/acme/pdf-skill/tree/main/engineering-team/code-reviewer"


def test_skill_to_index_is_projection(pdf_skill):
    index = skill_to_index(pdf_skill)
    assert set(index) == {"id", "name", "description", "category", "tags", "stars", "updatedAt", "repoUrl"}
    assert index["id"] == pdf_skill["id"]
    assert index["name"] == pdf_skill["name"]
    assert index["description"] == pdf_skill["description"]
    assert index["category"] == pdf_skill["category"]
    assert index["tags"] == pdf_skill["tags"]
    assert index["stars"] == pdf_skill["metadata"]["stars"]
    assert index["updatedAt"] == pdf_skill["metadata"]["updatedAt"]
    assert index["repoUrl"] == pdf_skill["repo"]["url"]


def test_repo_data_from_api():
    data = repo_data_from_api(api_repo(stars=7, license=None, topics=None))
    assert data["owner"] == "acme"
    assert data["stars"] == 7
    assert data["topics"] == []
    assert data["license"] is None
    assert data["defaultBranch"] == "main"


def test_validate_skill_rejects_incomplete(pdf_skill):
    broken = copy.deepcopy(pdf_skill)
    del broken["metadata"]
    with pytest.raises(jsonschema.ValidationError):
        validate_skill(broken)


def test_sibling_skill_directories_get_distinct_ids(repo_data):
    nested = build_skill(repo_data, "# x", skill_path="skills/document/pdf")
    other = build_skill(repo_data, "# y", skill_path="examples/pdf")
    assert nested["id"] == "acme-pdf-skill-document-pdf"
    assert other["id"] == "acme-pdf-skill-examples-pdf"


@pytest.mark.parametrize(
    "skill_path,expected",
    [
        (None, None),
        ("", None),
        ("skills/pdf", "pdf"),
        (".claude/skills/reviewer/", "reviewer"),
        ("skills", "skills"),
        ("team/code-reviewer", "team-code-reviewer"),
    ],
)
def test_skill_slug(skill_path, expected):
    assert SkillParser.skill_slug(skill_path) == expected
