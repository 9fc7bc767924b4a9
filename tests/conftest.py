"""Shared test fixtures for skillhub."""

import base64
import json

import pytest
import requests
from requests.structures import CaseInsensitiveDict

from skillhub.github_client import GitHubClient
from skillhub.skill_parser import build_skill, skill_to_index
from skillhub.store import SkillStore

PDF_SKILL_MD = """---
name: PDF Tools
description: Extract text and tables from PDF documents
category: tools-productivity
tags: [pdf]
---
# PDF Tools

Use this skill to work with PDF files.
"""


def make_response(status=200, payload=None, headers=None, url="https://api.github.com/x"):
    """Build a real requests.Response without touching the network."""
    response = requests.Response()
    response.status_code = status
    response.url = url
    response.headers = CaseInsensitiveDict(headers or {})
    body = payload if isinstance(payload, (bytes, str)) else json.dumps(payload if payload is not None else {})
    response._content = body.encode("utf-8") if isinstance(body, str) else body
    return response


def content_payload(text, path="SKILL.md"):
    return {
        "type": "file",
        "path": path,
        "encoding": "base64",
        "content": base64.b64encode(text.encode("utf-8")).decode("ascii"),
    }


def api_repo(owner="acme", name="pdf-skill", repo_id=1, stars=42, **extra):
    data = {
        "id": repo_id,
        "name": name,
        "full_name": f"{owner}/{name}",
        "owner": {"login": owner},
        "html_url": f"https://github.com/{owner}/{name}",
        "description": "A skill repository",
        "homepage": None,
        "stargazers_count": stars,
        "forks_count": 3,
        "language": "Python",
        "topics": ["claude-skills"],
        "created_at": "2025-01-01T00:00:00Z",
        "updated_at": "2025-06-01T00:00:00Z",
        "pushed_at": "2025-06-01T00:00:00Z",
        "default_branch": "main",
        "license": {"name": "MIT License"},
    }
    data.update(extra)
    return data


class FakeSession:
    """Route GET requests to canned responses by path (query string ignored)."""

    def __init__(self, routes=None):
        self.headers = {}
        self.routes = dict(routes or {})
        self.calls = []

    def add(self, path, *responses):
        self.routes[path] = list(responses)

    def get(self, url, params=None, timeout=None):
        path = url.replace("https://api.github.com", "")
        self.calls.append((path, params))
        route = self.routes.get(path)
        if route is None:
            return make_response(404, {"message": "Not Found"}, url=url)
        if callable(route):
            return route(params)
        if isinstance(route, list):
            # Last response repeats once the queue is drained
            return route.pop(0) if len(route) > 1 else route[0]
        return route


class FakeClock:
    def __init__(self, now=1_000_000.0):
        self.now = now
        self.sleeps = []

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def repo_data():
    return {
        "id": 1,
        "name": "pdf-skill",
        "fullName": "acme/pdf-skill",
        "owner": "acme",
        "description": "A skill repository",
        "url": "https://github.com/acme/pdf-skill",
        "homepage": None,
        "stars": 42,
        "forks": 3,
        "language": "Python",
        "topics": ["claude-skills"],
        "createdAt": "2025-01-01T00:00:00Z",
        "updatedAt": "2025-06-01T00:00:00Z",
        "pushedAt": "2025-06-01T00:00:00Z",
        "defaultBranch": "main",
        "license": "MIT License",
    }


@pytest.fixture
def pdf_skill(repo_data):
    return build_skill(repo_data, PDF_SKILL_MD, synced_at="2025-06-02T00:00:00.000Z")


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def client(fake_session, fake_clock):
    return GitHubClient(token="test-token", session=fake_session, delay=0,
                        sleep=fake_clock.sleep, clock=fake_clock)


@pytest.fixture
def store(tmp_path):
    return SkillStore(tmp_path / "data")


def make_index(skill_id, name, description="", category="specialized", tags=None,
               stars=0, updated_at="2025-01-01T00:00:00Z"):
    return {
        "id": skill_id,
        "name": name,
        "description": description,
        "category": category,
        "tags": tags or [],
        "stars": stars,
        "updatedAt": updated_at,
        "repoUrl": f"https://github.com/example/{skill_id}",
    }


@pytest.fixture
def sample_index():
    """One PDF record plus nine unrelated ones."""
    unrelated = [
        ("docker-compose", "Docker Compose Helper", "Write compose files for services", "devops-infrastructure", ["docker"]),
        ("react-forms", "React Forms", "Build accessible forms in React", "frontend-development", ["react"]),
        ("sql-tuner", "Query Tuner", "Speed up slow Postgres queries", "backend-development", ["postgres"]),
        ("jest-runner", "Jest Runner", "Run and fix failing Jest suites", "testing-quality", ["jest"]),
        ("seo-audit", "SEO Audit", "Review landing pages for search ranking", "business-marketing", ["seo"]),
        ("k8s-deploy", "Kubernetes Deploy", "Roll out workloads to clusters", "devops-infrastructure", ["kubernetes"]),
        ("git-helper", "Git Helper", "Rebase, bisect and clean history", "tools-productivity", ["git"]),
        ("chess-coach", "Chess Coach", "Explain openings and endgames", "specialized", ["chess"]),
        ("llm-evals", "LLM Evals", "Score model outputs against rubrics", "ai-data-science", ["llm"]),
    ]
    skills = [make_index("acme-pdf-skill", "PDF Tools", "Extract text and tables from documents",
                         "tools-productivity", ["pdf"], stars=42, updated_at="2025-06-01T00:00:00Z")]
    for i, (sid, name, desc, cat, tags) in enumerate(unrelated):
        skills.append(make_index(sid, name, desc, cat, tags, stars=i * 10,
                                 updated_at=f"2025-0{(i % 9) + 1}-15T00:00:00Z"))
    return skills
