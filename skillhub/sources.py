"""
Skill sources
Each source yields SkillTarget dicts describing where a skill might live:

    {
        "key": "repo:12345" | "name:owner/repo", plus "#path" for monorepo skills,
        "repoId": int | None,
        "owner": str,
        "name": str,
        "fullName": str,
        "skillPath": str | None,   # directory holding SKILL.md, None = repo level
        "skillMdPath": str,        # set once verification has located the file
    }

Search results are keyed by the numeric repository id so renamed repos are
still recognised; explicit lists only know the name.
"""

import posixpath
import logging
from datetime import date, datetime
from typing import Iterator, List, Optional

from .config import (
    CODE_SEARCH_QUERIES,
    MAX_RESULTS_PER_SOURCE,
    REPO_SEARCH_QUERIES,
    SEARCH_MAX_PAGES,
    SEARCH_PER_PAGE,
    SKILL_MD_PATHS,
)
from .utils import split_repo

logger = logging.getLogger(__name__)

# Directories whose SKILL.md describes the repository as a whole
_REPO_LEVEL_DIRS = {posixpath.dirname(p) for p in SKILL_MD_PATHS}


def make_target(owner: str, name: str, repo_id: Optional[int] = None,
                skill_path: Optional[str] = None) -> dict:
    skill_path = (skill_path or '').strip('/') or None
    key = f"repo:{repo_id}" if repo_id is not None else f"name:{owner}/{name}".lower()
    if skill_path:
        key = f"{key}#{skill_path}"
    return {
        'key': key,
        'repoId': repo_id,
        'owner': owner,
        'name': name,
        'fullName': f"{owner}/{name}",
        'skillPath': skill_path,
    }


def target_from_repo(repo: dict, skill_path: Optional[str] = None) -> Optional[dict]:
    """Build a target from a GitHub repository object, None if it has no owner"""
    owner = (repo.get('owner') or {}).get('login')
    if not owner:
        logger.debug(f"Skipping {repo.get('full_name')}: no owner info")
        return None
    return make_target(owner, repo['name'], repo.get('id'), skill_path)


def paginate_search(fetch_page, max_results: int = MAX_RESULTS_PER_SOURCE) -> Iterator[dict]:
    """Walk search pages: 100 per page, at most 10 pages (GitHub's 1000 result window)"""
    fetched = 0
    for page in range(1, SEARCH_MAX_PAGES + 1):
        data = fetch_page(page)
        items = data.get('items', [])
        for item in items:
            if fetched >= max_results:
                return
            fetched += 1
            yield item

        if len(items) < SEARCH_PER_PAGE or fetched >= max_results:
            return
        if page * SEARCH_PER_PAGE >= data.get('total_count', 0):
            return


class RepositorySearchSource:
    """Repositories matching a search query (topics, readme text, orgs)"""

    def __init__(self, query: str, sort: str = 'updated', order: str = 'desc'):
        self.query = query
        self.sort = sort
        self.order = order

    def __repr__(self):
        return f"RepositorySearchSource({self.query!r})"

    def targets(self, client, max_results: int = MAX_RESULTS_PER_SOURCE) -> Iterator[dict]:
        def fetch(page):
            return client.search_repos(self.query, sort=self.sort, order=self.order, page=page)

        for repo in paginate_search(fetch, max_results):
            target = target_from_repo(repo)
            if target:
                yield target


class RecentlyPushedSource(RepositorySearchSource):
    """Repositories pushed after a date, for quick incremental runs"""

    def __init__(self, since, base_query: str = "SKILL.md in:readme"):
        if isinstance(since, (date, datetime)):
            since = since.strftime('%Y-%m-%d')
        super().__init__(f"{base_query} pushed:>{since}")


class CodeSearchSource:
    """SKILL.md files found by code search (filename / path matches)"""

    def __init__(self, query: str):
        self.query = query

    def __repr__(self):
        return f"CodeSearchSource({self.query!r})"

    def targets(self, client, max_results: int = MAX_RESULTS_PER_SOURCE) -> Iterator[dict]:
        def fetch(page):
            return client.search_code(self.query, page=page)

        for item in paginate_search(fetch, max_results):
            repo = item.get('repository') or {}
            if not repo.get('name'):
                continue
            directory = posixpath.dirname(item.get('path', ''))
            skill_path = None if directory in _REPO_LEVEL_DIRS else directory
            target = target_from_repo(repo, skill_path)
            if target:
                yield target


class RepoListSource:
    """A fixed list of "owner/repo" names"""

    def __init__(self, repos: List[str]):
        # Invalid names raise here, not halfway through discovery
        self.repos = [split_repo(repo) for repo in repos]

    def __repr__(self):
        return f"RepoListSource({len(self.repos)} repos)"

    def targets(self, client=None, max_results: int = MAX_RESULTS_PER_SOURCE) -> Iterator[dict]:
        for owner, name in self.repos[:max_results]:
            yield make_target(owner, name)


class PathListSource:
    """Several skills living in one repository, one directory each"""

    def __init__(self, repo: str, paths: List[str]):
        self.owner, self.name = split_repo(repo)
        self.paths = list(paths)

    def __repr__(self):
        return f"PathListSource({self.owner}/{self.name}, {len(self.paths)} paths)"

    def targets(self, client=None, max_results: int = MAX_RESULTS_PER_SOURCE) -> Iterator[dict]:
        for path in self.paths[:max_results]:
            yield make_target(self.owner, self.name, skill_path=path)


def default_sources() -> list:
    """The standard discovery battery"""
    sources = [CodeSearchSource(q) for q in CODE_SEARCH_QUERIES]
    sources += [RepositorySearchSource(q) for q in REPO_SEARCH_QUERIES]
    return sources
