"""
GitHub Skills Crawler
Discovers repositories containing SKILL.md files and fetches them as Skill records
"""

import logging
from typing import Callable, Iterable, List, Optional

import requests

from .config import MAX_RESULTS_PER_SOURCE, VERIFY_BATCH_SIZE
from .github_client import GitHubClient, RateLimitExceeded
from .parallel import bounded_map
from .skill_parser import SkillParser, repo_data_from_api
from .sources import default_sources

logger = logging.getLogger(__name__)


class SkillsCrawler:
    """Find SKILL.md repositories on GitHub"""

    def __init__(self, client: GitHubClient, parser: Optional[SkillParser] = None):
        self.client = client
        self.parser = parser or SkillParser()
        self.rate_limited = False

    def discover(self, sources: Optional[Iterable] = None,
                 max_per_source: int = MAX_RESULTS_PER_SOURCE,
                 on_progress: Optional[Callable[[str, int, int], None]] = None) -> List[dict]:
        """
        Run every source and collect unique targets, first seen wins.

        A failing source is logged and skipped. Running out of quota stops
        discovery but keeps what was already found.
        """
        sources = list(sources) if sources is not None else default_sources()
        targets = {}

        for source in sources:
            logger.info(f"Searching: {source!r}")
            found = 0
            try:
                for target in source.targets(self.client, max_results=max_per_source):
                    found += 1
                    targets.setdefault(target['key'], target)
            except RateLimitExceeded as e:
                logger.error(f"Rate limit exhausted during discovery, stopping: {e}")
                self.rate_limited = True
                break
            except requests.RequestException as e:
                logger.error(f"Search failed for {source!r}: {e}")
                continue
            finally:
                if on_progress:
                    on_progress(repr(source), found, len(targets))

            logger.info(f"  Found {found} targets ({len(targets)} unique total)")

        return list(targets.values())

    def verify_skill_repo(self, target: dict) -> Optional[str]:
        """Path of the target's SKILL.md, None if it has none"""
        return self.client.locate_skill_md(target['owner'], target['name'], base_path=target.get('skillPath'))

    def filter_valid(self, targets: List[dict], batch_size: int = VERIFY_BATCH_SIZE) -> List[dict]:
        """
        Keep targets with a SKILL.md, checking a batch at a time.

        Kept targets come back as copies carrying the located file in skillMdPath.
        """
        results = bounded_map(
            self.verify_skill_repo,
            targets,
            batch_size=batch_size,
            stop_when=lambda r: isinstance(r.error, RateLimitExceeded),
        )

        valid = []
        for result in results:
            if result.ok and result.value:
                valid.append(dict(result.item, skillMdPath=result.value))
            elif not result.ok:
                logger.debug(f"Verification failed for {result.item['fullName']}: {result.error}")
                if isinstance(result.error, RateLimitExceeded):
                    self.rate_limited = True
        logger.info(f"{len(valid)}/{len(targets)} targets have a SKILL.md")
        return valid

    def get_repo_metadata(self, target: dict) -> Optional[dict]:
        data = self.client.get_repo(target['owner'], target['name'])
        if data is None:
            return None
        return repo_data_from_api(data)

    def get_marketplace(self, repo_data: dict) -> dict:
        data = self.client.get_marketplace_json(repo_data['owner'], repo_data['name'])
        if not data:
            return {'hasMarketplaceJson': False}

        plugins = data.get('plugins') or []
        resources = [p['name'] for p in plugins if isinstance(p, dict) and isinstance(p.get('name'), str)]
        return {
            'hasMarketplaceJson': True,
            'installCommand': f"/plugin marketplace add {repo_data['fullName']}",
            'resources': resources,
        }

    def fetch_skill(self, target: dict, check_marketplace: bool = True,
                    synced_at: Optional[str] = None) -> Optional[dict]:
        """Fetch and normalize one target, None if it has no SKILL.md"""
        repo_data = self.get_repo_metadata(target)
        if repo_data is None:
            logger.warning(f"Repository not found: {target['fullName']}")
            return None

        if target.get('skillMdPath'):
            path = target['skillMdPath']
            content = self.client.get_content(repo_data['owner'], repo_data['name'], path)
            found = (path, content) if content else None
        else:
            found = self.client.find_skill_md(repo_data['owner'], repo_data['name'],
                                              base_path=target.get('skillPath'))
        if found is None:
            logger.info(f"No SKILL.md found in {target['fullName']}")
            return None
        path, content = found

        marketplace = self.get_marketplace(repo_data) if check_marketplace else None
        skill = self.parser.build(
            repo_data,
            content,
            skill_path=target.get('skillPath'),
            synced_at=synced_at,
            marketplace=marketplace,
        )
        logger.info(f"Found skill: {skill['name']} from {path} in {repo_data['fullName']} "
                    f"({repo_data['stars']} stars)")
        return skill
