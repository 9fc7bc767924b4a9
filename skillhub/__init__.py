# Agent Skill catalog
# Crawls GitHub for SKILL.md files, stores them as flat JSON and serves search over them

from .catalog import SkillCatalog
from .github_client import GitHubClient, GitHubError, RateLimitExceeded
from .github_crawler import SkillsCrawler
from .search_engine import SkillSearchEngine
from .skill_parser import SkillParser, build_skill, skill_to_index
from .store import SkillStore
from .sync import SkillSync, sync_skills

__all__ = [
    'GitHubClient',
    'GitHubError',
    'RateLimitExceeded',
    'SkillCatalog',
    'SkillParser',
    'SkillSearchEngine',
    'SkillStore',
    'SkillSync',
    'SkillsCrawler',
    'build_skill',
    'skill_to_index',
    'sync_skills',
]
