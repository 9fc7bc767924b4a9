"""
SKILL.md record builder
Parses SKILL.md files and turns them plus repository metadata into Skill records
"""

import re
import logging
from collections import Counter
from typing import Optional

import yaml

from .categories import resolve_category
from .config import (
    DEFAULT_DESCRIPTION,
    MAX_DESCRIPTION_KEYWORDS,
    MAX_TAGS,
    SKILL_SCHEMA_VERSION,
)
from .utils import as_text, json_safe, utc_now_iso

logger = logging.getLogger(__name__)

# YAML frontmatter between --- lines at the very top of the file
FRONTMATTER_RE = re.compile(r'\A---[ \t]*\r?\n(.*?)^---[ \t]*(?:\r?\n|\Z)', re.DOTALL | re.MULTILINE)

# Conventional container directory for skills, not part of a skill's identity
SKILLS_DIR_PREFIX_RE = re.compile(r'^(?:\.claude/)?skills/(?=.)')


class SkillParser:
    """Parse SKILL.md files and build Skill records"""

    @staticmethod
    def parse_skill_md(content: str) -> dict:
        """Split SKILL.md into frontmatter and markdown body. Never raises."""
        content = content or ""
        match = FRONTMATTER_RE.match(content)
        if not match:
            return {'frontmatter': {}, 'content': content.strip(), 'raw': content}

        try:
            frontmatter = yaml.safe_load(match.group(1))
        except yaml.YAMLError as e:
            logger.debug(f"Invalid frontmatter, treating file as plain markdown: {e}")
            return {'frontmatter': {}, 'content': content.strip(), 'raw': content}

        if frontmatter is None:
            frontmatter = {}
        if not isinstance(frontmatter, dict):
            logger.debug("Frontmatter is not a mapping, treating file as plain markdown")
            return {'frontmatter': {}, 'content': content.strip(), 'raw': content}

        return {
            'frontmatter': json_safe(frontmatter),
            'content': content[match.end():].strip(),
            'raw': content,
        }

    @staticmethod
    def extract_keywords(text: str) -> list:
        """Rank words longer than 3 chars by frequency"""
        if not text:
            return []
        words = re.sub(r'[^\w\s]', ' ', text.lower()).split()
        counts = Counter(w for w in words if len(w) > 3)
        return [word for word, _ in counts.most_common()]

    @staticmethod
    def extract_tags(frontmatter: dict, topics: list, description: str) -> list:
        """Merge frontmatter tags, repo topics and description keywords"""
        raw_tags = frontmatter.get('tags') or []
        if isinstance(raw_tags, str):
            raw_tags = raw_tags.split(',')
        elif not isinstance(raw_tags, list):
            raw_tags = [raw_tags]

        candidates = list(raw_tags) + list(topics or [])
        candidates += SkillParser.extract_keywords(description)[:MAX_DESCRIPTION_KEYWORDS]

        tags = []
        for tag in candidates:
            if tag is None or isinstance(tag, (dict, list)):
                continue
            tag = str(tag).strip().lower()
            if tag and tag not in tags:
                tags.append(tag)

        return tags[:MAX_TAGS]

    @staticmethod
    def skill_slug(skill_path: Optional[str]) -> Optional[str]:
        """
        Slug for a skill directory inside a multi-skill repository.

        The whole path counts, so sibling directories with the same leaf name get
        different ids. A leading skills/ (or .claude/skills/) is dropped.

        Examples:
            "skills/pdf" -> "pdf"
            "skills/document/pdf" -> "document-pdf"
            "examples/pdf" -> "examples-pdf"
        """
        skill_path = (skill_path or '').strip('/')
        if not skill_path:
            return None
        skill_path = SKILLS_DIR_PREFIX_RE.sub('', skill_path)
        return skill_path.replace('/', '-')

    @staticmethod
    def generate_skill_id(owner: str, repo: str, skill_slug: Optional[str] = None) -> str:
        """owner-repo[-slug], lowercased, anything outside [a-z0-9-] replaced"""
        raw = f"{owner}-{repo}"
        if skill_slug:
            raw = f"{raw}-{skill_slug}"
        return re.sub(r'[^a-z0-9-]', '-', raw.lower())

    @staticmethod
    def skill_to_index(skill: dict) -> dict:
        """Lightweight projection used for listings and search"""
        return {
            'id': skill['id'],
            'name': skill['name'],
            'description': skill['description'],
            'category': skill['category'],
            'tags': list(skill['tags']),
            'stars': skill['metadata']['stars'],
            'updatedAt': skill['metadata']['updatedAt'],
            'repoUrl': skill['repo']['url'],
        }

    def build(self, repo_data: dict, skill_md: str, skill_path: Optional[str] = None,
              synced_at: Optional[str] = None, marketplace: Optional[dict] = None) -> dict:
        """Build a complete Skill from repository metadata and SKILL.md text"""
        parsed = self.parse_skill_md(skill_md)
        frontmatter = parsed['frontmatter']
        topics = [str(t) for t in (repo_data.get('topics') or [])]

        name = as_text(frontmatter.get('name')) or repo_data['name']
        description = (
            as_text(frontmatter.get('description'))
            or as_text(repo_data.get('description'))
            or DEFAULT_DESCRIPTION
        )

        category = resolve_category(frontmatter.get('category'), name, description, topics)
        tags = self.extract_tags(frontmatter, topics, description)

        skill_path = (skill_path or '').strip('/') or None
        skill_slug = self.skill_slug(skill_path)
        skill_id = self.generate_skill_id(repo_data['owner'], repo_data['name'], skill_slug)

        branch = repo_data.get('defaultBranch') or 'main'
        url = repo_data['url']
        if skill_path:
            url = f"{url.rstrip('/')}/tree/{branch}/{skill_path}"

        repo = {
            'owner': repo_data['owner'],
            'name': repo_data['name'],
            'fullName': repo_data.get('fullName') or f"{repo_data['owner']}/{repo_data['name']}",
            'url': url,
            'defaultBranch': branch,
        }
        if repo_data.get('homepage'):
            repo['homepage'] = repo_data['homepage']
        if skill_path:
            repo['path'] = skill_path

        metadata = {
            'stars': int(repo_data.get('stars') or 0),
            'forks': int(repo_data.get('forks') or 0),
            'language': repo_data.get('language'),
            'topics': topics,
            'createdAt': repo_data.get('createdAt') or '',
            'updatedAt': repo_data.get('updatedAt') or '',
            'pushedAt': repo_data.get('pushedAt') or '',
        }
        if repo_data.get('license'):
            metadata['license'] = repo_data['license']

        return {
            'id': skill_id,
            'name': name,
            'description': description,
            'repo': repo,
            'metadata': metadata,
            'category': category,
            'tags': tags,
            'skillMd': parsed,
            'marketplace': marketplace or {'hasMarketplaceJson': False},
            'internal': {
                'syncedAt': synced_at or utc_now_iso(),
                'version': SKILL_SCHEMA_VERSION,
            },
        }


def repo_data_from_api(data: dict) -> dict:
    """Normalize a GitHub repos/get payload into a repository descriptor"""
    owner = (data.get('owner') or {}).get('login') or data.get('full_name', '/').split('/')[0]
    license_info = data.get('license') or {}
    return {
        'id': data.get('id'),
        'name': data['name'],
        'fullName': data.get('full_name') or f"{owner}/{data['name']}",
        'owner': owner,
        'description': data.get('description') or '',
        'url': data.get('html_url') or f"https://github.com/{owner}/{data['name']}",
        'homepage': data.get('homepage') or None,
        'stars': data.get('stargazers_count', 0),
        'forks': data.get('forks_count', 0),
        'language': data.get('language'),
        'topics': data.get('topics') or [],
        'createdAt': data.get('created_at') or '',
        'updatedAt': data.get('updated_at') or '',
        'pushedAt': data.get('pushed_at') or '',
        'defaultBranch': data.get('default_branch') or 'main',
        'license': license_info.get('name'),
    }


_parser = SkillParser()


def build_skill(repo_data: dict, skill_md: str, **kwargs) -> dict:
    return _parser.build(repo_data, skill_md, **kwargs)


parse_skill_md = SkillParser.parse_skill_md
skill_to_index = SkillParser.skill_to_index
generate_skill_id = SkillParser.generate_skill_id
