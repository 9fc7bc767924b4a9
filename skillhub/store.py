"""
Flat-file skill store

Layout under the data directory:
- skills/index.json - SkillsIndex (lightweight listing)
- skills/skills-full.json - full Skill records keyed by id
- skills/by-category/{category}.json - SkillIndex list per category
- metadata/stats.json - aggregate statistics

Reads tolerate missing files. Writes replace whole files. There is no locking,
so only one writer may run at a time.
"""

import json
import logging
from collections import Counter
from pathlib import Path
from typing import Iterable, List, Optional

from .config import DATA_DIR, INDEX_VERSION, RECENTLY_UPDATED_LIMIT, TOP_TAGS_LIMIT
from .schema import validate_skill
from .skill_parser import skill_to_index
from .utils import parse_timestamp, utc_now_iso

logger = logging.getLogger(__name__)


def build_stats(skills: Iterable[dict], last_sync: Optional[str] = None) -> dict:
    """Aggregate statistics over full Skill records"""
    skills = list(skills)
    by_category = {}
    tag_counts = Counter()

    for skill in skills:
        category = skill.get('category') or 'specialized'
        by_category[category] = by_category.get(category, 0) + 1
        tag_counts.update(skill.get('tags') or [])

    recent = sorted(
        skills,
        key=lambda s: parse_timestamp((s.get('metadata') or {}).get('updatedAt')),
        reverse=True,
    )

    return {
        'totalSkills': len(skills),
        'byCategory': by_category,
        'topTags': [{'tag': tag, 'count': count} for tag, count in tag_counts.most_common(TOP_TAGS_LIMIT)],
        'recentlyUpdated': [s['id'] for s in recent[:RECENTLY_UPDATED_LIMIT]],
        'lastSyncTime': last_sync or utc_now_iso(),
    }


class SkillStore:
    """JSON file backed skill database"""

    def __init__(self, data_dir=DATA_DIR):
        self.data_dir = Path(data_dir)
        self.skills_dir = self.data_dir / "skills"
        self.categories_dir = self.skills_dir / "by-category"
        self.metadata_dir = self.data_dir / "metadata"

    @property
    def index_path(self) -> Path:
        return self.skills_dir / "index.json"

    @property
    def full_path(self) -> Path:
        return self.skills_dir / "skills-full.json"

    @property
    def stats_path(self) -> Path:
        return self.metadata_dir / "stats.json"

    def category_path(self, category: str) -> Path:
        return self.categories_dir / f"{category}.json"

    # Reads

    @staticmethod
    def _read_json(path: Path, default):
        if not path.exists():
            return default
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)

    @staticmethod
    def empty_index() -> dict:
        return {
            'version': INDEX_VERSION,
            'lastSync': utc_now_iso(),
            'totalSkills': 0,
            'skills': [],
        }

    def load_index(self) -> dict:
        """Load the skills index, an empty one if nothing was synced yet"""
        try:
            return self._read_json(self.index_path, None) or self.empty_index()
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read {self.index_path}: {e}")
            return self.empty_index()

    def load_all(self, strict: bool = False) -> dict:
        """
        Load all full Skill records keyed by id.

        A missing file is an empty store. With strict=True an unreadable or
        corrupt file raises instead of reading as empty.
        """
        try:
            data = self._read_json(self.full_path, {})
        except (OSError, ValueError) as e:
            if strict:
                raise
            logger.warning(f"Could not read {self.full_path}: {e}")
            return {}
        if not isinstance(data, dict):
            if strict:
                raise ValueError(f"{self.full_path} does not contain an id-keyed mapping")
            return {}
        return data

    def get(self, skill_id: str) -> Optional[dict]:
        return self.load_all().get(skill_id)

    def list_by_category(self, category: str) -> List[dict]:
        try:
            data = self._read_json(self.category_path(category), [])
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read category {category}: {e}")
            return []

        # Older files wrap the list as {"skills": [...]}
        if isinstance(data, dict):
            data = data.get('skills', [])
        return [
            {**skill, 'category': skill.get('category') or category, 'repoUrl': skill.get('repoUrl', '')}
            for skill in data
        ]

    def load_stats(self) -> Optional[dict]:
        try:
            return self._read_json(self.stats_path, None)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read {self.stats_path}: {e}")
            return None

    def has_data(self) -> bool:
        return self.load_index().get('totalSkills', 0) > 0

    def popular(self, limit: int = 20) -> List[dict]:
        skills = self.load_index()['skills']
        return sorted(skills, key=lambda s: s.get('stars', 0), reverse=True)[:limit]

    def recent(self, limit: int = 20) -> List[dict]:
        skills = self.load_index()['skills']
        return sorted(skills, key=lambda s: parse_timestamp(s.get('updatedAt')), reverse=True)[:limit]

    # Writes

    @staticmethod
    def _write_json(path: Path, data):
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    def save_all(self, skills: dict, last_sync: Optional[str] = None) -> dict:
        """Replace the full skill map and rebuild every derived file"""
        self._write_json(self.full_path, skills)
        logger.info(f"Saved {len(skills)} skills to {self.full_path}")
        return self.rebuild_derived(skills, last_sync=last_sync)

    def upsert(self, skill: dict) -> bool:
        """Insert or replace one skill by id. Returns True if it was new."""
        validate_skill(skill)
        skills = self.load_all(strict=True)
        is_new = skill['id'] not in skills
        skills[skill['id']] = skill
        self.save_all(skills)
        return is_new

    def delete(self, skill_ids: Iterable[str]) -> List[str]:
        """Remove skills by id, returns the ids that existed"""
        skills = self.load_all(strict=True)
        removed = []
        for skill_id in skill_ids:
            if skills.pop(skill_id, None) is not None:
                removed.append(skill_id)
                logger.info(f"Removed: {skill_id}")
            else:
                logger.info(f"Not found: {skill_id}")
        if removed:
            self.save_all(skills)
        return removed

    def rebuild_derived(self, skills: Optional[dict] = None, last_sync: Optional[str] = None) -> dict:
        """Regenerate index, category files and stats from the full skill map"""
        if skills is None:
            skills = self.load_all(strict=True)
        last_sync = last_sync or utc_now_iso()

        index = [skill_to_index(skill) for skill in skills.values()]

        by_category = {}
        for entry in index:
            by_category.setdefault(entry['category'], []).append(entry)

        self._write_json(self.index_path, {
            'version': INDEX_VERSION,
            'lastSync': last_sync,
            'totalSkills': len(index),
            'skills': index,
        })

        self.categories_dir.mkdir(parents=True, exist_ok=True)
        for stale in self.categories_dir.glob("*.json"):
            if stale.stem not in by_category:
                stale.unlink()
        for category, entries in by_category.items():
            self._write_json(self.category_path(category), entries)
            logger.info(f"  by-category/{category}.json: {len(entries)} skills")

        stats = build_stats(skills.values(), last_sync=last_sync)
        self._write_json(self.stats_path, stats)

        logger.info(f"Index rebuilt: {len(index)} skills in {len(by_category)} categories")
        return stats
