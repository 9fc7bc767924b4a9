"""
Read-side catalog used by the website
"""

from typing import List, Optional

from .search_engine import SkillSearchEngine
from .store import SkillStore


class SkillCatalog:
    """Listing, search and lookup over a SkillStore"""

    def __init__(self, store: Optional[SkillStore] = None):
        self.store = store or SkillStore()
        self._engine = None

    @property
    def engine(self) -> SkillSearchEngine:
        if self._engine is None:
            self._engine = SkillSearchEngine(self.store.load_index()['skills'])
        return self._engine

    def reload(self):
        """Pick up a fresh sync"""
        self.engine.update_skills(self.store.load_index()['skills'])

    def search(self, query: str = "", filters: Optional[dict] = None,
               limit: int = 50, offset: int = 0) -> dict:
        return self.engine.search(query, filters=filters, limit=limit, offset=offset)

    def get_skill(self, skill_id: str) -> Optional[dict]:
        return self.store.get(skill_id)

    def list_by_category(self, category_id: str) -> List[dict]:
        return self.store.list_by_category(category_id)

    def get_stats(self) -> Optional[dict]:
        return self.store.load_stats()

    def has_data(self) -> bool:
        return self.store.has_data()

    def popular(self, limit: int = 20) -> List[dict]:
        return self.store.popular(limit)

    def recent(self, limit: int = 20) -> List[dict]:
        return self.store.recent(limit)
