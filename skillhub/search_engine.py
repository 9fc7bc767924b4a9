"""
Search engine combining keyword search with filters and pagination
"""

import logging
from typing import List, Optional

from .filters import apply_filters_to_results, has_criteria, sort_search_results
from .keyword_search import KeywordSearch

logger = logging.getLogger(__name__)


class SkillSearchEngine:
    """Answer list/search requests over the skill index"""

    def __init__(self, skills: List[dict]):
        self.update_skills(skills)

    def update_skills(self, skills: List[dict]):
        """Swap the underlying collection and rebuild the keyword index"""
        self.all_skills = list(skills)
        self.keyword_search = KeywordSearch(self.all_skills)
        logger.debug(f"Indexed {len(self.all_skills)} skills")

    def search(self, query: str = "", filters: Optional[dict] = None,
               limit: int = 50, offset: int = 0) -> dict:
        if limit < 0 or offset < 0:
            raise ValueError("limit and offset must be >= 0")
        filters = filters or {}

        if not query or not query.strip():
            results = [
                {'skill': skill, 'score': 1.0, 'matchedFields': []}
                for skill in self.all_skills
            ]
        else:
            # Ask for everything so filtering cannot starve the page
            results = self.keyword_search.search(query, limit=len(self.all_skills))

        if has_criteria(filters):
            results = apply_filters_to_results(results, filters)

        if filters.get('sort_by'):
            results = sort_search_results(results, filters['sort_by'], filters.get('sort_order') or 'desc')

        total = len(results)
        return {
            'results': results[offset:offset + limit],
            'total': total,
            'hasMore': offset + limit < total,
            'query': query,
            'filters': filters,
        }

    def get_all(self, filters: Optional[dict] = None, page: int = 1, limit: int = 50) -> dict:
        if page < 1:
            raise ValueError("page must be >= 1")
        return self.search("", filters=filters, limit=limit, offset=(page - 1) * limit)


def create_search_engine(skills: List[dict]) -> SkillSearchEngine:
    return SkillSearchEngine(skills)
