"""
Filtering, sorting and pagination for skill listings

Filter keys:
    categories      keep skills whose category is in the list
    tags            keep skills sharing at least one tag with the list
    min_stars       keep skills with at least this many stars
    updated_after   keep skills updated at or after this datetime / ISO string
    sort_by         relevance | stars | updated | created
    sort_order      asc | desc (default desc)
"""

import math
from typing import List, Optional

from .utils import parse_timestamp

SORT_KEYS = ('relevance', 'stars', 'updated', 'created')
FILTER_KEYS = ('categories', 'tags', 'min_stars', 'updated_after')


def has_criteria(filters: Optional[dict]) -> bool:
    """True if any filter predicate is set"""
    if not filters:
        return False
    return any(filters.get(key) not in (None, [], ()) for key in FILTER_KEYS)


def matches_filters(skill: dict, filters: dict) -> bool:
    categories = filters.get('categories')
    if categories and skill.get('category') not in categories:
        return False

    tags = filters.get('tags')
    if tags:
        wanted = {str(t).lower() for t in tags}
        if not wanted.intersection(skill.get('tags') or []):
            return False

    min_stars = filters.get('min_stars')
    if min_stars is not None and (skill.get('stars') or 0) < min_stars:
        return False

    updated_after = filters.get('updated_after')
    if updated_after is not None:
        if parse_timestamp(skill.get('updatedAt')) < parse_timestamp(updated_after):
            return False

    return True


def apply_filters(skills: List[dict], filters: Optional[dict]) -> List[dict]:
    if not has_criteria(filters):
        return list(skills)
    return [skill for skill in skills if matches_filters(skill, filters)]


def apply_filters_to_results(results: List[dict], filters: Optional[dict]) -> List[dict]:
    if not has_criteria(filters):
        return list(results)
    return [result for result in results if matches_filters(result['skill'], filters)]


def _sort_value(skill: dict, sort_by: str):
    if sort_by == 'stars':
        return skill.get('stars') or 0
    # No creation time on the index projection, so "created" uses updatedAt
    return parse_timestamp(skill.get('updatedAt'))


def _check_sort(sort_by: str, order: str):
    if sort_by not in SORT_KEYS:
        raise ValueError(f"Unknown sort key: {sort_by}")
    if order not in ('asc', 'desc'):
        raise ValueError(f"Unknown sort order: {order}")


def sort_skills(skills: List[dict], sort_by: str = 'relevance', order: str = 'desc') -> List[dict]:
    """Stable sort; relevance keeps the incoming order"""
    _check_sort(sort_by, order)
    if sort_by == 'relevance':
        return list(skills)
    return sorted(skills, key=lambda s: _sort_value(s, sort_by), reverse=(order == 'desc'))


def sort_search_results(results: List[dict], sort_by: str = 'relevance', order: str = 'desc') -> List[dict]:
    _check_sort(sort_by, order)
    if sort_by == 'relevance':
        return list(results)
    return sorted(results, key=lambda r: _sort_value(r['skill'], sort_by), reverse=(order == 'desc'))


def paginate(items: list, page: int, limit: int) -> dict:
    """Slice a 1-based page. Pages past the end are empty, not errors."""
    if page < 1:
        raise ValueError("page must be >= 1")
    if limit < 1:
        raise ValueError("limit must be >= 1")

    total = len(items)
    start = (page - 1) * limit
    return {
        'data': items[start:start + limit],
        'page': page,
        'limit': limit,
        'total': total,
        'totalPages': math.ceil(total / limit),
        'hasNext': page * limit < total,
        'hasPrev': page > 1,
    }
