"""
Fuzzy keyword search over the skill index

Query syntax (tokens separated by spaces are ANDed, groups separated by " | " are ORed):
    pdf      fuzzy match
    =pdf     field equals "pdf"
    'pdf     field contains "pdf"
    ^pdf     field starts with "pdf"
    pdf$     field ends with "pdf"
    !pdf     no field contains "pdf"
    !^pdf    no field starts with "pdf"
    !pdf$    no field ends with "pdf"
"""

import logging
from typing import List, Optional

from rapidfuzz import fuzz, utils

logger = logging.getLogger(__name__)

DEFAULT_KEYS = [
    {'name': 'name', 'weight': 2.0},
    {'name': 'description', 'weight': 1.5},
    {'name': 'tags', 'weight': 1.0},
    {'name': 'category', 'weight': 0.5},
]

# Keeps a perfect match from collapsing the combined score to exactly zero
EPSILON = 0.001

# A match this many characters into a field costs its whole similarity
DEFAULT_DISTANCE = 100

# Fuzzy terms this short only match as substrings; one edit in three chars is noise
SHORT_TERM_LENGTH = 3


def parse_query(query: str) -> List[List[tuple]]:
    """Split a query into OR groups of (operator, term) tokens"""
    groups = []
    for part in query.split(' | '):
        tokens = []
        for token in part.split():
            tokens.append(_parse_token(token))
        if tokens:
            groups.append(tokens)
    return groups


def _parse_token(token: str) -> tuple:
    inverse = token.startswith('!')
    if inverse:
        token = token[1:]

    if token.startswith('^'):
        op, term = 'prefix', token[1:]
    elif token.endswith('$') and len(token) > 1:
        op, term = 'suffix', token[:-1]
    elif token.startswith('='):
        op, term = 'exact', token[1:]
    elif token.startswith("'"):
        op, term = 'include', token[1:]
    elif inverse:
        op, term = 'include', token
    else:
        op, term = 'fuzzy', token

    if inverse:
        op = f"not-{op}"
    return op, term.lower()


class KeywordSearch:
    """Weighted fuzzy search over SkillIndex records"""

    def __init__(self, skills: List[dict], threshold: float = 0.4,
                 min_match_char_length: int = 2, keys: Optional[List[dict]] = None,
                 distance: int = DEFAULT_DISTANCE, short_term_length: int = SHORT_TERM_LENGTH):
        self.skills = list(skills)
        self.threshold = threshold
        self.min_match_char_length = min_match_char_length
        self.distance = distance
        self.short_term_length = short_term_length
        self.keys = keys or DEFAULT_KEYS
        total_weight = sum(k['weight'] for k in self.keys)
        self.weights = {k['name']: k['weight'] / total_weight for k in self.keys}
        self._documents = [self._document(skill) for skill in self.skills]

    def _document(self, skill: dict) -> dict:
        doc = {}
        for key in self.keys:
            value = skill.get(key['name'])
            if value is None:
                values = []
            elif isinstance(value, list):
                values = [str(v) for v in value if v is not None]
            else:
                values = [str(value)]
            doc[key['name']] = [v.lower() for v in values if v]
        return doc

    def _fuzzy_similarity(self, term: str, value: str) -> float:
        """Best partial similarity, minus a penalty for how far into the value it sits"""
        if len(term) <= self.short_term_length:
            position = value.find(term)
            if position < 0:
                return 0.0
            similarity = 1.0
        else:
            alignment = fuzz.partial_ratio_alignment(term, value, processor=utils.default_process)
            if alignment is None:
                return 0.0
            similarity = alignment.score / 100.0
            position = alignment.dest_start
        return max(0.0, similarity - position / self.distance)

    def _field_similarity(self, op: str, term: str, values: List[str]) -> float:
        best = 0.0
        for value in values:
            if op == 'fuzzy':
                score = self._fuzzy_similarity(term, value)
            elif op == 'exact':
                score = 1.0 if value == term else 0.0
            elif op == 'include':
                score = 1.0 if term in value else 0.0
            elif op == 'prefix':
                score = 1.0 if value.startswith(term) else 0.0
            elif op == 'suffix':
                score = 1.0 if value.endswith(term) else 0.0
            else:
                raise ValueError(f"Unknown operator: {op}")
            best = max(best, score)
            if best >= 1.0:
                break
        return best

    def _match_token(self, doc: dict, op: str, term: str) -> Optional[tuple]:
        """Return (score, matched fields) for one token, or None if it does not match"""
        if op.startswith('not-'):
            positive = op[len('not-'):]
            for values in doc.values():
                if self._field_similarity(positive, term, values) >= 1.0:
                    return None
            return 1.0, []

        min_similarity = 1.0 - self.threshold if op == 'fuzzy' else 1.0
        combined = 1.0
        matched = []
        for field, values in doc.items():
            similarity = self._field_similarity(op, term, values)
            if similarity >= min_similarity:
                matched.append(field)
                combined *= max(1.0 - similarity, EPSILON) ** self.weights[field]

        if not matched:
            return None
        return 1.0 - combined, matched

    def _match_document(self, doc: dict, groups: List[List[tuple]]) -> Optional[tuple]:
        best = None
        for tokens in groups:
            scores = []
            fields = []
            for op, term in tokens:
                result = self._match_token(doc, op, term)
                if result is None:
                    break
                scores.append(result[0])
                for field in result[1]:
                    if field not in fields:
                        fields.append(field)
            else:
                score = sum(scores) / len(scores)
                if best is None or score > best[0]:
                    best = (score, fields)
        return best

    def search(self, query: str, limit: int = 50) -> List[dict]:
        """Return up to `limit` results ranked by score (1 is best)"""
        if not query or not query.strip():
            return []

        groups = []
        for tokens in parse_query(query.strip()):
            tokens = [(op, term) for op, term in tokens if len(term) >= self.min_match_char_length]
            if tokens:
                groups.append(tokens)
        if not groups:
            return []

        hits = []
        for position, doc in enumerate(self._documents):
            match = self._match_document(doc, groups)
            if match is not None:
                hits.append((match[0], position, match[1]))

        hits.sort(key=lambda h: (-h[0], h[1]))
        logger.debug(f"Query {query!r}: {len(hits)} matches")

        return [
            {
                'skill': self.skills[position],
                'score': max(0.0, min(1.0, score)),
                'matchedFields': fields,
            }
            for score, position, fields in hits[:max(limit, 0)]
        ]


def create_keyword_search(skills: List[dict], **options) -> KeywordSearch:
    return KeywordSearch(skills, **options)
