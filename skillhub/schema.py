"""
JSON Schema for stored Skill records
"""

import jsonschema

from .categories import CATEGORY_IDS
from .config import MAX_TAGS

_TIMESTAMP = {"type": "string"}

SKILL_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "required": [
        "id", "name", "description", "repo", "metadata",
        "category", "tags", "skillMd", "internal",
    ],
    "properties": {
        "id": {"type": "string", "pattern": "^[a-z0-9-]+$"},
        "name": {"type": "string", "minLength": 1},
        "description": {"type": "string"},
        "repo": {
            "type": "object",
            "required": ["owner", "name", "fullName", "url", "defaultBranch"],
            "properties": {
                "owner": {"type": "string"},
                "name": {"type": "string"},
                "fullName": {"type": "string"},
                "url": {"type": "string"},
                "homepage": {"type": ["string", "null"]},
                "defaultBranch": {"type": "string"},
                "path": {"type": "string"},
            },
        },
        "metadata": {
            "type": "object",
            "required": [
                "stars", "forks", "language", "topics",
                "createdAt", "updatedAt", "pushedAt",
            ],
            "properties": {
                "stars": {"type": "integer", "minimum": 0},
                "forks": {"type": "integer", "minimum": 0},
                "language": {"type": ["string", "null"]},
                "topics": {"type": "array", "items": {"type": "string"}},
                "createdAt": _TIMESTAMP,
                "updatedAt": _TIMESTAMP,
                "pushedAt": _TIMESTAMP,
                "license": {"type": ["string", "null"]},
            },
        },
        "category": {"enum": CATEGORY_IDS},
        "tags": {
            "type": "array",
            "maxItems": MAX_TAGS,
            "uniqueItems": True,
            "items": {"type": "string", "minLength": 1},
        },
        "skillMd": {
            "type": "object",
            "required": ["raw", "frontmatter", "content"],
            "properties": {
                "raw": {"type": "string"},
                "frontmatter": {"type": "object"},
                "content": {"type": "string"},
            },
        },
        "marketplace": {
            "type": "object",
            "required": ["hasMarketplaceJson"],
            "properties": {
                "hasMarketplaceJson": {"type": "boolean"},
                "installCommand": {"type": "string"},
                "resources": {"type": "array", "items": {"type": "string"}},
            },
        },
        "internal": {
            "type": "object",
            "required": ["syncedAt", "version"],
            "properties": {
                "syncedAt": _TIMESTAMP,
                "version": {"type": "integer"},
            },
        },
    },
}


def validate_skill(skill: dict):
    """Raise jsonschema.ValidationError if the record is not a complete Skill"""
    jsonschema.validate(instance=skill, schema=SKILL_SCHEMA)
