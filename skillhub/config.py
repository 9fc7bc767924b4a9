"""
Skill catalog configuration
"""

import os

# GitHub API settings
GITHUB_API_BASE = "https://api.github.com"
GITHUB_API_VERSION = "2022-11-28"
GITHUB_TOKEN_ENV = "GITHUB_TOKEN"

# Search API limits: only the first 1000 results of a query are reachable
SEARCH_PER_PAGE = 100
SEARCH_MAX_PAGES = 10

# Repository search queries (topic, free-text and organization matches)
REPO_SEARCH_QUERIES = [
    "topic:claude-skills",
    "topic:agent-skills",
    "topic:claude-code-skills",
    "topic:claude-code",
    "topic:claude-agent",
    '"Claude Code" skill in:readme',
    "claude skill in:readme",
    "anthropic skill in:readme",
    "SKILL.md agent in:readme",
    "org:anthropics",
]

# Code search queries for finding SKILL.md files (filename and path matches)
CODE_SEARCH_QUERIES = [
    "filename:SKILL.md",
    "filename:SKILL.md path:.claude/skills",
    "filename:SKILL.md path:skills",
]

# Where to look for a skill definition inside a repository, in priority order
SKILL_MD_PATHS = [
    "SKILL.md",
    "skill.md",
    "skills/SKILL.md",
    ".claude/skills/SKILL.md",
    "skill/SKILL.md",
]

MARKETPLACE_JSON_PATH = ".claude-plugin/marketplace.json"

# Rate limiting
REQUEST_DELAY = 2.0  # Seconds between requests
RATE_LIMIT_LOW_WATER = 10  # Wait for the reset below this many remaining calls
RATE_LIMIT_MAX_WAIT = 3600  # Never sleep longer than this for a quota reset
RATE_LIMIT_RETRIES = 3
REQUEST_TIMEOUT = 30

# Sync pipeline
VERIFY_BATCH_SIZE = 10
FETCH_BATCH_SIZE = 5
MAX_RESULTS_PER_SOURCE = 1000

# Record builder
MAX_TAGS = 10
MAX_DESCRIPTION_KEYWORDS = 5
DEFAULT_DESCRIPTION = "No description"
SKILL_SCHEMA_VERSION = 1

# Derived statistics
TOP_TAGS_LIMIT = 50
RECENTLY_UPDATED_LIMIT = 20

# Output paths
DATA_DIR = os.environ.get("SKILLHUB_DATA_DIR", "data")
INDEX_VERSION = "1.0.0"
