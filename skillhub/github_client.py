"""
GitHub API client
Paced, quota-aware access to the REST endpoints the sync pipeline needs
"""

import os
import json
import time
import base64
import logging
import threading
from typing import Optional
from urllib.parse import quote

import requests

from .config import (
    GITHUB_API_BASE,
    GITHUB_API_VERSION,
    GITHUB_TOKEN_ENV,
    MARKETPLACE_JSON_PATH,
    RATE_LIMIT_LOW_WATER,
    RATE_LIMIT_MAX_WAIT,
    RATE_LIMIT_RETRIES,
    REQUEST_DELAY,
    REQUEST_TIMEOUT,
    SEARCH_PER_PAGE,
    SKILL_MD_PATHS,
)
from .rate_limiter import RateLimiter

logger = logging.getLogger(__name__)


class GitHubError(Exception):
    """Base error for GitHub API failures"""


class RateLimitExceeded(GitHubError):
    """Quota exhausted and the reset is too far away (or retries ran out)"""

    def __init__(self, message: str, reset_at: Optional[float] = None):
        super().__init__(message)
        self.reset_at = reset_at


class GitHubClient:
    """Thin wrapper over the GitHub REST API"""

    def __init__(self, token: Optional[str] = None, session: Optional[requests.Session] = None,
                 delay: float = REQUEST_DELAY, limiter: Optional[RateLimiter] = None,
                 sleep=time.sleep, clock=time.time, api_base: str = GITHUB_API_BASE):
        self.token = token or os.environ.get(GITHUB_TOKEN_ENV)
        self.session = session or requests.Session()
        self.sleep = sleep
        self.clock = clock
        self.api_base = api_base.rstrip('/')

        if limiter is None and delay > 0:
            limiter = RateLimiter.from_delay(delay, sleep=sleep)
        self.limiter = limiter

        self.session.headers.update({
            'Accept': 'application/vnd.github+json',
            'X-GitHub-Api-Version': GITHUB_API_VERSION,
        })
        if self.token:
            self.session.headers['Authorization'] = f'Bearer {self.token}'
            logger.info("Using authenticated GitHub API")
        else:
            logger.warning("No GitHub token provided, rate limits will be strict")

        # resource ("core", "search") -> {"remaining": int, "reset": epoch seconds}
        self.quota = {}
        # resource -> epoch seconds before which no request is sent
        self.paused_until = {}
        self._lock = threading.Lock()

    # Rate limiting

    def _respect_rate_limit(self, resource: str):
        """Wait for the quota reset when nearly exhausted, then pace the request"""
        with self._lock:
            quota = self.quota.get(resource)
            if quota and quota['remaining'] < RATE_LIMIT_LOW_WATER:
                resume_at = quota['reset'] + 1
                if resume_at - self.clock() > RATE_LIMIT_MAX_WAIT:
                    raise RateLimitExceeded(
                        f"{resource} quota low ({quota['remaining']} left), "
                        f"reset in {resume_at - self.clock():.0f}s",
                        reset_at=quota['reset'],
                    )
                # Every caller holds off until the window resets, not just the first
                self.paused_until[resource] = max(self.paused_until.get(resource, 0), resume_at)
            wait = self.paused_until.get(resource, 0) - self.clock()

        if wait > 0:
            logger.warning(f"Rate limit low for {resource}, waiting {wait:.0f}s")
            self.sleep(wait)

        if self.limiter:
            self.limiter.acquire()

    def _record_quota(self, response: requests.Response, resource: str):
        remaining = response.headers.get('X-RateLimit-Remaining')
        reset = response.headers.get('X-RateLimit-Reset')
        if remaining is None or reset is None:
            return
        try:
            quota = {'remaining': int(remaining), 'reset': int(reset)}
        except ValueError:
            logger.debug(f"Ignoring malformed rate limit headers: {remaining!r}, {reset!r}")
            return
        with self._lock:
            self.quota[resource] = quota
            if quota['reset'] + 1 > self.paused_until.get(resource, 0):
                # A fresh window
                self.paused_until.pop(resource, None)

    @staticmethod
    def _is_rate_limited(response: requests.Response) -> bool:
        if response.status_code not in (403, 429):
            return False
        if response.headers.get('X-RateLimit-Remaining') == '0':
            return True
        if 'Retry-After' in response.headers:
            return True
        return 'rate limit' in response.text.lower()

    def _rate_limit_wait(self, response: requests.Response) -> tuple:
        """Seconds to wait before retrying and the reset timestamp, if known"""
        retry_after = response.headers.get('Retry-After')
        if retry_after and retry_after.isdigit():
            return int(retry_after), None
        reset = response.headers.get('X-RateLimit-Reset')
        if reset and reset.isdigit():
            return int(reset) - self.clock() + 1, int(reset)
        return None, None

    def _request(self, path: str, params: Optional[dict] = None, resource: str = 'core',
                 allow_404: bool = False, paced: bool = True):
        """GET a JSON document, sleeping through quota resets"""
        url = path if path.startswith('http') else f"{self.api_base}{path}"

        for attempt in range(RATE_LIMIT_RETRIES + 1):
            if paced:
                self._respect_rate_limit(resource)

            response = self.session.get(url, params=params, timeout=REQUEST_TIMEOUT)
            self._record_quota(response, resource)

            if self._is_rate_limited(response):
                wait, reset_at = self._rate_limit_wait(response)
                if wait is None or wait > RATE_LIMIT_MAX_WAIT or attempt == RATE_LIMIT_RETRIES:
                    raise RateLimitExceeded(f"Rate limited on {url}", reset_at=reset_at)
                wait = max(wait, 0)
                logger.warning(f"Rate limited, waiting {wait:.0f}s")
                self.sleep(wait)
                continue

            if response.status_code == 404 and allow_404:
                return None

            response.raise_for_status()
            return response.json()

        raise RateLimitExceeded(f"Rate limited on {url}")

    # Endpoints

    def get_rate_limit(self) -> dict:
        """Current quota per resource: {"core": {...}, "search": {...}}"""
        data = self._request('/rate_limit', paced=False)
        resources = data.get('resources', {})
        status = {}
        for name in ('core', 'search'):
            info = resources.get(name) or (data.get('rate') if name == 'core' else None) or {}
            status[name] = {
                'limit': info.get('limit', 0),
                'remaining': info.get('remaining', 0),
                'reset': info.get('reset', 0),
                'used': info.get('used', 0),
            }
            with self._lock:
                self.quota[name] = {'remaining': status[name]['remaining'], 'reset': status[name]['reset']}
        return status

    def search_repos(self, query: str, sort: Optional[str] = None, order: Optional[str] = None,
                     per_page: int = SEARCH_PER_PAGE, page: int = 1) -> dict:
        params = {'q': query, 'per_page': per_page, 'page': page}
        if sort:
            params['sort'] = sort
        if order:
            params['order'] = order
        return self._request('/search/repositories', params=params, resource='search')

    def search_code(self, query: str, per_page: int = SEARCH_PER_PAGE, page: int = 1) -> dict:
        params = {'q': query, 'per_page': per_page, 'page': page}
        return self._request('/search/code', params=params, resource='search')

    def get_repo(self, owner: str, repo: str) -> Optional[dict]:
        """Repository metadata, None if it no longer exists"""
        return self._request(f"/repos/{owner}/{repo}", allow_404=True)

    def get_content(self, owner: str, repo: str, path: str) -> Optional[str]:
        """Decoded file content, None if the path is missing or not a file"""
        data = self._request(f"/repos/{owner}/{repo}/contents/{quote(path)}", allow_404=True)
        if data is None:
            return None
        if isinstance(data, list) or data.get('type') != 'file' or not data.get('content'):
            logger.debug(f"{owner}/{repo}:{path} is not a file")
            return None
        return base64.b64decode(data['content']).decode('utf-8', errors='replace')

    def file_exists(self, owner: str, repo: str, path: str) -> bool:
        return self._request(f"/repos/{owner}/{repo}/contents/{quote(path)}", allow_404=True) is not None

    @staticmethod
    def skill_md_candidates(base_path: Optional[str] = None) -> list:
        """Paths to try for a skill definition, in priority order"""
        if base_path:
            base = base_path.strip('/')
            return [f"{base}/SKILL.md", f"{base}/skill.md"]
        return list(SKILL_MD_PATHS)

    def locate_skill_md(self, owner: str, repo: str, base_path: Optional[str] = None) -> Optional[str]:
        """Path of the first candidate that exists, None if there is none"""
        for path in self.skill_md_candidates(base_path):
            if self.file_exists(owner, repo, path):
                return path
        return None

    def find_skill_md(self, owner: str, repo: str, base_path: Optional[str] = None) -> Optional[tuple]:
        """
        Look for a skill definition at the known locations.

        Returns (path, content) for the first hit, None if there is none.
        With base_path only that directory is checked.
        """
        for path in self.skill_md_candidates(base_path):
            content = self.get_content(owner, repo, path)
            if content:
                return path, content
        return None

    def get_marketplace_json(self, owner: str, repo: str) -> Optional[dict]:
        content = self.get_content(owner, repo, MARKETPLACE_JSON_PATH)
        if not content:
            return None
        try:
            data = json.loads(content)
        except ValueError as e:
            logger.debug(f"Invalid marketplace.json in {owner}/{repo}: {e}")
            return None
        return data if isinstance(data, dict) else None
