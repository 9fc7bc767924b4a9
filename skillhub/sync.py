"""
Skill sync pipeline
Discover -> fetch -> normalize -> merge with the existing catalog -> persist
"""

import time
import logging
from typing import Callable, Iterable, Optional

import requests

from .config import DATA_DIR, FETCH_BATCH_SIZE, MAX_RESULTS_PER_SOURCE, VERIFY_BATCH_SIZE
from .github_client import GitHubClient, RateLimitExceeded
from .github_crawler import SkillsCrawler
from .parallel import bounded_map
from .store import SkillStore
from .utils import utc_now_iso

logger = logging.getLogger(__name__)


class SkillSync:
    """
    One sync run.

    The persisted catalog is always the previous catalog with this run's
    records upserted on top, so a run that finds nothing (or is cut short by
    the rate limit) never shrinks it. full=True skips loading the previous
    catalog, which makes the run a clean rebuild.
    """

    def __init__(self, client: Optional[GitHubClient] = None, store: Optional[SkillStore] = None,
                 sources: Optional[Iterable] = None, full: bool = False,
                 batch_size: int = FETCH_BATCH_SIZE, max_per_source: int = MAX_RESULTS_PER_SOURCE,
                 max_skills: Optional[int] = None, check_marketplace: bool = True,
                 verify: bool = True, verify_batch_size: int = VERIFY_BATCH_SIZE,
                 on_progress: Optional[Callable[[str], None]] = None):
        self.client = client or GitHubClient()
        self.store = store or SkillStore()
        self.crawler = SkillsCrawler(self.client)
        self.sources = list(sources) if sources is not None else None
        self.full = full
        self.batch_size = batch_size
        self.max_per_source = max_per_source
        self.max_skills = max_skills
        self.check_marketplace = check_marketplace
        self.verify = verify
        self.verify_batch_size = verify_batch_size
        self.on_progress = on_progress

    def _log(self, message: str):
        logger.info(message)
        if self.on_progress:
            self.on_progress(message)

    def _check_rate_limit(self):
        try:
            status = self.client.get_rate_limit()
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"Could not read rate limit status: {e}")
            return
        core, search = status['core'], status['search']
        self._log(f"Rate limit: core {core['remaining']}/{core['limit']}, "
                  f"search {search['remaining']}/{search['limit']}")

    def _load_existing(self) -> dict:
        if self.full:
            return {}
        try:
            existing = self.store.load_all(strict=True)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not load existing skills, performing full sync: {e}")
            return {}
        self._log(f"Loaded {len(existing)} existing skills")
        return existing

    def run(self) -> dict:
        start = time.time()
        synced_at = utc_now_iso()
        stats = {
            'newSkills': 0,
            'updatedSkills': 0,
            'unchangedSkills': 0,
            'skipped': 0,
            'errors': 0,
        }
        rate_limited = False

        self._log("Starting skill sync...")
        try:
            self._check_rate_limit()
        except RateLimitExceeded as e:
            logger.error(f"Rate limit exhausted before starting: {e}")
            rate_limited = True

        existing = self._load_existing()
        fetched = {}

        if not rate_limited:
            self._log("Searching GitHub for skills...")
            targets = self.crawler.discover(self.sources, max_per_source=self.max_per_source)
            rate_limited = self.crawler.rate_limited
            if self.max_skills is not None:
                targets = targets[:self.max_skills]
            self._log(f"Found {len(targets)} candidate targets")

            if self.verify and targets:
                self._log("Verifying SKILL.md locations...")
                valid = self.crawler.filter_valid(targets, batch_size=self.verify_batch_size)
                stats['skipped'] += len(targets) - len(valid)
                rate_limited = rate_limited or self.crawler.rate_limited
                targets = valid

            def fetch(target):
                return self.crawler.fetch_skill(target, check_marketplace=self.check_marketplace,
                                                synced_at=synced_at)

            results = bounded_map(
                fetch,
                targets,
                batch_size=self.batch_size,
                stop_when=lambda r: isinstance(r.error, RateLimitExceeded),
                on_batch=lambda done, total: self._log(f"Processed {done}/{total}"),
            )

            for result in results:
                target = result.item
                if not result.ok:
                    if isinstance(result.error, RateLimitExceeded):
                        rate_limited = True
                    stats['errors'] += 1
                    logger.error(f"Error processing {target['fullName']}: {result.error}")
                    continue

                skill = result.value
                if skill is None:
                    stats['skipped'] += 1
                    continue

                previous = fetched.get(skill['id']) or existing.get(skill['id'])
                if previous is None:
                    stats['newSkills'] += 1
                    logger.info(f"  New skill: {skill['name']}")
                elif previous['metadata'].get('updatedAt') != skill['metadata']['updatedAt']:
                    stats['updatedSkills'] += 1
                    logger.info(f"  Updated: {skill['name']}")
                else:
                    stats['unchangedSkills'] += 1
                fetched[skill['id']] = skill

        if rate_limited:
            logger.warning("Rate limit reached, saving partial results")

        merged = dict(existing)
        merged.update(fetched)

        self._log("Saving data...")
        self.store.save_all(merged, last_sync=synced_at)

        duration = time.time() - start
        result = {
            'success': True,
            'totalSkills': len(merged),
            'fetchedSkills': len(fetched),
            'rateLimited': rate_limited,
            'duration': duration,
            **stats,
        }
        self._log(f"Sync completed in {duration:.2f}s")
        self._log(f"  Total: {result['totalSkills']}")
        self._log(f"  New: {stats['newSkills']}")
        self._log(f"  Updated: {stats['updatedSkills']}")
        self._log(f"  Errors: {stats['errors']}")
        return result


def sync_skills(**options) -> dict:
    """Run one sync with the given SkillSync options"""
    return SkillSync(**options).run()


def main():
    """Main entry point"""
    import argparse

    from .sources import PathListSource, RecentlyPushedSource, RepoListSource, default_sources

    parser = argparse.ArgumentParser(description='Sync agent skills from GitHub')
    parser.add_argument('--token', help='GitHub API token (or set GITHUB_TOKEN env var)')
    parser.add_argument('--data-dir', default=DATA_DIR, help='Data directory')
    parser.add_argument('--full', action='store_true', help='Rebuild from scratch instead of merging')
    parser.add_argument('--max', type=int, default=None, help='Maximum targets to fetch')
    parser.add_argument('--max-per-query', type=int, default=MAX_RESULTS_PER_SOURCE,
                        help='Maximum results per search query')
    parser.add_argument('--batch-size', type=int, default=FETCH_BATCH_SIZE, help='Repositories fetched per wave')
    parser.add_argument('--repo', action='append', default=[], help='Only sync these owner/repo names')
    parser.add_argument('--monorepo', help='owner/repo holding several skills (use with --path)')
    parser.add_argument('--path', action='append', default=[], help='Skill directory inside --monorepo')
    parser.add_argument('--since', help='Only search repos pushed after YYYY-MM-DD')
    parser.add_argument('--no-marketplace', action='store_true', help='Skip marketplace.json lookups')
    parser.add_argument('--no-verify', action='store_true', help='Fetch without a separate verification wave')

    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')

    sources = []
    try:
        if args.repo:
            sources.append(RepoListSource(args.repo))
        if args.monorepo:
            sources.append(PathListSource(args.monorepo, args.path))
    except ValueError as e:
        parser.error(str(e))
    if args.since:
        sources.append(RecentlyPushedSource(args.since))
    if not sources:
        sources = default_sources()

    result = sync_skills(
        client=GitHubClient(token=args.token),
        store=SkillStore(args.data_dir),
        sources=sources,
        full=args.full,
        batch_size=args.batch_size,
        max_per_source=args.max_per_query,
        max_skills=args.max,
        check_marketplace=not args.no_marketplace,
        verify=not args.no_verify,
    )

    print("\nSync Summary:")
    for key in ('totalSkills', 'newSkills', 'updatedSkills', 'unchangedSkills', 'skipped', 'errors'):
        print(f"  {key}: {result[key]}")
    if result['rateLimited']:
        print("  (stopped early: rate limit)")


if __name__ == '__main__':
    main()
