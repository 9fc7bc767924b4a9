#!/usr/bin/env python3
"""
Regenerate index.json, by-category/*.json and stats.json from skills-full.json.
With --recategorize, also moves every skill onto the current category taxonomy.
"""

import os
import sys
import logging

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from skillhub.categories import recategorize
from skillhub.config import DATA_DIR
from skillhub.store import SkillStore

logger = logging.getLogger(__name__)


def main():
    import argparse

    parser = argparse.ArgumentParser(description='Rebuild derived skill index files')
    parser.add_argument('--data-dir', default=DATA_DIR, help='Data directory')
    parser.add_argument('--recategorize', action='store_true', help='Migrate categories to the current taxonomy')
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format='%(message)s')

    store = SkillStore(args.data_dir)
    skills = store.load_all(strict=True)
    logger.info(f"Loaded {len(skills)} skills")

    if args.recategorize:
        counts = recategorize(skills)
        for category, count in sorted(counts.items(), key=lambda x: -x[1]):
            logger.info(f"  {category}: {count}")
        store.save_all(skills)
    else:
        store.rebuild_derived(skills)


if __name__ == '__main__':
    main()
