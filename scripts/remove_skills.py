#!/usr/bin/env python3
"""
Remove skills by id and rebuild the derived files
"""

import os
import sys
import logging

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from skillhub.config import DATA_DIR
from skillhub.store import SkillStore

logger = logging.getLogger(__name__)


def main():
    import argparse

    parser = argparse.ArgumentParser(description='Delete skills from the catalog')
    parser.add_argument('ids', nargs='+', help='Skill ids to remove')
    parser.add_argument('--data-dir', default=DATA_DIR, help='Data directory')
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format='%(message)s')

    store = SkillStore(args.data_dir)
    before = len(store.load_all(strict=True))
    removed = store.delete(args.ids)
    logger.info(f"Before: {before} skills, after: {before - len(removed)} skills")


if __name__ == '__main__':
    main()
