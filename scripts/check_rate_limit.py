#!/usr/bin/env python3
"""
Show GitHub API quota for the core and search resources
"""

import os
import sys
from datetime import datetime

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from skillhub.config import RATE_LIMIT_LOW_WATER
from skillhub.github_client import GitHubClient


def main():
    import argparse

    parser = argparse.ArgumentParser(description='Check GitHub API rate limit status')
    parser.add_argument('--token', help='GitHub API token (or set GITHUB_TOKEN env var)')
    args = parser.parse_args()

    client = GitHubClient(token=args.token)
    status = client.get_rate_limit()
    now = datetime.now()

    print("\nGitHub API Rate Limit Status\n")
    for name, label in (('core', 'Core API'), ('search', 'Search API')):
        info = status[name]
        reset = datetime.fromtimestamp(info['reset'])
        minutes = max(0, int((reset - now).total_seconds() // 60) + 1)
        print(f"{label}:")
        print(f"  Limit: {info['limit']}")
        print(f"  Used: {info['used']}")
        print(f"  Remaining: {info['remaining']}")
        print(f"  Reset: {reset:%Y-%m-%d %H:%M:%S} ({minutes} minutes)\n")

    search = status['search']
    if search['remaining'] == 0:
        print("Search API limit exhausted. Wait until reset time to continue.")
        sys.exit(1)
    elif search['remaining'] < RATE_LIMIT_LOW_WATER:
        print("Search API limit almost exhausted. Consider waiting.")
    else:
        print("Search API has available quota.")


if __name__ == '__main__':
    main()
