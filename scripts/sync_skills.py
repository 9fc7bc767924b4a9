#!/usr/bin/env python3
"""
Skill Sync Entry Point
Searches GitHub for SKILL.md repositories and merges them into data/
"""

import os
import sys

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from skillhub.sync import main


if __name__ == '__main__':
    main()
