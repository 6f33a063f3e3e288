#!/usr/bin/env python3
"""
Launch script for the Q-Learning navigation demo.
"""

import sys

from qnav.__main__ import main

if __name__ == "__main__":
    sys.exit(main())
