#!/usr/bin/env python3
"""
DODGESCAPE Launcher
====================
Run this script to start the game.
"""

from dodgescape.main import main

if __name__ == "__main__":
    main()
