"""
PeWalk Module Entry Point
==========================

Allows running the CLI via: python -m pewalk
"""

from pewalk.cli import main

if __name__ == "__main__":
    main()
