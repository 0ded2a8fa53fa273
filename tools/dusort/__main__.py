"""
Entry point for running dusort as a Python module.

    du -sh /path/to/dir/* | python -m dusort
"""

from .cli import main

if __name__ == "__main__":
    main()
