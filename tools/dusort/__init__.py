"""
dusort - live ranked viewer for `du` output.

Reads "size<TAB>label" lines from a pipe, keeps them sorted by size as they
arrive, and redraws the ranking in the terminal after every line.

Package Structure:
    - cli.py: Command-line entry point
    - tui/: Record model, ranked sequence, reader, coordinator and views
    - utils/: Size parsing, run logging and terminal plumbing

Usage:
    du -sh /path/to/dir/* | python -m dusort
"""

__version__ = "0.1.0"
