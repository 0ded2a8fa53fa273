"""
Utility modules for dusort.

Modules:
    - sizes: Human-readable size parsing
    - runlog: Append-only run log
    - terminal: Pipe detection and controlling-terminal hand-off
"""
