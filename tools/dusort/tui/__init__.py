"""
TUI components for dusort.

Modules:
    - model: The Record type shared by every component
    - ranking: RankedSequence, the incrementally sorted record chain
    - reader: Line parsing and the producer thread
    - stream: StreamCoordinator, the locked insert-then-render consumer
    - views: Row layout, curses / plain renderers and the key loop

Architecture:
    The TUI uses a producer-consumer pattern:
    1. RecordReader parses piped lines in a background thread
    2. StreamCoordinator inserts each Record and renders under one lock
    3. The main thread waits for q / Esc
"""
