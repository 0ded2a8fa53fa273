"""
Data models for the ranked size viewer.

Purpose:
    Every line read from the upstream pipeline becomes one Record. The
    reader builds them, the ranked sequence orders them and the views
    render them, so they share this single definition.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Record:
    """
    One size + label entry to be ranked and displayed.

    Attributes:
        label: Display name (usually a path). Opaque to ordering.
        display_size: The size exactly as it appeared in the input, kept
                      verbatim so the listing never shows reformatted
                      or rounded numbers.
        magnitude: Size in bytes; the sole sort key.
    """
    label: str
    display_size: str
    magnitude: float

    def display(self) -> str:
        """Return the listing line: original size, a tab, then the label."""
        return f"{self.display_size}\t{self.label}"
