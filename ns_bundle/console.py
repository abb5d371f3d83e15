"""Terminal output helpers.

Plain print-based formatting for pipeline progress, kept separate so the
pipeline stages only decide what to say, not how it looks.
"""

from __future__ import annotations

from collections.abc import Mapping


def step(msg: str) -> None:
    """Print a visually distinct step header.

    Used to separate the stages of the bundle pipeline in terminal output.
    """
    print(f"\n{'─' * 60}\n{msg}\n{'─' * 60}")


def print_table(rows: Mapping[str, str]) -> None:
    """Print key/value pairs as an aligned two-column table."""
    if not rows:
        print("  <empty>")
        return
    width = max(len(key) for key in rows)
    for key, value in rows.items():
        print(f"  {key.ljust(width)}  {value}")
