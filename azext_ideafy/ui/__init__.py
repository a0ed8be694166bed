"""UI utilities for the az ideafy extension.

Provides Rich-based console output with:
- Live stream display and result cards
- Spinner while the analysis runs
- Multi-line prompts for the interactive wizard
"""

from azext_ideafy.ui.console import (
    Console,
    IdeaPrompt,
    console,
)

__all__ = [
    "Console",
    "console",
    "IdeaPrompt",
]
