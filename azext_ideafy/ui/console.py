"""Rich-based console utilities for styled CLI output.

Provides:
- Color scheme: dim gray for background, white for content, accent colors per domain
- Live display of stream envelopes while an analysis runs
- Result cards for idea validation, legal analysis, SWOT and the overall summary
- Raw stream fallback when nothing structured could be extracted
- Multi-line input for the interactive analysis wizard
"""

from __future__ import annotations

import json
import math
import time
from contextlib import contextmanager
from typing import Any, Iterator

from prompt_toolkit import PromptSession
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.styles import Style as PTStyle
from rich.columns import Columns
from rich.console import Console as RichConsole, Group
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table
from rich.text import Text
from rich.theme import Theme

from azext_ideafy.results.extraction import flatten_text, split_sentences

# -------------------------------------------------------------------- #
# Color scheme
# -------------------------------------------------------------------- #

THEME = Theme({
    # Background/secondary text
    "dim": "#888888",
    "muted": "#666666",

    # Primary content
    "content": "bright_white",

    # Callouts and highlights
    "success": "bright_green",
    "error": "bright_red",
    "warning": "bright_yellow",
    "info": "bright_cyan",
    "accent": "bright_magenta",

    "prompt.border": "#555555",
    "prompt.instruction": "bright_cyan",

    # Stream log
    "step": "bright_cyan bold",

    # Result cards, one accent per domain
    "idea": "bright_blue",
    "legal": "yellow",
    "swot": "magenta",
    "overall": "bright_green",
    "label": "#888888 bold",

    # SWOT quadrants and tags
    "strength": "bright_green",
    "weakness": "orange3",
    "opportunity": "bright_blue",
    "threat": "bright_red",
    "scenario": "magenta",
    "risk": "bright_red",
})

SCORE_MAX = 10
_BAR_WIDTH = 20

# prompt_toolkit style for the input area
PT_STYLE = PTStyle.from_dict({
    "prompt": "#888888",
    "": "#ffffff",
    "bottom-toolbar": "noreverse #888888",
})


def format_content(content: Any) -> str:
    """Render envelope content as a single display string."""
    if isinstance(content, str):
        return content
    try:
        return json.dumps(content, ensure_ascii=False, default=str)
    except RecursionError:
        return flatten_text(content)


def _format_score(score: float) -> str:
    return f"{score:g}"


def _score_bar(score: float, style: str) -> Text:
    """A horizontal gauge for a 0-10 score; out-of-range values are clamped for drawing only."""
    ratio = min(max(score / SCORE_MAX, 0.0), 1.0) if math.isfinite(score) else 0.0
    filled = round(ratio * _BAR_WIDTH)
    bar = Text()
    bar.append("█" * filled, style=style)
    bar.append("░" * (_BAR_WIDTH - filled), style="muted")
    bar.append(f" {_format_score(score)}/{SCORE_MAX}", style="content")
    return bar


def _section(label: str, body) -> Group:
    return Group(Text(label.upper(), style="label"), body, Text(""))


def _tag_list(items: list[str], style: str) -> Text:
    text = Text()
    for i, item in enumerate(items):
        if i:
            text.append("  ")
        text.append(f"◆ {item}", style=style)
    return text


def _bullets(items: list[str], style: str, numbered: bool = False) -> Text:
    text = Text()
    for i, item in enumerate(items, start=1):
        marker = f"{i}." if numbered else "◆"
        text.append(f"  {marker} ", style=style)
        text.append(item, style="content")
        if i < len(items):
            text.append("\n")
    return text


class Console:
    """Styled console output for analysis sessions.

    Provides:
    - Colored output with semantic styles
    - Spinner while waiting on the stream
    - Bordered cards for each analysis domain
    """

    def __init__(self, rich_console: RichConsole | None = None):
        self._console = rich_console or RichConsole(theme=THEME, highlight=False)

    # ------------------------------------------------------------------ #
    # Basic output
    # ------------------------------------------------------------------ #

    def print(self, message: str = "", style: str | None = None, **kwargs):
        """Print a message with optional styling."""
        self._console.print(message, style=style, **kwargs)

    def print_dim(self, message: str):
        self._console.print(message, style="dim")

    def print_success(self, message: str):
        self._console.print(f"[success]✓[/success] {message}")

    def print_error(self, message: str):
        self._console.print(f"[error]✗[/error] {message}")

    def print_warning(self, message: str):
        self._console.print(f"[warning]![/warning] {message}")

    def print_info(self, message: str):
        self._console.print(f"[info]→[/info] {message}")

    def print_header(self, title: str):
        """Print a section header."""
        self._console.print()
        self._console.print(f"[accent bold]{title}[/accent bold]")
        self._console.print()

    # ------------------------------------------------------------------ #
    # Progress indicators
    # ------------------------------------------------------------------ #

    @contextmanager
    def spinner(self, message: str) -> Iterator[None]:
        """Show a spinner while an operation is in progress.

        On completion, prints a persistent line with elapsed time.

        Usage:
            with console.spinner("Analyzing idea..."):
                outcome = session.run()
        """
        start = time.monotonic()
        progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            TimeElapsedColumn(),
            console=self._console,
            transient=True,
        )
        with progress:
            progress.add_task(message, total=None)
            yield
        elapsed = time.monotonic() - start
        h, rem = divmod(int(elapsed), 3600)
        m, s = divmod(rem, 60)
        self._console.print(
            f"[success]✓[/success] {message} completed. ({h}:{m:02d}:{s:02d})"
        )

    # ------------------------------------------------------------------ #
    # Stream output
    # ------------------------------------------------------------------ #

    def print_envelope(self, envelope):
        """Print one stream envelope as it arrives."""
        self._console.print(
            f"[step]\\[{escape(envelope.step)}][/step] [dim]{escape(format_content(envelope.content))}[/dim]"
        )

    def render_raw_stream(self, envelopes: list):
        """Fallback card: the step/content log, in arrival order."""
        if not envelopes:
            self.print_warning("The analysis stream carried no displayable output.")
            return
        lines = Text()
        for i, envelope in enumerate(envelopes):
            if i:
                lines.append("\n")
            lines.append(f"[{envelope.step}] ", style="step")
            lines.append(format_content(envelope.content), style="content")
        self._card(lines, "Stream Output", "accent")

    # ------------------------------------------------------------------ #
    # Result cards
    # ------------------------------------------------------------------ #

    def render_result(self, result):
        """Render every present domain, then the overall summary."""
        if result.idea_validation is not None:
            self.render_idea_validation(result.idea_validation)
        if result.legal_analysis is not None:
            self.render_legal_analysis(result.legal_analysis)
        if result.swot_analysis is not None:
            self.render_swot_analysis(result.swot_analysis)
        if result.overall_summary:
            self.render_overall_summary(result.overall_summary)

    def render_idea_validation(self, record):
        parts = []
        scores = Table.grid(padding=(0, 2))
        if record.market_score is not None:
            scores.add_row(Text("Market", style="dim"), _score_bar(record.market_score, "idea"))
        if record.competition_score is not None:
            scores.add_row(Text("Competition", style="dim"), _score_bar(record.competition_score, "info"))
        if scores.row_count:
            parts.append(_section("Scores", scores))
        if record.risks:
            parts.append(_section("Key Risks", _tag_list(record.risks, "risk")))
        if record.summary:
            parts.append(_section("Summary", Text(record.summary, style="content")))
        self._card(Group(*parts), "Idea Validation", "idea")

    def render_legal_analysis(self, record):
        parts = []
        if record.legal_risks:
            parts.append(_section("Legal Risks", _bullets(record.legal_risks, "warning")))
        if record.recommended_steps:
            parts.append(_section("Recommended Steps", _bullets(record.recommended_steps, "legal", numbered=True)))
        if record.summary:
            parts.append(_section("Summary", Text(record.summary, style="content")))
        self._card(Group(*parts), "Legal Analysis", "legal")

    def render_swot_analysis(self, record):
        quadrants = [
            ("Strengths", record.strengths, "strength"),
            ("Weaknesses", record.weaknesses, "weakness"),
            ("Opportunities", record.opportunities, "opportunity"),
            ("Threats", record.threats, "threat"),
        ]
        grid = Table.grid(padding=(0, 1), expand=True)
        grid.add_column(ratio=1)
        grid.add_column(ratio=1)
        cells = [
            Panel(
                _bullets(items, style) if items else Text("-", style="muted"),
                title=f"[{style}]{label}[/{style}]",
                title_align="left",
                border_style="prompt.border",
            )
            for label, items, style in quadrants
        ]
        grid.add_row(cells[0], cells[1])
        grid.add_row(cells[2], cells[3])

        parts = [grid, Text("")]
        if record.scenarios:
            parts.append(_section("Scenarios", _tag_list(record.scenarios, "scenario")))
        if record.summary:
            parts.append(_section("Summary", Text(record.summary, style="content")))
        self._card(Group(*parts), "SWOT Analysis", "swot")

    def render_overall_summary(self, text: str):
        sentences = split_sentences(text)
        boxes = [
            Panel(Text(sentence, style="content"), border_style="prompt.border", width=36)
            for sentence in sentences
        ]
        self._card(Columns(boxes, equal=True), "Overall Summary", "overall")

    def _card(self, body, title: str, accent: str):
        self._console.print(Panel(
            body,
            title=f"[{accent} bold]{title}[/{accent} bold]",
            title_align="left",
            border_style=accent,
            padding=(1, 2),
        ))

    # ------------------------------------------------------------------ #
    # Raw console access
    # ------------------------------------------------------------------ #

    @property
    def raw(self) -> RichConsole:
        """Access the underlying Rich console for advanced usage."""
        return self._console


def _create_multiline_keybindings() -> KeyBindings:
    """Create key bindings for multi-line input.

    Methods to insert a newline without submitting:
    - Backslash (\\) at end of line, then Enter
    - Escape then Enter

    Enter alone submits the input.
    """
    kb = KeyBindings()

    @kb.add("enter")
    def handle_enter(event):
        """Submit on Enter, unless line ends with backslash."""
        buffer = event.app.current_buffer
        text = buffer.text

        if text.rstrip().endswith("\\"):
            stripped = text.rstrip()
            chars_to_delete = len(text) - len(stripped) + 1  # +1 for the backslash
            buffer.delete_before_cursor(count=chars_to_delete)
            buffer.insert_text("\n")
        else:
            buffer.validate_and_handle()

    @kb.add("escape", "enter")
    def insert_newline_escape(event):
        """Insert a newline without submitting."""
        event.app.current_buffer.insert_text("\n")

    return kb


class IdeaPrompt:
    """Interactive prompts for the analysis wizard.

    Steps mirror the analysis request: describe the idea, optionally
    attach a PDF, then choose how market trends and competitors are
    researched (``auto`` or your own notes).
    """

    def __init__(self, console: Console | None = None):
        self._console = console or Console()
        self._rc = self._console.raw
        self._session = PromptSession(
            key_bindings=_create_multiline_keybindings(),
            style=PT_STYLE,
            multiline=True,
            prompt_continuation=lambda width, line_num, wrap_count: "  ",
        )

    def ask(self, instruction: str, prompt_text: str = "> ", default: str = "") -> str:
        """Show a bordered instruction and return the stripped answer.

        Returns *default* when the user enters nothing, cancels with
        Ctrl+C or closes input.
        """
        width = self._rc.size.width or 80
        self._rc.print(f"[prompt.border]{'─' * width}[/prompt.border]", highlight=False)
        self._rc.print(f"[prompt.instruction]{instruction}[/prompt.instruction]", highlight=False)
        try:
            answer = self._session.prompt(prompt_text)
        except (EOFError, KeyboardInterrupt):
            self._rc.print()
            return default
        return answer.strip() or default

    def ask_mode(self, topic: str) -> str:
        """Ask whether *topic* research is automatic; return ``auto`` or the notes."""
        return self.ask(
            f"{topic}: press Enter for automatic research, or type your own notes "
            "(Esc+Enter or a trailing \\ for a new line).",
            default="auto",
        )


# -------------------------------------------------------------------- #
# Module-level singleton
# -------------------------------------------------------------------- #

console = Console()
