"""Tests for azext_ideafy.ui.console — result cards and stream output."""

from unittest.mock import patch

import pytest
from rich.console import Console as RichConsole

from azext_ideafy.results.models import CanonicalResult, IdeaValidation, LegalAnalysis, SwotAnalysis
from azext_ideafy.results.normalizer import normalize_results
from azext_ideafy.stream.router import Envelope
from azext_ideafy.ui.console import THEME, Console, IdeaPrompt, _score_bar, format_content


@pytest.fixture
def recording_console():
    return Console(RichConsole(record=True, theme=THEME, width=120, color_system=None))


def _output(console: Console) -> str:
    return console.raw.export_text()


class TestFormatting:

    def test_format_content(self):
        assert format_content("text") == "text"
        assert format_content({"a": "ü"}) == '{"a": "ü"}'
        assert format_content(None) == "null"

    def test_score_bar(self):
        assert _score_bar(7.5, "idea").plain.endswith(" 7.5/10")
        assert _score_bar(15, "idea").plain.count("█") == 20
        assert _score_bar(-3, "idea").plain.count("█") == 0

    def test_score_bar_non_finite(self):
        bar = _score_bar(float("nan"), "idea").plain
        assert bar.count("█") == 0
        assert bar.endswith(" nan/10")

    def test_format_content_deep_nesting(self):
        value = "x"
        for _ in range(5000):
            value = [value]
        text = format_content(value)
        assert text == "x" or text.strip("[]") == '"x"'


class TestStreamOutput:

    def test_print_envelope_escapes_markup(self, recording_console):
        recording_console.print_envelope(Envelope("progress", "[bold]not markup[/bold]"))
        assert "[progress] [bold]not markup[/bold]" in _output(recording_console)

    def test_render_raw_stream(self, recording_console):
        recording_console.render_raw_stream([Envelope("progress", "one"), Envelope("answer", {"k": 1})])
        out = _output(recording_console)
        assert "Stream Output" in out
        assert "[progress] one" in out
        assert '[answer] {"k": 1}' in out

    def test_render_empty_raw_stream(self, recording_console):
        recording_console.render_raw_stream([])
        assert "no displayable output" in _output(recording_console)


class TestResultCards:

    def test_render_full_result(self, recording_console):
        result = CanonicalResult(
            idea_validation=IdeaValidation(market_score=8, competition_score=3, risks=["Churn"], summary="Solid"),
            legal_analysis=LegalAnalysis(legal_risks=["GDPR"], recommended_steps=["Hire counsel"], summary="Fine"),
            swot_analysis=SwotAnalysis(
                strengths=["Team"], threats=["Incumbents"], scenarios=["Fast growth"], summary="Even"
            ),
            overall_summary="Good market. Act fast.",
        )
        recording_console.render_result(result)
        out = _output(recording_console)

        for expected in (
            "Idea Validation", "8/10", "3/10", "Churn", "Solid",
            "Legal Analysis", "GDPR", "1. Hire counsel",
            "SWOT Analysis", "Strengths", "Weaknesses", "Team", "Incumbents", "Fast growth",
            "Overall Summary", "Good market.", "Act fast.",
        ):
            assert expected in out

    def test_absent_domains_not_rendered(self, recording_console):
        recording_console.render_result(CanonicalResult(legal_analysis=LegalAnalysis(summary="Only legal")))
        out = _output(recording_console)
        assert "Legal Analysis" in out
        assert "Idea Validation" not in out
        assert "SWOT Analysis" not in out
        assert "Overall Summary" not in out

    def test_nan_score_from_stream_renders(self, recording_console):
        result = normalize_results({"idea_validation": {"market_score": "NaN", "risks": ["Churn"]}})
        recording_console.render_result(result)
        out = _output(recording_console)
        assert "Churn" in out
        assert "/10" not in out

    def test_missing_scores_skipped(self, recording_console):
        recording_console.render_idea_validation(IdeaValidation(risks=["Timing"]))
        out = _output(recording_console)
        assert "/10" not in out
        assert "Timing" in out


class TestSpinner:

    def test_prints_completion_line(self, recording_console):
        with recording_console.spinner("Analysis"):
            pass
        assert "Analysis completed." in _output(recording_console)

    def test_no_completion_line_on_error(self, recording_console):
        with pytest.raises(KeyboardInterrupt):
            with recording_console.spinner("Analysis"):
                raise KeyboardInterrupt
        assert "completed" not in _output(recording_console)


class TestIdeaPrompt:

    @pytest.fixture
    def prompt(self, recording_console):
        with patch("azext_ideafy.ui.console.PromptSession") as session_cls:
            ui = IdeaPrompt(recording_console)
            ui._session = session_cls.return_value
            yield ui

    def test_ask_strips_answer(self, prompt):
        prompt._session.prompt.return_value = "  A bike-sharing app  \n"
        assert prompt.ask("Describe your idea") == "A bike-sharing app"

    def test_ask_returns_default_on_cancel(self, prompt):
        prompt._session.prompt.side_effect = KeyboardInterrupt
        assert prompt.ask("Describe your idea", default="fallback") == "fallback"

    def test_ask_mode_defaults_to_auto(self, prompt):
        prompt._session.prompt.return_value = ""
        assert prompt.ask_mode("Market trends") == "auto"

    def test_ask_mode_custom_notes(self, prompt):
        prompt._session.prompt.return_value = "Rival A\nRival B"
        assert prompt.ask_mode("Competitors") == "Rival A\nRival B"
