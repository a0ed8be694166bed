"""Tests for azext_ideafy.results.extraction — key=value field extraction."""

from azext_ideafy.results.extraction import (
    count_occurrences,
    extract_list,
    extract_number,
    extract_text,
    flatten_text,
    split_sentences,
)


class TestFlattenText:

    def test_string_passthrough(self):
        assert flatten_text("abc") == "abc"

    def test_none(self):
        assert flatten_text(None) == ""

    def test_nested(self):
        assert flatten_text(["a", ["b", None], {"k": "c"}, ""]) == "a b c"

    def test_scalar(self):
        assert flatten_text(7) == "7"

    def test_deep_nesting(self):
        value = "x"
        for _ in range(5000):
            value = [value]
        assert flatten_text(value) == "x"

    def test_order_preserved(self):
        assert flatten_text([["a", "b"], {"k": ["c", {"j": "d"}]}, "e"]) == "a b c d e"


class TestExtractList:

    def test_single_quoted_items(self):
        assert extract_list("risks=['saturation', 'timing']", "risks") == ["saturation", "timing"]

    def test_double_quoted_items(self):
        assert extract_list('threats=["Copycats", "Regulation"]', "threats") == ["Copycats", "Regulation"]

    def test_apostrophe_inside_item(self):
        text = """strengths=["founder's network", 'low cost']"""
        assert extract_list(text, "strengths") == ["founder's network", "low cost"]

    def test_comma_inside_quoted_item(self):
        assert extract_list("scenarios=['slow, then fast', 'flat']", "scenarios") == ["slow, then fast", "flat"]

    def test_unquoted_items(self):
        assert extract_list("recommended_steps=[ incorporate , trademark ]", "recommended_steps") == [
            "incorporate",
            "trademark",
        ]

    def test_empty_list(self):
        assert extract_list("weaknesses=[] threats=['x']", "weaknesses") == []

    def test_empty_items_dropped(self):
        assert extract_list("risks=[, 'a', '']", "risks") == ["a"]

    def test_missing_key(self):
        assert extract_list("summary='nothing here'", "risks") == []

    def test_word_boundary(self):
        text = "legal_risks=['GDPR'] risks=['timing']"
        assert extract_list(text, "risks") == ["timing"]
        assert extract_list(text, "legal_risks") == ["GDPR"]

    def test_first_occurrence_wins(self):
        assert extract_list("risks=['a'] risks=['b']", "risks") == ["a"]

    def test_whitespace_around_equals(self):
        assert extract_list("risks = ['a']", "risks") == ["a"]

    def test_unbalanced_quotes_fall_back_to_bracket(self):
        assert extract_list("risks=['a, b] summary='x'", "risks") == ["a", "b"]

    def test_unclosed_list(self):
        assert extract_list("risks=['a'", "risks") == []


class TestExtractNumber:

    def test_float(self):
        assert extract_number("market_score=7.5 competition_score=3.0", "market_score") == 7.5
        assert extract_number("market_score=7.5 competition_score=3.0", "competition_score") == 3.0

    def test_integer_and_sign(self):
        assert extract_number("market_score = -2", "market_score") == -2.0

    def test_exponent(self):
        assert extract_number("market_score=1e1", "market_score") == 10.0

    def test_not_a_number(self):
        assert extract_number("market_score='high'", "market_score") is None

    def test_missing(self):
        assert extract_number("competition_score=3", "market_score") is None

    def test_overflow_is_not_a_score(self):
        assert extract_number("market_score=1e999", "market_score") is None
        assert extract_number("market_score=-1e999", "market_score") is None


class TestExtractText:

    def test_single_quotes(self):
        assert extract_text("summary='Promising idea'", "summary") == "Promising idea"

    def test_double_quotes(self):
        assert extract_text('summary="It\'s promising"', "summary") == "It's promising"

    def test_escaped_quote(self):
        assert extract_text(r"summary='it\'s fine'", "summary") == "it's fine"

    def test_escaped_newline(self):
        assert extract_text(r"summary='line one\nline two'", "summary") == "line one\nline two"

    def test_occurrence(self):
        text = "summary='first' x=1 summary='second' summary='third'"
        assert extract_text(text, "summary", 0) == "first"
        assert extract_text(text, "summary", 1) == "second"
        assert extract_text(text, "summary", 2) == "third"
        assert extract_text(text, "summary", 3) == ""

    def test_not_inside_longer_key(self):
        text = "overall_summary='Overall' summary='Own'"
        assert extract_text(text, "summary") == "Own"
        assert extract_text(text, "overall_summary") == "Overall"

    def test_missing(self):
        assert extract_text("market_score=3", "summary") == ""

    def test_count_occurrences(self):
        assert count_occurrences("summary='a' overall_summary='b' summary=\"c\"", "summary") == 2


class TestSplitSentences:

    def test_split(self):
        assert split_sentences("First one. Second! Third?") == ["First one.", "Second!", "Third?"]

    def test_trailing_text_without_punctuation(self):
        assert split_sentences("Done. And more") == ["Done.", "And more"]

    def test_no_punctuation(self):
        assert split_sentences("just one thought") == ["just one thought"]

    def test_empty(self):
        assert split_sentences("") == []
        assert split_sentences("   ") == []
