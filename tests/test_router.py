"""Tests for azext_ideafy.stream.router — envelope parsing and routing."""

import json

from azext_ideafy.stream.router import (
    RESERVED_STEPS,
    Envelope,
    EnvelopeRouter,
    parse_envelope,
)


class TestParseEnvelope:

    def test_valid_envelope(self):
        env = parse_envelope('{"step": "progress", "content": "Working"}')
        assert env == Envelope(step="progress", content="Working")

    def test_missing_content_is_none(self):
        assert parse_envelope('{"step": "progress"}') == Envelope("progress", None)

    def test_structured_content_kept(self):
        env = parse_envelope(json.dumps({"step": "idea_validation", "content": {"market_score": 7}}))
        assert env.content == {"market_score": 7}

    def test_rejects_blank(self):
        assert parse_envelope("") is None
        assert parse_envelope("   \t") is None

    def test_rejects_non_json(self):
        assert parse_envelope("not json") is None
        assert parse_envelope('{"step": "x", ') is None

    def test_rejects_non_objects(self):
        assert parse_envelope("[1, 2]") is None
        assert parse_envelope('"step"') is None
        assert parse_envelope("42") is None

    def test_rejects_missing_or_invalid_step(self):
        assert parse_envelope('{"content": "x"}') is None
        assert parse_envelope('{"step": 3, "content": "x"}') is None
        assert parse_envelope('{"step": "", "content": "x"}') is None

    def test_rejects_pathologically_nested_json(self):
        assert parse_envelope("[" * 100000) is None
        assert parse_envelope('{"step": "a", "content": ' + "[" * 100000) is None

    def test_to_dict(self):
        assert Envelope("a", [1]).to_dict() == {"step": "a", "content": [1]}


class TestEnvelopeRouter:

    def test_reserved_steps(self):
        assert RESERVED_STEPS == frozenset({"init", "http"})

    def test_reserved_step_filtering(self):
        router = EnvelopeRouter()
        router.route_lines([
            '{"step": "init", "content": "starting"}',
            '{"step": "http", "content": {"status": 200}}',
            '{"step": "idea_validation", "content": "x"}',
        ])
        assert router.log == [Envelope("idea_validation", "x")]
        assert router.accumulated == {"idea_validation": ["x"]}
        assert [e.step for e in router.transport_events] == ["init", "http"]

    def test_malformed_line_tolerance(self):
        router = EnvelopeRouter()
        accepted = router.route_lines(["not json", '{"step":"x","content":"y"}', ""])
        assert accepted == [Envelope("x", "y")]
        assert router.log == [Envelope("x", "y")]
        assert router.accumulated == {"x": ["y"]}

    def test_route_returns_visible_envelope_only(self):
        router = EnvelopeRouter()
        assert router.route('{"step": "init"}') is None
        assert router.route("garbage") is None
        assert router.route('{"step": "a", "content": 1}') == Envelope("a", 1)

    def test_accumulates_in_arrival_order(self):
        router = EnvelopeRouter()
        router.route_lines([
            '{"step": "progress", "content": "one"}',
            '{"step": "idea_validation", "content": {"market_score": 5}}',
            '{"step": "progress", "content": "two"}',
        ])
        assert router.accumulated["progress"] == ["one", "two"]
        assert [e.step for e in router.log] == ["progress", "idea_validation", "progress"]

    def test_null_content_accumulated(self):
        router = EnvelopeRouter()
        router.route('{"step": "done"}')
        assert router.accumulated == {"done": [None]}

    def test_deterministic_over_same_lines(self):
        lines = [
            '{"step": "http", "content": 200}',
            '{"step": "a", "content": [1, 2]}',
            "oops",
            '{"step": "b", "content": {"k": "v"}}',
            '{"step": "a", "content": null}',
        ]
        first, second = EnvelopeRouter(), EnvelopeRouter()
        first.route_lines(lines)
        second.route_lines(lines)
        assert first.log == second.log
        assert first.accumulated == second.accumulated

    def test_deeply_nested_line_dropped_without_raising(self):
        router = EnvelopeRouter()
        accepted = router.route_lines(["[" * 100000, '{"step": "a", "content": 1}'])
        assert accepted == [Envelope("a", 1)]
        assert router.accumulated == {"a": [1]}

    def test_permuted_lines_follow_new_order(self):
        lines = [
            '{"step": "a", "content": 1}',
            '{"step": "b", "content": "x"}',
            '{"step": "a", "content": 2}',
            '{"step": "init", "content": "start"}',
            '{"step": "a", "content": 3}',
        ]
        permuted = [lines[4], lines[3], lines[1], lines[2], lines[0]]

        original, reordered = EnvelopeRouter(), EnvelopeRouter()
        original.route_lines(lines)
        reordered.route_lines(permuted)

        assert [e.to_dict() for e in original.log] == [
            {"step": "a", "content": 1},
            {"step": "b", "content": "x"},
            {"step": "a", "content": 2},
            {"step": "a", "content": 3},
        ]
        assert [e.to_dict() for e in reordered.log] == [
            {"step": "a", "content": 3},
            {"step": "b", "content": "x"},
            {"step": "a", "content": 2},
            {"step": "a", "content": 1},
        ]
        assert original.accumulated == {"a": [1, 2, 3], "b": ["x"]}
        assert reordered.accumulated == {"a": [3, 2, 1], "b": ["x"]}

    def test_reset(self):
        router = EnvelopeRouter()
        router.route_lines(['{"step": "init"}', '{"step": "a", "content": 1}'])
        router.reset()
        assert router.log == []
        assert router.accumulated == {}
        assert router.transport_events == []
