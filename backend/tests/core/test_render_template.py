"""Tests for render_template — {placeholder} substitution, no IO."""

from nudge.core.render_template import render_template


def test_substitutes_known_keys():
    text = render_template("Queue {match_name} ({queue_id})", {"match_name": "Ranked", "queue_id": "q1"})
    assert text == "Queue Ranked (q1)"


def test_missing_key_is_left_verbatim():
    assert render_template("Keep {role_name}?", {}) == "Keep {role_name}?"


def test_none_value_is_left_verbatim():
    assert render_template("Keep {role_name}?", {"role_name": None}) == "Keep {role_name}?"


def test_non_string_values_are_stringified():
    assert render_template("{days} days left", {"days": 3}) == "3 days left"


def test_keys_match_exactly():
    # whitespace inside braces is part of the key
    assert render_template("{ name }", {"name": "x"}) == "{ name }"


def test_repeated_placeholder_substituted_everywhere():
    assert render_template("{a}-{a}", {"a": "z"}) == "z-z"


def test_template_without_placeholders_unchanged():
    assert render_template("plain text", {"a": 1}) == "plain text"
