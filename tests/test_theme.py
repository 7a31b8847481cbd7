"""
Tests for issue/task theme colour resolution.
"""

from gantt.models import Issue, Task
from gantt.theme import (
    ISSUE_THEME_PALETTE,
    _string_hash,
    pick_issue_theme_color,
    resolve_issue_theme_color,
    tint_theme_color,
    transparentize_theme_color,
)


class TestStringHash:
    def test_known_values(self):
        assert _string_hash("") == 0
        assert _string_hash("a") == 97
        assert _string_hash("ab") == 97 * 31 + 98

    def test_wraps_to_signed_32_bit(self):
        h = _string_hash("a fairly long issue identifier that overflows")
        assert -(2**31) <= h < 2**31


class TestPickColor:
    def test_blank_key_gets_first_colour(self):
        assert pick_issue_theme_color(None) == ISSUE_THEME_PALETTE[0]
        assert pick_issue_theme_color("   ") == ISSUE_THEME_PALETTE[0]

    def test_hash_selects_palette_entry(self):
        assert pick_issue_theme_color("a") == ISSUE_THEME_PALETTE[7]
        assert pick_issue_theme_color("ab") == ISSUE_THEME_PALETTE[5]

    def test_key_is_trimmed(self):
        assert pick_issue_theme_color("  a ") == pick_issue_theme_color("a")

    def test_stable_for_same_key(self):
        assert pick_issue_theme_color("issue-42") == pick_issue_theme_color("issue-42")


class TestResolveColor:
    def test_explicit_colour_wins(self):
        assert resolve_issue_theme_color(" #123456 ", "a") == "#123456"

    def test_blank_explicit_falls_back_to_hash(self):
        assert resolve_issue_theme_color("  ", "a") == ISSUE_THEME_PALETTE[7]

    def test_issue_theme_prefers_id(self):
        issue = Issue(id="a", project_id="p1", name="Design")
        assert issue.theme() == ISSUE_THEME_PALETTE[7]

    def test_issue_theme_falls_back_to_project_then_name(self):
        assert Issue(id=None, project_id="ab", name="x").theme() == ISSUE_THEME_PALETTE[5]
        assert Issue(id=None, project_id=None, name="a").theme() == ISSUE_THEME_PALETTE[7]

    def test_task_inherits_issue_colour(self):
        issue = Issue(id="i1", project_id="p1", name="Design", theme_color="#4ECDC4")
        task = Task(id="t1", project_id="p1", issue_id="i1", title="Wireframes")
        assert task.theme(issue) == "#4ECDC4"

    def test_task_colour_overrides_issue(self):
        issue = Issue(id="i1", project_id="p1", name="Design", theme_color="#4ECDC4")
        task = Task(id="t1", project_id="p1", issue_id="i1", title="x", theme_color="#FF0000")
        assert task.theme(issue) == "#FF0000"


class TestColourMixing:
    def test_tint_bounds(self):
        assert tint_theme_color("#FF6B6B", 0) == "#FF6B6B"
        assert tint_theme_color("#abc", 1) == "#FFFFFF"

    def test_tint_halfway(self):
        assert tint_theme_color("#000000", 0.5) == "#808080"

    def test_tint_ratio_clamped(self):
        assert tint_theme_color("#000000", 2) == "#FFFFFF"

    def test_non_hex_passthrough(self):
        assert tint_theme_color("tomato", 0.5) == "tomato"
        assert transparentize_theme_color("tomato", 0.5) == "tomato"

    def test_transparentize(self):
        assert transparentize_theme_color("#FF6B6B", 0.2) == "rgba(255, 107, 107, 0.2)"
        assert transparentize_theme_color("#fff", 1) == "rgba(255, 255, 255, 1)"
