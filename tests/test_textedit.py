"""
Tests for the pure text helpers.
"""

import pytest

from devenv_bootstrap.lib.textedit import (
    ensure_directive,
    escape_nix_string,
    has_directive,
    substitute_placeholders,
)

FLAKES = "experimental-features = nix-command flakes"


class TestEnsureDirective:
    def test_appends_to_empty_content(self):
        assert ensure_directive("", FLAKES) == (FLAKES + "\n", True)

    def test_adds_missing_trailing_newline_first(self):
        new, changed = ensure_directive("max-jobs = 4", FLAKES)
        assert changed
        assert new == f"max-jobs = 4\n{FLAKES}\n"

    def test_existing_directive_is_left_alone(self):
        content = f"max-jobs = 4\n  {FLAKES}  \n"
        assert ensure_directive(content, FLAKES) == (content, False)

    def test_applying_twice_keeps_one_copy(self):
        once, _ = ensure_directive("max-jobs = 4\n", FLAKES)
        twice, changed = ensure_directive(once, FLAKES)
        assert not changed
        assert twice.count(FLAKES) == 1

    def test_partial_match_is_not_a_match(self):
        assert not has_directive("experimental-features = nix-command\n", FLAKES)


class TestSubstitutePlaceholders:
    def test_replaces_token(self):
        new, hits = substitute_placeholders('name = "Your Name";', {"Your Name": "Alice Example"})
        assert new == 'name = "Alice Example";'
        assert hits == {"Your Name": 1}

    def test_absent_token_is_a_no_op(self):
        content = 'name = "Alice Example";'
        assert substitute_placeholders(content, {"Your Name": "Bob"}) == (content, {"Your Name": 0})

    def test_empty_token_rejected(self):
        with pytest.raises(ValueError):
            substitute_placeholders("abc", {"": "x"})

    def test_counts_each_token(self):
        content = "Your Name <your.email@example.com>, Your Name"
        new, hits = substitute_placeholders(
            content, {"Your Name": "Alice", "your.email@example.com": "a@b.c"}
        )
        assert new == "Alice <a@b.c>, Alice"
        assert hits == {"Your Name": 2, "your.email@example.com": 1}

    def test_value_containing_another_token_is_kept(self):
        content = 'name = "Your Name"; email = "your.email@example.com";'
        new, _ = substitute_placeholders(
            content,
            {"Your Name": "your.email@example.com fan", "your.email@example.com": "alice@example.com"},
        )
        assert new == 'name = "your.email@example.com fan"; email = "alice@example.com";'


class TestEscapeNixString:
    def test_quotes_and_interpolation(self):
        assert escape_nix_string('a"b\\c${d}') == 'a\\"b\\\\c\\${d}'
        assert escape_nix_string("Alice Example") == "Alice Example"

    def test_backslash_is_doubled(self):
        assert escape_nix_string("C:\\path") == "C:\\\\path"
        assert escape_nix_string("\\") == "\\\\"

    def test_backslash_before_interpolation(self):
        # The backslash is escaped first, so it cannot cancel the ${ escape.
        assert escape_nix_string("\\${x}") == "\\\\\\${x}"
