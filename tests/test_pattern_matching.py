import pytest

from codebundle import pattern_matching as pm
from codebundle.models import Pattern, PatternError, PatternKind


class TestParsePatternWithFlags:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("foo:gi", ("foo", "gi")),
            ("foo", ("foo", "")),
            ("a:b:gim", ("a:b", "gim")),
            ("not:aflag", ("not:aflag", "")),
            ("https://example.com", ("https://example.com", "")),
        ],
    )
    def test_split(self, raw, expected):
        assert pm.parse_pattern_with_flags(raw) == expected

    def test_default_flags_used_when_no_suffix(self):
        assert pm.parse_pattern_with_flags("foo", "m") == ("foo", "m")
        assert pm.parse_pattern_with_flags("foo:i", "m") == ("foo", "i")


class TestRegexCompilation:
    def test_invalid_regex_returns_none(self):
        assert pm.compile_regex("[", "") is None
        assert pm.test_regex("x", "[", "") is False

    def test_invalid_regex_reported_as_pattern_error(self):
        result = pm.try_compile_regex("(unclosed")
        assert isinstance(result, PatternError)
        assert result.pattern == "(unclosed"
        assert result.message

    def test_duplicate_flags_are_an_error(self):
        assert isinstance(pm.try_compile_regex("abc:gg"), PatternError)

    def test_case_insensitive_flag(self):
        assert pm.test_regex("ABC", "abc:i") is True
        assert pm.test_regex("ABC", "abc") is False

    def test_multiline_flag(self):
        text = "first\nsecond"
        assert pm.test_regex(text, "^second$") is False
        assert pm.test_regex(text, "^second$:m") is True

    def test_dotall_flag(self):
        assert pm.test_regex("a\nb", "a.b") is False
        assert pm.test_regex("a\nb", "a.b:s") is True

    def test_sticky_flag_anchors_at_start(self):
        assert pm.test_regex("ba", "a:y") is False
        assert pm.test_regex("ab", "a:y") is True

    def test_colon_in_pattern_survives(self):
        assert pm.test_regex("see http://host/x", "http://host") is True


class TestFindAllMatches:
    def test_finds_every_match(self):
        matches = pm.find_all_matches("a1b22c333", r"\d+")
        assert [(m.match_text, m.index, m.length) for m in matches] == [
            ("1", 1, 1),
            ("22", 3, 2),
            ("333", 6, 3),
        ]

    def test_global_flag_is_forced(self):
        assert len(pm.find_all_matches("aAa", "a:i")) == 3
        assert len(pm.find_all_matches("aaa", "a", "")) == 3

    def test_zero_length_matches_terminate(self):
        matches = pm.find_all_matches("abc", "x*")
        assert [m.index for m in matches] == [0, 1, 2, 3]
        assert all(m.length == 0 for m in matches)

    def test_sticky_stops_at_first_gap(self):
        assert len(pm.find_all_matches("aab", "a:y")) == 2

    def test_invalid_pattern_yields_nothing(self):
        assert pm.find_all_matches("abc", "(") == []


class TestGlob:
    def test_anchored(self):
        assert pm.match_glob("ab", "a") is False
        assert pm.match_glob("ab", "a*") is True

    def test_double_star_crosses_separators(self):
        assert pm.match_glob("a/b/c.js", "a/**/*.js") is True
        assert pm.match_glob("a/b/c.js", "a/*.js") is False

    def test_double_star_slash_matches_zero_directories(self):
        assert pm.match_glob("a/c.js", "a/**/*.js") is True
        assert pm.match_glob("c.js", "**/*.js") is True

    def test_trailing_double_star(self):
        assert pm.match_glob("src/sub/b.ts", "**/sub/**") is True
        assert pm.match_glob("src/subway/b.ts", "**/sub/**") is False

    def test_question_mark_matches_one_character(self):
        assert pm.match_glob("a1.txt", "a?.txt") is True
        assert pm.match_glob("a12.txt", "a?.txt") is False

    def test_metacharacters_are_literal(self):
        assert pm.match_glob("axb", "a.b") is False
        assert pm.match_glob("a.b", "a.b") is True
        assert pm.match_glob("a+b(1)", "a+b(1)") is True
        assert pm.match_glob("pages/[id].tsx", "pages/[id].tsx") is True
        assert pm.match_glob("pages/i.tsx", "pages/[id].tsx") is False

    def test_match_any_glob(self):
        assert pm.match_any_glob("src/a.ts", ["**/*.js", "**/*.ts"]) is True
        assert pm.match_any_glob("src/a.md", ["**/*.js", "**/*.ts"]) is False


class TestPatternDispatch:
    def test_from_string_tags_kind(self):
        assert Pattern.from_string("*.ts", False).kind is PatternKind.GLOB
        assert Pattern.from_string(r"\.ts$", True).kind is PatternKind.REGEX

    def test_match_pattern_uses_kind(self):
        # "a.ts" as a glob is literal; as a regex it is unanchored
        glob = Pattern.from_string("a.ts", False)
        regex = Pattern.from_string("a.ts", True)
        assert pm.match_pattern("src/a.ts", glob) is False
        assert pm.match_pattern("src/a.ts", regex) is True

    def test_match_any_regex(self):
        assert pm.match_any_regex("src/a.ts", [r"\.js$", r"\.ts$"]) is True
        assert pm.match_any_regex("src/a.ts", ["[", r"\.md$"]) is False

    def test_to_patterns(self):
        patterns = pm.to_patterns(["a", "b"], True)
        assert [p.raw for p in patterns] == ["a", "b"]
        assert pm.match_any("xbx", patterns) is True
