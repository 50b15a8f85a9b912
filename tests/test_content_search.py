import pytest

from codebundle.content_search import (
    SearchOptions,
    add_context_lines,
    count_matches,
    format_results,
    matches_content,
    search,
    search_as_dicts,
    search_for_matching_files,
    search_in_file,
    search_in_files,
)
from codebundle.models import CollectedFile


def make_file(path, content):
    return CollectedFile(
        file_path=path,
        relative_path=path,
        content=content,
        file_size=len(content.encode("utf-8")),
        line_count=len(content.split("\n")),
    )


@pytest.fixture
def files():
    return [
        make_file("a.py", "import os\nfoo = 1\nprint(foo)"),
        make_file("b.py", "nothing to see"),
        make_file("c.py", "Foo bar\nfoobar foo"),
    ]


class TestMatchesContent:
    def test_empty_pattern_matches_everything(self):
        assert matches_content("", "", False) is True
        assert matches_content("abc", "", True) is True

    def test_plain_substring(self):
        assert matches_content("x TODO y", "TODO", False) is True
        assert matches_content("x todo y", "TODO", False) is False

    def test_plain_pattern_is_not_a_regex(self):
        assert matches_content("a.b", "a.b", False) is True
        assert matches_content("axb", "a.b", False) is False

    def test_regex_is_multiline_by_default(self):
        assert matches_content("x\ndef f(): pass", "^def ", True) is True

    def test_regex_flags_suffix_overrides_defaults(self):
        assert matches_content("x\ndef f(): pass", "^def :g", True) is False
        assert matches_content("DEF", "def:i", True) is True

    def test_invalid_regex_does_not_match(self):
        assert matches_content("anything", "[", True) is False


class TestSearchInFile:
    def test_case_insensitive_by_default(self, files):
        result = search_in_file(files[2], SearchOptions("foo"))

        assert [(m.line, m.match_index, m.match_length) for m in result.matches] == [
            (1, 0, 3),
            (2, 0, 3),
            (2, 7, 3),
        ]

    def test_case_sensitive(self, files):
        result = search_in_file(files[2], SearchOptions("Foo", case_sensitive=True))
        assert result.match_count == 1

    def test_whole_word(self, files):
        result = search_in_file(files[2], SearchOptions("foo", whole_word=True))
        assert [(m.line, m.match_index) for m in result.matches] == [(1, 0), (2, 7)]

    def test_plain_pattern_escapes_metacharacters(self):
        file = make_file("x.txt", "a+b aab")
        assert search_in_file(file, SearchOptions("a+b")).match_count == 1

    def test_regex_pattern(self):
        file = make_file("x.txt", "a1 b22\nc333")
        result = search_in_file(file, SearchOptions(r"\d+", is_regex=True))
        assert [m.content for m in result.matches] == ["a1 b22", "a1 b22", "c333"]
        assert [m.match_length for m in result.matches] == [1, 2, 3]

    def test_invalid_regex_gives_empty_result(self, files):
        assert search_in_file(files[0], SearchOptions("(", is_regex=True)).matches == []


class TestSearchInFiles:
    def test_drops_files_without_matches(self, files):
        results = search_in_files(files, SearchOptions("foo"))
        assert [r.file.file_path for r in results] == ["a.py", "c.py"]

    def test_max_results_limits_files(self, files):
        results = search_in_files(files, SearchOptions("foo", max_results=1))
        assert [r.file.file_path for r in results] == ["a.py"]

    def test_matching_files_and_count(self, files):
        options = SearchOptions("foo")
        assert search_for_matching_files(files, options) == ["a.py", "c.py"]
        assert count_matches(files, options) == 5


class TestContextLines:
    def test_context_is_clamped_to_file(self):
        file = make_file("x.txt", "l1\nhit\nl3\nl4\nl5")
        [result] = search_in_files([file], SearchOptions("hit"))

        [match] = add_context_lines(result, 2).matches

        assert match.context_start_line == 1
        assert match.context_end_line == 4
        assert match.before_context == "l1"
        assert match.after_context == "l3\nl4"
        assert match.context_content == "l1\nhit\nl3\nl4"

    def test_zero_context_returns_result_unchanged(self, files):
        [result, _] = search_in_files(files, SearchOptions("foo"))
        assert add_context_lines(result, 0) is result

    def test_original_matches_are_not_mutated(self):
        file = make_file("x.txt", "a\nhit\nb")
        [result] = search_in_files([file], SearchOptions("hit"))
        add_context_lines(result, 1)
        assert result.matches[0].context_content is None


class TestFormatting:
    def test_caret_under_match(self):
        file = make_file("x.txt", "say foo")
        output = format_results(search_in_files([file], SearchOptions("foo")))

        assert "File: x.txt (1 matches)" in output
        assert "Line 1: say foo\n" + " " * 12 + "^^^\n" in output

    def test_highlight_with_context(self):
        file = make_file("x.txt", "before\nsay foo\nafter")
        output = search([file], SearchOptions("foo", context_lines=1))

        assert "Lines 1-3:" in output
        assert "say >>>foo<<<\n" in output
        assert "before\n" in output
        assert "after\n" in output

    def test_no_highlight(self):
        file = make_file("x.txt", "say foo")
        output = search([file], SearchOptions("foo"), show_file_path=False, highlight_matches=False)
        assert output == "Line 1: say foo\n\n"

    def test_dicts_are_camel_case(self, files):
        [first, _] = search_as_dicts(files, SearchOptions("foo", context_lines=1))

        assert first["filePath"] == "a.py"
        assert first["matchCount"] == 2
        assert first["matches"][0]["line"] == 2
        assert first["matches"][0]["contextStartLine"] == 1
        assert first["matches"][0]["contextContent"] == "import os\nfoo = 1\nprint(foo)"
