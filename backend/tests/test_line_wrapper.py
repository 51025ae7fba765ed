import pytest

from services.line_wrapper import wrap_lines


def test_short_text_is_one_line():
    assert wrap_lines("생일 축하해", 9, 6) == ["생일 축하해"]


def test_explicit_newlines_split_before_wrapping():
    assert wrap_lines("첫째 줄\n둘째 줄", 9, 6) == ["첫째 줄", "둘째 줄"]
    assert wrap_lines("a\n\nb", 9, 6) == ["a", "", "b"]


def test_greedy_word_wrap():
    assert wrap_lines("aaa bbb ccc ddd", 7, 6) == ["aaa bbb", "ccc ddd"]
    assert wrap_lines("aaa bbb ccc ddd", 8, 6) == ["aaa bbb", "ccc ddd"]
    assert wrap_lines("aa bb cc dd ee", 5, 6) == ["aa bb", "cc dd", "ee"]


def test_each_segment_wraps_independently():
    text = "one two three\nfour five six"
    assert wrap_lines(text, 8, 6) == ["one two", "three", "four", "five six"]


def test_long_word_passes_through_unsplit():
    assert wrap_lines("short abcdefghijklmnop end", 6, 6) == ["short", "abcdefghijklmnop", "end"]
    assert wrap_lines("abcdefghijklmnop", 6, 6) == ["abcdefghijklmnop"]


def test_truncates_to_max_lines():
    text = "\n".join(str(i) for i in range(10))
    assert wrap_lines(text, 9, 6) == ["0", "1", "2", "3", "4", "5"]
    assert wrap_lines("a b c d e f g h", 1, 3) == ["a", "b", "c"]


@pytest.mark.parametrize(
    "text,max_chars,max_lines",
    [
        ("■■ ■■■ ■■■■ ■■ ■■■■■ ■ ■■■", 5, 4),
        ("the quick brown fox jumps over the lazy dog", 10, 6),
        ("a  b   c    d", 3, 10),
        ("x" * 30 + " y z", 4, 5),
        ("줄\n바\n꿈 이 많 은\n메 시 지 입 니 다", 3, 6),
    ],
)
def test_wrap_is_bounded(text, max_chars, max_lines):
    lines = wrap_lines(text, max_chars, max_lines)
    assert len(lines) <= max_lines
    for line in lines:
        assert len(line) <= max_chars or " " not in line


@pytest.mark.parametrize("max_chars,max_lines", [(0, 5), (-1, 5), (5, 0), (5, -2)])
def test_rejects_non_positive_budgets(max_chars, max_lines):
    with pytest.raises(ValueError):
        wrap_lines("text", max_chars, max_lines)
