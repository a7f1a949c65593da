import pytest

from app.validation import analyze_errors, count_char_mismatches


@pytest.mark.parametrize(
    "typed,target,n_chars,n_words",
    [
        ("hello world", "hello world", 0, 0),
        ("hallo world", "hello world", 1, 1),
        ("hallo wurld", "hello world", 2, 2),
        ("", "", 0, 0),
        ("hel", "hello", 0, 1),
        ("hello", "hel", 0, 1),
    ],
)
def test_analyze_errors_counts(typed, target, n_chars, n_words):
    chars, words = analyze_errors(typed, target)
    assert len(chars) == n_chars
    assert len(words) == n_words


def test_reports_target_side_characters_and_words():
    chars, words = analyze_errors("hallo wurld", "hello world")
    assert chars == {"e", "o"}
    assert words == {"hello", "world"}


def test_repeated_mistakes_on_same_char_collapse():
    chars, _ = analyze_errors("xxxx", "aaaa")
    assert chars == {"a"}


def test_error_chars_bounded_by_mismatch_count():
    pairs = [
        ("the quick brown", "the quack brawn"),
        ("abc", "xyz"),
        ("a b c d", "a x c y"),
        ("", "something"),
    ]
    for typed, target in pairs:
        chars, _ = analyze_errors(typed, target)
        assert len(chars) <= count_char_mismatches(typed, target)


def test_dropped_word_misaligns_everything_after_it():
    # a skipped word shifts the pairing; every following word is flagged
    _, words = analyze_errors("the brown fox", "the quick brown fox")
    assert words == {"quick", "brown"}


def test_prefix_of_target_has_no_char_errors():
    chars, _ = analyze_errors("hello wo", "hello world")
    assert chars == set()


def test_count_char_mismatches():
    assert count_char_mismatches("abc", "abd") == 1
    assert count_char_mismatches("", "abc") == 0
    assert count_char_mismatches("abcdef", "abc") == 0
