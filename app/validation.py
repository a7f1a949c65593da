from typing import Set, Tuple


def count_char_mismatches(typed: str, target: str) -> int:
    n = min(len(typed), len(target))
    return sum(1 for i in range(n) if typed[i] != target[i])


def analyze_errors(typed: str, target: str) -> Tuple[Set[str], Set[str]]:
    """
    Compare typed text against target text.

    Returns (error_chars, problem_words), both holding the *target* side:
    the character or word the user needed to produce. Characters are
    compared position by position up to the shorter string; words are
    compared index by index up to the shorter word list, so a dropped or
    doubled word misaligns everything after it. That approximation is
    kept on purpose.
    """
    error_chars: Set[str] = set()
    problem_words: Set[str] = set()

    for i in range(min(len(typed), len(target))):
        if typed[i] != target[i]:
            error_chars.add(target[i])

    typed_words = typed.split()
    target_words = target.split()
    for typed_word, target_word in zip(typed_words, target_words):
        if typed_word != target_word:
            problem_words.add(target_word)

    return error_chars, problem_words
