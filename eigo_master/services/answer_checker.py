def check_answer(correct: str, user_answer: str) -> bool:
    """Check a typed spelling against the target word."""
    return _normalize(user_answer) == _normalize(correct)


def _normalize(text: str) -> str:
    """Exact match apart from letter case: no trimming, no punctuation folding."""
    return text.casefold()
