import re
from typing import Iterable, List, Optional, Tuple

EMAIL_REGEX = re.compile(r'^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$')


def normalize_email(email: Optional[str]) -> str:
    """Strips whitespace and lower-cases. A trailing space makes some relays drop the message."""
    return (email or "").strip().lower()


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_REGEX.match(email))


def split_valid(emails: Iterable[str]) -> Tuple[List[str], List[str]]:
    """
    Normalizes and de-duplicates `emails`, preserving first-seen order.
    Returns (valid, invalid); blank entries are dropped silently.
    """
    valid: List[str] = []
    invalid: List[str] = []
    seen = set()
    for raw in emails:
        email = normalize_email(raw)
        if not email or email in seen:
            continue
        seen.add(email)
        if is_valid_email(email):
            valid.append(email)
        else:
            invalid.append(email)
    return valid, invalid
