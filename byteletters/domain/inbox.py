"""
Inbox address generation.

Every account gets a forwarding address of the form
``username[-code]@<inbox domain>`` that newsletters are sent to.
"""

import re
import secrets
import time
from collections.abc import Callable

DEFAULT_INBOX_DOMAIN = "inbox.byteletters.app"

# No 0, 1, i, l, o: they are easy to misread
SHORT_CODE_ALPHABET = "23456789abcdefghjkmnpqrstuvwxyz"
MAX_USERNAME_LENGTH = 15
MAX_ATTEMPTS = 10

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def sanitize_username(name: str) -> str:
    return _NON_ALNUM.sub("", name.lower())[:MAX_USERNAME_LENGTH] or "user"


def short_code(length: int = 2) -> str:
    return "".join(secrets.choice(SHORT_CODE_ALPHABET) for _ in range(length))


def _base36(n: int) -> str:
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    out = ""
    while n:
        n, r = divmod(n, 36)
        out = digits[r] + out
    return out or "0"


def generate_inbox_email(
    name: str,
    is_taken: Callable[[str], bool],
    domain: str = DEFAULT_INBOX_DOMAIN,
) -> str:
    """Return an unused inbox address derived from ``name``.

    Tries the bare username first, then 2-character and 3-character random
    suffixes, and finally a suffix taken from the current time.
    """
    username = sanitize_username(name)

    for attempt in range(MAX_ATTEMPTS):
        if attempt == 0:
            candidate = f"{username}@{domain}"
        elif attempt <= 3:
            candidate = f"{username}-{short_code(2)}@{domain}"
        else:
            candidate = f"{username}-{short_code(3)}@{domain}"

        if not is_taken(candidate):
            return candidate

    stamp = _base36(time.time_ns() // 1_000_000)[-4:]
    return f"{username}-{stamp}@{domain}"
