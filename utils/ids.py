import random
import string
import time

_ALPHABET = string.digits + string.ascii_lowercase


def _base36(n: int) -> str:
    if n == 0:
        return "0"
    out = []
    while n:
        n, r = divmod(n, 36)
        out.append(_ALPHABET[r])
    return "".join(reversed(out))


def new_id() -> str:
    """Millisecond timestamp plus 11 random characters, both base 36."""
    stamp = _base36(int(time.time() * 1000))
    suffix = "".join(random.choices(_ALPHABET, k=11))
    return stamp + suffix
