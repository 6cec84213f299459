"""Clock and identifier helpers shared by the clients."""

from __future__ import annotations

import random
import string
import time

_BASE36 = string.digits + string.ascii_lowercase

# Length of the random suffix in generated identifiers
ID_SUFFIX_LENGTH = 9


def now_ms() -> int:
    """Current Unix time in milliseconds."""
    return int(time.time() * 1000)


def generate_id() -> str:
    """Generate a low-collision identifier for calls and sessions.

    Format is ``{epoch_millis}-{suffix}`` where suffix is nine random
    base36 characters. Not globally unique, only unlikely to collide.

    Returns:
        Identifier string, e.g. "1718030000000-k3j9x0a2b"
    """
    suffix = "".join(random.choices(_BASE36, k=ID_SUFFIX_LENGTH))
    return f"{now_ms()}-{suffix}"
