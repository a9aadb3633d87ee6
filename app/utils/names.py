"""
Guest name helpers
"""

from typing import Tuple


def split_full_name(full_name: str) -> Tuple[str, str]:
    """Split a full name into (first_name, last_name).

    The first whitespace-separated word is the first name and the rest is the
    last name::

        "Anna"            -> ("Anna", "")
        "Anna Kowalska"   -> ("Anna", "Kowalska")
        "Jan Maria Nowak" -> ("Jan", "Maria Nowak")
    """
    parts = full_name.split()
    if not parts:
        return "", ""
    return parts[0], " ".join(parts[1:])
