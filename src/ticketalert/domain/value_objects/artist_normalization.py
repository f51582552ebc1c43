"""Artist name normalization for matching event titles against Spotify artists.

Hey future me - Ticketmaster event names and Spotify artist names rarely agree
byte for byte. "Beyoncé" vs "Beyonce", "AURORA" vs "Aurora", "Kygo - Live!" vs
"Kygo". Both sides go through normalize_artist_name() before we compare.

Steps (order matters):
1. lowercase
2. NFD decomposition, then drop combining marks ("é" -> "e")
3. drop everything that is not [a-z0-9] or whitespace
4. collapse whitespace runs, trim

"å" decomposes to "a" + ring, but "ø" and "æ" don't decompose at all and are
simply removed by step 3 ("Røyksopp" -> "ryksopp"). Lossy, but both sides of
a comparison lose the same characters, so Spotify's "Røyksopp" still matches
a Ticketmaster "Røyksopp" event.

Examples:
    >>> normalize_artist_name("  Beyoncé  ")
    'beyonce'
    >>> normalize_artist_name("Kygo - Live!")
    'kygo live'
    >>> normalize_artist_name("a-ha")
    'aha'
"""

import re
import unicodedata

_NON_ALNUM = re.compile(r"[^a-z0-9\s]")
_WHITESPACE = re.compile(r"\s+")


def normalize_artist_name(name: str) -> str:
    """Normalize an artist or event name for comparison.

    Pure and idempotent: normalize(normalize(x)) == normalize(x).

    Args:
        name: Raw display name (may be empty)

    Returns:
        Lowercase ASCII-ish name with single spaces, possibly empty
    """
    if not name:
        return ""

    decomposed = unicodedata.normalize("NFD", name.lower())
    stripped = "".join(ch for ch in decomposed if unicodedata.category(ch) != "Mn")
    cleaned = _NON_ALNUM.sub("", stripped)
    return _WHITESPACE.sub(" ", cleaned).strip()


__all__ = ["normalize_artist_name"]
