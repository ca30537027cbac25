"""Username/page-name folding into the platform's "unix name" form."""

from __future__ import annotations

import re


# Characters folded to ASCII before the generic substitution runs
SPECIAL_CHAR_MAP: dict[str, str] = {
    "À": "A", "Á": "A", "Â": "A", "Ã": "A", "Ä": "Ae", "Å": "A", "Æ": "Ae", "Ç": "C",
    "È": "E", "É": "E", "Ê": "E", "Ë": "E", "Ì": "I", "Í": "I", "Î": "I", "Ï": "I",
    "Ð": "D", "Ñ": "N", "Ò": "O", "Ó": "O", "Ô": "O", "Õ": "O", "Ö": "Oe", "Ø": "O",
    "Ù": "U", "Ú": "U", "Û": "U", "Ü": "Ue", "Ý": "Y", "Þ": "Th", "ß": "ss",
    "à": "a", "á": "a", "â": "a", "ã": "a", "ä": "ae", "å": "a", "æ": "ae", "ç": "c",
    "è": "e", "é": "e", "ê": "e", "ë": "e", "ì": "i", "í": "i", "î": "i", "ï": "i",
    "ð": "d", "ñ": "n", "ò": "o", "ó": "o", "ô": "o", "õ": "o", "ö": "oe", "ø": "o",
    "ù": "u", "ú": "u", "û": "u", "ü": "ue", "ý": "y", "þ": "th", "ÿ": "y",
    "Ą": "A", "ą": "a", "Ć": "C", "ć": "c", "Ę": "E", "ę": "e", "Ł": "L", "ł": "l",
    "Ń": "N", "ń": "n", "Ś": "S", "ś": "s", "Ź": "Z", "ź": "z", "Ż": "Z", "ż": "z",
    "Č": "C", "č": "c", "Ď": "D", "ď": "d", "Ě": "E", "ě": "e", "Ň": "N", "ň": "n",
    "Ř": "R", "ř": "r", "Š": "S", "š": "s", "Ť": "T", "ť": "t", "Ů": "U", "ů": "u",
    "Ž": "Z", "ž": "z", "Œ": "Oe", "œ": "oe",
}  # fmt: skip

_SUBSTITUTIONS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"[^a-z0-9\-:_]"), "-"),
    (re.compile(r"^_"), ":_"),
    (re.compile(r"(?<!:)_"), "-"),
    (re.compile(r"^-*"), ""),
    (re.compile(r"-*$"), ""),
    (re.compile(r"-{2,}"), "-"),
    (re.compile(r":{2,}"), ":"),
    (re.compile(r":-"), ":"),
    (re.compile(r"-:"), ":"),
    (re.compile(r"_-"), "_"),
    (re.compile(r"-_"), "_"),
    (re.compile(r"^:"), ""),
    (re.compile(r":$"), ""),
)


def to_unix(target: str) -> str:
    """Convert a display name to its unix name (e.g. ``"Foo Bar"`` -> ``"foo-bar"``)."""
    result = "".join(SPECIAL_CHAR_MAP.get(char, char) for char in target).lower()
    for pattern, replacement in _SUBSTITUTIONS:
        result = pattern.sub(replacement, result)
    return result
