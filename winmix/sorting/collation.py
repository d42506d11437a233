"""
Hungarian collation helpers.

The dashboard's display text is Hungarian, so team and league names are
ordered the way the Hungarian alphabet orders them rather than by code point:

    a á b c cs d dz dzs e é f g gy h i í j k l ly m n ny o ó ö ő p q r s sz
    t ty u ú ü ű v w x y z zs

At primary strength a/á, e/é, i/í, o/ó, ö/ő, u/ú and ü/ű are the same
letter, but ö and ü are letters of their own after o and u. The digraphs
(cs, dz, dzs, gy, ly, ny, sz, ty, zs) are single letters that sort after
their first character. Accents break primary ties, then case (lowercase
first). Foreign diacritics are folded to their base letter.
"""
from typing import List, Tuple
import unicodedata

HUNGARIAN_ALPHABET = (
    "a", "b", "c", "cs", "d", "dz", "dzs", "e", "f", "g", "gy", "h", "i", "j",
    "k", "l", "ly", "m", "n", "ny", "o", "ö", "p", "q", "r", "s", "sz", "t",
    "ty", "u", "ü", "v", "w", "x", "y", "z", "zs",
)
LETTER_RANK = {letter: rank for rank, letter in enumerate(HUNGARIAN_ALPHABET)}
DIGRAPHS = tuple(sorted((l for l in HUNGARIAN_ALPHABET if len(l) > 1), key=len, reverse=True))

# Long vowels collapse onto their short pair at primary strength
LONG_VOWELS = {
    "á": "a",
    "é": "e",
    "í": "i",
    "ó": "o",
    "ő": "ö",
    "ú": "u",
    "ű": "ü",
}

PrimaryElement = Tuple[int, int]


def _fold_char(ch: str) -> str:
    if ch in LONG_VOWELS:
        return LONG_VOWELS[ch]
    if ch in ("ö", "ü"):
        return ch
    decomposed = unicodedata.normalize("NFKD", ch)
    return "".join(c for c in decomposed if not unicodedata.combining(c))


def primary_fold(text: str) -> str:
    """
    Case- and accent-insensitive form of text at Hungarian primary strength.
    Used for substring matching: 'ujpest' finds 'Újpest'.
    """
    return "".join(_fold_char(ch) for ch in unicodedata.normalize("NFC", text).casefold())


def _primary_elements(folded: str) -> List[PrimaryElement]:
    elements: List[PrimaryElement] = []
    i = 0
    while i < len(folded):
        for digraph in DIGRAPHS:
            if folded.startswith(digraph, i):
                elements.append((1, LETTER_RANK[digraph]))
                i += len(digraph)
                break
        else:
            ch = folded[i]
            if ch in LETTER_RANK:
                elements.append((1, LETTER_RANK[ch]))
            else:
                # Spaces, punctuation and digits sort before letters
                elements.append((0, ord(ch)))
            i += 1
    return elements


def collation_key(text: str) -> Tuple[Tuple[PrimaryElement, ...], Tuple[int, ...], Tuple[int, ...]]:
    """
    Sort key giving Hungarian alphabetical order.

    Returns (primary, secondary, tertiary):
        primary   - alphabet positions, digraphs as single letters
        secondary - 1 for each accented character, 0 otherwise
        tertiary  - 1 for each uppercase character, 0 otherwise
    """
    text = unicodedata.normalize("NFC", text or "")
    primary = tuple(_primary_elements(primary_fold(text)))
    secondary = tuple(0 if _fold_char(ch) == ch else 1 for ch in text.casefold())
    tertiary = tuple(1 if ch.isupper() else 0 for ch in text)
    return primary, secondary, tertiary


def locale_compare(a: str, b: str) -> int:
    """
    Three-way comparison of two strings in Hungarian collation.
    """
    key_a = collation_key(a)
    key_b = collation_key(b)
    if key_a < key_b:
        return -1
    if key_a > key_b:
        return 1
    return 0
