import re
import unicodedata

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def strip_accents(text: str) -> str:
    """Decompose to NFD and drop the combining marks (ñ -> n, á -> a)."""
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def slugify(text: str, separator: str = "_") -> str:
    """
    Lower-case, strip accents and collapse every run of non-alphanumerics
    into ``separator``. Leading and trailing separators are removed.
    """
    if not text:
        return ""
    cleaned = strip_accents(str(text).lower())
    return _NON_ALNUM.sub(separator, cleaned).strip(separator)


def table_slug(name: str) -> str:
    return slugify(name, separator="-")


def field_name(label: str) -> str:
    return slugify(label, separator="_")
