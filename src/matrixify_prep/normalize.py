import re


# One-to-one substitution table; the last six source characters are
# punctuation that should behave like word separators.
_ACCENTED = "àáâäæãåāăąçćčđďèéêëēėęěğǵḧîïíīįìłḿñńǹňôöòóœøōõőṕŕřßśšşșťțûüùúūǘůűųẃẍÿýžźż·/_,:;"
_PLAIN = "aaaaaaaaaacccddeeeeeeeegghiiiiiilmnnnnoooooooooprrsssssttuuuuuuuuuwxyyzzz------"
TRANSLITERATION = str.maketrans(_ACCENTED, _PLAIN)

CJK_RANGES = (
    r"\u3000-\u303f"  # punctuation
    r"\u3040-\u309f"  # hiragana
    r"\u30a0-\u30ff"  # katakana
    r"\uff00-\uff9f"  # full/half width forms
    r"\u4e00-\u9faf"  # unified ideographs
    r"\u3400-\u4dbf"  # extension A
)
_CJK_DISALLOWED = re.compile(rf"[^a-z0-9\-{CJK_RANGES}]")


def slugify(text) -> str:
    """Latin slug used for handles built from titles and product ids.

    Characters outside the transliteration table and ``[\\w-]`` are dropped,
    so a purely CJK title collapses to an empty string.
    """
    if not text:
        return ""
    s = str(text).lower()
    s = re.sub(r"\s+", "-", s)
    s = s.translate(TRANSLITERATION)
    s = s.replace("&", "-and-")
    s = re.sub(r"[^\w\-]+", "", s, flags=re.ASCII)
    s = re.sub(r"-{2,}", "-", s)
    return s.strip("-")


def slugify_cjk(text) -> str:
    """Relaxed slug that keeps Japanese/Chinese code points."""
    if not text:
        return ""
    s = str(text).strip().lower()
    s = re.sub(r"\s+", "-", s)
    s = _CJK_DISALLOWED.sub("", s)
    s = re.sub(r"-{2,}", "-", s)
    return s.strip("-")


def clean_price(s: str) -> str:
    if not s:
        return ""
    return re.sub(r"[^0-9.]+", "", str(s))


def html_lines(text: str, br: str = "<br>") -> str:
    return str(text).replace("\r\n", "\n").replace("\n", br)
