import re
from urllib.parse import quote

CATEGORY_PREFIX = "Category:"

_TAG_RE = re.compile(r"</?[A-Za-z][^<>]*>")
_WIKI_LINK_RE = re.compile(r"\[\[([^\]]+)\]\]")
_ENTITIES: tuple[tuple[str, str], ...] = (
    ("&quot;", '"'),
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
)
_MAX_SANITIZE_PASSES = 5


def build_canonical_url(title: str, base_url: str) -> str:
    # Letters, digits and -_.!~*'() stay literal; "/" is encoded too.
    safe_url_title = quote((title or "").replace(" ", "_"), safe="!~*'()")
    return f"{base_url.rstrip('/')}/wiki/{safe_url_title}"


def _sanitize_once(text: str) -> str:
    text = _TAG_RE.sub("", text)
    for entity, char in _ENTITIES:
        text = text.replace(entity, char)
    return _WIKI_LINK_RE.sub(r"\1", text)


def sanitize_snippet(snippet: str | None) -> str:
    """Reduce a search snippet to plain text.

    Decoding can reveal fresh markup (``&lt;b&gt;`` or ``&amp;quot;``), so the
    pass repeats until the text is stable. Only tag-shaped text is removed, so decoded
    comparisons such as ``a < 5`` survive as plain text.
    """
    text = snippet or ""
    for _ in range(_MAX_SANITIZE_PASSES):
        cleaned = _sanitize_once(text)
        if cleaned == text:
            break
        text = cleaned
    return text.strip()


def strip_category_prefix(title: str) -> str:
    return (title or "").removeprefix(CATEGORY_PREFIX).strip()
