"""URL slugs for tags and imported publications."""

from unicodedata import normalize

from pymdownx.slugs import slugify as _md_slugify

slugify_lower = _md_slugify(case="lower", separator="-")


def slugify(text: str | None, max_len: int = 80) -> str:
    """Convert text to an ASCII, URL-friendly slug.

    Examples:
        >>> slugify("Bayesian Optimization")
        'bayesian-optimization'
        >>> slugify("Café à Paris")
        'cafe-a-paris'
        >>> slugify("../../etc/passwd")
        'etcpasswd'

    Returns an empty string when nothing sluggable remains.
    """
    if not text:
        return ""

    normalized = normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    slug = slugify_lower(normalized, sep="-")
    if len(slug) > max_len:
        slug = slug[:max_len].rstrip("-")
    return slug
