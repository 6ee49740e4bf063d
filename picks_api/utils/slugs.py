"""URL slug helpers for blog posts."""
import re

_NON_ALNUM_RUN = re.compile(r"[^a-z0-9]+")


def slugify(title: str) -> str:
    """
    Lowercase the title and collapse every run of characters outside
    ``[a-z0-9]`` into a single hyphen.

    Leading and trailing hyphens are kept, so ``"Top 5 tips!"`` becomes
    ``"top-5-tips-"``.
    """
    return _NON_ALNUM_RUN.sub("-", title.lower())
