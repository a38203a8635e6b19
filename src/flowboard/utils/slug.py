"""Utilities for generating filesystem-safe slugs."""

import re
import unicodedata


def slugify(text: str) -> str:
    """
    Convert text to a filesystem-safe slug.

    Example: "Fix Login Bug!" -> "fix-login-bug"
    """
    text = unicodedata.normalize("NFKD", text)
    text = text.encode("ascii", "ignore").decode("ascii")
    text = text.lower()

    # Spaces and underscores become hyphens, everything else non-alphanumeric goes
    text = re.sub(r"[\s_]+", "-", text)
    text = re.sub(r"[^a-z0-9\-]", "", text)

    return re.sub(r"-+", "-", text).strip("-")


def generate_filename(title: str, suffix: int | None = None) -> str:
    """Generate a .md task filename from a title.

    Example: ("Fix Login Bug", 2) -> "fix-login-bug-2.md"
    """
    slug = slugify(title) or "untitled"
    if suffix is not None:
        slug = f"{slug}-{suffix}"
    return f"{slug}.md"
