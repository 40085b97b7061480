"""Slug generator service.

Generates URL-friendly slugs from text, typically website or page names,
and picks collision-free variants against the slugs already in use.
"""

import re
import unicodedata
from typing import Iterable


class SlugGenerator:
    """Generate URL-friendly slugs.

    Slug rules:
    - Lowercase
    - Alphanumeric + hyphens only
    - No leading, trailing or repeated hyphens
    """

    MAX_LENGTH = 64
    DEFAULT_SLUG = "site"

    VALID_SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")

    @classmethod
    def slugify(cls, text: str) -> str:
        """Generate a slug from text.

        Args:
            text: The text to convert to a slug (e.g., a business name).

        Returns:
            URL-friendly slug.

        Examples:
            >>> SlugGenerator.slugify("Acme Corp")
            'acme-corp'
            >>> SlugGenerator.slugify("Café & Bakery, Inc.")
            'cafe-bakery-inc'
        """
        # Strip accents, then drop anything non-ASCII
        normalized = unicodedata.normalize("NFKD", text)
        ascii_text = normalized.encode("ascii", "ignore").decode("ascii")

        slug = re.sub(r"[^a-z0-9]+", "-", ascii_text.lower()).strip("-")

        if len(slug) > cls.MAX_LENGTH:
            slug = slug[: cls.MAX_LENGTH].rstrip("-")

        return slug or cls.DEFAULT_SLUG

    @classmethod
    def is_valid(cls, slug: str) -> bool:
        """Check if a slug is valid.

        Args:
            slug: The slug to validate.

        Returns:
            True if slug meets all requirements, False otherwise.
        """
        return len(slug) <= cls.MAX_LENGTH and bool(cls.VALID_SLUG_PATTERN.match(slug))

    @staticmethod
    def candidates(base: str) -> Iterable[str]:
        """Yield ``base``, ``base-1``, ``base-2``, ... without end."""
        yield base
        counter = 1
        while True:
            yield f"{base}-{counter}"
            counter += 1

    @classmethod
    def next_available(cls, base: str, existing: Iterable[str]) -> str:
        """Return the first candidate for ``base`` not present in ``existing``.

        Examples:
            >>> SlugGenerator.next_available("acme", ["acme", "acme-1"])
            'acme-2'
            >>> SlugGenerator.next_available("acme", [])
            'acme'
        """
        taken = set(existing)
        for candidate in cls.candidates(base):
            if candidate not in taken:
                return candidate
