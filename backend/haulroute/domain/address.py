from __future__ import annotations


def country_from_address(address: str | None) -> str | None:
    """
    Return the country segment of a free-form address.

    The country is taken to be the text after the last comma, which matches
    how pickup addresses have always been stored. Addresses formatted in other
    conventions (postcode last, no country) will yield the wrong segment.
    """
    if not address:
        return None
    country = address.rsplit(",", 1)[-1].strip()
    return country or None


def split_countries(text: str | None) -> frozenset[str]:
    """Parse a comma-separated country list, trimming and dropping blanks."""

    if not text:
        return frozenset()
    return frozenset(part.strip() for part in text.split(",") if part.strip())
