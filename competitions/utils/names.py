"""Team name normalization for rating lookups."""

import re

_UNIVERSITY_PREFIX = re.compile(r"^university of\s+")
_WHITESPACE = re.compile(r"\s+")


def normalize_team_name(name: str) -> str:
    """Lower-case and collapse whitespace."""
    return _WHITESPACE.sub(" ", name.strip().lower())


def name_variants(name: str) -> list[str]:
    """Candidate lookup keys for a team name, most specific first.

    Tries the normalized name, the name without a leading "University of",
    and hyphen/space swapped forms of both.
    """
    base = normalize_team_name(name)
    stems = [base]
    stripped = _UNIVERSITY_PREFIX.sub("", base)
    if stripped != base:
        stems.append(stripped)

    variants: list[str] = []
    for stem in stems:
        for candidate in (stem, stem.replace("-", " "), stem.replace(" ", "-")):
            if candidate not in variants:
                variants.append(candidate)
    return variants
