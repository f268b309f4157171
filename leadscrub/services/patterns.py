from __future__ import annotations

"""Email address pattern candidates.

The order below is the adoption priority: the enrichment pipeline takes the
first candidate as its best guess.
"""

__all__ = [
    "generate_email_patterns",
]


def generate_email_patterns(first_name: str, last_name: str, domain: str) -> list[str]:
    """Return the twelve candidate addresses for a person at `domain`.

    Returns an empty list when any input is blank.

    Examples:
        >>> generate_email_patterns("Jane", "Doe", "acme.io")[:3]
        ['jane@acme.io', 'jane.doe@acme.io', 'jdoe@acme.io']
    """
    f = first_name.strip().lower()
    l = last_name.strip().lower()  # noqa: E741
    domain = domain.strip().lower()
    if not f or not l or not domain:
        return []

    fi = f[0]
    li = l[0]
    local_parts = [
        f,
        f"{f}.{l}",
        f"{fi}{l}",
        f"{f}{li}",
        f"{f}_{l}",
        f"{f}{l}",
        f"{l}{f}",
        f"{l}.{f}",
        f"{l}{fi}",
        f"{fi}.{l}",
        f"{f}-{l}",
        l,
    ]
    return [f"{local}@{domain}" for local in local_parts]
