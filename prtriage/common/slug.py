"""Repository slug utilities.

GitHub reports a repository's fully qualified name as ``owner/name``
(``nameWithOwner`` in GraphQL). Action calls need the two halves separately,
so the split lives here rather than being repeated at each call site.
"""

from __future__ import annotations


def repo_slug(owner: str, name: str) -> str:
    """Join an owner and a repository name into ``owner/name``.

    Examples
    --------
    >>> repo_slug("octo-org", "widgets")
    'octo-org/widgets'

    """
    return f"{owner}/{name}"


def parse_repo_slug(slug: str) -> tuple[str, str]:
    """Split an ``owner/name`` slug into its parts.

    Parameters
    ----------
    slug:
        Repository slug such as ``nameWithOwner``.

    Returns
    -------
    tuple[str, str]
        ``(owner, name)``.

    Raises
    ------
    ValueError
        If the slug does not contain exactly one non-empty owner and name.

    Examples
    --------
    >>> parse_repo_slug("octo-org/widgets")
    ('octo-org', 'widgets')

    """
    owner, sep, name = slug.strip().partition("/")
    if not sep or not owner or not name or "/" in name:
        msg = f"Invalid repository slug: expected 'owner/name', got {slug!r}"
        raise ValueError(msg)
    return owner, name
