"""Derive the Jira version name from a release tag."""

import re

VERSION_PATTERN = re.compile(r"\D?\d+\.\d+\.\d+")


def derive_version_name(tag: str, prefix: str | None = None) -> str | None:
    """Return the version name for a release tag.

    The first ``MAJOR.MINOR.PATCH`` triple in the tag, together with the
    single non-digit character in front of it (if any), is used exactly as
    written.

    Args:
        tag: Release tag, e.g. ``v1.4.0`` or ``mobile-1.4.0``
        prefix: Optional label placed before the version, separated by a space

    Returns:
        The version name, or None if the tag contains no version triple

    Example:
        >>> derive_version_name("v1.4.0")
        'v1.4.0'
        >>> derive_version_name("v1.4.0", "Mobile")
        'Mobile v1.4.0'
        >>> derive_version_name("v1.4") is None
        True
    """
    match = VERSION_PATTERN.search(tag or "")
    if not match:
        return None

    version = match.group(0)
    return f"{prefix} {version}" if prefix else version
