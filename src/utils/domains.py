"""
Domain name matching helpers.

Names are compared label by label starting from the top-level label, so
``sub.example.com`` falls under ``example.com`` but never under ``other.com``.
"""

from typing import List


def strip_wildcard(name: str) -> str:
    """
    Remove a single leading wildcard marker.

    Examples:
        >>> strip_wildcard("*.example.com")
        'example.com'
        >>> strip_wildcard("*example.com")
        'example.com'
        >>> strip_wildcard("api.example.com")
        'api.example.com'
    """
    if name.startswith("*."):
        return name[2:]
    if name.startswith("*"):
        return name[1:]
    return name


def reversed_labels(name: str) -> List[str]:
    """Split a name on dots and reverse it, top-level label first."""
    return name.lower().split(".")[::-1]


def labels_match(candidate: str, target: str) -> bool:
    """
    Check whether a candidate name lines up with a target domain.

    The wildcard-stripped candidate matches when every label equals the
    target's label at the same position, up to the shorter of the two.

    Examples:
        >>> labels_match("*.example.com", "api.example.com")
        True
        >>> labels_match("other.com", "api.example.com")
        False
    """
    candidate_labels = reversed_labels(strip_wildcard(candidate))
    target_labels = reversed_labels(target)
    return all(c == t for c, t in zip(candidate_labels, target_labels))


def is_enclosing(candidate: str, target: str) -> bool:
    """
    Check whether the candidate is the target or one of its parents.

    Like labels_match, but a candidate with more labels than the target is
    rejected unless the target is a single-label (root) name.
    """
    candidate_labels = reversed_labels(strip_wildcard(candidate))
    target_labels = reversed_labels(target)
    if len(target_labels) != 1 and len(candidate_labels) > len(target_labels):
        return False
    return labels_match(candidate, target)


def specificity(candidate: str) -> int:
    """Length of the wildcard-stripped name; longer is more specific."""
    return len(strip_wildcard(candidate))
