"""Trail/path matching predicates.

A trail is the sequence of local tag names from the document root down to the
element currently being visited. Paths are ``tag1/tag2/tag3`` strings.
"""

from typing import Optional, Sequence

from .events import StartElement

PATH_SEPARATOR = "/"


def is_path(trail: Sequence[str], path: str) -> bool:
    """Check whether the whole trail spells out ``path``.

    Example:
        >>> is_path(["configuration", "appSettings"], "configuration/appSettings")
        True
        >>> is_path(["configuration", "appSettings"], "appSettings")
        False
    """
    return path == PATH_SEPARATOR.join(trail)


def is_tag(trail: Sequence[str], tag_name: str) -> bool:
    """Check whether the innermost element of the trail is ``tag_name``."""
    if not trail:
        return False
    return trail[-1] == tag_name


def path_ends_with(trail: Sequence[str], path: str) -> bool:
    """Check whether the tail of the trail matches ``path`` tag by tag.

    Matching happens on tag boundaries, so ``yoloHttpErrors`` never matches
    ``httpErrors``.

    Example:
        >>> path_ends_with(["configuration", "system.webServer", "httpErrors"],
        ...                "system.webServer/httpErrors")
        True
        >>> path_ends_with(["httpErrors"], "system.webServer/httpErrors")
        False
    """
    tokens = path.split(PATH_SEPARATOR)
    if len(trail) < len(tokens):
        return False
    return list(trail[len(trail) - len(tokens):]) == tokens


def get_attribute(element: StartElement, attribute_name: str) -> Optional[str]:
    """Return the first attribute value whose local name is ``attribute_name``."""
    for attribute in element.attributes:
        if attribute.local_name == attribute_name:
            return attribute.value
    return None
