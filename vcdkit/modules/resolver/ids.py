"""
Identifier helpers shared by every entity kind.

The server hands out the same identity in three shapes:
- URN:   urn:vcloud:vdc:3d2e8c7a-0d4c-4e51-9e1a-0b8d6a0f3b11
- UUID:  3d2e8c7a-0d4c-4e51-9e1a-0b8d6a0f3b11
- HREF:  https://vcd.example.com/api/vdc/3d2e8c7a-0d4c-4e51-9e1a-0b8d6a0f3b11

Comparisons go through the UUID each shape carries.
"""

import re
from typing import Optional

_UUID = r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"

UUID_PATTERN = re.compile(_UUID)
BARE_UUID_PATTERN = re.compile(rf"^{_UUID}$")
URN_PATTERN = re.compile(rf"^urn:[A-Za-z0-9][A-Za-z0-9-]*(?::[A-Za-z0-9][A-Za-z0-9-]*)*:{_UUID}$")
HREF_PATTERN = re.compile(rf"^https?://\S+/{_UUID}/?$")


def extract_uuid(text: Optional[str]) -> Optional[str]:
    """Last UUID found in text, or None."""
    if not text:
        return None
    found = UUID_PATTERN.findall(text)
    return found[-1] if found else None


def equal_ids(wanted: str, got: str, href: str = "") -> bool:
    """
    Compare an identifier against an entity's ID, falling back to its href.

    Args:
        wanted: Identifier supplied by the caller, in any of the three shapes
        got: Entity's ID as reported (may be empty)
        href: Entity's href, used when got is empty

    Returns:
        True when both sides denote the same entity
    """
    if not got:
        got = href
    if not wanted or not got:
        return False
    if wanted == got:
        return True

    wanted_uuid = extract_uuid(wanted)
    got_uuid = extract_uuid(got)
    if wanted_uuid is None or got_uuid is None:
        return False
    return wanted_uuid.lower() == got_uuid.lower()


def looks_like_id(identifier: str) -> bool:
    """
    True only for a confident identifier shape.

    A name that merely contains a UUID ("backup-3d2e8c7a-...") is not
    confident and resolves by name.
    """
    if not identifier:
        return False
    return bool(
        URN_PATTERN.match(identifier)
        or BARE_UUID_PATTERN.match(identifier)
        or HREF_PATTERN.match(identifier)
    )
