# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Registry display helpers.

Pure functions used by registry listings. Owner identities have the form
``service:username`` (e.g. ``github:alice``).
"""

from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Union
from urllib.parse import quote

from extension_registry.models.registry_models import RegistryEntry

OWNER_PAGES = {
    "github": "https://github.com/{user}",
}


def last_version_date(entry: RegistryEntry) -> str:
    """Publish date (YYYY-MM-DD) of the newest version, or empty string"""
    latest = entry.latest_version
    if latest is None or not latest.published:
        return ""
    return latest.published.split("T", 1)[0]


def format_user_id(owner: Optional[str]) -> Optional[str]:
    """Username part of an owner identity"""
    if not owner:
        return None
    parts = owner.split(":")
    return parts[1] if len(parts) > 1 else None


def owner_link(owner: Optional[str]) -> Optional[str]:
    """URL of the owner's page on its auth service, if the service is known"""
    if not owner:
        return None
    service, _, user = owner.partition(":")
    template = OWNER_PAGES.get(service)
    if template is None or not user:
        return None
    return template.format(user=user)


def author_display(entry: RegistryEntry) -> str:
    """
    Plain-text author line: "<author name> / <owner username>".

    The author may be declared either as a string or as an object with
    a ``name`` field.
    """
    result = ""
    author = entry.metadata.author
    if isinstance(author, dict):
        result = author.get("name") or ""
    elif author:
        result = author

    user_id = format_user_id(entry.owner)
    if user_id:
        result = f"{result} / {user_id}" if result else user_id
    return result


def format_download_url(base_url: str, name: str, version: str) -> str:
    """URL of the stored zip for one version of a package"""
    return f"{base_url}/{quote(f'{name}-{version}.zip', safe='')}"


def _publish_time(entry: Union[RegistryEntry, Mapping[str, Any]]) -> float:
    if isinstance(entry, RegistryEntry):
        versions = [v.published for v in entry.versions]
    else:
        versions = [v.get("published") for v in entry.get("versions") or []]

    if not versions or not versions[-1]:
        return float("-inf")
    try:
        return datetime.fromisoformat(versions[-1].replace("Z", "+00:00")).timestamp()
    except ValueError:
        return float("-inf")


def sort_registry(registry: Mapping[str, Any], subkey: Optional[str] = None) -> List[Any]:
    """
    Registry entries sorted by latest publish date, newest first.

    Args:
        registry: Name -> entry (RegistryEntry or its dict form)
        subkey: Key holding the registry data inside each value, if any

    Returns:
        Entries in display order
    """
    def key(item: Any) -> float:
        if subkey and isinstance(item, dict) and item.get(subkey) is not None:
            item = item[subkey]
        return _publish_time(item)

    return sorted(registry.values(), key=key, reverse=True)
