# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Download Aggregator

Single responsibility: merge download telemetry into registry entries.

Per-version counts are added to the matching version record and to the
entry's running ``totalDownloads``. Per-day counts are summed into the
``recent`` window, which keeps only the 7 greatest day keys (YYYYMMDD).

This is the trusted ingestion path: there is no authorization check, and
unknown packages or versions are silently ignored.
"""

from typing import Dict, Mapping, Optional, Tuple

from extension_registry.core.logging import get_service_logger
from extension_registry.models.registry_models import RegistryEntry
from .store import RegistryStore

logger = get_service_logger("downloads")

RECENT_WINDOW_DAYS = 7


def _is_count(value: object) -> bool:
    """Telemetry counts must be positive ints; anything else is ignored"""
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def merge_recent_downloads(
    current: Optional[Mapping[str, int]],
    incoming: Optional[Mapping[str, int]],
    window: int = RECENT_WINDOW_DAYS
) -> Tuple[Dict[str, int], bool]:
    """
    Sum two day -> count maps and cut the result to the newest days.

    The window is trimmed even when nothing new arrives, so a stored
    window that grew past ``window`` days is repaired on the next report.

    Args:
        current: Existing recent window
        incoming: Newly reported per-day counts
        window: Number of day keys to keep

    Returns:
        (merged window, whether it differs from ``current``)
    """
    current = dict(current or {})

    merged = dict(current)
    for day, count in (incoming or {}).items():
        if _is_count(count):
            merged[day] = merged.get(day, 0) + count

    # Older days are dropped, not folded into the kept ones
    kept = sorted(merged, reverse=True)[:window]
    result = {day: merged[day] for day in sorted(kept)}

    return result, result != current


def apply_version_downloads(entry: RegistryEntry, version_downloads: Optional[Mapping[str, int]]) -> bool:
    """
    Add per-version counts to an entry.

    ``total_downloads`` grows by exactly the amounts applied here; it is a
    running counter and is not rederived from the version records. Zero,
    negative and non-integer counts are skipped so the total never drops.

    Returns:
        True if at least one version was incremented
    """
    updated = False
    for version, count in (version_downloads or {}).items():
        if not _is_count(count):
            logger.debug(f"Ignoring download count {count!r} for {entry.name}@{version}")
            continue

        record = entry.find_version(version)
        if record is None:
            continue

        record.downloads = (record.downloads or 0) + count
        entry.total_downloads = (entry.total_downloads or 0) + count
        updated = True

    return updated


class DownloadAggregator:
    """Records download statistics on registry entries"""

    def __init__(self, store: RegistryStore):
        self.store = store

    async def record_downloads(
        self,
        name: str,
        version_downloads: Optional[Mapping[str, int]],
        recent_downloads: Optional[Mapping[str, int]] = None
    ) -> bool:
        """
        Add download data to an existing registry entry.

        Args:
            name: Package name
            version_downloads: Version -> downloads since the last report,
                e.g. {"0.3.0": 6, "0.3.1": 276}
            recent_downloads: Day -> downloads, e.g. {"20130805": 8, "20130806": 17}

        Returns:
            True if the entry changed (a registry save was scheduled)

        Raises:
            RegistryNotLoadedError: If the registry has not been loaded
        """
        if self.store.get(name) is None:
            logger.debug(f"Ignoring downloads for unknown package: {name}")
            return False

        async with self.store.locked(name):
            # Re-read: a publish may have replaced the entry while we waited
            entry = self.store.get(name)
            if entry is None:
                return False

            versions_updated = apply_version_downloads(entry, version_downloads)

            recent, recent_updated = merge_recent_downloads(entry.recent, recent_downloads)
            if recent_updated:
                entry.recent = recent

            if not (versions_updated or recent_updated):
                return False

            self.store.persist()

        logger.debug(f"Recorded downloads for {name}")
        return True
