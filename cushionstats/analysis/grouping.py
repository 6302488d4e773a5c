"""Partition long-form measurements into (variable, level) groups."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator

from cushionstats.core.entities import Group, GroupKey, Measurement
from cushionstats.exceptions import EmptyGroup

logger = logging.getLogger(__name__)


class GroupIndex:
    """Immutable lookup of groups by key, iterated in sorted key order."""

    def __init__(self, groups: dict[GroupKey, Group]) -> None:
        self._groups = dict(sorted(groups.items()))

    def keys(self) -> list[GroupKey]:
        return list(self._groups)

    def group(self, variable: str, level: str) -> Group:
        key = GroupKey(variable, level)
        try:
            return self._groups[key]
        except KeyError:
            raise EmptyGroup(f"No measurements for group {key}") from None

    def foam_partitions(self) -> Iterator[tuple[GroupKey, str, tuple[float, ...]]]:
        """Yield ``(key, foam, values)`` ordered by variable, level, foam."""
        for key, group in self._groups.items():
            for foam in group.foams:
                yield key, foam, group.by_foam(foam)

    @property
    def variables(self) -> list[str]:
        return sorted({key.variable for key in self._groups})

    def __iter__(self) -> Iterator[Group]:
        return iter(self._groups.values())

    def __len__(self) -> int:
        return len(self._groups)

    def __contains__(self, key: object) -> bool:
        return key in self._groups


class GroupIndexer:
    """Build a ``GroupIndex`` from measurements."""

    def build(self, measurements: Iterable[Measurement]) -> GroupIndex:
        buckets: dict[GroupKey, list[Measurement]] = {}
        for m in measurements:
            buckets.setdefault(GroupKey(m.variable, m.level), []).append(m)

        groups = {
            key: Group(
                key=key,
                measurements=tuple(
                    sorted(members, key=lambda m: (m.foam, m.cushion_id))
                ),
            )
            for key, members in buckets.items()
        }
        logger.info(
            "Grouping: %s (variable, level) group(s)",
            len(groups),
            extra={"groups": len(groups)},
        )
        return GroupIndex(groups)


__all__ = ["GroupIndex", "GroupIndexer"]
