"""
Claps Data Access
Interface to the analytics backend plus an in-memory implementation used in
development and tests.
"""

import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Dict, Optional, Set

from getclaps.models.claps import ClapCount, ClapRecord, UpdateOptions
from getclaps.models.dashboard import Dashboard


class ClapsDAO(ABC):
    """
    Abstract analytics backend.
    Route handlers only call it after a submission has passed validation.
    """

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    async def update_claps(self, record: ClapRecord, options: UpdateOptions) -> ClapCount:
        ...

    @abstractmethod
    async def get_claps(self, href: str) -> Dict[str, ClapCount]:
        ...

    @abstractmethod
    async def get_dashboard(self, id: str) -> Optional[Dashboard]:
        ...

    @abstractmethod
    async def upsert_dashboard(self, dashboard: Dashboard) -> Dashboard:
        ...


class InMemoryClapsDAO(ClapsDAO):
    """Keeps counts in process memory. Not shared between workers."""

    def __init__(self):
        super().__init__()
        self._claps: Dict[str, int] = defaultdict(int)
        self._clappers: Dict[str, Set[str]] = defaultdict(set)
        self._dashboards: Dict[str, Dashboard] = {}

    async def update_claps(self, record: ClapRecord, options: UpdateOptions) -> ClapCount:
        if options.dnt:
            self.logger.debug(f"Skipping claps for {record.href}: do-not-track set")
        else:
            self._claps[record.href] += record.claps
            self._clappers[record.href].add(record.id)
            self.logger.info(f"Recorded {record.claps} claps for {record.href}")
        return self._count(record.href)

    async def get_claps(self, href: str) -> Dict[str, ClapCount]:
        return {href: self._count(href)}

    async def get_dashboard(self, id: str) -> Optional[Dashboard]:
        return self._dashboards.get(id.lower())

    async def upsert_dashboard(self, dashboard: Dashboard) -> Dashboard:
        key = dashboard.id.lower()
        existing = self._dashboards.get(key)
        if existing:
            dashboard = existing.model_copy(update=dashboard.model_dump(exclude_unset=True))
        self._dashboards[key] = dashboard
        return dashboard

    def _count(self, href: str) -> ClapCount:
        return ClapCount(claps=self._claps.get(href, 0), clappers=len(self._clappers.get(href, ())))


# Global DAO instance
claps_dao: ClapsDAO = InMemoryClapsDAO()


def get_dao() -> ClapsDAO:
    return claps_dao
