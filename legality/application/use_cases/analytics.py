"""Analytics use case: dashboard counters across profiles, empresas, casos and tareas."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from legality.application.dtos.analytics import DashboardStats
from legality.domain.enums import CaseStatus, ProfileRole, TaskStatus
from legality.domain.exceptions import LegalityException

if TYPE_CHECKING:
    from legality.application.interfaces.repositories import (
        ICaseRepository,
        IEmpresaRepository,
        IProfileRepository,
        ITaskRepository,
    )
    from legality.application.use_cases._common import ChangeNotifier

logger = logging.getLogger(__name__)


class DashboardStatsAggregator:
    """Compute DashboardStats from independent count queries.

    A failing count reports 0 and never fails the others. Results are cached
    per user id until a mutation on an attached use case invalidates them.
    """

    def __init__(
        self,
        profiles: "IProfileRepository",
        empresas: "IEmpresaRepository",
        cases: "ICaseRepository",
        tasks: "ITaskRepository",
    ) -> None:
        self.profiles = profiles
        self.empresas = empresas
        self.cases = cases
        self.tasks = tasks
        self._cache: dict[str | None, DashboardStats] = {}

    def attach(self, source: "ChangeNotifier") -> None:
        """Recompute after every successful mutation on source (case engine or admin directory)."""
        source.add_listener(self.invalidate)

    def invalidate(self, action: str | None = None) -> None:
        if self._cache:
            logger.debug("Dashboard stats invalidated by %s", action or "request")
        self._cache.clear()

    async def _count(self, name: str, call: Callable[[], Awaitable[int]]) -> int:
        try:
            return int(await call())
        except LegalityException as exc:
            logger.warning("Stats counter %s failed (%s); reporting 0", name, exc.error_code)
            return 0

    async def compute(self, user_id: str | None = None, *, use_cache: bool = True) -> DashboardStats:
        """Return all counters; mis_tareas_pendientes is only queried when user_id is given."""
        if use_cache and user_id in self._cache:
            return self._cache[user_id]

        counters: dict[str, Callable[[], Awaitable[int]]] = {
            "total_usuarios": lambda: self.profiles.count(),
            "usuarios_pendientes": lambda: self.profiles.count(role=ProfileRole.PENDING),
            "total_empresas": lambda: self.empresas.count(),
            "total_casos": lambda: self.cases.count(),
            "casos_activos": lambda: self.cases.count(estado=CaseStatus.ACTIVO),
            "total_tareas": lambda: self.tasks.count(),
            "tareas_pendientes": lambda: self.tasks.count(estado=TaskStatus.PENDIENTE),
        }
        if user_id:
            counters["mis_tareas_pendientes"] = lambda: self.tasks.count(
                estado=TaskStatus.PENDIENTE, asignado_a=user_id
            )
        values = await asyncio.gather(*(self._count(name, call) for name, call in counters.items()))
        counts = dict(zip(counters, values))

        # Subsets never exceed their totals, even when one of the pair failed.
        counts["tareas_pendientes"] = min(counts["tareas_pendientes"], counts["total_tareas"])
        counts["casos_activos"] = min(counts["casos_activos"], counts["total_casos"])
        counts["usuarios_pendientes"] = min(counts["usuarios_pendientes"], counts["total_usuarios"])
        if "mis_tareas_pendientes" in counts:
            counts["mis_tareas_pendientes"] = min(
                counts["mis_tareas_pendientes"], counts["tareas_pendientes"]
            )

        stats = DashboardStats(**counts)
        self._cache[user_id] = stats
        return stats
