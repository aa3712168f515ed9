from __future__ import annotations

from graveyard.core.extensions import db
from graveyard.core.models import Grave, GraveStatus, Plot


class GraveInventory:
    """Plot and grave lookups for the burial and maintenance flows."""

    def plots(self) -> list[Plot]:
        return Plot.query.order_by(Plot.name.asc(), Plot.id.asc()).all()

    def graves_for_plot(self, plot_id: int, available_only: bool = False) -> list[Grave]:
        query = Grave.query.filter_by(plot_id=plot_id)
        if available_only:
            query = query.filter_by(status=GraveStatus.AVAILABLE)
        return query.order_by(Grave.number.asc()).all()

    def grave(self, grave_id: int) -> Grave | None:
        return db.session.get(Grave, grave_id)

    def reserve(self, grave_id: int, reserved_by: str) -> Grave:
        grave = self.grave(grave_id)
        if grave is None:
            raise ValueError("Grave not found")
        grave.status = GraveStatus.UNAVAILABLE
        grave.reserved_by = reserved_by
        db.session.commit()
        return grave
