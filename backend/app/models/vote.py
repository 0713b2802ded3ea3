from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from app.models.simulation import Simulation


class Vote(SQLModel, table=True):
    __table_args__ = (
        # One vote per user per simulation
        SAUniqueConstraint("simulation_id", "user_id", name="uq_vote_simulation_user"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    simulation_id: str = Field(foreign_key="simulation.id", index=True)
    user_id: str
    created_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    simulation: Optional["Simulation"] = Relationship(back_populates="votes")
