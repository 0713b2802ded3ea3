import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from sqlalchemy import JSON
from sqlmodel import Column, Field, Relationship, SQLModel

if TYPE_CHECKING:
    from app.models.vote import Vote


def _new_simulation_id() -> str:
    return uuid.uuid4().hex


class Simulation(SQLModel, table=True):
    id: str = Field(default_factory=_new_simulation_id, primary_key=True)
    name: Optional[str] = Field(default=None)

    # playoffSelections / groupPredictions / advancingThirdPlaceTeams / knockoutPredictions
    data: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))

    champion_team_id: str = Field(index=True)
    user_id: Optional[str] = Field(default=None, index=True)
    votes_count: int = Field(default=0, index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)
    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_column_kwargs={"onupdate": datetime.utcnow})

    # Relationships
    votes: List["Vote"] = Relationship(back_populates="simulation")
