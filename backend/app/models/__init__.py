from app.models.simulation import Simulation
from app.models.vote import Vote

__all__ = [
    "Simulation",
    "Vote",
]
