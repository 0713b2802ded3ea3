# Register the SQLModel tables at test discovery time, before any test
# database is created
from app.models.simulation import Simulation  # noqa: F401
from app.models.vote import Vote  # noqa: F401
