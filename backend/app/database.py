import os
from pathlib import Path
from typing import Generator

from dotenv import load_dotenv
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./bracket.db")
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() in ("true", "1", "yes")


def build_engine(url: str, echo: bool = False) -> Engine:
    """SQLite files get their parent directory created; other URLs pass straight through."""
    connect_args = {}
    if url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
        db_path = url.replace("sqlite:///", "", 1)
        if db_path and ":memory:" not in db_path:
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    return create_engine(url, echo=echo, connect_args=connect_args)


engine: Engine = build_engine(DATABASE_URL, SQL_ECHO)


def get_session() -> Generator[Session, None, None]:
    """One session per request"""
    with Session(engine) as session:
        yield session


def init_db() -> None:
    """Create the simulation and vote tables"""
    # Models must be registered with SQLModel metadata before create_all
    from app.models.simulation import Simulation  # noqa: F401
    from app.models.vote import Vote  # noqa: F401

    SQLModel.metadata.create_all(engine)
