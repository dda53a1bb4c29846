# gymbook/db.py

from sqlmodel import SQLModel, create_engine, Session

from .config import get_settings


def make_engine(database_url: str):
    connect_args = {}
    if database_url.startswith("sqlite"):
        # required for SQLite + FastAPI
        connect_args["check_same_thread"] = False
    return create_engine(database_url, echo=False, connect_args=connect_args)


# Engine = connection to the database
engine = make_engine(get_settings().database_url)


def init_db(bind=None):
    # import so the tables register on SQLModel.metadata
    from . import models  # noqa: F401

    SQLModel.metadata.create_all(bind or engine)


# Dependency: one session per request
def get_session():
    with Session(engine) as session:
        yield session
