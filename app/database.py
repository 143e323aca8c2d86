# app/database.py
from sqlmodel import SQLModel, create_engine, Session

from app.core.config import get_settings

settings = get_settings()

# ---------------------------------------------------------
# Local storage connection
#
# The ledger is a single-user, single-device store: one SQLite file
# per storage location. check_same_thread=False lets FastAPI's
# threadpool reuse connections; there is only ever one writer.
# ---------------------------------------------------------

db_url = settings.DATABASE_URL

connect_args: dict = {}
if db_url.startswith("sqlite"):
    connect_args["check_same_thread"] = False

engine = create_engine(
    db_url,
    echo=False,        # set to True if you want to debug SQL queries
    pool_pre_ping=True,
    connect_args=connect_args,
)


def create_db_and_tables() -> None:
    """
    Create all tables defined in SQLModel metadata if they do not exist.

    This is called once on application startup.
    """
    SQLModel.metadata.create_all(engine)


def new_session() -> Session:
    """
    Session factory used by the ledger for its write-through persistence.
    """
    return Session(engine)
