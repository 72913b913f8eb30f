from sqlmodel import SQLModel, create_engine, Session
from storefront.core.config import settings

def _connect_args(url: str) -> dict:
    # check_same_thread is needed for SQLite, FastAPI serves sync routes from a threadpool
    return {"check_same_thread": False} if url.startswith("sqlite") else {}

engine = create_engine(
    settings.DATABASE_URL,
    connect_args=_connect_args(settings.DATABASE_URL),
    pool_pre_ping=True,
)

def get_session():
    with Session(engine) as session:
        yield session

def create_db_and_tables():
    # Registers every table on SQLModel.metadata, including those the caller never imported
    import storefront.models  # noqa: F401
    SQLModel.metadata.create_all(engine)
