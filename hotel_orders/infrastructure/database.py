from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

Base = declarative_base()


def make_engine(database_url: str) -> Engine:
    """Build the process-wide engine. Called once by the composition root."""
    kwargs = {"pool_pre_ping": True}
    if database_url.startswith("sqlite"):
        # SQLite connections are shared by FastAPI's threadpool workers
        kwargs = {"connect_args": {"check_same_thread": False}}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
    return create_engine(database_url, **kwargs)


def make_session_factory(engine: Engine) -> sessionmaker:
    # Objects stay readable after commit; repositories hand them back detached
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
