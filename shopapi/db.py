from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker, declarative_base

Base = declarative_base()


class Database:
    """Owns the engine and session factory for one application instance.

    Created at startup, handed to request handlers through the ``get_db``
    dependency, and disposed at shutdown.
    """

    def __init__(self, url: str, **engine_kwargs):
        self.url = url
        connect_args = {}
        # For SQLite, enable check_same_thread=False for multithreading in FastAPI
        if url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine = create_engine(url, connect_args=connect_args, future=True, **engine_kwargs)

        # Ensure SQLite enforces foreign keys
        if url.startswith("sqlite"):
            @event.listens_for(self.engine, "connect")
            def set_sqlite_pragma(dbapi_connection, connection_record):
                cursor = dbapi_connection.cursor()
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.close()

        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine, future=True)

    def create_all(self):
        # Importing models registers the tables on Base.metadata
        from . import models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def session(self) -> Session:
        return self.SessionLocal()

    def close(self):
        self.engine.dispose()
