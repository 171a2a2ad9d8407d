"""Create all database tables from ORM models."""

from sqlalchemy import Engine

from db.models import Base
from db.session import engine as default_engine
from db.session import sqlite_file_path


def init_db(engine: Engine = default_engine) -> None:
    db_file = sqlite_file_path(str(engine.url))
    if db_file is not None:
        db_file.parent.mkdir(parents=True, exist_ok=True)
    Base.metadata.create_all(bind=engine)


if __name__ == "__main__":
    init_db()
    print("DB schema created")
