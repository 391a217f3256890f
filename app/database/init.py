from config import DATABASE_URL

from sqlalchemy import create_engine, text
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker


class Base(DeclarativeBase):
    pass


connect_args = {}
if DATABASE_URL.startswith("sqlite"):
    # Request handlers run on a worker thread pool
    connect_args["check_same_thread"] = False

engine = create_engine(DATABASE_URL, connect_args=connect_args, pool_pre_ping=True)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def lock_for_write(db: Session) -> None:
    """
    Start the session's next statements inside a write-locked transaction.

    SQLite has no row locks and ignores FOR UPDATE, so the database write
    lock is taken up front and held until commit or rollback. Other engines
    rely on the caller's SELECT ... FOR UPDATE row locks.
    """
    if db.get_bind().dialect.name == "sqlite":
        db.execute(text("BEGIN IMMEDIATE"))
