# app/database.py
"""
Database connection, session management, and table creation.
Uses SQLAlchemy with PostgreSQL. All models are auto-imported here
so create_tables() creates every table in one call.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from app.config import settings

engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,          # Auto-reconnect if DB connection drops
    pool_size=10,
    max_overflow=20,
    echo=False,                  # Set True to log all SQL queries (debug only)
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """FastAPI dependency — yields a DB session and closes it after request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables():
    """
    Creates all DB tables on startup. Safe to call multiple times.
    Import all models here so SQLAlchemy knows about them.
    """
    # Dispatch board
    from app.models.status_value import StatusValue             # noqa
    from app.models.loading_door import LoadingDoor             # noqa
    from app.models.printroom_entry import PrintroomEntry       # noqa
    from app.models.staging_door import StagingDoor             # noqa
    from app.models.live_movement import LiveMovement           # noqa
    from app.models.automation_rule import AutomationRule       # noqa
    # Subscribers + notifications
    from app.models.profile import Profile                      # noqa
    from app.models.truck_subscription import TruckSubscription  # noqa
    from app.models.notification import Notification, NotificationPreference  # noqa

    Base.metadata.create_all(bind=engine)
