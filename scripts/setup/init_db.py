"""
Initialize database — creates all tables and seeds default statuses.
Run once before first launch, or after adding new models.
Usage: python scripts/setup/init_db.py
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from app.database import SessionLocal, create_tables, engine
from app.config import settings
from app.models.status_value import StatusValue
from sqlalchemy import text

DEFAULT_TRUCK_STATUSES = [
    ("On Route", "#6b7280"),
    ("In Yard", "#3b82f6"),
    ("Staged", "#8b5cf6"),
    ("Loading", "#f59e0b"),
    ("Loaded", "#22c55e"),
    ("Gap", "#374151"),
    ("Out", "#ef4444"),
]


def seed_statuses():
    db = SessionLocal()
    try:
        added = 0
        for order, (name, color) in enumerate(DEFAULT_TRUCK_STATUSES, start=1):
            if db.query(StatusValue).filter(StatusValue.status_name == name).first():
                continue
            db.add(StatusValue(status_name=name, status_color=color, sort_order=order, is_active=True))
            added += 1
        db.commit()
        return added
    finally:
        db.close()


def main():
    print("🗄️  Badger DB Initialization")
    print("=" * 40)
    print(f"📡 Database: {settings.DATABASE_URL}")

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        print("✅ Database connection OK")
    except Exception as e:
        print(f"❌ Cannot connect to database: {e}")
        print("\nMake sure PostgreSQL is running:")
        print("  docker-compose up -d db")
        print("  # or: sudo systemctl start postgresql")
        sys.exit(1)

    print("\n📋 Creating tables...")
    create_tables()
    print("✅ All tables created")

    added = seed_statuses()
    print(f"✅ Seeded {added} truck status(es) (default for new trucks: {settings.DEFAULT_TRUCK_STATUS})")

    print("\n🎉 Database ready! You can now start the backend:")
    print("   uvicorn app.main:app --host 0.0.0.0 --port 8080 --reload")


if __name__ == "__main__":
    main()
