# scripts/setup/init_db.py
"""
Initialize database — creates all tables, optionally seeds a city, its
default zone, an admin user with a session token and an organization.
Run once before first launch, or after adding new models.
Usage: python scripts/setup/init_db.py [--seed --city "Springfield" --admin admin@example.com]
"""

import argparse
import secrets
import sys
import os
from datetime import datetime, timedelta
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from sqlalchemy import text, inspect
from app.database import create_tables, engine, SessionLocal
from app.config import settings
from app.models import City, User, AuthSession, Organization, OrganizationMember
from app.services.zone_service import get_or_create_default_zone


def seed(city_name: str, admin_email: str):
    db = SessionLocal()
    try:
        city = db.query(City).filter(City.name == city_name).first()
        if not city:
            city = City(name=city_name)
            db.add(city)
            db.commit()
        zone, _ = get_or_create_default_zone(db, city.id)

        admin = db.query(User).filter(User.email == admin_email).first()
        if not admin:
            admin = User(name="Administrator", email=admin_email, city_id=city.id)
            db.add(admin)
            db.commit()

        org = db.query(Organization).filter(Organization.city_id == city.id).first()
        if not org:
            org = Organization(name=f"{city_name} Security", city_id=city.id)
            db.add(org)
            db.commit()
            db.add(OrganizationMember(organization_id=org.id, user_id=admin.id, role="OWNER"))

        token = secrets.token_urlsafe(32)
        db.add(AuthSession(session_token=token, user_id=admin.id,
                           expires=datetime.utcnow() + timedelta(days=30)))
        db.commit()

        print(f"   ✓ City         {city.name} ({city.id})")
        print(f"   ✓ Default zone {zone.name} ({zone.id})")
        print(f"   ✓ Admin        {admin.email}")
        print(f"   ✓ Organization {org.name} ({org.id})")
        print(f"   🔑 Session token (30 days): {token}")
    finally:
        db.close()


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--seed", action="store_true")
    parser.add_argument("--city", default="Demo City")
    parser.add_argument("--admin", default="admin@example.com")
    args = parser.parse_args()

    print("🗄️  CityWatch DB Initialization")
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
    tables = sorted(inspect(engine).get_table_names())
    print(f"✅ Tables in database ({len(tables)} total):")
    for t in tables:
        print(f"   ✓ {t}")

    if args.seed:
        print("\n🌱 Seeding...")
        seed(args.city, args.admin)

    print("\n🎉 Database ready! You can now start the backend:")
    print(f"   uvicorn app.main:app --host {settings.BACKEND_HOST} --port {settings.BACKEND_PORT} --reload")


if __name__ == "__main__":
    main()
