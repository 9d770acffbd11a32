#!/usr/bin/env python3
"""Migration script to create the waitlist and admin tables and seed the first admin.

Run from the repository root:

    python -m migrations.migrate_add_admin_users

Reads ADMIN_EMAIL, ADMIN_PASSWORD and (optionally) ADMIN_IS_SUPER from the
environment or .env.
"""

import os
import sys

from sqlalchemy import inspect
from sqlalchemy.orm import Session

# Loads .env before reading DATABASE_URL
from src.shared.auth.database import AdminUser, SessionLocal, User, engine, init_db
from src.shared.auth.identity import DatabaseIdentityProvider

REQUIRED_TABLES = (
    "users",
    "auth_sessions",
    "admin_users",
    "waitlist_employers",
    "waitlist_candidates",
    "site_settings",
)


def missing_tables():
    """Tables this service needs that the database does not have yet."""
    existing = set(inspect(engine).get_table_names())
    return [name for name in REQUIRED_TABLES if name not in existing]


def bootstrap_admin(db: Session, email: str, password: str, is_super_admin: bool = False) -> AdminUser:
    """
    Ensure ``email`` has an identity and an allow-list row.

    An existing identity keeps its password; an existing allow-list row only has
    its super-admin flag updated.
    """
    email = email.strip().lower()
    user = db.query(User).filter(User.email == email).first()
    if user is None:
        user = DatabaseIdentityProvider(db).create_user(email, password)
        print(f"✓ Created identity for {email}")
    else:
        print(f"✓ Identity for {email} already exists, password left unchanged")

    admin = db.query(AdminUser).filter(AdminUser.email == email).first()
    if admin is None:
        admin = AdminUser(email=email, user_id=user.id, is_super_admin=is_super_admin)
        db.add(admin)
        print(f"✓ Added {email} to the admin allow-list")
    else:
        admin.user_id = user.id
        admin.is_super_admin = is_super_admin
        print(f"✓ {email} already on the admin allow-list, flags updated")
    db.commit()
    db.refresh(admin)
    return admin


def run_migration():
    print("Running migration to create waitlist and admin tables...")
    print(f"Database: {engine.url.host}:{engine.url.port}/{engine.url.database}")

    missing = missing_tables()
    if missing:
        print(f"Creating tables: {', '.join(missing)}")
        init_db()
        print("✓ Tables created.")
    else:
        print("✓ All tables already exist.")

    email = os.environ.get("ADMIN_EMAIL")
    password = os.environ.get("ADMIN_PASSWORD")
    if not email or not password:
        print("ADMIN_EMAIL / ADMIN_PASSWORD not set, skipping admin bootstrap.")
    else:
        is_super = os.environ.get("ADMIN_IS_SUPER", "false").lower() in ("1", "true", "yes")
        db = SessionLocal()
        try:
            bootstrap_admin(db, email, password, is_super)
        finally:
            db.close()

    print("\n✓ Migration completed successfully!")


if __name__ == "__main__":
    try:
        run_migration()
    except Exception as e:
        print(f"ERROR: migration failed: {e}")
        sys.exit(1)
