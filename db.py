"""
Database initialization utilities.
"""
import sys
import argparse

from config import get_settings
from database import DatabaseManager


def migrate():
    """Create all database tables."""
    print("Creating database tables...")
    db_manager = DatabaseManager(get_settings())

    try:
        db_manager.create_tables()
        print("✓ Tables created")
    except Exception as e:
        print(f"Error during migration: {e}")
        raise
    finally:
        db_manager.close()


def check():
    """Verify the configured database is reachable."""
    db_manager = DatabaseManager(get_settings())
    try:
        healthy = db_manager.health_check()
    finally:
        db_manager.close()
    print("✓ Database reachable" if healthy else "✗ Database unreachable")
    return healthy


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Database management CLI")
    parser.add_argument("--migrate", action="store_true", help="Create database tables")
    parser.add_argument("--check", action="store_true", help="Check database connectivity")

    args = parser.parse_args()

    if args.migrate:
        migrate()
    elif args.check:
        sys.exit(0 if check() else 1)
    else:
        print("Usage:")
        print("  python db.py --migrate   # Create tables")
        print("  python db.py --check     # Check connectivity")
        sys.exit(1)
