#!/usr/bin/env python
"""
Storage initialization and account script

Usage:
    python scripts/init_db.py init                 # Create tables (sql backend) and the bootstrap admin
    python scripts/init_db.py seed <records.json>  # Import test records from a JSON list
    python scripts/init_db.py create-user          # Create a staff or admin account
"""
import json
import sys
from datetime import datetime, timezone
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))


def init_storage():
    """Build the app once; the factory creates tables and the admin account"""
    from portal import create_app

    app = create_app()
    print(f"✓ Storage initialized ({app.config['STORAGE_BACKEND']} backend)")


def seed_records(path):
    """Import test records; each JSON object becomes one document"""
    from portal import create_app
    from portal.services.repository import get_repository

    records = json.loads(Path(path).read_text(encoding='utf-8'))
    if not isinstance(records, list):
        print("❌ Expected a JSON list of test records")
        sys.exit(1)

    app = create_app()
    with app.app_context():
        repository = get_repository()
        for record in records:
            repository.add_test(record)
    print(f"✓ Imported {len(records)} test records")


def create_user():
    """Create a staff or admin account"""
    from portal import create_app
    from portal.models.user import User
    from portal.services.repository import get_repository

    app = create_app()
    with app.app_context():
        repository = get_repository()
        email = input("Email: ").strip().lower()
        if not email:
            print("❌ Email cannot be empty")
            return

        if repository.find_user_by_email(email):
            print(f"❌ User '{email}' already exists")
            return

        name = input("Full Name: ").strip()
        password = input("Password: ").strip()

        if not password:
            print("❌ Password cannot be empty")
            return

        print("\nAvailable roles:")
        print("  1. admin - Full portal access")
        print("  2. staff - Dashboard and reports")

        role_choice = input("Select role (1-2) [default: 2]: ").strip()
        role = {'1': 'admin', '2': 'staff'}.get(role_choice, 'staff')

        user = User(
            id=None,
            email=email,
            name=name or email,
            role=role,
            created_at=datetime.now(timezone.utc).isoformat()
        )
        user.set_password(password)
        repository.create_user(user.to_document())

        print(f"✓ User '{email}' created successfully with role '{role}'")


def main():
    """Main entry point"""
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)

    command = sys.argv[1].lower()

    if command == 'init':
        init_storage()
    elif command == 'seed' and len(sys.argv) > 2:
        seed_records(sys.argv[2])
    elif command == 'create-user':
        create_user()
    else:
        print(f"❌ Unknown command: {command}")
        print(__doc__)
        sys.exit(1)


if __name__ == '__main__':
    main()
