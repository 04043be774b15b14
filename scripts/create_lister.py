"""
scripts/create_lister.py

Create an owner or broker account straight in the database, for seeding an
environment before the frontend exists:

    python -m scripts.create_lister

You will be prompted for name, email, phone, role and password.
"""

import sys

from estatehub.core.database import SessionLocal, init_db
from estatehub.models.user import User, UserRole, LISTER_ROLES
from estatehub.utils.auth import get_password_hash


def create_lister():
    print("\n── Create Lister ─────────────────────────")

    name     = input("Full name:           ").strip()
    email    = input("Email:               ").strip().lower()
    phone    = input("Phone:               ").strip()
    role     = input("Role (owner/broker): ").strip().lower() or UserRole.OWNER.value
    password = input("Password:            ").strip()

    if not all([name, email, password]):
        print("Name, email and password are required.")
        sys.exit(1)

    if role not in {r.value for r in LISTER_ROLES}:
        print(f"Role must be one of: {', '.join(r.value for r in LISTER_ROLES)}")
        sys.exit(1)

    if len(password) < 6:
        print("Password must be at least 6 characters.")
        sys.exit(1)

    init_db()
    db = SessionLocal()
    try:
        if db.query(User).filter(User.email == email).first():
            print(f"Email '{email}' is already registered.")
            sys.exit(1)

        lister = User(
            name=name,
            email=email,
            phone=phone or None,
            password_hash=get_password_hash(password),
            role=UserRole(role),
            verified=True,
            is_active=True,
        )

        db.add(lister)
        db.commit()
        db.refresh(lister)

        print("\nLister created.")
        print(f"   ID:    {lister.id}")
        print(f"   Name:  {lister.name}")
        print(f"   Email: {lister.email}")
        print(f"   Role:  {lister.role.value}\n")

    except Exception as e:
        db.rollback()
        print(f"Failed: {e}")
        sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    create_lister()
