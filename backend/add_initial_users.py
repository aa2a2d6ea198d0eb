"""
Script to add initial users to the database
Run this once after setup; it prints a bearer token per user for local testing
"""

import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from investment_tracker.db.database import SessionLocal, init_db
from investment_tracker.models.user import User, UserRole
from investment_tracker.core.auth import create_user_token

# Initial users to add
INITIAL_USERS = [
    {
        "email": "admin@investment-tracker.local",
        "name": "Support Admin",
        "role": UserRole.ADMIN,
    },
    {
        "email": "investor@investment-tracker.local",
        "name": "Demo Investor",
        "role": UserRole.USER,
    },
]


def add_initial_users():
    """Add initial users to the database"""
    db = SessionLocal()

    try:
        # Initialize database (creates tables if they don't exist)
        init_db()
        print("Database initialized")

        added_count = 0
        updated_count = 0

        for user_data in INITIAL_USERS:
            email = user_data["email"]

            existing_user = db.query(User).filter(User.email == email).first()

            if existing_user:
                if existing_user.role != user_data["role"]:
                    existing_user.role = user_data["role"]
                    updated_count += 1
                    print(f"Updated role for user: {email}")
                else:
                    print(f"User already exists: {email}")
            else:
                db.add(User(email=email, name=user_data["name"], role=user_data["role"]))
                added_count += 1
                print(f"Added user: {email} ({user_data['role'].value})")

        db.commit()
        print(f"\nMigration complete: {added_count} users added, {updated_count} users updated")

        print("\nBearer tokens:")
        for user in db.query(User).filter(User.email.in_([u["email"] for u in INITIAL_USERS])).all():
            print(f"  {user.email}: {create_user_token(user)}")

    except Exception as e:
        db.rollback()
        print(f"Error adding users: {e}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    print("Adding initial users to database...")
    add_initial_users()
    print("Done!")
