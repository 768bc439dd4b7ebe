"""
Script to create an Admin
Run this to create the first admin user
"""

import sys
import asyncio
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from fastapi import HTTPException

from app.auth import generate_random_password
from app.auth.password import MIN_PASSWORD_LENGTH
from app.database import database, connect_db, disconnect_db
from app.services.auth_service import auth_service
from app.utils.helpers import validate_email


async def create_admin(email: str, name: str, password: str = None, state: str = None):
    """
    Create an admin user

    Args:
        email: Admin email
        name: Admin full name
        password: Password (if None, will generate random)
        state: Optional state, used for nothing but the profile display
    """
    await connect_db()

    try:
        generated = password is None
        if generated:
            password = generate_random_password(12)

        await auth_service.ensure_unique_contact(email, None)

        async with database.transaction():
            created = await auth_service.create_user(
                role="ADMIN",
                email=email,
                password=password,
                name=name,
                state=state,
                is_verified=True,
                must_change_password=generated,
            )

        print("[OK] Admin created successfully!")
        print(f"   Unique ID: {created['unique_id']}")
        print(f"   Email: {email}")
        print(f"   Name: {name}")

        if generated:
            print(f"   Password: {password}")
            print("   [!] IMPORTANT: Save this password! It must be changed on first login.")
        else:
            print("   Password: (custom password set)")

    except HTTPException as e:
        print(f"[ERROR] Could not create admin: {e.detail}")

    finally:
        await disconnect_db()


async def main():
    """Main function"""
    print("\n" + "=" * 60)
    print("CREATE ADMIN")
    print("=" * 60 + "\n")

    email = input("Enter email: ").strip().lower()
    name = input("Enter full name: ").strip()

    if not validate_email(email):
        print("[ERROR] Invalid email address!")
        return

    use_custom = input("Set custom password? (y/n): ").strip().lower()

    if use_custom == 'y':
        password = input("Enter password: ").strip()
        confirm = input("Confirm password: ").strip()

        if password != confirm:
            print("[ERROR] Passwords do not match!")
            return

        if len(password) < MIN_PASSWORD_LENGTH:
            print(f"[ERROR] Password must be at least {MIN_PASSWORD_LENGTH} characters!")
            return
    else:
        password = None

    print("\n")
    await create_admin(email, name, password)
    print("\n")


if __name__ == "__main__":
    asyncio.run(main())
