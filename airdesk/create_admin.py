# airdesk/create_admin.py
import asyncio
from getpass import getpass

from pydantic import ValidationError

from airdesk.config import Config
from airdesk.db import connect, ensure_indexes
from airdesk.errors import AppError
from airdesk.schemas.user import Role, UserCreate
from airdesk.services.users import create_admin


async def _create(username: str, email: str, password: str):
    db = connect(Config)
    await ensure_indexes(db)
    return await create_admin(db, Config, username, email, password)


def _describe(error: ValidationError) -> str:
    return "; ".join(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in error.errors())


def main():
    email = input("Admin email: ").strip().lower()
    username = input("Username: ").strip()
    password = getpass("Password: ")

    try:
        # Check the input before touching the database
        UserCreate(username=username, email=email, password=password, role=Role.ADMIN)
        user = asyncio.run(_create(username, email, password))
    except ValidationError as e:
        print(_describe(e))
        return
    except AppError as e:
        print(e.message)
        return
    print(f"Admin user {user['email']} created successfully.")


if __name__ == "__main__":
    main()
