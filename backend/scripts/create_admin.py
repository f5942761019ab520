"""CLI script to bootstrap an admin account in the backend DB.

Admin management endpoints require a signed-in admin, so the first
account has to be created out of band.

Usage: python scripts/create_admin.py USERNAME EMAIL [--password PASSWORD]
"""
import sys
import argparse
import getpass
import pathlib
# Ensure `backend/` is on sys.path so `eduverse` package imports work when running this script directly
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
from pydantic import ValidationError
from sqlmodel import Session
from eduverse.database import engine, create_db_and_tables
from eduverse import services
from eduverse.schemas import AdminIn


def main(username: str, email: str, password: str) -> int:
    """Create the admin and print the outcome; returns a process exit code."""
    try:
        dto = AdminIn(username=username, email=email, password=password)
    except ValidationError as e:
        problems = "; ".join(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors())
        print(f'Could not create admin: {problems}')
        return 1
    create_db_and_tables()
    with Session(engine) as session:
        result = services.AdminService(session).create(dto)
    if not result.ok:
        print(f'Could not create admin: {result.detail}')
        return 1
    print(f"Created admin '{username}' with ID: {result.value.id}")
    return 0


if __name__ == '__main__':
    parser = argparse.ArgumentParser()
    parser.add_argument('username')
    parser.add_argument('email')
    parser.add_argument('--password', help='Prompted for when omitted')
    args = parser.parse_args()
    sys.exit(main(args.username, args.email, args.password or getpass.getpass('Password: ')))
