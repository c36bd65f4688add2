"""Create the gate pass tables without starting the API.

Usage:
    python -m gatepass.init_db
"""
import sys

from sqlalchemy.exc import SQLAlchemyError

from gatepass.main import create_tables


def main() -> None:
    try:
        create_tables()
    except SQLAlchemyError as exc:
        print("Table creation failed:", exc, file=sys.stderr)
        sys.exit(1)
    print("Tables created or already exist.")


if __name__ == "__main__":
    main()
