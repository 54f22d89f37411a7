"""Database migration/bootstrap command.

Ensures all tables exist for the configured backend. Idempotent, so it is safe
to run on every start.
"""

import os

from squares.core import Squares


def run():
    """Bootstrap / migrate the database schema."""
    backend = "DATABASE_URL" if os.environ.get("DATABASE_URL") else "SQLite"
    print(f"🗄️  Running database migrations ({backend})...")
    with Squares():
        print("✅ Migrations complete.")
