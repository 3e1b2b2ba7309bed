import os
import sys
from pathlib import Path

# Ensure repo root is on sys.path when running as a script.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.fellowship.db import build_engine, make_sessionmaker
from app.fellowship.modules.users.service import seed_admin


def seed_only(*, database_url: str | None = None) -> None:
    """
    Seed the bootstrap system_admin in an idempotent way.
    Does nothing once any account exists (never overwrites a password).
    """
    admin_username = (os.environ.get("ADMIN_USERNAME") or "admin").strip()
    admin_password = os.environ.get("ADMIN_PASSWORD") or "admin"

    db_url = (database_url or os.environ.get("DATABASE_URL") or "sqlite:///fellowship.db").strip()

    # Direct engine/session so this can run in release without building the Flask app.
    engine = build_engine(db_url)
    s = make_sessionmaker(engine)()
    try:
        user = seed_admin(s, admin_username, admin_password)
        s.commit()
    except Exception:
        s.rollback()
        raise
    finally:
        s.close()
        engine.dispose()

    if user is None:
        print("Users already exist; admin seed skipped.")
        return
    print("Initialized database (seed_only).")
    print(f"Admin username: {admin_username}")
    print("Admin password: (from ADMIN_PASSWORD)")


def main() -> None:
    seed_only(database_url=None)


if __name__ == "__main__":
    main()
