"""Load the reference dealers-by-brand list into the dealers table."""

from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

from orderflow.database import Base, SessionLocal, engine  # noqa: E402
from orderflow.services.seed import seed_dealers  # noqa: E402


def main() -> None:
    Base.metadata.create_all(bind=engine)
    with SessionLocal() as session:
        stats = seed_dealers(session)
    print(f"Created {stats.created} dealers, skipped {stats.skipped} existing.")


if __name__ == "__main__":
    main()
