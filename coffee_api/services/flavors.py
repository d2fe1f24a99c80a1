"""Flavor lookup-or-create.

Flavors are referenced by name from the API. `flavor.name` is unique, and new
names are inserted with ON CONFLICT DO NOTHING so two requests introducing the
same flavor at once end up sharing one row instead of racing into duplicates.
Nothing here commits; rows become durable with the owning coffee's transaction.
"""

from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from ..models import Flavor

_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def _find_by_name(db: Session, name: str) -> Optional[Flavor]:
    return db.scalars(select(Flavor).where(Flavor.name == name)).first()


def preload_flavor(db: Session, name: str) -> Flavor:
    """Return the Flavor called `name` (exact, case-sensitive), creating it if needed."""
    existing = _find_by_name(db, name)
    if existing:
        return existing

    insert = _UPSERT_INSERTS.get(db.get_bind().dialect.name)
    if insert is None:
        # No upsert support: persisted through the coffee's save-update cascade
        return Flavor(name=name)

    db.execute(
        insert(Flavor)
        .values(name=name)
        .on_conflict_do_nothing(index_elements=[Flavor.name])
    )
    return _find_by_name(db, name)


def preload_flavors(db: Session, names: Iterable[str]) -> list[Flavor]:
    """Resolve names in order, ignoring repeats."""
    flavors = []
    seen = set()
    for name in names:
        if name in seen:
            continue
        seen.add(name)
        flavors.append(preload_flavor(db, name))
    return flavors
