"""
Catalog of known locations (listings with fixed coordinates).

Loaded once at startup and handed to the resolver as a read-only tuple.
Backed by a small SQLite file when one exists, else the built-in Nakuru catalog.
"""
import logging
import sqlite3
from pathlib import Path
from typing import List, Optional, Tuple

from makazi.models import Coordinate, KnownLocation

logger = logging.getLogger(__name__)

Catalog = Tuple[KnownLocation, ...]

# Reference listings near Nakuru
DEFAULT_CATALOG: Catalog = (
    KnownLocation(1, "Kabarak University Town Campus", Coordinate(-0.2838, 36.0725)),
    KnownLocation(2, "Hyrax Hill Museum", Coordinate(-0.2736, 36.1121)),
)


def get_conn(db_path: Path) -> sqlite3.Connection:
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row # row["title"] can be used instead of row[1]
    conn.execute("PRAGMA busy_timeout = 3000;")  # 3s wait if DB is locked without error
    return conn


def init_db(db_path: Path) -> None:
    """
    Known locations table.
    (id, title, latitude, longitude are required)
    """
    with get_conn(db_path) as conn:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS known_locations (
                id INTEGER PRIMARY KEY,
                title TEXT NOT NULL,
                latitude REAL NOT NULL,
                longitude REAL NOT NULL,

                active INTEGER DEFAULT 1,

                created_at TEXT DEFAULT CURRENT_TIMESTAMP,
                last_updated TEXT DEFAULT CURRENT_TIMESTAMP
            );
            """
        )
        conn.execute("CREATE INDEX IF NOT EXISTS idx_known_locations_active ON known_locations(active);")
        conn.commit()


def upsert_location(db_path: Path, location: KnownLocation, *, active: bool = True) -> None:
    title = (location.title or "").strip()
    if not title:
        raise ValueError("Known location upsert requires 'title'")

    row = {
        "id": location.id,
        "title": title,
        "latitude": location.coordinate.latitude,
        "longitude": location.coordinate.longitude,
        "active": int(active),
    }

    with get_conn(db_path) as conn:
        conn.execute(
            """
            INSERT INTO known_locations (id, title, latitude, longitude, active, last_updated)
            VALUES (:id, :title, :latitude, :longitude, :active, CURRENT_TIMESTAMP)
            ON CONFLICT(id) DO UPDATE SET
                title=excluded.title,
                latitude=excluded.latitude,
                longitude=excluded.longitude,
                active=excluded.active,
                last_updated=CURRENT_TIMESTAMP
            ;
            """,
            row,
        )
        conn.commit()


def _row_to_location(r: sqlite3.Row) -> Optional[KnownLocation]:
    coordinate = Coordinate.from_values(r["latitude"], r["longitude"])
    if coordinate is None:
        logger.warning("catalog_row_skipped id=%s reason=invalid_coordinates", r["id"])
        return None
    return KnownLocation(id=int(r["id"]), title=r["title"], coordinate=coordinate)


def load_catalog_from_db(db_path: Path) -> Catalog:
    with get_conn(db_path) as conn:
        rows = conn.execute(
            "SELECT id, title, latitude, longitude FROM known_locations WHERE active = 1 ORDER BY id;"
        ).fetchall()

    out: List[KnownLocation] = []
    for r in rows:
        location = _row_to_location(r)
        if location is not None:
            out.append(location)
    return tuple(out)


def load_catalog(db_path: Optional[Path] = None) -> Catalog:
    """
    SQLite catalog if the file exists, otherwise DEFAULT_CATALOG.
    Read errors are not swallowed: a broken catalog file should stop startup.
    """
    if db_path is None or not db_path.exists():
        logger.info("catalog_loaded source=default size=%d", len(DEFAULT_CATALOG))
        return DEFAULT_CATALOG

    catalog = load_catalog_from_db(db_path)
    logger.info("catalog_loaded source=%s size=%d", db_path, len(catalog))
    return catalog


def centroid(catalog: Catalog) -> Optional[Coordinate]:
    """Average point of the catalog, used to recover short plus codes. None for an empty catalog."""
    if not catalog:
        return None
    lat = sum(loc.coordinate.latitude for loc in catalog) / len(catalog)
    lng = sum(loc.coordinate.longitude for loc in catalog) / len(catalog)
    return Coordinate(lat, lng)


def count_locations(db_path: Path) -> int:
    with get_conn(db_path) as conn:
        row = conn.execute("SELECT COUNT(*) AS n FROM known_locations;").fetchone()
    return int(row["n"] if row else 0)


def seed_defaults(db_path: Path) -> int:
    init_db(db_path)
    for location in DEFAULT_CATALOG:
        upsert_location(db_path, location)
    return count_locations(db_path)
