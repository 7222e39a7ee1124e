"""
Beer database store with SQLite backend.

Persists breweries and beers keyed by their festival ids with
upsert-by-id semantics and referential integrity (every beer belongs to
exactly one brewery). Provides:
- Atomic upserts, mutually exclusive per festival id
- Lazy, restartable, name-ordered beer sequences
- User star ratings and comments that survive re-syncs

Stale rows (ids missing from a newer feed) are kept; pruning them is a
separate, explicit operation this store does not perform.
"""

import logging
import math
import sqlite3
import threading
from typing import Iterable, Iterator, Optional, Union

from ..config import Config
from ..db import BaseRepository, ensure_schema
from ..errors import NotFound, ReferentialIntegrityError, StoreError
from ..models.entities import Beer, Brewery

logger = logging.getLogger(__name__)

_BEER_SELECT = """
    SELECT b.id, b.festival_id, b.name, b.abv, b.description, b.style,
           b.status, b.dispense, b.allergens, b.category,
           b.rating, b.user_comments,
           br.id AS brewery_row_id,
           br.festival_id AS brewery_festival_id,
           br.name AS brewery_name,
           br.description AS brewery_description
    FROM beers b
    JOIN breweries br ON br.id = b.brewery_id
"""

_NAME_ORDER = "ORDER BY b.name COLLATE CASEFOLD, b.festival_id"


class BeerSequence:
    """
    Lazy view of beers matching a query.

    Nothing is read until iteration starts. Each iteration runs the query
    afresh and walks a snapshot of the rows as they were at that moment,
    so later store writes never leak into an iteration in progress.
    """

    def __init__(self, store: "BeerStore", where: str = "", params: tuple = ()):
        self._store = store
        self._where = where
        self._params = params

    def __iter__(self) -> Iterator[Beer]:
        rows = self._store._query_beers(self._where, self._params)
        return (self._store._row_to_beer(row) for row in rows)

    def __len__(self) -> int:
        return self._store._count_beers(self._where, self._params)


class BeerStore(BaseRepository):
    """
    Thread-safe SQLite store for breweries and beers.

    Writes for the same festival id are serialized by striped in-process
    locks on top of SQLite's single-writer lock; each upsert is a single
    committed transaction. Readers use WAL and never block each other.
    """

    def __init__(self, db_path: Optional[str] = None, migrate: bool = True):
        """
        Initialize store.

        Args:
            db_path: Path to SQLite database. Defaults to Config.database_path()
            migrate: Run Alembic migrations to head before first use
        """
        super().__init__(db_path, use_wal=True, busy_timeout=Config.BUSY_TIMEOUT_SECONDS)
        self._row_locks = [threading.Lock() for _ in range(Config.ROW_LOCK_STRIPES)]
        if migrate:
            ensure_schema(self.db_path)

    # === Writes ===

    def upsert_brewery(self, festival_id: str, name: str, description: str = "") -> Brewery:
        """Create the brewery if absent, else update its name and description."""
        with self._row_lock("brewery", festival_id):
            try:
                with self._transaction() as cursor:
                    cursor.execute("""
                        INSERT INTO breweries (festival_id, name, description)
                        VALUES (?, ?, ?)
                        ON CONFLICT(festival_id) DO UPDATE SET
                            name = excluded.name,
                            description = excluded.description,
                            updated_at = CURRENT_TIMESTAMP
                    """, (festival_id, name, description or ""))
                    cursor.execute("""
                        SELECT id, festival_id, name, description
                        FROM breweries WHERE festival_id = ?
                    """, (festival_id,))
                    row = cursor.fetchone()
            except sqlite3.Error as e:
                raise self._store_error(f"Failed to upsert brewery '{festival_id}'", e) from e

        return self._row_to_brewery(row)

    def upsert_beer(
        self,
        festival_id: str,
        name: str,
        abv: float,
        description: str,
        style: str,
        status: str,
        dispense: str,
        brewery_ref: Union[Brewery, str],
        allergens: str = "",
        category: str = Config.DEFAULT_CATEGORY,
    ) -> Beer:
        """
        Create the beer if absent, else update its feed fields in place.

        The user rating and comments are never touched. ``brewery_ref`` (a Brewery or its
        festival id) must already be in the store.

        Raises:
            ReferentialIntegrityError: the brewery is unknown
            StoreError: the database is unavailable
        """
        if abv is None or not math.isfinite(abv) or abv < 0:
            raise ValueError(f"abv must be a finite number >= 0, got {abv!r}")

        brewery_id = brewery_ref.festival_id if isinstance(brewery_ref, Brewery) else brewery_ref

        with self._row_lock("beer", festival_id):
            try:
                with self._transaction() as cursor:
                    cursor.execute(
                        "SELECT id FROM breweries WHERE festival_id = ?", (brewery_id,)
                    )
                    brewery_row = cursor.fetchone()
                    if brewery_row is None:
                        raise ReferentialIntegrityError(brewery_id)

                    cursor.execute("""
                        INSERT INTO beers
                            (festival_id, brewery_id, name, abv, description, style, status, dispense,
                             allergens, category)
                        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                        ON CONFLICT(festival_id) DO UPDATE SET
                            brewery_id = excluded.brewery_id,
                            name = excluded.name,
                            abv = excluded.abv,
                            description = excluded.description,
                            style = excluded.style,
                            status = excluded.status,
                            dispense = excluded.dispense,
                            allergens = excluded.allergens,
                            category = excluded.category,
                            updated_at = CURRENT_TIMESTAMP
                    """, (
                        festival_id,
                        brewery_row["id"],
                        name,
                        float(abv),
                        description or "",
                        style or "",
                        status or "",
                        dispense or "",
                        allergens or "",
                        category or Config.DEFAULT_CATEGORY,
                    ))
                    cursor.execute(f"{_BEER_SELECT} WHERE b.festival_id = ?", (festival_id,))
                    row = cursor.fetchone()
            except sqlite3.Error as e:
                raise self._store_error(f"Failed to upsert beer '{festival_id}'", e) from e

        return self._row_to_beer(row)

    def set_rating(self, festival_id: str, stars: int) -> Beer:
        """Set the user's star rating (0 clears it). Raises NotFound."""
        if isinstance(stars, bool) or not isinstance(stars, int) or not 0 <= stars <= Config.MAX_RATING:
            raise ValueError(f"rating must be an integer 0-{Config.MAX_RATING}, got {stars!r}")

        with self._row_lock("beer", festival_id):
            try:
                with self._transaction() as cursor:
                    cursor.execute("""
                        UPDATE beers SET rating = ?, updated_at = CURRENT_TIMESTAMP
                        WHERE festival_id = ?
                    """, (stars, festival_id))
                    updated = cursor.rowcount
            except sqlite3.Error as e:
                raise self._store_error(f"Failed to rate beer '{festival_id}'", e) from e

        if updated == 0:
            raise NotFound("Beer", festival_id)
        return self.find_by_id(festival_id)

    def set_user_comments(self, festival_id: str, comments: str) -> Beer:
        """Replace the user's tasting notes ("" clears them). Raises NotFound."""
        if not isinstance(comments, str):
            raise ValueError(f"comments must be a string, got {type(comments).__name__}")

        with self._row_lock("beer", festival_id):
            try:
                with self._transaction() as cursor:
                    cursor.execute("""
                        UPDATE beers SET user_comments = ?, updated_at = CURRENT_TIMESTAMP
                        WHERE festival_id = ?
                    """, (comments, festival_id))
                    updated = cursor.rowcount
            except sqlite3.Error as e:
                raise self._store_error(f"Failed to save comments for beer '{festival_id}'", e) from e

        if updated == 0:
            raise NotFound("Beer", festival_id)
        return self.find_by_id(festival_id)

    # === Reads ===

    def count(self) -> int:
        """Number of beers in the store."""
        return self._count_beers("", ())

    def brewery_count(self) -> int:
        """Number of breweries in the store."""
        try:
            cursor = self._get_connection().execute("SELECT COUNT(*) FROM breweries")
            return cursor.fetchone()[0]
        except sqlite3.Error as e:
            raise self._store_error("Failed to count breweries", e) from e

    def all(self) -> BeerSequence:
        """All beers, name ascending (case-insensitive), ties by festival id."""
        return BeerSequence(self)

    def beers(
        self,
        search_text: str = "",
        styles_to_hide: Iterable[str] = (),
        statuses_to_hide: Iterable[str] = (),
        allergens_to_hide: Iterable[str] = (),
        category: Optional[str] = None,
        exclude_category: Optional[str] = None,
    ) -> BeerSequence:
        """
        Filtered beers in name order.

        Args:
            search_text: Case-insensitive substring of the beer name, style,
                         description or brewery name
            styles_to_hide: Exclude beers with any of these styles
            statuses_to_hide: Exclude beers with any of these statuses
            allergens_to_hide: Exclude beers whose allergens mention any of
                               these (case-insensitive)
            category: Only beers in this category
            exclude_category: Leave out beers in this category
        """
        clauses: list[str] = []
        params: list = []

        if search_text:
            clauses.append(
                "(CONTAINS_CI(b.name, ?) OR CONTAINS_CI(b.style, ?)"
                " OR CONTAINS_CI(b.description, ?) OR CONTAINS_CI(br.name, ?))"
            )
            params.extend([search_text] * 4)

        styles = sorted(set(styles_to_hide))
        if styles:
            clauses.append(f"b.style NOT IN ({', '.join('?' * len(styles))})")
            params.extend(styles)

        statuses = sorted(set(statuses_to_hide))
        if statuses:
            clauses.append(f"b.status NOT IN ({', '.join('?' * len(statuses))})")
            params.extend(statuses)

        for allergen in sorted(set(allergens_to_hide)):
            clauses.append("NOT CONTAINS_CI(b.allergens, ?)")
            params.append(allergen)

        if category is not None:
            clauses.append("b.category = ?")
            params.append(category)
        if exclude_category is not None:
            clauses.append("b.category != ?")
            params.append(exclude_category)

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        return BeerSequence(self, where, tuple(params))

    def rated_beers(self) -> BeerSequence:
        """Beers the user has given at least one star."""
        return BeerSequence(self, "WHERE b.rating > 0")

    def find_by_id(self, festival_id: str) -> Beer:
        """Find beer by festival id. Raises NotFound."""
        rows = self._query_beers("WHERE b.festival_id = ?", (festival_id,), order=False)
        if not rows:
            raise NotFound("Beer", festival_id)
        return self._row_to_beer(rows[0])

    def find_brewery(self, festival_id: str) -> Brewery:
        """Find brewery by festival id. Raises NotFound."""
        try:
            cursor = self._get_connection().execute("""
                SELECT id, festival_id, name, description
                FROM breweries WHERE festival_id = ?
            """, (festival_id,))
            row = cursor.fetchone()
        except sqlite3.Error as e:
            raise self._store_error(f"Failed to look up brewery '{festival_id}'", e) from e
        if row is None:
            raise NotFound("Brewery", festival_id)
        return self._row_to_brewery(row)

    def available_styles(self) -> list[str]:
        """Distinct non-empty beer styles, sorted case-insensitively."""
        try:
            cursor = self._get_connection().execute("""
                SELECT DISTINCT style FROM beers
                WHERE style != ''
                ORDER BY style COLLATE CASEFOLD
            """)
            return [row["style"] for row in cursor.fetchall()]
        except sqlite3.Error as e:
            raise self._store_error("Failed to get available styles", e) from e

    def available_allergens(self) -> list[str]:
        """
        Distinct allergens across all beers, sorted.

        Each beer stores a comma-separated list; entries are split, trimmed
        and capitalised so "gluten" and "Gluten" collapse into one.
        """
        try:
            cursor = self._get_connection().execute(
                "SELECT DISTINCT allergens FROM beers WHERE allergens != ''"
            )
            rows = cursor.fetchall()
        except sqlite3.Error as e:
            raise self._store_error("Failed to get available allergens", e) from e

        allergens = {
            part.strip().capitalize()
            for row in rows
            for part in row["allergens"].split(",")
            if part.strip()
        }
        return sorted(allergens)

    # === Internals ===

    def _row_lock(self, kind: str, festival_id: str) -> threading.Lock:
        return self._row_locks[hash((kind, festival_id)) % len(self._row_locks)]

    def _query_beers(self, where: str, params: tuple, order: bool = True) -> list[sqlite3.Row]:
        sql = f"{_BEER_SELECT} {where} {_NAME_ORDER if order else ''}"
        try:
            cursor = self._get_connection().execute(sql, params)
            return cursor.fetchall()
        except sqlite3.Error as e:
            raise self._store_error("Failed to query beers", e) from e

    def _count_beers(self, where: str, params: tuple) -> int:
        sql = f"SELECT COUNT(*) FROM beers b JOIN breweries br ON br.id = b.brewery_id {where}"
        try:
            cursor = self._get_connection().execute(sql, params)
            return cursor.fetchone()[0]
        except sqlite3.Error as e:
            raise self._store_error("Failed to count beers", e) from e

    @staticmethod
    def _store_error(message: str, cause: sqlite3.Error) -> StoreError:
        logger.error(f"{message}: {cause}")
        return StoreError(message, context={"cause": str(cause)})

    @staticmethod
    def _row_to_brewery(row: sqlite3.Row) -> Brewery:
        return Brewery(
            festival_id=row["festival_id"],
            name=row["name"],
            description=row["description"],
            id=row["id"],
        )

    @staticmethod
    def _row_to_beer(row: sqlite3.Row) -> Beer:
        return Beer(
            festival_id=row["festival_id"],
            name=row["name"],
            abv=row["abv"],
            brewery=Brewery(
                festival_id=row["brewery_festival_id"],
                name=row["brewery_name"],
                description=row["brewery_description"],
                id=row["brewery_row_id"],
            ),
            description=row["description"],
            style=row["style"],
            status=row["status"],
            dispense_method=row["dispense"],
            allergens=row["allergens"],
            category=row["category"],
            rating=row["rating"],
            user_comments=row["user_comments"],
            id=row["id"],
        )
