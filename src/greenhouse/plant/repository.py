import logging
from contextlib import contextmanager
from typing import List

import psycopg
from psycopg import sql
from psycopg.errors import UniqueViolation
from psycopg.types.json import Jsonb

from greenhouse import db
from greenhouse.config import config
from greenhouse.plant.errors import ConflictError, NotFoundError, StorageError
from greenhouse.plant.models import Plant
from greenhouse.plant.store import PlantStore

logger = logging.getLogger(__name__)

COUNTERS_TABLE = "plant_id_counters"


class PlantRepository(PlantStore):
    """
    PlantStore over a PostgreSQL document collection.

    Each plant is one row holding its id and a JSONB document. A unique
    expression index on the document's name enforces name uniqueness, and
    ids come from an atomic per-collection counter row.
    """

    def __init__(self, collection: str = None):
        self.collection = collection or config.collection_name
        self._table = sql.Identifier(self.collection)
        self._name_index = f"{self.collection}_name_key"

    def ensure_collection(self) -> None:
        """Create the collection table, its name index and the id counter table if missing."""
        with self._storage_errors():
            with db.transaction() as cur:
                cur.execute(
                    sql.SQL(
                        "CREATE TABLE IF NOT EXISTS {} (id BIGINT PRIMARY KEY, document JSONB NOT NULL)"
                    ).format(self._table)
                )
                cur.execute(
                    sql.SQL("CREATE UNIQUE INDEX IF NOT EXISTS {} ON {} ((document->>'name'))").format(
                        sql.Identifier(self._name_index), self._table
                    )
                )
                cur.execute(
                    sql.SQL(
                        "CREATE TABLE IF NOT EXISTS {} (collection TEXT PRIMARY KEY, value BIGINT NOT NULL)"
                    ).format(sql.Identifier(COUNTERS_TABLE))
                )

    def list_all(self) -> List[Plant]:
        with self._storage_errors():
            rows = db.fetch_all(
                sql.SQL("SELECT id, document FROM {} ORDER BY id").format(self._table)
            )
            plants = [self._to_plant(row) for row in rows]
        logger.debug("Retrieved %d plants from %s", len(plants), self.collection)
        return plants

    def get_by_id(self, plant_id: int) -> Plant:
        with self._storage_errors():
            row = db.fetch_one(
                sql.SQL("SELECT id, document FROM {} WHERE id = %s").format(self._table),
                (plant_id,),
            )
            if row is None:
                raise NotFoundError(plant_id)
            return self._to_plant(row)

    def create(self, plant: Plant) -> int:
        with self._storage_errors(name=plant.name):
            with db.transaction() as cur:
                plant_id = self._next_id(cur)
                cur.execute(
                    sql.SQL("INSERT INTO {} (id, document) VALUES (%s, %s)").format(self._table),
                    (plant_id, Jsonb(plant.to_document())),
                )
        logger.debug("Inserted plant into %s: %s", self.collection, plant.with_id(plant_id))
        return plant_id

    def upsert(self, plant_id: int, plant: Plant) -> None:
        with self._storage_errors(name=plant.name):
            with db.transaction() as cur:
                # Counter first: create takes the same lock before its insert
                self._raise_counter(cur, plant_id)
                cur.execute(
                    sql.SQL(
                        """
                        INSERT INTO {} (id, document) VALUES (%s, %s)
                        ON CONFLICT (id) DO UPDATE SET document = EXCLUDED.document
                        """
                    ).format(self._table),
                    (plant_id, Jsonb(plant.to_document())),
                )
        logger.debug("Upserted plant into %s: %s", self.collection, plant.with_id(plant_id))

    def delete_by_id(self, plant_id: int) -> None:
        with self._storage_errors():
            deleted = db.execute(
                sql.SQL("DELETE FROM {} WHERE id = %s").format(self._table),
                (plant_id,),
            )
        logger.debug("Deleted plant %s from %s. Deleted count: %s", plant_id, self.collection, deleted)

    def close(self) -> None:
        """Close the shared connection pool."""
        db.close_pool()

    # Id allocation

    def _next_id(self, cur) -> int:
        """
        Advance and return the collection's id counter.

        The first allocation seeds the counter from the highest stored id, so
        an empty collection starts at 1. The counter row stays locked until the
        surrounding transaction ends, which serializes concurrent creates.
        """
        cur.execute(
            sql.SQL(
                """
                INSERT INTO {counters} (collection, value)
                VALUES (%s, (SELECT COALESCE(MAX(id), 0) + 1 FROM {table}))
                ON CONFLICT (collection) DO UPDATE SET value = {counters}.value + 1
                RETURNING value
                """
            ).format(counters=sql.Identifier(COUNTERS_TABLE), table=self._table),
            (self.collection,),
        )
        return cur.fetchone()["value"]

    def _raise_counter(self, cur, plant_id: int) -> None:
        """Keep the counter at or above an id written by upsert."""
        cur.execute(
            sql.SQL(
                """
                INSERT INTO {counters} (collection, value)
                VALUES (%s, GREATEST(%s, (SELECT COALESCE(MAX(id), 0) FROM {table})))
                ON CONFLICT (collection) DO UPDATE
                SET value = GREATEST({counters}.value, EXCLUDED.value)
                """
            ).format(counters=sql.Identifier(COUNTERS_TABLE), table=self._table),
            (self.collection, plant_id),
        )

    # Error classification

    @contextmanager
    def _storage_errors(self, name: str = None):
        """Translate driver errors into ConflictError or StorageError."""
        try:
            yield
        except UniqueViolation as exc:
            if exc.diag.constraint_name == self._name_index:
                raise ConflictError("name", name) from exc
            raise StorageError(f"unique violation in {self.collection}: {exc}") from exc
        except psycopg.Error as exc:
            raise StorageError(f"database error in {self.collection}: {exc}") from exc

    def _to_plant(self, row: dict) -> Plant:
        try:
            return Plant.from_document(row["id"], row["document"])
        except (KeyError, TypeError, AttributeError) as exc:
            raise StorageError(f"could not decode plant document {row.get('id')}") from exc
