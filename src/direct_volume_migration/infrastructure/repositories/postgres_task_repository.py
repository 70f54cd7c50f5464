"""PostgreSQL repository implementation for migration tasks."""

from __future__ import annotations

import asyncio
import json
from typing import Any

import asyncpg  # type: ignore[import-untyped]

from direct_volume_migration.domain.entities import MigrationTask, OwnerReference
from direct_volume_migration.domain.errors import ResourceConflictError
from direct_volume_migration.domain.ports import MigrationTaskRepository
from direct_volume_migration.domain.status_models import (
    MigrationTaskSpecModel,
    MigrationTaskStatusModel,
)

_SELECT_COLUMNS = """
    namespace,
    name,
    uid,
    resource_version,
    owner_references,
    spec,
    status
"""


class PostgresMigrationTaskRepository(MigrationTaskRepository):
    """Migration task repository backed by PostgreSQL."""

    def __init__(
        self,
        dsn: str,
        min_pool_size: int = 1,
        max_pool_size: int = 10,
    ) -> None:
        self._dsn = dsn
        self._min_pool_size = min_pool_size
        self._max_pool_size = max_pool_size
        self._pool: asyncpg.Pool | None = None
        self._pool_lock = asyncio.Lock()

    async def get(self, namespace: str, name: str) -> MigrationTask | None:
        """Return by namespace and name."""

        pool = await self._get_pool()
        row = await pool.fetchrow(
            f"SELECT {_SELECT_COLUMNS} FROM migration_tasks WHERE namespace = $1 AND name = $2",
            namespace,
            name,
        )
        if row is None:
            return None
        return self._to_entity(row)

    async def list_tasks(self) -> list[MigrationTask]:
        """Return all tasks."""

        pool = await self._get_pool()
        rows = await pool.fetch(
            f"SELECT {_SELECT_COLUMNS} FROM migration_tasks ORDER BY namespace ASC, name ASC",
        )
        return [self._to_entity(row) for row in rows]

    async def create(self, task: MigrationTask) -> MigrationTask:
        """Insert a new task at version 1."""

        pool = await self._get_pool()
        row = await pool.fetchrow(
            f"""
            INSERT INTO migration_tasks (
                namespace,
                name,
                uid,
                resource_version,
                owner_references,
                spec,
                status
            ) VALUES (
                $1, $2, $3, 1, $4::jsonb, $5::jsonb, $6::jsonb
            )
            ON CONFLICT (namespace, name) DO NOTHING
            RETURNING {_SELECT_COLUMNS}
            """,
            task.namespace,
            task.name,
            task.uid,
            self._encode_owners(task.owner_references),
            self._encode_spec(task),
            self._encode_status(task),
        )
        if row is None:
            raise ResourceConflictError(f"Migration task '{task.key}' already exists.")
        return self._to_entity(row)

    async def update_status(self, task: MigrationTask) -> MigrationTask:
        """Write status only if the stored version matches."""

        return await self._conditional_update("status", self._encode_status(task), task)

    async def update_spec(self, task: MigrationTask) -> MigrationTask:
        """Write spec only if the stored version matches."""

        return await self._conditional_update("spec", self._encode_spec(task), task)

    async def close(self) -> None:
        """Close the connection pool."""

        pool = self._pool
        self._pool = None
        if pool is not None:
            await pool.close()

    async def _conditional_update(
        self,
        column: str,
        payload: str,
        task: MigrationTask,
    ) -> MigrationTask:
        pool = await self._get_pool()
        row = await pool.fetchrow(
            f"""
            UPDATE migration_tasks
            SET
                {column} = $4::jsonb,
                resource_version = resource_version + 1,
                updated_at = NOW()
            WHERE namespace = $1
              AND name = $2
              AND resource_version = $3
            RETURNING {_SELECT_COLUMNS}
            """,
            task.namespace,
            task.name,
            task.resource_version,
            payload,
        )
        if row is None:
            raise ResourceConflictError(
                f"Migration task '{task.key}' was modified or deleted since version "
                f"{task.resource_version}."
            )
        return self._to_entity(row)

    async def _get_pool(self) -> asyncpg.Pool:
        if self._pool is not None:
            return self._pool

        async with self._pool_lock:
            if self._pool is None:
                pool = await asyncpg.create_pool(
                    dsn=self._dsn,
                    min_size=self._min_pool_size,
                    max_size=self._max_pool_size,
                )
                await self._ensure_schema(pool)
                self._pool = pool
        assert self._pool is not None
        return self._pool

    async def _ensure_schema(self, pool: asyncpg.Pool) -> None:
        await pool.execute(
            """
            CREATE TABLE IF NOT EXISTS migration_tasks (
                namespace TEXT NOT NULL,
                name TEXT NOT NULL,
                uid TEXT UNIQUE NOT NULL,
                resource_version BIGINT NOT NULL,
                owner_references JSONB NOT NULL DEFAULT '[]'::jsonb,
                spec JSONB NOT NULL,
                status JSONB NOT NULL,
                created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
                updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
                PRIMARY KEY (namespace, name)
            )
            """
        )

    def _encode_owners(self, owners: list[OwnerReference]) -> str:
        return json.dumps(
            [{"kind": owner.kind, "name": owner.name, "uid": owner.uid} for owner in owners]
        )

    def _encode_spec(self, task: MigrationTask) -> str:
        return MigrationTaskSpecModel.from_entity(task.spec).model_dump_json(by_alias=True)

    def _encode_status(self, task: MigrationTask) -> str:
        return MigrationTaskStatusModel.from_entity(task.status).model_dump_json(by_alias=True)

    def _to_entity(self, row: asyncpg.Record) -> MigrationTask:
        owners = self._decode_json_field(row["owner_references"]) or []
        if not isinstance(owners, list):
            raise TypeError(f"Expected list payload for owner references, got {type(owners)!r}.")
        return MigrationTask(
            name=str(row["name"]),
            namespace=str(row["namespace"]),
            uid=str(row["uid"]),
            resource_version=int(row["resource_version"]),
            owner_references=[
                OwnerReference(kind=str(item["kind"]), name=str(item["name"]), uid=str(item["uid"]))
                for item in owners
            ],
            spec=MigrationTaskSpecModel.model_validate(
                self._decode_json_field(row["spec"])
            ).to_entity(),
            status=MigrationTaskStatusModel.model_validate(
                self._decode_json_field(row["status"])
            ).to_entity(),
        )

    def _decode_json_field(self, value: object) -> Any:
        if value is None:
            return None
        if isinstance(value, str):
            return json.loads(value)
        return value


__all__ = ["PostgresMigrationTaskRepository"]
