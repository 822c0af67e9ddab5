from __future__ import annotations

import logging
from typing import Callable

from sqlalchemy import desc, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from vendorhub.canonical.snapshot import EMPTY_SCHEMA, SchemaSnapshot
from vendorhub.core.errors import NotFound, StaleSchemaError
from vendorhub.models.form_schema_version import FormSchemaVersion
from vendorhub.services.audit import audit

log = logging.getLogger(__name__)


async def latest_version(db: AsyncSession) -> int:
    v = (await db.execute(select(func.max(FormSchemaVersion.version)))).scalar_one_or_none()
    return v or 0


async def load_schema(db: AsyncSession, *, version: int | None = None) -> SchemaSnapshot:
    """
    Latest snapshot, or a specific historical one. Version 0 is the empty
    schema and is never stored.
    """
    stmt = select(FormSchemaVersion)
    if version is None:
        stmt = stmt.order_by(desc(FormSchemaVersion.version)).limit(1)
    elif version == 0:
        return EMPTY_SCHEMA
    else:
        stmt = stmt.where(FormSchemaVersion.version == version)

    row = (await db.execute(stmt)).scalar_one_or_none()
    if row is None:
        if version is None:
            return EMPTY_SCHEMA
        raise NotFound("schema_version", str(version))
    return SchemaSnapshot.model_validate(row.document)


async def save_schema(
    db: AsyncSession,
    snapshot: SchemaSnapshot,
    *,
    actor: str | None,
    change_note: str | None = None,
) -> SchemaSnapshot:
    """
    Append a snapshot as the next version. If another writer already stored
    that version, the caller's view is stale.
    """
    current = await latest_version(db)
    if snapshot.version != current + 1:
        raise StaleSchemaError(snapshot.version - 1, current)

    db.add(FormSchemaVersion(
        version=snapshot.version,
        document=snapshot.to_document(),
        change_note=change_note,
        created_by=actor,
    ))
    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        log.warning("schema version %s written concurrently", snapshot.version)
        raise StaleSchemaError(snapshot.version - 1, snapshot.version) from e
    return snapshot


async def apply_schema_mutation(
    db: AsyncSession,
    mutate: Callable[[SchemaSnapshot], SchemaSnapshot],
    *,
    actor: str | None,
    action: str,
    detail: dict | None = None,
) -> SchemaSnapshot:
    """
    Load the latest snapshot, run a schema_store operation on it, store the
    result and audit it. The operation carries its own expected_version.
    """
    current = await load_schema(db)
    new = mutate(current)
    await save_schema(db, new, actor=actor, change_note=action)
    await audit(
        db,
        actor=actor,
        action=action,
        target_type="form_schema",
        target_id=str(new.version),
        detail={"from_version": current.version, **(detail or {})},
    )
    return new
