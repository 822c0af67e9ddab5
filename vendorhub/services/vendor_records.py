from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import extract, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from vendorhub.canonical.vendor import VENDOR_STATUSES, VendorRecord
from vendorhub.core.errors import InvalidStateTransition, NotFound
from vendorhub.models.vendor import Vendor

log = logging.getLogger(__name__)


def to_record(row: Vendor) -> VendorRecord:
    return VendorRecord(
        id=row.id,
        vendor_type=row.vendor_type,
        status=row.status,
        latitude=row.latitude,
        longitude=row.longitude,
        created_at=row.created_at,
        updated_at=row.updated_at,
        agent_id=row.agent_id,
        form_data=dict(row.form_data or {}),
    )


async def _get_row(db: AsyncSession, vendor_id: str, *, for_update: bool = False) -> Vendor:
    stmt = select(Vendor).where(Vendor.id == vendor_id).execution_options(populate_existing=True)
    if for_update:
        stmt = stmt.with_for_update()
    row = (await db.execute(stmt)).scalar_one_or_none()
    if not row:
        raise NotFound("vendor", vendor_id)
    return row


async def load_vendor(db: AsyncSession, vendor_id: str, *, for_update: bool = False) -> VendorRecord:
    return to_record(await _get_row(db, vendor_id, for_update=for_update))


async def save_vendor_form_data(db: AsyncSession, vendor: VendorRecord, *, actor: str | None = None) -> VendorRecord:
    """
    Write back a complete form_data. The caller must have loaded `vendor`
    with for_update=True in the same transaction.
    """
    row = await _get_row(db, vendor.id)
    row.form_data = dict(vendor.form_data)
    row.updated_by = actor
    await db.flush()
    await db.refresh(row)
    return to_record(row)


async def create_vendor(
    db: AsyncSession,
    *,
    vendor_type: str | None,
    form_data: dict[str, Any],
    latitude: float | None = None,
    longitude: float | None = None,
    agent_id: str | None = None,
    actor: str | None = None,
) -> VendorRecord:
    """New applications always start out pending."""
    row = Vendor(
        vendor_type=vendor_type,
        status="pending",
        latitude=latitude,
        longitude=longitude,
        agent_id=agent_id,
        form_data=dict(form_data),
        created_by=actor,
        updated_by=actor,
    )
    db.add(row)
    await db.flush()
    await db.refresh(row)
    return to_record(row)


async def save_vendor_partial(
    db: AsyncSession,
    vendor_id: str,
    partial: dict[str, Any],
    *,
    actor: str | None = None,
) -> VendorRecord:
    """
    Key-wise overwrite of form_data. The row is locked for the merge so two
    partial updates touching different keys do not lose each other.
    """
    row = await _get_row(db, vendor_id, for_update=True)
    if not partial:
        return to_record(row)

    row.form_data = {**(row.form_data or {}), **partial}
    row.updated_by = actor
    await db.flush()
    await db.refresh(row)
    return to_record(row)


async def update_vendor_status(
    db: AsyncSession,
    vendor_id: str,
    status: str,
    *,
    actor: str | None = None,
) -> VendorRecord:
    """Application review: pending -> approved | rejected, once."""
    row = await _get_row(db, vendor_id)
    if status not in VENDOR_STATUSES or status == "pending":
        raise InvalidStateTransition("vendor", vendor_id, row.status, status)

    res = await db.execute(
        update(Vendor)
        .where(Vendor.id == vendor_id, Vendor.status == "pending")
        .values(status=status, updated_by=actor, updated_at=func.now())
        .execution_options(synchronize_session=False)
    )
    if res.rowcount != 1:
        current = (await db.execute(select(Vendor.status).where(Vendor.id == vendor_id))).scalar_one()
        raise InvalidStateTransition("vendor", vendor_id, current, status)

    log.info("vendor %s reviewed: %s by %s", vendor_id, status, actor)
    return await load_vendor(db, vendor_id)


def _filters(
    *,
    status: str | None,
    agent_id: str | None,
    city: str | None,
    search: str | None,
) -> list:
    conds = []
    if status:
        conds.append(Vendor.status == status.lower().strip())
    if agent_id:
        conds.append(Vendor.agent_id == agent_id)
    if city:
        conds.append(func.lower(Vendor.form_data["city"].as_string()) == city.lower().strip())
    if search:
        conds.append(func.lower(Vendor.form_data["restaurantName"].as_string()).contains(search.lower().strip()))
    return conds


async def list_vendors(
    db: AsyncSession,
    *,
    status: str | None = None,
    agent_id: str | None = None,
    city: str | None = None,
    search: str | None = None,
    limit: int = 50,
    offset: int = 0,
) -> tuple[list[VendorRecord], int]:
    conds = _filters(status=status, agent_id=agent_id, city=city, search=search)

    total = (await db.execute(select(func.count()).select_from(Vendor).where(*conds))).scalar_one()
    rows = (await db.execute(
        select(Vendor)
        .where(*conds)
        .order_by(Vendor.created_at.desc(), Vendor.id)
        .limit(limit)
        .offset(offset)
    )).scalars().all()
    return [to_record(r) for r in rows], total


async def vendor_summary(db: AsyncSession) -> dict[str, Any]:
    """Status counts plus applications per calendar month."""
    counts = {s: 0 for s in VENDOR_STATUSES}
    for status, n in (await db.execute(select(Vendor.status, func.count()).group_by(Vendor.status))).all():
        counts[status] = n

    year = extract("year", Vendor.created_at)
    month = extract("month", Vendor.created_at)
    monthly = (await db.execute(
        select(year.label("year"), month.label("month"), func.count().label("count"))
        .group_by(year, month)
        .order_by(year, month)
    )).all()

    return {
        "summary": {"total": sum(counts.values()), **counts},
        "monthly_requests": [
            {"year": int(y), "month": int(m), "count": c} for (y, m, c) in monthly
        ],
    }
