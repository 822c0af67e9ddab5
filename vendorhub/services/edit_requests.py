from __future__ import annotations

import logging
from typing import Iterable

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from vendorhub.canonical.edit_request import Decision, EditRequestRecord
from vendorhub.canonical.snapshot import SchemaSnapshot
from vendorhub.canonical.vendor import VendorRecord
from vendorhub.core.errors import InvalidStateTransition, NotFound
from vendorhub.models.edit_request import EditRequest
from vendorhub.services import edit_approval
from vendorhub.services.normalization import FlatView, denormalize
from vendorhub.services.vendor_records import load_vendor, save_vendor_form_data

log = logging.getLogger(__name__)


def to_record(row: EditRequest) -> EditRequestRecord:
    return EditRequestRecord(
        id=row.id,
        vendor_id=row.vendor_id,
        changes=dict(row.changes or {}),
        submitted_at=row.submitted_at,
        review_state=row.review_state,
        remark=row.remark,
        seen=row.seen,
        schema_version=row.schema_version,
        reviewed_at=row.reviewed_at,
        reviewed_by=row.reviewed_by,
    )


async def load_edit_request(db: AsyncSession, request_id: str) -> EditRequestRecord:
    row = (await db.execute(
        select(EditRequest).where(EditRequest.id == request_id).execution_options(populate_existing=True)
    )).scalar_one_or_none()
    if not row:
        raise NotFound("edit_request", request_id)
    return to_record(row)


async def submit_edit_request(
    db: AsyncSession,
    schema: SchemaSnapshot,
    vendor_id: str,
    edits: FlatView,
    *,
    role: str,
) -> EditRequestRecord | None:
    """
    Vendor-initiated edit. The FlatView diff is denormalized (and validated)
    against `schema` as seen by `role`, so fields in sections hidden from that
    role are ignored. Only approved vendors accept edits. Returns None when the
    diff changes nothing.
    """
    vendor = await load_vendor(db, vendor_id)
    if vendor.status != "approved":
        raise InvalidStateTransition("vendor", vendor_id, vendor.status, "submit_edit")

    changes = denormalize(schema, edits, vendor, role=role)
    if not changes:
        return None

    row = EditRequest(
        vendor_id=vendor_id,
        changes=changes,
        review_state="pending",
        seen=False,
        schema_version=schema.version,
    )
    db.add(row)
    await db.flush()
    await db.refresh(row)
    log.info("edit request %s submitted for vendor %s: %s", row.id, vendor_id, sorted(changes))
    return to_record(row)


async def load_pending_edit_requests(db: AsyncSession, *, vendor_id: str | None = None) -> list[EditRequestRecord]:
    stmt = select(EditRequest).where(EditRequest.review_state == "pending")
    if vendor_id:
        stmt = stmt.where(EditRequest.vendor_id == vendor_id)
    rows = (await db.execute(
        stmt.order_by(EditRequest.submitted_at, EditRequest.id).execution_options(populate_existing=True)
    )).scalars().all()
    return [to_record(r) for r in rows]


async def save_edit_request_transition(
    db: AsyncSession,
    request_id: str,
    decision: Decision,
    remark: str | None = None,
    *,
    reviewer: str | None = None,
) -> EditRequestRecord:
    """
    Approve or reject a pending request.

    The state change is a conditional UPDATE on review_state = 'pending', so
    of two racing reviewers only one gets a row back; the other sees the
    terminal state and gets InvalidStateTransition. An approval merges the
    proposed changes into the vendor, locked for the
    merge, in the same transaction.
    """
    record = await load_edit_request(db, request_id)

    merged: VendorRecord | None = None
    if decision == "approve":
        vendor = await load_vendor(db, record.vendor_id, for_update=True)
        reviewed, merged = edit_approval.approve(record, vendor, remark=remark, reviewer=reviewer)
    elif decision == "reject":
        reviewed = edit_approval.reject(record, remark=remark, reviewer=reviewer)
    else:
        raise InvalidStateTransition("edit_request", request_id, record.review_state, str(decision))

    res = await db.execute(
        update(EditRequest)
        .where(EditRequest.id == request_id, EditRequest.review_state == "pending")
        .values(
            review_state=reviewed.review_state,
            remark=reviewed.remark,
            reviewed_by=reviewed.reviewed_by,
            reviewed_at=reviewed.reviewed_at,
        )
        .execution_options(synchronize_session=False)
    )
    if res.rowcount != 1:
        current = (await db.execute(
            select(EditRequest.review_state).where(EditRequest.id == request_id)
        )).scalar_one()
        raise InvalidStateTransition("edit_request", request_id, current, decision)

    if merged is not None:
        await save_vendor_form_data(db, merged, actor=reviewer)

    log.info("edit request %s %s by %s", request_id, reviewed.review_state, reviewer)
    return reviewed


async def mark_edit_requests_seen(db: AsyncSession, ids: Iterable[str]) -> int:
    """
    Flip seen false -> true. Only the seen column is written, so this can run
    alongside approve/reject. Returns how many rows actually changed.
    """
    id_list = list(dict.fromkeys(ids))
    if not id_list:
        return 0
    res = await db.execute(
        update(EditRequest)
        .where(EditRequest.id.in_(id_list), EditRequest.seen.is_(False))
        .values(seen=True)
        .execution_options(synchronize_session=False)
    )
    return res.rowcount


async def unread_count(db: AsyncSession) -> int:
    return (await db.execute(
        select(func.count()).select_from(EditRequest).where(EditRequest.seen.is_(False))
    )).scalar_one()
