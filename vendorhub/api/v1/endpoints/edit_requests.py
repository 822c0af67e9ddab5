from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from vendorhub.canonical.edit_request import Decision, EditRequestRecord
from vendorhub.core.config import settings
from vendorhub.core.db import get_db
from vendorhub.schemas.edit_request import (
    EditRequestListOut,
    EditRequestOut,
    EditRequestSubmit,
    EditRequestSubmitOut,
    MarkSeenOut,
    MarkSeenRequest,
    ReviewRequest,
)
from vendorhub.services.audit import audit
from vendorhub.services.edit_requests import (
    load_pending_edit_requests,
    mark_edit_requests_seen,
    save_edit_request_transition,
    submit_edit_request,
    unread_count,
)
from vendorhub.services.internal_admin import require_internal_admin
from vendorhub.services.schema_repository import load_schema

router = APIRouter()


def _out(r: EditRequestRecord) -> EditRequestOut:
    return EditRequestOut(**r.model_dump())


@router.post("/vendors/{vendor_id}/edit-requests", response_model=EditRequestSubmitOut)
async def submit(
    vendor_id: str,
    body: EditRequestSubmit,
    db: AsyncSession = Depends(get_db),
    actor: str = Depends(require_internal_admin),
):
    schema = await load_schema(db, version=body.schema_version)
    req = await submit_edit_request(db, schema, vendor_id, body.values, role=settings.vendor_role)
    if req is None:
        return EditRequestSubmitOut(created=False)

    await audit(
        db,
        actor=actor,
        action="edit_request.submitted",
        target_type="edit_request",
        target_id=req.id,
        detail={"vendor_id": vendor_id, "fields": sorted(req.changes)},
    )
    await db.commit()
    return EditRequestSubmitOut(created=True, request=_out(req))


@router.get("/admin/edit-requests", response_model=EditRequestListOut, dependencies=[Depends(require_internal_admin)])
async def list_pending(vendor_id: str | None = None, db: AsyncSession = Depends(get_db)):
    items = await load_pending_edit_requests(db, vendor_id=vendor_id)
    return EditRequestListOut(items=[_out(r) for r in items], unread_count=await unread_count(db))


@router.post("/admin/edit-requests:mark-seen", response_model=MarkSeenOut)
async def mark_seen(body: MarkSeenRequest, db: AsyncSession = Depends(get_db), actor: str = Depends(require_internal_admin)):
    modified = await mark_edit_requests_seen(db, body.ids)
    await db.commit()
    return MarkSeenOut(modified=modified, unread_count=await unread_count(db))


async def _review(db: AsyncSession, request_id: str, decision: Decision, remark: str | None, actor: str) -> EditRequestOut:
    req = await save_edit_request_transition(db, request_id, decision, remark, reviewer=actor)
    await audit(
        db,
        actor=actor,
        action=f"edit_request.{req.review_state}",
        target_type="edit_request",
        target_id=request_id,
        detail={"vendor_id": req.vendor_id, "remark": remark},
    )
    await db.commit()
    return _out(req)


@router.post("/admin/edit-requests/{request_id}:approve", response_model=EditRequestOut)
async def approve(request_id: str, body: ReviewRequest, db: AsyncSession = Depends(get_db), actor: str = Depends(require_internal_admin)):
    return await _review(db, request_id, "approve", body.remark, actor)


@router.post("/admin/edit-requests/{request_id}:reject", response_model=EditRequestOut)
async def reject(request_id: str, body: ReviewRequest, db: AsyncSession = Depends(get_db), actor: str = Depends(require_internal_admin)):
    return await _review(db, request_id, "reject", body.remark, actor)
