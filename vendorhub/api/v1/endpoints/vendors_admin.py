from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from vendorhub.canonical.snapshot import SchemaSnapshot
from vendorhub.canonical.vendor import VendorRecord
from vendorhub.core.config import settings
from vendorhub.core.db import get_db
from vendorhub.schemas.vendor import (
    VendorEdit,
    VendorEditOut,
    VendorListOut,
    VendorStatusUpdate,
    VendorSummaryOut,
    VendorViewOut,
)
from vendorhub.services.audit import audit
from vendorhub.services.internal_admin import require_internal_admin
from vendorhub.services.normalization import denormalize, normalize, split_missing
from vendorhub.services.schema_repository import load_schema
from vendorhub.services.vendor_records import (
    list_vendors,
    load_vendor,
    save_vendor_partial,
    update_vendor_status,
    vendor_summary,
)

router = APIRouter()


def _view(schema: SchemaSnapshot, vendor: VendorRecord) -> VendorViewOut:
    values, missing = split_missing(normalize(schema, vendor, role=settings.default_role))
    return VendorViewOut(schema_version=schema.version, values=values, missing=missing)


@router.get("/admin/vendors", response_model=VendorListOut, dependencies=[Depends(require_internal_admin)])
async def get_vendors(
    status: str | None = None,
    agent_id: str | None = Query(default=None, alias="agentId"),
    city: str | None = None,
    search: str | None = None,
    limit: int = Query(default=20, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    db: AsyncSession = Depends(get_db),
) -> VendorListOut:
    schema = await load_schema(db)
    vendors, total = await list_vendors(
        db, status=status, agent_id=agent_id, city=city, search=search, limit=limit, offset=offset,
    )
    return VendorListOut(items=[_view(schema, v) for v in vendors], total=total, limit=limit, offset=offset)


@router.get("/admin/vendors/summary", response_model=VendorSummaryOut, dependencies=[Depends(require_internal_admin)])
async def get_vendor_summary(db: AsyncSession = Depends(get_db)):
    return await vendor_summary(db)


@router.get("/admin/vendors/{vendor_id}", response_model=VendorViewOut, dependencies=[Depends(require_internal_admin)])
async def get_vendor(vendor_id: str, db: AsyncSession = Depends(get_db)) -> VendorViewOut:
    schema = await load_schema(db)
    return _view(schema, await load_vendor(db, vendor_id))


@router.patch("/admin/vendors/{vendor_id}", response_model=VendorEditOut)
async def edit_vendor(
    vendor_id: str,
    body: VendorEdit,
    db: AsyncSession = Depends(get_db),
    actor: str = Depends(require_internal_admin),
) -> VendorEditOut:
    """
    Direct admin edit. `values` is a FlatView diff; only fields whose value
    really changes are written to form_data.
    """
    schema = await load_schema(db, version=body.schema_version)
    vendor = await load_vendor(db, vendor_id)

    partial = denormalize(schema, body.values, vendor, role=settings.default_role)
    if partial:
        vendor = await save_vendor_partial(db, vendor_id, partial, actor=actor)
        await audit(
            db,
            actor=actor,
            action="vendor.updated",
            target_type="vendor",
            target_id=vendor_id,
            detail={"fields": sorted(partial), "schema_version": schema.version},
        )
        await db.commit()

    latest = schema if body.schema_version is None else await load_schema(db)
    return VendorEditOut(changed=sorted(partial), vendor=_view(latest, vendor))


@router.patch("/admin/vendors/{vendor_id}/status", response_model=VendorViewOut)
async def set_vendor_status(
    vendor_id: str,
    body: VendorStatusUpdate,
    db: AsyncSession = Depends(get_db),
    actor: str = Depends(require_internal_admin),
) -> VendorViewOut:
    vendor = await update_vendor_status(db, vendor_id, body.status, actor=actor)
    await audit(
        db,
        actor=actor,
        action=f"vendor.{body.status}",
        target_type="vendor",
        target_id=vendor_id,
    )
    await db.commit()
    return _view(await load_schema(db), vendor)
