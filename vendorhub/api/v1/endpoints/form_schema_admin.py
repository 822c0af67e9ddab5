from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from vendorhub.core.db import get_db
from vendorhub.schemas.form_schema import (
    FieldCreate,
    FieldUpdate,
    ReorderRequest,
    SectionCreate,
    SectionUpdate,
    changes_of,
)
from vendorhub.services import schema_store
from vendorhub.services.internal_admin import require_internal_admin
from vendorhub.services.schema_repository import apply_schema_mutation, load_schema

router = APIRouter()


@router.get("/admin/form-schema", dependencies=[Depends(require_internal_admin)])
async def get_form_schema(version: int | None = Query(default=None, ge=0), db: AsyncSession = Depends(get_db)):
    snapshot = await load_schema(db, version=version)
    return snapshot.to_document()


# --- sections ---

@router.post("/admin/form-schema/sections")
async def create_section(body: SectionCreate, db: AsyncSession = Depends(get_db), actor: str = Depends(require_internal_admin)):
    snapshot = await apply_schema_mutation(
        db,
        lambda s: schema_store.create_section(
            s,
            expected_version=body.expected_version,
            section_id=body.id,
            label=body.label,
            order=body.order,
            visibility=body.visibility,
            vendor_types=body.vendor_types,
        ),
        actor=actor,
        action="form_schema.section.created",
        detail={"section_id": body.id},
    )
    await db.commit()
    return snapshot.to_document()


@router.put("/admin/form-schema/sections:reorder")
async def reorder_sections(body: ReorderRequest, db: AsyncSession = Depends(get_db), actor: str = Depends(require_internal_admin)):
    snapshot = await apply_schema_mutation(
        db,
        lambda s: schema_store.reorder_sections(s, body.ids, expected_version=body.expected_version),
        actor=actor,
        action="form_schema.sections.reordered",
        detail={"ids": body.ids},
    )
    await db.commit()
    return snapshot.to_document()


@router.patch("/admin/form-schema/sections/{section_id}")
async def update_section(section_id: str, body: SectionUpdate, db: AsyncSession = Depends(get_db), actor: str = Depends(require_internal_admin)):
    changes = changes_of(body)
    snapshot = await apply_schema_mutation(
        db,
        lambda s: schema_store.update_section(s, section_id, expected_version=body.expected_version, changes=changes),
        actor=actor,
        action="form_schema.section.updated",
        detail={"section_id": section_id, "changed": sorted(changes)},
    )
    await db.commit()
    return snapshot.to_document()


@router.delete("/admin/form-schema/sections/{section_id}")
async def delete_section(
    section_id: str,
    expected_version: int = Query(ge=0),
    db: AsyncSession = Depends(get_db),
    actor: str = Depends(require_internal_admin),
):
    snapshot = await apply_schema_mutation(
        db,
        lambda s: schema_store.delete_section(s, section_id, expected_version=expected_version),
        actor=actor,
        action="form_schema.section.deleted",
        detail={"section_id": section_id},
    )
    await db.commit()
    return snapshot.to_document()


@router.put("/admin/form-schema/sections/{section_id}/fields:reorder")
async def reorder_fields(section_id: str, body: ReorderRequest, db: AsyncSession = Depends(get_db), actor: str = Depends(require_internal_admin)):
    snapshot = await apply_schema_mutation(
        db,
        lambda s: schema_store.reorder_fields(s, section_id, body.ids, expected_version=body.expected_version),
        actor=actor,
        action="form_schema.fields.reordered",
        detail={"section_id": section_id, "ids": body.ids},
    )
    await db.commit()
    return snapshot.to_document()


# --- fields ---

@router.post("/admin/form-schema/sections/{section_id}/fields")
async def create_field(section_id: str, body: FieldCreate, db: AsyncSession = Depends(get_db), actor: str = Depends(require_internal_admin)):
    snapshot = await apply_schema_mutation(
        db,
        lambda s: schema_store.create_field(
            s,
            expected_version=body.expected_version,
            field_id=body.id,
            section_id=section_id,
            label=body.label,
            type=body.type,
            order=body.order,
            required=body.required,
            rules=body.rules,
            vendor_types=body.vendor_types,
        ),
        actor=actor,
        action="form_schema.field.created",
        detail={"section_id": section_id, "field_id": body.id},
    )
    await db.commit()
    return snapshot.to_document()


@router.patch("/admin/form-schema/fields/{field_id}")
async def update_field(field_id: str, body: FieldUpdate, db: AsyncSession = Depends(get_db), actor: str = Depends(require_internal_admin)):
    changes = changes_of(body)
    snapshot = await apply_schema_mutation(
        db,
        lambda s: schema_store.update_field(s, field_id, expected_version=body.expected_version, changes=changes),
        actor=actor,
        action="form_schema.field.updated",
        detail={"field_id": field_id, "changed": sorted(changes)},
    )
    await db.commit()
    return snapshot.to_document()


@router.delete("/admin/form-schema/fields/{field_id}")
async def delete_field(
    field_id: str,
    expected_version: int = Query(ge=0),
    db: AsyncSession = Depends(get_db),
    actor: str = Depends(require_internal_admin),
):
    snapshot = await apply_schema_mutation(
        db,
        lambda s: schema_store.delete_field(s, field_id, expected_version=expected_version),
        actor=actor,
        action="form_schema.field.deleted",
        detail={"field_id": field_id},
    )
    await db.commit()
    return snapshot.to_document()
