from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from vendorhub.core.db import get_db
from vendorhub.models.agent import Agent
from vendorhub.schemas.agent import AgentCreate, AgentDeleteOut, AgentListOut, AgentOut, AgentUpdate
from vendorhub.services.agents import create_agent, delete_agent, list_agents, load_agent, update_agent
from vendorhub.services.audit import audit
from vendorhub.services.internal_admin import require_internal_admin

router = APIRouter()


def _out(a: Agent) -> AgentOut:
    return AgentOut(
        id=a.id,
        name=a.name,
        username=a.username,
        email=a.email,
        role=a.role,
        is_active=a.is_active,
        created_at=a.created_at,
    )


@router.get("/admin/agents", response_model=AgentListOut, dependencies=[Depends(require_internal_admin)])
async def get_agents(
    search: str | None = None,
    is_active: bool | None = None,
    db: AsyncSession = Depends(get_db),
) -> AgentListOut:
    agents = await list_agents(db, search=search, is_active=is_active)
    return AgentListOut(items=[_out(a) for a in agents], count=len(agents))


@router.post("/admin/agents", response_model=AgentOut)
async def post_agent(
    payload: AgentCreate,
    db: AsyncSession = Depends(get_db),
    actor: str = Depends(require_internal_admin),
) -> AgentOut:
    agent = await create_agent(
        db,
        name=payload.name,
        username=payload.username,
        password=payload.password,
        email=str(payload.email) if payload.email else None,
        role=payload.role,
        actor=actor,
    )
    await audit(db, actor=actor, action="agent.created", target_type="agent", target_id=agent.id,
                detail={"username": agent.username, "role": agent.role})
    await db.commit()
    return _out(agent)


@router.get("/admin/agents/{agent_id}", response_model=AgentOut, dependencies=[Depends(require_internal_admin)])
async def get_agent(agent_id: str, db: AsyncSession = Depends(get_db)) -> AgentOut:
    return _out(await load_agent(db, agent_id))


@router.patch("/admin/agents/{agent_id}", response_model=AgentOut)
async def patch_agent(
    agent_id: str,
    payload: AgentUpdate,
    db: AsyncSession = Depends(get_db),
    actor: str = Depends(require_internal_admin),
) -> AgentOut:
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "email" in changes:
        changes["email"] = str(changes["email"])
    agent = await update_agent(db, agent_id, changes, actor=actor)
    # never put the password into the audit trail
    await audit(db, actor=actor, action="agent.updated", target_type="agent", target_id=agent_id,
                detail={"changed": sorted(changes)})
    await db.commit()
    return _out(agent)


@router.delete("/admin/agents/{agent_id}", response_model=AgentDeleteOut)
async def remove_agent(
    agent_id: str,
    db: AsyncSession = Depends(get_db),
    actor: str = Depends(require_internal_admin),
) -> AgentDeleteOut:
    unassigned = await delete_agent(db, agent_id)
    await audit(db, actor=actor, action="agent.deleted", target_type="agent", target_id=agent_id,
                detail={"unassigned_vendors": unassigned})
    await db.commit()
    return AgentDeleteOut(id=agent_id, unassigned_vendors=unassigned)
