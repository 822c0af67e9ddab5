from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from vendorhub.core.errors import AlreadyExists, NotFound
from vendorhub.core.security import hash_password
from vendorhub.models.agent import Agent
from vendorhub.models.vendor import Vendor

log = logging.getLogger(__name__)

def _username(value: str) -> str:
    return value.strip().lower()


async def _ensure_username_free(db: AsyncSession, username: str, *, exclude_id: str | None = None) -> None:
    stmt = select(Agent.id).where(Agent.username == username)
    if exclude_id:
        stmt = stmt.where(Agent.id != exclude_id)
    if (await db.execute(stmt)).first():
        raise AlreadyExists("agent", "username", username)


async def _flush(db: AsyncSession, username: str) -> None:
    try:
        await db.flush()
    except IntegrityError as e:
        # lost a race on the unique username index
        await db.rollback()
        raise AlreadyExists("agent", "username", username) from e


async def load_agent(db: AsyncSession, agent_id: str) -> Agent:
    agent = (await db.execute(select(Agent).where(Agent.id == agent_id))).scalar_one_or_none()
    if not agent:
        raise NotFound("agent", agent_id)
    return agent


async def create_agent(
    db: AsyncSession,
    *,
    name: str,
    username: str,
    password: str,
    email: str | None = None,
    role: str = "agent",
    actor: str | None = None,
) -> Agent:
    username = _username(username)
    await _ensure_username_free(db, username)

    agent = Agent(
        name=name.strip(),
        username=username,
        email=email,
        role=role,
        is_active=True,
        password_hash=hash_password(password),
        created_by=actor,
        updated_by=actor,
    )
    db.add(agent)
    await _flush(db, username)
    await db.refresh(agent)
    log.info("agent %s created (%s) by %s", agent.id, username, actor)
    return agent


async def list_agents(
    db: AsyncSession,
    *,
    search: str | None = None,
    is_active: bool | None = None,
) -> list[Agent]:
    stmt = select(Agent)
    if search:
        needle = search.strip().lower()
        stmt = stmt.where(or_(
            func.lower(Agent.name).contains(needle),
            Agent.username.contains(needle),
        ))
    if is_active is not None:
        stmt = stmt.where(Agent.is_active.is_(is_active))
    return list((await db.execute(stmt.order_by(Agent.created_at.desc(), Agent.id))).scalars().all())


async def update_agent(
    db: AsyncSession,
    agent_id: str,
    changes: dict[str, Any],
    *,
    actor: str | None = None,
) -> Agent:
    agent = await load_agent(db, agent_id)

    if "username" in changes:
        username = _username(changes["username"])
        await _ensure_username_free(db, username, exclude_id=agent_id)
        agent.username = username
    if "name" in changes:
        agent.name = changes["name"].strip()
    if "email" in changes:
        agent.email = changes["email"]
    if "role" in changes:
        agent.role = changes["role"]
    if "is_active" in changes:
        agent.is_active = changes["is_active"]
    if "password" in changes:
        agent.password_hash = hash_password(changes["password"])
    agent.updated_by = actor

    await _flush(db, agent.username)
    await db.refresh(agent)
    return agent


async def delete_agent(db: AsyncSession, agent_id: str) -> int:
    """
    Delete an agent. Vendors it registered stay, with agent_id cleared.
    Returns how many vendors were unassigned.
    """
    agent = await load_agent(db, agent_id)
    res = await db.execute(
        update(Vendor)
        .where(Vendor.agent_id == agent_id)
        .values(agent_id=None)
        .execution_options(synchronize_session=False)
    )
    await db.delete(agent)
    await db.flush()
    log.info("agent %s deleted, %s vendor(s) unassigned", agent_id, res.rowcount)
    return res.rowcount
