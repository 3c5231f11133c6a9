"""
FamilyEvents Backend — Family Service
=====================================

What:  Business rules for families and their membership.
Who:   Called by app.routes.families.

Rules enforced here (on top of the access-control resolver):
    - Creating a family also makes the creator its admin, in the same
      transaction (both rows flushed before get_db_session commits).
    - A member may always remove themself; removing others needs admin.
    - The last admin of a family cannot be removed.
    - settings.max_members, when set, caps the member count.
"""

import logging
import uuid
from typing import Dict, List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import ConflictError, NotFoundError, ValidationError
from app.models.family import ROLE_ADMIN, Family, FamilyMember, default_family_settings
from app.models.user import User
from app.schemas.common import UserSummary
from app.schemas.family import (
    FamilyCreate,
    FamilyMemberAdd,
    FamilyMemberResponse,
    FamilyResponse,
    FamilySettings,
    FamilyUpdate,
)
from app.services.access_control import FamilyAction, Identity, access_control
from app.services.persistence import database_errors, flush_or_conflict

logger = logging.getLogger(__name__)


class FamilyService:
    """Family CRUD plus member management."""

    async def _member_counts(
        self, db: AsyncSession, family_ids: List[uuid.UUID]
    ) -> Dict[uuid.UUID, int]:
        if not family_ids:
            return {}
        result = await db.execute(
            select(FamilyMember.family_id, func.count(FamilyMember.id))
            .where(FamilyMember.family_id.in_(family_ids))
            .group_by(FamilyMember.family_id)
        )
        return {family_id: count for family_id, count in result.all()}

    def _to_response(self, family: Family, role: Optional[str], member_count: int) -> FamilyResponse:
        return FamilyResponse(
            id=family.id,
            name=family.name,
            description=family.description,
            created_by_id=family.created_by_id,
            settings=FamilySettings(**{**default_family_settings(), **(family.settings or {})}),
            role=role,
            member_count=member_count,
            created_at=family.created_at,
            updated_at=family.updated_at,
        )

    async def list_families(self, db: AsyncSession, identity: Identity) -> List[FamilyResponse]:
        """Families the caller belongs to, newest first, each with the caller's role."""
        with database_errors("list_families"):
            result = await db.execute(
                select(Family, FamilyMember.role)
                .join(FamilyMember, FamilyMember.family_id == Family.id)
                .where(FamilyMember.user_id == identity.user_id)
                .order_by(Family.created_at.desc())
            )
            rows = result.all()
            counts = await self._member_counts(db, [family.id for family, _ in rows])
        return [self._to_response(family, role, counts.get(family.id, 0)) for family, role in rows]

    async def create_family(
        self, db: AsyncSession, identity: Identity, data: FamilyCreate
    ) -> FamilyResponse:
        settings_doc = default_family_settings()
        if data.settings is not None:
            settings_doc.update(data.settings.model_dump())

        family = Family(
            name=data.name,
            description=data.description,
            created_by_id=identity.user_id,
            settings=settings_doc,
        )
        db.add(family)
        await db.flush()

        db.add(FamilyMember(family_id=family.id, user_id=identity.user_id, role=ROLE_ADMIN))
        await flush_or_conflict(db, "User is already a member of this family")

        logger.info("Family %s created by %s", family.id, identity.user_id)
        return self._to_response(family, ROLE_ADMIN, 1)

    async def get_family(
        self, db: AsyncSession, identity: Identity, family_id: uuid.UUID
    ) -> FamilyResponse:
        access = await access_control.family_access(db, identity, family_id)
        access.require(FamilyAction.VIEW)
        counts = await self._member_counts(db, [family_id])
        return self._to_response(access.family, access.role, counts.get(family_id, 0))

    async def update_family(
        self, db: AsyncSession, identity: Identity, family_id: uuid.UUID, data: FamilyUpdate
    ) -> FamilyResponse:
        access = await access_control.family_access(db, identity, family_id)
        access.require(FamilyAction.UPDATE)
        family = access.family

        changes = data.model_dump(exclude_unset=True)
        if "name" in changes:
            family.name = changes["name"]
        if "description" in changes:
            family.description = changes["description"]
        if data.settings is not None:
            patch = data.settings.model_dump(exclude_unset=True)
            # New dict object so the JSON column is flagged dirty
            family.settings = {**default_family_settings(), **(family.settings or {}), **patch}

        await db.flush()
        await db.refresh(family)
        logger.info("Family %s updated by %s: %s", family.id, identity.user_id, sorted(changes))

        counts = await self._member_counts(db, [family_id])
        return self._to_response(family, access.role, counts.get(family_id, 0))

    async def delete_family(
        self, db: AsyncSession, identity: Identity, family_id: uuid.UUID
    ) -> None:
        """Members, events and everything under the events go with it (ON DELETE CASCADE)."""
        access = await access_control.family_access(db, identity, family_id)
        access.require(FamilyAction.DELETE)

        with database_errors("delete_family", family_id=str(family_id)):
            await db.execute(delete(Family).where(Family.id == family_id))
        logger.info("Family %s deleted by %s", family_id, identity.user_id)

    # ── Members ───────────────────────────────────────────────────────────

    def _member_response(self, member: FamilyMember, user: User) -> FamilyMemberResponse:
        return FamilyMemberResponse(
            id=member.id,
            family_id=member.family_id,
            user_id=member.user_id,
            role=member.role,
            joined_at=member.joined_at,
            user=UserSummary.model_validate(user),
        )

    async def list_members(
        self, db: AsyncSession, identity: Identity, family_id: uuid.UUID
    ) -> List[FamilyMemberResponse]:
        access = await access_control.family_access(db, identity, family_id)
        access.require(FamilyAction.VIEW)

        with database_errors("list_members", family_id=str(family_id)):
            result = await db.execute(
                select(FamilyMember, User)
                .join(User, User.id == FamilyMember.user_id)
                .where(FamilyMember.family_id == family_id)
                .order_by(FamilyMember.joined_at.asc())
            )
            rows = result.all()
        return [self._member_response(member, user) for member, user in rows]

    async def add_member(
        self, db: AsyncSession, identity: Identity, family_id: uuid.UUID, data: FamilyMemberAdd
    ) -> FamilyMemberResponse:
        """
        Add an existing user, found by email.

        Raises:
            NotFoundError: family or user does not exist
            PermissionDeniedError: caller is not an admin of the family
            ConflictError: user is already a member
            ValidationError: the family is at settings.max_members
        """
        access = await access_control.family_access(db, identity, family_id)
        access.require(FamilyAction.MANAGE_MEMBERS)

        email = str(data.email).lower()
        user = (await db.execute(select(User).where(User.email == email))).scalar_one_or_none()
        if user is None:
            raise NotFoundError(resource="user", message="User not found", context={"email": email})

        existing = await access_control.get_membership(db, family_id, user.id)
        if existing is not None:
            raise ConflictError(
                message="User is already a member of this family",
                context={"user_id": str(user.id)},
            )

        max_members = (access.family.settings or {}).get("max_members")
        if max_members:
            counts = await self._member_counts(db, [family_id])
            if counts.get(family_id, 0) >= max_members:
                raise ValidationError(
                    message=f"Family has reached its limit of {max_members} members",
                    field="email",
                    context={"max_members": max_members},
                )

        member = FamilyMember(family_id=family_id, user_id=user.id, role=data.role)
        db.add(member)
        await flush_or_conflict(db, "User is already a member of this family")
        await db.refresh(member)

        logger.info(
            "User %s added to family %s as %s by %s", user.id, family_id, data.role, identity.user_id
        )
        return self._member_response(member, user)

    async def remove_member(
        self, db: AsyncSession, identity: Identity, family_id: uuid.UUID, user_id: uuid.UUID
    ) -> None:
        """
        Remove a membership. Admins may remove anyone; members only themselves.

        Raises:
            NotFoundError: family missing, or user_id is not a member
            PermissionDeniedError: caller is not a member, or removes someone
                else without being admin
            ValidationError: the target is the family's last admin
        """
        access = await access_control.family_access(db, identity, family_id)
        access.require(FamilyAction.VIEW)

        target = await access_control.get_membership(db, family_id, user_id)
        if target is None:
            raise NotFoundError(resource="member", message="Member not found")

        if user_id != identity.user_id:
            access.require(FamilyAction.MANAGE_MEMBERS)

        if target.role == ROLE_ADMIN:
            admin_count = (
                await db.execute(
                    select(func.count(FamilyMember.id)).where(
                        FamilyMember.family_id == family_id,
                        FamilyMember.role == ROLE_ADMIN,
                    )
                )
            ).scalar_one()
            if admin_count <= 1:
                raise ValidationError(
                    message="Cannot remove the last admin of a family", field="user_id"
                )

        await db.delete(target)
        await db.flush()
        logger.info("User %s removed from family %s by %s", user_id, family_id, identity.user_id)


# ── Singleton Instance ────────────────────────────────────────────────────
family_service = FamilyService()
