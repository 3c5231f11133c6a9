"""
FamilyEvents Backend — Access-Control Resolver
==============================================

What:  The single place where the API decides whether a user may perform an
       action on a family or an event.
How:   Two layers:
       1. Pure decision functions (`decide_family_action`,
          `decide_event_action`) that take already-loaded facts and return a
          `Decision`. No I/O, so the precedence rules are unit-testable.
       2. `AccessControlService`, which loads those facts for one request
          (family, membership, event, contributor row, privacy row) and
          returns a small access object whose `require()` raises
          PermissionDeniedError.
Who:   Every service that touches a family or an event.

Precedence for event actions (first matching rule wins):
    1. No membership in the event's family   → NOT_A_MEMBER (every action)
    2. EDIT_COMMENT                          → author only
    3. Event creator                         → ALLOW
    4. MANAGE_PRIVACY                        → FORBIDDEN (creator only)
    5. Privacy row restricts VIEW / COMMENT / UPLOAD_MEDIA;
       privacy.can_edit extends UPDATE
    6. VIEW                                  → ALLOW (membership suffices)
    7. COMMENT, UPLOAD_MEDIA                 → any contributor row
    8. MANAGE_CONTRIBUTORS                   → contributor.can_invite
    9. DELETE_MEDIA                          → uploader or contributor.can_delete
   10. DELETE_COMMENT                        → comment author
   11. UPDATE, DELETE                        → family admin
   12. anything else                         → FORBIDDEN

Ordering with existence checks:
    The loader raises NotFoundError for a missing family/event before any
    decision is made, and services look up dependent rows (comment, media,
    contributor) before calling `require()` for them. A 404 therefore always
    wins over a 403.
"""

import enum
import logging
import uuid
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import NotFoundError, PermissionDeniedError
from app.models.event import Event, EventContributor, EventPrivacy
from app.models.family import ROLE_ADMIN, Family, FamilyMember

logger = logging.getLogger(__name__)

ACCESS_DENIED_MESSAGE = "Access denied"


class FamilyAction(str, enum.Enum):
    VIEW = "view"
    UPDATE = "update"
    DELETE = "delete"
    MANAGE_MEMBERS = "manage_members"
    CREATE_EVENT = "create_event"


class EventAction(str, enum.Enum):
    VIEW = "view"
    UPDATE = "update"
    DELETE = "delete"
    COMMENT = "comment"
    UPLOAD_MEDIA = "upload_media"
    DELETE_MEDIA = "delete_media"
    EDIT_COMMENT = "edit_comment"
    DELETE_COMMENT = "delete_comment"
    MANAGE_CONTRIBUTORS = "manage_contributors"
    MANAGE_PRIVACY = "manage_privacy"


class Decision(str, enum.Enum):
    ALLOW = "allow"
    NOT_A_MEMBER = "not_a_member"
    FORBIDDEN = "forbidden"


@dataclass(frozen=True)
class Identity:
    """The authenticated caller, produced by the bearer-token dependency."""
    user_id: uuid.UUID
    email: str


@dataclass(frozen=True)
class EventContext:
    """
    Facts about one (user, event) pair that event decisions depend on.

    owner_id is the author/uploader of the resource being acted on, for
    the comment and media actions; None for event-level actions.
    """
    user_id: uuid.UUID
    creator_id: uuid.UUID
    membership_role: Optional[str]
    contributor: Optional[EventContributor] = None
    privacy: Optional[EventPrivacy] = None
    owner_id: Optional[uuid.UUID] = None


# ══════════════════════════════════════════════════════════════════════════
# Pure decision functions
# ══════════════════════════════════════════════════════════════════════════


def decide_family_action(action: FamilyAction, role: Optional[str]) -> Decision:
    """Decide a family-level action from the caller's membership role (None = not a member)."""
    if role is None:
        return Decision.NOT_A_MEMBER
    if action in (FamilyAction.VIEW, FamilyAction.CREATE_EVENT):
        return Decision.ALLOW
    if role == ROLE_ADMIN:
        return Decision.ALLOW
    return Decision.FORBIDDEN


def _privacy_denies(action: EventAction, privacy: Optional[EventPrivacy]) -> bool:
    if privacy is None:
        return False
    if action is EventAction.VIEW:
        return not privacy.can_view
    if action is EventAction.COMMENT:
        return not privacy.can_comment
    if action is EventAction.UPLOAD_MEDIA:
        return not privacy.can_upload_media
    return False


def decide_event_action(action: EventAction, ctx: EventContext) -> Decision:
    """
    Decide an event-level action. See the module docstring for the
    precedence table; the order of the checks below is that table.
    """
    if ctx.membership_role is None:
        return Decision.NOT_A_MEMBER

    is_owner = ctx.owner_id is not None and ctx.owner_id == ctx.user_id

    # Editing words someone else wrote is never delegated, not even to the creator
    if action is EventAction.EDIT_COMMENT:
        return Decision.ALLOW if is_owner else Decision.FORBIDDEN

    if ctx.user_id == ctx.creator_id:
        return Decision.ALLOW

    if action is EventAction.MANAGE_PRIVACY:
        return Decision.FORBIDDEN

    if _privacy_denies(action, ctx.privacy):
        return Decision.FORBIDDEN
    if action is EventAction.UPDATE and ctx.privacy is not None and ctx.privacy.can_edit:
        return Decision.ALLOW

    if action is EventAction.VIEW:
        return Decision.ALLOW

    contributor = ctx.contributor
    if action in (EventAction.COMMENT, EventAction.UPLOAD_MEDIA):
        return Decision.ALLOW if contributor is not None else Decision.FORBIDDEN

    if action is EventAction.MANAGE_CONTRIBUTORS:
        return Decision.ALLOW if contributor is not None and contributor.can_invite else Decision.FORBIDDEN

    if action is EventAction.DELETE_MEDIA:
        if is_owner or (contributor is not None and contributor.can_delete):
            return Decision.ALLOW
        return Decision.FORBIDDEN

    if action is EventAction.DELETE_COMMENT:
        return Decision.ALLOW if is_owner else Decision.FORBIDDEN

    if action in (EventAction.UPDATE, EventAction.DELETE):
        return Decision.ALLOW if ctx.membership_role == ROLE_ADMIN else Decision.FORBIDDEN

    return Decision.FORBIDDEN


def _raise_for(decision: Decision, action: enum.Enum, subject: str, user_id: uuid.UUID) -> None:
    if decision is Decision.ALLOW:
        return
    logger.warning(
        "Denied %s on %s for user %s (%s)", action.value, subject, user_id, decision.value
    )
    if decision is Decision.NOT_A_MEMBER:
        raise PermissionDeniedError(message=ACCESS_DENIED_MESSAGE, reason=decision.value)
    raise PermissionDeniedError(reason=decision.value, context={"action": action.value})


# ══════════════════════════════════════════════════════════════════════════
# Request-scoped access objects
# ══════════════════════════════════════════════════════════════════════════


@dataclass
class FamilyAccess:
    identity: Identity
    family: Family
    membership: Optional[FamilyMember]

    @property
    def role(self) -> Optional[str]:
        return self.membership.role if self.membership else None

    def decide(self, action: FamilyAction) -> Decision:
        return decide_family_action(action, self.role)

    def require(self, action: FamilyAction) -> None:
        _raise_for(self.decide(action), action, f"family {self.family.id}", self.identity.user_id)


@dataclass
class EventAccess:
    identity: Identity
    event: Event
    membership: FamilyMember
    contributor: Optional[EventContributor]
    privacy: Optional[EventPrivacy]

    @property
    def is_creator(self) -> bool:
        return self.event.created_by_id == self.identity.user_id

    def context(self, owner_id: Optional[uuid.UUID] = None) -> EventContext:
        return EventContext(
            user_id=self.identity.user_id,
            creator_id=self.event.created_by_id,
            membership_role=self.membership.role,
            contributor=self.contributor,
            privacy=self.privacy,
            owner_id=owner_id,
        )

    def decide(self, action: EventAction, owner_id: Optional[uuid.UUID] = None) -> Decision:
        return decide_event_action(action, self.context(owner_id))

    def require(self, action: EventAction, owner_id: Optional[uuid.UUID] = None) -> None:
        _raise_for(
            self.decide(action, owner_id), action, f"event {self.event.id}", self.identity.user_id
        )


class AccessControlService:
    """
    Loads the rows the decision functions need.

    Stateless; every call receives the request's session explicitly.
    """

    async def get_membership(
        self, db: AsyncSession, family_id: uuid.UUID, user_id: uuid.UUID
    ) -> Optional[FamilyMember]:
        result = await db.execute(
            select(FamilyMember).where(
                FamilyMember.family_id == family_id,
                FamilyMember.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def family_access(
        self, db: AsyncSession, identity: Identity, family_id: uuid.UUID
    ) -> FamilyAccess:
        """Raises NotFoundError when the family does not exist."""
        family = await db.get(Family, family_id)
        if family is None:
            raise NotFoundError(resource="family", message="Family not found")
        membership = await self.get_membership(db, family_id, identity.user_id)
        return FamilyAccess(identity=identity, family=family, membership=membership)

    async def event_access(
        self, db: AsyncSession, identity: Identity, event_id: uuid.UUID
    ) -> EventAccess:
        """
        Load everything needed to decide actions on one event.

        Raises:
            NotFoundError: the event does not exist
            PermissionDeniedError: the caller is not a member of the event's
                family ("Access denied"); contributor and privacy rows are
                not consulted in that case.
        """
        event = await db.get(Event, event_id)
        if event is None:
            raise NotFoundError(resource="event", message="Event not found")

        membership = await self.get_membership(db, event.family_id, identity.user_id)
        if membership is None:
            _raise_for(Decision.NOT_A_MEMBER, EventAction.VIEW, f"event {event.id}", identity.user_id)

        contributor = (
            await db.execute(
                select(EventContributor).where(
                    EventContributor.event_id == event.id,
                    EventContributor.user_id == identity.user_id,
                )
            )
        ).scalar_one_or_none()
        privacy = (
            await db.execute(
                select(EventPrivacy).where(
                    EventPrivacy.event_id == event.id,
                    EventPrivacy.user_id == identity.user_id,
                )
            )
        ).scalar_one_or_none()

        return EventAccess(
            identity=identity,
            event=event,
            membership=membership,
            contributor=contributor,
            privacy=privacy,
        )


# ── Singleton Instance ────────────────────────────────────────────────────
access_control = AccessControlService()
