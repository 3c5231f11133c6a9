"""
FamilyEvents Backend — Comment Service
======================================

What:  Threaded comments on events.
How:   All comments of an event are fetched in one query (oldest first) and
       assembled into a tree in memory, so threads of any depth cost a
       single round trip.

Permissions:
    list    VIEW            any member not hidden by a privacy override
    create  COMMENT         creator or contributor (privacy may revoke)
    edit    EDIT_COMMENT    author only
    delete  DELETE_COMMENT  author or event creator; replies go with it
"""

import logging
import uuid
from typing import Dict, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import NotFoundError
from app.models.comment import Comment
from app.models.user import User
from app.schemas.comment import CommentCreate, CommentResponse, CommentUpdate
from app.schemas.common import UserSummary
from app.services.access_control import EventAction, Identity, access_control
from app.services.persistence import database_errors

logger = logging.getLogger(__name__)


class CommentService:

    def _to_response(self, comment: Comment, author: User) -> CommentResponse:
        return CommentResponse(
            id=comment.id,
            event_id=comment.event_id,
            author_id=comment.author_id,
            author=UserSummary.model_validate(author),
            content=comment.content,
            parent_id=comment.parent_id,
            is_edited=comment.is_edited,
            created_at=comment.created_at,
            updated_at=comment.updated_at,
        )

    async def _get_comment(
        self, db: AsyncSession, event_id: uuid.UUID, comment_id: uuid.UUID
    ) -> Comment:
        comment = (
            await db.execute(
                select(Comment).where(Comment.id == comment_id, Comment.event_id == event_id)
            )
        ).scalar_one_or_none()
        if comment is None:
            raise NotFoundError(resource="comment", message="Comment not found")
        return comment

    async def list_comments(
        self, db: AsyncSession, identity: Identity, event_id: uuid.UUID
    ) -> List[CommentResponse]:
        """Top-level comments in creation order, replies nested under their parent."""
        access = await access_control.event_access(db, identity, event_id)
        access.require(EventAction.VIEW)

        with database_errors("list_comments", event_id=str(event_id)):
            result = await db.execute(
                select(Comment, User)
                .join(User, User.id == Comment.author_id)
                .where(Comment.event_id == event_id)
                .order_by(Comment.created_at.asc(), Comment.id.asc())
            )
            rows = result.all()

        nodes: Dict[uuid.UUID, CommentResponse] = {
            comment.id: self._to_response(comment, author) for comment, author in rows
        }
        roots: List[CommentResponse] = []
        for comment, _ in rows:
            node = nodes[comment.id]
            parent = nodes.get(comment.parent_id) if comment.parent_id else None
            if parent is not None:
                parent.replies.append(node)
            else:
                roots.append(node)
        return roots

    async def create_comment(
        self, db: AsyncSession, identity: Identity, event_id: uuid.UUID, data: CommentCreate
    ) -> CommentResponse:
        """
        Raises:
            NotFoundError: event missing, or parent_id is not a comment on this event
            PermissionDeniedError: caller may not comment
        """
        access = await access_control.event_access(db, identity, event_id)
        if data.parent_id is not None:
            await self._get_comment(db, event_id, data.parent_id)
        access.require(EventAction.COMMENT)

        comment = Comment(
            event_id=event_id,
            author_id=identity.user_id,
            content=data.content,
            parent_id=data.parent_id,
        )
        db.add(comment)
        await db.flush()
        logger.info("Comment %s added to event %s by %s", comment.id, event_id, identity.user_id)

        author = await db.get(User, identity.user_id)
        return self._to_response(comment, author)

    async def update_comment(
        self,
        db: AsyncSession,
        identity: Identity,
        event_id: uuid.UUID,
        comment_id: uuid.UUID,
        data: CommentUpdate,
    ) -> CommentResponse:
        access = await access_control.event_access(db, identity, event_id)
        comment = await self._get_comment(db, event_id, comment_id)
        access.require(EventAction.EDIT_COMMENT, owner_id=comment.author_id)

        comment.content = data.content
        comment.is_edited = True
        await db.flush()
        await db.refresh(comment)
        logger.info("Comment %s edited by %s", comment_id, identity.user_id)

        author = await db.get(User, comment.author_id)
        return self._to_response(comment, author)

    async def delete_comment(
        self,
        db: AsyncSession,
        identity: Identity,
        event_id: uuid.UUID,
        comment_id: uuid.UUID,
    ) -> None:
        access = await access_control.event_access(db, identity, event_id)
        comment = await self._get_comment(db, event_id, comment_id)
        access.require(EventAction.DELETE_COMMENT, owner_id=comment.author_id)

        await db.delete(comment)
        await db.flush()
        logger.info("Comment %s deleted by %s", comment_id, identity.user_id)


# ── Singleton Instance ────────────────────────────────────────────────────
comment_service = CommentService()
