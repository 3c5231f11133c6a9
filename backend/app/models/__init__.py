"""
ORM models. Importing this package registers every table on Base.metadata
(used by Alembic autogenerate and by the test suite's create_all()).
"""

from app.models.user import User
from app.models.family import Family, FamilyMember
from app.models.event import Event, EventContributor, EventPrivacy
from app.models.media import Media
from app.models.comment import Comment
from app.models.notification import Notification

__all__ = [
    "User",
    "Family",
    "FamilyMember",
    "Event",
    "EventContributor",
    "EventPrivacy",
    "Media",
    "Comment",
    "Notification",
]
