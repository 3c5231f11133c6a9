"""
FamilyEvents Backend — Access-Control Resolver Unit Tests
=========================================================

What:  Tests for the pure decision functions in app.services.access_control.
How:   Builds EventContext values by hand (transient ORM objects, no
       database) and checks the Decision returned for each action.

What we test:
    ✅ Non-members are refused every event action, whatever rows they hold
    ✅ The event creator is allowed every content action
    ✅ Contributor flags: any row for comment/upload, can_invite, can_delete
    ✅ Privacy overrides restrict view/comment/upload and can grant update
    ✅ Comment editing stays with the author, even for the creator
    ✅ Family actions: view/create-event for members, the rest for admins
"""

import uuid

import pytest

from app.exceptions import PermissionDeniedError
from app.models.event import Event, EventContributor, EventPrivacy
from app.models.family import FamilyMember
from app.services.access_control import (
    Decision,
    EventAccess,
    EventAction,
    EventContext,
    FamilyAction,
    Identity,
    decide_event_action,
    decide_family_action,
)

CREATOR = uuid.uuid4()
USER = uuid.uuid4()
OTHER = uuid.uuid4()


def contributor(can_edit=True, can_delete=False, can_invite=False) -> EventContributor:
    return EventContributor(
        user_id=USER, role="editor", can_edit=can_edit, can_delete=can_delete, can_invite=can_invite
    )


def privacy(can_view=True, can_edit=False, can_comment=True, can_upload_media=True) -> EventPrivacy:
    return EventPrivacy(
        user_id=USER,
        can_view=can_view,
        can_edit=can_edit,
        can_comment=can_comment,
        can_upload_media=can_upload_media,
    )


def ctx(user_id=USER, role="member", **kwargs) -> EventContext:
    return EventContext(user_id=user_id, creator_id=CREATOR, membership_role=role, **kwargs)


CONTENT_ACTIONS = [
    EventAction.COMMENT,
    EventAction.UPLOAD_MEDIA,
    EventAction.MANAGE_CONTRIBUTORS,
    EventAction.DELETE_MEDIA,
    EventAction.DELETE_COMMENT,
]


class TestMembershipGate:
    """No FamilyMember row means access denied, before anything else."""

    @pytest.mark.parametrize("action", list(EventAction))
    def test_non_member_denied_every_action(self, action):
        decision = decide_event_action(
            action,
            ctx(
                role=None,
                contributor=contributor(can_edit=True, can_delete=True, can_invite=True),
                privacy=privacy(can_edit=True),
                owner_id=USER,
            ),
        )
        assert decision is Decision.NOT_A_MEMBER

    def test_non_member_creator_still_denied(self):
        """Creator rights do not survive leaving the family."""
        decision = decide_event_action(EventAction.VIEW, ctx(user_id=CREATOR, role=None))
        assert decision is Decision.NOT_A_MEMBER


class TestCreatorRights:

    @pytest.mark.parametrize("action", CONTENT_ACTIONS)
    def test_creator_allowed_content_actions(self, action):
        decision = decide_event_action(action, ctx(user_id=CREATOR, owner_id=OTHER))
        assert decision is Decision.ALLOW

    @pytest.mark.parametrize(
        "action", [EventAction.UPDATE, EventAction.DELETE, EventAction.MANAGE_PRIVACY]
    )
    def test_creator_allowed_event_management(self, action):
        assert decide_event_action(action, ctx(user_id=CREATOR)) is Decision.ALLOW

    def test_creator_privacy_row_is_ignored(self):
        decision = decide_event_action(
            EventAction.COMMENT, ctx(user_id=CREATOR, privacy=privacy(can_comment=False))
        )
        assert decision is Decision.ALLOW

    def test_creator_cannot_edit_someone_elses_comment(self):
        decision = decide_event_action(EventAction.EDIT_COMMENT, ctx(user_id=CREATOR, owner_id=OTHER))
        assert decision is Decision.FORBIDDEN


class TestContributorGrants:

    def test_plain_member_may_view(self):
        assert decide_event_action(EventAction.VIEW, ctx()) is Decision.ALLOW

    @pytest.mark.parametrize("action", [EventAction.COMMENT, EventAction.UPLOAD_MEDIA])
    def test_plain_member_may_not_post(self, action):
        assert decide_event_action(action, ctx()) is Decision.FORBIDDEN

    @pytest.mark.parametrize("action", [EventAction.COMMENT, EventAction.UPLOAD_MEDIA])
    def test_any_contributor_row_may_post(self, action):
        row = contributor(can_edit=False, can_delete=False, can_invite=False)
        assert decide_event_action(action, ctx(contributor=row)) is Decision.ALLOW

    def test_manage_contributors_requires_can_invite(self):
        assert (
            decide_event_action(EventAction.MANAGE_CONTRIBUTORS, ctx(contributor=contributor()))
            is Decision.FORBIDDEN
        )
        assert (
            decide_event_action(
                EventAction.MANAGE_CONTRIBUTORS, ctx(contributor=contributor(can_invite=True))
            )
            is Decision.ALLOW
        )

    def test_delete_media_by_uploader(self):
        assert decide_event_action(EventAction.DELETE_MEDIA, ctx(owner_id=USER)) is Decision.ALLOW

    def test_delete_media_with_can_delete(self):
        decision = decide_event_action(
            EventAction.DELETE_MEDIA, ctx(contributor=contributor(can_delete=True), owner_id=OTHER)
        )
        assert decision is Decision.ALLOW

    def test_delete_media_without_grant(self):
        decision = decide_event_action(
            EventAction.DELETE_MEDIA, ctx(contributor=contributor(), owner_id=OTHER)
        )
        assert decision is Decision.FORBIDDEN

    def test_delete_comment_is_author_only_for_non_creators(self):
        """can_delete covers media, not other people's comments."""
        row = contributor(can_delete=True)
        assert (
            decide_event_action(EventAction.DELETE_COMMENT, ctx(contributor=row, owner_id=OTHER))
            is Decision.FORBIDDEN
        )
        assert (
            decide_event_action(EventAction.DELETE_COMMENT, ctx(owner_id=USER)) is Decision.ALLOW
        )

    def test_can_edit_contributor_cannot_edit_others_comment(self):
        row = contributor(can_edit=True)
        decision = decide_event_action(EventAction.EDIT_COMMENT, ctx(contributor=row, owner_id=OTHER))
        assert decision is Decision.FORBIDDEN

    def test_author_may_edit_own_comment(self):
        assert decide_event_action(EventAction.EDIT_COMMENT, ctx(owner_id=USER)) is Decision.ALLOW

    def test_contributor_cannot_manage_privacy(self):
        row = contributor(can_edit=True, can_delete=True, can_invite=True)
        decision = decide_event_action(EventAction.MANAGE_PRIVACY, ctx(role="admin", contributor=row))
        assert decision is Decision.FORBIDDEN


class TestEventManagement:

    @pytest.mark.parametrize("action", [EventAction.UPDATE, EventAction.DELETE])
    def test_admin_may_update_and_delete(self, action):
        assert decide_event_action(action, ctx(role="admin")) is Decision.ALLOW

    @pytest.mark.parametrize("action", [EventAction.UPDATE, EventAction.DELETE])
    def test_member_may_not(self, action):
        row = contributor(can_edit=True, can_delete=True)
        assert decide_event_action(action, ctx(contributor=row)) is Decision.FORBIDDEN


class TestPrivacyOverrides:

    def test_can_view_false_hides_event(self):
        assert (
            decide_event_action(EventAction.VIEW, ctx(privacy=privacy(can_view=False)))
            is Decision.FORBIDDEN
        )

    def test_can_view_false_applies_to_admins(self):
        decision = decide_event_action(
            EventAction.VIEW, ctx(role="admin", privacy=privacy(can_view=False))
        )
        assert decision is Decision.FORBIDDEN

    def test_can_comment_false_overrides_contributor(self):
        decision = decide_event_action(
            EventAction.COMMENT,
            ctx(contributor=contributor(), privacy=privacy(can_comment=False)),
        )
        assert decision is Decision.FORBIDDEN

    def test_can_upload_false_overrides_contributor(self):
        decision = decide_event_action(
            EventAction.UPLOAD_MEDIA,
            ctx(contributor=contributor(), privacy=privacy(can_upload_media=False)),
        )
        assert decision is Decision.FORBIDDEN

    def test_privacy_row_alone_does_not_grant_comment(self):
        assert (
            decide_event_action(EventAction.COMMENT, ctx(privacy=privacy())) is Decision.FORBIDDEN
        )

    def test_can_edit_grants_update(self):
        assert (
            decide_event_action(EventAction.UPDATE, ctx(privacy=privacy(can_edit=True)))
            is Decision.ALLOW
        )

    def test_can_edit_does_not_grant_delete(self):
        assert (
            decide_event_action(EventAction.DELETE, ctx(privacy=privacy(can_edit=True)))
            is Decision.FORBIDDEN
        )


class TestFamilyDecisions:

    @pytest.mark.parametrize("action", list(FamilyAction))
    def test_non_member(self, action):
        assert decide_family_action(action, None) is Decision.NOT_A_MEMBER

    @pytest.mark.parametrize("action", list(FamilyAction))
    def test_admin_allowed_everything(self, action):
        assert decide_family_action(action, "admin") is Decision.ALLOW

    @pytest.mark.parametrize(
        "action,expected",
        [
            (FamilyAction.VIEW, Decision.ALLOW),
            (FamilyAction.CREATE_EVENT, Decision.ALLOW),
            (FamilyAction.UPDATE, Decision.FORBIDDEN),
            (FamilyAction.DELETE, Decision.FORBIDDEN),
            (FamilyAction.MANAGE_MEMBERS, Decision.FORBIDDEN),
        ],
    )
    def test_member(self, action, expected):
        assert decide_family_action(action, "member") is expected


class TestEventAccessRequire:
    """EventAccess.require() turns decisions into PermissionDeniedError."""

    def _access(self, user_id, role="member", contributor_row=None) -> EventAccess:
        event = Event(id=uuid.uuid4(), created_by_id=CREATOR, family_id=uuid.uuid4())
        return EventAccess(
            identity=Identity(user_id=user_id, email="someone@example.com"),
            event=event,
            membership=FamilyMember(role=role),
            contributor=contributor_row,
            privacy=None,
        )

    def test_allowed_does_not_raise(self):
        self._access(CREATOR).require(EventAction.DELETE)

    def test_forbidden_raises_with_reason(self):
        with pytest.raises(PermissionDeniedError) as exc_info:
            self._access(USER).require(EventAction.DELETE)
        assert exc_info.value.reason == "forbidden"
        assert exc_info.value.context["action"] == "delete"

    def test_owner_id_is_passed_through(self):
        access = self._access(USER)
        access.require(EventAction.DELETE_MEDIA, owner_id=USER)
        with pytest.raises(PermissionDeniedError):
            access.require(EventAction.DELETE_MEDIA, owner_id=OTHER)
