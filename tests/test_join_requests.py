"""
Tests for the SACCO membership approval workflow.

Verifies:
- Submission creates a pending request and notifies requester and leaders
- Duplicate pending submissions are informational no-ops
- Unanimous approval admits the member, any single rejection vetoes
- Terminal requests ignore further votes
- Approval and rejection sets stay disjoint
"""
import itertools

import pytest
from fastapi import HTTPException

from shared.utils.app_status_code import AppStatusCode
from shared.utils.enums import JoinRequestStatus, NotificationActionType, VoteDecision
from community_service.app.crud.membership import join_requests_crud as crud
from community_service.app.models.membership.join_requests import JoinRequest
from community_service.app.models.membership.organization_members import OrganizationMember
from community_service.app.models.system.notifications import Notification

from conftest import LEADERS, ORG_COVER

APPROVE = VoteDecision.approve
REJECT = VoteDecision.reject


@pytest.fixture
def requester(make_provider):
    return make_provider(name="Amina Otieno", phone="0712345678", service="Tailoring")


def vote(db, organization, requester, role, decision):
    return crud.cast_leader_vote(db, organization.id, requester.id, LEADERS[role], decision)


class TestSubmitJoinRequest:

    def test_submit_creates_pending_request(self, db, organization, requester):
        result = crud.submit_join_request(db, organization.id, requester.id)

        assert result["changed"] is True
        request = result["join_request"]
        assert request.status == JoinRequestStatus.pending
        assert request.user_id == requester.id
        assert request.user_name == "Amina Otieno"
        assert request.user_phone == "712345678"
        assert request.approvals == []
        assert request.rejections == []

    def test_submit_notifies_requester_and_each_leader(self, db, organization, requester):
        crud.submit_join_request(db, organization.id, requester.id)

        to_requester = db.query(Notification).filter(
            Notification.recipient_phone == "712345678").all()
        assert [n.subject for n in to_requester] == ["Request Sent"]

        leader_messages = db.query(Notification).filter(
            Notification.action_type == NotificationActionType.sacco_join_request).all()
        assert sorted(n.recipient_phone for n in leader_messages) == [
            "700000001", "700000002", "700000003"]
        assert all(n.action_organization_id == organization.id for n in leader_messages)
        assert all(n.action_requester_id == requester.id for n in leader_messages)

    def test_duplicate_pending_request_is_a_no_op(self, db, organization, requester):
        first = crud.submit_join_request(db, organization.id, requester.id)
        second = crud.submit_join_request(db, organization.id, requester.id)

        assert second["changed"] is False
        assert second["status_code"] == AppStatusCode.REQUEST_ALREADY_PENDING
        assert "already have a pending request" in second["message"]
        assert second["join_request"].id == first["join_request"].id
        assert db.query(JoinRequest).count() == 1

    def test_unknown_organization_is_not_found(self, db, requester):
        with pytest.raises(HTTPException) as exc:
            crud.submit_join_request(db, 9999, requester.id)
        assert exc.value.status_code == 404
        assert exc.value.detail["status_code"] == AppStatusCode.ORGANIZATION_NOT_FOUND

    def test_individual_profile_is_not_an_organization(self, db, requester, make_provider):
        plumber = make_provider()
        with pytest.raises(HTTPException) as exc:
            crud.submit_join_request(db, plumber.id, requester.id)
        assert exc.value.status_code == 404

    def test_unknown_requester_is_not_found(self, db, organization):
        with pytest.raises(HTTPException) as exc:
            crud.submit_join_request(db, organization.id, 9999)
        assert exc.value.status_code == 404
        assert exc.value.detail["status_code"] == AppStatusCode.REQUESTER_NOT_FOUND

    def test_resubmission_allowed_after_rejection(self, db, organization, requester):
        crud.submit_join_request(db, organization.id, requester.id)
        vote(db, organization, requester, "secretary", REJECT)

        result = crud.submit_join_request(db, organization.id, requester.id)

        assert result["changed"] is True
        assert result["join_request"].status == JoinRequestStatus.pending
        assert db.query(JoinRequest).count() == 2

    def test_existing_member_cannot_request_again(self, db, organization, requester):
        crud.submit_join_request(db, organization.id, requester.id)
        for role in LEADERS:
            vote(db, organization, requester, role, APPROVE)

        result = crud.submit_join_request(db, organization.id, requester.id)

        assert result["changed"] is False
        assert result["status_code"] == AppStatusCode.ALREADY_A_MEMBER
        assert result["join_request"] is None


class TestLeaderVoting:

    @pytest.mark.parametrize("order", list(itertools.permutations(LEADERS)))
    def test_all_three_approvals_in_any_order_admit_member(self, db, organization, requester, order):
        crud.submit_join_request(db, organization.id, requester.id)

        results = [vote(db, organization, requester, role, APPROVE) for role in order]

        assert [r["join_request"].status for r in results] == [
            JoinRequestStatus.pending, JoinRequestStatus.pending, JoinRequestStatus.approved]
        members = db.query(OrganizationMember).filter(
            OrganizationMember.organization_id == organization.id).all()
        assert len(members) == 1
        assert members[0].provider_id == requester.id
        assert members[0].name == "Amina Otieno"
        assert members[0].phone == "712345678"
        assert members[0].avatar_url == requester.avatar_url

    def test_approval_verifies_and_rebrands_requester(self, db, organization, requester):
        crud.submit_join_request(db, organization.id, requester.id)
        for role in LEADERS:
            vote(db, organization, requester, role, APPROVE)

        db.refresh(requester)
        assert requester.is_verified is True
        assert requester.cover_image_url == ORG_COVER

    def test_partial_approval_stays_pending(self, db, organization, requester):
        crud.submit_join_request(db, organization.id, requester.id)
        result = vote(db, organization, requester, "chairperson", APPROVE)

        assert result["changed"] is True
        assert result["join_request"].status == JoinRequestStatus.pending
        assert result["join_request"].approvals == ["700000001"]
        assert "1/3" in result["message"]
        assert db.query(OrganizationMember).count() == 0

    def test_rejection_overrides_prior_approvals(self, db, organization, requester):
        crud.submit_join_request(db, organization.id, requester.id)
        vote(db, organization, requester, "chairperson", APPROVE)
        vote(db, organization, requester, "secretary", APPROVE)
        result = vote(db, organization, requester, "treasurer", REJECT)

        request = result["join_request"]
        assert request.status == JoinRequestStatus.rejected
        assert request.approvals == ["700000001", "700000002"]
        assert request.rejections == ["700000003"]
        assert db.query(OrganizationMember).count() == 0
        db.refresh(requester)
        assert requester.is_verified is False

    def test_votes_after_rejection_are_ignored(self, db, organization, requester):
        crud.submit_join_request(db, organization.id, requester.id)
        vote(db, organization, requester, "chairperson", REJECT)

        result = vote(db, organization, requester, "secretary", APPROVE)

        assert result["changed"] is False
        assert result["status_code"] == AppStatusCode.VOTE_IGNORED
        assert result["join_request"].status == JoinRequestStatus.rejected
        assert result["join_request"].approvals == []

    def test_votes_after_approval_do_not_repeat_side_effects(self, db, organization, requester):
        crud.submit_join_request(db, organization.id, requester.id)
        for role in LEADERS:
            vote(db, organization, requester, role, APPROVE)

        result = vote(db, organization, requester, "treasurer", REJECT)

        assert result["changed"] is False
        assert result["join_request"].status == JoinRequestStatus.approved
        assert result["join_request"].rejections == []
        assert db.query(OrganizationMember).count() == 1

    def test_second_approval_by_same_leader_does_not_double_count(self, db, organization, requester):
        crud.submit_join_request(db, organization.id, requester.id)
        vote(db, organization, requester, "chairperson", APPROVE)
        result = vote(db, organization, requester, "chairperson", APPROVE)

        assert result["changed"] is False
        assert result["leader_vote"] == APPROVE
        assert result["join_request"].approvals == ["700000001"]
        assert result["join_request"].status == JoinRequestStatus.pending

    def test_leader_cannot_switch_vote(self, db, organization, requester):
        crud.submit_join_request(db, organization.id, requester.id)
        vote(db, organization, requester, "secretary", APPROVE)
        result = vote(db, organization, requester, "secretary", REJECT)

        assert result["changed"] is False
        assert result["leader_vote"] == APPROVE
        assert result["join_request"].status == JoinRequestStatus.pending
        assert result["join_request"].rejections == []

    def test_leader_phone_formats_are_normalized(self, db, organization, requester):
        crud.submit_join_request(db, organization.id, requester.id)
        result = crud.cast_leader_vote(
            db, organization.id, requester.id, "+254 700 000 001", APPROVE)

        assert result["join_request"].approvals == ["700000001"]

    def test_non_leader_vote_is_forbidden(self, db, organization, requester):
        crud.submit_join_request(db, organization.id, requester.id)
        with pytest.raises(HTTPException) as exc:
            crud.cast_leader_vote(db, organization.id, requester.id, "0799999999", APPROVE)
        assert exc.value.status_code == 403
        assert exc.value.detail["status_code"] == AppStatusCode.NOT_A_LEADER

    def test_vote_without_request_is_not_found(self, db, organization, requester):
        with pytest.raises(HTTPException) as exc:
            vote(db, organization, requester, "chairperson", APPROVE)
        assert exc.value.status_code == 404

    def test_vote_for_unknown_requester_is_not_found(self, db, organization):
        with pytest.raises(HTTPException) as exc:
            crud.cast_leader_vote(db, organization.id, 9999, LEADERS["chairperson"], APPROVE)
        assert exc.value.status_code == 404

    def test_decision_notifies_requester(self, db, organization, requester):
        crud.submit_join_request(db, organization.id, requester.id)
        vote(db, organization, requester, "treasurer", REJECT)

        subjects = [n.subject for n in db.query(Notification).filter(
            Notification.recipient_phone == "712345678").order_by(Notification.id)]
        assert subjects == ["Request Sent", "Member Rejected"]

    def test_member_is_a_snapshot(self, db, organization, requester):
        crud.submit_join_request(db, organization.id, requester.id)
        for role in LEADERS:
            vote(db, organization, requester, role, APPROVE)

        requester.name = "Amina O. (renamed)"
        requester.hourly_rate = 900
        db.commit()

        member = db.query(OrganizationMember).one()
        assert member.name == "Amina Otieno"
        assert member.hourly_rate == 500

    @pytest.mark.parametrize("votes", [
        [("chairperson", APPROVE), ("secretary", REJECT), ("treasurer", APPROVE)],
        [("treasurer", APPROVE), ("treasurer", REJECT), ("secretary", APPROVE)],
        [("secretary", REJECT), ("secretary", APPROVE), ("chairperson", REJECT)],
        [("chairperson", APPROVE), ("chairperson", APPROVE), ("secretary", APPROVE),
         ("treasurer", APPROVE), ("treasurer", REJECT)],
    ])
    def test_approvals_and_rejections_stay_disjoint(self, db, organization, requester, votes):
        crud.submit_join_request(db, organization.id, requester.id)
        for role, decision in votes:
            request = vote(db, organization, requester, role, decision)["join_request"]
            assert not set(request.approvals) & set(request.rejections)
            if request.status == JoinRequestStatus.approved:
                assert len(request.approvals) == 3


class TestPendingQueries:

    def test_pending_requests_in_submission_order(self, db, organization, make_provider):
        first, second, third = make_provider(), make_provider(), make_provider()
        for person in (first, second, third):
            crud.submit_join_request(db, organization.id, person.id)
        crud.cast_leader_vote(db, organization.id, second.id, LEADERS["chairperson"], REJECT)

        result = crud.pending_requests_for(db, organization.id)

        assert result["total"] == 2
        assert [r.user_id for r in result["join_requests"]] == [first.id, third.id]

    def test_pending_requests_for_unknown_organization(self, db):
        with pytest.raises(HTTPException) as exc:
            crud.pending_requests_for(db, 4242)
        assert exc.value.status_code == 404
