import pytest
from sqlalchemy import func, select
from sqlalchemy.orm import Session
from mealplannr.config import settings
from mealplannr.core.exception import (
    AuthorizationException,
    ConflictException,
    ResourceNotFoundException,
    ValidationException
)
from mealplannr.models.network import NetworkHousehold, NetworkRole, InvitationStatus
from mealplannr.services.network_service import NetworkService, invitation_link
from mealplannr.utils.security import create_invitation_token


@pytest.fixture
def owner(make_user):
    return make_user("alice")


@pytest.fixture
def owner_household(owner, make_household):
    return make_household(owner, "Household A")


@pytest.fixture
def guest(make_user):
    return make_user("bob")


@pytest.fixture
def guest_household(guest, make_household):
    return make_household(guest, "Household B")


@pytest.fixture
def service(db_session, mailer):
    return NetworkService(db_session, mailer)


@pytest.fixture
def network(service, owner, owner_household):
    return service.create_network("Family", owner.id)


def _link_count(db: Session, network_id: int) -> int:
    return db.execute(
        select(func.count(NetworkHousehold.id)).where(NetworkHousehold.network_id == network_id)
    ).scalar_one()


@pytest.mark.unit
class TestCreateNetwork:

    def test_creates_network_with_owner_link(self, db_session, service, network, owner, owner_household):
        assert network.name == "Family"
        assert network.created_by == owner.id

        link = service.network_repo.get_link(network.id, owner_household.id)
        assert link.role == NetworkRole.OWNER
        assert link.status == InvitationStatus.ACCEPTED
        assert link.joined_at is not None

    def test_requires_owned_household(self, service, make_user):
        loner = make_user("loner")

        with pytest.raises(ValidationException) as exc_info:
            service.create_network("Nowhere", loner.id)

        assert exc_info.value.code == "NoHousehold"

    def test_household_member_cannot_create(self, service, owner_household, make_user, add_member):
        member = make_user("carol")
        add_member(owner_household, member)

        with pytest.raises(ValidationException) as exc_info:
            service.create_network("Side network", member.id)

        assert exc_info.value.code == "NoHousehold"

    def test_blank_name_rejected(self, service, owner, owner_household):
        with pytest.raises(ValidationException):
            service.create_network("   ", owner.id)


@pytest.mark.unit
class TestInvitationLifecycle:

    def test_invite_creates_pending_link_and_emails_owner(
        self, service, network, guest, guest_household, mailer
    ):
        link = service.invite_household(network.id, guest_household.id, network.created_by)

        assert link.status == InvitationStatus.PENDING
        assert link.role == NetworkRole.MEMBER
        assert len(mailer.sent) == 1
        message = mailer.sent[0]
        assert message["to"] == guest.email
        assert message["subject"] == "Network Invitation: Family"
        assert f"/invitations/{link.id}/accept/confirm?token=" in message["body"]
        assert f"/invitations/{link.id}/reject/confirm?token=" in message["body"]

    def test_reject_then_reaccept_and_reinvite_conflict(
        self, service, network, guest, guest_household
    ):
        link = service.invite_household(network.id, guest_household.id, network.created_by)

        rejected = service.reject_invitation(link.id, guest.id)
        assert rejected.status == InvitationStatus.REJECTED

        with pytest.raises(ConflictException) as exc_info:
            service.accept_invitation(link.id, guest.id)
        assert exc_info.value.code == "AlreadyResolved"

        # A rejected link still blocks a new invitation
        with pytest.raises(ConflictException) as exc_info:
            service.invite_household(network.id, guest_household.id, network.created_by)
        assert exc_info.value.code == "AlreadyLinked"

    def test_accept_sets_joined_at(self, service, network, guest, guest_household):
        link = service.invite_household(network.id, guest_household.id, network.created_by)

        accepted = service.accept_invitation(link.id, guest.id)

        assert accepted.status == InvitationStatus.ACCEPTED
        assert accepted.joined_at is not None

    def test_accepted_invitation_cannot_be_rejected(self, service, network, guest, guest_household):
        link = service.invite_household(network.id, guest_household.id, network.created_by)
        service.accept_invitation(link.id, guest.id)

        with pytest.raises(ConflictException) as exc_info:
            service.reject_invitation(link.id, guest.id)
        assert exc_info.value.code == "AlreadyResolved"

    def test_only_invited_household_owner_may_respond(
        self, service, network, owner, guest_household, make_user, add_member
    ):
        link = service.invite_household(network.id, guest_household.id, network.created_by)
        member = make_user("dave")
        add_member(guest_household, member)

        for user_id in (owner.id, member.id):
            with pytest.raises(AuthorizationException):
                service.accept_invitation(link.id, user_id)
            with pytest.raises(AuthorizationException):
                service.reject_invitation(link.id, user_id)

        assert service.network_repo.get_link_by_id(link.id).status == InvitationStatus.PENDING

    def test_unknown_invitation(self, service, guest):
        with pytest.raises(ResourceNotFoundException):
            service.accept_invitation(9999, guest.id)

    def test_only_network_owner_may_invite(self, service, network, guest, guest_household, make_user, make_household):
        other = make_user("erin")
        other_household = make_household(other)

        with pytest.raises(AuthorizationException) as exc_info:
            service.invite_household(network.id, other_household.id, guest.id)
        assert exc_info.value.code == "NotOwner"

    def test_invite_unknown_network_or_household(self, service, network, owner, guest_household):
        with pytest.raises(ResourceNotFoundException):
            service.invite_household(9999, guest_household.id, owner.id)
        with pytest.raises(ResourceNotFoundException):
            service.invite_household(network.id, 9999, owner.id)

    def test_owner_household_is_already_linked(self, service, network, owner, owner_household):
        with pytest.raises(ConflictException) as exc_info:
            service.invite_household(network.id, owner_household.id, owner.id)
        assert exc_info.value.code == "AlreadyLinked"


@pytest.mark.unit
class TestNetworkCapacity:

    def _fill_network(self, service, network, make_user, make_household, count):
        """Invite and accept households until the network holds `count` accepted households."""
        for i in range(count - 1):
            user = make_user(f"member{i}")
            household = make_household(user)
            link = service.invite_household(network.id, household.id, network.created_by)
            service.accept_invitation(link.id, user.id)

    def test_eleventh_invitation_is_refused(
        self, db_session, service, network, make_user, make_household
    ):
        self._fill_network(service, network, make_user, make_household, settings.MAX_HOUSEHOLDS_PER_NETWORK)
        assert service.network_repo.count_accepted(network.id) == settings.MAX_HOUSEHOLDS_PER_NETWORK
        links_before = _link_count(db_session, network.id)

        extra = make_household(make_user("extra"))
        with pytest.raises(ConflictException) as exc_info:
            service.invite_household(network.id, extra.id, network.created_by)

        assert exc_info.value.code == "NetworkFull"
        assert _link_count(db_session, network.id) == links_before

    def test_capacity_is_checked_before_household_lookup(
        self, service, network, make_user, make_household
    ):
        self._fill_network(service, network, make_user, make_household, settings.MAX_HOUSEHOLDS_PER_NETWORK)

        with pytest.raises(ConflictException) as exc_info:
            service.invite_household(network.id, 9999, network.created_by)

        assert exc_info.value.code == "NetworkFull"

    def test_accept_rechecks_capacity(
        self, service, network, make_user, make_household
    ):
        late_user = make_user("late")
        late_household = make_household(late_user)
        late_link = service.invite_household(network.id, late_household.id, network.created_by)

        self._fill_network(service, network, make_user, make_household, settings.MAX_HOUSEHOLDS_PER_NETWORK)

        with pytest.raises(ConflictException) as exc_info:
            service.accept_invitation(late_link.id, late_user.id)

        assert exc_info.value.code == "NetworkFull"
        assert service.network_repo.count_accepted(network.id) == settings.MAX_HOUSEHOLDS_PER_NETWORK
        assert service.network_repo.get_link_by_id(late_link.id).status == InvitationStatus.PENDING


@pytest.mark.unit
class TestRemoveHousehold:

    def test_remove_deletes_link_and_notifies(
        self, service, network, guest, guest_household, mailer
    ):
        link = service.invite_household(network.id, guest_household.id, network.created_by)
        service.accept_invitation(link.id, guest.id)
        mailer.sent.clear()

        assert service.remove_household(network.id, guest_household.id, network.created_by) is True

        assert service.network_repo.get_link(network.id, guest_household.id) is None
        assert mailer.sent[0]["to"] == guest.email
        assert mailer.sent[0]["subject"] == "Removed from Network: Family"

    def test_removed_household_can_be_invited_again(self, service, network, guest, guest_household):
        link = service.invite_household(network.id, guest_household.id, network.created_by)
        service.reject_invitation(link.id, guest.id)
        service.remove_household(network.id, guest_household.id, network.created_by)

        again = service.invite_household(network.id, guest_household.id, network.created_by)
        assert again.status == InvitationStatus.PENDING

    def test_cannot_remove_owner_household(self, service, network, owner, owner_household):
        with pytest.raises(ValidationException) as exc_info:
            service.remove_household(network.id, owner_household.id, owner.id)
        assert exc_info.value.code == "CannotRemoveOwner"

    def test_only_owner_may_remove(self, service, network, guest, guest_household):
        service.invite_household(network.id, guest_household.id, network.created_by)

        with pytest.raises(AuthorizationException) as exc_info:
            service.remove_household(network.id, guest_household.id, guest.id)
        assert exc_info.value.code == "NotOwner"

    def test_missing_link_is_not_found(self, service, network, guest_household):
        with pytest.raises(ResourceNotFoundException):
            service.remove_household(network.id, guest_household.id, network.created_by)


@pytest.mark.unit
class TestUserNetworks:

    def test_lists_accepted_networks_with_counts(
        self, service, network, owner, guest, guest_household
    ):
        link = service.invite_household(network.id, guest_household.id, network.created_by)

        assert service.get_user_networks(guest.id) == []

        service.accept_invitation(link.id, guest.id)

        guest_networks = service.get_user_networks(guest.id)
        assert len(guest_networks) == 1
        assert guest_networks[0]["id"] == network.id
        assert guest_networks[0]["role"] == NetworkRole.MEMBER
        assert guest_networks[0]["household_count"] == 2

        owner_networks = service.get_user_networks(owner.id)
        assert owner_networks[0]["role"] == NetworkRole.OWNER

    def test_user_without_household_has_no_networks(self, service, make_user):
        assert service.get_user_networks(make_user("nobody").id) == []


@pytest.mark.unit
class TestInvitationLinks:

    def test_link_accepts_invitation(self, service, network, guest, guest_household):
        link = service.invite_household(network.id, guest_household.id, network.created_by)
        token = create_invitation_token(link.id, "accept")

        resolved = service.resolve_invitation_link(link.id, "accept", token, guest.id)

        assert resolved.status == InvitationStatus.ACCEPTED

    def test_token_for_other_action_rejected(self, service, network, guest, guest_household):
        link = service.invite_household(network.id, guest_household.id, network.created_by)
        token = create_invitation_token(link.id, "reject")

        with pytest.raises(ValidationException) as exc_info:
            service.resolve_invitation_link(link.id, "accept", token, guest.id)
        assert exc_info.value.code == "InvalidToken"

    def test_token_for_other_invitation_rejected(self, service, network, guest, guest_household):
        link = service.invite_household(network.id, guest_household.id, network.created_by)
        token = create_invitation_token(link.id + 1, "accept")

        with pytest.raises(ValidationException) as exc_info:
            service.resolve_invitation_link(link.id, "accept", token, guest.id)
        assert exc_info.value.code == "InvalidToken"

    def test_link_is_single_use(self, service, network, guest, guest_household):
        link = service.invite_household(network.id, guest_household.id, network.created_by)
        token = create_invitation_token(link.id, "reject")
        service.resolve_invitation_link(link.id, "reject", token, guest.id)

        with pytest.raises(ConflictException) as exc_info:
            service.resolve_invitation_link(link.id, "reject", token, guest.id)
        assert exc_info.value.code == "AlreadyResolved"

    def test_invitation_link_format(self):
        url = invitation_link(7, "accept")
        assert url.startswith(f"{settings.APP_BASE_URL.rstrip('/')}{settings.API_V1_STR}/invitations/7/accept/confirm?token=")
