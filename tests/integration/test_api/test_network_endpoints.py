import pytest
from mealplannr.config import settings
from mealplannr.utils.security import create_invitation_token

API = settings.API_V1_STR


@pytest.fixture
def alice(make_user):
    return make_user("alice")


@pytest.fixture
def bob(make_user):
    return make_user("bob")


@pytest.fixture
def households(client, alice, bob, auth_headers_for):
    ids = {}
    for user, name in ((alice, "Alpha"), (bob, "Bravo")):
        response = client.post(f"{API}/households", json={"name": name}, headers=auth_headers_for(user))
        assert response.status_code == 201
        ids[user.username] = response.json()["data"]["id"]
    return ids


@pytest.fixture
def network_id(client, alice, households, auth_headers_for):
    response = client.post(f"{API}/networks", json={"name": "Neighbours"}, headers=auth_headers_for(alice))
    assert response.status_code == 201
    return response.json()["data"]["id"]


@pytest.mark.integration
class TestNetworkEndpoints:

    def test_requires_authentication(self, client):
        response = client.get(f"{API}/networks/my")

        assert response.status_code == 401
        assert response.json()["success"] is False

    def test_create_network_without_household(self, client, make_user, auth_headers_for):
        response = client.post(
            f"{API}/networks", json={"name": "Nope"}, headers=auth_headers_for(make_user("lonely"))
        )

        body = response.json()
        assert response.status_code == 400
        assert body["error"]["code"] == "NoHousehold"
        assert body["error"]["category"] == "Validation"

    def test_invite_accept_flow(self, client, alice, bob, households, network_id, auth_headers_for):
        response = client.post(
            f"{API}/networks/{network_id}/invite",
            json={"household_id": households["bob"]},
            headers=auth_headers_for(alice)
        )
        assert response.status_code == 201
        invitation = response.json()["data"]
        assert invitation["status"] == "pending"

        response = client.get(f"{API}/households/invitations", headers=auth_headers_for(bob))
        assert [i["network_name"] for i in response.json()["data"]] == ["Neighbours"]

        response = client.post(
            f"{API}/invitations/{invitation['id']}/accept", headers=auth_headers_for(bob)
        )
        assert response.status_code == 200
        assert response.json()["data"]["status"] == "accepted"

        response = client.get(f"{API}/networks/my", headers=auth_headers_for(bob))
        networks = response.json()["data"]
        assert networks[0]["id"] == network_id
        assert networks[0]["household_count"] == 2
        assert networks[0]["role"] == "member"

        response = client.get(
            f"{API}/networks/{network_id}/households",
            params={"status": "accepted"},
            headers=auth_headers_for(alice)
        )
        assert {h["household_name"] for h in response.json()["data"]} == {"Alpha", "Bravo"}

    def test_resolving_twice_is_a_conflict(self, client, alice, bob, households, network_id, auth_headers_for):
        invitation = client.post(
            f"{API}/networks/{network_id}/invite",
            json={"household_id": households["bob"]},
            headers=auth_headers_for(alice)
        ).json()["data"]
        client.post(f"{API}/invitations/{invitation['id']}/reject", headers=auth_headers_for(bob))

        response = client.post(f"{API}/invitations/{invitation['id']}/accept", headers=auth_headers_for(bob))

        body = response.json()
        assert response.status_code == 400
        assert body["error"]["code"] == "AlreadyResolved"
        assert body["error"]["category"] == "Resource Conflict"

    def test_other_user_cannot_accept(self, client, alice, households, network_id, auth_headers_for):
        invitation = client.post(
            f"{API}/networks/{network_id}/invite",
            json={"household_id": households["bob"]},
            headers=auth_headers_for(alice)
        ).json()["data"]

        response = client.post(f"{API}/invitations/{invitation['id']}/accept", headers=auth_headers_for(alice))

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "NotAuthorized"

    def test_confirm_link(self, client, alice, bob, households, network_id, auth_headers_for):
        invitation = client.post(
            f"{API}/networks/{network_id}/invite",
            json={"household_id": households["bob"]},
            headers=auth_headers_for(alice)
        ).json()["data"]
        url = f"{API}/invitations/{invitation['id']}/reject/confirm"

        bad = client.get(
            url,
            params={"token": create_invitation_token(invitation["id"], "accept")},
            headers=auth_headers_for(bob)
        )
        assert bad.status_code == 400
        assert bad.json()["error"]["code"] == "InvalidToken"

        good = client.get(
            url,
            params={"token": create_invitation_token(invitation["id"], "reject")},
            headers=auth_headers_for(bob)
        )
        assert good.status_code == 200
        assert good.json()["data"]["status"] == "rejected"

    def test_remove_household(self, client, alice, bob, households, network_id, auth_headers_for):
        client.post(
            f"{API}/networks/{network_id}/invite",
            json={"household_id": households["bob"]},
            headers=auth_headers_for(alice)
        )

        forbidden = client.delete(
            f"{API}/networks/{network_id}/households/{households['bob']}", headers=auth_headers_for(bob)
        )
        assert forbidden.status_code == 403
        assert forbidden.json()["error"]["code"] == "NotOwner"

        owner_removal = client.delete(
            f"{API}/networks/{network_id}/households/{households['alice']}", headers=auth_headers_for(alice)
        )
        assert owner_removal.status_code == 400
        assert owner_removal.json()["error"]["code"] == "CannotRemoveOwner"

        response = client.delete(
            f"{API}/networks/{network_id}/households/{households['bob']}", headers=auth_headers_for(alice)
        )
        assert response.status_code == 200
        assert response.json()["success"] is True

    def test_invalid_status_filter(self, client, alice, network_id, auth_headers_for):
        response = client.get(
            f"{API}/networks/{network_id}/households",
            params={"status": "maybe"},
            headers=auth_headers_for(alice)
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "InvalidStatus"

    def test_unknown_network(self, client, alice, households, auth_headers_for):
        response = client.post(
            f"{API}/networks/9999/invite",
            json={"household_id": households["bob"]},
            headers=auth_headers_for(alice)
        )

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NotFound"
