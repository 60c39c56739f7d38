"""Integration tests for Invitations API."""

from uuid import uuid4

import pytest
from sqlalchemy import select

from infrastructure.auth.jwt_provider import JWTAuthProvider
from infrastructure.auth.provider import AuthenticatedPrincipal
from infrastructure.database.models import InvitationModel, NotificationModel
from tests.conftest import bearer
from tests.integration.conftest import Gatekeeper

BASE = "/api/v1/invitations"


@pytest.fixture
def headers(auth_provider: JWTAuthProvider, admin_user: AuthenticatedPrincipal) -> dict[str, str]:
    return bearer(auth_provider, admin_user)


async def _invite(
    gatekeeper: Gatekeeper, headers: dict[str, str], email: str, role: str = "ADMIN_STAFF"
) -> dict:
    response = await gatekeeper.client.post(
        BASE, json={"email": email, "role": role, "name": "Invitee"}, headers=headers
    )
    assert response.status_code == 201, response.json()
    return response.json()["data"]


class TestAccessControl:
    """Only the admin tier may manage invitations."""

    @pytest.mark.asyncio
    async def test_missing_token_is_401(self, gatekeeper: Gatekeeper) -> None:
        response = await gatekeeper.client.get(BASE)

        assert response.status_code == 401
        assert response.json()["error_code"] == "UNAUTHORIZED"

    @pytest.mark.asyncio
    async def test_customer_is_forbidden(
        self,
        gatekeeper: Gatekeeper,
        auth_provider: JWTAuthProvider,
        customer_principal: AuthenticatedPrincipal,
    ) -> None:
        headers = bearer(auth_provider, customer_principal)

        list_response = await gatekeeper.client.get(BASE, headers=headers)
        create_response = await gatekeeper.client.post(
            BASE, json={"email": "x@example.com", "role": "ADMIN"}, headers=headers
        )

        assert list_response.status_code == 403
        assert create_response.status_code == 403
        assert gatekeeper.dispatcher.sent == []


class TestInvitationCreation:
    @pytest.mark.asyncio
    async def test_create_invitation(self, gatekeeper: Gatekeeper, headers: dict[str, str]) -> None:
        """POST returns 201, emails the token and never echoes it."""
        response = await gatekeeper.client.post(
            BASE,
            json={"email": "Invitee@Example.com", "role": "ADMIN_STAFF", "message": "Welcome"},
            headers=headers,
        )

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Invitation sent"
        assert body["data"]["email"] == "invitee@example.com"
        assert body["data"]["status"] == "pending"
        assert "token" not in body and "token" not in body["data"]
        assert "token_hash" not in body["data"]
        assert gatekeeper.dispatcher.operations() == ["invitation"]

    @pytest.mark.asyncio
    async def test_only_token_hash_is_stored(
        self, gatekeeper: Gatekeeper, headers: dict[str, str]
    ) -> None:
        await _invite(gatekeeper, headers, "hashed@example.com")
        raw_token = gatekeeper.last_invitation_token()

        async with gatekeeper.session_factory() as session:
            stored = (await session.execute(select(InvitationModel))).scalar_one()

        assert stored.token_hash != raw_token
        assert len(stored.token_hash) == 64

    @pytest.mark.asyncio
    async def test_duplicate_pending_invitation_is_409(
        self, gatekeeper: Gatekeeper, headers: dict[str, str]
    ) -> None:
        await _invite(gatekeeper, headers, "twice@example.com")

        response = await gatekeeper.client.post(
            BASE, json={"email": "twice@example.com", "role": "ADMIN"}, headers=headers
        )

        assert response.status_code == 409
        assert response.json()["error_code"] == "DUPLICATE_INVITATION"

    @pytest.mark.asyncio
    async def test_registered_email_is_409(
        self, gatekeeper: Gatekeeper, headers: dict[str, str], admin_user: AuthenticatedPrincipal
    ) -> None:
        response = await gatekeeper.client.post(
            BASE, json={"email": admin_user.email, "role": "ADMIN"}, headers=headers
        )

        assert response.status_code == 409
        assert response.json()["error_code"] == "EMAIL_ALREADY_REGISTERED"

    @pytest.mark.asyncio
    async def test_expired_invitation_can_be_replaced(
        self, gatekeeper: Gatekeeper, headers: dict[str, str]
    ) -> None:
        await _invite(gatekeeper, headers, "again@example.com")
        gatekeeper.clock.advance(hours=25)

        response = await gatekeeper.client.post(
            BASE, json={"email": "again@example.com", "role": "CUSTOMER"}, headers=headers
        )

        assert response.status_code == 201
        async with gatekeeper.session_factory() as session:
            statuses = sorted((await session.execute(select(InvitationModel.status))).scalars())
        assert statuses == ["expired", "pending"]

    @pytest.mark.asyncio
    async def test_unknown_role_is_400(self, gatekeeper: Gatekeeper, headers: dict[str, str]) -> None:
        response = await gatekeeper.client.post(
            BASE, json={"email": "a@example.com", "role": "ROOT"}, headers=headers
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_actor_is_not_notified_of_own_invitation(
        self, gatekeeper: Gatekeeper, headers: dict[str, str]
    ) -> None:
        await _invite(gatekeeper, headers, "notify@example.com")

        async with gatekeeper.session_factory() as session:
            types = list((await session.execute(select(NotificationModel.type_name))).scalars())

        # The only admin is the actor, so no event row is written
        assert types == []


class TestInvitationListing:
    @pytest.mark.asyncio
    async def test_list_newest_first_without_tokens(
        self, gatekeeper: Gatekeeper, headers: dict[str, str]
    ) -> None:
        await _invite(gatekeeper, headers, "first@example.com")
        gatekeeper.clock.advance(minutes=1)
        await _invite(gatekeeper, headers, "second@example.com")

        response = await gatekeeper.client.get(BASE, headers=headers)

        assert response.status_code == 200
        body = response.json()
        assert body["meta"]["total"] == 2
        assert [item["email"] for item in body["data"]] == [
            "second@example.com",
            "first@example.com",
        ]
        assert all("token" not in item for item in body["data"])


class TestInvitationUpdate:
    @pytest.mark.asyncio
    async def test_edit_fields(self, gatekeeper: Gatekeeper, headers: dict[str, str]) -> None:
        created = await _invite(gatekeeper, headers, "edit@example.com")

        response = await gatekeeper.client.put(
            f"{BASE}/{created['id']}",
            json={"role": "ADMIN", "name": "Renamed"},
            headers=headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Invitation updated"
        assert body["data"]["role"] == "ADMIN"
        assert body["data"]["name"] == "Renamed"
        assert gatekeeper.dispatcher.operations() == ["invitation"]

    @pytest.mark.asyncio
    async def test_no_changes(self, gatekeeper: Gatekeeper, headers: dict[str, str]) -> None:
        created = await _invite(gatekeeper, headers, "same@example.com")

        response = await gatekeeper.client.put(f"{BASE}/{created['id']}", json={}, headers=headers)

        assert response.status_code == 200
        assert response.json()["message"] == "No changes"

    @pytest.mark.asyncio
    async def test_resend_rotates_token(
        self, gatekeeper: Gatekeeper, headers: dict[str, str]
    ) -> None:
        created = await _invite(gatekeeper, headers, "resend@example.com")
        first_token = gatekeeper.last_invitation_token()
        gatekeeper.clock.advance(hours=2)

        response = await gatekeeper.client.put(
            f"{BASE}/{created['id']}", json={"resend": True}, headers=headers
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Invitation resent"
        assert gatekeeper.dispatcher.operations() == ["invitation", "invitation"]
        assert gatekeeper.last_invitation_token() != first_token

    @pytest.mark.asyncio
    async def test_unknown_invitation_is_404(
        self, gatekeeper: Gatekeeper, headers: dict[str, str]
    ) -> None:
        response = await gatekeeper.client.put(
            f"{BASE}/{uuid4()}", json={"name": "x"}, headers=headers
        )

        assert response.status_code == 404
        assert response.json()["error_code"] == "INVITATION_NOT_FOUND"


class TestInvitationRevocation:
    @pytest.mark.asyncio
    async def test_revoke_then_revoke_again(
        self, gatekeeper: Gatekeeper, headers: dict[str, str]
    ) -> None:
        created = await _invite(gatekeeper, headers, "revoke@example.com")

        first = await gatekeeper.client.patch(f"{BASE}/{created['id']}/revoke", headers=headers)
        second = await gatekeeper.client.patch(f"{BASE}/{created['id']}/revoke", headers=headers)

        assert first.status_code == 200
        assert first.json()["data"]["status"] == "revoked"
        assert second.status_code == 400
        assert second.json()["error_code"] == "INVITATION_NOT_PENDING"

    @pytest.mark.asyncio
    async def test_revoked_invitation_cannot_be_edited(
        self, gatekeeper: Gatekeeper, headers: dict[str, str]
    ) -> None:
        created = await _invite(gatekeeper, headers, "frozen@example.com")
        await gatekeeper.client.patch(f"{BASE}/{created['id']}/revoke", headers=headers)

        response = await gatekeeper.client.put(
            f"{BASE}/{created['id']}", json={"resend": True}, headers=headers
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "INVITATION_NOT_PENDING"


class TestInvitationDeletion:
    @pytest.mark.asyncio
    async def test_delete_single(self, gatekeeper: Gatekeeper, headers: dict[str, str]) -> None:
        created = await _invite(gatekeeper, headers, "gone@example.com")

        response = await gatekeeper.client.delete(BASE, params={"id": created["id"]}, headers=headers)

        assert response.status_code == 200
        assert response.json() == {"deleted": 1, "failed": 0, "failed_ids": []}
        listing = await gatekeeper.client.get(BASE, headers=headers)
        assert listing.json()["meta"]["total"] == 0

    @pytest.mark.asyncio
    async def test_delete_single_missing_is_404(
        self, gatekeeper: Gatekeeper, headers: dict[str, str]
    ) -> None:
        response = await gatekeeper.client.delete(BASE, params={"id": str(uuid4())}, headers=headers)

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_bulk_delete_reports_failures(
        self, gatekeeper: Gatekeeper, headers: dict[str, str]
    ) -> None:
        a = await _invite(gatekeeper, headers, "a@example.com")
        b = await _invite(gatekeeper, headers, "b@example.com")
        missing = str(uuid4())

        response = await gatekeeper.client.delete(
            BASE, params={"ids": f"{a['id']},{b['id']},{missing}"}, headers=headers
        )

        assert response.status_code == 200
        body = response.json()
        assert body["deleted"] == 2
        assert body["failed"] == 1
        assert body["failed_ids"] == [missing]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("params", [{}, {"ids": ""}, {"ids": "not-a-uuid"}])
    async def test_bad_delete_request_is_400(
        self, gatekeeper: Gatekeeper, headers: dict[str, str], params: dict[str, str]
    ) -> None:
        response = await gatekeeper.client.delete(BASE, params=params, headers=headers)

        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"
