"""
Account 도구 API 테스트
"""

import pytest
from httpx import AsyncClient


class TestEnsureAccounts:
    """POST /api/accounts/ensure"""

    @pytest.mark.asyncio
    async def test_create_and_skip(self, client: AsyncClient) -> None:
        payload = {"accounts": [{"code": 100, "name": "Cash", "normal_balance": "debit"}]}

        first = await client.post("/api/accounts/ensure", json=payload)
        second = await client.post("/api/accounts/ensure", json=payload)

        assert first.status_code == 200
        assert first.json()["ok"] is True
        assert first.json()["text"].startswith("# Account Management Result")
        assert 'new account 100 "Cash" has been created with normal balance debit.' in first.json()["text"]
        assert 'existing account 100 "Cash" already exists with balance of IDR 0, skipping.' in second.json()["text"]

    @pytest.mark.asyncio
    async def test_normal_balance_mismatch(self, client: AsyncClient) -> None:
        await client.post(
            "/api/accounts/ensure",
            json={"accounts": [{"code": 100, "name": "Cash", "normal_balance": "debit"}]},
        )

        response = await client.post(
            "/api/accounts/ensure",
            json={"accounts": [{"code": 100, "name": "Cash", "normal_balance": "credit"}]},
        )

        assert "normal balance mismatch" in response.json()["text"]

    @pytest.mark.asyncio
    async def test_item_error_reported(self, client: AsyncClient) -> None:
        response = await client.post(
            "/api/accounts/ensure",
            json={"accounts": [
                {"code": 110, "name": "Petty Cash", "normal_balance": "debit", "control_account_code": 999},
            ]},
        )

        assert response.json()["ok"] is True
        assert 'Error creating account 110 "Petty Cash"' in response.json()["text"]

    @pytest.mark.asyncio
    async def test_invalid_normal_balance_is_422(self, client: AsyncClient) -> None:
        response = await client.post(
            "/api/accounts/ensure",
            json={"accounts": [{"code": 100, "name": "Cash", "normal_balance": "left"}]},
        )

        assert response.status_code == 422


class TestRenameAndControl:
    """PUT /api/accounts/{code}/name, /control-account"""

    @pytest.mark.asyncio
    async def test_rename(self, seeded_client: AsyncClient) -> None:
        response = await seeded_client.put("/api/accounts/100/name", json={"name": "Cash on Hand"})

        assert response.json() == {
            "ok": True,
            "text": 'Account 100 renamed from "Cash" to "Cash on Hand".',
            "error_type": None,
        }

    @pytest.mark.asyncio
    async def test_rename_missing(self, client: AsyncClient) -> None:
        response = await client.put("/api/accounts/999/name", json={"name": "Nope"})

        body = response.json()
        assert response.status_code == 200
        assert body["ok"] is False
        assert body["error_type"] == "NotFound"

    @pytest.mark.asyncio
    async def test_set_control(self, seeded_client: AsyncClient) -> None:
        await seeded_client.post(
            "/api/accounts/ensure",
            json={"accounts": [{"code": 110, "name": "Petty Cash", "normal_balance": "debit"}]},
        )

        response = await seeded_client.put(
            "/api/accounts/110/control-account", json={"control_account_code": 100}
        )

        assert response.json()["text"] == "Account 110 (Petty Cash) control account set to 100 (Cash)."

    @pytest.mark.asyncio
    async def test_self_reference(self, client: AsyncClient) -> None:
        response = await client.put(
            "/api/accounts/100/control-account", json={"control_account_code": 100}
        )

        body = response.json()
        assert body["ok"] is False
        assert body["error_type"] == "SelfReference"
        assert body["text"].startswith("Error setting control account:")


class TestUpdateAccount:
    """PATCH /api/accounts/{code}"""

    @pytest.mark.asyncio
    async def test_deactivate(self, seeded_client: AsyncClient) -> None:
        response = await seeded_client.patch("/api/accounts/300", json={"deactivate": True})

        text = response.json()["text"]
        assert 'account 300 "Owner Equity" has been updated' in text
        assert "deactivated/closed. Final balance was USD 0.00." in text

    @pytest.mark.asyncio
    async def test_no_changes(self, seeded_client: AsyncClient) -> None:
        response = await seeded_client.patch("/api/accounts/300", json={})

        assert response.json()["text"] == 'account 300 "Owner Equity" was found but no changes were made.'

    @pytest.mark.asyncio
    async def test_missing(self, client: AsyncClient) -> None:
        response = await client.patch("/api/accounts/300", json={"name": "X"})

        assert response.json()["error_type"] == "NotFound"


class TestLookups:
    """계정 조회 도구"""

    @pytest.mark.asyncio
    async def test_chart_empty(self, client: AsyncClient) -> None:
        response = await client.get("/api/accounts/chart")

        assert "No accounts exist in the system" in response.json()["text"]

    @pytest.mark.asyncio
    async def test_chart(self, seeded_client: AsyncClient) -> None:
        response = await seeded_client.get("/api/accounts/chart")

        lines = response.json()["text"].splitlines()
        assert lines[0] == "# Chart of Accounts"
        assert lines[1] == '├─ account 100 "Cash" (balance: USD 0.00, normal balance: debit)'
        assert lines[-1].startswith("└── account 300")

    @pytest.mark.asyncio
    async def test_search(self, seeded_client: AsyncClient) -> None:
        response = await seeded_client.post("/api/accounts/search", json={"codes": [100], "names": ["Revenue"]})

        assert response.json()["text"].splitlines() == [
            "100 Cash (Balance: USD 0.00)",
            "200 Revenue (Balance: USD 0.00)",
        ]

    @pytest.mark.asyncio
    async def test_search_without_filters(self, seeded_client: AsyncClient) -> None:
        response = await seeded_client.post("/api/accounts/search", json={})

        assert response.json()["text"].startswith("No filters provided")

    @pytest.mark.asyncio
    async def test_search_no_match(self, seeded_client: AsyncClient) -> None:
        response = await seeded_client.post("/api/accounts/search", json={"codes": [999]})

        assert response.json()["text"] == "No accounts found matching the provided filters."


class TestTags:
    """태그 도구"""

    @pytest.mark.asyncio
    async def test_set_get_unset(self, seeded_client: AsyncClient) -> None:
        response = await seeded_client.post(
            "/api/accounts/tags/set",
            json={"tagged_accounts": [
                {"code": 100, "tag": "Asset"},
                {"code": 100, "tag": "Balance Sheet - Current Asset"},
                {"code": 999, "tag": "Asset"},
            ]},
        )
        lines = response.json()["text"].splitlines()
        assert lines[0] == 'Account 100 tagged with "Asset".'
        assert lines[2].startswith('Account 999 was not tagged with "Asset":')

        response = await seeded_client.get("/api/accounts/100/tags")
        assert response.json()["text"] == (
            'Account 100 "Cash" tags:\n- Asset\n- Balance Sheet - Current Asset'
        )

        response = await seeded_client.get("/api/accounts/by-tag", params={"tag": "Asset"})
        assert response.json()["text"] == "100 Cash (Balance: USD 0.00)"

        response = await seeded_client.post(
            "/api/accounts/tags/unset",
            json={"tagged_accounts": [{"code": 100, "tag": "Asset"}, {"code": 200, "tag": "Asset"}]},
        )
        assert response.json()["text"].splitlines() == [
            'Tag "Asset" removed from account 100.',
            'Tag "Asset" was not set on account 200, nothing removed.',
        ]

    @pytest.mark.asyncio
    async def test_by_tag_unknown(self, seeded_client: AsyncClient) -> None:
        response = await seeded_client.get("/api/accounts/by-tag", params={"tag": "Bogus"})

        assert response.json()["error_type"] == "ValidationError"

    @pytest.mark.asyncio
    async def test_by_tag_none(self, seeded_client: AsyncClient) -> None:
        response = await seeded_client.get("/api/accounts/by-tag", params={"tag": "Liability"})

        assert response.json()["text"] == 'No accounts found with tag "Liability".'

    @pytest.mark.asyncio
    async def test_tags_of_missing_account(self, client: AsyncClient) -> None:
        response = await client.get("/api/accounts/999/tags")

        assert response.json()["error_type"] == "NotFound"
