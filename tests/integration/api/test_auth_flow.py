import pytest
from httpx import AsyncClient
from sqlmodel import select

from src.domain.entities import Account


async def _latest_code(app, channel) -> str:
    await app.state.auth_flow.otp.drain()
    return channel.send.await_args.args[1]


async def _signup(client: AsyncClient, app, channel, email: str, password: str):
    await client.post("/auth/flow/submit", json={"value": email})
    code = await _latest_code(app, channel)
    await client.post("/auth/flow/submit", json={"value": code})
    return await client.post("/auth/flow/submit", json={"value": password})


@pytest.mark.asyncio
async def test_initial_state(client: AsyncClient):
    response = await client.get("/auth/flow")

    assert response.status_code == 200
    data = response.json()
    assert data["state"]["step"] == "email_entry"
    assert data["error"] is None


@pytest.mark.asyncio
async def test_new_account_via_otp(client: AsyncClient, app, channel, session_factory):
    """Unknown email -> code -> password -> account created and logged in"""
    response = await client.post("/auth/flow/submit", json={"value": "a@x.com"})

    assert response.status_code == 200
    state = response.json()["state"]
    assert state["step"] == "otp_challenge"
    assert state["mode"] == "CREATE"
    assert state["email"] == "a@x.com"

    code = await _latest_code(app, channel)
    channel.send.assert_awaited_once_with("a@x.com", code)

    response = await client.post("/auth/flow/submit", json={"value": code})
    assert response.status_code == 200
    assert response.json()["state"]["step"] == "set_credential"

    response = await client.post(
        "/auth/flow/submit", json={"value": "secret1", "remember": True}
    )

    assert response.status_code == 200
    state = response.json()["state"]
    assert state["step"] == "authenticated"
    assert state["session"]["account"]["email"] == "a@x.com"
    assert state["session"]["remember"] is True
    assert "credential_secret" not in state["session"]["account"]

    async with session_factory() as session:
        accounts = (await session.exec(select(Account))).all()
    assert len(accounts) == 1
    assert accounts[0].email == "a@x.com"
    assert accounts[0].role == "user"
    # Stored hashed, never as submitted
    assert accounts[0].credential_secret != "secret1"

    response = await client.get("/auth/session")
    assert response.status_code == 200
    assert response.json()["account"]["email"] == "a@x.com"


@pytest.mark.asyncio
async def test_existing_account_password_login(client: AsyncClient, app, channel):
    await _signup(client, app, channel, "b@x.com", "pw1")
    await client.post("/auth/logout")

    response = await client.post("/auth/flow/submit", json={"value": "b@x.com"})
    assert response.json()["state"]["step"] == "password_challenge"

    response = await client.post("/auth/flow/submit", json={"value": "wrong"})

    assert response.status_code == 401
    data = response.json()
    assert data["error"]["code"] == "CREDENTIAL_MISMATCH"
    assert data["error"]["message"] == "Incorrect Password."
    assert data["state"]["step"] == "password_challenge"

    response = await client.get("/auth/flow")
    assert response.json()["error"]["code"] == "CREDENTIAL_MISMATCH"

    response = await client.post("/auth/flow/submit", json={"value": "pw1"})

    assert response.status_code == 200
    assert response.json()["state"]["step"] == "authenticated"
    assert (await client.get("/auth/flow")).json()["error"] is None


@pytest.mark.asyncio
async def test_password_reset_updates_same_account(
    client: AsyncClient, app, channel, session_factory
):
    await _signup(client, app, channel, "c@x.com", "oldpw")
    await client.post("/auth/logout")

    await client.post("/auth/flow/submit", json={"value": "c@x.com"})
    response = await client.post("/auth/flow/forgot-password")

    assert response.status_code == 200
    state = response.json()["state"]
    assert state["step"] == "otp_challenge"
    assert state["mode"] == "RESET"

    code = await _latest_code(app, channel)
    response = await client.post("/auth/flow/submit", json={"value": code})
    assert response.json()["state"]["mode"] == "RESET"

    response = await client.post("/auth/flow/submit", json={"value": "newpw"})
    assert response.json()["state"]["step"] == "authenticated"

    async with session_factory() as session:
        accounts = (await session.exec(select(Account))).all()
    assert len(accounts) == 1

    # Old password no longer works, new one does
    await client.post("/auth/logout")
    await client.post("/auth/flow/submit", json={"value": "c@x.com"})
    assert (await client.post("/auth/flow/submit", json={"value": "oldpw"})).status_code == 401
    assert (await client.post("/auth/flow/submit", json={"value": "newpw"})).status_code == 200


@pytest.mark.asyncio
async def test_wrong_code_and_resend(client: AsyncClient, app, channel):
    await client.post("/auth/flow/submit", json={"value": "d@x.com"})
    first = await _latest_code(app, channel)

    response = await client.post("/auth/flow/resend")
    assert response.status_code == 200
    assert response.json()["state"]["step"] == "otp_challenge"
    second = await _latest_code(app, channel)
    assert channel.send.await_count == 2

    if first != second:
        response = await client.post("/auth/flow/submit", json={"value": first})
        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Incorrect OTP."

    response = await client.post("/auth/flow/submit", json={"value": second})
    assert response.status_code == 200
    assert response.json()["state"]["step"] == "set_credential"


@pytest.mark.asyncio
async def test_change_email_returns_to_start(client: AsyncClient):
    await client.post("/auth/flow/submit", json={"value": "e@x.com"})

    response = await client.post("/auth/flow/change-email")

    assert response.status_code == 200
    assert response.json()["state"]["step"] == "email_entry"


@pytest.mark.asyncio
async def test_flow_logout(client: AsyncClient, app, channel):
    await _signup(client, app, channel, "f@x.com", "pw")

    response = await client.post("/auth/flow/logout")

    assert response.status_code == 200
    assert response.json()["state"]["step"] == "email_entry"
    assert (await client.get("/auth/session")).status_code == 401


@pytest.mark.asyncio
async def test_event_in_wrong_step(client: AsyncClient):
    response = await client.post("/auth/flow/resend")

    assert response.status_code == 409
    data = response.json()
    assert data["error"]["code"] == "INVALID_TRANSITION"
    assert data["state"]["step"] == "email_entry"


@pytest.mark.asyncio
async def test_empty_value(client: AsyncClient):
    response = await client.post("/auth/flow/submit", json={"value": ""})

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_INPUT"
