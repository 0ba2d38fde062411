"""Testes do TokenCache."""

from __future__ import annotations

import asyncio
from urllib.parse import parse_qs

import httpx
import pytest

from tests.fakes.fake_bank_gateway import BankStack, FakeBankGateway
from tests.fakes.fake_secrets import CLIENT_SECRET
from utils.errors import AuthError


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


class TestTokenCache:
    @pytest.mark.asyncio
    async def test_exchanges_client_credentials(self, clock: FakeClock) -> None:
        fake = FakeBankGateway()
        stack = BankStack(fake, clock=clock)

        token = await stack.token_cache.get_token()

        assert token.value == "token-1"
        form = parse_qs(fake.requests[0].content.decode())
        assert form["grant_type"] == ["client_credentials"]
        assert form["client_id"] == ["client-id-test"]
        assert fake.requests[0].headers["content-type"] == "application/x-www-form-urlencoded"
        await stack.aclose()

    @pytest.mark.asyncio
    async def test_reuses_token_until_safety_margin(self, clock: FakeClock) -> None:
        fake = FakeBankGateway()
        stack = BankStack(fake, clock=clock)

        first = await stack.token_cache.get_token()
        clock.now += 900 - 61
        again = await stack.token_cache.get_token()
        clock.now += 1
        renewed = await stack.token_cache.get_token()

        assert again is first
        assert renewed.value == "token-2"
        assert fake.hits["token"] == 2
        await stack.aclose()

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_exchange(self, clock: FakeClock) -> None:
        fake = FakeBankGateway()
        stack = BankStack(fake, clock=clock)

        tokens = await asyncio.gather(*(stack.token_cache.get_token() for _ in range(10)))

        assert {token.value for token in tokens} == {"token-1"}
        assert fake.hits["token"] == 1
        await stack.aclose()

    @pytest.mark.asyncio
    async def test_expires_in_defaults_to_900(self, clock: FakeClock) -> None:
        fake = FakeBankGateway()
        fake.expires_in = None
        stack = BankStack(fake, clock=clock)

        token = await stack.token_cache.get_token()

        assert token.expires_at == clock.now + 900
        await stack.aclose()

    @pytest.mark.asyncio
    async def test_invalidate_forces_new_exchange(self, clock: FakeClock) -> None:
        fake = FakeBankGateway()
        stack = BankStack(fake, clock=clock)

        await stack.token_cache.get_token()
        stack.token_cache.invalidate()
        token = await stack.token_cache.get_token()

        assert token.value == "token-2"
        await stack.aclose()

    @pytest.mark.asyncio
    async def test_rejection_raises_auth_error_without_secret(self, clock: FakeClock) -> None:
        fake = FakeBankGateway()
        fake.queue(
            "token",
            httpx.Response(
                401,
                json={
                    "error": "invalid_client",
                    "error_description": f"bad secret {CLIENT_SECRET}",
                },
            ),
        )
        stack = BankStack(fake, clock=clock)

        with pytest.raises(AuthError) as exc_info:
            await stack.token_cache.get_token()

        error = exc_info.value
        assert error.status_code == 401
        assert CLIENT_SECRET not in str(error.to_dict())
        assert "[REDACTED]" in str(error.upstream_body)
        await stack.aclose()

    @pytest.mark.asyncio
    async def test_missing_access_token_raises(self, clock: FakeClock) -> None:
        fake = FakeBankGateway()
        fake.queue("token", httpx.Response(200, json={"token_type": "Bearer"}))
        stack = BankStack(fake, clock=clock)

        with pytest.raises(AuthError, match="access_token"):
            await stack.token_cache.get_token()
        await stack.aclose()

    @pytest.mark.asyncio
    async def test_network_failure_raises_auth_error(self, clock: FakeClock) -> None:
        def _fail(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        fake = FakeBankGateway()
        fake.handler = _fail  # type: ignore[method-assign]
        stack = BankStack(fake, clock=clock)

        with pytest.raises(AuthError):
            await stack.token_cache.get_token()
        await stack.aclose()
