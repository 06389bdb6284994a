# mypy: ignore-errors
import httpx
import pytest

from top_chart.core.settings import Settings
from top_chart.services.captcha import VERIFY_URLS, CaptchaVerifier


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.fixture
def hcaptcha_settings():
    return Settings(CAPTCHA_PROVIDER="hcaptcha", CAPTCHA_SECRET="shh")


@pytest.mark.asyncio
async def test_disabled_captcha_accepts_anything():
    verifier = CaptchaVerifier(Settings(CAPTCHA_PROVIDER="", CAPTCHA_SECRET=""))
    assert verifier.enabled is False
    assert await verifier.verify(None) is True


@pytest.mark.asyncio
async def test_missing_token_is_rejected(hcaptcha_settings):
    verifier = CaptchaVerifier(hcaptcha_settings, client=_client(lambda request: httpx.Response(500)))
    assert await verifier.verify("") is False


@pytest.mark.asyncio
async def test_provider_success_is_accepted(hcaptcha_settings):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = request.content.decode()
        return httpx.Response(200, json={"success": True})

    async with _client(handler) as client:
        verifier = CaptchaVerifier(hcaptcha_settings, client=client)
        assert await verifier.verify("token-123") is True

    assert seen["url"] == VERIFY_URLS["hcaptcha"]
    assert "secret=shh" in seen["body"]
    assert "response=token-123" in seen["body"]


@pytest.mark.asyncio
async def test_provider_rejection_is_rejected(hcaptcha_settings):
    async with _client(lambda request: httpx.Response(200, json={"success": False})) as client:
        verifier = CaptchaVerifier(hcaptcha_settings, client=client)
        assert await verifier.verify("token") is False


@pytest.mark.asyncio
async def test_provider_errors_fail_closed(hcaptcha_settings):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("unreachable", request=request)

    async with _client(handler) as client:
        verifier = CaptchaVerifier(hcaptcha_settings, client=client)
        assert await verifier.verify("token") is False

    async with _client(lambda request: httpx.Response(502)) as client:
        verifier = CaptchaVerifier(hcaptcha_settings, client=client)
        assert await verifier.verify("token") is False

    async with _client(lambda request: httpx.Response(200, content=b"not json")) as client:
        verifier = CaptchaVerifier(hcaptcha_settings, client=client)
        assert await verifier.verify("token") is False


@pytest.mark.asyncio
async def test_unknown_provider_fails_closed():
    verifier = CaptchaVerifier(Settings(CAPTCHA_PROVIDER="turnstile", CAPTCHA_SECRET="shh"))
    assert await verifier.verify("token") is False
