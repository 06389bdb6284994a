"""Optional server-side captcha verification for public submissions."""

from __future__ import annotations

import logging

import httpx

from top_chart.core.settings import Settings, settings

logger = logging.getLogger(__name__)

VERIFY_URLS = {
    "hcaptcha": "https://hcaptcha.com/siteverify",
    "recaptcha": "https://www.google.com/recaptcha/api/siteverify",
}


class CaptchaVerifier:
    """Checks captcha tokens against the configured provider.

    When no provider is configured verification is skipped, which keeps local
    development working without captcha keys. An unknown provider fails closed.
    """

    def __init__(
        self,
        config: Settings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config or settings
        self._client = client

    @property
    def enabled(self) -> bool:
        return self._config.captcha_enabled

    async def verify(self, token: str | None) -> bool:
        """Return True if the token is valid or captcha is disabled."""
        if not self.enabled:
            return True
        if not token:
            return False

        provider = self._config.captcha_provider.lower()
        url = VERIFY_URLS.get(provider)
        if url is None:
            logger.warning("Unknown captcha provider %r; rejecting submission", provider)
            return False

        data = {"secret": self._config.captcha_secret, "response": token}
        try:
            if self._client is not None:
                response = await self._client.post(url, data=data)
            else:
                async with httpx.AsyncClient(
                    timeout=self._config.captcha_timeout_seconds
                ) as client:
                    response = await client.post(url, data=data)
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Captcha verification via %s failed: %s", provider, e)
            return False

        return bool(payload.get("success"))


def get_captcha_verifier() -> CaptchaVerifier:
    """Return a verifier bound to the process settings."""
    return CaptchaVerifier()
