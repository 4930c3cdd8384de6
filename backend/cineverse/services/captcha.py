"""reCAPTCHA site-verify client."""

import httpx

from cineverse.core.config import settings
from cineverse.core.logging import get_logger

logger = get_logger(__name__)

# Sent by clients rendered without a site key
BYPASS_TOKEN = "__skip_captcha__"


class RecaptchaVerifier:
    """Verifies client CAPTCHA tokens against the provider's site-verify endpoint."""

    def __init__(
        self,
        secret_key: str | None = None,
        verify_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.secret_key = secret_key
        self.verify_url = verify_url or settings.RECAPTCHA_VERIFY_URL
        self.timeout = timeout or settings.RECAPTCHA_TIMEOUT_SECONDS
        self._transport = transport

    async def verify(self, token: str | None) -> bool:
        if not self.secret_key:
            logger.info("RECAPTCHA_SECRET_KEY is not configured, skipping verification")
            return True

        if token == BYPASS_TOKEN:
            logger.info("reCAPTCHA bypass token received, skipping verification")
            return True

        if not token:
            logger.warning("reCAPTCHA token is missing")
            return False

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    self.verify_url,
                    data={"secret": self.secret_key, "response": token},
                )
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error("reCAPTCHA verification error", extra={"error": str(e)})
            return False

        success = bool(data.get("success"))
        if not success:
            logger.warning(
                "reCAPTCHA verification failed",
                extra={"error_codes": data.get("error-codes", [])},
            )
        return success


def get_captcha_verifier() -> RecaptchaVerifier:
    """Dependency returning a verifier bound to the configured secret."""
    return RecaptchaVerifier(secret_key=settings.RECAPTCHA_SECRET_KEY)
