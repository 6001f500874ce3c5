# __init__.py
# Third-party provider clients for the Endless Forge API gateway

# @see: gateway/providers/pinata.py - IPFS pinning for profile pictures
# @see: gateway/providers/mailjet.py - Contact form email relay


class ProviderError(Exception):
    """A third-party provider call failed or returned an unusable response."""

    def __init__(self, provider: str, message: str, status_code: int = None):
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.status_code = status_code


from gateway.providers.mailjet import MailjetClient, get_mailjet_client  # noqa: E402
from gateway.providers.pinata import PinataClient, get_pinata_client  # noqa: E402

__all__ = [
    "MailjetClient",
    "PinataClient",
    "ProviderError",
    "get_mailjet_client",
    "get_pinata_client",
]
