"""
============================================================================
FILE: pinata.py
LOCATION: gateway/providers/pinata.py
============================================================================

PURPOSE:
    Minimal Pinata client that pins an uploaded file to IPFS and returns
    its content identifier.

KEY COMPONENTS:
    - PinataClient.pin_file(): POST pinning/pinFileToIPFS, return IpfsHash
    - PinataClient.gateway_url(): Public URL for a pinned CID
    - get_pinata_client(): FastAPI dependency

DEPENDENCIES:
    - External: requests
    - Internal: config.py

USAGE:
    cid = get_pinata_client().pin_file("avatar.png", fileobj)
============================================================================
"""

from typing import BinaryIO, Optional

import requests

from gateway import config
from gateway.logging_config import get_logger
from gateway.providers import ProviderError


logger = get_logger("pinata")


class PinataClient:
    def __init__(
        self,
        api_key: str,
        secret_key: str,
        pin_url: str = config.PINATA_URL,
        gateway: str = config.PINATA_GATEWAY,
        timeout: float = config.PROVIDER_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.secret_key = secret_key
        self.pin_url = pin_url
        self.gateway = gateway.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def pin_file(
        self,
        filename: str,
        fileobj: BinaryIO,
        content_type: Optional[str] = None,
    ) -> str:
        """Pin `fileobj` and return its IPFS hash.

        Raises:
            ProviderError: On transport errors, non-2xx replies or a reply
                without IpfsHash.
        """
        file_field = (filename, fileobj, content_type) if content_type else (filename, fileobj)
        try:
            response = self.session.post(
                self.pin_url,
                files={"file": file_field},
                headers={
                    "pinata_api_key": self.api_key,
                    "pinata_secret_api_key": self.secret_key,
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
            cid = response.json().get("IpfsHash")
        except requests.HTTPError as exc:
            status_code = exc.response.status_code if exc.response is not None else None
            body = exc.response.text if exc.response is not None else ""
            logger.error(f"Pinata rejected upload ({status_code}): {body}")
            raise ProviderError("pinata", str(exc), status_code) from exc
        except (requests.RequestException, ValueError) as exc:
            logger.error(f"Pinata request failed: {exc}")
            raise ProviderError("pinata", str(exc)) from exc

        if not cid:
            raise ProviderError("pinata", "response missing IpfsHash")
        logger.info(f"Pinned {filename} as {cid}")
        return cid

    def gateway_url(self, cid: str) -> str:
        return f"{self.gateway}/{cid}"


_client: Optional[PinataClient] = None


def get_pinata_client() -> PinataClient:
    global _client
    if _client is None:
        _client = PinataClient(config.PINATA_API_KEY, config.PINATA_SECRET_KEY)
    return _client
