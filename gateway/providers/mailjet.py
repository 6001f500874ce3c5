"""
============================================================================
FILE: mailjet.py
LOCATION: gateway/providers/mailjet.py
============================================================================

PURPOSE:
    Send contact-form messages to the site admin through the Mailjet v3.1
    send API.

KEY COMPONENTS:
    - MailjetClient.send_contact_message(): Build and send one message
    - build_contact_message(): Mailjet message payload (text + HTML parts)
    - get_mailjet_client(): FastAPI dependency

DEPENDENCIES:
    - External: requests
    - Internal: config.py, providers (ProviderError)

USAGE:
    get_mailjet_client().send_contact_message(name, email, message)
============================================================================
"""

import html
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import requests

from gateway import config
from gateway.logging_config import get_logger
from gateway.providers import ProviderError


logger = get_logger("mailjet")

SITE_NAME = "Endless Forge"

HTML_TEMPLATE = """\
<html>
  <head>
    <meta charset="UTF-8" />
    <meta name="color-scheme" content="light dark" />
    <meta name="viewport" content="width=device-width, initial-scale=1.0" />
    <style>
      body {{ margin: 0; padding: 0; background-color: #f7f9fc;
              font-family: Arial, Helvetica, sans-serif; color: #333; }}
      .container {{ max-width: 600px; margin: 40px auto; background: #ffffff;
                    border-radius: 8px; box-shadow: 0 2px 8px rgba(0,0,0,0.05);
                    overflow: hidden; }}
      .header {{ background: #111827; color: #ffffff; padding: 20px; text-align: center; }}
      .header h1 {{ margin: 0; font-size: 20px; letter-spacing: 0.5px; }}
      .content {{ padding: 25px 30px; line-height: 1.6; }}
      .content h2 {{ font-size: 18px; margin-bottom: 15px; color: #111827; }}
      .content p {{ margin: 8px 0; }}
      .label {{ font-weight: bold; color: #374151; }}
      .footer {{ text-align: center; font-size: 13px; color: #6b7280;
                 background: #f3f4f6; padding: 15px; }}
    </style>
  </head>
  <body>
    <div class="container">
      <div class="header"><h1>{site}</h1></div>
      <div class="content">
        <h2>New Contact Message</h2>
        <p><span class="label">Name:</span> {name}</p>
        <p><span class="label">Email:</span> {email}</p>
        <p><span class="label">Message:</span></p>
        <p style="white-space: pre-wrap;">{message}</p>
      </div>
      <div class="footer">
        Sent from the <b>{site}</b> Contact Form<br />
        <small>&copy; {year} {site}. All rights reserved.</small>
      </div>
    </div>
  </body>
</html>
"""


def build_contact_message(
    name: str,
    email: str,
    message: str,
    sender_email: str,
    sender_name: str,
    receiver: str,
) -> Dict[str, Any]:
    """Return one entry of the Mailjet `Messages` array."""
    return {
        "From": {"Email": sender_email, "Name": sender_name},
        "To": [{"Email": receiver, "Name": "Site Admin"}],
        "ReplyTo": {"Email": email, "Name": name},
        "Subject": f"Message from {name} at {SITE_NAME}",
        "TextPart": f"New message from {name} ({email}):\n\n{message}",
        "HTMLPart": HTML_TEMPLATE.format(
            site=SITE_NAME,
            name=html.escape(name),
            email=html.escape(email),
            message=html.escape(message),
            year=datetime.now(timezone.utc).year,
        ),
    }


class MailjetClient:
    def __init__(
        self,
        api_key: str,
        api_secret: str,
        sender_email: str,
        sender_name: str,
        receiver: str,
        send_url: str = config.MJ_SEND_URL,
        timeout: float = config.PROVIDER_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.api_secret = api_secret
        self.sender_email = sender_email
        self.sender_name = sender_name
        self.receiver = receiver
        self.send_url = send_url
        self.timeout = timeout
        self.session = session or requests.Session()

    def send_contact_message(self, name: str, email: str, message: str) -> Dict[str, Any]:
        """Send the message and return Mailjet's reply.

        Raises:
            ProviderError: On transport errors, non-2xx replies or a message
                status other than "success".
        """
        payload = {
            "Messages": [
                build_contact_message(
                    name,
                    email,
                    message,
                    self.sender_email,
                    self.sender_name,
                    self.receiver,
                )
            ]
        }
        try:
            response = self.session.post(
                self.send_url,
                json=payload,
                auth=(self.api_key, self.api_secret),
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except requests.HTTPError as exc:
            status_code = exc.response.status_code if exc.response is not None else None
            body = exc.response.text if exc.response is not None else ""
            logger.error(f"[Mailjet Error] {status_code}: {body}")
            raise ProviderError("mailjet", str(exc), status_code) from exc
        except (requests.RequestException, ValueError) as exc:
            logger.error(f"[Mailjet Error] {exc}")
            raise ProviderError("mailjet", str(exc)) from exc

        statuses = [m.get("Status") for m in data.get("Messages", [])]
        if not statuses or any(s != "success" for s in statuses):
            raise ProviderError("mailjet", f"unexpected send status {statuses}")
        return data


_client: Optional[MailjetClient] = None


def get_mailjet_client() -> MailjetClient:
    global _client
    if _client is None:
        _client = MailjetClient(
            config.MJ_APIKEY_PUBLIC,
            config.MJ_APIKEY_PRIVATE,
            config.MJ_SENDER_EMAIL,
            config.MJ_SENDER_NAME,
            config.CONTACT_RECEIVER,
        )
    return _client
