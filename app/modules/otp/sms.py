from twilio.rest import Client
from app.config.settings import settings
from typing import Optional
import logging

logger = logging.getLogger(__name__)


class SmsDispatchError(Exception):
    pass


class TwilioSmsSender:
    def __init__(self, client: Optional[Client] = None, from_number: Optional[str] = None):
        if client is None and settings.twilio_account_sid and settings.twilio_auth_token:
            client = Client(settings.twilio_account_sid, settings.twilio_auth_token)
        self.client = client
        self.from_number = from_number or settings.twilio_phone_number

    def send(self, to: str, body: str) -> str:
        """Send an SMS and return the Twilio message sid"""
        if self.client is None or not self.from_number:
            raise SmsDispatchError("Twilio credentials and phone number must be configured")
        try:
            message = self.client.messages.create(to=to, from_=self.from_number, body=body)
        except Exception as e:
            logger.error(f"Twilio error: {e}")
            raise SmsDispatchError(str(e)) from e
        return message.sid
