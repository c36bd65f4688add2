import asyncio
import logging
from dataclasses import dataclass
from functools import lru_cache

from twilio.rest import Client

from gatepass.core import config

logger = logging.getLogger(__name__)


@dataclass
class DispatchOutcome:
    phone: str
    sid: str | None = None
    error: str | None = None

    @property
    def delivered(self) -> bool:
        return self.error is None


@lru_cache(maxsize=1)
def get_twilio_client() -> Client:
    return Client(config.TWILIO_ACCOUNT_SID, config.TWILIO_AUTH_TOKEN)


def send_sms(phone: str, body: str) -> str:
    message = get_twilio_client().messages.create(
        body=body,
        to=phone,
        from_=config.TWILIO_PHONE_NUMBER,
    )
    return message.sid


async def dispatch_bulk_sms(recipients: list[str], body: str) -> list[DispatchOutcome]:
    """Send ``body`` to every recipient concurrently and report each outcome.

    A failed send never cancels the others.
    """
    results = await asyncio.gather(
        *(asyncio.to_thread(send_sms, phone, body) for phone in recipients),
        return_exceptions=True,
    )

    outcomes: list[DispatchOutcome] = []
    for phone, result in zip(recipients, results):
        if isinstance(result, BaseException):
            logger.warning('SMS to %s failed: %s', phone, result)
            outcomes.append(DispatchOutcome(phone=phone, error=str(result)))
        else:
            outcomes.append(DispatchOutcome(phone=phone, sid=result))
    return outcomes
