"""Mailer interface — the seam between OTP issuance and email transport."""

from abc import ABC, abstractmethod


class Mailer(ABC):
    """Abstract delivery channel for outbound emails.

    Implementations either deliver the message for real or record it
    somewhere it can be inspected.  Failures are signalled by raising;
    callers decide whether a failed delivery matters.
    """

    @abstractmethod
    async def send(
        self,
        recipient: str,
        subject: str,
        body: str,
        code: str | None = None,
    ) -> str:
        """Deliver one email and return an identifier for it.

        Parameters
        ----------
        recipient:
            Destination email address.
        subject, body:
            Rendered message content.
        code:
            The OTP carried by the message, if any.  Lets preview-style
            mailers index the message by code.
        """
