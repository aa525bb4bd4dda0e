# app/clients/mailer.py

import asyncio
import logging

import resend

from app.core.config import settings

logger = logging.getLogger(__name__)


class Mailer:
    """
    Отправка транзакционных писем через Resend.
    Никогда не выбрасывает исключений: письма - best-effort.
    """
    def __init__(self, api_key: str, sender: str):
        self.api_key = api_key
        self.sender = sender

    def _send(self, params: dict) -> dict:
        resend.api_key = self.api_key
        return resend.Emails.send(params)

    async def send(self, to: str, subject: str, html: str) -> bool:
        params = {
            "from": self.sender,
            "to": [to],
            "subject": subject,
            "html": html,
        }
        try:
            await asyncio.to_thread(self._send, params)
        except Exception:
            logger.error(f"Failed to send email '{subject}' to {to}", exc_info=True)
            return False
        logger.info(f"Email '{subject}' sent to {to}")
        return True


mailer = Mailer(api_key=settings.RESEND_API_KEY, sender=settings.EMAIL_FROM)


def get_mailer() -> Mailer:
    """Зависимость FastAPI для почтового клиента."""
    return mailer
