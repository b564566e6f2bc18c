"""SMTP email adapter backed by aiosmtplib.

Dispatch runs synchronously from command and event handlers. The coroutine is
driven with ``asyncio.run``; when the caller already sits inside a running
event loop (FastAPI's async routes), it runs on a short-lived worker thread.
"""

import asyncio
from concurrent.futures import ThreadPoolExecutor
from email.message import EmailMessage
from email.utils import make_msgid

import aiosmtplib

from storefront import config
from storefront.notifications.channel.email_port import EmailPort
from storefront.utils.logging import logger


def _run(coro):
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    with ThreadPoolExecutor(max_workers=1) as pool:
        return pool.submit(asyncio.run, coro).result()


class SMTPEmailAdapter(EmailPort):
    name = "smtp"

    def __init__(
        self,
        host: str = config.SMTP_HOST,
        port: int = config.SMTP_PORT,
        username: str = config.SMTP_USERNAME,
        password: str = config.SMTP_PASSWORD,
        sender: str = config.SMTP_FROM,
        timeout: float = 30.0,
    ):
        self.host = host
        self.port = port
        self.username = username or None
        self.password = password or None
        self.sender = sender
        self.timeout = timeout

    def build_message(self, to: str, subject: str, body: str, html_body: str | None = None) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = to
        message["Subject"] = subject
        message["Message-ID"] = make_msgid(domain=self.sender.rsplit("@", 1)[-1])
        message.set_content(body)
        if html_body:
            message.add_alternative(html_body, subtype="html")
        return message

    async def _send(self, message: EmailMessage):
        return await aiosmtplib.send(
            message,
            hostname=self.host,
            port=self.port,
            username=self.username,
            password=self.password,
            use_tls=self.port == 465,
            start_tls=self.port == 587,
            timeout=self.timeout,
        )

    def send(
        self,
        to: str,
        subject: str,
        body: str,
        html_body: str | None = None,
    ) -> dict:
        message = self.build_message(to, subject, body, html_body)
        try:
            _run(self._send(message))
        except (aiosmtplib.SMTPException, OSError) as exc:
            logger.error("SMTP delivery failed", to=to, host=self.host, error=str(exc))
            return {"message_id": None, "status": "failed", "error": str(exc)}

        logger.info("Email sent", to=to, message_id=message["Message-ID"])
        return {"message_id": message["Message-ID"], "status": "sent"}
