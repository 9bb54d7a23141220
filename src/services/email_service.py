"""
E-mail delivery of generated files over SMTP.
"""

import asyncio
import mimetypes
import smtplib
from email.message import EmailMessage
from typing import Optional

from src.core.config import EmailSettings
from src.core.exceptions import ConfigurationError, DownstreamError, NotFoundError, ValidationError
from src.core.logging import get_logger
from src.repositories.file_repo import GeneratedFile, GeneratedFileRepository

logger = get_logger(__name__)

DEFAULT_SUBJECT = "PM Doc Generator - User Stories Excel"
DEFAULT_BODY = (
    "Please find attached the latest user stories Excel generated from the PM Doc Generator."
)


class EmailService:
    def __init__(self, config: EmailSettings, files: GeneratedFileRepository) -> None:
        self.config = config
        self.files = files

    def build_message(
        self,
        to: str,
        stored: GeneratedFile,
        subject: Optional[str] = None,
        text: Optional[str] = None,
    ) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.config.from_address or self.config.user
        message["To"] = to
        message["Subject"] = subject or DEFAULT_SUBJECT
        message.set_content(text or DEFAULT_BODY)

        mime_type, _ = mimetypes.guess_type(stored.filename)
        maintype, subtype = (mime_type or "application/octet-stream").split("/", 1)
        message.add_attachment(
            stored.read_bytes(),
            maintype=maintype,
            subtype=subtype,
            filename=stored.filename,
        )
        return message

    def _send(self, message: EmailMessage) -> None:
        if self.config.secure:
            server: smtplib.SMTP = smtplib.SMTP_SSL(
                self.config.host, self.config.port, timeout=self.config.timeout
            )
        else:
            server = smtplib.SMTP(self.config.host, self.config.port, timeout=self.config.timeout)
        with server:
            if not self.config.secure:
                server.ehlo()
                if server.has_extn("starttls"):
                    server.starttls()
                    server.ehlo()
            server.login(self.config.user, self.config.password)
            server.send_message(message)

    async def send_generated_file(
        self,
        to: Optional[str],
        file_id: Optional[str],
        subject: Optional[str] = None,
        text: Optional[str] = None,
    ) -> None:
        """
        Send a stored file as an attachment.

        Raises:
            ValidationError: missing recipient or file id
            NotFoundError: no stored file with that id
            ConfigurationError: SMTP settings are incomplete
            DownstreamError: the SMTP exchange failed
        """
        if not to or not to.strip() or not file_id or not file_id.strip():
            raise ValidationError("Recipient email address and fileId are required.")

        stored = await self.files.get(file_id.strip())
        if stored is None:
            raise NotFoundError(
                "file",
                file_id,
                message="File not found or expired. Please regenerate the document.",
            )

        if not self.config.is_configured:
            raise ConfigurationError(
                "Email is not configured. Please set EMAIL_HOST, EMAIL_PORT, EMAIL_USER, "
                "EMAIL_PASS (and optionally EMAIL_SECURE, EMAIL_FROM).",
                missing=self.config.missing,
            )

        message = self.build_message(to.strip(), stored, subject, text)
        try:
            await asyncio.to_thread(self._send, message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Email send failed", file_id=stored.file_id, error=str(e))
            raise DownstreamError("email", str(e) or "Failed to send email.") from e

        logger.info("Email sent", file_id=stored.file_id, filename=stored.filename)
