"""
Contact form submission pipeline.

validate → verify CAPTCHA → build message → dispatch, stopping at the first
failure. Every failure leaves as a SubmissionError:

- ClientError:   missing fields, malformed reply-to address, a solution the
                 verifier rejected as invalid/expired, a request the verifier
                 refused with a 4xx
- InternalError: incorrect CAPTCHA secret, unrecognized verifier errors,
                 message encoding problems, transport and send failures

InternalError carries the submitted subject/body/language so the error page
can show the user their message.
"""

from __future__ import annotations

from typing import Optional

from config import MailSettings
from errors import ClientError, DispatchError, InternalError
from infrastructure.captcha.protocol import CaptchaVerifier, VerificationStatus
from schemas.dto.requests.contact import RawSubmission, ValidatedSubmission
from schemas.models.message import OutboundMessage, parse_mailbox
from services.mail_dispatcher import MailDispatcher
from shared.logging import get_logger

log = get_logger(__name__)


class SubmissionPipeline:
    def __init__(
        self,
        verifier: CaptchaVerifier,
        dispatcher: MailDispatcher,
        settings: Optional[MailSettings] = None,
    ) -> None:
        self._verifier = verifier
        self._dispatcher = dispatcher
        self._settings = settings or MailSettings()

    async def process(self, raw: RawSubmission) -> str:
        """Relay *raw* as an email and return the submission's language.

        Raises:
            ClientError: the caller can fix the request.
            InternalError: the caller cannot fix the request.
        """
        submission = self.validate(raw)
        await self.verify_captcha(submission)
        message = self.build_message(submission)
        await self.dispatch(message, submission)
        log.info(
            "contact_message_sent",
            language=submission.language,
            has_name=submission.name is not None,
            body_length=len(submission.body),
        )
        return submission.language

    @staticmethod
    def validate(raw: RawSubmission) -> ValidatedSubmission:
        if (
            raw.email is None
            or raw.subject is None
            or raw.body is None
            or raw.language is None
            or raw.solution is None
        ):
            raise ClientError("Missing fields in request")
        return ValidatedSubmission(
            email=raw.email,
            subject=raw.subject,
            body=raw.body,
            language=raw.language,
            solution=raw.solution,
            name=raw.name,
        )

    async def verify_captcha(self, submission: ValidatedSubmission) -> None:
        result = await self._verifier.verify(submission.solution)
        if result.status is not VerificationStatus.REJECTED:
            return

        error = result.error
        if error is not None and error.is_client_fault:
            raise ClientError(error.description)
        raise InternalError(
            error.description if error is not None else "FriendlyCaptcha rejected",
            subject=submission.subject,
            body=submission.body,
            language=submission.language,
        )

    def build_message(self, submission: ValidatedSubmission) -> OutboundMessage:
        try:
            reply_to = parse_mailbox(submission.email, submission.name)
        except ValueError as e:
            raise ClientError(f"Invalid email address {submission.email}") from e

        return OutboundMessage(
            sender=self._settings.mail_from,
            reply_to=reply_to,
            recipient=self._settings.mail_to,
            subject=submission.subject,
            body=submission.body,
        )

    async def dispatch(
        self, message: OutboundMessage, submission: ValidatedSubmission
    ) -> None:
        try:
            email = message.to_email()
        except ValueError as e:
            raise InternalError(
                f"Error building message: {e}",
                subject=submission.subject,
                body=submission.body,
                language=submission.language,
            ) from e

        try:
            await self._dispatcher.send(email)
        except DispatchError as e:
            raise InternalError(
                e.description,
                subject=submission.subject,
                body=submission.body,
                language=submission.language,
            ) from e
