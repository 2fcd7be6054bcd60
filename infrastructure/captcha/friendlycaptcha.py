"""FriendlyCaptcha implementation of CaptchaVerifier.

Verification is fail-open: when the secret store or the verification API
cannot give a usable answer, the request is let through unverified and a
warning is logged. Only a definite answer rejects a submission:

- 401 from the API                   → INCORRECT_SECRET (operator must fix)
- other 4xx with an unparseable body → CLIENT_ERROR
- success=false, solution_invalid    → SOLUTION_INVALID
- success=false, solution_timeout_or_duplicate
                                     → SOLUTION_TIMEOUT_OR_DUPLICATE
- success=false, anything else       → UNRECOGNIZED_ERROR
"""

from __future__ import annotations

import httpx
from pydantic import BaseModel, ValidationError

from errors import SecretError
from infrastructure.captcha.protocol import (
    CaptchaError,
    CaptchaErrorKind,
    VerificationResult,
)
from infrastructure.http_client import HttpClient
from infrastructure.secrets.protocol import SecretSource, get_typed_secret
from schemas.models.credentials import CaptchaCredentials
from shared.logging import get_logger
from shared.memo import AsyncOnceCell

log = get_logger(__name__)

FRIENDLYCAPTCHA_DATA_NAME = "friendlycaptcha-data"
FRIENDLYCAPTCHA_VERIFY_URL = "https://api.friendlycaptcha.com/api/v1/siteverify"


class FriendlyCaptchaResponse(BaseModel):
    success: bool
    errors: list[str] = []


class FriendlyCaptchaVerifier:
    def __init__(
        self,
        secret_source: SecretSource,
        http_client: HttpClient,
        verify_url: str = FRIENDLYCAPTCHA_VERIFY_URL,
        secret_name: str = FRIENDLYCAPTCHA_DATA_NAME,
    ) -> None:
        self._secrets = secret_source
        self._http = http_client
        self._verify_url = verify_url
        self._secret_name = secret_name
        self._credentials: AsyncOnceCell[CaptchaCredentials] = AsyncOnceCell()

    @property
    def credentials_loaded(self) -> bool:
        return self._credentials.initialized

    async def verify(self, solution: str) -> VerificationResult:
        try:
            credentials = await self._credentials.get_or_init(self._fetch_credentials)
        except SecretError as e:
            return self._degraded(
                "credentials_unavailable",
                error=str(e),
                store_entry=self._secret_name,
            )

        try:
            response = await self._http.post(
                self._verify_url,
                json={
                    "solution": solution,
                    "secret": credentials.secret,
                    "sitekey": credentials.sitekey,
                },
            )
        except httpx.HTTPError as e:
            return self._degraded(
                "request_failed", error=str(e), error_type=type(e).__name__
            )

        return self._process_response(response)

    async def _fetch_credentials(self) -> CaptchaCredentials:
        return await get_typed_secret(
            self._secrets, self._secret_name, CaptchaCredentials
        )

    def _process_response(self, response: httpx.Response) -> VerificationResult:
        status = response.status_code
        if status == 401:
            log.error("friendlycaptcha_incorrect_secret")
            return VerificationResult.rejected(
                CaptchaError(
                    CaptchaErrorKind.INCORRECT_SECRET,
                    "Incorrect FriendlyCaptcha secret",
                )
            )
        if status >= 500:
            return self._degraded("api_error", status_code=status)

        # A 4xx reply still carries error codes (e.g. bad_request for a wrong
        # sitekey); it is judged by its body like any other answer.
        try:
            body = FriendlyCaptchaResponse.model_validate_json(response.content)
        except ValidationError as e:
            if 400 <= status < 500:
                log.warning(
                    "friendlycaptcha_client_error",
                    status_code=status,
                    response_text=response.text[:200],
                )
                return VerificationResult.rejected(
                    CaptchaError(
                        CaptchaErrorKind.CLIENT_ERROR,
                        f"FriendlyCaptcha client error: HTTP {status}",
                    )
                )
            return self._degraded(
                "invalid_response",
                error_count=e.error_count(),
                response_text=response.text[:200],
            )

        if body.success and status < 400:
            return VerificationResult.verified()
        if "solution_invalid" in body.errors:
            return VerificationResult.rejected(
                CaptchaError(
                    CaptchaErrorKind.SOLUTION_INVALID,
                    "Invalid FriendlyCaptcha solution",
                    body.errors,
                )
            )
        if "solution_timeout_or_duplicate" in body.errors:
            return VerificationResult.rejected(
                CaptchaError(
                    CaptchaErrorKind.SOLUTION_TIMEOUT_OR_DUPLICATE,
                    "FriendlyCaptcha solution timeout or duplicate",
                    body.errors,
                )
            )
        log.error("friendlycaptcha_unrecognized_error", error_codes=body.errors)
        return VerificationResult.rejected(
            CaptchaError(
                CaptchaErrorKind.UNRECOGNIZED_ERROR,
                f"FriendlyCaptcha error: {body.errors}",
                body.errors,
            )
        )

    @staticmethod
    def _degraded(reason: str, **context) -> VerificationResult:
        log.warning(
            "friendlycaptcha_backend_error",
            reason=reason,
            action="letting request pass without verification",
            **context,
        )
        return VerificationResult.degraded(reason)
