"""
Health check endpoint.

GET /health: reports whether the lazily fetched resources are cached yet.
Nothing is fetched here: probing the secret store or the SMTP server from a
health check would defeat the lazy initialisation. The service is always
"ok" when it can answer; "not_loaded" only means no request has needed the
resource yet (or every attempt so far failed).
"""

from __future__ import annotations

from fastapi import APIRouter, Request

from schemas.dto.responses.common import HealthChecks, HealthResponse

router = APIRouter(tags=["health"])


def _state(loaded: bool) -> str:
    return "cached" if loaded else "not_loaded"


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    state = request.app.state
    return HealthResponse(
        status="ok",
        checks=HealthChecks(
            captcha_credentials=_state(state.captcha_verifier.credentials_loaded),
            mail_transport=_state(state.mail_dispatcher.transport_ready),
        ),
    )
