"""AWS Secrets Manager implementation of SecretSource.

Secrets are stored as JSON strings. boto3 is synchronous, so each lookup runs
in the threadpool to keep the event loop free.
"""

from __future__ import annotations

import json
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from starlette.concurrency import run_in_threadpool

from config import SecretStoreSettings
from errors import MissingSecretError, SecretFormatError, SecretStoreError
from shared.logging import get_logger

log = get_logger(__name__)

_NOT_FOUND_CODES = {"ResourceNotFoundException"}


class AwsSecretsManagerSource:
    def __init__(self, client: Any) -> None:
        self._client = client

    @classmethod
    def open(cls, settings: SecretStoreSettings) -> "AwsSecretsManagerSource":
        """Create a Secrets Manager client honouring AWS_ENDPOINT_URL."""
        client = boto3.client(
            "secretsmanager",
            region_name=settings.aws_region,
            endpoint_url=settings.aws_endpoint_url,
        )
        log.info(
            "secret_source_opened",
            region=settings.aws_region,
            endpoint_url=settings.aws_endpoint_url or "default",
        )
        return cls(client)

    async def get_secret(self, name: str) -> dict[str, Any]:
        try:
            response = await run_in_threadpool(
                self._client.get_secret_value, SecretId=name
            )
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "")
            if code in _NOT_FOUND_CODES:
                raise MissingSecretError(name) from e
            raise SecretStoreError(name, f"{code or 'ClientError'}: {e}") from e
        except BotoCoreError as e:
            raise SecretStoreError(name, str(e)) from e

        secret_string = response.get("SecretString")
        if secret_string is None:
            # Binary secrets are not used by this service
            raise MissingSecretError(name)
        try:
            data = json.loads(secret_string)
        except ValueError as e:
            raise SecretFormatError(name, "not valid JSON") from e
        if not isinstance(data, dict):
            raise SecretFormatError(name, "not a JSON object")
        return data
