"""In-memory SecretSource for tests and local development."""

from __future__ import annotations

import json
from typing import Any, Mapping, Optional, Union

from errors import MissingSecretError, SecretFormatError

SecretValue = Union[str, Mapping[str, Any]]


class InMemorySecretSource:
    """Secrets held in a dict, stored as raw JSON strings like the real store.

    ``requested`` records every lookup so callers can assert which secrets
    were (or were not) fetched.
    """

    def __init__(self, secrets: Optional[Mapping[str, SecretValue]] = None) -> None:
        self._secrets: dict[str, str] = {}
        self.requested: list[str] = []
        for name, value in (secrets or {}).items():
            self.add_secret(name, value)

    def add_secret(self, name: str, value: SecretValue) -> None:
        self._secrets[name] = value if isinstance(value, str) else json.dumps(value)

    def remove_secret(self, name: str) -> None:
        self._secrets.pop(name, None)

    async def get_secret(self, name: str) -> dict[str, Any]:
        self.requested.append(name)
        if name not in self._secrets:
            raise MissingSecretError(name)
        try:
            data = json.loads(self._secrets[name])
        except ValueError as e:
            raise SecretFormatError(name, "not valid JSON") from e
        if not isinstance(data, dict):
            raise SecretFormatError(name, "not a JSON object")
        return data
