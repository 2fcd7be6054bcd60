"""SecretSource protocol: services depend on this, not the concrete implementation."""

from typing import Any, Protocol, TypeVar

from pydantic import BaseModel, ValidationError

from errors import SecretFormatError

M = TypeVar("M", bound=BaseModel)


class SecretSource(Protocol):
    async def get_secret(self, name: str) -> dict[str, Any]: ...


async def get_typed_secret(source: SecretSource, name: str, model: type[M]) -> M:
    """Fetch secret *name* and validate it into *model*.

    Raises a SecretError subclass; a secret with the wrong shape is a
    SecretFormatError rather than a pydantic error.
    """
    data = await source.get_secret(name)
    try:
        return model.model_validate(data)
    except ValidationError as e:
        fields = ", ".join(str(err["loc"][0]) for err in e.errors() if err["loc"])
        raise SecretFormatError(name, f"invalid fields: {fields}") from e
