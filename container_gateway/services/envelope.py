"""
Envelope unwrapping.

Upstream list endpoints wrap their payload in a single-field object such as
``{"advertisements": [...]}``. ``unwrap_and_map`` validates that envelope,
validates each element against a pydantic model and maps it to its domain
form. Any mismatch raises DecodeError, which the ServiceClient reports as a
permanent failure.
"""

from typing import Any, Callable, TypeVar

from pydantic import BaseModel, ValidationError

from container_gateway.services.errors import DecodeError

RawT = TypeVar("RawT", bound=BaseModel)
D = TypeVar("D")


def unwrap_and_map(
    body: Any,
    envelope_field: str,
    raw_model: type[RawT],
    mapper: Callable[[RawT], D],
) -> list[D]:
    """
    Extract ``body[envelope_field]`` and map each element.

    Args:
        body: Parsed JSON response body
        envelope_field: Name of the field holding the list
        raw_model: Pydantic model every element must validate against
        mapper: Pure conversion from the validated element to its domain form

    Returns:
        Mapped elements in upstream order
    """
    if not isinstance(body, dict) or envelope_field not in body:
        raise DecodeError(f"Missing envelope field '{envelope_field}'")

    items = body[envelope_field]
    if not isinstance(items, list):
        raise DecodeError(f"Envelope field '{envelope_field}' is not a list")

    return [mapper(decode_record(item, raw_model)) for item in items]


def decode_record(item: Any, raw_model: type[RawT]) -> RawT:
    """Validate a single bare (un-enveloped) record."""
    try:
        return raw_model.model_validate(item)
    except ValidationError as e:
        raise DecodeError(
            f"Malformed {raw_model.__name__}: {e.error_count()} validation error(s)"
        ) from e


def unwrapper(
    envelope_field: str,
    raw_model: type[RawT],
    mapper: Callable[[RawT], D],
) -> Callable[[Any], list[D]]:
    """Bind ``unwrap_and_map`` into a ServiceClient ``decode`` callable."""

    def decode(body: Any) -> list[D]:
        return unwrap_and_map(body, envelope_field, raw_model, mapper)

    return decode
