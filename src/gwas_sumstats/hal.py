"""Decoding of HAL (``_embedded`` / ``_links``) response envelopes."""

import json
from collections.abc import Callable
from typing import Any, TypeVar

from .errors import DecodeError
from .models import Association, HalEnvelope, expect_list, expect_mapping

T = TypeVar("T")
M = TypeVar("M")


def parse_json(raw: bytes | str) -> Any:
    """Parse a response body, raising DecodeError for anything that is not JSON."""
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise DecodeError(f"Response is not valid JSON: {e}") from e


def association_map(value: Any) -> dict[str, Association]:
    """Payload decoder for association listings: association id -> Association."""
    items = expect_mapping(value, "embedded associations")
    return {str(key): Association.from_dict(item) for key, item in items.items()}


def sequence_of(model: Callable[[Any], M]) -> Callable[[Any], list[M]]:
    """Payload decoder for a flat list of entities.

    ``model`` is a ``from_dict`` style callable, typically a model's
    ``from_dict`` classmethod.
    """

    def decode(value: Any) -> list[M]:
        return [model(item) for item in expect_list(value, "embedded listing")]

    return decode


def nested_sequence_of(model: Callable[[Any], M]) -> Callable[[Any], list[list[M]]]:
    """Payload decoder for a list of lists of entities.

    The studies listing groups its results this way; the grouping is kept
    as is.
    """
    inner = sequence_of(model)

    def decode(value: Any) -> list[list[M]]:
        return [inner(group) for group in expect_list(value, "embedded listing")]

    return decode


def envelope_from_dict(data: Any, payload: Callable[[Any], T]) -> HalEnvelope[T]:
    """Build a HalEnvelope from already parsed JSON."""
    data = expect_mapping(data, "HAL envelope")

    embedded = None
    raw_embedded = data.get("_embedded")
    if raw_embedded is not None:
        raw_embedded = expect_mapping(raw_embedded, "_embedded")
        embedded = {str(key): payload(value) for key, value in raw_embedded.items()}

    links = None
    if data.get("_links") is not None:
        links = expect_mapping(data["_links"], "_links")

    return HalEnvelope(embedded=embedded, links=links)


def decode_envelope(raw: bytes | str, payload: Callable[[Any], T]) -> HalEnvelope[T]:
    """Decode a HAL envelope whose embedded resources are decoded by ``payload``.

    Args:
        raw: Response body
        payload: Decoder applied to each value under ``_embedded``

    Returns:
        The decoded envelope; missing ``_embedded`` or ``_links`` are left as None

    Raises:
        DecodeError: If the body is not JSON or does not have the expected shape
    """
    return envelope_from_dict(parse_json(raw), payload)


def decode_entity(raw: bytes | str, model: Callable[[Any], M]) -> M:
    """Decode a bare (non-envelope) entity such as a single Chromosome."""
    return model(parse_json(raw))
