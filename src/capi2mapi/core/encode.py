"""Provider config envelope — packing a provider config into a RawExtension and back."""

import json

from capi2mapi.pacts.errors import EncodingError
from capi2mapi.pacts.types import RawExtension


def raw_extension_from_provider_spec(spec) -> RawExtension:
    """Marshal a provider config; None yields an empty envelope."""
    if spec is None:
        return RawExtension()
    try:
        raw = json.dumps(spec.to_dict(), separators=(",", ":"), allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise EncodingError(f"error marshalling providerSpec: {exc}") from exc
    return RawExtension(raw=raw.encode("utf-8"))


def provider_spec_from_raw_extension(raw_ext: RawExtension | None, config_cls):
    """Unmarshal an envelope into config_cls; an empty envelope is no config at all."""
    if raw_ext is None or raw_ext.is_empty():
        return None
    try:
        data = json.loads(raw_ext.raw)
    except ValueError as exc:
        raise EncodingError(f"error unmarshalling providerSpec: {exc}") from exc
    if not isinstance(data, dict):
        raise EncodingError("error unmarshalling providerSpec: expected a JSON object")
    expected = config_cls().kind
    if data.get("kind") and data["kind"] != expected:
        raise EncodingError(
            f"error unmarshalling providerSpec: kind {data['kind']!r} is not {expected!r}")
    try:
        return config_cls.from_dict(data)
    except (AttributeError, TypeError, ValueError) as exc:
        raise EncodingError(f"error unmarshalling providerSpec: {exc}") from exc
