"""Public helper functions available to platform converters."""


def nested(obj: dict | None, *keys: str, default=None):
    """Walk nested manifest dicts, tolerating missing or null levels."""
    cur = obj
    for key in keys:
        if not isinstance(cur, dict):
            return default
        cur = cur.get(key)
        if cur is None:
            return default
    return cur


def deref(value, default=""):
    """Return value, or default when it is None (Go ptr.Deref semantics)."""
    return default if value is None else value


def object_name(manifest: dict | None) -> str:
    """Return 'Kind/name' string for use in warning messages."""
    if manifest is None:
        return "?"
    meta = manifest.get("metadata") or {}
    return f"{manifest.get('kind', '?')}/{meta.get('name', '?')}"


def copy_string_map(values: dict | None) -> dict | None:
    """Shallow copy of a labels/annotations map; None stays None."""
    if values is None:
        return None
    return dict(values)
