"""Field-scoped validation errors and the aggregate returned at the entry points."""

from dataclasses import dataclass

FIELD_VALUE_INVALID = "FieldValueInvalid"
FIELD_VALUE_NOT_SUPPORTED = "FieldValueNotSupported"

_TYPE_TEXT = {
    FIELD_VALUE_INVALID: "Invalid value",
    FIELD_VALUE_NOT_SUPPORTED: "Unsupported value",
}


class FieldPath:
    """Immutable dotted path to a field, used for error construction only."""

    def __init__(self, *parts: str):
        self._parts = tuple(parts)

    def child(self, name: str, *more: str) -> "FieldPath":
        return FieldPath(*self._parts, name, *more)

    def __str__(self) -> str:
        return ".".join(self._parts)

    def __repr__(self) -> str:
        return f"FieldPath({str(self)!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, FieldPath) and self._parts == other._parts

    def __hash__(self) -> int:
        return hash(self._parts)


@dataclass(eq=False)
class FieldError(Exception):
    """A single field that could not be converted."""
    type: str
    field: str
    bad_value: object = None
    detail: str = ""

    def __str__(self) -> str:
        text = _TYPE_TEXT.get(self.type, self.type)
        msg = f"{self.field}: {text}: {self.bad_value!r}"
        if self.detail:
            msg += f": {self.detail}"
        return msg


def invalid(path: FieldPath, value, detail: str) -> FieldError:
    return FieldError(FIELD_VALUE_INVALID, str(path), value, detail)


def not_supported(path: FieldPath, value, detail: str) -> FieldError:
    return FieldError(FIELD_VALUE_NOT_SUPPORTED, str(path), value, detail)


class PreconditionError(ValueError):
    """A required input object is absent; no partial result is meaningful."""


class EncodingError(Exception):
    """The provider config payload could not be (de)serialized."""


class AggregateError(Exception):
    """Several independent errors reported as one outcome."""

    def __init__(self, errors: list):
        flat: list = []
        for err in errors:
            if isinstance(err, AggregateError):
                flat.extend(err.errors)
            elif err is not None:
                flat.append(err)
        self.errors = flat
        super().__init__(self._message())

    def _message(self) -> str:
        msgs = []
        for err in self.errors:
            msg = str(err)
            if msg not in msgs:
                msgs.append(msg)
        if len(msgs) == 1:
            return msgs[0]
        return "[" + ", ".join(msgs) + "]"

    def __len__(self) -> int:
        return len(self.errors)

    def __iter__(self):
        return iter(self.errors)


def aggregate(errors: list) -> AggregateError | None:
    """Merge errors into one; an empty list means no error at all."""
    errors = [e for e in errors if e is not None]
    if not errors:
        return None
    return AggregateError(errors)

