"""
Argosy input validators.

A validator is any callable validator(value, name) that returns normally when the value is
acceptable and raises ValueError with a short, user-facing message otherwise. Validators
are attached to Input descriptors and run by Command.validate() before a command body.

Shipped validators
- required: the value must be a non-blank string.
- numeric: the value must parse as a number.
- contains(*choices, case_sensitive=True): the value must be one of choices.

Helpers
- validate(value, name, validators): run validators, surfacing the first failure as an
  InputValidationError.
- validate_inputs(metadata, inputs): run every declared input's validators against the
  positional value at the same index (missing values are checked as "").
"""
from .faults import FaultCode, InputValidationError
from .utils import rename


def required(value, name, /):
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{name} must not be empty")


def numeric(value, name, /):
    try:
        float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be numeric, got {value!r}") from None


def contains(*choices, case_sensitive=True):
    """
    Build a validator accepting only the given choices.

    Empty values pass (pair with required to forbid them), so optional inputs can still
    restrict what they accept.
    """
    if not choices or not all(isinstance(choice, str) for choice in choices):
        raise TypeError("contains() requires one or more string choices")

    accepted = choices if case_sensitive else tuple(choice.lower() for choice in choices)

    @rename("contains")
    def validator(value, name, /):
        if not value:
            return
        if (value if case_sensitive else str(value).lower()) not in accepted:
            raise ValueError(f"{name} must be one of {', '.join(map(repr, choices))}, got {value!r}")

    return validator


def validate(value, name, validators, /, **context):
    """
    Run validators over one value, raising InputValidationError for the first failure.

    An empty value rejected by a validator is reported as a missing input.
    """
    for validator in validators:
        try:
            validator(value, name)
        except ValueError as error:
            code = FaultCode.MISSING_INPUT if not value else FaultCode.INVALID_INPUT
            raise InputValidationError(
                str(error),
                code=code,
                title="missing input" if code is FaultCode.MISSING_INPUT else "invalid input",
                input=name,
                value=value,
                **context,
            ) from None


def validate_inputs(metadata, inputs, /):
    """
    Validate positional inputs against the Input descriptors of metadata.
    """
    for index, descriptor in enumerate(metadata.inputs):
        value = inputs[index] if index < len(inputs) else ""
        validate(value, descriptor.name, descriptor.validators, index=index, hint=descriptor.descr)


__all__ = (
    "required",
    "numeric",
    "contains",
    "validate",
    "validate_inputs",
)
