"""JSON Schema validation of call requests for the MINX token runtime.

Requests submitted to TokenRuntime.submit() are plain dicts:

    {"method": "transfer", "sender": "0xaa...", "params": {"to": "0xbb...", "amount": 10}}

This module validates them against a Draft 7 schema and translates jsonschema
errors into FieldError objects with field paths and error codes.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import jsonschema
from jsonschema import Draft7Validator, validators

from minxledger.errors import FieldError
from minxledger.types import FieldErrorCode, Method, UINT256_MAX


def _is_strict_integer(checker: Any, instance: Any) -> bool:
    return isinstance(instance, int) and not isinstance(instance, bool)


# Draft 7 counts 6.0 as an integer; amounts and decimals must be Python ints
StrictDraft7Validator = validators.extend(
    Draft7Validator,
    type_checker=Draft7Validator.TYPE_CHECKER.redefine("integer", _is_strict_integer),
)

ACCOUNT_SCHEMA: Dict[str, Any] = {"type": "string", "minLength": 1}
AMOUNT_SCHEMA: Dict[str, Any] = {"type": "integer", "minimum": 0, "maximum": UINT256_MAX}


def _params(**properties: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "type": "object",
        "properties": properties,
        "required": list(properties),
        "additionalProperties": False,
    }


# Parameter schema per method, named as in the contract ABI
PARAMS_SCHEMAS: Dict[Method, Dict[str, Any]] = {
    Method.TRANSFER: _params(to=ACCOUNT_SCHEMA, amount=AMOUNT_SCHEMA),
    Method.APPROVE: _params(spender=ACCOUNT_SCHEMA, amount=AMOUNT_SCHEMA),
    Method.INCREASE_ALLOWANCE: _params(spender=ACCOUNT_SCHEMA, amount=AMOUNT_SCHEMA),
    Method.DECREASE_ALLOWANCE: _params(spender=ACCOUNT_SCHEMA, amount=AMOUNT_SCHEMA),
    Method.TRANSFER_FROM: _params(owner=ACCOUNT_SCHEMA, to=ACCOUNT_SCHEMA, amount=AMOUNT_SCHEMA),
    Method.BURN: _params(amount=AMOUNT_SCHEMA),
}

REQUEST_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "method": {"enum": [m.value for m in Method]},
        "sender": ACCOUNT_SCHEMA,
        "params": {"type": "object"},
    },
    "required": ["method", "sender", "params"],
    "additionalProperties": False,
    "allOf": [
        {
            "if": {"properties": {"method": {"const": method.value}}, "required": ["method"]},
            "then": {"properties": {"params": schema}},
        }
        for method, schema in PARAMS_SCHEMAS.items()
    ],
}


@dataclass(frozen=True)
class ValidationResult:
    """Result of validating a request against a JSON Schema.

    Attributes:
        is_valid: Whether the request passed all validation checks
        errors: List of field-level validation errors (empty if valid)
        data: The validated request
        missing_fields: Paths of required fields that are missing
        invalid_fields: Paths of fields that failed validation

    Examples:
        >>> engine = ValidationEngine()
        >>> result = engine.validate({"method": "burn", "sender": "0xaa", "params": {"amount": 1}})
        >>> result.is_valid
        True
        >>> result.errors
        []
    """
    is_valid: bool
    errors: List[FieldError]
    data: Optional[Dict[str, Any]] = None
    missing_fields: Optional[List[str]] = None
    invalid_fields: Optional[List[str]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        result: Dict[str, Any] = {
            "isValid": self.is_valid,
            "errors": [e.to_dict() for e in self.errors],
        }
        if self.data is not None:
            result["data"] = self.data
        if self.missing_fields is not None:
            result["missingFields"] = self.missing_fields
        if self.invalid_fields is not None:
            result["invalidFields"] = self.invalid_fields
        return result


class ValidationEngine:
    """JSON Schema validation engine for ledger requests and configuration.

    Wraps the jsonschema library and translates validation errors into
    FieldError objects.

    Attributes:
        schema: The JSON Schema definition to validate against
        validator: The underlying jsonschema validator instance

    Examples:
        >>> engine = ValidationEngine()
        >>> result = engine.validate({"method": "burn", "sender": "0xaa", "params": {}})
        >>> result.is_valid
        False
        >>> result.missing_fields
        ['params.amount']
    """

    def __init__(self, schema: Optional[Dict[str, Any]] = None) -> None:
        """Initialize the validation engine.

        Args:
            schema: A JSON Schema definition (Draft 7); defaults to REQUEST_SCHEMA

        Raises:
            jsonschema.SchemaError: If the provided schema is invalid
        """
        self.schema = schema if schema is not None else REQUEST_SCHEMA
        Draft7Validator.check_schema(self.schema)
        self.validator = StrictDraft7Validator(self.schema)

    def validate(self, data: Any) -> ValidationResult:
        """Validate data against the schema.

        Args:
            data: The request (or configuration) to validate

        Returns:
            ValidationResult with is_valid flag and field errors
        """
        errors = sorted(self.validator.iter_errors(data), key=lambda e: list(e.path))

        if not errors:
            return ValidationResult(
                is_valid=True,
                errors=[],
                data=data,
                missing_fields=[],
                invalid_fields=[],
            )

        field_errors: List[FieldError] = []
        missing_fields: List[str] = []
        invalid_fields: List[str] = []

        for error in errors:
            field_error = self._translate_error(error)
            field_errors.append(field_error)

            if field_error.code == FieldErrorCode.REQUIRED:
                missing_fields.append(field_error.path)
            else:
                invalid_fields.append(field_error.path)

        return ValidationResult(
            is_valid=False,
            errors=field_errors,
            data=data,
            missing_fields=missing_fields,
            invalid_fields=invalid_fields,
        )

    def _translate_error(self, error: jsonschema.ValidationError) -> FieldError:
        """Translate a jsonschema ValidationError to a FieldError.

        Error mapping:
            - 'required' -> REQUIRED
            - 'type' -> INVALID_TYPE
            - 'enum', 'const', 'minimum', 'maximum', 'minLength' -> INVALID_VALUE
            - 'additionalProperties' -> UNEXPECTED
            - anything else -> CUSTOM
        """
        path = ".".join(str(p) for p in error.path)

        if error.validator == "required":
            missing_prop = error.message.split("'")[1] if "'" in error.message else "field"
            full_path = f"{path}.{missing_prop}" if path else missing_prop
            return FieldError(
                path=full_path,
                code=FieldErrorCode.REQUIRED,
                message=f"Field '{full_path}' is required but was not provided",
                expected="required field",
            )

        if error.validator == "type":
            received_type = type(error.instance).__name__
            return FieldError(
                path=path,
                code=FieldErrorCode.INVALID_TYPE,
                message=f"Field '{path}' has invalid type. Expected {error.validator_value}, got {received_type}",
                expected=error.validator_value,
                received=received_type,
            )

        if error.validator in ("enum", "const"):
            return FieldError(
                path=path,
                code=FieldErrorCode.INVALID_VALUE,
                message=f"Field '{path}' has invalid value. Must be one of: {error.validator_value}",
                expected=error.validator_value,
                received=error.instance,
            )

        if error.validator in ("minimum", "maximum", "minLength", "maxLength"):
            return FieldError(
                path=path,
                code=FieldErrorCode.INVALID_VALUE,
                message=f"Field '{path}' violates {error.validator} constraint: {error.validator_value}",
                expected=f"{error.validator}: {error.validator_value}",
                received=error.instance,
            )

        if error.validator == "additionalProperties":
            extras = sorted(set(error.instance) - set(error.schema.get("properties", {})))
            return FieldError(
                path=path,
                code=FieldErrorCode.UNEXPECTED,
                message=f"Unexpected field(s) at '{path or '<root>'}': {', '.join(extras)}",
                received=extras,
            )

        return FieldError(
            path=path,
            code=FieldErrorCode.CUSTOM,
            message=f"Field '{path}' validation failed: {error.message}",
            expected=error.validator_value,
            received=error.instance,
        )


__all__ = [
    "ValidationEngine",
    "ValidationResult",
    "REQUEST_SCHEMA",
    "PARAMS_SCHEMAS",
]
