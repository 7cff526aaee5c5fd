"""Exception hierarchy for value bridging and doc patching."""

from __future__ import annotations


class BridgeError(Exception):
    """Base exception for pyjsonbridge errors.

    Provides dual messaging: a sanitized user-facing message and
    internal details for logging (CWE-209 prevention).
    """

    def __init__(
        self,
        user_message: str,
        internal_details: str = "",
        wrapped: Exception | None = None,
    ) -> None:
        super().__init__(user_message)
        self.user_message = user_message
        self.internal_details = internal_details or user_message
        self.wrapped = wrapped

    def internal(self) -> str:
        return self.internal_details


class UnsupportedTypeError(BridgeError):
    """Raised when a value has no structured equivalent."""

    def __init__(
        self,
        user_message: str,
        internal_details: str = "",
        wrapped: Exception | None = None,
        *,
        type_name: str = "",
    ) -> None:
        super().__init__(user_message, internal_details, wrapped)
        self.type_name = type_name


class IntegerOutOfRangeError(BridgeError):
    """Raised when an integer fits neither signed nor unsigned 64 bits."""


class ConstructionFailedError(BridgeError):
    """Raised when a Python object cannot be allocated during decode."""


class MaxDepthExceededError(BridgeError):
    """Raised when nesting depth limit is exceeded."""


class MalformedTextError(BridgeError):
    """Raised when JSON text cannot be parsed or rendered."""


class DuplicateKeyError(BridgeError):
    """Raised when an object is built with a repeated key."""


class AlreadyDocumentedError(BridgeError):
    """Raised when a target already carries a docstring."""

    def __init__(
        self,
        user_message: str,
        internal_details: str = "",
        wrapped: Exception | None = None,
        *,
        target_name: str = "",
    ) -> None:
        super().__init__(user_message, internal_details, wrapped)
        self.target_name = target_name


class AttributeNotSettableError(BridgeError):
    """Raised when a docstring cannot be written to the target."""


class InvalidTextError(BridgeError):
    """Raised when a docstring payload is not valid text."""


# Sanitized user-facing error message constants
ERR_MSG_UNSUPPORTED_TYPE = "unsupported type"
ERR_MSG_INTEGER_OUT_OF_RANGE = "integer out of range for both int64 and uint64"
ERR_MSG_CONSTRUCTION_FAILED = "object construction failed"
ERR_MSG_DEPTH_EXCEEDED = "maximum nesting depth exceeded"
ERR_MSG_MALFORMED_TEXT = "malformed JSON text"
ERR_MSG_DUPLICATE_KEY = "duplicate object key"
ERR_MSG_NOT_SETTABLE = "cannot set a docstring for that object"
ERR_MSG_INVALID_TEXT = "docstring must be valid UTF-8 text"
