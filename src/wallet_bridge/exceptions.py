"""Exception hierarchy for the wallet bridge."""

from typing import Any

# EIP-1193 / JSON-RPC error codes surfaced to page scripts.
INVALID_REQUEST_CODE = -32600
INTERNAL_ERROR_CODE = -32603
UNAUTHORIZED_CODE = 4100


class WalletBridgeError(Exception):
    """Base exception for all wallet bridge errors."""

    code: int = INTERNAL_ERROR_CODE

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_rpc_error(self) -> dict[str, Any]:
        """Return a serialisable ``{code, message, data}`` payload for the page."""
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            payload["data"] = self.details
        return payload


class ConfigurationError(WalletBridgeError):
    """Raised when process configuration or the key file is malformed."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.field = field
        self.value = value


class InvalidRequestError(WalletBridgeError):
    """Raised when a provider request is missing its method or has unusable params."""

    code = INVALID_REQUEST_CODE

    def __init__(self, message: str, method: str | None = None, details: dict | None = None):
        super().__init__(message, details)
        self.method = method


class IdentityMismatchError(WalletBridgeError):
    """Raised when a sign-style call names an address other than the active signer."""

    code = UNAUTHORIZED_CODE

    def __init__(self, message: str, address: str, expected: str | None = None):
        super().__init__(message, {"address": address})
        self.address = address
        self.expected = expected


class TransportError(WalletBridgeError):
    """Raised when the upstream JSON-RPC endpoint returns an error."""

    def __init__(
        self,
        message: str,
        endpoint: str | None = None,
        code: int | None = None,
        data: Any | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.endpoint = endpoint
        if code is not None:
            self.code = code
        self.data = data

    def to_rpc_error(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            payload["data"] = self.data
        return payload


class SigningError(WalletBridgeError):
    """Raised when the local account fails to produce a signature."""

    pass


class UITimeoutError(WalletBridgeError):
    """Raised when an expected page control never appears within its budget."""

    def __init__(
        self,
        message: str,
        control: str | None = None,
        timeout_ms: float | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.control = control
        self.timeout_ms = timeout_ms
