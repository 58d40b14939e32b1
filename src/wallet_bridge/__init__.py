"""Wallet bridge - an injected EIP-1193 wallet backed by an out-of-process signer.

Page scripts see a ``window.ethereum`` provider; every request it receives is
dispatched on the host against a local private key and a JSON-RPC endpoint.
"""

from .chain_state import ChainState
from .config import BridgeConfig, FlowConfig, load_config
from .dispatcher import RpcDispatcher, build_transaction_intent
from .exceptions import (
    ConfigurationError,
    IdentityMismatchError,
    InvalidRequestError,
    SigningError,
    TransportError,
    UITimeoutError,
    WalletBridgeError,
)
from .keystore import ensure_private_key
from .provider import bridge_request, build_provider_script, install_provider
from .signer import SignerContext
from .transport import RpcTransport
from .types import (
    ChainBinding,
    ClaimOutcome,
    LastTransactionRecord,
    RpcRequest,
    TransactionIntent,
)

__version__ = "0.1.0"

__all__ = [
    # Core
    "RpcDispatcher",
    "ChainState",
    "SignerContext",
    "RpcTransport",
    "build_transaction_intent",
    # Page boundary
    "install_provider",
    "bridge_request",
    "build_provider_script",
    # Configuration
    "BridgeConfig",
    "FlowConfig",
    "load_config",
    "ensure_private_key",
    # Types
    "ChainBinding",
    "ClaimOutcome",
    "LastTransactionRecord",
    "RpcRequest",
    "TransactionIntent",
    # Exceptions
    "WalletBridgeError",
    "ConfigurationError",
    "InvalidRequestError",
    "IdentityMismatchError",
    "TransportError",
    "SigningError",
    "UITimeoutError",
]
