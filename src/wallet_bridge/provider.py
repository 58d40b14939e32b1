"""In-page EIP-1193 provider and the host binding it talks through.

The provider runs inside the page with no access to the key. Each
``request`` call is marshalled through a Playwright binding to
``RpcDispatcher.handle``; only JSON-compatible payloads cross in either
direction.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from .dispatcher import RpcDispatcher
from .exceptions import INTERNAL_ERROR_CODE, WalletBridgeError
from .types import RpcRequest
from .utils import to_json_compatible

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from playwright.sync_api import Page

logger = logging.getLogger(__name__)

BINDING_NAME = "walletBridge"
INITIALIZED_EVENT = "ethereum#initialized"

_PROVIDER_SCRIPT = """
(() => {
  const bindingName = __BINDING_NAME__;
  const initializedEvent = __INITIALIZED_EVENT__;

  if (window.ethereum && window.ethereum.isWalletBridge) {
    return;
  }

  class WalletBridgeProvider {
    constructor() {
      this.isMetaMask = true;
      this.isWalletBridge = true;
      this.selectedAddress = null;
      this._listeners = new Map();
    }

    isConnected() {
      return true;
    }

    on(event, listener) {
      const current = this._listeners.get(event) || [];
      this._listeners.set(event, [...current, listener]);
      return this;
    }

    once(event, listener) {
      const wrapped = (payload) => {
        this.removeListener(event, wrapped);
        listener(payload);
      };
      wrapped.original = listener;
      return this.on(event, wrapped);
    }

    removeListener(event, listener) {
      const current = this._listeners.get(event) || [];
      this._listeners.set(
        event,
        current.filter((item) => item !== listener && item.original !== listener),
      );
      return this;
    }

    off(event, listener) {
      return this.removeListener(event, listener);
    }

    emit(event, payload) {
      // Iterate the array captured at emit time; removals replace the stored array.
      const current = this._listeners.get(event) || [];
      for (const listener of current) {
        try {
          listener(payload);
        } catch (error) {
          console.error(error);
        }
      }
      return current.length > 0;
    }

    async request(args) {
      const { method, params } = args || {};
      const payload = { method, params: params === undefined ? [] : params };
      const reply = await window[bindingName](payload);

      if (reply && reply.error) {
        const error = new Error(reply.error.message);
        error.code = reply.error.code;
        if (reply.error.data !== undefined) {
          error.data = reply.error.data;
        }
        throw error;
      }

      const result = reply ? reply.result : undefined;

      if (method === "eth_requestAccounts" || method === "eth_accounts") {
        const accounts = Array.isArray(result) ? result : [];
        this.selectedAddress = accounts.length ? accounts[0] : null;
        this.emit("accountsChanged", accounts);
      }

      if (method === "wallet_switchEthereumChain") {
        const descriptor = Array.isArray(params) ? params[0] : params;
        const chain = descriptor ? descriptor.chainId : undefined;
        this.emit("chainChanged", chain);
      }

      return result;
    }

    enable() {
      return this.request({ method: "eth_requestAccounts" });
    }
  }

  window.ethereum = new WalletBridgeProvider();
  window.dispatchEvent(new Event(initializedEvent));
})();
"""


def build_provider_script(binding_name: str = BINDING_NAME) -> str:
    """Return the init script that installs ``window.ethereum``."""
    return _PROVIDER_SCRIPT.replace("__BINDING_NAME__", json.dumps(binding_name)).replace(
        "__INITIALIZED_EVENT__", json.dumps(INITIALIZED_EVENT)
    )


def bridge_request(dispatcher: RpcDispatcher, payload: Any) -> dict[str, Any]:
    """Handle one page request and return a ``{result}`` or ``{error}`` envelope."""

    try:
        request = RpcRequest.from_payload(payload)
        result = dispatcher.handle(request.method, request.params)
    except WalletBridgeError as exc:
        logger.warning("Wallet request failed: %s", exc.message)
        return {"error": to_json_compatible(exc.to_rpc_error())}
    except Exception as exc:
        logger.warning("Wallet request raised %s: %s", type(exc).__name__, exc)
        return {"error": to_json_compatible(_foreign_error(exc))}

    return {"result": to_json_compatible(result)}


def install_provider(
    page: Page, dispatcher: RpcDispatcher, *, binding_name: str = BINDING_NAME
) -> None:
    """Expose the host binding and register the provider init script on ``page``.

    Must be called before navigation so the provider exists before page scripts run.
    """

    def _binding(source: Any, payload: Any) -> dict[str, Any]:
        return bridge_request(dispatcher, payload)

    page.expose_binding(binding_name, _binding)
    page.add_init_script(script=build_provider_script(binding_name))
    logger.debug("Injected wallet provider via binding %s", binding_name)


def _foreign_error(exc: Exception) -> dict[str, Any]:
    """Describe a library exception, keeping the upstream JSON-RPC error when one is attached."""

    rpc_response = getattr(exc, "rpc_response", None)
    if isinstance(rpc_response, dict) and isinstance(rpc_response.get("error"), dict):
        error = rpc_response["error"]
        payload: dict[str, Any] = {
            "code": error.get("code", INTERNAL_ERROR_CODE),
            "message": str(error.get("message", exc)),
        }
        if error.get("data") is not None:
            payload["data"] = error["data"]
        return payload

    return {
        "code": INTERNAL_ERROR_CODE,
        "message": str(exc),
        "data": {"type": type(exc).__name__},
    }
