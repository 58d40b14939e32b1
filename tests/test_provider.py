"""Tests for the page boundary and the injected provider script."""

from __future__ import annotations

import json
import os
from collections.abc import Callable
from typing import Any, cast

import pytest
from conftest import TEST_ADDRESS, DummyTransport

from wallet_bridge.dispatcher import RpcDispatcher
from wallet_bridge.exceptions import INVALID_REQUEST_CODE, UNAUTHORIZED_CODE, TransportError
from wallet_bridge.provider import (
    BINDING_NAME,
    INITIALIZED_EVENT,
    bridge_request,
    build_provider_script,
    install_provider,
)


class DummyPage:
    def __init__(self) -> None:
        self.bindings: dict[str, Callable[..., Any]] = {}
        self.init_scripts: list[str] = []

    def expose_binding(self, name: str, callback: Callable[..., Any]) -> None:
        self.bindings[name] = callback

    def add_init_script(self, script: str) -> None:
        self.init_scripts.append(script)


class TestBridgeRequest:
    """Test envelope marshalling across the page boundary."""

    def test_result_envelope(self, dispatcher: RpcDispatcher):
        reply = bridge_request(dispatcher, {"method": "eth_accounts", "params": []})
        assert reply == {"result": [TEST_ADDRESS]}

    def test_missing_method_is_invalid_request(self, dispatcher: RpcDispatcher):
        reply = bridge_request(dispatcher, {"params": []})
        assert reply["error"]["code"] == INVALID_REQUEST_CODE
        assert reply["error"]["message"] == "Request method is required"

    def test_non_object_payload(self, dispatcher: RpcDispatcher):
        reply = bridge_request(dispatcher, "eth_accounts")
        assert reply["error"]["code"] == INVALID_REQUEST_CODE

    def test_identity_mismatch_carries_address(self, dispatcher: RpcDispatcher):
        other = "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"
        reply = bridge_request(dispatcher, {"method": "personal_sign", "params": ["0x01", other]})

        assert reply["error"]["code"] == UNAUTHORIZED_CODE
        assert reply["error"]["data"] == {"address": other}

    def test_transport_error_passes_upstream_code(self, dispatcher: RpcDispatcher, transport):
        def failing_send(method, params):
            raise TransportError("execution reverted", code=3, data="0x08c379a0")

        transport.send = failing_send
        reply = bridge_request(dispatcher, {"method": "eth_call", "params": [{}]})

        assert reply == {
            "error": {"code": 3, "message": "execution reverted", "data": "0x08c379a0"}
        }

    def test_foreign_exception_keeps_rpc_response(self, dispatcher: RpcDispatcher, transport):
        class FakeRpcError(Exception):
            rpc_response = {"error": {"code": -32000, "message": "nonce too low"}}

        def failing_send(method, params):
            raise FakeRpcError("nonce too low")

        transport.send = failing_send
        reply = bridge_request(dispatcher, {"method": "eth_estimateGas", "params": [{}]})

        assert reply == {"error": {"code": -32000, "message": "nonce too low"}}

    def test_params_object_is_wrapped(self, dispatcher: RpcDispatcher, transport: DummyTransport):
        bridge_request(dispatcher, {"method": "eth_call", "params": {"to": "0x00"}})
        assert transport.calls == [("eth_call", [{"to": "0x00"}])]


class TestInstallProvider:
    """Test provider installation on a page."""

    def test_binding_and_script_are_registered(self, dispatcher: RpcDispatcher):
        page = DummyPage()
        install_provider(cast(Any, page), dispatcher)

        assert list(page.bindings) == [BINDING_NAME]
        assert page.init_scripts == [build_provider_script()]

    def test_binding_dispatches(self, dispatcher: RpcDispatcher):
        page = DummyPage()
        install_provider(cast(Any, page), dispatcher)

        callback = page.bindings[BINDING_NAME]
        source = {"frame": None, "page": page}
        assert callback(source, {"method": "eth_chainId"}) == {"result": "0x1"}

    def test_script_embeds_names(self):
        script = build_provider_script("customBridge")

        assert json.dumps("customBridge") in script
        assert json.dumps(INITIALIZED_EVENT) in script
        assert "__BINDING_NAME__" not in script
        assert "isMetaMask = true" in script


@pytest.mark.browser
class TestInjectedProviderInBrowser:
    """Exercise the provider script inside Chromium."""

    @pytest.fixture
    def page(self, dispatcher: RpcDispatcher):
        from playwright.sync_api import sync_playwright

        with sync_playwright() as pw:
            if not os.path.exists(pw.chromium.executable_path):
                pytest.skip("Playwright Chromium is not installed")

            browser = pw.chromium.launch(headless=True)
            context = browser.new_context()
            page = context.new_page()
            page.add_init_script(
                script="window.__initialized = 0;"
                f"window.addEventListener({json.dumps(INITIALIZED_EVENT)},"
                " () => { window.__initialized += 1; });"
            )
            install_provider(page, dispatcher)
            page.route(
                "http://wallet.test/",
                lambda route: route.fulfill(body="<html></html>", content_type="text/html"),
            )
            page.goto("http://wallet.test/")
            try:
                yield page
            finally:
                context.close()
                browser.close()

    def test_announces_once(self, page):
        assert page.evaluate("window.__initialized") == 1
        assert page.evaluate("window.ethereum.isMetaMask") is True
        assert page.evaluate("window.ethereum.selectedAddress") is None

    def test_request_accounts_emits_every_time(self, page):
        events = page.evaluate(
            """async () => {
                const seen = [];
                window.ethereum.on("accountsChanged", (accounts) => seen.push(accounts));
                await window.ethereum.request({ method: "eth_requestAccounts" });
                await window.ethereum.request({ method: "eth_requestAccounts" });
                await window.ethereum.request({ method: "eth_chainId" });
                return { seen, selected: window.ethereum.selectedAddress };
            }"""
        )
        assert events["seen"] == [[TEST_ADDRESS], [TEST_ADDRESS]]
        assert events["selected"] == TEST_ADDRESS

    def test_chain_changed_carries_requested_id(self, page):
        result = page.evaluate(
            """async () => {
                const seen = [];
                window.ethereum.on("chainChanged", (chainId) => seen.push(chainId));
                await window.ethereum.request({
                    method: "wallet_switchEthereumChain", params: [{ chainId: "0x89" }],
                });
                const chainId = await window.ethereum.request({ method: "eth_chainId" });
                return { seen, chainId };
            }"""
        )
        assert result == {"seen": ["0x89"], "chainId": "0x89"}

    def test_chain_changed_with_object_params(self, page):
        result = page.evaluate(
            """async () => {
                const seen = [];
                window.ethereum.on("chainChanged", (chainId) => seen.push(chainId));
                await window.ethereum.request({
                    method: "wallet_switchEthereumChain", params: { chainId: "0xa" },
                });
                const chainId = await window.ethereum.request({ method: "eth_chainId" });
                return { seen, chainId };
            }"""
        )
        assert result == {"seen": ["0xa"], "chainId": "0xa"}

    def test_removal_during_emission(self, page):
        calls = page.evaluate(
            """async () => {
                const calls = [];
                const second = () => calls.push("second");
                const first = () => {
                    calls.push("first");
                    window.ethereum.removeListener("accountsChanged", second);
                    window.ethereum.removeListener("accountsChanged", first);
                };
                window.ethereum.on("accountsChanged", first);
                window.ethereum.on("accountsChanged", second);
                await window.ethereum.request({ method: "eth_accounts" });
                await window.ethereum.request({ method: "eth_accounts" });
                return calls;
            }"""
        )
        assert calls == ["first", "second"]

    def test_rejection_carries_code(self, page):
        error = page.evaluate(
            """async () => {
                try {
                    await window.ethereum.request({
                        method: "personal_sign",
                        params: ["0x01", "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"],
                    });
                    return null;
                } catch (err) {
                    return { code: err.code, message: err.message };
                }
            }"""
        )
        assert error["code"] == UNAUTHORIZED_CODE
