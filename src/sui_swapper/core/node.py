"""
SuiNode: JSON-RPC client for a Sui fullnode.

Docs: https://docs.sui.io/sui-api-ref
"""

from __future__ import annotations

import base64
import itertools
import time
from typing import Any

import httpx

from sui_swapper.core.models import Coin, Token, TokenBalance, WalletBalance

PUBLIC_MAINNET_URL = "https://fullnode.mainnet.sui.io:443"

# suix_getCoins page size cap
COINS_PAGE_LIMIT = 50


class SuiNodeError(Exception):
    """Raised when the Sui RPC returns an error or an unexpected payload."""
    pass


class SuiNode:
    """
    Synchronous JSON-RPC client for the Sui blockchain.

    Usage:
        node = SuiNode()  # public mainnet fullnode
        node = SuiNode(rpc_url="https://fullnode.testnet.sui.io:443")
        with SuiNode() as node:
            coins = node.get_coins(address, coin_type)
    """

    def __init__(
        self,
        rpc_url: str = PUBLIC_MAINNET_URL,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.rpc_url = rpc_url.rstrip("/")
        self._client = httpx.Client(
            headers={"Content-Type": "application/json"},
            timeout=timeout,
            transport=transport,
        )
        self._ids = itertools.count(1)

    # ------------------------------------------------------------------
    # Coins & balances
    # ------------------------------------------------------------------

    def get_coins(self, owner: str, coin_type: str) -> list[Coin]:
        """Return every coin object of `coin_type` owned by `owner` (all pages)."""
        coins: list[Coin] = []
        cursor: str | None = None
        while True:
            page = self._call("suix_getCoins", [owner, coin_type, cursor, COINS_PAGE_LIMIT])
            coins.extend(self._parse_coin(c) for c in page.get("data", []))
            if not page.get("hasNextPage"):
                return coins
            cursor = page.get("nextCursor")
            if cursor is None:
                return coins

    def get_token_balance(self, owner: str, token: Token) -> TokenBalance:
        """Sum an owner's coins of one token."""
        coins = self.get_coins(owner, token.coin_type)
        return TokenBalance(
            token=token,
            balance=sum(c.balance for c in coins),
            coins=coins,
        )

    def get_wallet_balance(self, owner: str, tokens: list[Token]) -> WalletBalance:
        """Balances for each token in `tokens`, keyed by symbol."""
        return WalletBalance(
            address=owner,
            tokens={t.symbol: self.get_token_balance(owner, t) for t in tokens},
        )

    # ------------------------------------------------------------------
    # Objects & chain state
    # ------------------------------------------------------------------

    def get_object(self, object_id: str) -> dict[str, Any]:
        """
        Return an object's data (content and owner included).

        Raises:
            SuiNodeError: if the object does not exist or was deleted
        """
        result = self._call(
            "sui_getObject",
            [object_id, {"showContent": True, "showOwner": True, "showType": True}],
        )
        if not isinstance(result, dict):
            raise SuiNodeError(f"Object {object_id} unavailable: unexpected result {result!r}")
        if result.get("error") or not isinstance(result.get("data"), dict):
            raise SuiNodeError(f"Object {object_id} unavailable: {result.get('error')}")
        return result["data"]

    def get_shared_object_version(self, object_id: str) -> int:
        """Return the initial shared version of a shared object."""
        owner = self.get_object(object_id).get("owner")
        if not isinstance(owner, dict) or "Shared" not in owner:
            raise SuiNodeError(f"Object {object_id} is not shared (owner: {owner})")
        try:
            return int(owner["Shared"]["initial_shared_version"])
        except (KeyError, TypeError, ValueError):
            raise SuiNodeError(f"Object {object_id} has no initial shared version: {owner}") from None

    def get_reference_gas_price(self) -> int:
        return int(self._call("suix_getReferenceGasPrice", []))

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def execute_transaction(self, tx_bytes: bytes, signatures: list[str]) -> dict[str, Any]:
        """
        Submit a signed transaction.

        Args:
            tx_bytes: BCS-serialized TransactionData
            signatures: base64 serialized signatures

        Returns:
            dict: the RPC response, including 'digest' and 'effects'
        """
        return self._call(
            "sui_executeTransactionBlock",
            [
                base64.b64encode(tx_bytes).decode("ascii"),
                signatures,
                {"showEffects": True},
                "WaitForLocalExecution",
            ],
        )

    def get_transaction(self, digest: str) -> dict[str, Any]:
        return self._call("sui_getTransactionBlock", [digest, {"showEffects": True}])

    def wait_for_transaction(
        self,
        digest: str,
        timeout: float = 60.0,
        poll_interval: float = 2.0,
    ) -> dict[str, Any]:
        """
        Poll until the transaction is known to the fullnode.

        Raises:
            SuiNodeError: if the transaction is not found before `timeout`
        """
        deadline = time.monotonic() + timeout
        while True:
            try:
                return self.get_transaction(digest)
            except SuiNodeError:
                if time.monotonic() >= deadline:
                    raise SuiNodeError(
                        f"Transaction {digest} not finalized after {timeout:.0f}s"
                    ) from None
            time.sleep(poll_interval)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _call(self, method: str, params: list[Any]) -> Any:
        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        try:
            response = self._client.post(self.rpc_url, json=payload)
        except httpx.HTTPError as e:
            raise SuiNodeError(f"RPC transport error for {method}: {e}") from e
        if response.status_code != 200:
            raise SuiNodeError(
                f"RPC error {response.status_code} for {method}: {response.text}"
            )
        try:
            body = response.json()
        except ValueError as e:
            raise SuiNodeError(f"RPC returned a non-JSON body for {method}: {e}") from None
        if not isinstance(body, dict):
            raise SuiNodeError(f"RPC returned an unexpected body for {method}: {body!r}")
        if "error" in body:
            error = body["error"]
            message = error.get("message", error) if isinstance(error, dict) else error
            raise SuiNodeError(f"{method} failed: {message}")
        return body.get("result")

    @staticmethod
    def _parse_coin(data: dict[str, Any]) -> Coin:
        return Coin(
            coin_type=data["coinType"],
            coin_object_id=data["coinObjectId"],
            version=int(data["version"]),
            digest=data["digest"],
            balance=int(data["balance"]),
        )

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    def __enter__(self) -> SuiNode:
        return self

    def __exit__(self, *_: Any) -> None:
        self.close()
