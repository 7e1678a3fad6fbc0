"""
data/store.py - Read-only entity store.

The indexing pipeline owns persistence; pricing only needs keyed lookups
that may come back empty. Absence is None, never an exception.

SNAPSHOT FORMAT (JSON):
    {
        "bundle": {"base_price_usd": "0.41"},
        "tokens": [{"address": "0x...", "derived_base_price": "1", ...}],
        "pairs":  [{"address": "0x...", "token0": "0x...", "reserve0": "...", ...}]
    }
Decimals are strings so they survive the round trip exactly.
"""

import json
from pathlib import Path
from typing import Any, Iterable, Optional, Protocol

from core.constants import ErrorCode
from core.exceptions import PricerError, StoreError
from core.logging import get_logger
from core.models import Bundle, Pair, Token
from core.validators import is_address

logger = get_logger("pricer.store")


class EntityStore(Protocol):
    """Keyed, read-only view of indexed entities."""

    def load_token(self, address: str) -> Optional[Token]:
        ...

    def load_pair(self, address: str) -> Optional[Pair]:
        ...

    def load_bundle(self) -> Bundle:
        ...


class InMemoryEntityStore:
    """
    Dict-backed EntityStore.

    Used by tests and by the CLI, which evaluates pricing against a
    snapshot of indexed state.
    """

    def __init__(
        self,
        tokens: Iterable[Token] = (),
        pairs: Iterable[Pair] = (),
        bundle: Bundle | None = None,
    ):
        self._tokens: dict[str, Token] = {}
        self._pairs: dict[str, Pair] = {}
        self._bundle = bundle or Bundle()

        for token in tokens:
            self.add_token(token)
        for pair in pairs:
            self.add_pair(pair)

    # -------------------------------------------------------------------------
    # Writes (pipeline/test side)
    # -------------------------------------------------------------------------

    def add_token(self, token: Token) -> None:
        self._tokens[token.address] = token

    def add_pair(self, pair: Pair) -> None:
        self._pairs[pair.address] = pair

    def set_bundle(self, bundle: Bundle) -> None:
        self._bundle = bundle

    # -------------------------------------------------------------------------
    # EntityStore
    # -------------------------------------------------------------------------

    def load_token(self, address: str) -> Optional[Token]:
        if not is_address(address):
            return None
        return self._tokens.get(address.strip().lower())

    def load_pair(self, address: str) -> Optional[Pair]:
        if not is_address(address):
            return None
        return self._pairs.get(address.strip().lower())

    def load_bundle(self) -> Bundle:
        return self._bundle

    @property
    def tokens(self) -> list[Token]:
        return list(self._tokens.values())

    @property
    def pairs(self) -> list[Pair]:
        return list(self._pairs.values())

    # -------------------------------------------------------------------------
    # Snapshots
    # -------------------------------------------------------------------------

    @classmethod
    def from_snapshot(cls, data: dict[str, Any]) -> "InMemoryEntityStore":
        """Build a store from a decoded snapshot dict."""
        if not isinstance(data, dict):
            raise StoreError(
                "Snapshot must be a JSON object",
                {"type": type(data).__name__},
            )

        try:
            tokens = [Token.from_dict(t) for t in data.get("tokens", [])]
            pairs = [Pair.from_dict(p) for p in data.get("pairs", [])]
            bundle = Bundle.from_dict(data.get("bundle") or {})
        except KeyError as e:
            raise StoreError(
                f"Snapshot entity missing field {e}",
                {"field": str(e)},
            ) from e
        except PricerError as e:
            raise StoreError(
                f"Invalid snapshot entity: {e.message}",
                {"error_code": e.code.value, **e.details},
            ) from e

        store = cls(tokens=tokens, pairs=pairs, bundle=bundle)
        logger.debug(
            "Snapshot loaded",
            extra={"context": {"tokens": len(tokens), "pairs": len(pairs)}},
        )
        return store

    @classmethod
    def load_snapshot(cls, path: Path) -> "InMemoryEntityStore":
        """Load a store from a JSON snapshot file."""
        if not path.exists():
            raise StoreError(
                f"Snapshot not found: {path}",
                {"path": str(path)},
                code=ErrorCode.STORE_ENTITY_NOT_FOUND,
            )

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise StoreError(
                f"Snapshot is not valid JSON: {path}",
                {"path": str(path), "error": str(e)},
            ) from e

        return cls.from_snapshot(data)

    def to_snapshot(self) -> dict[str, Any]:
        return {
            "bundle": self._bundle.to_dict(),
            "tokens": [t.to_dict() for t in self._tokens.values()],
            "pairs": [p.to_dict() for p in self._pairs.values()],
        }

    def save_snapshot(self, path: Path) -> None:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_snapshot(), f, indent=2)
