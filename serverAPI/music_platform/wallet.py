# wallet.py

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol, Union

from .errors import NoWalletAvailable, NotConnected, TransactionFailed
from .notices import Notices

logger = logging.getLogger(__name__)

# Well-known binding an injected signer registers under (the browser exposes
# Petra as `window.aptos`).
INJECTED_BINDING = "aptos"


class InjectedSigner(Protocol):
    async def connect(self) -> Any: ...

    async def account(self) -> Dict[str, str]: ...

    async def is_connected(self) -> bool: ...

    async def sign_and_submit_transaction(self, payload: Dict[str, Any]) -> Dict[str, str]: ...


@dataclass(frozen=True)
class Injected:
    signer: InjectedSigner


@dataclass(frozen=True)
class LocalKey:
    account: Any  # aptos_sdk.account.Account


SignerStrategy = Union[Injected, LocalKey]


class WalletSession:
    """Who is acting: an injected signer, or a locally held development key.

    The strategy is resolved once in `connect()` (or `restore()`) and kept
    until `disconnect()`. Every mutating call goes through
    `sign_and_submit()`, which refuses to run without a session.
    """

    def __init__(self, chain, private_key=None, bindings=None, notices=None):
        self.chain = chain
        self.private_key = private_key
        self.bindings = bindings if bindings is not None else {}
        self.notices = notices if notices is not None else Notices()
        self.strategy: Optional[SignerStrategy] = None
        self.address: Optional[str] = None
        self.connected = False
        # one in-flight local-key transaction at a time, so sequence numbers don't collide
        self._local_lock = asyncio.Lock()

    def _probe(self) -> Optional[InjectedSigner]:
        return self.bindings.get(INJECTED_BINDING)

    def _set(self, strategy, address):
        self.strategy = strategy
        self.address = address
        self.connected = True

    async def connect(self) -> bool:
        """Connect and report the outcome as a notice. Returns True on success."""
        try:
            signer = self._probe()
            if signer is not None:
                await signer.connect()
                info = await signer.account()
                self._set(Injected(signer), info["address"])
                self.notices.success("Wallet connected successfully!")
            elif self.private_key:
                account = self.chain.account_from_key(self.private_key)
                self._set(LocalKey(account), str(account.address()))
                self.notices.success("Development wallet connected!")
            else:
                raise NoWalletAvailable()
        except NoWalletAvailable as e:
            logger.warning(str(e))
            self.notices.error(str(e))
            return False
        except Exception as e:
            logger.error(f"Failed to connect wallet: {e}")
            self.notices.error("Failed to connect wallet")
            return False

        logger.info(f"Wallet connected: {self.address}")
        return True

    def disconnect(self):
        self.strategy = None
        self.address = None
        self.connected = False
        self.notices.success("Wallet disconnected")

    async def restore(self) -> bool:
        """Silently pick up an injected signer that is already connected."""
        signer = self._probe()
        if signer is None or self.connected:
            return self.connected
        try:
            if not await signer.is_connected():
                return False
            info = await signer.account()
        except Exception as e:
            logger.warning(f"Could not restore wallet session: {e}")
            return False
        self._set(Injected(signer), info["address"])
        logger.info(f"Wallet session restored: {self.address}")
        return True

    async def sign_and_submit(self, payload) -> str:
        if not self.connected or self.strategy is None:
            raise NotConnected()

        strategy = self.strategy
        if isinstance(strategy, Injected):
            try:
                result = await strategy.signer.sign_and_submit_transaction(payload.to_dict())
                txn_hash = result["hash"]
                await self.chain.wait_for_inclusion(txn_hash)
            except Exception as e:
                logger.error(f"Transaction failed: {e}")
                raise TransactionFailed(payload.function, e) from e
            return txn_hash

        async with self._local_lock:
            try:
                return await self.chain.submit_local(strategy.account, payload)
            except TransactionFailed as e:
                logger.error(f"Transaction failed: {e.cause}")
                raise
            except Exception as e:
                logger.error(f"Transaction failed: {e}")
                raise TransactionFailed(payload.function, e) from e
