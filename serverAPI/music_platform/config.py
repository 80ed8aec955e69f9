# config.py

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

DEFAULT_NODE_URL = "https://fullnode.devnet.aptoslabs.com/v1"


@dataclass(frozen=True)
class Settings:
    node_url: str = DEFAULT_NODE_URL
    module_address: Optional[str] = None   # account the `players` module is published under
    private_key: Optional[str] = None      # deploy script; signs for the server only when dev_wallet is on
    dev_wallet: bool = False
    host: str = "127.0.0.1"
    port: int = 3001
    log_level: str = "INFO"
    contracts_dir: str = "contracts"


def load_settings() -> Settings:
    load_dotenv()
    return Settings(
        node_url=os.getenv("APTOS_NODE_URL", DEFAULT_NODE_URL),
        module_address=os.getenv("MODULE_ADDRESS") or None,
        private_key=os.getenv("PRIVATE_KEY") or None,
        dev_wallet=os.getenv("DEV_WALLET", "false").strip().lower() in ("1", "true", "yes"),
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "3001")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        contracts_dir=os.getenv("CONTRACTS_DIR", "contracts"),
    )
