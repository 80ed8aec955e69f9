# payloads.py

import math
import re
from dataclasses import dataclass
from typing import Any, Tuple

from .abi import function_id

OCTAS_PER_APT = 100_000_000

ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{64}$")


@dataclass(frozen=True)
class TransactionPayload:
    """An entry-function call. Arguments are kept as an ordered tuple exactly as
    given; `to_dict()` yields the JSON shape with plain lists."""

    function: str
    type_arguments: Tuple[str, ...] = ()
    arguments: Tuple[Any, ...] = ()

    def to_dict(self):
        return {
            "function": self.function,
            "type_arguments": list(self.type_arguments),
            "arguments": list(self.arguments),
        }


def create_transaction_payload(module_address, function_name, type_arguments=(), arguments=()):
    return TransactionPayload(
        function=function_id(module_address, function_name),
        type_arguments=tuple(type_arguments),
        arguments=tuple(arguments),
    )


def initialize_payload(module_address):
    return create_transaction_payload(module_address, "initialize")


def register_artist_payload(module_address, name, bio):
    return create_transaction_payload(module_address, "register_artist", arguments=[name, bio])


def upload_track_payload(module_address, title, genre, duration_ms, ipfs_hash, royalty_rate_bps):
    # duration in milliseconds, royalty rate in basis points
    return create_transaction_payload(
        module_address,
        "upload_track",
        arguments=[title, genre, duration_ms, ipfs_hash, royalty_rate_bps],
    )


# === Units ===

def format_apt_amount(octas: int) -> str:
    return f"{octas / OCTAS_PER_APT:.8f}"


def parse_apt_amount(apt: str) -> int:
    return math.floor(float(apt) * OCTAS_PER_APT)


def seconds_to_ms(seconds) -> str:
    return str(int(seconds) * 1000)


def percent_to_bps(percent) -> str:
    return str(int(percent) * 100)


# === Addresses & explorer links ===

def shorten_address(address):
    if not address:
        return ""
    return f"{address[:6]}...{address[-4:]}"


def validate_address(address) -> bool:
    return bool(ADDRESS_RE.match(address or ""))


def network_name(node_url):
    if "devnet" in node_url:
        return "devnet"
    if "testnet" in node_url:
        return "testnet"
    return "mainnet"


def transaction_url(txn_hash, node_url):
    return f"https://explorer.aptoslabs.com/txn/{txn_hash}?network={network_name(node_url)}"


def account_url(address, node_url):
    return f"https://explorer.aptoslabs.com/account/{address}?network={network_name(node_url)}"
