# chain.py

import json
import logging

from aptos_sdk.account import Account
from aptos_sdk.account_address import AccountAddress
from aptos_sdk.async_client import RestClient
from aptos_sdk.bcs import Serializer
from aptos_sdk.package_publisher import PackagePublisher
from aptos_sdk.transactions import EntryFunction, TransactionArgument
from aptos_sdk.transactions import TransactionPayload as BcsPayload
from aptos_sdk.type_tag import StructTag, TypeTag

from . import abi
from .errors import AdapterFailure, TransactionFailed

logger = logging.getLogger(__name__)

AIP80_PREFIX = "ed25519-priv-"

_SERIALIZERS = {
    "u8": Serializer.u8,
    "u64": Serializer.u64,
    "u128": Serializer.u128,
    "bool": Serializer.bool,
    abi.STRING: Serializer.str,
}


def encode_argument(value, move_type):
    if move_type == "address":
        return TransactionArgument(AccountAddress.from_str(str(value)), Serializer.struct)
    try:
        serializer = _SERIALIZERS[move_type]
    except KeyError:
        raise AdapterFailure(f"Unsupported argument type {move_type}")
    return TransactionArgument(abi.coerce(value, move_type), serializer)


def to_entry_function(payload):
    """Turn a JSON-style payload into a BCS entry function using the module's parameter types."""
    module, name = payload.function.rsplit("::", 1)
    types = abi.param_types(name)
    if len(types) != len(payload.arguments):
        raise AdapterFailure(f"{name} takes {len(types)} arguments, got {len(payload.arguments)}")
    args = [encode_argument(v, t) for v, t in zip(payload.arguments, types)]
    ty_args = [TypeTag(StructTag.from_str(t)) for t in payload.type_arguments]
    return EntryFunction.natural(module, name, ty_args, args)


class ChainClient:
    """Single point of contact with the Aptos node.

    Returns raw view tuples and transaction hashes; decoding into named
    fields goes through `view_decoded`.
    """

    def __init__(self, node_url, module_address=None, client=None):
        self.node_url = node_url
        self.module_address = module_address
        self.client = client if client is not None else RestClient(node_url)

    @staticmethod
    def account_from_key(private_key):
        """Load an Ed25519 account from a hex key, with or without `0x` or the AIP-80 prefix."""
        key = private_key.strip()
        if not key.startswith(AIP80_PREFIX):
            key = AIP80_PREFIX + (key if key.startswith("0x") else f"0x{key}")
        return Account.load_key(key)

    async def close(self):
        await self.client.close()

    # === Reads ===

    async def view(self, function, type_args=(), args=()):
        try:
            raw = await self.client.view(function, list(type_args), list(args))
        except Exception as e:
            raise AdapterFailure(f"View {function} failed: {e}", e) from e
        if isinstance(raw, (bytes, bytearray, str)):
            try:
                raw = json.loads(raw)
            except ValueError as e:
                raise AdapterFailure(f"View {function} returned malformed JSON", e) from e
        if not isinstance(raw, list):
            raise AdapterFailure(f"View {function} returned {type(raw).__name__}, expected a list")
        return raw

    def function_id(self, name):
        if not self.module_address:
            raise AdapterFailure("MODULE_ADDRESS is not set")
        return abi.function_id(self.module_address, name)

    async def view_decoded(self, name, args=()):
        raw = await self.view(self.function_id(name), [], args)
        return abi.decode_view(name, raw)

    # === Writes ===

    async def sequence_number(self, address):
        return await self.client.account_sequence_number(address)

    async def build_signed(self, account, payload, sequence_number):
        entry = to_entry_function(payload)
        return await self.client.create_bcs_signed_transaction(
            account, BcsPayload(entry), sequence_number=sequence_number
        )

    async def submit_signed(self, signed):
        return await self.client.submit_bcs_transaction(signed)

    async def wait_for_inclusion(self, txn_hash):
        try:
            await self.client.wait_for_transaction(txn_hash)
        except Exception as e:
            raise AdapterFailure(f"Transaction {txn_hash} was not committed: {e}", e) from e

    async def submit_local(self, account, payload):
        """Sign `payload` with a locally held key and wait until it is committed."""
        try:
            # 1. sequence context
            seq = await self.sequence_number(account.address())
            # 2. + 3. raw transaction, signed locally
            signed = await self.build_signed(account, payload, seq)
            # 4. submit
            txn_hash = await self.submit_signed(signed)
            logger.info(f"Submitted {abi.function_name(payload.function)} as {txn_hash} (seq {seq})")
            # 5. inclusion
            await self.wait_for_inclusion(txn_hash)
        except Exception as e:
            raise TransactionFailed(payload.function, e) from e
        return txn_hash

    async def publish_package(self, account, package_metadata, modules):
        publisher = PackagePublisher(self.client)
        try:
            txn_hash = await publisher.publish_package(account, package_metadata, modules)
            await self.wait_for_inclusion(txn_hash)
        except Exception as e:
            raise TransactionFailed("publish_package", e) from e
        return txn_hash
