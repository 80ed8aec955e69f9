# deploy.py
"""
Publish the `players` Move package and initialise the platform.

Usage:
    music-platform-deploy
    music-platform-deploy --package-dir contracts --skip-build
"""

import argparse
import asyncio
import logging
import subprocess
import sys
from pathlib import Path

from .abi import MODULE_NAME
from .chain import ChainClient
from .config import load_settings
from .errors import MusicPlatformError
from .logger import setup_logging
from .payloads import initialize_payload

logger = logging.getLogger(__name__)

PACKAGE_NAME = "music_players"


class DeployError(MusicPlatformError):
    pass


def build_dir(package_dir):
    return Path(package_dir) / "build" / PACKAGE_NAME


def module_path(package_dir):
    return build_dir(package_dir) / "bytecode_modules" / f"{MODULE_NAME}.mv"


def metadata_path(package_dir):
    return build_dir(package_dir) / "package-metadata.bcs"


def build_contract(package_dir, named_address):
    logger.info(f"Building Move package in {package_dir}")
    cmd = [
        "aptos", "move", "compile",
        "--package-dir", str(package_dir),
        "--named-addresses", f"{PACKAGE_NAME}={named_address}",
        "--save-metadata",
    ]
    try:
        subprocess.run(cmd, check=True)
    except (OSError, subprocess.CalledProcessError) as e:
        raise DeployError(f"aptos move compile failed: {e}") from e
    logger.info("Contract built successfully")


def load_artifacts(package_dir):
    mv, meta = module_path(package_dir), metadata_path(package_dir)
    for p in (mv, meta):
        if not p.exists():
            raise DeployError(f"Missing build artifact {p}")
    return meta.read_bytes(), [mv.read_bytes()]


async def deploy(chain, private_key, package_dir, skip_build=False):
    """Publish the package from the account behind `private_key`, then call `initialize`.

    Returns the module address (the publishing account).
    """
    if not private_key:
        raise DeployError("Please set PRIVATE_KEY in your .env file")

    account = chain.account_from_key(private_key)
    address = str(account.address())
    logger.info(f"Deploying from account: {address}")

    if not skip_build or not module_path(package_dir).exists():
        build_contract(package_dir, address)
    metadata, modules = load_artifacts(package_dir)

    txn_hash = await chain.publish_package(account, metadata, modules)
    logger.info(f"Package published: {txn_hash}")

    logger.info("Initializing music platform...")
    txn_hash = await chain.submit_local(account, initialize_payload(address))
    logger.info(f"Platform initialized: {txn_hash}")
    return address


def parse_args(argv=None):
    settings = load_settings()
    parser = argparse.ArgumentParser(description="Deploy the music platform Move module")
    parser.add_argument("--node-url", default=settings.node_url)
    parser.add_argument("--package-dir", default=settings.contracts_dir)
    parser.add_argument("--skip-build", action="store_true", help="reuse an existing build if present")
    return parser.parse_args(argv), settings


async def _main(args, settings):
    chain = ChainClient(args.node_url)
    try:
        address = await deploy(chain, settings.private_key, args.package_dir, args.skip_build)
    finally:
        await chain.close()
    print(f"Music platform is ready at address: {address}")
    print("Update your .env file with:")
    print(f"MODULE_ADDRESS={address}")


def main(argv=None):
    args, settings = parse_args(argv)
    setup_logging(settings.log_level)
    try:
        asyncio.run(_main(args, settings))
    except MusicPlatformError as e:
        logger.error(f"Deployment failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
