"""
Main entry point for the rotator.

Sub-commands:
- loop: infinite rounds with N concurrent workers
- sweep: run every account once with bounded concurrency
- encrypt-keys: seal the plain key file into an encrypted keystore
"""
import argparse
import asyncio
import getpass
import logging
import signal
import sys
from typing import List, Optional

from rotator.credentials import CredentialCache, KeyStore
from rotator.errors import CredentialError, ModuleExclusionError
from rotator.modules.loader import load_modules
from rotator.orchestrator import (
    BatchRunner,
    DailyActivityLedger,
    ModuleRegistry,
    RoundScheduler,
    WalletSelector,
)
from rotator.orchestrator.round_loop import MAX_WORKERS, MIN_WORKERS
from rotator.services.activity import PortalActivityOracle
from rotator.services.gas import GasGate
from rotator.utils.env import (
    BATCH_DELAY,
    ERROR_DELAY,
    GAS_POLL_INTERVAL,
    KEYS_FILE,
    KEYSTORE_FILE,
    LOG_FILE,
    MAINNET_RPC,
    MODULES_FILE,
    ROUND_DELAY,
)

logger = logging.getLogger(__name__)


def configure_logging(log_file: str = LOG_FILE) -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.FileHandler(log_file), logging.StreamHandler(sys.stdout)],
    )


def _worker_count(value: str) -> int:
    count = int(value)
    if not MIN_WORKERS <= count <= MAX_WORKERS:
        raise argparse.ArgumentTypeError(
            f"threads must be between {MIN_WORKERS} and {MAX_WORKERS}"
        )
    return count


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Multi-account module rotator")
    parser.add_argument("--modules", default=MODULES_FILE, help="Module definitions JSON")
    parser.add_argument("--keys", default=KEYS_FILE, help="Plain key file")
    parser.add_argument("--keystore", default=KEYSTORE_FILE, help="Encrypted keystore file")
    sub = parser.add_subparsers(dest="command", required=True)

    loop = sub.add_parser("loop", help="Run rounds forever")
    loop.add_argument("--threads", type=_worker_count, default=3, help="Workers per round")
    loop.add_argument("--max-gas-gwei", type=float, default=None, help="Pause while gas is above this")
    loop.add_argument("--roster", default=None, help="File of account addresses to use")
    loop.add_argument("--exclude", action="append", default=[], help="Module name to exclude")
    loop.add_argument("--max-rounds", type=int, default=None, help="Stop after N rounds")

    sweep = sub.add_parser("sweep", help="Run every account once")
    sweep.add_argument("--max-concurrent", type=int, default=10)

    sub.add_parser("encrypt-keys", help="Encrypt the plain key file")
    return parser


def read_roster(path: str) -> List[str]:
    with open(path, "r", encoding="utf-8") as f:
        return [line.strip() for line in f if line.strip() and not line.startswith("#")]


def get_config(argv: Optional[List[str]] = None) -> dict:
    """Load configuration from environment and arguments."""
    args = build_parser().parse_args(argv)
    config = vars(args).copy()
    config.update(
        {
            "round_delay": ROUND_DELAY,
            "error_delay": ERROR_DELAY,
            "batch_delay": BATCH_DELAY,
            "gas_rpc_url": MAINNET_RPC,
            "gas_poll_interval": GAS_POLL_INTERVAL,
        }
    )
    return config


async def run_loop(config: dict, credentials: CredentialCache) -> None:
    registry = ModuleRegistry(load_modules(config["modules"]))
    if config["exclude"]:
        registry.set_excluded(config["exclude"])

    ledger = DailyActivityLedger()
    selector = WalletSelector(
        credentials=credentials,
        ledger=ledger,
        oracle=PortalActivityOracle(),
        roster=read_roster(config["roster"]) if config["roster"] else None,
    )
    gate = None
    if config["max_gas_gwei"]:
        gate = GasGate(
            config["max_gas_gwei"],
            rpc_url=config["gas_rpc_url"],
            poll_interval=config["gas_poll_interval"],
        )
        logger.info(f"Gas limit: {config['max_gas_gwei']} Gwei")

    scheduler = RoundScheduler(
        credentials=credentials,
        registry=registry,
        selector=selector,
        worker_count=config["threads"],
        gate=gate,
        ledger=ledger,
        round_delay=config["round_delay"],
        error_delay=config["error_delay"],
    )

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, scheduler.stop)
        except NotImplementedError:
            # Not supported by Windows event loops
            pass

    logger.info("=" * 60)
    logger.info(
        f"Starting round loop: {config['threads']} workers, "
        f"{len(registry.enabled())} of {len(registry)} modules enabled"
    )
    logger.info("=" * 60)
    await scheduler.run(max_rounds=config["max_rounds"])


async def run_sweep(config: dict, credentials: CredentialCache) -> None:
    registry = ModuleRegistry(load_modules(config["modules"]))
    runner = BatchRunner(registry, batch_delay=config["batch_delay"])
    await runner.run_once(credentials.load(), max_concurrent=config["max_concurrent"])


def encrypt_keys(store: KeyStore) -> None:
    password = getpass.getpass("New keystore password: ")
    if password != getpass.getpass("Repeat password: "):
        raise CredentialError("Passwords do not match")
    count = store.encrypt_plain(password)
    logger.info(f"Wrote {count} keys to {store.keystore_path}; delete {store.plain_path} manually")


def main(argv: Optional[List[str]] = None):
    """Rotator entry point."""
    configure_logging()
    try:
        config = get_config(argv)
        store = KeyStore(plain_path=config["keys"], keystore_path=config["keystore"])
        if config["command"] == "encrypt-keys":
            encrypt_keys(store)
            return

        credentials = CredentialCache(store)
        credentials.load()
        if config["command"] == "loop":
            asyncio.run(run_loop(config, credentials))
        else:
            asyncio.run(run_sweep(config, credentials))
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received, shutting down")
    except (CredentialError, ModuleExclusionError) as e:
        logger.error(f"Fatal error: {e}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
