"""
Environment-backed settings.

Values are read once at import time after load_dotenv(); command line
options in rotator.main override the scheduler-related ones.
"""
import os

from dotenv import load_dotenv

load_dotenv()


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return float(raw)


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


# Credential store
KEYS_FILE = os.getenv("KEYS_FILE", "keys.txt")
KEYSTORE_FILE = os.getenv("KEYSTORE_FILE", "keys.keystore.json")

# Modules and network
MODULES_FILE = os.getenv("MODULES_FILE", "modules.json")
PROXIES_FILE = os.getenv("PROXIES_FILE", "proxies.txt")
SONEIUM_CHAIN_ID = 1868
MAINNET_CHAIN_ID = 1
SONEIUM_RPC = os.getenv("SONEIUM_RPC", "https://rpc.soneium.org")
MAINNET_RPC = os.getenv("MAINNET_RPC", "https://ethereum.rpc.thirdweb.com")
SONEIUM_EXPLORER = os.getenv("SONEIUM_EXPLORER", "https://soneium.blockscout.com")

# Admission gate
GAS_POLL_INTERVAL = _get_float("GAS_POLL_INTERVAL", 60.0)

# Activity oracle
ACTIVITY_API_URL = os.getenv("ACTIVITY_API_URL", "https://portal.soneium.org/api")
ACTIVITY_POINTS_LIMIT = _get_int("ACTIVITY_POINTS_LIMIT", 81)
ACTIVITY_SEASON = _get_int("ACTIVITY_SEASON", 6)

# Pacing
ROUND_DELAY = _get_float("ROUND_DELAY", 5.0)
ERROR_DELAY = _get_float("ERROR_DELAY", 1.0)
BATCH_DELAY = _get_float("BATCH_DELAY", 2.0)
RATE_LIMIT_WARMUP = _get_float("RATE_LIMIT_WARMUP", 2.0)

LOG_FILE = os.getenv("LOG_FILE", "rotator.log")
