"""
Credential store and process-lifetime cache.

Keys live either in a plain text file (one hex key per line) or in an
encrypted keystore file holding a JSON list of Web3 Secret Storage
documents, all sealed with the same password.
"""
import getpass
import json
import logging
import os
import re
from typing import Callable, Dict, List, Optional

from eth_account import Account

from protocol.models import Credential
from rotator.errors import CredentialError, WrongSecretError
from rotator.utils.env import KEYS_FILE, KEYSTORE_FILE

logger = logging.getLogger(__name__)

_KEY_RE = re.compile(r"^0x[a-fA-F0-9]{64}$")


class KeyStore:
    """File-backed credential source."""

    def __init__(self, plain_path: str = KEYS_FILE, keystore_path: str = KEYSTORE_FILE):
        self.plain_path = plain_path
        self.keystore_path = keystore_path

    def has_secret_store(self) -> bool:
        return os.path.isfile(self.keystore_path)

    def has_plain_store(self) -> bool:
        return os.path.isfile(self.plain_path)

    def load_plain(self) -> List[str]:
        """
        Read private keys from the plain key file.

        Blank lines and lines starting with '#' are ignored; a missing 0x
        prefix is added; lines that are not 32-byte hex keys are dropped.

        Raises:
            CredentialError: If the file is missing or holds no valid key
        """
        if not self.has_plain_store():
            raise CredentialError(f"Key file {self.plain_path} not found")

        keys: List[str] = []
        with open(self.plain_path, "r", encoding="utf-8") as f:
            for line in f:
                value = line.strip()
                if not value or value.startswith("#"):
                    continue
                if not value.startswith("0x"):
                    value = "0x" + value
                if _KEY_RE.match(value):
                    keys.append(value)
                else:
                    logger.warning(f"Ignoring malformed line in {self.plain_path}")

        if not keys:
            raise CredentialError(f"No valid private keys found in {self.plain_path}")
        return keys

    def load_secrets(self, password: str) -> List[str]:
        """
        Decrypt every keystore document with password.

        Raises:
            WrongSecretError: If the password does not match
            CredentialError: If the keystore file is unreadable or empty
        """
        if not self.has_secret_store():
            raise CredentialError(f"Keystore {self.keystore_path} not found")
        try:
            with open(self.keystore_path, "r", encoding="utf-8") as f:
                documents = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise CredentialError(f"Cannot read keystore {self.keystore_path}: {e}") from e

        if not isinstance(documents, list) or not documents:
            raise CredentialError(f"Keystore {self.keystore_path} holds no keys")

        keys = []
        for document in documents:
            try:
                raw = Account.decrypt(document, password)
            except ValueError as e:
                raise WrongSecretError("WRONG_SECRET") from e
            keys.append("0x" + bytes(raw).hex())
        return keys

    def encrypt_plain(self, password: str) -> int:
        """
        Seal the plain key file into the keystore file.

        Returns:
            Number of keys written
        """
        keys = self.load_plain()
        documents = [Account.encrypt(key, password) for key in keys]
        with open(self.keystore_path, "w", encoding="utf-8") as f:
            json.dump(documents, f)
        logger.info(f"Encrypted {len(keys)} keys into {self.keystore_path}")
        return len(keys)


def prompt_password(message: str = "Keystore password: ") -> str:
    return getpass.getpass(message)


class CredentialCache:
    """
    Loads credentials once and serves them for the process lifetime.

    load() must run before any time-sensitive wait so that an interactive
    unlock happens up front.
    """

    def __init__(
        self,
        source: Optional[KeyStore] = None,
        prompt: Callable[[], str] = prompt_password,
    ):
        self.source = source or KeyStore()
        self.prompt = prompt
        self._credentials: Optional[List[Credential]] = None
        self._by_account: Dict[str, Credential] = {}

    @property
    def loaded(self) -> bool:
        return self._credentials is not None

    def load(self) -> List[Credential]:
        """
        Return all credentials, loading them on first call.

        Raises:
            CredentialError: If no store exists or it cannot be read
        """
        if self._credentials is not None:
            return self._credentials

        if self.source.has_secret_store():
            logger.info("Loading encrypted keys...")
            keys = self._unlock()
        elif self.source.has_plain_store():
            logger.info(f"Loading plain keys from {self.source.plain_path}...")
            keys = self.source.load_plain()
        else:
            raise CredentialError("No keys found: create a key file or an encrypted keystore")

        credentials = [Credential.from_private_key(key) for key in keys]
        self._credentials = credentials
        self._by_account = {c.account_id.lower(): c for c in credentials}
        logger.info(f"Loaded and cached {len(credentials)} credentials")
        return credentials

    def _unlock(self) -> List[str]:
        while True:
            try:
                return self.source.load_secrets(self.prompt())
            except WrongSecretError:
                logger.warning("Wrong password, try again")

    def by_account(self, account_id: str) -> Optional[Credential]:
        """Look up a loaded credential by account id (case-insensitive)."""
        self.load()
        return self._by_account.get(account_id.lower())
