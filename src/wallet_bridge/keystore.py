"""Private key provisioning from a single-line key file."""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path

from eth_account import Account

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

_PRIVATE_KEY_PATTERN = re.compile(r"^0x[0-9a-fA-F]{64}$")
KEY_FILE_MODE = 0o600


def is_valid_private_key(value: str) -> bool:
    return bool(_PRIVATE_KEY_PATTERN.match(value))


def ensure_private_key(path: str | os.PathLike[str]) -> str:
    """Return the key stored at ``path``, generating and saving a new one if absent.

    The file holds a single ``0x``-prefixed 64 hex digit key. New files are
    created with owner-only permissions. Any other content is a fatal
    configuration error.
    """
    resolved = Path(path).resolve()

    if resolved.exists():
        private_key = resolved.read_text(encoding="utf-8").strip()
        if not is_valid_private_key(private_key):
            raise ConfigurationError(
                f"Invalid private key in {resolved}", field="private_key_file", value=str(resolved)
            )
        return private_key

    account = Account.create()
    private_key = account.key.to_0x_hex()

    fd = os.open(resolved, os.O_WRONLY | os.O_CREAT | os.O_EXCL, KEY_FILE_MODE)
    with os.fdopen(fd, "w", encoding="utf-8") as handle:
        handle.write(private_key)

    logger.info("Created new wallet %s and saved private key to %s", account.address, resolved)
    return private_key
