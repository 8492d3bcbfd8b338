import logging
import platform
import stat
from pathlib import Path
import paramiko

from .exceptions import AuthenticationFailed, KeyPermissionError, KeyTypeNotSupported

logger = logging.getLogger(__name__)

PRIVATE_KEY_MODE = 0o600


def check_key_permissions(key_path: str) -> None:
    """
    Makes sure the private key is only accessible by its owner, fixing its mode when possible.

    Skipped on Windows, where file modes do not express who can read the key.

    Args:
        key_path (str): Path to the private key.

    Raises:
        KeyPermissionError: If the key is missing, cannot be inspected, or its
            permissions are too open and could not be fixed.
    """
    if platform.system() == "Windows":
        return

    path = Path(key_path).expanduser()
    try:
        mode = stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError as e:
        raise KeyPermissionError(f"Private key not found: {path}", key_path= key_path) from e
    except OSError as e:
        raise KeyPermissionError(f"Unable to inspect private key {path}: {e}", key_path= key_path) from e

    if not mode & 0o077:
        return

    logger.info(f"Permissions of private key {path} are too open ({mode:o}), fixing to {PRIVATE_KEY_MODE:o}")
    try:
        path.chmod(PRIVATE_KEY_MODE)
        mode = stat.S_IMODE(path.stat().st_mode)
    except OSError as e:
        raise KeyPermissionError(
            f"Permissions of private key {path} are too open and could not be fixed: {e}",
            key_path= key_path,
        ) from e

    if mode & 0o077:
        raise KeyPermissionError(
            f"Permissions of private key {path} are too open ({mode:o}); "
            f"it must only be readable by its owner.",
            key_path= key_path,
        )


def load_private_key(key_path: str) -> paramiko.PKey:
    """
    Loads the private key, letting paramiko detect its type.

    Raises:
        paramiko.pkey.UnknownKeyType: If paramiko does not support the key type.
        AuthenticationFailed: If the key is encrypted.
        KeyTypeNotSupported: If the file is not a private key paramiko can parse.
    """
    path = Path(key_path).expanduser()
    try:
        return paramiko.PKey.from_path(path)
    except TypeError as e:
        # raised by the key parser when a passphrase would be needed
        raise AuthenticationFailed(f"Private key {path} is encrypted: {e}") from e
    except ValueError as e:
        raise KeyTypeNotSupported(f"Unable to load private key {path}: {e}") from e
