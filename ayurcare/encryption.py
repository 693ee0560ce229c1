"""
This module handles the encryption key for the AyurCare record store.

It uses the `cryptography` library (specifically Fernet symmetric encryption) so that the
patient records at rest (`records.json`) are never stored in plain text. The module is
responsible for:
- Generating a secret key if one does not already exist.
- Storing and loading the key from the configured key file (`secret.key` by default).
- Building the `Fernet` encryptor handed to the `RecordService`.

Security Note: The key file is critical. It must be kept secure and should not be
committed to version control. Losing it makes the existing record store unreadable.
"""
# ayurcare/encryption.py

import logging

from cryptography.fernet import Fernet

logger = logging.getLogger(__name__)

DEFAULT_KEY_FILE = "secret.key"


def write_key(key_file: str = DEFAULT_KEY_FILE) -> bytes:
    """Generates a new Fernet key and saves it to `key_file`.

    Returns:
        bytes: The new key.
    """
    key = Fernet.generate_key()
    with open(key_file, "wb") as f:
        f.write(key)
    return key


def load_key(key_file: str = DEFAULT_KEY_FILE) -> bytes:
    """Loads the Fernet key from `key_file`.

    Raises:
        FileNotFoundError: If the key file does not exist.
    """
    with open(key_file, "rb") as f:
        return f.read()


def load_or_create_encryptor(key_file: str = DEFAULT_KEY_FILE) -> Fernet:
    """Returns a Fernet encryptor, generating the key on first run."""
    try:
        key = load_key(key_file)
    except FileNotFoundError:
        logger.warning("Encryption key %s not found. Generating a new one.", key_file)
        key = write_key(key_file)
    return Fernet(key)


if __name__ == '__main__':
    load_or_create_encryptor()
    print(f"Encryption key is available in '{DEFAULT_KEY_FILE}'.")
