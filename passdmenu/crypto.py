"""
Cryptographic operations for passdmenu.

Wraps the OpenPGP backend (gpg through python-gnupg) used to encrypt and
decrypt store entries, and generates random passwords.
"""

import os
import tempfile

import gnupg
from Crypto.Random import random as crypto_random

from passdmenu.errors import CryptoError, EngineUnavailable, NoSuchKey

# Constants
GENERATED_PASSWORD_LENGTH = 10
DEFAULT_GPG_BINARY = 'gpg'

# Never encrypt to default recipients from gpg.conf, never compress
GPG_ENCRYPT_ARGS = ['--no-encrypt-to', '--compress-algo', 'none']

# Character sets offered as password suggestions
DEFAULT_CHARSETS = ('!-~', '0-9A-Za-z!?+_()')


def uid_email(uid: str) -> str:
    """
    Extract the e-mail address from a key uid.

    'Alice <alice@example.com>' gives 'alice@example.com'; a uid without
    angle brackets is returned stripped.
    """
    start = uid.rfind('<')
    end = uid.rfind('>')
    if start != -1 and end > start:
        return uid[start + 1:end].strip()
    return uid.strip()


def key_matches(key: dict, recipient: str) -> bool:
    """
    Check whether a keyring entry matches the recipient identifier.

    The recipient matches on the e-mail of any uid, or on the key id or
    fingerprint (long or short form, case-insensitive).
    """
    wanted = recipient.strip()
    for uid in key.get('uids', []):
        if uid_email(uid) == wanted:
            return True

    wanted_hex = wanted.upper()
    if wanted_hex.startswith('0X'):
        wanted_hex = wanted_hex[2:]
    if len(wanted_hex) < 8:
        return False
    fingerprint = (key.get('fingerprint') or '').upper()
    keyid = (key.get('keyid') or '').upper()
    return fingerprint.endswith(wanted_hex) or keyid.endswith(wanted_hex)


class GpgEngine:
    """
    OpenPGP engine bound to a single recipient key.

    The key is resolved once at construction and reused for every
    encryption of the run.
    """

    def __init__(self, recipient: str, gnupghome: str = None, gpgbinary: str = DEFAULT_GPG_BINARY):
        if not recipient or not recipient.strip():
            raise NoSuchKey('No recipient configured')
        self.recipient = recipient.strip()

        try:
            self.gpg = gnupg.GPG(gpgbinary=gpgbinary, gnupghome=gnupghome)
        except (OSError, ValueError) as e:
            raise EngineUnavailable(f'Could not start {gpgbinary}: {e}') from e
        self.gpg.encoding = 'utf-8'

        self.fingerprint = self._resolve_key()

    def _resolve_key(self) -> str:
        # Keyring order says nothing about preference: take the first match
        for key in self.gpg.list_keys():
            if key_matches(key, self.recipient):
                return key['fingerprint']
        raise NoSuchKey(f"Couldn't find a key for {self.recipient}")

    def encrypt(self, plaintext: bytes, destination):
        """
        Encrypt plaintext for the recipient and write it to destination.

        The ciphertext goes to a temporary file next to the destination
        which then replaces it, so an interrupted write never leaves a
        truncated entry behind.

        Raises:
            CryptoError: If gpg refuses to encrypt
            IOError: If the ciphertext cannot be written
        """
        result = self.gpg.encrypt(
            plaintext,
            [self.fingerprint],
            always_trust=True,
            armor=False,
            extra_args=GPG_ENCRYPT_ARGS,
        )
        if not result.ok:
            raise CryptoError(result.status or 'gpg error', operation='encrypt', path=destination)

        write_atomic(destination, result.data)

    def decrypt(self, source) -> bytes:
        """
        Decrypt the file at source.

        Raises:
            FileNotFoundError: If the file does not exist
            CryptoError: If gpg cannot decrypt it
        """
        with open(source, 'rb') as f:
            result = self.gpg.decrypt_file(f)
        if not result.ok:
            raise CryptoError(result.status or 'gpg error', operation='decrypt', path=source)
        return result.data


def write_atomic(destination, data: bytes):
    """Write data to a temporary file in the same directory, then rename it over destination."""
    directory = os.path.dirname(os.fspath(destination)) or '.'
    fd, tmp_path = tempfile.mkstemp(prefix='.', suffix='.tmp', dir=directory)
    try:
        with os.fdopen(fd, 'wb') as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, destination)
    except BaseException:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise


def expand_charset(spec: str) -> str:
    """
    Expand a character set spec into the characters it denotes.

    'a-c' expands to 'abc'; a '-' that is not between two characters is
    taken literally.

    Raises:
        ValueError: If a range is reversed or the spec is empty
    """
    chars = []
    i = 0
    while i < len(spec):
        if i + 2 < len(spec) and spec[i + 1] == '-':
            begin, end = ord(spec[i]), ord(spec[i + 2])
            if begin > end:
                raise ValueError(f'Begin of range bigger than end: {spec[i:i + 3]}')
            chars.extend(chr(c) for c in range(begin, end + 1))
            i += 3
        else:
            chars.append(spec[i])
            i += 1
    if not chars:
        raise ValueError('Empty character set')
    return ''.join(chars)


class PasswordGenerator:
    """Generates passwords drawn uniformly from a character set spec"""

    def __init__(self, spec: str):
        self.spec = spec
        self.alphabet = expand_charset(spec)

    def __call__(self, length: int = GENERATED_PASSWORD_LENGTH) -> str:
        return ''.join(crypto_random.choice(self.alphabet) for _ in range(length))


def password_suggestions(length: int = GENERATED_PASSWORD_LENGTH, charsets=DEFAULT_CHARSETS) -> list:
    """Return one generated password per character set"""
    return [PasswordGenerator(spec)(length) for spec in charsets]

