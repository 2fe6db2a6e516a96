"""
Shared pytest fixtures for passdmenu tests.
"""

import os
import shutil
import tempfile
import pytest

from passdmenu.errors import CryptoError
from passdmenu.store import PasswordStore

FAKE_HEADER = b'FAKE-PGP\n'


class FakeEngine:
    """
    Stand-in for GpgEngine that stores plaintext behind a marker header.

    fail_on_encrypt makes encryption to that path raise CryptoError.
    """

    def __init__(self):
        self.encrypted = []
        self.fail_on_encrypt = None

    def encrypt(self, plaintext: bytes, destination):
        if self.fail_on_encrypt is not None and os.fspath(destination) == os.fspath(self.fail_on_encrypt):
            raise CryptoError('simulated failure', operation='encrypt', path=destination)
        with open(destination, 'wb') as f:
            f.write(FAKE_HEADER + plaintext)
        self.encrypted.append(os.fspath(destination))

    def decrypt(self, source) -> bytes:
        with open(source, 'rb') as f:
            data = f.read()
        if not data.startswith(FAKE_HEADER):
            raise CryptoError('not a fake ciphertext', operation='decrypt', path=source)
        return data[len(FAKE_HEADER):]


class RecordingNotifier:
    """Notifier that remembers what it was asked to show"""

    class Handle:
        def __init__(self, notifier, index):
            self.notifier = notifier
            self.index = index

        def dismiss(self):
            self.notifier.dismissed.append(self.index)

    def __init__(self):
        self.messages = []
        self.dismissed = []

    def notify(self, title, body, timeout_ms=5000):
        self.messages.append((title, body))
        return RecordingNotifier.Handle(self, len(self.messages) - 1)

    def close(self, notification_id):
        pass


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files"""
    temp_path = tempfile.mkdtemp()
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def store_root(temp_dir):
    """Return an empty store root with a .gpg-id"""
    root = os.path.join(temp_dir, 'store')
    os.makedirs(root)
    with open(os.path.join(root, '.gpg-id'), 'w') as f:
        f.write('test@example.com\n')
    return root


@pytest.fixture
def fake_engine():
    return FakeEngine()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def password_store(store_root, fake_engine, notifier):
    """PasswordStore over an empty root using the fake engine"""
    return PasswordStore(store_root, fake_engine, notifier)


@pytest.fixture
def write_entry(store_root, fake_engine):
    """Return a helper writing '<relative path>' with the given plaintext"""
    def _write(relative_path: str, content: str):
        path = os.path.join(store_root, relative_path)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        fake_engine.encrypt(content.encode('utf-8'), path)
        return path
    return _write


@pytest.fixture(scope='session')
def gpg_home():
    """
    Create a throwaway GnuPG home with one unprotected key for
    gpg-test@example.com. Skipped when gpg is not installed.
    """
    if shutil.which('gpg') is None:
        pytest.skip('gpg is not installed')
    gnupg = pytest.importorskip('gnupg')

    home = tempfile.mkdtemp(prefix='gpg')
    os.chmod(home, 0o700)
    gpg = gnupg.GPG(gnupghome=home)
    key_input = gpg.gen_key_input(
        key_type='RSA',
        key_length=2048,
        name_real='Test User',
        name_email='gpg-test@example.com',
        no_protection=True,
    )
    key = gpg.gen_key(key_input)
    if not key.fingerprint:
        shutil.rmtree(home, ignore_errors=True)
        pytest.skip(f'Could not generate a test key: {key.stderr}')

    yield home
    shutil.rmtree(home, ignore_errors=True)


def read_plain(path) -> bytes:
    """Read the plaintext behind a FakeEngine ciphertext"""
    return FakeEngine().decrypt(path)

