"""
Password store: listing, decrypting and saving entries.

Combines the store layout, the entry format and the encryption engine.
"""

import os

from passdmenu.crypto import GpgEngine
from passdmenu.datastore import (
    resolve_store_path, read_gpg_id, discover_entries, locate_entry,
    validate_name, service_paths,
    GPG_EXTENSION, LOCATION_DIRECTORY, LOCATION_FILE
)
from passdmenu.entry import Entry, encode_entry, decode_entry
from passdmenu.errors import AmbiguousEdit
from passdmenu.interaction.notifications import NullNotifier

APP_NAME = 'passDmenu'


class PasswordStore:
    """
    Entries of a single store root, encrypted for one recipient.

    engine is anything with encrypt(plaintext, path) and decrypt(path);
    notifier receives one event per completed filesystem step of save().
    """

    def __init__(self, store_path: str, engine, notifier=None):
        self.store_path = store_path
        self.engine = engine
        self.notifier = notifier if notifier is not None else NullNotifier()

    @classmethod
    def open(cls, store_path: str = None, notifier=None, gnupghome: str = None):
        """
        Open the configured store and resolve its recipient key.

        Raises:
            ConfigError: If there is no store root or no .gpg-id
            EngineUnavailable: If gpg cannot be run
            NoSuchKey: If the .gpg-id recipient has no key
        """
        store_path = resolve_store_path(store_path)
        engine = GpgEngine(read_gpg_id(store_path), gnupghome=gnupghome)
        return cls(store_path, engine, notifier)

    def list_groups(self) -> list:
        return discover_entries(self.store_path)

    def decrypt(self, entry: Entry) -> Entry:
        """
        Fill in the password (and username, when the content has one) of
        an existing entry.
        """
        if entry.is_new:
            raise ValueError(f'Entry for {entry.service} has not been saved yet')
        password, username = decode_entry(self.engine.decrypt(entry.path))
        entry.password = password
        if username is not None:
            entry.username = username
        return entry

    def _notify(self, body: str):
        self.notifier.notify(APP_NAME, body)

    def _encrypt(self, entry: Entry, path: str):
        self.engine.encrypt(encode_entry(entry), path)
        entry.path = path

    def save(self, entry: Entry) -> str:
        """
        Encrypt an entry into the store.

        An entry listed from a service directory is written back to its own
        file. Otherwise a service directory gets the entry as
        '<username>.gpg' and a new service becomes a flat '<service>.gpg'
        file. A flat file already holding the same user is overwritten; one
        holding another user is moved into a new service directory first,
        then the new entry is written next to it.

        Returns:
            Path of the file written

        Raises:
            ValueError: If the service or username is not a valid name
            CryptoError: If encryption or decryption of the existing file fails
            IOError: If a filesystem step fails
        """
        for name in (entry.service, entry.username):
            if not validate_name(name):
                raise ValueError(f'Invalid service or user name: {name!r}')

        service_dir, _ = service_paths(self.store_path, entry.service)
        if entry.path is not None and os.path.dirname(entry.path) == service_dir and os.path.isfile(entry.path):
            # A user file keeps its name even when its content names another login
            self._encrypt(entry, entry.path)
            self._notify(f'Modified user file: {entry.path}')
            return entry.path

        path, state = locate_entry(self.store_path, entry.service, entry.username)

        if state == LOCATION_DIRECTORY:
            existed = os.path.exists(path)
            self._encrypt(entry, path)
            if existed:
                self._notify(f'Modified user file: {path}')
            else:
                self._notify(f'Created directory service: {path}')
            return path

        if state != LOCATION_FILE:
            self._encrypt(entry, path)
            self._notify(f'Created service file: {path}')
            return path

        stem = os.path.basename(path)[:-len(GPG_EXTENSION)]
        existing = self.decrypt(Entry(entry.service, stem, path=path))
        old_username = existing.username if validate_name(existing.username) else stem
        if old_username == entry.username:
            self._encrypt(entry, path)
            self._notify(f'Modified service file: {path}')
            return path

        return self._migrate(entry, old_username)

    def _migrate(self, entry: Entry, old_username: str) -> str:
        # The existing file is moved as is; it stays at moved_path if the
        # new entry cannot be encrypted.
        service_dir, service_file = service_paths(self.store_path, entry.service)
        os.mkdir(service_dir)
        self._notify(f'Created folder: {service_dir}')

        moved_path = os.path.join(service_dir, old_username + GPG_EXTENSION)
        try:
            os.rename(service_file, moved_path)
        except OSError:
            os.rmdir(service_dir)
            raise
        self._notify(f'Moved service file to: {moved_path}')

        new_path = os.path.join(service_dir, entry.username + GPG_EXTENSION)
        self._encrypt(entry, new_path)
        self._notify(f'Created user file: {new_path}')
        return new_path


def single_entry(group: list) -> Entry:
    """
    Return the only entry of a service group.

    Raises:
        AmbiguousEdit: If the service has more than one user
    """
    if len(group) != 1:
        raise AmbiguousEdit(f'Cannot edit service directory {group[0].service}: it has {len(group)} users')
    return group[0]
