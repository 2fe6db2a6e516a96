"""
Store layout operations for passdmenu.

Maps the store root directory to services and users. A service is either a
single '<service>.gpg' file (one user) or a '<service>/' directory holding
one '<username>.gpg' file per user.
"""

import os

from passdmenu.entry import Entry
from passdmenu.errors import ConfigError

GPG_EXTENSION = '.gpg'
GPG_ID_FILE = '.gpg-id'
DEFAULT_STORE_DIR = '.password-store'

LOCATION_ABSENT = 'absent'
LOCATION_FILE = 'file'
LOCATION_DIRECTORY = 'directory'


def resolve_store_path(configured: str = None, environ=None) -> str:
    """
    Find the store root directory.

    Uses the configured path if given, then $PASSWORD_STORE_DIR, then
    $HOME/.password-store.

    Raises:
        ConfigError: If none of them is available
    """
    if environ is None:
        environ = os.environ
    if configured:
        return configured
    if environ.get('PASSWORD_STORE_DIR'):
        return environ['PASSWORD_STORE_DIR']
    if environ.get('HOME'):
        return os.path.join(environ['HOME'], DEFAULT_STORE_DIR)
    raise ConfigError("Couldn't find password store path")


def read_gpg_id(store_path: str) -> str:
    """
    Read the recipient key identifier from the store's .gpg-id file.

    Raises:
        ConfigError: If the file is missing or empty
    """
    gpg_id_path = os.path.join(store_path, GPG_ID_FILE)
    try:
        with open(gpg_id_path, 'r', encoding='utf-8') as f:
            for line in f:
                if line.strip():
                    return line.strip()
    except FileNotFoundError as e:
        raise ConfigError(f'Missing {gpg_id_path}') from e
    raise ConfigError(f'{gpg_id_path} is empty')


def validate_name(name: str) -> bool:
    """
    Validate that a service or user name maps to a single path component.

    Prevents directory traversal and names that would collide with store
    metadata ('.gpg-id', '.git').
    """
    if not name:
        return False
    if '/' in name or '\0' in name:
        return False
    if name.startswith('.'):
        return False
    return True


def _is_entry_file(path: str) -> bool:
    return os.path.isfile(path) and path.endswith(GPG_EXTENSION)


def _stem(filename: str) -> str:
    return filename[:-len(GPG_EXTENSION)]


def discover_entries(store_path: str) -> list:
    """
    List the store entries grouped by service.

    Every '.gpg' file directly under the root is a group of its own
    (service and username are the file stem). Every directory is a group
    of its '.gpg' children; directories without any are left out. Names
    starting with '.' ('.git', '.gpg-id' and other hidden files) are
    never read, matching what validate_name accepts.

    Args:
        store_path: Store root directory

    Returns:
        List of non-empty lists of Entry, sorted by service then username

    Raises:
        ConfigError: If the store root does not exist
    """
    if not os.path.isdir(store_path):
        raise ConfigError(f'Password store not found at {store_path}')

    groups = []
    for name in sorted(os.listdir(store_path)):
        if name.startswith('.'):
            continue
        path = os.path.join(store_path, name)
        if os.path.isdir(path):
            users = [
                Entry(name, _stem(child), path=os.path.join(path, child))
                for child in sorted(os.listdir(path))
                if not child.startswith('.') and _is_entry_file(os.path.join(path, child))
            ]
            if users:
                groups.append(users)
        elif _is_entry_file(path):
            stem = _stem(name)
            groups.append([Entry(stem, stem, path=path)])
    return groups


def service_paths(store_path: str, service: str):
    """Return the (directory, flat file) paths a service may occupy"""
    service_dir = os.path.join(store_path, service)
    return service_dir, service_dir + GPG_EXTENSION


def locate_entry(store_path: str, service: str, username: str):
    """
    Work out where an entry for service/username lives or would live.

    Only checks for existence; nothing is read or created.

    Returns:
        Tuple (path, state). state is LOCATION_DIRECTORY when the service
        is a directory (path is the user file inside it), LOCATION_FILE
        when it is a flat file (path is that file) and LOCATION_ABSENT
        otherwise (path is the flat file a new service would use).
    """
    service_dir, service_file = service_paths(store_path, service)
    if os.path.isdir(service_dir):
        return os.path.join(service_dir, username + GPG_EXTENSION), LOCATION_DIRECTORY
    if os.path.exists(service_file):
        return service_file, LOCATION_FILE
    return service_file, LOCATION_ABSENT
