"""
Password entry model and plaintext entry format.

A decrypted entry is the password on the first line followed by optional
metadata lines. Only the username line ('username:' or 'login:') is read.
"""

from passdmenu.errors import MalformedEntry

USERNAME_PREFIXES = ('username:', 'login:')


class Entry:
    """
    A single credential.

    path is the backing encrypted file and is only set by the store
    layer; an entry without a path has not been saved yet.
    """

    def __init__(self, service: str, username: str = None, password: str = None, path=None):
        self.service = service
        self.username = username
        self.password = password
        self.path = path

    @property
    def is_new(self) -> bool:
        return self.path is None

    def __repr__(self):
        return f'Entry(service={self.service!r}, username={self.username!r}, path={self.path!r})'

    def __eq__(self, other):
        if not isinstance(other, Entry):
            return NotImplemented
        return (self.service, self.username, self.password, self.path) == \
            (other.service, other.username, other.password, other.path)


def encode_entry(entry: Entry) -> bytes:
    """Serialize an entry to its plaintext form"""
    return f'{entry.password}\nusername:{entry.username}\n'.encode('utf-8')


def decode_entry(data: bytes):
    """
    Parse decrypted entry content.

    Args:
        data: Decrypted entry bytes

    Returns:
        Tuple (password, username); username is None when the content has
        no username line

    Raises:
        MalformedEntry: If the content is empty or not UTF-8
    """
    try:
        text = data.decode('utf-8')
    except UnicodeDecodeError as e:
        raise MalformedEntry(f'Entry is not valid UTF-8: {e}') from e

    if not text:
        raise MalformedEntry('Entry has no password line')

    lines = text.split('\n')
    password = lines[0].rstrip('\r')
    username = None

    for line in lines[1:]:
        line = line.rstrip('\r')
        stripped = line.lstrip().lower()
        if stripped.startswith(USERNAME_PREFIXES):
            username = line[line.index(':') + 1:].lstrip()
            break

    return password, username
