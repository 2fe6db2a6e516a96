"""
Tests for store layout operations module.
"""

import os
import pytest

from passdmenu.datastore import (
    resolve_store_path, read_gpg_id, validate_name, discover_entries, locate_entry,
    LOCATION_ABSENT, LOCATION_FILE, LOCATION_DIRECTORY
)
from passdmenu.errors import ConfigError


def touch(path):
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, 'wb') as f:
        f.write(b'x')


class TestResolveStorePath:
    """Test resolve_store_path function"""

    def test_configured_path_wins(self):
        env = {'PASSWORD_STORE_DIR': '/env/store', 'HOME': '/home/u'}
        assert resolve_store_path('/explicit', env) == '/explicit'

    def test_environment_variable(self):
        env = {'PASSWORD_STORE_DIR': '/env/store', 'HOME': '/home/u'}
        assert resolve_store_path(None, env) == '/env/store'

    def test_home_default(self):
        assert resolve_store_path(None, {'HOME': '/home/u'}) == os.path.join('/home/u', '.password-store')

    def test_no_store(self):
        with pytest.raises(ConfigError):
            resolve_store_path(None, {})


class TestReadGpgId:
    """Test read_gpg_id function"""

    def test_read(self, store_root):
        assert read_gpg_id(store_root) == 'test@example.com'

    def test_skips_blank_lines(self, temp_dir):
        with open(os.path.join(temp_dir, '.gpg-id'), 'w') as f:
            f.write('\n  alice@example.com  \nbob@example.com\n')
        assert read_gpg_id(temp_dir) == 'alice@example.com'

    def test_missing(self, temp_dir):
        with pytest.raises(ConfigError, match='Missing'):
            read_gpg_id(temp_dir)

    def test_empty(self, temp_dir):
        open(os.path.join(temp_dir, '.gpg-id'), 'w').close()
        with pytest.raises(ConfigError, match='empty'):
            read_gpg_id(temp_dir)


class TestValidateName:
    """Test validate_name function"""

    def test_valid_names(self):
        assert validate_name('Bank') is True
        assert validate_name('alice@example.com') is True
        assert validate_name('my service') is True

    def test_invalid_names(self):
        assert validate_name('') is False
        assert validate_name(None) is False
        assert validate_name('.') is False
        assert validate_name('..') is False
        assert validate_name('.git') is False
        assert validate_name('a/b') is False
        assert validate_name('a\0b') is False


class TestDiscoverEntries:
    """Test discover_entries function"""

    def test_empty_store(self, store_root):
        """Test that an empty root gives no groups"""
        assert discover_entries(store_root) == []

    def test_flat_service(self, store_root):
        touch(os.path.join(store_root, 'Bank.gpg'))
        groups = discover_entries(store_root)
        assert len(groups) == 1
        (entry,) = groups[0]
        assert (entry.service, entry.username) == ('Bank', 'Bank')
        assert entry.path == os.path.join(store_root, 'Bank.gpg')
        assert entry.password is None

    def test_directory_service(self, store_root):
        touch(os.path.join(store_root, 'Email', 'bob.gpg'))
        touch(os.path.join(store_root, 'Email', 'alice.gpg'))
        groups = discover_entries(store_root)
        assert len(groups) == 1
        assert [(e.service, e.username) for e in groups[0]] == [('Email', 'alice'), ('Email', 'bob')]

    def test_ignored_paths(self, store_root):
        """Test that .git, non-gpg files and empty directories are left out"""
        touch(os.path.join(store_root, '.git', 'objects.gpg'))
        touch(os.path.join(store_root, 'notes.txt'))
        touch(os.path.join(store_root, 'Empty', 'readme.txt'))
        os.makedirs(os.path.join(store_root, 'Nested', 'deeper'))
        touch(os.path.join(store_root, 'Nested', 'deeper', 'x.gpg'))
        assert discover_entries(store_root) == []

    def test_hidden_names_skipped(self, store_root):
        """Test that dot-prefixed services and users are not listed"""
        touch(os.path.join(store_root, '.config', 'x.gpg'))
        touch(os.path.join(store_root, '.hidden.gpg'))
        touch(os.path.join(store_root, 'Email', '.alice.gpg.tmp'))
        touch(os.path.join(store_root, 'Email', '.bob.gpg'))
        touch(os.path.join(store_root, 'Email', 'carol.gpg'))

        groups = discover_entries(store_root)

        assert [[(e.service, e.username) for e in group] for group in groups] == [[('Email', 'carol')]]
        for group in groups:
            for entry in group:
                assert validate_name(entry.service) and validate_name(entry.username)

    def test_exhaustive_and_exclusive(self, store_root):
        """Test that every .gpg file outside .git belongs to exactly one group"""
        files = ['A.gpg', 'B/x.gpg', 'B/y.gpg', 'C.gpg', 'D/z.gpg']
        for name in files:
            touch(os.path.join(store_root, name))
        touch(os.path.join(store_root, '.git', 'HEAD.gpg'))

        groups = discover_entries(store_root)

        paths = [entry.path for group in groups for entry in group]
        assert sorted(paths) == sorted(os.path.join(store_root, name) for name in files)
        assert len(paths) == len(set(paths))
        for group in groups:
            assert group
            assert len({entry.service for entry in group}) == 1
        assert [group[0].service for group in groups] == ['A', 'B', 'C', 'D']

    def test_missing_root(self, temp_dir):
        with pytest.raises(ConfigError):
            discover_entries(os.path.join(temp_dir, 'nope'))


class TestLocateEntry:
    """Test locate_entry function"""

    def test_absent(self, store_root):
        assert locate_entry(store_root, 'Bank', 'carl') == (os.path.join(store_root, 'Bank.gpg'), LOCATION_ABSENT)
        assert not os.path.exists(os.path.join(store_root, 'Bank'))

    def test_flat_file(self, store_root):
        touch(os.path.join(store_root, 'Bank.gpg'))
        assert locate_entry(store_root, 'Bank', 'carl') == (os.path.join(store_root, 'Bank.gpg'), LOCATION_FILE)

    def test_directory(self, store_root):
        os.makedirs(os.path.join(store_root, 'Email'))
        path, state = locate_entry(store_root, 'Email', 'alice')
        assert state == LOCATION_DIRECTORY
        assert path == os.path.join(store_root, 'Email', 'alice.gpg')
