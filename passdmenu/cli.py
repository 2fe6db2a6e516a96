"""
Command handlers for passdmenu.

Runs the dmenu flow (pick a service, then a user, then copy or edit) and
the terminal listing mode.
"""

import os
import sys

from passdmenu.crypto import password_suggestions, GENERATED_PASSWORD_LENGTH
from passdmenu.entry import Entry
from passdmenu.interaction.chooser import (
    Dmenu, parse_selection, POSITION_CENTER, COMMAND_EDIT, COMMAND_NEW
)
from passdmenu.store import single_entry

MAX_LINES = 20
EXIT_SUCCESS = 0
EXIT_FAILURE = 1


class MenuApp:
    """
    Interactive dmenu front end over a PasswordStore.

    menu is the chooser factory, called with the options and the Dmenu
    keyword arguments; it returns an object with a result() method.
    """

    def __init__(self, store, clipboard, notifier, menu=Dmenu,
                 max_lines: int = MAX_LINES, password_length: int = GENERATED_PASSWORD_LENGTH):
        self.store = store
        self.clipboard = clipboard
        self.notifier = notifier
        self.menu = menu
        self.max_lines = max_lines
        self.password_length = password_length

    def _ask(self, options, lines: int, prompt: str = '') -> str:
        return self.menu(options, position=POSITION_CENTER, lines=lines, prompt=prompt).result()

    def ask_service(self, groups):
        options = [group[0].service for group in groups]
        answer = self._ask(options, min(len(options), self.max_lines))
        return parse_selection(answer, groups, lambda group: group[0].service)

    def ask_user(self, users):
        options = [entry.username for entry in users]
        answer = self._ask(options, min(len(options), self.max_lines), 'User:')
        return parse_selection(answer, users, lambda entry: entry.username)

    def ask_yes_no(self, prompt: str, yes_option: str = 'Yes', no_option: str = 'No') -> bool:
        return self._ask([yes_option, no_option], 2, prompt) == yes_option

    def ask_value(self, prompt: str) -> str:
        return self._ask([], 2, prompt)

    def ask_password(self, prompt: str) -> str:
        return self._ask(password_suggestions(self.password_length), 2, prompt)

    def edit(self, entry: Entry) -> int:
        self.store.decrypt(entry)
        password = self.ask_password('New Password:')
        if not password:
            return EXIT_SUCCESS
        entry.password = password
        self.store.save(entry)
        return EXIT_SUCCESS

    def add(self, service: str, username: str) -> int:
        if not username:
            self.notifier.notify('passDmenu', 'No username given, nothing saved')
            return EXIT_FAILURE
        password = self.ask_password('Enter Password:')
        if not password:
            return EXIT_SUCCESS
        self.store.save(Entry(service, username, password))
        return EXIT_SUCCESS

    def handle_user_command(self, service: str, result) -> int:
        if not result.flags:
            if not self.ask_yes_no('Do you want to:', f'Add {result.value} to {service}', 'Exit'):
                return EXIT_SUCCESS
            return self.add(service, result.value)

        if result.flags == COMMAND_EDIT and result.match is not None:
            return self.edit(result.match)

        return EXIT_FAILURE

    def handle_service_command(self, result) -> int:
        if result.flags == COMMAND_EDIT:
            if result.match is None:
                return EXIT_FAILURE
            return self.edit(single_entry(result.match))

        if result.flags == COMMAND_NEW or not result.flags:
            if not result.value or not result.flags:
                if not self.ask_yes_no('Want to add service: ', 'Yes', 'No, exit program'):
                    return EXIT_SUCCESS
                service = self.ask_value('Enter service:')
            elif self.ask_yes_no('Want to add user: ', f'Yes, Add to {result.value}', 'No, exit program'):
                service = result.value
            else:
                return EXIT_SUCCESS

            if not service:
                return EXIT_FAILURE
            return self.add(service, self.ask_value('Enter Username:'))

        return EXIT_FAILURE

    def copy_info(self, entry: Entry):
        """Decrypt an entry and hand out its username, then its password"""
        self.store.decrypt(entry)
        notification = self.notifier.notify('Copied username', f'Copied username for {entry.service}')
        if not self.clipboard.offer(entry.username):
            return
        notification.dismiss()
        self.notifier.notify('Copied password', f'Copied password for {entry.service}')
        self.clipboard.offer(entry.password)

    def run(self) -> int:
        groups = self.store.list_groups()

        service = self.ask_service(groups)
        if service.is_empty:
            return EXIT_SUCCESS
        if service.is_command:
            return self.handle_service_command(service)

        if len(service.match) == 1:
            self.copy_info(service.match[0])
            return EXIT_SUCCESS

        user = self.ask_user(service.match)
        if not user.is_command:
            self.copy_info(user.match)
            return EXIT_SUCCESS
        if user.is_empty:
            return EXIT_SUCCESS
        return self.handle_user_command(service.value, user)


def display_terminal(groups, search_term: str = None):
    """
    Display store entries in terminal mode.

    Lists services and usernames only; nothing is decrypted.

    Args:
        groups: Entry groups as returned by PasswordStore.list_groups()
        search_term: Optional search term to filter entries by service name
    """
    print("\n" + "="*80)
    print(" PASSWORD STORE - ENTRIES")
    print("="*80)

    entries = []
    for group in groups:
        for entry in group:
            if search_term is None or search_term.lower() in entry.service.lower():
                entries.append(entry)

    if not entries:
        if search_term:
            print(f"\nNo entries found matching '{search_term}'")
        else:
            print("\nNo entries found in store")
        return

    max_service = max(len(e.service) for e in entries)
    max_user = max(len(e.username) for e in entries)

    col_service = max(20, max_service + 2)
    col_user = max(20, max_user + 2)

    print(f"\n{'Service':<{col_service}} {'Username':<{col_user}} File")
    print("-" * (col_service + col_user + 20))

    for entry in entries:
        print(f"{entry.service:<{col_service}} {entry.username:<{col_user}} {os.path.basename(entry.path)}")

    print(f"\nTotal entries: {len(entries)}")
    print("="*80 + "\n")


def terminal_mode(store, search_term: str = None):
    """
    Run passdmenu in terminal mode.

    Args:
        store: Opened PasswordStore
        search_term: Optional search term to filter displayed entries
    """
    display_terminal(store.list_groups(), search_term)
    sys.stdout.flush()
