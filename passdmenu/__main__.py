"""
dmenu front end for a pass-compatible password store.

Entries are gpg-encrypted files under $PASSWORD_STORE_DIR (or
~/.password-store): '<service>.gpg' for a service with a single user,
'<service>/<user>.gpg' for a service with several. Picking an entry puts
its username, then its password, on the clipboard; each is offered until
it is pasted once.

Typing 'service/e' edits a single-user service, 'service/n' adds a user to
it, and typing an unknown name offers to create it.
"""

import sys
import argparse

from passdmenu.cli import MenuApp, terminal_mode, MAX_LINES
from passdmenu.crypto import GENERATED_PASSWORD_LENGTH
from passdmenu.errors import PassDmenuError
from passdmenu.interaction.clipboard import ClipboardSink
from passdmenu.interaction.notifications import Notifier, NullNotifier
from passdmenu.store import PasswordStore, APP_NAME


def parse_args(argv=None):
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        prog='passdmenu',
        description='dmenu front end for a gpg password store',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  %(prog)s                        # Pick an entry with dmenu and copy it
  %(prog)s --no-menu              # List services and users in the terminal
  %(prog)s -s ~/work-store        # Use a different store directory
  %(prog)s --no-menu --search git # List services containing "git"
        '''
    )
    parser.add_argument('-s', '--store',
                        help='Path to the password store (default: $PASSWORD_STORE_DIR or ~/.password-store)')
    parser.add_argument('--gnupghome',
                        help='GnuPG home directory (default: gpg default)')
    parser.add_argument('--no-menu', action='store_true',
                        help='List entries in the terminal instead of running dmenu')
    parser.add_argument('--search', type=str,
                        help='Only list services containing this term (terminal mode only)')
    parser.add_argument('--lines', type=int, default=MAX_LINES,
                        help=f'Maximum number of dmenu lines (default: {MAX_LINES})')
    parser.add_argument('--length', type=int, default=GENERATED_PASSWORD_LENGTH,
                        help=f'Length of suggested passwords (default: {GENERATED_PASSWORD_LENGTH})')

    args = parser.parse_args(argv)

    if args.lines < 1:
        parser.error('--lines must be positive')
    if args.length < 1:
        parser.error('--length must be positive')

    return args


def main(argv=None):
    """Main entry point"""

    args = parse_args(argv)
    notifier = NullNotifier() if args.no_menu else Notifier(APP_NAME)

    try:
        store = PasswordStore.open(args.store, notifier=notifier, gnupghome=args.gnupghome)

        if args.no_menu:
            terminal_mode(store, args.search)
            return 0

        app = MenuApp(store, ClipboardSink(), notifier,
                      max_lines=args.lines, password_length=args.length)
        return app.run()
    except (PassDmenuError, ValueError, OSError) as e:
        sys.stderr.write(f'ERROR: {str(e)}\n')
        if not args.no_menu:
            notifier.notify(APP_NAME, f'Error: {e}')
        return 1


if __name__ == '__main__':
    sys.exit(main())
