"""
dmenu chooser and selection parsing.

A selection may carry a command suffix after the first '/': 'Bank/e'
edits the Bank entry, 'Bank/n' adds a user to Bank.
"""

import subprocess

from passdmenu.errors import ConfigError

POSITION_TOP = 'top'
POSITION_BOTTOM = 'bottom'
POSITION_CENTER = 'center'

COMMAND_EDIT = '/e'
COMMAND_NEW = '/n'


class Dmenu:
    """Ask the user to pick one of options (or type something else) with dmenu"""

    def __init__(self, options, position: str = POSITION_TOP, case_insensitive: bool = False,
                 lines: int = -1, prompt: str = '', command: str = 'dmenu'):
        self.options = list(options)
        self.position = position
        self.case_insensitive = case_insensitive
        self.lines = lines
        self.prompt = prompt
        self.command = command
        self._result = None

    def args(self) -> list:
        args = [self.command]
        if self.position == POSITION_BOTTOM:
            args.append('-b')
        elif self.position == POSITION_CENTER:
            args.append('-c')
        if self.case_insensitive:
            args.append('-i')
        if self.lines > 0:
            args.extend(['-l', str(self.lines)])
        if self.prompt:
            args.extend(['-p', self.prompt])
        return args

    def result(self) -> str:
        """
        Run dmenu once and return the chosen or typed line.

        Returns an empty string when the user cancels.
        """
        if self._result is not None:
            return self._result

        stdin = ''.join(f'{option}\n' for option in self.options)
        try:
            completed = subprocess.run(self.args(), input=stdin, capture_output=True, text=True)
        except FileNotFoundError as e:
            raise ConfigError(f'{self.command} is not installed') from e

        lines = completed.stdout.splitlines()
        self._result = lines[0] if lines else ''
        return self._result


class Selection:
    """A dmenu answer split into the typed value, its command suffix and the matching candidate"""

    def __init__(self, value: str, flags: str, match=None):
        self.value = value
        self.flags = flags
        self.match = match

    @property
    def is_empty(self) -> bool:
        return not self.value and not self.flags

    @property
    def is_command(self) -> bool:
        return self.match is None or bool(self.flags)

    def __repr__(self):
        return f'Selection(value={self.value!r}, flags={self.flags!r}, match={self.match!r})'


def parse_selection(raw: str, candidates, key) -> Selection:
    """
    Split a chooser answer at its first '/' and look up the candidate it names.

    Args:
        raw: Line returned by the chooser
        candidates: Items the options were built from
        key: Function giving the option string of a candidate
    """
    value, slash, rest = raw.partition('/')
    flags = slash + rest
    match = next((candidate for candidate in candidates if key(candidate) == value), None)
    return Selection(value, flags, match)
