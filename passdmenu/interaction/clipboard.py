"""
Clipboard hand-off through xclip.
"""

import subprocess


class ClipboardSink:
    """
    Offers text on the X clipboard until it has been pasted once.

    xclip keeps ownership of the selection and exits after serving one
    paste, or earlier when another program takes the selection over.
    """

    def __init__(self, command: str = 'xclip', selection: str = 'clipboard'):
        self.command = command
        self.selection = selection

    def args(self) -> list:
        return [self.command, '-selection', self.selection, '-loops', '1', '-quiet']

    def offer(self, text: str) -> bool:
        """
        Block until text is pasted.

        Returns:
            True if the text was pasted, False if the clipboard was taken
            by someone else or xclip failed
        """
        completed = subprocess.run(
            self.args(),
            input=text.encode('utf-8'),
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
        return completed.returncode == 0
