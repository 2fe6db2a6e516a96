"""
Desktop notifications through notify-send.

Notifications are fire and forget: a missing or failing notify-send never
interrupts the caller.
"""

import subprocess

NOTIFICATION_TIMEOUT = 5000


class Notification:
    """Handle on a shown notification"""

    def __init__(self, notifier, notification_id: str = None):
        self.notifier = notifier
        self.notification_id = notification_id

    def dismiss(self):
        if self.notification_id:
            self.notifier.close(self.notification_id)


class Notifier:
    """Sends desktop notifications for one application"""

    def __init__(self, app_name: str, command: str = 'notify-send'):
        self.app_name = app_name
        self.command = command

    def _run(self, args: list) -> str:
        try:
            completed = subprocess.run(args, capture_output=True, text=True)
        except OSError:
            return ''
        if completed.returncode != 0:
            return ''
        return completed.stdout.strip()

    def notify(self, title: str, body: str, timeout_ms: int = NOTIFICATION_TIMEOUT) -> Notification:
        notification_id = self._run([
            self.command, '--app-name', self.app_name, '--print-id',
            '-t', str(timeout_ms), title, body,
        ])
        return Notification(self, notification_id or None)

    def close(self, notification_id: str):
        # notify-send cannot close a notification; replacing it with one
        # that expires immediately has the same effect
        self._run([
            self.command, '--app-name', self.app_name,
            '--replace-id', notification_id, '-t', '1', ' ',
        ])


class NullNotifier:
    """Prints notifications instead of showing them"""

    def notify(self, title: str, body: str, timeout_ms: int = NOTIFICATION_TIMEOUT) -> Notification:
        print(f'{title}: {body}')
        return Notification(self)

    def close(self, notification_id: str):
        pass
