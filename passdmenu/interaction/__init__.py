"""
Desktop collaborators for passdmenu: dmenu chooser, clipboard and
notifications.
"""

from passdmenu.interaction.chooser import Dmenu, Selection, parse_selection
from passdmenu.interaction.clipboard import ClipboardSink
from passdmenu.interaction.notifications import Notifier, NullNotifier

__all__ = ['Dmenu', 'Selection', 'parse_selection', 'ClipboardSink', 'Notifier', 'NullNotifier']
