"""Today's Planify tasks in a panel menu, with due-soon notifications."""

__version__ = "0.3.0"
