"""Textual UI for tickit."""

from tickit.ui.app import CommentScreen, TickitApp

__all__ = [
    "CommentScreen",
    "TickitApp",
]
