"""
Overlay navigation.

- surfaces.py: the overlay kinds (task editor, search, confirm, reminder popup, ...)
- stack.py: LIFO stack of open overlays kept in step with platform history
"""
