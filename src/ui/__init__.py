"""NiceGUI interface - thin visualization layer for chat interactions.

Responsibilities:
    - Thread list with new, switch and delete controls
    - Message display with markdown rendering and live streaming updates
    - Dismissible error banner and typing indicator

Contains no business logic. Delegates all operations to ChatSession and
renders its state.
"""
