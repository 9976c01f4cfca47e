"""
Sessions Package

This package contains the components that run a library assistant chat.

Components:
- SessionState: Transcript, input buffer and flags owned by one session
- SessionController: Initialization, turn execution and rollback

Usage:
    from sessions.session_controller import SessionController

    controller = SessionController()
    await controller.initialize()
    await controller.send("Where is the fiction section?")

Note: Import directly from submodules to avoid circular import issues.
"""

__all__ = [
    "SessionController",
    "SessionState",
]
