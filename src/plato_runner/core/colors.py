"""Console colors and formatting utilities for Plato Runner.

Provides ANSI color codes for terminal output with auto-detection
of TTY support and Windows compatibility.
"""

import os
import sys


class ConsoleColors:
    """ANSI color codes for terminal output.

    Auto-detects TTY support and handles Windows compatibility.
    Use this class for general CLI output formatting.
    """
    GREEN = '\033[92m'
    RED = '\033[91m'
    YELLOW = '\033[93m'
    BOLD = '\033[1m'
    RESET = '\033[0m'

    # Disable colors if not a TTY or on Windows without ANSI support
    _enabled = sys.stdout.isatty() and (os.name != 'nt' or bool(os.environ.get('TERM')))

    @classmethod
    def configure(cls, no_color: bool = False) -> None:
        """Apply the global color policy (--no-color or NO_COLOR disables colors)."""
        if no_color or os.environ.get('NO_COLOR'):
            cls._enabled = False

    @classmethod
    def success(cls, text: str) -> str:
        """Format text as success (green)"""
        if cls._enabled:
            return f"{cls.GREEN}{text}{cls.RESET}"
        return text

    @classmethod
    def error(cls, text: str) -> str:
        """Format text as error (red)"""
        if cls._enabled:
            return f"{cls.RED}{text}{cls.RESET}"
        return text

    @classmethod
    def warning(cls, text: str) -> str:
        """Format text as warning (yellow)"""
        if cls._enabled:
            return f"{cls.YELLOW}{text}{cls.RESET}"
        return text

    @classmethod
    def bold(cls, text: str) -> str:
        """Format text as bold"""
        if cls._enabled:
            return f"{cls.BOLD}{text}{cls.RESET}"
        return text

    @classmethod
    def status(cls, success: bool, text: str) -> str:
        """Format text based on success/failure status"""
        return cls.success(text) if success else cls.error(text)


def _format_error_msg(operation: str, item_type: str = None, error: Exception = None) -> str:
    """
    Format error messages consistently across the application.

    Args:
        operation: Description of the operation that failed (e.g., "writing owner report")
        item_type: Optional item type context (e.g., an owner or module name)
        error: Optional exception to include in the message

    Returns:
        Formatted error message string
    """
    msg = f"Error {operation}"
    if item_type:
        msg += f" for {item_type}"
    if error:
        msg += f": {str(error)}"
    return msg
