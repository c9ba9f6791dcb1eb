"""Terminal output helpers shared by the CPD tooling"""

import os
import sys


class Colors:
    """ANSI color codes for terminal output"""
    RED = '\033[1;31m'
    BLUE = '\033[1;34m'
    GREEN = '\033[1;32m'
    YELLOW = '\033[1;33m'
    RESET = '\033[0m'
    BOLD = '\033[1m'

    @staticmethod
    def plain(msg: str = ""):
        """Print uncolored text"""
        print(msg)

    @staticmethod
    def error(msg: str):
        """Print red error message"""
        print(f"{Colors.RED}{msg}{Colors.RESET}", file=sys.stderr)

    @staticmethod
    def info(msg: str):
        """Print blue info message"""
        print(f"{Colors.BLUE}{msg}{Colors.RESET}")

    @staticmethod
    def success(msg: str):
        """Print green success message"""
        print(f"{Colors.GREEN}{msg}{Colors.RESET}")

    @staticmethod
    def warning(msg: str):
        """Print yellow warning message"""
        print(f"{Colors.YELLOW}{msg}{Colors.RESET}")

    @staticmethod
    def header(msg: str):
        """Print header with lines"""
        try:
            width = min(80, os.get_terminal_size().columns)
        except (OSError, AttributeError):
            width = 80
        print()
        print('=' * width)
        print(f"{Colors.BOLD}{Colors.BLUE}{msg}{Colors.RESET}")
        print('=' * width)
        print()
