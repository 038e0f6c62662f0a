"""Utility modules for safedelete.

This module exports commonly used utility functions.
"""

from safedelete.utils.formatting import (
    console,
    create_audit_table,
    err_console,
    print_error,
    print_info,
    print_success,
    print_warning,
)

__all__ = [
    "console",
    "create_audit_table",
    "err_console",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
]
