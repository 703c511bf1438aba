"""
Operating System Identity

Account name parsing and credential verification against the host OS.
"""

import getpass
import logging
import os
import platform
import sys
from abc import ABC, abstractmethod
from typing import Tuple


logger = logging.getLogger(__name__)

# Win32 ERROR_LOGON_FAILURE: unknown user name or bad password
ERROR_LOGON_FAILURE = 1326


class AuthenticationError(Exception):
    """Credentials could not be checked (as opposed to being rejected)."""
    pass


def machine_name() -> str:
    """Get the local machine name."""
    return os.environ.get("COMPUTERNAME") or platform.node() or "localhost"


def current_identity() -> str:
    """
    Get the current user as a ``domain\\user`` account name.

    Uses the machine name as the domain when the process is not running
    under a domain account.
    """
    domain = os.environ.get("USERDOMAIN") or machine_name()
    try:
        user = os.environ.get("USERNAME") or getpass.getuser()
    except (KeyError, OSError):
        return ""
    return f"{domain}\\{user}"


def parse_account_name(account: str) -> Tuple[str, str]:
    """
    Split a ``domain\\user`` account name.

    Args:
        account: Account name

    Returns:
        Tuple of (domain, user)

    Raises:
        ValueError: If the name is not exactly one domain and one user part
    """
    parts = account.strip().split("\\")
    if len(parts) != 2 or not parts[0].strip() or not parts[1].strip():
        raise ValueError(f"Account name is not formatted like domain\\username: {account!r}")
    return parts[0].strip(), parts[1].strip()


class Authenticator(ABC):
    """Verifies account credentials against the operating system."""

    @abstractmethod
    def authenticate(self, domain: str, user: str, password: str) -> bool:
        """
        Check credentials.

        Returns:
            True if the OS accepted the credentials, False if it rejected them

        Raises:
            AuthenticationError: If the check itself could not be performed
        """
        pass


class WindowsAuthenticator(Authenticator):
    """Verifies credentials with the Win32 LogonUser API (pywin32)."""

    def authenticate(self, domain: str, user: str, password: str) -> bool:
        if sys.platform != "win32":
            raise AuthenticationError(
                "Windows authentication is not available on this platform. "
                "Use database authentication instead."
            )

        try:
            import pywintypes
            import win32security
        except ImportError as e:
            raise AuthenticationError(f"pywin32 is required for Windows authentication: {e}")

        try:
            handle = win32security.LogonUser(
                user,
                domain,
                password,
                win32security.LOGON32_LOGON_NETWORK,
                win32security.LOGON32_PROVIDER_DEFAULT,
            )
        except pywintypes.error as e:
            if e.winerror == ERROR_LOGON_FAILURE:
                logger.info(f"Logon rejected for {domain}\\{user}")
                return False
            raise AuthenticationError(e.strerror)

        handle.Close()
        return True
