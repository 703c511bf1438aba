"""
Administrative Account Statements

Builds the SQL that registers the setup's administrative user.
"""

import base64
import hashlib
from typing import Optional


def sql_literal(value: Optional[str]) -> str:
    """Quote a value as an N'' string literal, or NULL."""
    if value is None:
        return "NULL"
    return "N'" + value.replace("'", "''") + "'"


def hash_password(password: str, salt: str) -> str:
    """Hash a database account password as base64(SHA-256(salt + password))."""
    digest = hashlib.sha256((salt + password).encode("utf-8")).digest()
    return base64.b64encode(digest).decode("ascii")


def build_admin_account_statement(
    user_name: str,
    role: str,
    use_windows_authentication: bool,
    password_hash: Optional[str] = None,
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
) -> str:
    """
    Build the statement that creates the administrative account.

    Args:
        user_name: Account name (domain\\user for Windows accounts)
        role: Application role granted to the account
        use_windows_authentication: Whether the OS authenticates the account
        password_hash: Hashed password for database accounts
        first_name: Optional first name
        last_name: Optional last name

    Returns:
        A single SQL batch suitable for sqlcmd -Q
    """
    name = sql_literal(user_name)

    insert_account = (
        "INSERT INTO UserAccount(Name, Password, FirstName, LastName, UseADAuthentication) "
        f"VALUES({name}, {sql_literal(password_hash)}, {sql_literal(first_name or None)}, "
        f"{sql_literal(last_name or None)}, {1 if use_windows_authentication else 0})"
    )

    grant_role = (
        "INSERT INTO ApplicationRoleUserAccount(ApplicationRoleID, UserAccountID) "
        "SELECT ApplicationRole.ID, UserAccount.ID FROM ApplicationRole, UserAccount "
        f"WHERE ApplicationRole.Name = {sql_literal(role)} AND UserAccount.Name = {name}"
    )

    return f"{insert_account}; {grant_role}"
