"""
Connection Settings

Typed view over a SQL Server connection string.
"""

from typing import Dict, Iterator, List, Optional, Tuple


DATA_SOURCE = "Data Source"
INITIAL_CATALOG = "Initial Catalog"
USER_ID = "User Id"
PASSWORD = "Password"

# Characters that would change how a serialized name parses back
RESERVED_NAME_CHARS = ("=", ";", '"')


class ConnectionSettings:
    """
    Case-insensitive mapping of connection-string attributes.

    Keys keep the casing they were first set with. Setting an attribute to
    None or an empty string removes it, so the generated connection string
    never carries empty pairs such as ``Password=;``.
    """

    def __init__(self, settings: Optional[Dict[str, str]] = None):
        """
        Initialize connection settings.

        Args:
            settings: Optional initial attribute mapping
        """
        # lowercased key -> (original key, value)
        self._settings: Dict[str, Tuple[str, str]] = {}

        for key, value in (settings or {}).items():
            self.set(key, value)

    # Mapping access

    def get(self, attribute: str, default: Optional[str] = None) -> Optional[str]:
        """Get an attribute value, or default if it is not set."""
        entry = self._settings.get(attribute.lower())
        return entry[1] if entry else default

    def set(self, attribute: str, value: Optional[str]) -> None:
        """Set an attribute value. None or "" removes the attribute."""
        attribute = attribute.strip()
        if not attribute:
            raise ValueError("Connection string attribute name cannot be empty")
        if any(char in attribute for char in RESERVED_NAME_CHARS):
            raise ValueError(f"Connection string attribute name cannot contain = ; or \": {attribute!r}")

        if value is None or value == "":
            self.remove(attribute)
            return

        existing = self._settings.get(attribute.lower())
        key = existing[0] if existing else attribute
        self._settings[attribute.lower()] = (key, value)

    def remove(self, attribute: str) -> None:
        """Remove an attribute if present."""
        self._settings.pop(attribute.lower(), None)

    def keys(self) -> List[str]:
        return [key for key, _ in self._settings.values()]

    def items(self) -> List[Tuple[str, str]]:
        return list(self._settings.values())

    def to_dict(self) -> Dict[str, str]:
        return dict(self._settings.values())

    def __contains__(self, attribute: object) -> bool:
        return isinstance(attribute, str) and attribute.lower() in self._settings

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __len__(self) -> int:
        return len(self._settings)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConnectionSettings):
            return NotImplemented
        return {k: v for k, (_, v) in self._settings.items()} == {
            k: v for k, (_, v) in other._settings.items()
        }

    def __repr__(self) -> str:
        return f"ConnectionSettings({self.to_string(mask_password=True)!r})"

    # Typed accessors

    @property
    def host_name(self) -> Optional[str]:
        """Server host name (``Data Source``)."""
        return self.get(DATA_SOURCE)

    @host_name.setter
    def host_name(self, value: Optional[str]) -> None:
        self.set(DATA_SOURCE, value)

    @property
    def database_name(self) -> Optional[str]:
        """Database name (``Initial Catalog``)."""
        return self.get(INITIAL_CATALOG)

    @database_name.setter
    def database_name(self, value: Optional[str]) -> None:
        self.set(INITIAL_CATALOG, value)

    @property
    def user_name(self) -> Optional[str]:
        """SQL login name (``User Id``), None for integrated security."""
        return self.get(USER_ID)

    @user_name.setter
    def user_name(self, value: Optional[str]) -> None:
        self.set(USER_ID, value)

    @property
    def password(self) -> Optional[str]:
        """SQL login password (``Password``)."""
        return self.get(PASSWORD)

    @password.setter
    def password(self, value: Optional[str]) -> None:
        self.set(PASSWORD, value)

    @property
    def integrated_security(self) -> bool:
        """Whether the connection relies on the caller's OS identity."""
        return not self.user_name

    # Serialization

    def to_string(self, mask_password: bool = False) -> str:
        """
        Build the connection string.

        Args:
            mask_password: Replace the password value with asterisks

        Returns:
            Connection string in ``key=value; `` form
        """
        parts = []
        for key, value in self._settings.values():
            if mask_password and key.lower() == PASSWORD.lower():
                value = "********"
            parts.append(f"{key}={_quote(value)}; ")
        return "".join(parts)

    def __str__(self) -> str:
        return self.to_string()

    @classmethod
    def parse(cls, connection_string: str) -> "ConnectionSettings":
        """
        Parse a connection string.

        Args:
            connection_string: String of ``key=value`` pairs separated by ``;``

        Returns:
            ConnectionSettings instance

        Raises:
            ValueError: If a segment is not a key=value pair
        """
        settings = cls()

        for segment in _split_pairs(connection_string or ""):
            if not segment.strip():
                continue

            if "=" not in segment:
                raise ValueError(f"Invalid connection string segment: {segment.strip()!r}")

            key, value = segment.split("=", 1)
            settings.set(key.strip(), _unquote(value.strip()))

        return settings


def _quote(value: str) -> str:
    if ";" in value or '"' in value or value != value.strip():
        return '"' + value.replace('"', '""') + '"'
    return value


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == '"' and value[-1] == '"':
        return value[1:-1].replace('""', '"')
    return value


def _split_pairs(text: str) -> List[str]:
    """Split on ``;`` outside double quotes."""
    segments = []
    current = []
    in_quotes = False

    for char in text:
        if char == '"':
            in_quotes = not in_quotes
        if char == ";" and not in_quotes:
            segments.append("".join(current))
            current = []
        else:
            current.append(char)

    segments.append("".join(current))
    return segments
