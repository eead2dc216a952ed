"""Enum conversion utilities"""

from enum import Enum
from typing import TypeVar, Type, Optional, List, Any, Dict

# Generic type for any Enum subclass
E = TypeVar("E", bound=Enum)

class EnumHelper:
    """
    Utility class for working with Enums:
    - Parse strings back to enum members (case-insensitive, with aliases)
    - List all member names
    """

    @staticmethod
    def from_string(enum_class: Type[E], name: str, case_insensitive: bool = True,
                    aliases: Optional[Dict[str, E]] = None) -> E:
        """
        Parse string to Enum member.

        Args:
            enum_class: Enum class to parse into
            name: String name (case-insensitive by default)
            case_insensitive: If True, matches ignoring case
            aliases: Extra accepted spellings (keys compared after case folding)

        Returns:
            Enum member

        Raises:
            ValueError: name matches no member and no alias
        """
        if not issubclass(enum_class, Enum):
            raise TypeError(f"{enum_class} is not an Enum class")

        key = name.strip()
        if case_insensitive:
            key = key.upper()

        for member in enum_class:
            if (member.name.upper() if case_insensitive else member.name) == key:
                return member

        for alias, member in (aliases or {}).items():
            if (alias.upper() if case_insensitive else alias) == key:
                return member

        raise ValueError(f"Invalid {enum_class.__name__} name: {name}")

    @staticmethod
    def list_names(enum_class: Type[E], lowercase: bool = False) -> List[str]:
        """
        List all Enum member names.

        Args:
            enum_class: Enum class to inspect
            lowercase: Return lowercase names

        Returns:
            List of member names (strings)
        """
        if not issubclass(enum_class, Enum):
            raise TypeError(f"{enum_class} is not an Enum class")

        if lowercase:
            return [member.name.lower() for member in enum_class]
        return [member.name for member in enum_class]

    @staticmethod
    def to_enum(enum_class: Type[E], value: Any) -> E:
        """Convert string or member to enum instance"""
        if isinstance(value, enum_class):
            return value
        if isinstance(value, str):
            return EnumHelper.from_string(enum_class, value)
        raise TypeError(f"Expected str or {enum_class.__name__}, got {type(value)}")
