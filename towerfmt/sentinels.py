"""
The UNSET marker for notation fields and ``merge()`` overrides.

Notation fields give ``None`` a meaning of its own: in a sub-notation role it stands for "this
notation itself", and as a maximum it means "no limit". A field or override that was simply
not given therefore needs a separate marker. UNSET is a falsy singleton compared by identity.

Example:
    >>> notation.merge(maxnum=UNSET) == notation
    True
"""

# Standard library -----------------------------------------------------------------------------------------------------
from typing import Any, Final

__all__ = [
    'UNSET',
    'UnsetType',
]


# Classes --------------------------------------------------------------------------------------------------------------

class UnsetType:
    """Type of UNSET; every instantiation returns the same object."""
    __slots__ = ()
    _instance: 'UnsetType | None' = None

    def __new__(cls) -> 'UnsetType':
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return '<UNSET>'

    def __eq__(self, other: Any) -> bool:
        return self is other

    def __hash__(self) -> int:
        return id(self)

    def __bool__(self) -> bool:
        return False

    def __reduce__(self) -> tuple:
        # Unpickling goes through __new__, which hands back the singleton
        return (self.__class__, ())


UNSET: Final[UnsetType] = UnsetType()
