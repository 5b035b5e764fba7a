"""Domain enumerations for the Legality portal.

Enums represent fixed sets of domain values (roles, case and task status).
Values are the literal strings stored in the remote tables.
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]

    @classmethod
    def parse(cls, value: object):
        """Return the member for a stored value.

        Raises:
            ValueError: If value is not one of the enum's values.
        """
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().lower())


class ProfileRole(_ValuesMixin, str, Enum):
    """Role held by a profile.

    UNKNOWN is never stored; it is the fallback arm for role strings this
    portal does not recognise and is treated exactly like PENDING by the
    access policy.
    """

    PENDING = "pending"
    CLIENTE = "cliente"
    ANALISTA = "analista"
    ABOGADO = "abogado"
    ADMIN = "admin"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: object) -> "ProfileRole":
        """Map a stored role to a member.

        Missing or null roles become PENDING; unrecognised strings become
        UNKNOWN. Never raises.
        """
        if value is None or (isinstance(value, str) and not value.strip()):
            return cls.PENDING
        try:
            return super().parse(value)
        except ValueError:
            return cls.UNKNOWN

    @classmethod
    def assignable(cls) -> list["ProfileRole"]:
        """Roles an admin may write to a profile (UNKNOWN excluded)."""
        return [role for role in cls if role is not cls.UNKNOWN]


class ProfileStatus(_ValuesMixin, str, Enum):
    """Derived account status shown in the user lists."""

    ACTIVE = "ACTIVE"
    PENDING = "PENDING"


class CaseStatus(_ValuesMixin, str, Enum):
    """Caso lifecycle status."""

    ACTIVO = "activo"
    CERRADO = "cerrado"


class TaskStatus(_ValuesMixin, str, Enum):
    """Tarea lifecycle status."""

    PENDIENTE = "pendiente"
    EN_PROGRESO = "en_progreso"
    COMPLETADA = "completada"


class AssignmentRole(_ValuesMixin, str, Enum):
    """Role a professional holds on an assigned case."""

    ANALISTA = "analista"
    ABOGADO = "abogado"


class HoursRequestStatus(_ValuesMixin, str, Enum):
    """Status of a request for extra budgeted hours on a case."""

    PENDIENTE = "pendiente"
    APROBADO = "aprobado"
    RECHAZADO = "rechazado"


class RouterState(_ValuesMixin, str, Enum):
    """States of the role router.

    ERROR is terminal until the router is reset (manual reload).
    """

    INITIALIZING = "initializing"
    UNAUTHENTICATED = "unauthenticated"
    PENDING_APPROVAL = "pending_approval"
    AUTHENTICATED = "authenticated"
    ERROR = "error"
