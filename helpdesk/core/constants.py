"""
Constantes centralizadas para el sistema.
Elimina "magic strings" y provee tipado fuerte para valores comunes.
"""

from enum import Enum, unique


@unique
class UserRole(str, Enum):
    """Roles de usuario."""

    USER = "USER"
    AGENT = "AGENT"
    ADMIN = "ADMIN"


@unique
class TicketStatus(str, Enum):
    """Estados del ciclo de vida de un ticket."""

    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    PENDING = "PENDING"
    RESOLVED = "RESOLVED"
    CLOSED = "CLOSED"


@unique
class TicketPriority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


@unique
class TicketCategory(str, Enum):
    HARDWARE = "HARDWARE"
    SOFTWARE = "SOFTWARE"
    NETWORK = "NETWORK"
    ACCESS = "ACCESS"
    OTHER = "OTHER"


STAFF_ROLES = [UserRole.AGENT, UserRole.ADMIN]

# Human-readable labels used by the templates
STATUS_LABELS = {
    TicketStatus.OPEN: "Abierto",
    TicketStatus.IN_PROGRESS: "En progreso",
    TicketStatus.PENDING: "Pendiente",
    TicketStatus.RESOLVED: "Resuelto",
    TicketStatus.CLOSED: "Cerrado",
}

PRIORITY_LABELS = {
    TicketPriority.LOW: "Baja",
    TicketPriority.MEDIUM: "Media",
    TicketPriority.HIGH: "Alta",
    TicketPriority.URGENT: "Urgente",
}

CATEGORY_LABELS = {
    TicketCategory.HARDWARE: "Hardware",
    TicketCategory.SOFTWARE: "Software",
    TicketCategory.NETWORK: "Red",
    TicketCategory.ACCESS: "Accesos",
    TicketCategory.OTHER: "Otro",
}

MIN_PASSWORD_LENGTH = 4
