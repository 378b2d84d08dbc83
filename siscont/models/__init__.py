from .core import Empresa, User, UserRole
from .assets import Activo, MetodoDepreciacion
from .ledger import Depreciacion, Movimiento, Valoracion
from .imports import ImportSession

__all__ = [
    "Empresa",
    "User",
    "UserRole",
    "Activo",
    "MetodoDepreciacion",
    "Movimiento",
    "Valoracion",
    "Depreciacion",
    "ImportSession",
]
