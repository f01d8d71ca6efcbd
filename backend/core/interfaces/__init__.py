# Interfaces (Abstract Contracts)
# Adapters implement these interfaces
from .services import DraftGenerator, FieldRepairService, OutlineService

__all__ = [
    "OutlineService",
    "DraftGenerator",
    "FieldRepairService",
]
