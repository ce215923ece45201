from jobcrm.domain.models import (
    Company,
    Contact,
    Interaction,
    Process,
    ProcessNote,
)
from jobcrm.domain.rules import ValidationError

__all__ = [
    "Company",
    "Contact",
    "Interaction",
    "Process",
    "ProcessNote",
    "ValidationError",
]
