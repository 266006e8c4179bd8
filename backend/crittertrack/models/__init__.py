# Importing every model registers its table on Base.metadata
from crittertrack.models.animal import Animal
from crittertrack.models.litter import Litter
from crittertrack.models.user import User

__all__ = ["Animal", "Litter", "User"]
