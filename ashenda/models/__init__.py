from ashenda.models.nominee import Nominee
from ashenda.models.setting import Setting
from ashenda.models.vote import Vote

__all__ = [
    "Nominee",
    "Setting",
    "Vote",
]
