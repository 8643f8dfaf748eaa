from .base import BaseBot, BotAction
from .random_bot import RandomBot

__all__ = ["BaseBot", "BotAction", "RandomBot"]
