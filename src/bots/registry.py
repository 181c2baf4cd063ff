"""
Process-wide table of bots, looked up by name.

Lifetime: register everything at start-up, then `freeze()` before the first match begins. From then on the
registry is read-only. Lookups are plain dict reads and need no lock; registration takes one so concurrent
start-up code cannot interleave.
"""

import logging
import threading

from src.bots.bot import Bot
from src.bots.random_bot import RandomBot
from src.core.exceptions import BotNotFoundError, RegistryFrozenError

logger = logging.getLogger(__name__)


class BotRegistry:
    def __init__(self) -> None:
        self._bots: dict[str, Bot] = {}
        self._lock = threading.Lock()
        self._frozen = False

    def register(self, name: str, bot: Bot) -> None:
        """A second registration under the same name replaces the first one."""
        with self._lock:
            if self._frozen:
                raise RegistryFrozenError(
                    f"Cannot register bot {name!r}: registry is frozen"
                )
            if name in self._bots:
                logger.warning("Bot %r registered twice, replacing it", name)
            self._bots[name] = bot
        logger.debug("Registered bot %r", name)

    def with_bot(self, bot: Bot) -> "BotRegistry":
        """Register under the bot's own name. Returns the registry, so calls can be chained."""
        self.register(bot.name, bot)
        return self

    def lookup(self, name: str) -> Bot:
        try:
            return self._bots[name]
        except KeyError:
            available = ", ".join(self.names())
            raise BotNotFoundError(
                f"Bot not found: {name!r}, available bots: [{available}]"
            ) from None

    def names(self) -> list[str]:
        return sorted(self._bots)

    def freeze(self) -> None:
        with self._lock:
            self._frozen = True

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    def __contains__(self, name: object) -> bool:
        return name in self._bots


def create_default_registry() -> BotRegistry:
    """Registry with the built-in bots, frozen and ready to be shared by every match."""
    registry = BotRegistry().with_bot(RandomBot())
    registry.freeze()
    return registry
