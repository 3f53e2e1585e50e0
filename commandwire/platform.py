"""Chat platform abstractions consumed by the dispatcher.

The engine never talks to a concrete chat client. Adapters for a real
platform implement the Session protocol and translate their native
payloads into the small value types below.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Protocol, runtime_checkable


class ChannelType(str, Enum):
    """Kinds of channels a message can arrive in."""
    GUILD_TEXT = "guild_text"
    DM = "dm"
    GROUP_DM = "group_dm"
    GUILD_VOICE = "guild_voice"
    GUILD_NEWS = "guild_news"
    GUILD_THREAD = "guild_thread"

    @property
    def is_direct(self) -> bool:
        return self in (ChannelType.DM, ChannelType.GROUP_DM)


class EventType(str, Enum):
    """Session events the dispatcher subscribes to."""
    MESSAGE_CREATE = "message_create"
    MESSAGE_UPDATE = "message_update"


@dataclass(frozen=True)
class User:
    id: str
    username: str = ""
    bot: bool = False


@dataclass(frozen=True)
class Member:
    """Guild-specific view of a message author."""
    user: User
    nick: str = ""
    roles: tuple = ()


@dataclass(frozen=True)
class Message:
    """An inbound chat message.

    Attributes:
        guild_id: Empty for direct messages.
        author: None for system messages, which are never dispatched.
    """
    id: str
    channel_id: str
    content: str
    author: Optional[User] = None
    guild_id: str = ""
    member: Optional[Member] = None


@dataclass(frozen=True)
class Channel:
    id: str
    type: ChannelType = ChannelType.GUILD_TEXT
    guild_id: str = ""
    name: str = ""


@dataclass(frozen=True)
class Guild:
    id: str
    name: str = ""


# Event callback: async (session, message) -> None
MessageHandler = Callable[["Session", Message], Awaitable[None]]


@runtime_checkable
class Session(Protocol):
    """Connection to a chat platform.

    state_* lookups hit the local cache and return None on a miss;
    fetch_* lookups go to the network and raise on failure.
    """

    @property
    def user_id(self) -> str:
        """ID of the account this session is logged in as."""
        ...

    def add_handler(self, event: EventType, handler: MessageHandler) -> Callable[[], None]:
        """Subscribe to an event; returns a callable that unsubscribes."""
        ...

    def state_channel(self, channel_id: str) -> Optional[Channel]: ...

    async def fetch_channel(self, channel_id: str) -> Channel: ...

    def state_guild(self, guild_id: str) -> Optional[Guild]: ...

    async def fetch_guild(self, guild_id: str) -> Guild: ...

    async def delete_message(self, channel_id: str, message_id: str) -> None: ...

    async def send_message(self, channel_id: str, content: str) -> Any: ...
