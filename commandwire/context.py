"""Per-dispatch context and the key/value object store.

Key classes:
    ObjectStore: Lock-protected key/value map with checked typed reads.
        Used once per Dispatcher (process wide, shared by all
        dispatches) and once per Context (private to one dispatch).
    Context: Everything a middleware or command needs about the
        message being dispatched.

Constants:
    OBJECT_KEY_HANDLER: Key under which every Context's object store
        holds the Dispatcher that created it.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Optional, Tuple, Type, TypeVar, Union

from .arguments import ArgumentList
from .exceptions import ObjectTypeError

if TYPE_CHECKING:
    from .dispatcher import Dispatcher
    from .platform import Channel, Guild, Member, Message, Session

T = TypeVar("T")

OBJECT_KEY_HANDLER = "cmdhandler"

_MISSING = object()


class ObjectStore:
    """Thread-safe string-keyed object map."""

    def __init__(self):
        self._lock = threading.Lock()
        self._objects: Dict[str, Any] = {}

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._objects.get(key, default)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._objects[key] = value

    def delete(self, key: str) -> None:
        with self._lock:
            self._objects.pop(key, None)

    def get_typed(
        self,
        key: str,
        expected: Union[Type[T], Tuple[Type[Any], ...]],
        default: Any = _MISSING,
    ) -> T:
        """Return the object stored under key, checked against expected.

        Args:
            key: Object key.
            expected: Type (or tuple of types) the value must be an
                instance of.
            default: Returned when the key is absent. Without a default
                a missing key raises KeyError.

        Raises:
            KeyError: If the key is absent and no default was given.
            ObjectTypeError: If the stored value has another type.
        """
        with self._lock:
            value = self._objects.get(key, _MISSING)
        if value is _MISSING:
            if default is _MISSING:
                raise KeyError(key)
            return default
        if not isinstance(value, expected):
            raise ObjectTypeError(key, expected, value)
        return value

    def snapshot(self) -> Dict[str, Any]:
        """Return a shallow copy that is safe to iterate."""
        with self._lock:
            return dict(self._objects)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._objects

    def __len__(self) -> int:
        with self._lock:
            return len(self._objects)


@dataclass
class Context:
    """State of a single dispatch.

    session, message, member and is_edit are set when the context is
    created. The remaining fields are filled in as dispatch progresses,
    so an error reporter may receive a context where they are still
    None:

        guild_prefix_lookup, get_channel: channel, guild, args unset
        get_guild: guild, args unset
        command_not_found, not_executable_in_dm: objects not yet seeded
        middleware, command_exec, delete_command_message: fully populated
    """

    session: "Session"
    message: "Message"
    member: Optional["Member"] = None
    is_edit: bool = False
    channel: Optional["Channel"] = None
    guild: Optional["Guild"] = None
    is_dm: bool = False
    args: Optional[ArgumentList] = None
    used_prefix: str = ""
    invoke: str = ""
    objects: ObjectStore = field(default_factory=ObjectStore, repr=False)

    @property
    def handler(self) -> "Dispatcher":
        """The dispatcher running this context.

        Raises:
            KeyError: If accessed before the context was seeded.
        """
        from .dispatcher import Dispatcher
        return self.objects.get_typed(OBJECT_KEY_HANDLER, Dispatcher)

    def get_object(self, key: str, default: Any = None) -> Any:
        return self.objects.get(key, default)

    def set_object(self, key: str, value: Any) -> None:
        self.objects.set(key, value)

    async def reply(self, content: str) -> Any:
        """Send a message to the channel the command was invoked in."""
        return await self.session.send_message(self.message.channel_id, content)
