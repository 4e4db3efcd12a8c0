import inspect
import logging
from abc import ABC
from enum import IntEnum
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, Optional, Union

from ..common.exceptions import ModuleError
from ..core.documents import ModuleDocument, ModuleType
from . import events
from .session import ModuleSession

if TYPE_CHECKING:
    from ..core.context import ServiceContext

logger = logging.getLogger(__name__)

EventHandler = Callable[[Any], Union[None, Awaitable[None]]]


class ModuleStatus(IntEnum):
    OFFLINE = 0
    ONLINE = 1


class Module(ABC):
    """A connected device known to the server.

    A module mirrors one persisted `ModuleDocument` and is bound to at most
    one transport session at a time. It is ONLINE exactly while that
    session is bound and open.

    Subclasses declare their inbound events in `register_listeners()` and
    re-send their stored state to a freshly connected device in `replay()`.
    """

    module_type: ModuleType

    def __init__(self, context: "ServiceContext", document: ModuleDocument):
        if document.id is None:
            raise ValueError("Module document must be persisted first")
        self.context = context
        self._doc = document
        self._session: Optional[ModuleSession] = None
        self._listeners: Dict[str, EventHandler] = {}

    # Identity and persisted state

    @property
    def id(self) -> str:
        return self._doc.id

    @property
    def type(self) -> ModuleType:
        return self._doc.type

    @property
    def name(self) -> Optional[str]:
        return self._doc.name

    @name.setter
    def name(self, value: Optional[str]) -> None:
        self._doc.name = value

    @property
    def token(self) -> Optional[str]:
        return self._doc.token

    @property
    def validated(self) -> bool:
        return self._doc.validated

    @property
    def metadata(self) -> Dict[str, Any]:
        return dict(self._doc.metadata)

    @property
    def document(self) -> ModuleDocument:
        return self._doc

    @property
    def full_name(self) -> str:
        return f"{self.name} ({self.id})" if self.name else self.id

    # Session binding

    @property
    def session(self) -> Optional[ModuleSession]:
        return self._session

    @property
    def is_online(self) -> bool:
        return self._session is not None and not self._session.closed

    @property
    def status(self) -> ModuleStatus:
        return ModuleStatus.ONLINE if self.is_online else ModuleStatus.OFFLINE

    def connect(self, session: ModuleSession) -> None:
        """Bind a transport session and replay the stored state to the device"""
        if self.is_online:
            raise ModuleError("Module is already online")
        if self._session is not None:
            # Peer went away without a disconnect event yet
            self._unbind()

        self._session = session
        self._listeners = {}
        self.register_listeners()
        self.replay()
        logger.info(f"Module {self.full_name} connected")

    def disconnect(self) -> None:
        """Unbind and close the current session, if any"""
        if self._session is None:
            return
        session = self._unbind()
        session.disconnect()
        logger.info(f"Module {self.full_name} disconnected")

    def _unbind(self) -> ModuleSession:
        session = self._session
        for event_name in self._listeners:
            session.remove_all_listeners(event_name)
        self._listeners = {}
        self._session = None
        return session

    def send(self, event_name: str, data: Any = None) -> None:
        if not self.is_online:
            raise ModuleError("Module is offline")
        event = events.module_event(self.type, event_name)
        self._session.emit(event, data)
        logger.debug(f"Sent {event} to {self.full_name}: {data}")

    def listening(self, event_name: str, handler: EventHandler) -> None:
        if not self.is_online:
            raise ModuleError("Module is offline")
        event = events.module_event(self.type, event_name)
        session = self._session

        async def guarded(data: Any) -> None:
            if not self.validated:
                session.emit(
                    events.ERROR,
                    events.error_payload(events.ErrorCode.MODULE_NOT_VALIDATED),
                )
                return
            try:
                result = handler(data)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(
                    f"Handler for {event} on {self.full_name} failed: {e}", exc_info=True
                )
                session.emit(
                    events.ERROR, events.error_payload(events.ErrorCode.MODULE_ERROR)
                )

        self._listeners[event] = guarded
        session.on(event, guarded)

    def register_listeners(self) -> None:
        """Declare inbound event handlers; called on every connect"""
        pass

    def replay(self) -> None:
        """Re-send stored state to the device; called on every connect"""
        pass

    # Persistence

    async def save(self) -> None:
        self._doc = await self.context.store.modules.save(self._doc)

    async def generate_token(self) -> str:
        token = self.context.crypto.generate_token(
            self.context.config.modules.token_length
        )
        self._doc.token = token
        await self.save()
        logger.info(f"Generated a new token for module {self.full_name}")
        return token

    async def validate(self) -> None:
        if self._doc.validated:
            return
        self._doc.validated = True
        await self.save()
        logger.info(f"Module {self.full_name} validated")

    async def invalidate(self) -> None:
        if not self._doc.validated:
            return
        self._doc.validated = False
        await self.save()
        logger.info(f"Module {self.full_name} invalidated")

    async def update_metadata(self, values: Dict[str, Any]) -> None:
        self._doc.metadata.update(values)
        await self.save()

    def to_summary(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": int(self.type),
            "typeName": self.type.display_name,
            "name": self.name,
            "validated": self.validated,
            "status": int(self.status),
            "createdAt": self._doc.created_at.isoformat(),
            "updatedAt": self._doc.updated_at.isoformat(),
        }

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(id={self.id!r}, "
            f"validated={self.validated}, status={self.status.name})"
        )
