"""Module handshake over real-time sessions.

A device opens a session and sends `module.connect {token}`. Once the token
resolves to a validated module the session is bound to it; every other event
is handled by the module itself.
"""

import logging
from typing import TYPE_CHECKING, Any

from . import events
from .events import ErrorCode
from .session import ModuleSession

if TYPE_CHECKING:
    from ..core.context import ServiceContext

logger = logging.getLogger(__name__)

MODULE_ID = "module_id"


class ModuleWebSocket:
    def __init__(self, context: "ServiceContext"):
        self.context = context

    def attach(self, session: ModuleSession) -> None:
        """Register the handshake handler on a new session"""
        session.on(events.CONNECT, lambda payload: self.handle_connect(session, payload))

    async def handle_connect(self, session: ModuleSession, payload: Any) -> None:
        try:
            token = payload.get("token") if isinstance(payload, dict) else None
            if not isinstance(token, str) or MODULE_ID in session.data:
                logger.warning("Rejected module handshake: malformed or already bound")
                self._error(session, ErrorCode.MODULE_ERROR)
                return

            module = self.context.modules.find_by_token(token)
            if module is None:
                logger.warning("Rejected module handshake: unknown token")
                self._error(session, ErrorCode.MODULE_NOT_FOUND)
                return
            if not module.validated:
                logger.warning(f"Rejected handshake from unvalidated module {module.full_name}")
                self._error(session, ErrorCode.MODULE_NOT_VALIDATED)
                return

            previous = module.session
            if previous is not None and previous is not session:
                previous.data.pop(MODULE_ID, None)
                module.disconnect()
                logger.info(f"Module {module.full_name} replaced its previous session")

            module.connect(session)
            session.data[MODULE_ID] = module.id
            session.emit(events.CONNECT, {"status": int(module.status)})
        except Exception as e:
            logger.error(f"Module handshake failed: {e}", exc_info=True)
            self._error(session, ErrorCode.MODULE_ERROR)

    def handle_disconnect(self, session: ModuleSession) -> None:
        module_id = session.data.pop(MODULE_ID, None)
        if module_id is None:
            return
        module = self.context.modules.find(module_id)
        if module is not None and module.session is session:
            module.disconnect()

    @staticmethod
    def _error(session: ModuleSession, code: ErrorCode) -> None:
        session.emit(events.ERROR, events.error_payload(code))
