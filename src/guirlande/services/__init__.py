from .crypto import CryptoService
from .guirlande import GuirlandeService

__all__ = ["CryptoService", "GuirlandeService"]
