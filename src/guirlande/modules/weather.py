import logging
from typing import Any, Dict, Optional

from ..core.documents import ModuleType
from .base import Module

logger = logging.getLogger(__name__)

API_KEY = "apiKey"
LATITUDE = "lat"
LONGITUDE = "lon"


class WeatherModule(Module):
    """Weather station fetching readings with a configured API key and location"""

    module_type = ModuleType.WEATHER

    def __init__(self, context, document):
        super().__init__(context, document)
        self.last_reading: Optional[Dict[str, Any]] = None

    async def send_api_key(self, api_key: str) -> None:
        self.send("api-key", {"apiKey": api_key})
        await self.update_metadata({API_KEY: api_key})

    async def send_location(self, lat: float, lon: float) -> None:
        self.send("location", {"lat": lat, "lon": lon})
        await self.update_metadata({LATITUDE: lat, LONGITUDE: lon})

    def register_listeners(self) -> None:
        self.listening("weather", self._on_weather)

    def replay(self) -> None:
        metadata = self.metadata
        if metadata.get(API_KEY):
            self.send("api-key", {"apiKey": metadata[API_KEY]})
        lat, lon = metadata.get(LATITUDE), metadata.get(LONGITUDE)
        if lat is not None and lon is not None:
            self.send("location", {"lat": lat, "lon": lon})

    def _on_weather(self, data: Dict[str, Any]) -> None:
        self.last_reading = data
        logger.info(f"Weather reading from {self.full_name}: {data}")
