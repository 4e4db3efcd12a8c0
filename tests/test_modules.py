import pytest

from guirlande.common.exceptions import ConfigurationError, ModuleError
from guirlande.core.documents import ModuleType
from guirlande.modules.base import ModuleStatus
from guirlande.modules.loop import Loop
from guirlande.modules.registry import MODULE_CLASSES, create_module
from guirlande.modules.testing import TestModule

from conftest import FakeSession


class FailingModule(TestModule):
    def register_listeners(self) -> None:
        self.listening("data", self._boom)

    def _boom(self, data):
        raise RuntimeError("boom")


class TestModuleSession:
    """Test binding modules to transport sessions"""

    async def test_connect_binds_session(self, led_strip, session):
        led_strip.connect(session)
        assert led_strip.status is ModuleStatus.ONLINE
        assert led_strip.session is session

    async def test_connect_twice_rejected(self, led_strip, session):
        led_strip.connect(session)
        with pytest.raises(ModuleError, match="already online"):
            led_strip.connect(FakeSession())
        assert led_strip.session is session

    async def test_send_offline_rejected(self, led_strip):
        with pytest.raises(ModuleError, match="offline"):
            led_strip.send("color", {"red": 1, "green": 2, "blue": 3})

    async def test_listening_offline_rejected(self, weather):
        with pytest.raises(ModuleError, match="offline"):
            weather.listening("weather", lambda data: None)

    async def test_send_namespaces_event(self, context, session):
        module = await context.modules.create(ModuleType.SHUTTER)
        await module.validate()
        module.connect(session)
        module.up()
        module.stop()
        assert session.emitted == [("module.1.up", None), ("module.1.stop", None)]

    async def test_disconnect_offline_is_noop(self, led_strip):
        led_strip.disconnect()
        assert led_strip.status is ModuleStatus.OFFLINE

    async def test_disconnect_closes_and_unregisters(self, weather, session):
        weather.connect(session)
        assert session.listeners("module.2.weather")

        weather.disconnect()

        assert weather.status is ModuleStatus.OFFLINE
        assert weather.session is None
        assert session.closed
        assert session.listeners("module.2.weather") == []

    async def test_reconnect_after_disconnect(self, led_strip, session):
        led_strip.connect(session)
        led_strip.disconnect()
        second = FakeSession()
        led_strip.connect(second)
        assert led_strip.session is second

    async def test_peer_gone_counts_as_offline(self, led_strip, session):
        led_strip.connect(session)
        session.drop_peer()
        assert led_strip.status is ModuleStatus.OFFLINE
        led_strip.connect(FakeSession())
        assert led_strip.is_online


class TestModuleListeners:
    """Test inbound event handling"""

    async def test_weather_reading_kept(self, weather, session):
        weather.connect(session)
        await session.dispatch("module.2.weather", {"Value": 12.5, "Unit": "C"})
        assert weather.last_reading == {"Value": 12.5, "Unit": "C"}

    async def test_unvalidated_module_events_refused(self, weather, session):
        weather.connect(session)
        await weather.invalidate()

        await session.dispatch("module.2.weather", {"Value": 1, "Unit": "C"})

        assert weather.last_reading is None
        assert session.events("module.error") == [{"error": "MODULE_NOT_VALIDATED"}]

    async def test_handler_failure_reported(self, context, session):
        doc = await context.store.modules.create({"type": ModuleType.TEST, "validated": True})
        module = FailingModule(context, doc)
        module.connect(session)

        await session.dispatch("module.3.data", {"x": 1})

        assert session.events("module.error") == [{"error": "MODULE_ERROR"}]
        assert not session.closed
        assert module.is_online


class TestModulePersistence:
    """Test module state persistence"""

    async def test_validate_is_idempotent(self, context):
        module = await context.modules.create(ModuleType.LED_STRIP)
        writes = context.store.modules.writes

        await module.validate()
        await module.validate()

        assert module.validated
        assert context.store.modules.writes == writes + 1
        stored = await context.store.modules.find_by_id(module.id)
        assert stored.validated

    async def test_invalidate_is_idempotent(self, led_strip, context):
        writes = context.store.modules.writes
        await led_strip.invalidate()
        await led_strip.invalidate()
        assert not led_strip.validated
        assert context.store.modules.writes == writes + 1

    async def test_invalidate_when_never_validated_writes_nothing(self, context):
        module = await context.modules.create(ModuleType.LED_STRIP)
        writes = context.store.modules.writes
        await module.invalidate()
        assert context.store.modules.writes == writes

    async def test_generate_token(self, led_strip, context):
        old = led_strip.token
        new = await led_strip.generate_token()
        assert new != old
        assert len(new) == context.config.modules.token_length
        assert context.modules.find_by_token(old) is None
        assert context.modules.find_by_token(new) is led_strip

    async def test_name_is_persisted_on_save(self, led_strip, context):
        led_strip.name = "Salon"
        await led_strip.save()
        stored = await context.store.modules.find_by_id(led_strip.id)
        assert stored.name == "Salon"
        assert led_strip.full_name == f"Salon ({led_strip.id})"

    async def test_summary_hides_token(self, led_strip):
        summary = led_strip.to_summary()
        assert "token" not in summary
        assert summary["type"] == 0
        assert summary["typeName"] == "Led strip"
        assert summary["validated"] is True
        assert summary["status"] == 0

    async def test_unknown_type_rejected_by_factory(self, context, monkeypatch):
        doc = await context.store.modules.create({"type": ModuleType.SHUTTER})
        monkeypatch.delitem(MODULE_CLASSES, ModuleType.SHUTTER)
        with pytest.raises(ConfigurationError):
            create_module(context, doc)


class TestLedStripModule:
    """Test LED strip commands and replay"""

    async def test_send_color_stores_metadata(self, led_strip, session):
        led_strip.connect(session)
        await led_strip.send_color(10, 20, 30)
        assert session.events("module.0.color") == [{"red": 10, "green": 20, "blue": 30}]
        assert led_strip.metadata["currentColor"] == {"red": 10, "green": 20, "blue": 30}

    async def test_send_color_offline_stores_nothing(self, led_strip):
        with pytest.raises(ModuleError):
            await led_strip.send_color(10, 20, 30)
        assert "currentColor" not in led_strip.metadata

    async def test_send_loop(self, led_strip, session):
        led_strip.connect(session)
        await led_strip.send_loop(Loop().color(1, 2, 3).wait(100))
        await led_strip.send_loop(None)
        assert session.events("module.0.loop") == [{"loop": "c(1,2,3)|w(100)"}, {"loop": None}]
        assert led_strip.metadata["currentLoop"] is None

    async def test_replay_on_reconnect(self, led_strip, session):
        led_strip.connect(session)
        await led_strip.send_color(1, 2, 3)
        await led_strip.send_loop(Loop().wait(5))
        led_strip.disconnect()

        second = FakeSession()
        led_strip.connect(second)

        assert second.emitted == [
            ("module.0.color", {"red": 1, "green": 2, "blue": 3}),
            ("module.0.loop", {"loop": "w(5)"}),
        ]


class TestWeatherModule:
    """Test weather station configuration and replay"""

    async def test_replay_api_key_then_location(self, weather, session):
        weather.connect(session)
        await weather.send_api_key("abc")
        await weather.send_location(48.85, 2.35)
        weather.disconnect()

        second = FakeSession()
        weather.connect(second)

        assert second.emitted == [
            ("module.2.api-key", {"apiKey": "abc"}),
            ("module.2.location", {"lat": 48.85, "lon": 2.35}),
        ]

    async def test_no_replay_without_metadata(self, weather, session):
        weather.connect(session)
        assert session.emitted == []
