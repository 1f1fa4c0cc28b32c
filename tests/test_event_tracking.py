"""
Tests for the event tracking system: privacy helpers, payload models and
the tracker itself.
"""

from datetime import datetime
from unittest.mock import MagicMock

import pytest
import requests
from pydantic import ValidationError

from app.event_tracking.event_tracker import EventTracker
from app.event_tracking.event_types import EventType
from app.event_tracking.geo import CountryResolver
from app.event_tracking.models import Event, EventPayload, TrackResult
from app.event_tracking.privacy import anonymize_ip, is_private_ip, is_bot, classify_device
from portfolio_store.event_log import EventLogStore
from portfolio_store.presence import PresenceTracker

CHROME_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
)
IPHONE_UA = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.0 Mobile/15E148 Safari/604.1"
)
IPAD_UA = "Mozilla/5.0 (iPad; CPU OS 16_0 like Mac OS X) AppleWebKit/605.1.15 Safari/604.1"


class TestEventTypes:
    """Test event type validation."""

    def test_valid_event_types(self):
        for event_type in ["pageview", "event", "heartbeat"]:
            assert EventType.is_valid(event_type)

    def test_invalid_event_types(self):
        for event_type in ["click", "PAGEVIEW", ""]:
            assert not EventType.is_valid(event_type)


class TestPrivacy:
    """Test address anonymization and user agent classification."""

    @pytest.mark.parametrize("ip,expected", [
        ("203.0.113.7", "203.0.0.0"),
        ("8.8.4.4", "8.8.0.0"),
        ("::ffff:198.51.100.23", "198.51.0.0"),
        ("2001:db8:85a3:8d3:1319:8a2e:370:7348", "2001:db8:85a3:8d3::"),
        ("2001:0db8:0000:0042::1", "2001:db8:0:42::"),
        ("2001:db8::1", "2001:db8:0:0::"),
        ("", ""),
    ])
    def test_anonymize_ip(self, ip, expected):
        assert anonymize_ip(ip) == expected

    def test_anonymized_ipv4_ends_with_zero_octets(self):
        assert anonymize_ip("192.0.2.255").endswith(".0.0")

    def test_private_addresses(self):
        assert is_private_ip("127.0.0.1")
        assert is_private_ip("10.1.2.3")
        assert is_private_ip("192.168.0.10")
        assert is_private_ip("::1")
        assert is_private_ip("garbage")
        assert not is_private_ip("8.8.8.8")

    def test_bot_detection(self):
        assert is_bot("Googlebot/2.1 (+http://www.google.com/bot.html)")
        assert is_bot("curl/8.4.0")
        assert is_bot("facebookexternalhit/1.1")
        assert not is_bot(CHROME_UA)
        assert not is_bot("")

    def test_device_classification(self):
        assert classify_device(CHROME_UA) == "desktop"
        assert classify_device(IPHONE_UA) == "mobile"
        assert classify_device(IPAD_UA) == "tablet"
        assert classify_device("Mozilla/5.0 (Linux; Android 14; SM-X710) AppleWebKit/537.36") == "tablet"
        assert classify_device("Mozilla/5.0 (Linux; Android 14; Pixel 8) Mobile Safari/537.36") == "mobile"


class TestEventModels:
    """Test event data models."""

    def test_payload_defaults(self):
        payload = EventPayload.model_validate({})
        assert payload.type == "pageview"
        assert payload.path == "/"
        assert payload.dpr == 1
        assert payload.dnt is False
        assert payload.utm_dict() is None

    def test_null_fields_take_defaults(self):
        payload = EventPayload.model_validate({"path": None, "referrer": None, "dpr": None})
        assert payload.path == "/"
        assert payload.referrer == ""
        assert payload.dpr == 1

    def test_invalid_field_types_are_rejected(self):
        with pytest.raises(ValidationError):
            EventPayload.model_validate({"data": "not an object"})
        with pytest.raises(ValidationError):
            EventPayload.model_validate({"dpr": "retina"})

    def test_utm_dict_drops_empty_values(self):
        payload = EventPayload.model_validate({"utm": {"source": "newsletter", "medium": "", "foo": "bar"}})
        assert payload.utm_dict() == {"source": "newsletter"}

    def test_event_serialization(self):
        event = Event(ts="2025-01-01T00:00:00+01:00", type="pageview", path="/blog", ip="203.0.0.0")

        event_dict = event.to_dict()
        assert event_dict["path"] == "/blog"
        assert event_dict["country"] is None
        assert "data" not in event_dict

    def test_track_result_body(self):
        assert TrackResult(success=True).to_dict() == {"success": True}
        assert TrackResult(success=True, skipped=True, message="Do Not Track").to_dict() == {
            "success": True, "skipped": True, "message": "Do Not Track"
        }


class TestCountryResolver:
    """Test the best-effort geolocation lookup."""

    def _resolver(self, response=None, error=None):
        session = MagicMock()
        if error is not None:
            session.get.side_effect = error
        else:
            session.get.return_value = response
        return CountryResolver("http://geo.test/json/{ip}", timeout_sec=1.0, session=session), session

    def _response(self, status_code=200, body=None):
        response = MagicMock()
        response.status_code = status_code
        response.json.return_value = body
        return response

    def test_successful_lookup(self):
        resolver, session = self._resolver(self._response(body={"status": "success", "countryCode": "DE"}))

        assert resolver.resolve("8.8.8.8") == "DE"
        args, kwargs = session.get.call_args
        assert args[0] == "http://geo.test/json/8.8.8.8"
        assert kwargs["timeout"] == 1.0

    def test_failed_status(self):
        resolver, _ = self._resolver(self._response(body={"status": "fail"}))
        assert resolver.resolve("8.8.8.8") is None

    def test_http_error(self):
        resolver, _ = self._resolver(self._response(status_code=429))
        assert resolver.resolve("8.8.8.8") is None

    def test_timeout(self):
        resolver, _ = self._resolver(error=requests.Timeout("slow"))
        assert resolver.resolve("8.8.8.8") is None

    def test_private_address_is_not_looked_up(self):
        resolver, session = self._resolver(self._response(body={"status": "success", "countryCode": "DE"}))
        assert resolver.resolve("192.168.1.1") is None
        session.get.assert_not_called()

    def test_disabled(self):
        session = MagicMock()
        resolver = CountryResolver(enabled=False, session=session)
        assert resolver.resolve("8.8.8.8") is None
        session.get.assert_not_called()


class TestEventTracker:
    """Test the ingestion pipeline."""

    RECEIVED_AT = datetime(2025, 6, 1, 12, 0, 0)

    @pytest.fixture
    def event_log(self, tmp_path):
        return EventLogStore(tmp_path / "analytics")

    @pytest.fixture
    def presence(self, tmp_path):
        return PresenceTracker(tmp_path / "analytics" / "active.json")

    @pytest.fixture
    def tracker(self, event_log, presence):
        resolver = MagicMock()
        resolver.resolve.return_value = "DE"
        return EventTracker(event_log, presence, resolver)

    def _records(self, event_log):
        return list(event_log.read_day(self.RECEIVED_AT.date()))

    def _process(self, tracker, data, ip="203.0.113.7", ua=CHROME_UA):
        return tracker.process_event_payload(
            EventPayload.model_validate(data), client_ip=ip, user_agent=ua, received_at=self.RECEIVED_AT
        )

    def test_pageview_is_stored(self, tracker, event_log):
        result = self._process(tracker, {"type": "pageview", "path": "/blog", "uuid": "u1"})

        assert result.success and not result.skipped
        records = self._records(event_log)
        assert len(records) == 1
        record = records[0]
        assert record["path"] == "/blog"
        assert record["uuid"] == "u1"
        assert record["ip"] == "203.0.0.0"
        assert record["country"] == "DE"
        assert record["ua"] == CHROME_UA
        assert record["device"] == "desktop"
        assert record["ts"].startswith("2025-06-01T12:00:00")

    def test_original_ip_is_never_stored(self, tracker, event_log):
        self._process(tracker, {"path": "/"}, ip="198.51.100.23")
        assert "198.51.100.23" not in event_log.day_file(self.RECEIVED_AT.date()).read_text()

    def test_client_values_win_over_request(self, tracker, event_log):
        self._process(tracker, {
            "ts": "2025-06-01T10:00:00Z",
            "ua": IPHONE_UA,
            "device": "tablet",
            "data": {"entry": True},
            "utm": {"source": "newsletter"},
        })
        record = self._records(event_log)[0]
        assert record["ts"] == "2025-06-01T10:00:00Z"
        assert record["ua"] == IPHONE_UA
        assert record["device"] == "tablet"
        assert record["data"] == {"entry": True}
        assert record["utm"] == {"source": "newsletter"}

    def test_do_not_track_is_skipped(self, tracker, event_log):
        result = self._process(tracker, {"path": "/blog", "dnt": True})

        assert result.to_dict() == {"success": True, "skipped": True, "message": "Do Not Track"}
        assert self._records(event_log) == []

    def test_admin_pageview_is_skipped(self, tracker, event_log):
        result = self._process(tracker, {"path": "/admin/galleries"})
        assert result.skipped
        assert self._records(event_log) == []

    def test_bot_is_skipped(self, tracker, event_log):
        result = self._process(tracker, {"path": "/"}, ua="Googlebot/2.1")
        assert result.skipped
        assert self._records(event_log) == []

    def test_unknown_type_is_skipped(self, tracker, event_log):
        result = self._process(tracker, {"type": "click"})
        assert result.skipped
        assert self._records(event_log) == []

    def test_custom_event_is_stored(self, tracker, event_log):
        self._process(tracker, {"type": "event", "data": {"name": "lightbox_open"}})
        assert self._records(event_log)[0]["type"] == "event"

    def test_heartbeat_updates_presence_only(self, tracker, event_log, presence):
        result = self._process(tracker, {"type": "heartbeat", "uuid": "u1"})

        assert result.success
        assert "u1" in presence.load()
        assert self._records(event_log) == []

    def test_heartbeat_without_uuid_is_skipped(self, tracker, presence):
        result = self._process(tracker, {"type": "heartbeat"})
        assert result.skipped
        assert presence.load() == {}

    def test_write_failure_returns_500(self, tracker, event_log):
        event_log.append_event = MagicMock(side_effect=PermissionError("read-only"))

        result = self._process(tracker, {"path": "/"})
        assert not result.success
        assert result.status_code == 500
