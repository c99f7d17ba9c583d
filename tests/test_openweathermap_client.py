import unittest

import requests

from weather_controller.config import Settings
from weather_controller.errors import ProviderStatusError, TransportError
from weather_controller.provider.openweathermap_client import OpenWeatherMapClient


class DummyResp:
    def __init__(self, content=b"{}", status_code=200, url="https://example.test/weather"):
        self.content = content
        self.text = content.decode("utf-8")
        self.status_code = status_code
        self.url = url


class RecordingSession:
    def __init__(self, response=None, exc=None):
        self.response = response or DummyResp()
        self.exc = exc
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append({"url": url, "params": params, "timeout": timeout})
        if self.exc is not None:
            raise self.exc
        return self.response


class TestOpenWeatherMapClient(unittest.TestCase):
    def test_fetch_current_sends_query_and_returns_body(self):
        session = RecordingSession(DummyResp(b'{"name": "Chicago"}'))
        client = OpenWeatherMapClient(session, base_url="https://example.test/weather/")

        body = client.fetch_current("41.88", "-87.63", "tok")

        self.assertEqual(body, b'{"name": "Chicago"}')
        call = session.calls[0]
        self.assertEqual(call["url"], "https://example.test/weather")
        self.assertEqual(
            call["params"],
            {"lat": "41.88", "lon": "-87.63", "units": "imperial", "appid": "tok"},
        )
        self.assertEqual(call["timeout"], 10.0)

    def test_timeout_is_bounded_by_caller(self):
        session = RecordingSession()
        client = OpenWeatherMapClient(session, timeout=10.0)

        client.fetch_current("1", "2", "tok", timeout=2.5)
        client.fetch_current("1", "2", "tok", timeout=30.0)

        self.assertEqual(session.calls[0]["timeout"], 2.5)
        self.assertEqual(session.calls[1]["timeout"], 10.0)

    def test_non_200_raises_provider_status_error(self):
        for code in (401, 404, 429, 500):
            with self.subTest(code=code):
                session = RecordingSession(DummyResp(b'{"cod": %d}' % code, status_code=code))
                client = OpenWeatherMapClient(session)
                with self.assertRaises(ProviderStatusError) as ctx:
                    client.fetch_current("1", "2", "tok")
                self.assertEqual(ctx.exception.code, code)
                self.assertEqual(ctx.exception.reason, "WeatherAPI")

    def test_network_failure_raises_transport_error_without_token(self):
        exc = requests.ConnectionError("Max retries exceeded with url: /weather?appid=supersecret")
        client = OpenWeatherMapClient(RecordingSession(exc=exc))

        with self.assertRaises(TransportError) as ctx:
            client.fetch_current("1", "2", "supersecret")

        self.assertNotIn("supersecret", str(ctx.exception))
        self.assertIs(ctx.exception.__cause__, exc)

    def test_timeout_raises_transport_error(self):
        client = OpenWeatherMapClient(RecordingSession(exc=requests.Timeout("read timed out")))
        with self.assertRaises(TransportError):
            client.fetch_current("1", "2", "tok")

    def test_from_settings(self):
        settings = Settings(provider_url="http://weather.local/api", unit_system="metric", request_timeout_seconds=3)
        client = OpenWeatherMapClient.from_settings(settings, session=RecordingSession())
        self.assertEqual(client.base_url, "http://weather.local/api")
        self.assertEqual(client.units, "metric")
        self.assertEqual(client.timeout, 3)


if __name__ == "__main__":
    unittest.main()
