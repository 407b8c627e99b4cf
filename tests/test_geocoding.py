import unittest

import httpx

from medfinder.models.schemas import Coordinate
from medfinder.services.geocoding import ReverseGeocoder


URL = "https://geocoder.example/reverse"


def geocoder(handler):
    return ReverseGeocoder(URL, user_agent="Disease Information System", transport=httpx.MockTransport(handler))


class TestReverseGeocoder(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.coord = Coordinate(latitude=12.345, longitude=98.765)

    async def test_returns_display_name(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"display_name": "Main Street, Springfield"})

        self.assertEqual(await geocoder(handler).describe(self.coord), "Main Street, Springfield")
        self.assertEqual(seen[0].headers["User-Agent"], "Disease Information System")
        self.assertEqual(seen[0].url.params["lat"], "12.345")
        self.assertEqual(seen[0].url.params["lon"], "98.765")
        self.assertEqual(seen[0].url.params["format"], "json")

    async def test_unreachable_falls_back(self):
        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        with self.assertLogs("medfinder.services.geocoding", level="WARNING"):
            self.assertEqual(await geocoder(handler).describe(self.coord), "12.3450, 98.7650")

    async def test_error_status_falls_back(self):
        result = await geocoder(lambda r: httpx.Response(503)).describe(self.coord)
        self.assertEqual(result, "12.3450, 98.7650")

    async def test_missing_field_falls_back(self):
        result = await geocoder(lambda r: httpx.Response(200, json={"error": "Unable to geocode"})).describe(self.coord)
        self.assertEqual(result, "12.3450, 98.7650")

    async def test_bad_json_falls_back(self):
        result = await geocoder(lambda r: httpx.Response(200, text="<html>")).describe(self.coord)
        self.assertEqual(result, "12.3450, 98.7650")

    async def test_non_string_display_name_falls_back(self):
        result = await geocoder(lambda r: httpx.Response(200, json={"display_name": 42})).describe(self.coord)
        self.assertEqual(result, "12.3450, 98.7650")

    async def test_negative_coordinates_format(self):
        coord = Coordinate(latitude=-33.8688, longitude=151.2093)
        result = await geocoder(lambda r: httpx.Response(500)).describe(coord)
        self.assertEqual(result, "-33.8688, 151.2093")


if __name__ == "__main__":
    unittest.main()
