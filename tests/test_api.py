import unittest

import httpx
from fastapi.testclient import TestClient

from medfinder.main import app, get_geocoder
from medfinder.services.geocoding import ReverseGeocoder


class TestApi(unittest.TestCase):
    def setUp(self):
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.clear()

    def test_health(self):
        self.assertEqual(self.client.get("/api/v1/health").json(), {"status": "ok"})

    def test_symptom_search(self):
        body = self.client.get("/api/v1/symptoms", params={"q": "COUGH"}).json()
        self.assertEqual(body["count"], 1)
        self.assertEqual(body["items"][0]["name"], "Cough")

    def test_disease_detail(self):
        self.assertEqual(self.client.get("/api/v1/diseases/2").json()["name"], "Migraine")
        self.assertEqual(self.client.get("/api/v1/diseases/999").status_code, 404)

    def test_predict_ranks_and_annotates(self):
        payload = {"symptom_ids": [3], "location": {"latitude": 40.7128, "longitude": -74.0060}}
        body = self.client.post("/api/v1/predict", json=payload).json()

        names = [item["result"]["disease"]["name"] for item in body["items"]]
        self.assertEqual(names, ["Migraine", "Influenza"])
        self.assertEqual(body["items"][0]["symptom_names"], ["Headache", "Nausea", "Sensitivity to light"])

        influenza = body["items"][1]["result"]
        self.assertEqual(influenza["confidence"], 62.5)
        specialists = influenza["disease"]["specialists"]
        self.assertEqual(specialists[0]["name"], "Dr. Neha Kulkarni")
        self.assertEqual(specialists[0]["distance"], 0.0)

    def test_predict_without_symptoms(self):
        body = self.client.post("/api/v1/predict", json={"symptom_ids": []}).json()
        self.assertEqual(body, {"count": 0, "items": []})

    def test_describe_location_falls_back(self):
        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        app.dependency_overrides[get_geocoder] = lambda: ReverseGeocoder(
            "https://geocoder.example/reverse", user_agent="test", transport=httpx.MockTransport(handler)
        )
        resp = self.client.get("/api/v1/location/describe", params={"lat": 12.345, "lon": 98.765})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"address": "12.3450, 98.7650"})

    def test_describe_location_rejects_out_of_range(self):
        resp = self.client.get("/api/v1/location/describe", params={"lat": 91, "lon": 0})
        self.assertEqual(resp.status_code, 422)


if __name__ == "__main__":
    unittest.main()
