"""Quick in-process smoke run of the tracking gateway."""

import json

from fastapi.testclient import TestClient

from linktrace.api.gateway import app

with TestClient(app) as client:
    print("=" * 60)
    print("Testing POST /generate")
    print("=" * 60)

    response = client.post("/generate", json={"target_url": "https://example.com"})
    print(f"\nStatus code: {response.status_code}")
    tracking_url = response.json()["trackingUrl"]
    page_id = tracking_url.rsplit("/", 1)[-1]
    print(f"Tracking URL: {tracking_url}")

    print("\n" + "=" * 60)
    print("Testing GET /track/{id} and POST /location")
    print("=" * 60)

    page = client.get(f"/track/{page_id}")
    print(f"\nLanding page: HTTP {page.status_code}, {len(page.text)} bytes")

    report = client.post("/location", json={
        "pageID": page_id,
        "deviceInfo": {
            "userAgent": "smoke-test",
            "screenWidth": 1280,
            "screenHeight": 720,
            "batteryLevel": None,
            "latitude": None,
            "longitude": None,
        },
    })
    print(f"Telemetry report: {report.json()}")

    clicks = client.get(f"/get-tracking/{page_id}").json()
    print(f"\nClicks:\n{json.dumps(clicks, indent=2)}")
    print(f"\nStatus: {client.get('/status').json()}")
