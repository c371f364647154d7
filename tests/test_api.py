"""
API and page tests using FastAPI's TestClient.

Every test gets its own app with the travel file and upload directory in
pytest's ``tmp_path``.
"""

import json

import pytest

from conftest import FakeModel, SEONGNAM_LAT, SEONGNAM_LON, build_jpeg, gps_ifd
from travel_diary.services.title_generator import TitleGenerator

pytestmark = pytest.mark.integration

SEONGNAM_LAT_DECIMAL = 37 + 23 / 60 + 45 / 3600
SEONGNAM_LON_DECIMAL = 127 + 6 / 60 + 19 / 3600


def upload(client, files, **form):
    data = {
        "title": "Seongnam weekend",
        "description": "Walked along the stream",
        "latitude": "37.5665",
        "longitude": "126.9780",
        "tags": "walk, stream, ,spring",
    }
    data.update(form)
    return client.post("/api/upload", data=data, files=[("media", f) for f in files])


class TestHealth:

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["gemini"] == "disabled"
        assert "X-Request-ID" in response.headers

    def test_ready(self, client):
        upload(client, [])

        body = client.get("/health/ready").json()

        assert body["status"] == "ready"
        assert body["checks"]["travel_store"]["travel_count"] == 1
        assert body["checks"]["uploads"]["status"] == "healthy"

    def test_not_ready_with_corrupt_travel_file(self, client, settings):
        settings.DATA_FILE.write_text("{oops", encoding="utf-8")

        body = client.get("/health/ready").json()

        assert body["status"] == "not_ready"
        assert body["checks"]["travel_store"]["status"] == "unhealthy"


class TestUpload:

    def test_upload_extracts_gps_per_image(self, client, settings, jpeg_with_gps, jpeg_without_exif):
        response = upload(client, [
            ("gps.jpg", jpeg_with_gps, "image/jpeg"),
            ("plain.jpg", jpeg_without_exif, "image/jpeg"),
            ("notes.jpg", b"not really a jpeg", "image/jpeg"),
        ])

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        travel = body["travel"]

        assert travel["title"] == "Seongnam weekend"
        assert travel["latitude"] == pytest.approx(37.5665)
        assert travel["longitude"] == pytest.approx(126.978)
        assert travel["tags"] == ["walk", "stream", "spring"]
        assert travel["createdAt"].endswith("Z")

        first, second, third = travel["media"]
        assert [m["index"] for m in travel["media"]] == [1, 2, 3]
        assert first["originalName"] == "gps.jpg"
        assert first["latitude"] == round(SEONGNAM_LAT_DECIMAL, 6)
        assert first["longitude"] == round(SEONGNAM_LON_DECIMAL, 6)
        assert "latitude" not in second
        assert "latitude" not in third

        stored = settings.UPLOAD_DIR / first["filename"]
        assert stored.read_bytes() == jpeg_with_gps
        assert first["path"] == f"/uploads/{first['filename']}"

        saved = json.loads(settings.DATA_FILE.read_text(encoding="utf-8"))
        assert saved == [travel]

    def test_form_coordinate_is_independent_of_exif(self, client, jpeg_with_gps):
        travel = upload(
            client,
            [("gps.jpg", jpeg_with_gps, "image/jpeg")],
            latitude="35.1796",
            longitude="129.0756",
        ).json()["travel"]

        assert travel["latitude"] == pytest.approx(35.1796)
        assert travel["media"][0]["latitude"] == round(SEONGNAM_LAT_DECIMAL, 6)

    def test_defaults_and_unparsable_coordinates(self, client):
        response = client.post("/api/upload", data={"latitude": "abc", "longitude": "0"})

        travel = response.json()["travel"]
        assert travel["title"] == "Untitled"
        assert travel["description"] == ""
        assert travel["latitude"] is None
        assert travel["longitude"] is None
        assert travel["tags"] == []
        assert travel["media"] == []

    def test_video_is_not_inspected(self, client):
        travel = upload(client, [("clip.mp4", b"\x00\x00\x00\x18ftypmp42", "video/mp4")]).json()["travel"]

        assert travel["media"][0]["type"] == "video/mp4"
        assert "latitude" not in travel["media"][0]

    def test_too_many_files(self, client, settings, jpeg_without_exif):
        files = [(f"{i}.jpg", jpeg_without_exif, "image/jpeg") for i in range(settings.MAX_UPLOAD_FILES + 1)]

        response = upload(client, files)

        assert response.status_code == 400
        assert response.json()["success"] is False
        assert list(settings.UPLOAD_DIR.iterdir()) == []

    def test_corrupt_travel_file_rejects_upload(self, client, settings, jpeg_without_exif):
        upload(client, [], title="Kept")
        damaged = settings.DATA_FILE.read_text(encoding="utf-8")[:-3]
        settings.DATA_FILE.write_text(damaged, encoding="utf-8")

        response = upload(client, [("plain.jpg", jpeg_without_exif, "image/jpeg")])

        assert response.status_code == 500
        assert response.json()["success"] is False
        assert settings.DATA_FILE.read_text(encoding="utf-8") == damaged
        assert list(settings.UPLOAD_DIR.iterdir()) == []

    def test_uploaded_file_is_served(self, client, jpeg_without_exif):
        travel = upload(client, [("plain.jpg", jpeg_without_exif, "image/jpeg")]).json()["travel"]

        response = client.get(travel["media"][0]["path"])

        assert response.status_code == 200
        assert response.content == jpeg_without_exif


class TestListAndDelete:

    def test_list_travels(self, client):
        assert client.get("/api/travels").json() == []
        upload(client, [])
        upload(client, [], title="Second")

        titles = [t["title"] for t in client.get("/api/travels").json()]
        assert titles == ["Seongnam weekend", "Second"]

    def test_delete_removes_record_and_files(self, client, settings, jpeg_with_gps):
        travel = upload(client, [("gps.jpg", jpeg_with_gps, "image/jpeg")]).json()["travel"]
        stored = settings.UPLOAD_DIR / travel["media"][0]["filename"]
        assert stored.exists()

        response = client.delete(f"/api/travel/{travel['id']}")

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Travel deleted."}
        assert not stored.exists()
        assert client.get("/api/travels").json() == []

    def test_delete_unknown(self, client):
        response = client.delete("/api/travel/does-not-exist")

        assert response.status_code == 404
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Travel not found"


class TestPages:

    def test_index_lists_travels(self, client):
        assert "No travels yet" in client.get("/").text

        upload(client, [], title="Gyeongju temples")
        assert "Gyeongju temples" in client.get("/").text

    def test_add_page(self, client):
        response = client.get("/add")
        assert response.status_code == 200
        assert "/api/exif/preview" in response.text

    def test_add_page_has_map_pin(self, client):
        html = client.get("/add").text

        assert "leaflet.js" in html
        assert 'id="map"' in html
        assert 'data-lat="37.3595704"' in html
        assert "setView([gps.latitude, gps.longitude]" in html

    def test_add_page_writes_metadata_as_text(self, client):
        html = client.get("/add").text
        assert "innerHTML" not in html
        assert "textContent" in html

    def test_detail_page(self, client, jpeg_with_gps):
        travel = upload(client, [("gps.jpg", jpeg_with_gps, "image/jpeg")]).json()["travel"]

        response = client.get(f"/travel/{travel['id']}")

        assert response.status_code == 200
        assert "Seongnam weekend" in response.text
        assert travel["media"][0]["path"] in response.text

    def test_detail_page_maps_entry_and_photos(self, client, jpeg_with_gps):
        travel = upload(client, [("gps.jpg", jpeg_with_gps, "image/jpeg")]).json()["travel"]

        html = client.get(f"/travel/{travel['id']}").text

        assert 'id="map"' in html
        assert "37.5665" in html
        assert str(travel["media"][0]["latitude"]) in html

    def test_detail_page_without_coordinates_has_no_map(self, client):
        travel = upload(client, [], latitude="", longitude="").json()["travel"]

        html = client.get(f"/travel/{travel['id']}").text

        assert 'id="map"' not in html
        assert "leaflet.js" not in html

    def test_detail_page_escapes_user_text(self, client):
        travel = upload(client, [], title="<b>Night market</b>").json()["travel"]

        html = client.get(f"/travel/{travel['id']}").text

        assert "<b>Night market</b>" not in html
        assert "&lt;b&gt;Night market&lt;/b&gt;" in html

    def test_detail_page_not_found(self, client):
        response = client.get("/travel/missing-id")
        assert response.status_code == 404
        assert "missing-id" in response.text


class TestExifPreview:

    def test_preview_rounds_to_four_digits(self, client):
        image = build_jpeg(
            gps=gps_ifd(SEONGNAM_LAT, "S", SEONGNAM_LON, "E"),
            make="Apple",
        )

        response = client.post("/api/exif/preview", files={"file": ("a.jpg", image, "image/jpeg")})

        body = response.json()
        assert body["found"] is True
        assert body["latitude"] == round(-SEONGNAM_LAT_DECIMAL, 4)
        assert body["longitude"] == round(SEONGNAM_LON_DECIMAL, 4)
        assert body["make"] == "Apple"
        assert body["model"] == "Unknown"
        assert body["dateTime"] == "Unknown"

    def test_preview_without_gps(self, client, jpeg_without_exif):
        response = client.post("/api/exif/preview", files={"file": ("a.jpg", jpeg_without_exif, "image/jpeg")})

        assert response.status_code == 200
        assert response.json()["found"] is False
        assert response.json()["latitude"] is None

    def test_preview_of_non_image(self, client):
        response = client.post("/api/exif/preview", files={"file": ("a.txt", b"hello", "text/plain")})
        assert response.json()["found"] is False


class TestAiRoutes:

    def test_generate_title_without_gemini_falls_back(self, client):
        response = client.post("/api/generate-title", json={
            "latitude": 37.5665,
            "longitude": 126.978,
            "photoCount": 3,
            "currentTitle": "Palace day",
        })

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["title"] == "Palace day"
        assert body["suggestions"][1] == "Seoul travel log"
        assert body["activityType"] == "Travel"
        assert body["travelTheme"] == "Memory"

    def test_generate_title_with_gemini(self, app, client):
        app.state.title_generator = TitleGenerator(
            model=FakeModel('{"mainTitle": "Cherry blossoms by the stream", "suggestions": ["Spring walk"]}')
        )

        body = client.post("/api/generate-title", json={"photoCount": 1}).json()

        assert body["title"] == "Cherry blossoms by the stream"
        assert body["suggestions"] == ["Spring walk"]

    def test_reverse_geocode_known_city(self, client):
        response = client.post("/api/reverse-geocode", json={"latitude": 35.1796, "longitude": 129.0756})

        assert response.json() == {
            "success": True,
            "locationName": "Busan",
            "latitude": 35.1796,
            "longitude": 129.0756,
        }

    def test_reverse_geocode_uses_gemini_outside_gazetteer(self, app, client):
        app.state.title_generator = TitleGenerator(model=FakeModel('{"regionName": "Sokcho"}'))

        response = client.post("/api/reverse-geocode", json={"latitude": 38.2, "longitude": 128.59})

        assert response.json()["locationName"] == "Sokcho"

    def test_reverse_geocode_requires_coordinates(self, client):
        response = client.post("/api/reverse-geocode", json={"latitude": 37.5})

        assert response.status_code == 400
        assert response.json()["success"] is False
