"""
Course upload and management API tests
"""

import pytest

from conftest import (
    SIMPLE_MANIFEST,
    assert_response_error,
    assert_response_success,
    make_package,
    manifest,
    upload,
)


def _leftover_packages(settings):
    return list((settings.data_dir / "courses").glob("*"))


async def test_upload_creates_course(client, simple_package, test_settings):
    response = await upload(client, simple_package, title="Intro to SCORM")
    assert_response_success(response, 201)

    body = response.json()
    assert body["title"] == "Intro to SCORM"
    assert body["launchHref"] == "a.html"
    assert body["orgIdentifier"] == "ORG-A"
    assert body["basePath"] == f"courses/{body['id']}"
    assert [s["identifier"] for s in body["scos"]] == ["I1", "I2"]
    assert [s["position"] for s in body["scos"]] == [0, 1]
    assert body["scos"][0]["parameters"] == "?page=1"
    assert body["scos"][1]["launchHref"] == "lesson2/index.html"

    package_dir = test_settings.data_dir / body["basePath"]
    assert (package_dir / "imsmanifest.xml").is_file()
    assert (package_dir / "lesson2" / "index.html").is_file()


async def test_upload_nested_manifest_base_path(client):
    data = make_package(
        {"pkg/imsmanifest.xml": SIMPLE_MANIFEST, "pkg/a.html": "<html/>"}
    )
    response = await upload(client, data)
    assert_response_success(response, 201)
    body = response.json()
    assert body["basePath"] == f"courses/{body['id']}/pkg"


async def test_upload_default_title(client, simple_package):
    response = await upload(client, simple_package, title=None)
    assert_response_success(response, 201)
    assert response.json()["title"] == "Untitled Course"


async def test_upload_requires_file(client):
    response = await client.post("/api/v1/courses/upload", data={"title": "No file"})
    assert_response_error(response, 400)
    assert response.json()["error"] == "file is required"


async def test_upload_empty_file(client):
    response = await upload(client, b"")
    assert_response_error(response, 400)


async def test_upload_too_large(client, test_settings):
    response = await upload(client, b"x" * (test_settings.max_upload_size + 1))
    assert_response_error(response, 400)
    assert "exceeds maximum" in response.json()["error"]


async def test_upload_too_large_reports_full_size(client, test_settings):
    size = test_settings.max_upload_size + 4096
    response = await upload(client, b"x" * size)
    assert_response_error(response, 400)
    assert f"File size ({size} bytes)" in response.json()["error"]


async def test_upload_at_size_limit_is_read_whole(client, test_settings):
    response = await upload(client, b"x" * test_settings.max_upload_size)
    assert_response_error(response, 400)
    assert response.json()["error"].startswith("corrupt package archive")


@pytest.mark.parametrize(
    "data, message",
    [
        (b"definitely not a zip", "corrupt package archive"),
        (make_package({"index.html": "<html/>"}), "imsmanifest.xml not found"),
        (make_package({"imsmanifest.xml": "<manifest>"}), "failed to parse manifest"),
    ],
)
async def test_rejected_package_leaves_nothing_behind(
    client, test_settings, data, message
):
    response = await upload(client, data)
    assert_response_error(response, 400)
    body = response.json()
    assert body["success"] is False
    assert body["error"].startswith(message)

    assert _leftover_packages(test_settings) == []
    listing = await client.get("/api/v1/courses")
    assert listing.json() == []


async def test_unresolvable_launch_rejected(client, test_settings):
    data = make_package(
        {"imsmanifest.xml": manifest(resources='<resource identifier="R"/>')}
    )
    response = await upload(client, data)
    assert_response_error(response, 400)
    assert _leftover_packages(test_settings) == []


async def test_list_and_get(client, simple_package):
    created = (await upload(client, simple_package)).json()

    listing = await client.get("/api/v1/courses")
    assert_response_success(listing)
    assert [c["id"] for c in listing.json()] == [created["id"]]

    fetched = await client.get(f"/api/v1/courses/{created['id']}")
    assert_response_success(fetched)
    assert fetched.json() == created


async def test_get_unknown_course(client):
    response = await client.get("/api/v1/courses/does-not-exist")
    assert_response_error(response, 404)
    assert response.json()["error"] == "Course not found"


async def test_delete_course(client, simple_package, test_settings):
    created = (await upload(client, simple_package)).json()
    attempt = await client.post(
        "/api/v1/attempts",
        json={"course_id": created["id"], "learner_id": "learner-1"},
    )
    await client.post(
        f"/runtime/{attempt.json()['id']}/commit",
        json={"cmi.core.lesson_location": "p1"},
    )

    response = await client.delete(f"/api/v1/courses/{created['id']}")
    assert response.status_code == 204
    assert not (test_settings.data_dir / created["basePath"]).exists()

    missing = await client.get(f"/api/v1/courses/{created['id']}")
    assert_response_error(missing, 404)
    again = await client.delete(f"/api/v1/courses/{created['id']}")
    assert_response_error(again, 404)
