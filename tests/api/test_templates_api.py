from __future__ import annotations

import json

from conftest import SLOT_JSON


def _stored_files(app_config) -> list[str]:
    return sorted(path.name for path in app_config.media_paths.templates.iterdir())


def test_root(client) -> None:
    assert client.get("/").json() == {"message": "Photobox API is running"}


def test_create_template_stores_image_and_config(client, app_config, create_template, template_png) -> None:
    created = create_template()

    assert created["message"] == "Template created"
    assert created["image_path"].startswith("uploads/")
    assert _stored_files(app_config) == [created["image_path"].split("/", 1)[1]]

    served = client.get(f"/{created['image_path']}")
    assert served.status_code == 200
    assert served.content == template_png

    payload = client.get(f"/api/templates/{created['id']}").json()
    assert payload["name"] == "Birthday"
    assert payload["layout_type"] == "single"
    assert payload["config_json"] == json.loads(SLOT_JSON)


def test_list_templates_newest_first(client, create_template) -> None:
    first = create_template("First")
    second = create_template("Second")

    listing = client.get("/api/templates").json()

    assert [item["id"] for item in listing] == [second["id"], first["id"]]


def test_create_without_file(client, app_config) -> None:
    response = client.post("/api/admin/templates", data={"name": "x", "config_json": SLOT_JSON})

    assert response.status_code == 400
    assert response.json()["detail"]["failure_reason"] == "file_required"
    assert _stored_files(app_config) == []


def test_create_without_name(client, app_config, template_png) -> None:
    response = client.post(
        "/api/admin/templates",
        data={"config_json": SLOT_JSON},
        files={"file": ("frame.png", template_png, "image/png")},
    )

    assert response.status_code == 400
    assert response.json()["detail"]["failure_reason"] == "invalid_request"
    assert _stored_files(app_config) == []


def test_create_with_malformed_config(client, app_config, template_png) -> None:
    response = client.post(
        "/api/admin/templates",
        data={"name": "Broken", "config_json": '{"slots": [{"x": 1}]}'},
        files={"file": ("frame.png", template_png, "image/png")},
    )

    assert response.status_code == 400
    assert response.json()["detail"]["failure_reason"] == "invalid_config"
    assert _stored_files(app_config) == []


def test_create_with_unknown_layout(client, template_png) -> None:
    response = client.post(
        "/api/admin/templates",
        data={"name": "Grid", "config_json": SLOT_JSON, "layout_type": "grid_9"},
        files={"file": ("frame.png", template_png, "image/png")},
    )

    assert response.status_code == 400
    assert response.json()["detail"]["failure_reason"] == "invalid_request"


def test_non_png_upload_is_rejected_before_any_write(client, app_config, jpeg_bytes) -> None:
    for content_type in ("image/jpeg", "image/png"):
        response = client.post(
            "/api/admin/templates",
            data={"name": "Photo", "config_json": SLOT_JSON},
            files={"file": ("photo.jpg", jpeg_bytes, content_type)},
        )

        assert response.status_code == 415
        assert response.json()["detail"]["failure_reason"] == "unsupported_media_type"
    assert _stored_files(app_config) == []
    assert client.get("/api/templates").json() == []


def test_update_name_keeps_everything_else(client, create_template) -> None:
    created = create_template()

    response = client.put(f"/api/admin/templates/{created['id']}", data={"name": "Renamed"})

    assert response.status_code == 200
    assert response.json() == {"message": "Template updated"}
    payload = client.get(f"/api/templates/{created['id']}").json()
    assert payload["name"] == "Renamed"
    assert payload["image_path"] == created["image_path"]
    assert payload["config_json"] == json.loads(SLOT_JSON)


def test_update_config(client, create_template) -> None:
    created = create_template()
    config = {"slots": [{"x": 10, "y": 20, "width": 30.5, "height": 40}]}

    response = client.put(
        f"/api/admin/templates/{created['id']}", data={"config_json": json.dumps(config)}
    )

    assert response.status_code == 200
    assert client.get(f"/api/templates/{created['id']}").json()["config_json"] == config


def test_update_image_replaces_file(client, app_config, create_template, make_png) -> None:
    created = create_template()
    replacement = make_png((400, 300))

    response = client.put(
        f"/api/admin/templates/{created['id']}",
        files={"file": ("new.png", replacement, "image/png")},
    )

    assert response.status_code == 200
    payload = client.get(f"/api/templates/{created['id']}").json()
    assert payload["image_path"] != created["image_path"]
    assert _stored_files(app_config) == [payload["image_path"].split("/", 1)[1]]
    assert client.get(f"/{payload['image_path']}").content == replacement


def test_update_with_bad_image_keeps_old_file(client, app_config, create_template, jpeg_bytes) -> None:
    created = create_template()

    response = client.put(
        f"/api/admin/templates/{created['id']}",
        files={"file": ("new.jpg", jpeg_bytes, "image/jpeg")},
    )

    assert response.status_code == 415
    assert _stored_files(app_config) == [created["image_path"].split("/", 1)[1]]


def test_update_missing_template(client) -> None:
    response = client.put("/api/admin/templates/999", data={"name": "Ghost"})

    assert response.status_code == 404
    assert response.json()["detail"]["failure_reason"] == "template_not_found"


def test_delete_removes_row_and_file(client, app_config, create_template) -> None:
    created = create_template()

    response = client.delete(f"/api/admin/templates/{created['id']}")

    assert response.status_code == 200
    assert response.json() == {"message": "Template deleted"}
    assert _stored_files(app_config) == []
    assert client.get(f"/api/templates/{created['id']}").status_code == 404
    assert client.get(f"/{created['image_path']}").status_code == 404


def test_delete_missing_template(client) -> None:
    response = client.delete("/api/admin/templates/999")

    assert response.status_code == 404
    assert response.json()["detail"] == {
        "status": "error",
        "failure_reason": "template_not_found",
        "details": "template 999 not found",
    }
