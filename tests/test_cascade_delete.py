# tests/test_cascade_delete.py

"""
Integration tests for DELETE /categories: the unconfirmed warning and the
confirmed delete that removes the category from every group category.
"""

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session


def test_unconfirmed_delete_returns_warning_and_writes_nothing(
    client, make_category, make_group, make_product, delete_json
):
    """
    Tests that a delete without confirmation only describes its impact.
    """
    speakers = make_category("Speakers")
    make_group("Home Audio", [speakers["_id"]])
    make_group("Audio Gear", [speakers["_id"]])
    make_product("Mobi Mini Speaker", category="Speakers", price=49.99)
    make_product("Studio Monitor Speakers", category="speakers", price=299.99)
    make_product("Delta Studio Mic", category="Microphones", price=129.99)

    response = delete_json("/categories", {"_id": speakers["_id"]})
    assert response.status_code == 200
    assert response.json() == {
        "category": {"_id": speakers["_id"], "name": "Speakers"},
        "warnings": {
            "affectedGroupCategories": 2,
            "groupCategoryNames": ["Audio Gear", "Home Audio"],
            "affectedProducts": 2,
            "productNames": ["Mobi Mini Speaker", "Studio Monitor Speakers"],
        },
        "requiresConfirmation": True,
    }

    assert client.get(f"/categories/{speakers['_id']}").status_code == 200
    groups = client.get("/group-categories").json()["groupCategories"]
    assert all(g["categories"] == [speakers["_id"]] for g in groups)


def test_explicit_false_confirmation_is_a_dry_run(client, make_category, delete_json):
    category = make_category("Speakers")
    response = delete_json("/categories", {"_id": category["_id"], "confirmed": False})
    assert response.status_code == 200
    assert response.json()["requiresConfirmation"] is True
    assert response.json()["warnings"]["affectedGroupCategories"] == 0
    assert client.get(f"/categories/{category['_id']}").status_code == 200


def test_confirmed_delete_cascades_to_group_categories(
    client, make_category, make_group, delete_json
):
    """
    Tests the Audio Gear scenario: after deleting Speakers the group keeps
    Headphones only; a group holding just Speakers ends up empty.
    """
    speakers = make_category("Speakers")
    headphones = make_category("Headphones")
    audio = make_group("Audio Gear", [speakers["_id"], headphones["_id"]])
    home = make_group("Home Audio", [speakers["_id"]])
    video = make_group("Video Gear", [headphones["_id"]])

    response = delete_json("/categories", {"_id": speakers["_id"], "confirmed": True})
    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Category deleted successfully"
    assert body["category"]["_id"] == speakers["_id"]
    assert body["category"]["name"] == "Speakers"
    assert body["removedFromGroupCategories"] == 2

    assert client.get(f"/categories/{speakers['_id']}").status_code == 404
    assert client.get(f"/group-categories/{audio['_id']}").json()["categories"] == [headphones["_id"]]
    home_after = client.get(f"/group-categories/{home['_id']}").json()
    assert home_after["categories"] == []
    assert home_after["updatedAt"] >= home["updatedAt"]
    video_after = client.get(f"/group-categories/{video['_id']}").json()
    assert video_after["categories"] == [headphones["_id"]]
    assert video_after["updatedAt"] == video["updatedAt"]


def test_no_group_references_a_deleted_category(client, make_category, make_group, delete_json):
    ids = [make_category(name)["_id"] for name in ["Speakers", "Headphones", "Microphones"]]
    for i in range(3):
        make_group(f"Group {i}", ids)

    delete_json("/categories", {"_id": ids[1], "confirmed": True})
    for group in client.get("/group-categories").json()["groupCategories"]:
        assert group["categories"] == [ids[0], ids[2]]


def test_confirmed_delete_keeps_product_labels(
    client, make_category, make_product, delete_json
):
    speakers = make_category("Speakers")
    product = make_product("Mobi Mini Speaker", category="Speakers", price=49.99)

    response = delete_json("/categories", {"_id": speakers["_id"], "confirmed": True})
    assert response.status_code == 200
    assert client.get(f"/products/{product['_id']}").json()["category"] == "Speakers"


def test_category_name_can_be_reused_after_delete(client, make_category, delete_json):
    speakers = make_category("Speakers")
    delete_json("/categories", {"_id": speakers["_id"], "confirmed": True})
    again = make_category("Speakers")
    assert again["_id"] != speakers["_id"]


def test_delete_unknown_category(client, delete_json):
    for confirmed in (False, True):
        response = delete_json("/categories", {"_id": "missing", "confirmed": confirmed})
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "CATEGORY_NOT_FOUND"


def test_delete_requires_id(client, delete_json):
    response = delete_json("/categories", {"confirmed": True})
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "GENERIC_VALIDATION_ERROR"


def test_confirmation_must_be_boolean(client, make_category, delete_json):
    """
    Tests that a truthy non-boolean does not count as confirmation.
    """
    category = make_category("Speakers")
    for confirmed in ("true", 1, "yes"):
        response = delete_json("/categories", {"_id": category["_id"], "confirmed": confirmed})
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "GENERIC_VALIDATION_ERROR"
    assert client.get(f"/categories/{category['_id']}").status_code == 200


def test_warning_products_match_the_category_filter(
    client, make_category, make_product, delete_json
):
    """
    Tests that the products named in the warning are the ones the product
    listing returns for the same category.
    """
    speakers = make_category("Speakers")
    make_product("Mobi Mini Speaker", category="Speakers", price=49.99)
    make_product("Studio Monitor Speakers", category="SPEAKERS", price=299.99)
    make_product("Delta Studio Mic", category="Microphones", price=129.99)

    warning = delete_json("/categories", {"_id": speakers["_id"]}).json()["warnings"]
    listed = client.get(
        "/products", params={"category": "Speakers", "sortBy": "name", "sortOrder": "asc"}
    ).json()["data"]
    assert warning["productNames"] == [p["name"] for p in listed]
    assert warning["affectedProducts"] == len(listed) == 2


def test_failed_cascade_rolls_back_everything(
    client, make_category, make_group, delete_json, monkeypatch
):
    """
    Tests that a storage failure midway through the cascade reports
    CATEGORY_CASCADE_REMOVAL_FAILED and leaves every group untouched.
    """
    speakers = make_category("Speakers")
    headphones = make_category("Headphones")
    audio = make_group("Audio Gear", [speakers["_id"], headphones["_id"]])
    home = make_group("Home Audio", [speakers["_id"]])

    def failing_delete(self, instance):
        raise OperationalError("DELETE FROM categories", {}, Exception("connection lost"))

    monkeypatch.setattr(Session, "delete", failing_delete)
    response = delete_json("/categories", {"_id": speakers["_id"], "confirmed": True})
    monkeypatch.undo()

    assert response.status_code == 500
    body = response.json()
    assert body["error"]["code"] == "CATEGORY_CASCADE_REMOVAL_FAILED"
    assert body["error"]["details"] == {"entity": "Category", "id": speakers["_id"]}

    assert client.get(f"/categories/{speakers['_id']}").status_code == 200
    audio_after = client.get(f"/group-categories/{audio['_id']}").json()
    assert audio_after["categories"] == [speakers["_id"], headphones["_id"]]
    assert audio_after["updatedAt"] == audio["updatedAt"]
    assert client.get(f"/group-categories/{home['_id']}").json()["categories"] == [speakers["_id"]]
