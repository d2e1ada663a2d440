# tests/test_categories.py

"""
Integration tests for the /categories endpoints: create, list, fetch and
update. Deletion is covered in test_cascade_delete.py.
"""


def _total(client):
    return client.get("/categories").json()["pagination"]["total"]


def test_create_category_success(client):
    """
    Tests successful creation of a category with the public field names.
    """
    response = client.post("/categories", json={"name": "  Headphones "})
    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "Headphones"
    assert isinstance(data["_id"], str) and data["_id"]
    assert "createdAt" in data
    assert "updatedAt" in data
    assert "success" not in data


def test_create_category_duplicate_name_ignores_case(client, make_category):
    """
    Tests that a case variant of an existing name is rejected and nothing is written.
    """
    make_category("Headphones")
    response = client.post("/categories", json={"name": "HEADPHONES"})
    assert response.status_code == 409
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == "CATEGORY_NAME_DUPLICATE"
    assert _total(client) == 1


def test_create_category_invalid_names(client):
    """
    Tests validation failures: each returns 400 with its own code and writes nothing.
    """
    cases = [
        ({}, "CATEGORY_NAME_REQUIRED"),
        ({"name": ""}, "CATEGORY_NAME_REQUIRED"),
        ({"name": "A"}, "CATEGORY_NAME_TOO_SHORT"),
        ({"name": "A" * 51}, "CATEGORY_NAME_TOO_LONG"),
        ({"name": "Audio & Video"}, "NAME_CONTAINS_INVALID_CHARS"),
        ({"name": 12}, "CATEGORY_INVALID_NAME"),
    ]
    for body, expected in cases:
        response = client.post("/categories", json=body)
        assert response.status_code == 400, body
        assert response.json()["error"]["code"] == expected
    assert _total(client) == 0


def test_get_category_by_id(client, make_category):
    created = make_category("Speakers")
    response = client.get(f"/categories/{created['_id']}")
    assert response.status_code == 200
    assert response.json()["name"] == "Speakers"


def test_get_category_not_found(client):
    response = client.get("/categories/missing")
    assert response.status_code == 404
    body = response.json()
    assert body["error"]["code"] == "CATEGORY_NOT_FOUND"
    assert body["error"]["details"]["id"] == "missing"


def test_update_category_success(client, make_category):
    """
    Tests renaming a category, including a case-only rename of itself.
    """
    created = make_category("Speakers")
    response = client.patch("/categories", json={"_id": created["_id"], "name": "Loud Speakers"})
    assert response.status_code == 200
    data = response.json()
    assert data["_id"] == created["_id"]
    assert data["name"] == "Loud Speakers"
    assert data["createdAt"] == created["createdAt"]

    response = client.patch("/categories", json={"_id": created["_id"], "name": "LOUD SPEAKERS"})
    assert response.status_code == 200
    assert response.json()["name"] == "LOUD SPEAKERS"


def test_update_category_errors(client, make_category):
    """
    Tests PATCH failures: missing id, invalid name, unknown id, duplicate name.
    """
    first = make_category("Speakers")
    make_category("Microphones")

    response = client.patch("/categories", json={"name": "Speakers 2"})
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "GENERIC_VALIDATION_ERROR"

    response = client.patch("/categories", json={"_id": first["_id"], "name": "S"})
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "CATEGORY_NAME_TOO_SHORT"

    response = client.patch("/categories", json={"_id": first["_id"]})
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "GENERIC_VALIDATION_ERROR"

    response = client.patch("/categories", json={"_id": "missing", "name": "Anything"})
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "CATEGORY_NOT_FOUND"

    response = client.patch("/categories", json={"_id": first["_id"], "name": "microphones"})
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "CATEGORY_NAME_DUPLICATE"

    assert client.get(f"/categories/{first['_id']}").json()["name"] == "Speakers"


def test_list_categories_pagination(client, make_category):
    """
    Tests page metadata over 25 categories with the default page size of 10.
    """
    for i in range(25):
        make_category(f"Category {i:02d}")

    first = client.get("/categories", params={"page": 1}).json()
    assert len(first["categories"]) == 10
    assert first["pagination"] == {
        "page": 1,
        "limit": 10,
        "total": 25,
        "pages": 3,
        "hasNext": True,
        "hasPrev": False,
    }

    last = client.get("/categories", params={"page": 3}).json()
    assert len(last["categories"]) == 5
    assert last["pagination"]["hasNext"] is False
    assert last["pagination"]["hasPrev"] is True

    beyond = client.get("/categories", params={"page": 9}).json()
    assert beyond["categories"] == []
    assert beyond["pagination"]["total"] == 25


def test_list_categories_pages_do_not_overlap(client, make_category):
    for i in range(12):
        make_category(f"Category {i:02d}")
    page_1 = client.get("/categories", params={"limit": 5, "page": 1}).json()["categories"]
    page_2 = client.get("/categories", params={"limit": 5, "page": 2}).json()["categories"]
    page_3 = client.get("/categories", params={"limit": 5, "page": 3}).json()["categories"]
    ids = [c["_id"] for c in page_1 + page_2 + page_3]
    assert len(ids) == 12
    assert len(set(ids)) == 12


def test_list_categories_limit_is_clamped(client, make_category):
    make_category("Speakers")
    assert client.get("/categories", params={"limit": 500}).json()["pagination"]["limit"] == 100
    assert client.get("/categories", params={"limit": 0}).json()["pagination"]["limit"] == 1
    lenient = client.get("/categories", params={"limit": "ten", "page": "-3"}).json()
    assert lenient["pagination"]["limit"] == 10
    assert lenient["pagination"]["page"] == 1


def test_list_categories_empty(client):
    response = client.get("/categories")
    assert response.status_code == 200
    assert response.json()["categories"] == []
    assert response.json()["pagination"]["pages"] == 0
    assert response.json()["pagination"]["hasNext"] is False


def test_list_categories_search_and_sort(client, make_category):
    """
    Tests case-insensitive search and name sorting in both directions.
    """
    for name in ["Headphones", "Speakers", "Microphones", "Phone Cases"]:
        make_category(name)

    response = client.get("/categories", params={"search": "PHONE", "sort": "name", "order": "asc"})
    names = [c["name"] for c in response.json()["categories"]]
    assert names == ["Headphones", "Microphones", "Phone Cases"]

    response = client.get("/categories", params={"sort": "name", "order": "desc"})
    names = [c["name"] for c in response.json()["categories"]]
    assert names == ["Speakers", "Phone Cases", "Microphones", "Headphones"]


def test_list_categories_search_treats_wildcards_literally(client, make_category):
    make_category("Head_phones")
    make_category("Headsets")
    response = client.get("/categories", params={"search": "d_p"})
    assert [c["name"] for c in response.json()["categories"]] == ["Head_phones"]
