"""End-to-end tests for /coffees.

Tests cover:
- Create / list / get / update / delete
- Flavor lookup-or-create through the API
- Validation (unknown fields, nulls, coercion, pagination)
- Recommendations and rate limiting
"""

from coffee_api.models import Coffee, Event, Flavor
from coffee_api.settings import settings


def _data(response):
    return response.json()["data"]


# --- Create ---


def test_create_coffee(client, coffee_payload):
    response = client.post("/coffees", json=coffee_payload)
    assert response.status_code == 201

    data = _data(response)
    assert data["name"] == "A great coffee"
    assert data["brand"] == "Nescafe"
    assert data["description"] is None
    assert data["recommendations"] == 0
    assert data["flavors"] == [
        {"name": "chocolate", "id": 1},
        {"name": "vanilla", "id": 2},
    ]


def test_create_coffee_with_description(client, coffee_payload):
    response = client.post("/coffees", json={**coffee_payload, "description": "Smooth"})
    assert response.status_code == 201
    assert _data(response)["description"] == "Smooth"


def test_create_reuses_existing_flavors(client, db_session, coffee):
    response = client.post("/coffees", json={
        "name": "Another coffee",
        "brand": "Lavazza",
        "flavors": ["vanilla", "caramel"],
    })
    assert response.status_code == 201

    flavors = _data(response)["flavors"]
    assert flavors == [{"name": "vanilla", "id": 2}, {"name": "caramel", "id": 3}]
    assert db_session.query(Flavor).filter_by(name="vanilla").count() == 1
    assert db_session.query(Flavor).count() == 3


def test_create_ignores_repeated_flavor_names(client, db_session):
    response = client.post("/coffees", json={
        "name": "Mocha",
        "brand": "Illy",
        "flavors": ["chocolate", "chocolate"],
    })
    assert response.status_code == 201
    assert [f["name"] for f in _data(response)["flavors"]] == ["chocolate"]
    assert db_session.query(Flavor).count() == 1


def test_create_with_empty_flavors(client):
    response = client.post("/coffees", json={"name": "Plain", "brand": "Generic", "flavors": []})
    assert response.status_code == 201
    assert _data(response)["flavors"] == []


def test_create_rejects_unknown_fields(client, coffee_payload, db_session):
    response = client.post("/coffees", json={**coffee_payload, "isEnabled": True})
    assert response.status_code == 400

    body = response.json()
    assert body["statusCode"] == 400
    assert "property isEnabled should not exist" in body["message"]
    assert db_session.query(Coffee).count() == 0


def test_create_requires_name_brand_and_flavors(client):
    response = client.post("/coffees", json={"description": "Nothing else"})
    assert response.status_code == 400

    messages = " ".join(response.json()["message"])
    assert "name" in messages
    assert "brand" in messages
    assert "flavors" in messages


def test_create_coerces_numbers_to_text(client):
    response = client.post("/coffees", json={"name": 1850, "brand": "Folgers", "flavors": [42]})
    assert response.status_code == 201

    data = _data(response)
    assert data["name"] == "1850"
    assert data["flavors"][0]["name"] == "42"


def test_create_rejects_invalid_json(client):
    response = client.post(
        "/coffees", content="{not json", headers={"Content-Type": "application/json"}
    )
    assert response.status_code == 400


# --- Read ---


def test_list_coffees(client, coffee):
    response = client.get("/coffees")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/json")
    assert _data(response) == [
        {
            "id": 1,
            "name": "A great coffee",
            "description": None,
            "brand": "Nescafe",
            "recommendations": 0,
            "flavors": [
                {"name": "chocolate", "id": 1},
                {"name": "vanilla", "id": 2},
            ],
        }
    ]


def test_list_coffees_empty(client):
    response = client.get("/coffees")
    assert response.status_code == 200
    assert response.json() == {"data": []}


def test_list_coffees_pagination(client):
    for i in range(4):
        client.post("/coffees", json={"name": f"Coffee {i}", "brand": "B", "flavors": []})

    response = client.get("/coffees", params={"limit": 2, "offset": 1})
    assert response.status_code == 200
    assert [c["id"] for c in _data(response)] == [2, 3]

    response = client.get("/coffees", params={"offset": 3})
    assert [c["id"] for c in _data(response)] == [4]

    response = client.get("/coffees", params={"limit": "1"})
    assert [c["id"] for c in _data(response)] == [1]


def test_list_coffees_invalid_pagination(client):
    assert client.get("/coffees", params={"limit": "abc"}).status_code == 400
    assert client.get("/coffees", params={"limit": 0}).status_code == 400
    assert client.get("/coffees", params={"offset": -1}).status_code == 400


def test_get_coffee(client, coffee):
    response = client.get("/coffees/1")
    assert response.status_code == 200
    assert _data(response) == coffee


def test_get_coffee_is_repeatable(client, coffee):
    first = client.get("/coffees/1").json()
    second = client.get("/coffees/1").json()
    assert first == second


def test_get_missing_coffee(client, coffee):
    response = client.get("/coffees/3")
    assert response.status_code == 404

    body = response.json()
    assert body["statusCode"] == 404
    assert body["message"] == "Coffee #3 not found"
    assert body["path"] == "/coffees/3"


def test_get_coffee_non_integer_id(client):
    response = client.get("/coffees/abc")
    assert response.status_code == 400


# --- Update ---


def test_update_coffee_replaces_flavors(client, db_session, coffee):
    response = client.patch("/coffees/1", json={
        "name": "An updated coffee",
        "brand": "Updated brand",
        "flavors": ["test1", "test2"],
    })
    assert response.status_code == 200
    assert _data(response)["name"] == "An updated coffee"
    assert _data(response)["brand"] == "Updated brand"

    response = client.get("/coffees/1")
    assert _data(response) == {
        "id": 1,
        "name": "An updated coffee",
        "description": None,
        "brand": "Updated brand",
        "recommendations": 0,
        "flavors": [
            {"name": "test1", "id": 3},
            {"name": "test2", "id": 4},
        ],
    }

    # Old flavors are detached but not deleted
    names = {f.name for f in db_session.query(Flavor).all()}
    assert names == {"chocolate", "vanilla", "test1", "test2"}


def test_update_coffee_partial(client, coffee):
    response = client.patch("/coffees/1", json={"description": "Now with notes"})
    assert response.status_code == 200

    data = _data(response)
    assert data["description"] == "Now with notes"
    assert data["name"] == coffee["name"]
    assert data["flavors"] == coffee["flavors"]


def test_update_coffee_clears_description(client, coffee_payload):
    client.post("/coffees", json={**coffee_payload, "description": "Temporary"})

    response = client.patch("/coffees/1", json={"description": None})
    assert response.status_code == 200
    assert _data(response)["description"] is None


def test_update_rejects_null_name(client, coffee):
    response = client.patch("/coffees/1", json={"name": None})
    assert response.status_code == 400
    assert _data(client.get("/coffees/1"))["name"] == coffee["name"]


def test_update_rejects_unknown_fields(client, coffee):
    response = client.patch("/coffees/1", json={"recommendations": 10})
    assert response.status_code == 400
    assert "property recommendations should not exist" in response.json()["message"]


def test_update_missing_coffee(client, db_session, coffee):
    response = client.patch("/coffees/6", json={
        "name": "An updated coffee",
        "brand": "Updated brand",
        "flavors": ["test1", "test2"],
    })
    assert response.status_code == 404

    # Nothing was written
    assert db_session.query(Coffee).count() == 1
    assert db_session.query(Flavor).filter(Flavor.name.in_(["test1", "test2"])).count() == 0


# --- Delete ---


def test_delete_coffee(client, db_session, coffee):
    response = client.delete("/coffees/1")
    assert response.status_code == 200
    assert _data(response) == coffee

    assert client.get("/coffees/1").status_code == 404
    assert client.delete("/coffees/1").status_code == 404

    # Flavors survive the coffee
    db_session.expire_all()
    assert db_session.query(Coffee).count() == 0
    assert db_session.query(Flavor).count() == 2


def test_delete_missing_coffee(client, coffee):
    response = client.delete("/coffees/5")
    assert response.status_code == 404
    assert response.json()["message"] == "Coffee #5 not found"


# --- Recommend ---


def test_recommend_coffee(client, db_session, coffee):
    response = client.post("/coffees/1/recommend")
    assert response.status_code == 200
    assert _data(response)["recommendations"] == 1

    response = client.post("/coffees/1/recommend")
    assert _data(response)["recommendations"] == 2

    events = db_session.query(Event).order_by(Event.id).all()
    assert len(events) == 2
    assert events[0].name == "recommend_coffee"
    assert events[0].type == "coffee"
    assert events[0].payload == {"coffeeId": 1}


def test_recommend_missing_coffee(client, db_session):
    response = client.post("/coffees/9/recommend")
    assert response.status_code == 404
    assert db_session.query(Event).count() == 0


def test_create_rejects_overlong_names(client, coffee_payload, db_session):
    too_long = "x" * 256

    assert client.post("/coffees", json={**coffee_payload, "name": too_long}).status_code == 400
    assert client.post("/coffees", json={**coffee_payload, "brand": too_long}).status_code == 400
    assert client.post("/coffees", json={**coffee_payload, "flavors": [too_long]}).status_code == 400
    assert db_session.query(Coffee).count() == 0
    assert db_session.query(Flavor).count() == 0

    response = client.post("/coffees", json={**coffee_payload, "name": "x" * 255})
    assert response.status_code == 201


def test_update_rejects_overlong_names(client, coffee):
    response = client.patch("/coffees/1", json={"flavors": ["y" * 300]})
    assert response.status_code == 400
    assert _data(client.get("/coffees/1"))["flavors"] == coffee["flavors"]


# --- Rate limiting ---


def test_recommend_is_rate_limited(client, coffee):
    allowed = int(settings.write_rate_limit.split("/")[0])
    for _ in range(allowed):
        assert client.post("/coffees/1/recommend").status_code == 200

    response = client.post("/coffees/1/recommend")
    assert response.status_code == 429

    body = response.json()
    assert body["statusCode"] == 429
    assert body["error"] == "Too Many Requests"
    assert body["path"] == "/coffees/1/recommend"
    assert set(body) == {"statusCode", "message", "error", "timestamp", "path"}

    # Other endpoints keep their own budget
    assert client.get("/coffees/1").status_code == 200
