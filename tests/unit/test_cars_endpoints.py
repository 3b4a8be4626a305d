from fastapi.testclient import TestClient

from tests.fakes import FakeCarRepository, store_error

from cars.router import get_car_repository


def _car(**overrides):
    body = {"make": "Toyota", "model_name": "Corolla", "year": 2020, "price": 20000}
    body.update(overrides)
    return body


def test_list_cars_empty_inventory_returns_empty_list(test_app):
    client = TestClient(test_app)
    r = client.get("/cars")
    assert r.status_code == 200
    assert r.json() == []


def test_create_then_list_round_trip_scenario(test_app):
    client = TestClient(test_app)

    r = client.post("/cars", json=_car())
    assert r.status_code == 201
    assert r.json() == {"id": 1, "make": "Toyota", "model_name": "Corolla", "year": 2020, "price": 20000}

    r = client.get("/cars")
    assert r.status_code == 200
    assert r.json() == [{"car_id": 1, "make": "Toyota", "model_name": "Corolla", "year": 2020, "price": 20000}]

    r = client.delete("/cars/1")
    assert r.status_code == 204
    assert r.content == b""

    r = client.get("/cars")
    assert r.json() == []


def test_create_echoes_values_as_supplied(test_app, repo):
    client = TestClient(test_app)
    r = client.post("/cars", json=_car(year="2021", price=15000.0))
    assert r.status_code == 201
    body = r.json()
    assert body["year"] == "2021"
    assert body["price"] == 15000.0
    assert repo.cars[body["id"]]["year"] == 2021
    assert repo.cars[body["id"]]["price"] == 15000


def test_sequential_creates_reuse_model(test_app, repo):
    client = TestClient(test_app)
    client.post("/cars", json=_car(year=2019))
    client.post("/cars", json=_car(year=2022))
    client.post("/cars", json=_car(make="Honda", model_name="Civic"))

    assert len(repo.models) == 2
    model_ids = {car["model_id"] for car in repo.cars.values()}
    assert len(model_ids) == 2
    assert repo.cars[1]["model_id"] == repo.cars[2]["model_id"]


def test_create_missing_year_returns_400_without_writes(test_app, repo):
    client = TestClient(test_app)
    body = _car()
    del body["year"]
    r = client.post("/cars", json=body)
    assert r.status_code == 400
    assert r.json() == {"error": "make, model_name, year, and price are required."}
    assert repo.calls == []


def test_create_non_numeric_price_returns_400_without_writes(test_app, repo):
    client = TestClient(test_app)
    r = client.post("/cars", json=_car(price="abc"))
    assert r.status_code == 400
    assert r.json() == {"error": "Year and price must be numbers."}
    assert repo.calls == []


def test_create_fractional_price_returns_400(test_app, repo):
    client = TestClient(test_app)
    r = client.post("/cars", json=_car(price=199.99))
    assert r.status_code == 400
    assert r.json() == {"error": "Year and price must be whole numbers."}
    assert repo.calls == []


def test_create_without_body_returns_400(test_app, repo):
    client = TestClient(test_app)
    r = client.post("/cars")
    assert r.status_code == 400
    assert r.json() == {"error": "make, model_name, year, and price are required."}
    assert repo.calls == []


def test_create_underscore_numbers_return_400_without_writes(test_app, repo):
    client = TestClient(test_app)
    r = client.post("/cars", json=_car(year="2_020", price="1_000"))
    assert r.status_code == 400
    assert r.json() == {"error": "Year and price must be numbers."}
    assert repo.calls == []


def test_create_malformed_json_returns_400(test_app, repo):
    client = TestClient(test_app)
    r = client.post("/cars", content=b"{not json", headers={"content-type": "application/json"})
    assert r.status_code == 400
    assert r.json()["error"] == "Request body must be a JSON object."
    assert repo.calls == []


def test_create_database_failure_returns_500_with_details(test_app):
    repo = FakeCarRepository(raise_on={"create_car": store_error("deadlock detected")})
    test_app.dependency_overrides[get_car_repository] = lambda: repo
    client = TestClient(test_app)
    r = client.post("/cars", json=_car())
    assert r.status_code == 500
    assert r.json() == {"error": "Failed to add car", "details": "deadlock detected"}


def test_list_database_failure_returns_500_with_details(test_app):
    repo = FakeCarRepository(raise_on={"list_cars": store_error()})
    test_app.dependency_overrides[get_car_repository] = lambda: repo
    client = TestClient(test_app)
    r = client.get("/cars")
    assert r.status_code == 500
    assert r.json() == {"error": "Failed to fetch cars", "details": "connection reset by peer"}


def test_delete_missing_car_returns_404(test_app):
    client = TestClient(test_app)
    client.post("/cars", json=_car())
    assert client.delete("/cars/1").status_code == 204

    r = client.delete("/cars/1")
    assert r.status_code == 404
    assert r.json() == {"message": "Car with ID 1 not found."}


def test_delete_only_removes_that_car(test_app):
    client = TestClient(test_app)
    client.post("/cars", json=_car())
    client.post("/cars", json=_car(make="Honda", model_name="Civic"))

    assert client.delete("/cars/1").status_code == 204
    ids = [row["car_id"] for row in client.get("/cars").json()]
    assert ids == [2]


def test_delete_non_numeric_id_returns_400_without_repository_access(test_app, repo):
    client = TestClient(test_app)
    r = client.delete("/cars/abc")
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid car ID provided."}
    assert repo.calls == []


def test_delete_out_of_range_id_is_not_found_without_repository_access(test_app, repo):
    client = TestClient(test_app)
    r = client.delete("/cars/99999999999")
    assert r.status_code == 404
    assert repo.calls == []


def test_delete_database_failure_returns_500(test_app):
    repo = FakeCarRepository(raise_on={"delete_car": store_error("timeout")})
    test_app.dependency_overrides[get_car_repository] = lambda: repo
    client = TestClient(test_app)
    r = client.delete("/cars/5")
    assert r.status_code == 500
    assert r.json() == {"error": "Failed to delete car", "details": "timeout"}


def test_delete_all_empties_inventory_and_keeps_models(test_app, repo):
    client = TestClient(test_app)
    client.post("/cars", json=_car())
    client.post("/cars", json=_car(make="Honda", model_name="Civic"))

    r = client.delete("/cars/all")
    assert r.status_code == 204
    assert r.content == b""
    assert client.get("/cars").json() == []
    assert len(repo.models) == 2

    client.post("/cars", json=_car())
    assert len(repo.models) == 2


def test_delete_all_on_empty_inventory_still_204(test_app, repo):
    client = TestClient(test_app)
    assert client.delete("/cars/all").status_code == 204
    assert repo.calls == ["delete_all_cars"]


def test_delete_all_database_failure_returns_500(test_app):
    repo = FakeCarRepository(raise_on={"delete_all_cars": store_error("permission denied")})
    test_app.dependency_overrides[get_car_repository] = lambda: repo
    client = TestClient(test_app)
    r = client.delete("/cars/all")
    assert r.status_code == 500
    assert r.json() == {"error": "Failed to delete all cars", "details": "permission denied"}


def test_health_does_not_touch_repository(test_app, repo):
    client = TestClient(test_app)
    assert client.get("/health").json() == {"status": "ok"}
    assert repo.calls == []


def _stock(client, count):
    for year in range(2001, 2001 + count):
        client.post("/cars", json=_car(year=year))


def test_delete_reads_only_the_leading_integer_of_the_id(test_app):
    client = TestClient(test_app)
    _stock(client, 12)

    assert client.delete("/cars/1_0").status_code == 204
    assert client.delete("/cars/2.5").status_code == 204
    assert client.delete("/cars/12abc").status_code == 204

    ids = [row["car_id"] for row in client.get("/cars").json()]
    assert ids == [3, 4, 5, 6, 7, 8, 9, 10, 11]


def test_delete_fractional_id_targets_its_integer_part(test_app, repo):
    client = TestClient(test_app)
    _stock(client, 2)
    repo.calls.clear()

    r = client.delete("/cars/1.5")
    assert r.status_code == 204
    assert repo.calls == ["delete_car"]
    assert list(repo.cars) == [2]
