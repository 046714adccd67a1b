from sqlalchemy import select

from app.models.sponsor_city import sponsor_cities


async def create_sponsor(client, **overrides):
    body = {"name": "Acme", "email": "a@a.com", "cityIds": []}
    body.update(overrides)
    return await client.post("/api/sponsors", json=body)


async def test_create_sponsor_with_cities(client, make_city, next_event):
    lima = await make_city("Lima")
    await next_event()

    response = await create_sponsor(client, cityIds=[lima["id"]], phone=" 999 888 777 ")

    assert response.status_code == 201
    body = response.json()
    assert body["name"] == "Acme"
    assert body["phone"] == "999 888 777"
    assert body["cityNames"] == ["Lima"]
    assert body["cityIds"] == [lima["id"]]

    event = await next_event()
    assert event["type"] == "patrocinador_agregado"
    assert event["data"]["cityNames"] == ["Lima"]


async def test_sponsor_without_cities_has_empty_lists(client):
    response = await create_sponsor(client, cityIds=None)

    assert response.status_code == 201
    assert response.json()["cityNames"] == []
    assert response.json()["cityIds"] == []

    listed = (await client.get("/api/sponsors")).json()
    assert listed[0]["cityNames"] == []
    assert listed[0]["cityIds"] == []


async def test_create_sponsor_validation(client):
    response = await client.post("/api/sponsors", json={"name": "Acme"})
    assert response.status_code == 400
    assert response.json() == {"error": "El nombre y email son requeridos"}

    for email in ("acme", "acme@", "a@b", "a b@c.com"):
        response = await create_sponsor(client, email=email)
        assert response.status_code == 400
        assert response.json() == {"error": "El formato del email no es válido"}


async def test_duplicate_email_is_rejected(client):
    assert (await create_sponsor(client)).status_code == 201

    response = await create_sponsor(client, name="Otro", email=" a@a.com ")

    assert response.status_code == 400
    assert response.json() == {"error": "Ya existe un patrocinador con ese email"}
    assert len((await client.get("/api/sponsors")).json()) == 1


async def test_create_sponsor_with_unknown_city_creates_nothing(client, make_city):
    lima = await make_city("Lima")

    response = await create_sponsor(client, cityIds=[lima["id"], 999])

    assert response.status_code == 400
    assert "999" in response.json()["error"]
    assert (await client.get("/api/sponsors")).json() == []


async def test_duplicate_city_ids_collapse(client, make_city):
    lima = await make_city("Lima")

    response = await create_sponsor(client, cityIds=[lima["id"], lima["id"]])

    assert response.status_code == 201
    assert response.json()["cityIds"] == [lima["id"]]


async def test_update_replaces_city_set(client, make_city, next_event):
    lima = await make_city("Lima")
    cusco = await make_city("Cusco")
    piura = await make_city("Piura")
    sponsor = (await create_sponsor(client, cityIds=[lima["id"], cusco["id"]])).json()
    for _ in range(4):
        await next_event()

    response = await client.put(
        f"/api/sponsors/{sponsor['id']}",
        json={"name": "Acme Perú", "email": "a@a.com", "cityIds": [piura["id"], cusco["id"]]},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["name"] == "Acme Perú"
    assert set(body["cityIds"]) == {cusco["id"], piura["id"]}
    assert dict(zip(body["cityIds"], body["cityNames"])) == {cusco["id"]: "Cusco", piura["id"]: "Piura"}

    event = await next_event()
    assert event["type"] == "patrocinador_actualizado"


async def test_update_with_empty_city_ids_removes_all(client, session, make_city):
    lima = await make_city("Lima")
    sponsor = (await create_sponsor(client, cityIds=[lima["id"]])).json()

    response = await client.put(
        f"/api/sponsors/{sponsor['id']}",
        json={"name": "Acme", "email": "a@a.com", "cityIds": []},
    )

    assert response.status_code == 200
    assert response.json()["cityNames"] == []
    assert response.json()["cityIds"] == []
    rows = (await session.execute(select(sponsor_cities))).all()
    assert rows == []


async def test_failed_update_keeps_previous_state(client, make_city):
    lima = await make_city("Lima")
    sponsor = (await create_sponsor(client, cityIds=[lima["id"]])).json()

    response = await client.put(
        f"/api/sponsors/{sponsor['id']}",
        json={"name": "Cambiado", "email": "a@a.com", "cityIds": [999]},
    )

    assert response.status_code == 400
    current = (await client.get(f"/api/sponsors/{sponsor['id']}")).json()
    assert current["name"] == "Acme"
    assert current["cityIds"] == [lima["id"]]


async def test_update_duplicate_email(client):
    await create_sponsor(client)
    other = (await create_sponsor(client, name="Otro", email="b@b.com")).json()

    response = await client.put(
        f"/api/sponsors/{other['id']}",
        json={"name": "Otro", "email": "a@a.com"},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Ya existe un patrocinador con ese email"}


async def test_update_missing_sponsor(client):
    response = await client.put("/api/sponsors/999", json={"name": "Acme", "email": "a@a.com"})

    assert response.status_code == 404
    assert response.json() == {"error": "Patrocinador no encontrado"}


async def test_delete_sponsor(client, session, make_city, next_event):
    lima = await make_city("Lima")
    sponsor = (await create_sponsor(client, cityIds=[lima["id"]])).json()
    await next_event()
    await next_event()

    response = await client.delete(f"/api/sponsors/{sponsor['id']}")

    assert response.status_code == 200
    assert response.json() == {"message": "Patrocinador eliminado correctamente"}
    event = await next_event()
    assert event == {
        "type": "patrocinador_eliminado",
        "data": {"id": sponsor["id"], "message": "Patrocinador eliminado"},
        "timestamp": event["timestamp"],
    }
    assert (await session.execute(select(sponsor_cities))).all() == []
    assert (await client.get("/api/cities")).json()[0]["name"] == "Lima"

    response = await client.delete(f"/api/sponsors/{sponsor['id']}")
    assert response.status_code == 404


async def test_search_sponsors(client):
    await create_sponsor(client, name="Backus", email="contacto@backus.pe", representative="Ana Torres")
    await create_sponsor(client, name="Inca Kola", email="info@ik.pe")
    await create_sponsor(client, name="Alicorp", email="hola@alicorp.pe", representative="Luis")

    by_name = (await client.get("/api/sponsors/search", params={"q": "inca"})).json()
    assert [s["name"] for s in by_name] == ["Inca Kola"]

    by_representative = (await client.get("/api/sponsors/search", params={"q": "TORRES"})).json()
    assert [s["name"] for s in by_representative] == ["Backus"]

    by_email = (await client.get("/api/sponsors/search", params={"q": ".pe"})).json()
    assert [s["name"] for s in by_email] == ["Alicorp", "Backus", "Inca Kola"]

    assert (await client.get("/api/sponsors/search")).json() == []


async def test_end_to_end_scenario(client):
    response = await client.post("/api/cities", json={"name": "Lima"})
    assert response.status_code == 201
    city = response.json()
    assert city["id"] == 1
    assert city["name"] == "Lima"

    response = await client.post("/api/cities", json={"name": "Lima"})
    assert response.status_code == 400
    assert "error" in response.json()

    response = await client.post("/api/sponsors", json={"name": "Acme", "email": "a@a.com", "cityIds": [1]})
    assert response.status_code == 201
    sponsor = response.json()
    assert sponsor["cityNames"] == ["Lima"]

    response = await client.put(
        f"/api/sponsors/{sponsor['id']}",
        json={"name": "Acme", "email": "a@a.com", "cityIds": []},
    )
    assert response.status_code == 200
    assert response.json()["cityNames"] == []

    response = await client.put(
        f"/api/sponsors/{sponsor['id']}",
        json={"name": "Acme", "email": "a@a.com", "cityIds": [1]},
    )
    assert response.json()["cityNames"] == ["Lima"]

    assert (await client.delete("/api/cities/1")).status_code == 200
    sponsors = (await client.get("/api/sponsors")).json()
    assert len(sponsors) == 1
    assert sponsors[0]["cityNames"] == []
    assert sponsors[0]["cityIds"] == []


async def test_out_of_range_city_id_is_a_client_error(client):
    response = await client.post(
        "/api/sponsors",
        json={"name": "Acme", "email": "acme@example.com", "cityIds": [99999999999999999999]},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Datos de entrada inválidos"}
    assert (await client.get("/api/sponsors")).json() == []
    assert (await client.get("/api/sponsors/99999999999999999999")).status_code == 400
