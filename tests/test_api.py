import pytest
from httpx import ASGITransport, AsyncClient

from fantaelite.api import create_app
from fantaelite.catalog import CatalogCache, build_catalog
from fantaelite.config import Settings
from fantaelite.ingest import normalize_rows
from fantaelite.models import Role

from tests.factories import QUOTA, make_catalog, scaled_counts


API_KEY = "secret"
AUTH = {"Authorization": f"Bearer {API_KEY}"}


def _cache(counts=None) -> CatalogCache:
    cache = CatalogCache()
    cache.replace(make_catalog(counts or scaled_counts(4)))
    return cache


@pytest.fixture
async def client():
    app = create_app(Settings(api_key=API_KEY, max_tries=50), _cache())
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        yield async_client


def _client_for(app) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver")


def _listone() -> str:
    return """Nome;Squadra;Ruolo;Quotazione;Fantamedia;Partite
Audero;Como;Portiere;8;3,75;8
Musso;Atalanta;P;12;6,00;1
Dorgu;Lecce;Difensore;13;6,12;21
Morata;Milan;Attaccante;60;6,88;16
Mister;Roma;Allenatore;1;0;0
"""


@pytest.mark.anyio
async def test_health(client: AsyncClient):
    resp = await client.get("/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "ok"
    assert body["service"] == "fantaelite"
    assert body["time"]


@pytest.mark.anyio
async def test_generate_requires_bearer_token(client: AsyncClient):
    resp = await client.post("/api/generate", json={"mode": "equilibrata"})
    assert resp.status_code == 401

    resp = await client.post(
        "/api/generate",
        json={"mode": "equilibrata"},
        headers={"Authorization": "Bearer wrong"},
    )
    assert resp.status_code == 403


@pytest.mark.anyio
async def test_generate_returns_full_roster(client: AsyncClient):
    resp = await client.post(
        "/api/generate",
        json={"mode": "equilibrata", "seed": "match-1", "email": "coach@example.com"},
        headers=AUTH,
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["ok"] is True
    assert body["mode"] == "equilibrata"
    assert body["seed"] == "match-1"
    assert body["email"] == "coach@example.com"
    assert body["second_roster"] is None

    roster = body["roster"]
    assert len(roster["players"]) == 25
    assert roster["summary"]["counts"] == {role.value: quota for role, quota in QUOTA.items()}
    assert roster["summary"]["total"] == pytest.approx(sum(p["price"] for p in roster["players"]))
    assert roster["budget"]["min"] == 0.0
    assert roster["budget"]["max"] == 1000.0
    assert roster["satisfied_tolerance"] in {"strict", "relaxed_2pct", "relaxed_5pct", "none"}
    assert roster["used_fallback"] is (roster["satisfied_tolerance"] == "none")


@pytest.mark.anyio
async def test_generate_is_reproducible_for_a_seed(client: AsyncClient):
    body = {"mode": "attacco", "seed": "replay"}

    first = (await client.post("/api/generate", json=body, headers=AUTH)).json()
    second = (await client.post("/api/generate", json=body, headers=AUTH)).json()

    assert first["roster"]["players"] == second["roster"]["players"]


@pytest.mark.anyio
async def test_generate_accepts_camel_case_budget(client: AsyncClient):
    resp = await client.post(
        "/api/generate",
        json={"mode": "difesa", "budgetMin": 100, "budgetMax": 900, "seed": "camel"},
        headers=AUTH,
    )
    assert resp.status_code == 200
    budget = resp.json()["roster"]["budget"]
    assert budget["min"] == 100.0
    assert budget["max"] == 900.0
    assert budget["diff_from_min"] == pytest.approx(budget["total"] - 100.0)
    assert budget["diff_from_max"] == pytest.approx(900.0 - budget["total"])


@pytest.mark.anyio
async def test_generate_paired_rosters(client: AsyncClient):
    resp = await client.post(
        "/api/generate",
        json={"mode": "equilibrata", "seed": "pair", "paired": True, "minDistinctFraction": 0.5},
        headers=AUTH,
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["roster"]["seed"] == "pair"
    second = body["second_roster"]
    assert second is not None
    assert second["seed"].startswith("pair/b#")
    diversity = second["diversity"]
    assert diversity["max_overlap_fraction"] == pytest.approx(0.5)
    assert diversity["satisfied"] or second["used_fallback"]


@pytest.mark.anyio
async def test_generate_cheapest(client: AsyncClient):
    resp = await client.post(
        "/api/generate",
        json={"mode": "equilibrata", "seed": "cheap", "cheapest": True},
        headers=AUTH,
    )
    assert resp.status_code == 200
    roster = resp.json()["roster"]
    assert roster["fallback"] == "cheapest"
    assert roster["used_fallback"] is True


@pytest.mark.anyio
@pytest.mark.parametrize(
    "payload",
    [
        {"mode": "catenaccio"},
        {"mode": "equilibrata", "budgetMin": 700, "budgetMax": 600},
    ],
)
async def test_generate_rejects_bad_requests(client: AsyncClient, payload):
    resp = await client.post("/api/generate", json=payload, headers=AUTH)
    assert resp.status_code == 400


@pytest.mark.anyio
async def test_generate_validates_fraction(client: AsyncClient):
    resp = await client.post(
        "/api/generate",
        json={"mode": "equilibrata", "paired": True, "minDistinctFraction": 1.5},
        headers=AUTH,
    )
    assert resp.status_code == 422


@pytest.mark.anyio
async def test_generate_insufficient_catalog():
    counts = dict(QUOTA)
    counts[Role.A] = 2
    app = create_app(Settings(api_key=API_KEY, max_tries=10), _cache(counts))

    async with _client_for(app) as client:
        resp = await client.post("/api/generate", json={"mode": "equilibrata"}, headers=AUTH)

    assert resp.status_code == 422
    assert "Role A" in resp.json()["detail"]


@pytest.mark.anyio
async def test_generate_without_catalog_is_unavailable():
    app = create_app(Settings(api_key=API_KEY), CatalogCache())

    async with _client_for(app) as client:
        resp = await client.post("/api/generate", json={"mode": "equilibrata"}, headers=AUTH)

    assert resp.status_code == 503


@pytest.mark.anyio
async def test_generate_without_configured_key_is_unavailable():
    app = create_app(Settings(api_key=None), _cache())

    async with _client_for(app) as client:
        resp = await client.post("/api/generate", json={"mode": "equilibrata"}, headers=AUTH)

    assert resp.status_code == 503


@pytest.mark.anyio
async def test_catalog_preview(client: AsyncClient):
    files = {"catalog": ("listone.csv", _listone().encode("utf-8"), "text/csv")}

    resp = await client.post("/api/catalog/preview", files=files, headers=AUTH)

    assert resp.status_code == 200
    body = resp.json()
    assert body["total_rows"] == 5
    assert body["accepted"] == 4
    assert body["dropped_by_reason"] == {"missing_name": 0, "unknown_role": 1, "invalid_price": 0}
    assert body["columns"]["price"] == "Quotazione"
    assert body["role_counts"] == {"P": 2, "D": 1, "C": 0, "A": 1}


@pytest.mark.anyio
async def test_catalog_preview_rejects_bad_uploads(client: AsyncClient):
    empty = {"catalog": ("empty.csv", b"  \n", "text/csv")}
    resp = await client.post("/api/catalog/preview", files=empty, headers=AUTH)
    assert resp.status_code == 400

    no_price = {"catalog": ("bad.csv", b"Nome,Ruolo\nMusso,P\n", "text/csv")}
    resp = await client.post("/api/catalog/preview", files=no_price, headers=AUTH)
    assert resp.status_code == 400
    assert "price" in resp.json()["detail"]

    resp = await client.post("/api/catalog/preview", files=no_price)
    assert resp.status_code == 401


@pytest.mark.anyio
async def test_generate_warns_about_missing_prices():
    rows = []
    for role, quota in QUOTA.items():
        for i in range(quota):
            rows.append({
                "Nome": f"{role.value}{i}",
                "Squadra": "Como",
                "Ruolo": role.value,
                "Quotazione": "n/d" if (role is Role.P and i == 0) else str(5 + i),
            })
    cache = CatalogCache()
    cache.replace(build_catalog(normalize_rows(rows).candidates))
    app = create_app(Settings(api_key=API_KEY, max_tries=10), cache)

    async with _client_for(app) as client:
        resp = await client.post(
            "/api/generate",
            json={"mode": "equilibrata", "seed": "unpriced"},
            headers=AUTH,
        )

    assert resp.status_code == 200
    roster = resp.json()["roster"]
    assert roster["warnings"]["missing_prices"] == [{"role": "P", "name": "P0", "team": "Como"}]
    keeper = next(player for player in roster["players"] if player["name"] == "P0")
    assert keeper["price"] == 0.0


@pytest.mark.anyio
async def test_generate_has_no_warnings_for_a_priced_catalog(client: AsyncClient):
    resp = await client.post("/api/generate", json={"mode": "equilibrata", "seed": "priced"}, headers=AUTH)

    assert resp.json()["roster"]["warnings"] == {"missing_prices": []}
