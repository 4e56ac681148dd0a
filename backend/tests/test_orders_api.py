from orderflow.services.calculator import compute_installment


def _order_payload(**overrides):
    payload = {
        "nama_nasabah": "Rahmat Hidayat",
        "no_hp": "081234567890",
        "nama_pasangan": "Siti Aminah",
        "type_unit": "Avanza 1.5 G CVT",
        "merk": "Toyota",
        "dealer": "AUTO 2000 BANJARMASIN",
        "jenis_pembiayaan": "Passenger",
        "nama_program": "Toyota Reguler",
        "otr": 200_000_000,
        "tdp": 40_000_000,
        "tenor": 36,
        "catatan_khusus": "Nasabah minta survey sore",
    }
    payload.update(overrides)
    return payload


def _create_order(client, team, **overrides):
    response = client.post("/orders/", json=_order_payload(**overrides), headers=team["sales"])
    assert response.status_code == 201, response.text
    return response.json()


def _act(client, order_id, headers, **body):
    return client.post(f"/orders/{order_id}/actions", json=body, headers=headers)


def test_sales_creates_order_with_computed_installment(client, program, team):
    body = _create_order(client, team)

    assert body["status"] == "Baru"
    assert body["angsuran"] == compute_installment(200_000_000, 40_000_000, 36, 5)
    assert body["sales_name"] == "Budi Sales"
    assert body["claimed_by"] is None
    assert body["notes"] == []


def test_order_creation_does_not_enforce_minimum_tdp(client, program, team):
    body = _create_order(client, team, tdp=10_000_000)
    assert body["tdp"] == 10_000_000


def test_order_creation_rejects_unknown_program_or_tenor(client, program, team):
    response = client.post("/orders/", json=_order_payload(nama_program="Tidak Ada"), headers=team["sales"])
    assert response.status_code == 422

    response = client.post("/orders/", json=_order_payload(tenor=48), headers=team["sales"])
    assert response.status_code == 422


def test_only_sales_create_orders(client, program, team):
    response = client.post("/orders/", json=_order_payload(), headers=team["cmo"])
    assert response.status_code == 403

    response = client.post("/orders/", json=_order_payload())
    assert response.status_code == 401


def test_full_review_workflow(client, program, team):
    order_id = _create_order(client, team)["id"]

    rejected = _act(client, order_id, team["sales"], action="claim")
    assert rejected.status_code == 409
    assert rejected.json()["detail"]["from_status"] == "Baru"
    assert rejected.json()["detail"]["actor_role"] == "sales"

    claimed = _act(client, order_id, team["cmo"], action="claim")
    assert claimed.status_code == 200, claimed.text
    body = claimed.json()
    assert body["status"] == "Claim"
    assert body["claimed_by"] == team["cmo"]["X-Actor-Id"]
    assert body["claimed_at"] is not None
    assert [note["status"] for note in body["notes"]] == ["Claim"]

    slik = _act(client, order_id, team["cmo"], action="submit_slik", hasil_slik="Ada Catatan", note="kol 2")
    assert slik.status_code == 200, slik.text
    assert slik.json()["status"] == "Pertimbangkan"
    assert slik.json()["hasil_slik"] == "Ada Catatan"

    assert _act(client, order_id, team["cmo"], action="approve").status_code == 409

    noted = client.post(f"/orders/{order_id}/notes", json={"note": "Minta slip gaji"}, headers=team["cmh"])
    assert noted.status_code == 201
    assert noted.json()["status"] == "Pertimbangkan"
    assert noted.json()["notes"][-1]["status"] == "Pertimbangkan"

    approved = _act(client, order_id, team["cmh"], action="approve", note="Penghasilan cukup")
    assert approved.status_code == 200
    body = approved.json()
    assert body["status"] == "Approve"
    assert body["decision_reason"] == "Penghasilan cukup"
    assert [note["status"] for note in body["notes"]] == ["Claim", "Pertimbangkan", "Pertimbangkan", "Approve"]

    for action in ("reject", "claim", "add_note"):
        assert _act(client, order_id, team["cmh"], action=action, note="x").status_code == 409

    notes = client.get(f"/orders/{order_id}/notes").json()
    assert len(notes) == 4
    assert notes[0]["note"] == "Order di-claim oleh Citra CMO"


def test_slik_tolak_rejects_order(client, program, team):
    order_id = _create_order(client, team)["id"]
    _act(client, order_id, team["cmo"], action="claim")

    response = _act(client, order_id, team["cmo"], action="submit_slik", hasil_slik="Tolak")
    assert response.json()["status"] == "Reject"

    appeal = client.post(f"/orders/{order_id}/notes", json={"note": "banding"}, headers=team["cmo"])
    assert appeal.status_code == 409


def test_clear_slik_then_map_in(client, program, team):
    order_id = _create_order(client, team)["id"]
    _act(client, order_id, team["cmo"], action="claim")
    _act(client, order_id, team["cmo"], action="submit_slik", hasil_slik="Clear")

    assert client.get(f"/orders/{order_id}/actions", headers=team["cmo"]).json() == ["map_in", "add_note"]

    mapped = _act(client, order_id, team["cmo"], action="map_in")
    assert mapped.json()["status"] == "Map In"

    decided = _act(client, order_id, team["cmh"], action="reject", note="DSR terlalu tinggi")
    assert decided.json()["status"] == "Reject"


def test_submit_slik_requires_result(client, program, team):
    order_id = _create_order(client, team)["id"]
    _act(client, order_id, team["cmo"], action="claim")

    response = _act(client, order_id, team["cmo"], action="submit_slik")
    assert response.status_code == 422
    assert client.get(f"/orders/{order_id}").json()["status"] == "Claim"


def test_unknown_order_and_bad_role(client, team):
    assert _act(client, 999, team["cmo"], action="claim").status_code == 404
    assert client.get("/orders/999").status_code == 404

    headers = {"X-Actor-Id": "9", "X-Actor-Name": "X", "X-Actor-Role": "manager"}
    assert _act(client, 1, headers, action="claim").status_code == 422


def test_list_orders_respects_role_visibility(client, program, team):
    first = _create_order(client, team)["id"]
    _create_order(client, team, nama_nasabah="Andi Saputra")
    _act(client, first, team["cmo"], action="claim")
    _act(client, first, team["cmo"], action="submit_slik", hasil_slik="Clear")

    other_sales = {"X-Actor-Id": "77", "X-Actor-Name": "Lain", "X-Actor-Role": "sales"}
    assert client.get("/orders/", headers=other_sales).json()["total"] == 0
    assert client.get("/orders/", headers=team["sales"]).json()["total"] == 2

    other_cmo = {"X-Actor-Id": "88", "X-Actor-Name": "CMO Lain", "X-Actor-Role": "cmo"}
    visible = client.get("/orders/", headers=other_cmo).json()
    assert [item["nama_nasabah"] for item in visible["items"]] == ["Andi Saputra"]

    assert client.get("/orders/", params={"status": "Proses"}).json()["total"] == 1
    assert client.get("/orders/", params={"q": "andi"}).json()["total"] == 1

    stats = client.get("/orders/stats").json()
    assert stats["total"] == 2
    assert stats["by_status"]["Baru"] == 1
    assert stats["by_status"]["Proses"] == 1
    assert stats["by_status"]["Approve"] == 0


def test_dashboard_renders(client, program, team):
    _create_order(client, team)
    response = client.get("/")
    assert response.status_code == 200
    assert "Rahmat Hidayat" in response.text


def test_other_cmo_cannot_act_on_claimed_order(client, program, team):
    order_id = _create_order(client, team)["id"]
    _act(client, order_id, team["cmo"], action="claim")

    other_cmo = {"X-Actor-Id": "999", "X-Actor-Name": "CMO Lain", "X-Actor-Role": "cmo"}
    response = _act(client, order_id, other_cmo, action="submit_slik", hasil_slik="Tolak")
    assert response.status_code == 409
    assert "CMO lain" in response.json()["detail"]["message"]

    noted = client.post(f"/orders/{order_id}/notes", json={"note": "ikut cek"}, headers=other_cmo)
    assert noted.status_code == 409

    body = client.get(f"/orders/{order_id}").json()
    assert body["status"] == "Claim"
    assert body["claimed_by"] == team["cmo"]["X-Actor-Id"]
    assert len(body["notes"]) == 1


def test_consider_reason_survives_decision_without_note(client, program, team):
    order_id = _create_order(client, team)["id"]
    _act(client, order_id, team["cmo"], action="claim")
    _act(client, order_id, team["cmo"], action="submit_slik", hasil_slik="Clear")
    _act(client, order_id, team["cmo"], action="map_in")

    considered = _act(client, order_id, team["cmh"], action="consider", note="Tunggu slip gaji")
    assert considered.json()["decision_reason"] == "Tunggu slip gaji"

    approved = _act(client, order_id, team["cmh"], action="approve")
    assert approved.json()["status"] == "Approve"
    assert approved.json()["decision_reason"] == "Tunggu slip gaji"
