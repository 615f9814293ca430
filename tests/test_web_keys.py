ALICE = {"X-User-Id": "alice"}


def test_requires_a_user(client):
    assert client.get("/api/user/keys").status_code == 401
    assert client.post("/api/user/keys", json={"gemini_key": "k"}).status_code == 401
    assert client.delete("/api/user/keys?key_type=gemini").status_code == 401


def test_status_for_new_user(client):
    resp = client.get("/api/user/keys", headers=ALICE)
    assert resp.status_code == 200
    assert resp.get_json() == {"has_gemini": False, "has_groq": False, "has_lingo": False, "ai_provider": "gemini"}


def test_save_then_status_never_returns_key_material(client):
    resp = client.post("/api/user/keys", headers=ALICE, json={
        "gemini_key": "  AIza-alice-secret  ",
        "lingo_key": "lingo-alice-secret",
        "ai_provider": "groq",
    })
    assert resp.get_json() == {"success": True}

    resp = client.get("/api/user/keys", headers=ALICE)
    assert resp.get_json() == {"has_gemini": True, "has_groq": False, "has_lingo": True, "ai_provider": "groq"}
    assert b"alice-secret" not in resp.data


def test_keys_are_per_user(client):
    client.post("/api/user/keys", headers=ALICE, json={"groq_key": "groq-alice"})
    resp = client.get("/api/user/keys", headers={"X-User-Id": "bob"})
    assert resp.get_json()["has_groq"] is False


def test_empty_string_clears_a_key(client):
    client.post("/api/user/keys", headers=ALICE, json={"gemini_key": "gem", "groq_key": "groq"})
    client.post("/api/user/keys", headers=ALICE, json={"gemini_key": ""})
    status = client.get("/api/user/keys", headers=ALICE).get_json()
    assert status["has_gemini"] is False
    assert status["has_groq"] is True


def test_invalid_payloads(client):
    resp = client.post("/api/user/keys", headers=ALICE, json={"ai_provider": "openai"})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Invalid ai_provider"

    resp = client.post("/api/user/keys", headers=ALICE, json={"gemini_key": 42})
    assert resp.status_code == 400

    resp = client.post("/api/user/keys", headers=ALICE, json=["gemini_key"])
    assert resp.status_code == 400


def test_delete_one_key(client):
    client.post("/api/user/keys", headers=ALICE, json={"gemini_key": "gem", "lingo_key": "lin"})

    resp = client.delete("/api/user/keys?key_type=lingo", headers=ALICE)

    assert resp.get_json() == {"success": True}
    status = client.get("/api/user/keys", headers=ALICE).get_json()
    assert status["has_lingo"] is False
    assert status["has_gemini"] is True


def test_delete_rejects_unknown_key_type(client):
    resp = client.delete("/api/user/keys?key_type=apify", headers=ALICE)
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Invalid key_type"
    assert client.delete("/api/user/keys", headers=ALICE).status_code == 400


def test_saving_without_encryption_secret_fails(client, monkeypatch):
    monkeypatch.delenv("ENCRYPTION_SECRET")
    resp = client.post("/api/user/keys", headers=ALICE, json={"gemini_key": "gem"})
    assert resp.status_code == 500
    assert resp.get_json()["error"] == "Encryption not configured"
