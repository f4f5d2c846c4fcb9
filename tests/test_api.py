from decimal import Decimal

import pytest

from storefront.utils.settings import SESSION_COOKIE_NAME


def test_health(make_client):
    resp = make_client().get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_login_user_logout(login):
    client, account = login("alice")

    resp = client.get("/user")
    assert resp.status_code == 200
    assert resp.json() == {"username": "alice", "id": account.id}

    resp = client.get("/logout")
    assert resp.status_code == 200
    assert resp.json() == {"message": "logout success"}

    assert client.get("/user").status_code == 401


def test_logout_destroys_session_even_if_client_keeps_token(login, make_client, session_store):
    client, _ = login("alice")
    token = client.cookies.get(SESSION_COOKIE_NAME)

    client.get("/logout")

    replay = make_client()
    replay.cookies.set(SESSION_COOKIE_NAME, token)
    assert replay.get("/user").status_code == 401
    assert session_store.get(token) is None


def test_login_bad_credentials_is_400(make_client, make_account):
    make_account("alice", "secret-pass")

    resp = make_client().post("/login", json={"username": "alice", "password": "wrong"})

    assert resp.status_code == 400
    assert resp.json()["message"] == "Incorrect username or password"


def test_login_validation_error(make_client):
    resp = make_client().post("/login", json={"username": "   "})

    assert resp.status_code == 400
    fields = {e["field"] for e in resp.json()["errors"]}
    assert {"username", "password"} <= fields


def test_register(make_client):
    client = make_client()

    resp = client.post(
        "/register",
        json={"username": "dave", "password": "long-password", "email": "Dave@Example.com"},
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "register success"
    assert body["newAccount"]["username"] == "dave"
    assert body["newAccount"]["email"] == "dave@example.com"
    assert "password_hash" not in body["newAccount"]

    resp = client.post("/login", json={"username": "dave", "password": "long-password"})
    assert resp.status_code == 200


def test_register_duplicate_username(make_client, make_account):
    make_account("dave")

    resp = make_client().post("/register", json={"username": "dave", "password": "long-password"})

    assert resp.status_code == 400
    assert resp.json()["errors"][0]["field"] == "username"


def test_register_blank_username_is_400(make_client):
    client = make_client()

    resp = client.post("/register", json={"username": "   ", "password": "long-password"})

    assert resp.status_code == 400
    assert resp.json()["errors"][0]["field"] == "username"
    assert client.post("/login", json={"username": "", "password": "long-password"}).status_code == 400


def test_unauthenticated_cart_access(make_client):
    client = make_client()
    assert client.get("/cart").status_code == 401
    assert client.post("/cart").status_code == 401
    assert client.post("/cart/1/checkout").status_code == 401


def test_extend_session_keeps_session_alive(login, clock):
    client, _ = login("alice")

    clock.advance(1000)
    resp = client.post("/extend-session")
    assert resp.status_code == 200
    assert resp.json()["success"] is True

    # po pierwotnym terminie (1800 s), przed przedluzonym
    clock.advance(1000)
    assert client.get("/user").status_code == 200


def test_session_expires_without_extend(login, clock):
    client, _ = login("alice")

    clock.advance(1801)

    assert client.get("/user").status_code == 401


def test_account_read_and_update_own(login):
    client, account = login("alice")

    resp = client.put(
        f"/accounts/{account.id}",
        json={
            "full_name": "Alice Liddell",
            "date_of_birth": "1990-05-04",
            "address": "1 Rabbit Hole",
            "email": "Alice@Example.com",
        },
    )
    assert resp.status_code == 200
    assert resp.json()["email"] == "alice@example.com"

    resp = client.get(f"/accounts/{account.id}")
    assert resp.status_code == 200
    assert resp.json()["full_name"] == "Alice Liddell"
    assert resp.json()["username"] == "alice"


def test_account_update_validation(login):
    client, account = login("alice")

    resp = client.put(f"/accounts/{account.id}", json={"full_name": "", "email": "not-an-email"})

    assert resp.status_code == 400
    assert resp.json()["errors"]


def test_products_catalog(make_client, products):
    client = make_client()

    assert [p["id"] for p in client.get("/products").json()] == [5, 6, 7]
    assert [p["id"] for p in client.get("/products", params={"categoryId": 1}).json()] == [5, 7]
    assert client.get("/products/5").json()["name"] == "Mug"
    assert client.get("/products/999").status_code == 404


def test_cart_to_order_scenario(login, products):
    client, account = login("alice")

    resp = client.post("/cart")
    assert resp.status_code == 201
    cart = resp.json()
    assert cart["status"] == "open"
    assert cart["items"] == []
    cart_id = cart["id"]

    resp = client.post(f"/cart/{cart_id}", json={"product_id": 5, "quantity": 2})
    assert resp.status_code == 200
    assert [(i["product_id"], i["quantity"]) for i in resp.json()["items"]] == [(5, 2)]

    detail = client.get(f"/cart/{cart_id}").json()
    assert Decimal(detail["total"]) == Decimal("19.98")

    resp = client.post(f"/cart/{cart_id}/checkout")
    assert resp.status_code == 201
    order = resp.json()
    assert order["cart_id"] == cart_id
    assert order["status"] == "pending"
    assert Decimal(order["total"]) == Decimal("19.98")

    resp = client.post(f"/cart/{cart_id}/checkout")
    assert resp.status_code == 400
    assert len(client.get("/orders").json()) == 1

    resp = client.post(f"/cart/{cart_id}/confirm-order")
    assert resp.status_code == 200
    assert resp.json()["status"] == "confirmed"

    resp = client.post(f"/cart/{cart_id}/confirm-order")
    assert resp.status_code == 400

    resp = client.get(f"/orders/{order['id']}")
    assert resp.status_code == 200
    assert resp.json()["items"][0]["unit_price"] == "9.99"


def test_checkout_empty_cart_http(login):
    client, _ = login("alice")
    cart_id = client.post("/cart").json()["id"]

    resp = client.post(f"/cart/{cart_id}/checkout")

    assert resp.status_code == 400
    assert client.get("/cart").json()["status"] == "open"


def test_checkout_out_of_stock_http(login, products):
    client, _ = login("alice")
    cart_id = client.post("/cart").json()["id"]
    client.post(f"/cart/{cart_id}", json={"product_id": 6, "quantity": 5})

    resp = client.post(f"/cart/{cart_id}/checkout")

    assert resp.status_code == 409
    assert resp.json()["errors"][0]["product_id"] == 6
    assert client.get("/orders").json() == []


def test_update_cart_unknown_product_http(login, products):
    client, _ = login("alice")
    cart_id = client.post("/cart").json()["id"]

    resp = client.post(f"/cart/{cart_id}", json={"product_id": 999, "quantity": 1})

    assert resp.status_code == 404


def test_update_cart_huge_quantity_is_400(login, products):
    client, _ = login("alice")
    cart_id = client.post("/cart").json()["id"]

    resp = client.post(f"/cart/{cart_id}", json={"product_id": 5, "quantity": 10**30})

    assert resp.status_code == 400
    assert resp.json()["errors"][0]["field"] == "quantity"
    assert client.get(f"/cart/{cart_id}").json()["items"] == []


def test_remove_absent_item_http(login, products):
    client, _ = login("alice")
    cart_id = client.post("/cart").json()["id"]
    client.post(f"/cart/{cart_id}", json={"product_id": 5, "quantity": 1})

    resp = client.delete(f"/cart/{cart_id}", params={"product_id": 7})

    assert resp.status_code == 200
    assert [i["product_id"] for i in resp.json()["items"]] == [5]


@pytest.fixture
def alice_and_bob(login, products):
    alice, alice_account = login("alice")
    bob, bob_account = login("bob")
    cart_id = alice.post("/cart").json()["id"]
    alice.post(f"/cart/{cart_id}", json={"product_id": 5, "quantity": 1})
    return alice, alice_account, bob, bob_account, cart_id


def test_other_account_cannot_touch_cart(alice_and_bob):
    alice, _, bob, _, cart_id = alice_and_bob

    assert bob.get(f"/cart/{cart_id}").status_code == 403
    assert bob.post(f"/cart/{cart_id}", json={"product_id": 5, "quantity": 1}).status_code == 403
    assert bob.delete(f"/cart/{cart_id}", params={"product_id": 5}).status_code == 403
    assert bob.post(f"/cart/{cart_id}/checkout").status_code == 403
    assert bob.post(f"/cart/{cart_id}/confirm-order").status_code == 403

    assert alice.get("/cart").json()["items"][0]["quantity"] == 1


def test_other_account_cannot_read_account_or_orders(alice_and_bob):
    alice, alice_account, bob, _, cart_id = alice_and_bob
    order_id = alice.post(f"/cart/{cart_id}/checkout").json()["id"]

    assert bob.get(f"/accounts/{alice_account.id}").status_code == 403
    assert bob.put(
        f"/accounts/{alice_account.id}",
        json={
            "full_name": "Bob",
            "date_of_birth": "1990-01-01",
            "address": "x",
            "email": "bob@example.com",
        },
    ).status_code == 403
    assert bob.get(f"/orders/{order_id}").status_code == 403
    assert bob.get("/orders").json() == []


def test_unknown_cart_is_404(login):
    client, _ = login("alice")
    assert client.get("/cart/9999").status_code == 404


def test_google_redirect_sets_state(make_client, google_client):
    resp = make_client().get("/auth/google", follow_redirects=False)

    assert resp.status_code == 307
    assert resp.headers["location"] == "https://accounts.google.test/auth?state=x"
    assert "oauth-state" in resp.cookies


def test_google_callback_logs_in(make_client, google_client):
    google_client.exchange_code.return_value = "access-token"
    google_client.fetch_userinfo.return_value = {"email": "gina@example.com", "email_verified": True}
    client = make_client()
    client.cookies.set("oauth-state", "abc")

    resp = client.get(
        "/auth/google/callback",
        params={"code": "auth-code", "state": "abc"},
        follow_redirects=False,
    )

    assert resp.status_code == 307
    assert resp.headers["location"].endswith("/catalog")
    assert client.get("/user").json()["username"] == "gina@example.com"


def test_google_callback_state_mismatch(make_client, google_client):
    client = make_client()
    client.cookies.set("oauth-state", "abc")

    resp = client.get(
        "/auth/google/callback",
        params={"code": "auth-code", "state": "other"},
        follow_redirects=False,
    )

    assert resp.headers["location"].endswith("/login")
    google_client.exchange_code.assert_not_called()


def test_google_callback_malformed_token_response_redirects_to_login(make_client, google_client):
    google_client.exchange_code.side_effect = KeyError("access_token")
    client = make_client()
    client.cookies.set("oauth-state", "abc")

    resp = client.get(
        "/auth/google/callback",
        params={"code": "auth-code", "state": "abc"},
        follow_redirects=False,
    )

    assert resp.status_code == 307
    assert resp.headers["location"].endswith("/login")
    assert client.get("/user").status_code == 401
