"""Integration tests for vendor shop management and public product reads."""

from identity.user.user import UserRole


class TestVendorShopApi:
    def test_open_and_read_shop(self, client, make_user, auth_headers):
        headers = auth_headers(make_user(role=UserRole.VENDOR))

        created = client.post("/vendor/shop", json={"name": "Patan Metalworks"}, headers=headers)
        fetched = client.get("/vendor/shop", headers=headers)
        duplicate = client.post("/vendor/shop", json={"name": "Again"}, headers=headers)

        assert created.status_code == 201
        assert created.json()["data"]["name"] == "Patan Metalworks"
        assert fetched.json()["data"]["id"] == created.json()["data"]["id"]
        assert duplicate.status_code == 409

    def test_customer_forbidden(self, client, make_user, auth_headers):
        response = client.post("/vendor/shop", json={"name": "Nope"}, headers=auth_headers(make_user()))

        assert response.status_code == 403
        assert response.json()["error"] == "forbidden"

    def test_shop_missing(self, client, make_user, auth_headers):
        response = client.get("/vendor/shop", headers=auth_headers(make_user(role=UserRole.VENDOR)))
        assert response.status_code == 404


class TestVendorProductApi:
    def test_create_product(self, client, vendor, shop, auth_headers):
        response = client.post(
            "/vendor/products",
            json={"name": "Pashmina Shawl", "price": "4500.00", "stock_quantity": 12},
            headers=auth_headers(vendor),
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["shop_id"] == shop.id
        assert data["price"] == 4500.0
        assert data["stock_quantity"] == 12

    def test_invalid_price(self, client, vendor, shop, auth_headers):
        response = client.post(
            "/vendor/products",
            json={"name": "Free Lunch", "price": "0", "stock_quantity": 1},
            headers=auth_headers(vendor),
        )

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    def test_update_product(self, client, vendor, shop, make_product, auth_headers):
        product = make_product(shop, name="Pashmina Shawl", price="4500.00", stock=12)

        response = client.put(
            f"/vendor/products/{product.id}",
            json={"price": "4200.00", "stock_adjustment": -2},
            headers=auth_headers(vendor),
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["price"] == 4200.0
        assert data["stock_quantity"] == 10
        assert data["name"] == "Pashmina Shawl"

    def test_update_below_zero_stock(self, client, vendor, shop, make_product, auth_headers):
        product = make_product(shop, stock=1)

        response = client.put(
            f"/vendor/products/{product.id}",
            json={"stock_adjustment": -2},
            headers=auth_headers(vendor),
        )

        assert response.status_code == 409
        assert response.json()["error"] == "insufficient_stock"
        assert client.get(f"/products/{product.id}").json()["data"]["stock_quantity"] == 1

    def test_update_other_vendors_product(self, client, shop, make_product, make_user, make_shop, auth_headers):
        product = make_product(shop)
        rival = make_user(role=UserRole.VENDOR)
        make_shop(rival, name="Rival Shop")

        response = client.put(f"/vendor/products/{product.id}", json={"price": "1.00"}, headers=auth_headers(rival))

        assert response.status_code == 404
        assert response.json()["error"] == "product_not_found"

    def test_deactivate_hides_from_storefront(self, client, vendor, shop, make_product, auth_headers):
        product = make_product(shop, name="Singing Bowl")
        headers = auth_headers(vendor)

        response = client.delete(f"/vendor/products/{product.id}", headers=headers)

        assert response.status_code == 200
        assert response.json()["data"]["is_active"] is False
        assert client.get(f"/products/{product.id}").status_code == 404
        listed = client.get("/vendor/products", headers=headers).json()["data"]
        assert [(p["name"], p["is_active"]) for p in listed] == [("Singing Bowl", False)]

    def test_customer_cannot_manage_products(self, client, shop, make_product, make_user, auth_headers):
        product = make_product(shop)

        response = client.delete(f"/vendor/products/{product.id}", headers=auth_headers(make_user()))

        assert response.status_code == 403


class TestPublicProductApi:
    def test_list_without_auth(self, client, shop, make_product):
        make_product(shop, name="Ilam Tea", price="300.00")
        make_product(shop, name="Retired", is_active=False)

        response = client.get("/products")

        assert response.status_code == 200
        assert [p["name"] for p in response.json()["data"]] == ["Ilam Tea"]

    def test_query_parameters(self, client, shop, make_product):
        make_product(shop, name="Singing Bowl", price="2500.00")
        make_product(shop, name="Ilam Tea", price="300.00")

        response = client.get("/products", params={"max_price": "1000", "sort": "price_asc"})

        assert [p["name"] for p in response.json()["data"]] == ["Ilam Tea"]

    def test_invalid_sort(self, client):
        assert client.get("/products", params={"sort": "random"}).status_code == 400

    def test_get_product(self, client, shop, make_product):
        product = make_product(shop, name="Singing Bowl")

        response = client.get(f"/products/{product.id}")

        assert response.status_code == 200
        assert response.json()["data"]["name"] == "Singing Bowl"

    def test_inactive_product_hidden(self, client, shop, make_product):
        product = make_product(shop, is_active=False)

        response = client.get(f"/products/{product.id}")

        assert response.status_code == 404
        assert response.json()["error"] == "product_not_found"
