"""Integration tests for the product catalog endpoints."""

import pytest

NEW_PRODUCT = {
    "name": "Kindle Paperwhite",
    "description": "E-reader with a glare-free display and adjustable light.",
    "price": 499.0,
    "imgUrl": "https://img.example.com/kindle.jpg",
    "categories": [{"id": 1}, {"id": 2}],
}


class TestReadProducts:
    async def test_get_by_id(self, client):
        response = await client.get("/products/3")

        assert response.status_code == 200
        body = response.json()
        assert body["name"] == "Macbook Pro"
        assert body["price"] == pytest.approx(1250.0)
        assert body["categories"] == [{"id": 3, "name": "Computadores"}]
        assert "imgUrl" in body

    async def test_get_missing(self, client):
        response = await client.get("/products/1000")

        assert response.status_code == 404
        assert response.json()["message"] == "Product 1000 not found"

    async def test_search_by_name(self, client):
        response = await client.get("/products", params={"name": "pc gamer"})

        assert response.status_code == 200
        body = response.json()
        assert body["totalElements"] == 4
        assert {p["name"] for p in body["content"]} == {
            "PC Gamer",
            "PC Gamer Ex",
            "PC Gamer X",
            "PC Gamer Alfa",
        }
        assert set(body["content"][0]) == {"id", "name", "price", "imgUrl"}

    async def test_paging_and_sort(self, client):
        response = await client.get(
            "/products", params={"page": 1, "size": 3, "sort": "price,desc"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["number"] == 1
        assert body["size"] == 3
        assert body["totalElements"] == 8
        assert body["totalPages"] == 3
        assert body["first"] is False
        assert [p["price"] for p in body["content"]] == [1350.0, 1250.0, 1200.0]

    async def test_unknown_sort_field(self, client):
        response = await client.get("/products", params={"sort": "description,asc"})

        assert response.status_code == 422
        body = response.json()
        assert body["code"] == "ERR_VAL_002"
        assert body["errors"][0]["fieldName"] == "sort"

    async def test_id_beyond_column_range_is_validation_error(self, client):
        response = await client.get("/products/99999999999999999999")

        assert response.status_code == 422
        assert response.json()["errors"][0]["fieldName"] == "product_id"

    async def test_page_beyond_column_range_is_validation_error(self, client):
        response = await client.get("/products", params={"page": 10**19})

        assert response.status_code == 422
        assert response.json()["errors"][0]["fieldName"] == "page"


class TestWriteProducts:
    async def test_admin_creates_product(self, client, auth_headers):
        response = await client.post(
            "/products", json=NEW_PRODUCT, headers=await auth_headers("ana@gmail.com")
        )

        assert response.status_code == 201
        body = response.json()
        assert body["id"] == 9
        assert response.headers["Location"] == "/products/9"
        assert [c["name"] for c in body["categories"]] == ["Livros", "Eletrônicos"]

        fetched = await client.get("/products/9")
        assert fetched.json()["name"] == "Kindle Paperwhite"

    async def test_client_cannot_create(self, client, auth_headers):
        response = await client.post(
            "/products", json=NEW_PRODUCT, headers=await auth_headers("maria@gmail.com")
        )

        assert response.status_code == 403

    async def test_anonymous_cannot_create(self, client):
        response = await client.post("/products", json=NEW_PRODUCT)

        assert response.status_code == 401

    async def test_invalid_product_lists_field_errors(self, client, auth_headers):
        invalid = {**NEW_PRODUCT, "name": "TV", "price": -1, "categories": []}

        response = await client.post(
            "/products", json=invalid, headers=await auth_headers("ana@gmail.com")
        )

        assert response.status_code == 422
        fields = {e["fieldName"] for e in response.json()["errors"]}
        assert {"name", "price", "categories"} <= fields

    async def test_unknown_category(self, client, auth_headers):
        invalid = {**NEW_PRODUCT, "categories": [{"id": 77}]}

        response = await client.post(
            "/products", json=invalid, headers=await auth_headers("ana@gmail.com")
        )

        assert response.status_code == 404

    async def test_category_id_beyond_column_range(self, client, auth_headers):
        invalid = {**NEW_PRODUCT, "categories": [{"id": 10**20}]}

        response = await client.post(
            "/products", json=invalid, headers=await auth_headers("ana@gmail.com")
        )

        assert response.status_code == 422
        assert response.json()["errors"][0]["fieldName"] == "categories.0.id"

    async def test_repeated_category_is_linked_once(self, client, auth_headers):
        body = {**NEW_PRODUCT, "categories": [{"id": 1}, {"id": 1}, {"id": 2}]}

        response = await client.post(
            "/products", json=body, headers=await auth_headers("ana@gmail.com")
        )

        assert response.status_code == 201
        assert [c["id"] for c in response.json()["categories"]] == [1, 2]

    async def test_admin_updates_product(self, client, auth_headers):
        response = await client.put(
            "/products/2",
            json={**NEW_PRODUCT, "name": "Smart TV 4K", "categories": [{"id": 2}]},
            headers=await auth_headers("ana@gmail.com"),
        )

        assert response.status_code == 200
        body = response.json()
        assert body["id"] == 2
        assert body["name"] == "Smart TV 4K"
        assert body["categories"] == [{"id": 2, "name": "Eletrônicos"}]

    async def test_update_missing(self, client, auth_headers):
        response = await client.put(
            "/products/1000", json=NEW_PRODUCT, headers=await auth_headers("ana@gmail.com")
        )

        assert response.status_code == 404

    async def test_update_with_repeated_category(self, client, auth_headers):
        body = {**NEW_PRODUCT, "categories": [{"id": 3}, {"id": 3}, {"id": 2}]}

        response = await client.put(
            "/products/2", json=body, headers=await auth_headers("ana@gmail.com")
        )

        assert response.status_code == 200
        assert [c["id"] for c in response.json()["categories"]] == [2, 3]


class TestDeleteProducts:
    async def test_delete_unreferenced(self, client, auth_headers):
        headers = await auth_headers("ana@gmail.com")

        response = await client.delete("/products/2", headers=headers)

        assert response.status_code == 204
        assert (await client.get("/products/2")).status_code == 404

    async def test_delete_missing(self, client, auth_headers):
        response = await client.delete(
            "/products/1000", headers=await auth_headers("ana@gmail.com")
        )

        assert response.status_code == 404

    async def test_delete_referenced_conflicts(self, client, auth_headers):
        headers = await auth_headers("ana@gmail.com")

        response = await client.delete("/products/3", headers=headers)

        assert response.status_code == 409
        assert response.json()["code"] == "ERR_RES_002"
        assert (await client.get("/products/3")).status_code == 200

    async def test_delete_id_beyond_column_range(self, client, auth_headers):
        response = await client.delete(
            "/products/-99999999999999999999", headers=await auth_headers("ana@gmail.com")
        )

        assert response.status_code == 422

    async def test_client_cannot_delete(self, client, auth_headers):
        response = await client.delete(
            "/products/2", headers=await auth_headers("maria@gmail.com")
        )

        assert response.status_code == 403
