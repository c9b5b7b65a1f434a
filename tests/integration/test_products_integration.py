from boutique.products import repository


def test_list_products_ordered_by_id(engine):
    with engine.connect() as conn:
        products = repository.list_products(conn)
    assert [p["product_id"] for p in products] == [1, 7, 9]
    assert products[1] == {
        "product_id": 7,
        "name": "Uncle Bob's Organic Dried Pears",
        "unit_price": 10.0,
        "units_in_stock": 15,
    }


def test_get_product(engine):
    with engine.connect() as conn:
        assert repository.get_product(conn, 9)["name"] == "Mishi Kobe Niku"
        assert repository.get_product(conn, 404) is None


def test_get_products_by_ids(engine):
    with engine.connect() as conn:
        by_id = repository.get_products_by_ids(conn, [9, 1, 9, 1234])
        assert sorted(by_id) == [1, 9]
        assert by_id[1]["unit_price"] == 18.0
        assert repository.get_products_by_ids(conn, []) == {}
