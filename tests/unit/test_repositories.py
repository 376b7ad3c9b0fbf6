"""Unit tests for the repositories, with the database client mocked."""

import pytest

from catalog.core.exceptions import (
    ConflictError,
    NotFoundError,
    QueryExecutionError,
    ValidationError,
)
from catalog.db.turso import ResultSet, Statement
from catalog.models import Category, InventoryItem, Media, Metafield, Option, Product, Tag, Vendor
from catalog.repositories import (
    AttributeRepository,
    InventoryRepository,
    NamedEntityRepository,
    ProductRepository,
)
from conftest import rows_result


def sent(fake_db, index=-1):
    """SQL and args of a call made to the mocked client"""
    call = fake_db.execute_query.call_args_list[index]
    sql = call.args[0]
    args = call.args[1] if len(call.args) > 1 else []
    return sql, args


class TestBaseRepository:
    def test_named_parameters_become_positional(self, fake_db):
        fake_db.execute_query.return_value = rows_result([{"id": 1, "name": "Acme"}])
        repo = NamedEntityRepository(fake_db, "vendors")

        rows = repo.execute_query("SELECT id, name FROM vendors WHERE id = :id AND name = :name",
                                  {"name": "Acme", "id": 1})

        assert rows == [{"id": 1, "name": "Acme"}]
        assert sent(fake_db) == ("SELECT id, name FROM vendors WHERE id = ? AND name = ?", [1, "Acme"])

    def test_missing_parameter(self, fake_db):
        with pytest.raises(ValidationError):
            NamedEntityRepository(fake_db, "vendors").execute_query("SELECT * FROM vendors WHERE id = :id")
        fake_db.execute_query.assert_not_called()

    def test_exists(self, fake_db):
        repo = NamedEntityRepository(fake_db, "tags")
        fake_db.execute_query.return_value = rows_result([{"1": 1}])
        assert repo.exists(4)
        fake_db.execute_query.return_value = ResultSet()
        assert not repo.exists(4)
        assert sent(fake_db) == ("SELECT 1 FROM tags WHERE id = ?", [4])

    def test_unique_violation_becomes_conflict(self, fake_db):
        fake_db.execute_query.side_effect = QueryExecutionError("UNIQUE constraint failed: tags.name")

        with pytest.raises(ConflictError) as exc_info:
            NamedEntityRepository(fake_db, "tags").create(Tag(name="sale"))

        assert exc_info.value.details == {"conflict_field": "name"}

    def test_other_statement_errors_propagate(self, fake_db):
        fake_db.execute_query.side_effect = QueryExecutionError("no such table: tags")
        with pytest.raises(QueryExecutionError):
            NamedEntityRepository(fake_db, "tags").list_all()

    def test_batch_command_uses_one_pipeline(self, fake_db):
        fake_db.execute_transaction.return_value = [
            ResultSet(affected_row_count=1), ResultSet(affected_row_count=1),
        ]
        repo = NamedEntityRepository(fake_db, "tags")

        affected = repo.execute_batch_command("INSERT INTO tags (name) VALUES (:name)",
                                              [{"name": "sale"}, {"name": "new"}])

        assert affected == 2
        (statements,) = fake_db.execute_transaction.call_args.args
        assert statements == [
            Statement("INSERT INTO tags (name) VALUES (?)", ["sale"]),
            Statement("INSERT INTO tags (name) VALUES (?)", ["new"]),
        ]

    def test_empty_batch(self, fake_db):
        assert NamedEntityRepository(fake_db, "tags").execute_batch_command("DELETE FROM tags", []) == 0
        fake_db.execute_transaction.assert_not_called()


class TestProductRepository:
    def test_get_by_id_decodes_row(self, fake_db):
        fake_db.execute_query.return_value = rows_result([
            {"id": 3, "title": "Mug", "images": '["https://cdn/mug.jpg"]', "price": 9.5, "pos": 1}
        ])

        product = ProductRepository(fake_db).get_by_id(3)

        assert product.title == "Mug"
        assert product.images == ["https://cdn/mug.jpg"]
        assert product.pos is True
        sql, args = sent(fake_db)
        assert sql.endswith("FROM products WHERE id = ?")
        assert args == [3]

    def test_get_by_id_missing(self, fake_db):
        with pytest.raises(NotFoundError, match="Product not found with ID: 3"):
            ProductRepository(fake_db).get_by_id(3)

    def test_list_products_filters_and_pages(self, fake_db):
        fake_db.execute_query.return_value = rows_result([
            {"id": 9, "title": "100% Cotton", "images": "[]", "price": 20}
        ])

        products = ProductRepository(fake_db).list_products(
            limit=10, offset=20, search_query="100%", product_type="physical", publish="active",
        )

        assert [p.id for p in products] == [9]
        sql, args = sent(fake_db)
        assert "title LIKE ? ESCAPE" in sql
        assert "type = ?" in sql and "publish = ?" in sql
        assert sql.endswith("ORDER BY id DESC LIMIT ? OFFSET ?")
        assert args == ["%100\\%%", "physical", "active", 10, 20]

    def test_count_products(self, fake_db):
        fake_db.execute_query.return_value = rows_result([{"total": 42}])

        assert ProductRepository(fake_db).count_products(category="Shirts") == 42
        sql, args = sent(fake_db)
        assert sql.startswith("SELECT COUNT(*) AS total FROM products WHERE 1=1")
        assert args == ["Shirts"]

    def test_count_without_rows(self, fake_db):
        assert ProductRepository(fake_db).count_products() == 0

    def test_create_encodes_columns_and_sets_id(self, fake_db):
        fake_db.execute_query.return_value = ResultSet(affected_row_count=1, last_insert_rowid=17)
        product = Product(title="Mug", price=9.5, images=["https://cdn/mug.jpg"], featured=True)

        created = ProductRepository(fake_db).create(product)

        assert created.id == 17
        sql, args = sent(fake_db)
        assert sql.startswith("INSERT INTO products (title, images")
        assert "?" in sql and ":" not in sql
        assert "Mug" in args
        assert '["https://cdn/mug.jpg"]' in args

    def test_update_stamps_updatedat_and_reloads(self, fake_db):
        fake_db.execute_query.side_effect = [
            ResultSet(affected_row_count=1),
            rows_result([{"id": 5, "title": "Mug", "price": 12.0}]),
        ]

        product = ProductRepository(fake_db).update(5, {"price": "12", "bogus": "x"})

        assert product.price == 12.0
        sql, args = sent(fake_db, 0)
        assert sql == "UPDATE products SET price = ?, updatedat = ? WHERE id = ?"
        assert args[0] == 12.0
        assert args[1].endswith("Z")
        assert args[2] == 5

    def test_update_unknown_fields_only(self, fake_db):
        with pytest.raises(ValidationError):
            ProductRepository(fake_db).update(5, {"bogus": "x"})

    def test_update_missing_product(self, fake_db):
        fake_db.execute_query.return_value = ResultSet(affected_row_count=0)
        with pytest.raises(NotFoundError):
            ProductRepository(fake_db).update(5, {"title": "Cup"})

    def test_delete(self, fake_db):
        fake_db.execute_query.return_value = ResultSet(affected_row_count=1)
        ProductRepository(fake_db).delete(5)
        assert sent(fake_db) == ("DELETE FROM products WHERE id = ?", [5])

        fake_db.execute_query.return_value = ResultSet(affected_row_count=0)
        with pytest.raises(NotFoundError):
            ProductRepository(fake_db).delete(5)


class TestInventoryRepository:
    def test_list_items_joins_product_title(self, fake_db):
        fake_db.execute_query.return_value = rows_result([
            {"id": 2, "productId": 5, "sku": "MUG-RED", "quantity": 4, "productTitle": "Mug"}
        ])

        (item,) = InventoryRepository(fake_db).list_items(limit=50, product_id=5)

        assert item.product_title == "Mug"
        assert item.product_id == 5
        sql, args = sent(fake_db)
        assert "LEFT JOIN products p ON p.id = i.productId" in sql
        assert "WHERE i.productId = ?" in sql
        assert args == [5, 50]

    def test_low_stock_query(self, fake_db):
        InventoryRepository(fake_db).low_stock(limit=10)
        sql, args = sent(fake_db)
        assert "COALESCE(i.quantity, 0) <= i.reorderlevel" in sql
        assert args == [10]

    def test_create_writes_known_columns(self, fake_db):
        fake_db.execute_query.return_value = ResultSet(affected_row_count=1, last_insert_rowid=8)

        item = InventoryRepository(fake_db).create(InventoryItem(product_id=5, sku="MUG-RED", quantity=4))

        assert item.id == 8
        sql, args = sent(fake_db)
        assert sql.startswith("INSERT INTO inventory (productId, sku")
        assert args[:2] == [5, "MUG-RED"]

    def test_adjust_quantity_never_below_zero(self, fake_db):
        fake_db.execute_query.side_effect = [
            ResultSet(affected_row_count=1),
            rows_result([{"id": 2, "productId": 5, "quantity": 0}]),
        ]

        item = InventoryRepository(fake_db).adjust_quantity(2, -10)

        assert item.quantity == 0
        sql, args = sent(fake_db, 0)
        assert "MAX(0, COALESCE(quantity, 0) + ?)" in sql
        assert args == [-10, 2]

    def test_adjust_missing_item(self, fake_db):
        fake_db.execute_query.return_value = ResultSet(affected_row_count=0)
        with pytest.raises(NotFoundError, match="Inventory item"):
            InventoryRepository(fake_db).adjust_quantity(2, 1)

    def test_update_requires_known_column(self, fake_db):
        with pytest.raises(ValidationError):
            InventoryRepository(fake_db).update(2, {"title": "nope"})


class TestNamedEntityRepository:
    def test_unknown_kind(self, fake_db):
        with pytest.raises(ValidationError):
            NamedEntityRepository(fake_db, "suppliers")

    def test_list_categories_include_parent(self, fake_db):
        fake_db.execute_query.return_value = rows_result([
            {"id": 1, "name": "Apparel", "image": "[]", "notes": "", "parent": None},
            {"id": 2, "name": "Shirts", "image": "[]", "notes": "", "parent": 1},
        ])

        categories = NamedEntityRepository(fake_db, "categories").list_all(limit=25)

        assert all(isinstance(c, Category) for c in categories)
        assert categories[1].parent == 1
        assert sent(fake_db) == (
            "SELECT id, name, image, notes, parent FROM categories ORDER BY name LIMIT ?", [25]
        )

    def test_vendors_have_no_parent_column(self, fake_db):
        NamedEntityRepository(fake_db, "vendors").list_all()
        assert sent(fake_db)[0].startswith("SELECT id, name, image, notes FROM vendors")

    def test_create(self, fake_db):
        fake_db.execute_query.return_value = ResultSet(affected_row_count=1, last_insert_rowid=6)

        vendor = NamedEntityRepository(fake_db, "vendors").create(Vendor(name="Acme", images=["https://cdn/a.png"]))

        assert vendor.id == 6
        assert sent(fake_db) == (
            "INSERT INTO vendors (name, image, notes) VALUES (?, ?, ?)",
            ["Acme", '["https://cdn/a.png"]', ""],
        )

    def test_update_merges_with_stored_row(self, fake_db):
        fake_db.execute_query.side_effect = [
            rows_result([{"id": 2, "name": "Shirts", "image": '["https://cdn/s.jpg"]', "notes": "old", "parent": 1}]),
            ResultSet(affected_row_count=1),
        ]

        category = NamedEntityRepository(fake_db, "categories").update(2, {"notes": "new"})

        assert category.name == "Shirts"
        assert category.parent == 1
        assert sent(fake_db) == (
            "UPDATE categories SET name = ?, image = ?, notes = ?, parent = ? WHERE id = ?",
            ["Shirts", '["https://cdn/s.jpg"]', "new", 1, 2],
        )

    def test_delete_missing(self, fake_db):
        fake_db.execute_query.return_value = ResultSet(affected_row_count=0)
        with pytest.raises(NotFoundError, match="Brand not found"):
            NamedEntityRepository(fake_db, "brands").delete(3)


class TestAttributeRepository:
    def test_unknown_kind(self, fake_db):
        with pytest.raises(ValidationError):
            AttributeRepository(fake_db, "variants")

    def test_metafield_columns_are_quoted(self, fake_db):
        fake_db.execute_query.return_value = rows_result([
            {"id": 1, "parentid": None, "title": "Material", "value": None, "group": "Specs", "type": "text", "filter": 1}
        ])

        (metafield,) = AttributeRepository(fake_db, "metafields").list_all()

        assert isinstance(metafield, Metafield)
        assert metafield.group == "Specs"
        sql, _ = sent(fake_db)
        assert '"group"' in sql
        assert sql.endswith("ORDER BY parentid, title LIMIT ?")

    def test_media_ordered_by_position(self, fake_db):
        AttributeRepository(fake_db, "media").list_all()
        assert 'ORDER BY parentid, "order"' in sent(fake_db)[0]

    def test_children_of(self, fake_db):
        fake_db.execute_query.return_value = rows_result([
            {"id": 2, "parentid": 1, "title": "Red", "value": "red", "identifier": "#ff0000"}
        ])

        (value,) = AttributeRepository(fake_db, "options").children_of(1)

        assert isinstance(value, Option)
        assert not value.is_group
        assert "WHERE parentid = ?" in sent(fake_db)[0]

    def test_children_of_requires_parent_column(self, fake_db):
        with pytest.raises(ValidationError):
            AttributeRepository(fake_db, "modifiers").children_of(1)

    def test_create_media(self, fake_db):
        fake_db.execute_query.return_value = ResultSet(affected_row_count=1, last_insert_rowid=11)

        media = AttributeRepository(fake_db, "media").create(
            Media(parentid=3, type="image", url="https://cdn/a.jpg", order=1)
        )

        assert media.id == 11
        assert sent(fake_db) == (
            'INSERT INTO media ("parentid", "type", "url", "order") VALUES (?, ?, ?, ?)',
            [3, "image", "https://cdn/a.jpg", 1],
        )

    def test_update_filters_unknown_columns(self, fake_db):
        with pytest.raises(ValidationError):
            AttributeRepository(fake_db, "options").update(1, {"url": "x"})
