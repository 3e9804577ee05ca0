"""CSV import and export."""

import csv
import io

from app.core.config import settings
from app.models.inventory import InventoryHistory, Product

API = "/api"

HEADER = "name,unit,category,brand,stock,status,image\n"


def _upload(client, content, filename="products.csv"):
    if isinstance(content, str):
        content = content.encode("utf-8")
    return client.post(
        f"{API}/import/products",
        files={"csvFile": (filename, content, "text/csv")},
    )


# ── Import ──────────────────────

def test_import_mixed_rows(client, db, make_product):
    """Good rows are created, bad and duplicate rows are skipped and reported."""
    make_product("Widget", stock=1)
    content = HEADER + (
        "Pen,pcs,Office Supplies,Acme,5,active,\n"
        ",pcs,,,3,,\n"
        "Widget,,,,9,,\n"
        "Pencil,,,,abc,,\n"
        "Eraser,,,,,,\n"
    )

    res = _upload(client, content)

    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True
    assert body["message"] == "CSV import completed"
    result = body["data"]
    assert (result["processed"], result["added"], result["skipped"]) == (5, 2, 3)

    errors = {e["row"]: e for e in result["errors"]}
    assert set(errors) == {2, 3, 4}
    assert errors[2]["error"] == "Product name is required"
    assert errors[3]["error"] == "Product with this name already exists"
    assert errors[3]["action"] == "skipped"
    assert errors[3]["data"]["name"] == "Widget"
    assert errors[4]["error"].startswith("stock")

    pen = db.query(Product).filter(Product.name == "Pen").one()
    assert (pen.unit, pen.category, pen.brand, pen.stock, pen.status) == (
        "pcs", "Office Supplies", "Acme", 5, "active",
    )
    assert pen.image is None
    pen_history = db.query(InventoryHistory).filter(InventoryHistory.product_id == pen.id).all()
    assert len(pen_history) == 1
    assert pen_history[0].reason == "Imported from CSV"
    assert pen_history[0].change_amount == 5

    # Empty stock defaults to zero, and zero stock writes no history row
    eraser = db.query(Product).filter(Product.name == "Eraser").one()
    assert eraser.stock == 0
    assert eraser.status == "active"
    assert db.query(InventoryHistory).filter(InventoryHistory.product_id == eraser.id).count() == 0


def test_import_without_errors_omits_errors_key(client):
    res = _upload(client, "name,stock\nHammer,4\nNails,200\n")

    result = res.json()["data"]
    assert result == {"processed": 2, "added": 2, "skipped": 0}


def test_import_skips_out_of_range_stock(client, db):
    res = _upload(client, "name,stock\nHuge,99999999999999999999\nTrue,true\n")

    result = res.json()["data"]
    assert (result["added"], result["skipped"]) == (0, 2)
    assert db.query(Product).count() == 0


def test_import_duplicates_within_file(client):
    res = _upload(client, "name,stock\nHammer,4\nHammer,6\n")

    result = res.json()["data"]
    assert (result["added"], result["skipped"]) == (1, 1)
    assert result["errors"][0]["row"] == 2


def test_import_tolerates_bom_and_padding(client, db):
    content = "\ufeff name , stock \n  Saw  , 7 \n".encode("utf-8")

    res = _upload(client, content)

    assert res.json()["data"]["added"] == 1
    saw = db.query(Product).one()
    assert (saw.name, saw.stock) == ("Saw", 7)


def test_import_undecodable_file_writes_nothing(client, db):
    res = _upload(client, b"name,stock\nCaf\xe9,3\n")

    assert res.status_code == 400
    assert res.json()["message"] == "Error parsing CSV file"
    assert db.query(Product).count() == 0


def test_import_requires_name_column(client, db):
    res = _upload(client, "title,stock\nSaw,3\n")

    assert res.status_code == 400
    assert res.json()["error"] == "Missing required column: name"
    assert db.query(Product).count() == 0


def test_import_empty_file(client):
    res = _upload(client, b"")
    assert res.status_code == 400


def test_import_rejects_non_csv(client):
    res = _upload(client, "name,stock\nSaw,3\n", filename="products.xlsx")

    assert res.status_code == 400
    assert res.json() == {"success": False, "message": "Only CSV files are allowed"}


def test_import_rejects_oversized_file(client, db, monkeypatch):
    monkeypatch.setattr(settings, "MAX_UPLOAD_SIZE", 16)

    res = _upload(client, "name,stock\nA very long product name,3\n")

    assert res.status_code == 413
    assert res.json()["success"] is False
    assert db.query(Product).count() == 0


def test_import_requires_file(client):
    res = client.post(f"{API}/import/products")
    assert res.status_code == 400


# ── Export ──────────────────────

def test_export_products(client, make_product):
    make_product("Zip ties", stock=12, unit="pack")
    make_product('Bolt, 6" zinc', stock=3, category="Automotive")

    res = client.get(f"{API}/import/products")

    assert res.status_code == 200
    assert res.headers["content-type"].startswith("text/csv")
    assert res.headers["content-disposition"] == 'attachment; filename="products.csv"'

    lines = res.text.splitlines()
    assert lines[0] == "id,name,unit,category,brand,stock,status,image,created_at,updated_at"
    assert '"Bolt, 6"" zinc"' in lines[1]

    rows = list(csv.DictReader(io.StringIO(res.text)))
    assert [r["name"] for r in rows] == ['Bolt, 6" zinc', "Zip ties"]
    assert rows[0]["brand"] == ""
    assert rows[1]["stock"] == "12"
    assert rows[1]["unit"] == "pack"


def test_export_empty_store(client):
    res = client.get(f"{API}/import/products")

    assert res.status_code == 404
    assert res.json() == {"success": False, "message": "No products found to export"}


def test_export_then_import_skips_existing(client, make_product):
    """Re-importing an export reports every row as a duplicate."""
    make_product("Hammer", stock=4)
    exported = client.get(f"{API}/import/products").content

    result = _upload(client, exported).json()["data"]

    assert (result["processed"], result["added"], result["skipped"]) == (1, 0, 1)
    assert result["errors"][0]["action"] == "skipped"
