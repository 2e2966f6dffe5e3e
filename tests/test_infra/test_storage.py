"""Tests for file-backed cart storage."""

import json
from pathlib import Path

from storefront.infra.storage import FileCartStorage
from storefront.schemas.cart import CartLineItem


class TestFileCartStorage:
    def test_missing_file_loads_empty(self, tmp_path: Path):
        assert FileCartStorage(tmp_path / "absent.json").load() == []

    def test_save_then_load(self, tmp_path: Path, make_product):
        storage = FileCartStorage(tmp_path / "cart.json")
        lines = [
            CartLineItem(product=make_product(), quantity=2, size="M"),
            CartLineItem(product=make_product(id="prod-2", name="Hoodie", price="450"), quantity=1),
        ]

        storage.save(lines)

        assert storage.load() == lines

    def test_save_creates_parent_directories(self, tmp_path: Path, make_product):
        path = tmp_path / "a" / "b" / "cart.json"

        FileCartStorage(path).save([CartLineItem(product=make_product(), quantity=1)])

        assert path.exists()

    def test_stored_as_json_list(self, tmp_path: Path, make_product):
        path = tmp_path / "cart.json"

        FileCartStorage(path).save([CartLineItem(product=make_product(), quantity=3, size="L")])

        data = json.loads(path.read_text())
        assert data[0]["quantity"] == 3
        assert data[0]["size"] == "L"
        assert data[0]["product"]["id"] == "prod-1"

    def test_no_temp_files_left_behind(self, tmp_path: Path, make_product):
        storage = FileCartStorage(tmp_path / "cart.json")

        storage.save([CartLineItem(product=make_product(), quantity=1)])
        storage.save([])

        assert [p.name for p in tmp_path.iterdir()] == ["cart.json"]

    def test_invalid_json_loads_empty(self, tmp_path: Path):
        path = tmp_path / "cart.json"
        path.write_text("not json at all")

        assert FileCartStorage(path).load() == []

    def test_wrong_shape_loads_empty(self, tmp_path: Path):
        path = tmp_path / "cart.json"
        path.write_text(json.dumps([{"product": {"id": "x"}, "quantity": 0}]))

        assert FileCartStorage(path).load() == []

    def test_directory_path_loads_empty(self, tmp_path: Path):
        assert FileCartStorage(tmp_path).load() == []
