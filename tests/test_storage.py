"""Tests for the SQLite receipt repository."""

import sqlite3
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from src.errors import StorageError, StorageErrorCode
from src.models.receipt import Receipt, ReceiptItem, Unit
from src.storage.repository import ReceiptRepository


def _make_receipt(**overrides) -> Receipt:
    values = {
        "store_name": "CONDOR",
        "cnpj": "12.345.678/0001-90",
        "items": (
            ReceiptItem(
                item_number="001",
                description="MAÇÃ FUJI",
                quantity=0.8,
                unit=Unit.KG,
                unit_price=10.0,
                total_price=8.0,
            ),
        ),
        "total_amount": 8.0,
        "raw_text": "CONDOR\nTOTAL R$ 8,00",
    }
    values.update(overrides)
    return Receipt(**values)


@pytest.fixture
def repository(tmp_path: Path):
    repo = ReceiptRepository(tmp_path / "data" / "receipts.db")
    yield repo
    repo.close()


class TestSave:
    """Tests for saving receipts."""

    def test_assigns_identity(self, repository: ReceiptRepository) -> None:
        with patch("src.storage.repository._now_ms", return_value=1_700_000_000_000):
            stored = repository.save(_make_receipt())
        assert stored.id == 1_700_000_000_000
        assert stored.created_at == 1_700_000_000_000

    def test_same_millisecond_saves_kept(self, repository: ReceiptRepository) -> None:
        with patch("src.storage.repository._now_ms", return_value=1_000):
            first = repository.save(_make_receipt(store_name="CONDOR"))
            second = repository.save(_make_receipt(store_name="ASSAI"))
        assert first.id == 1_000
        assert second.id == 1_001
        assert second.created_at == 1_000
        assert {r.store_name for r in repository.list_all()} == {"CONDOR", "ASSAI"}

    def test_keeps_existing_identity(self, repository: ReceiptRepository) -> None:
        stored = repository.save(_make_receipt(id=42, created_at=1000))
        assert stored.id == 42
        assert stored.created_at == 1000

    def test_round_trip(self, repository: ReceiptRepository) -> None:
        stored = repository.save(_make_receipt(id=7, created_at=1))
        assert repository.get(7) == stored

    def test_replace_existing(self, repository: ReceiptRepository) -> None:
        repository.save(_make_receipt(id=7, created_at=1))
        repository.save(_make_receipt(id=7, created_at=1, store_name="ASSAI"))
        assert repository.get(7).store_name == "ASSAI"
        assert len(repository.list_all()) == 1

    def test_creates_parent_directory(self, tmp_path: Path) -> None:
        repo = ReceiptRepository(tmp_path / "a" / "b" / "r.db")
        repo.save(_make_receipt(id=1, created_at=1))
        repo.close()
        assert (tmp_path / "a" / "b" / "r.db").exists()

    def test_persists_across_connections(self, tmp_path: Path) -> None:
        path = tmp_path / "r.db"
        first = ReceiptRepository(path)
        first.save(_make_receipt(id=3, created_at=1))
        first.close()

        second = ReceiptRepository(path)
        assert second.get(3).items[0].description == "MAÇÃ FUJI"
        second.close()

    def test_database_error(self, repository: ReceiptRepository) -> None:
        conn = MagicMock()
        conn.execute.side_effect = sqlite3.OperationalError("disk I/O error")
        repository._conn = conn
        with pytest.raises(StorageError) as exc_info:
            repository.save(_make_receipt())
        assert exc_info.value.code is StorageErrorCode.SAVE_FAILED
        repository._conn = None


class TestQuery:
    """Tests for loading and deleting receipts."""

    def test_get_missing(self, repository: ReceiptRepository) -> None:
        with pytest.raises(StorageError) as exc_info:
            repository.get(999)
        assert exc_info.value.code is StorageErrorCode.NOT_FOUND

    def test_list_newest_first(self, repository: ReceiptRepository) -> None:
        repository.save(_make_receipt(id=1, created_at=100))
        repository.save(_make_receipt(id=2, created_at=300))
        repository.save(_make_receipt(id=3, created_at=200))
        assert [r.id for r in repository.list_all()] == [2, 3, 1]

    def test_list_empty(self, repository: ReceiptRepository) -> None:
        assert repository.list_all() == []

    def test_delete(self, repository: ReceiptRepository) -> None:
        repository.save(_make_receipt(id=5, created_at=1))
        repository.delete(5)
        with pytest.raises(StorageError):
            repository.get(5)

    def test_delete_unknown_is_noop(self, repository: ReceiptRepository) -> None:
        repository.delete(12345)

    def test_corrupt_item_blob(self, repository: ReceiptRepository) -> None:
        repository.save(_make_receipt(id=9, created_at=1))
        conn = repository._get_conn()
        conn.execute("UPDATE receipts SET items_json = 'oops' WHERE id = 9")
        conn.commit()
        receipt = repository.get(9)
        assert receipt.items == ()
        assert receipt.store_name == "CONDOR"

    def test_in_memory(self) -> None:
        repo = ReceiptRepository(":memory:")
        repo.save(_make_receipt(id=1, created_at=1))
        assert repo.get(1).total_amount == 8.0
        repo.close()
