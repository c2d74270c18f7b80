"""
Tests for storage backends and transaction support
"""

import pytest

from aya_token.storage import InMemoryStorage, SQLiteStorage


balance_record = {
    "id": "0xalice",
    "account": "0xalice",
    "amount": 10 ** 27,
}


@pytest.fixture(params=["memory", "sqlite"])
def storage(request, tmp_path):
    """Each backend in turn"""
    if request.param == "memory":
        backend = InMemoryStorage()
    else:
        backend = SQLiteStorage(tmp_path / "test.db")
    yield backend
    backend.close()


class TestStorageBackends:
    """Test basic operations on every backend"""

    def test_basic_operations(self, storage):
        """Test CRUD operations"""
        storage.save("balances", "0xalice", balance_record)
        assert storage.load("balances", "0xalice") == balance_record

        storage.save("balances", "0xbob", {"id": "0xbob", "account": "0xbob", "amount": 0})
        assert [r["account"] for r in storage.load_all("balances")] == ["0xalice", "0xbob"]

        results = storage.find("balances", {"amount": 0})
        assert [r["account"] for r in results] == ["0xbob"]

        assert storage.delete("balances", "0xalice")
        assert not storage.delete("balances", "0xalice")
        assert storage.load("balances", "0xalice") is None
        assert len(storage.load_all("balances")) == 1

    def test_update_keeps_order(self, storage):
        """Test that rewriting a record keeps its place in load_all"""
        storage.save("balances", "a", {"id": "a", "amount": 1})
        storage.save("balances", "b", {"id": "b", "amount": 2})
        storage.save("balances", "a", {"id": "a", "amount": 3})
        assert [r["amount"] for r in storage.load_all("balances")] == [3, 2]

    def test_tables_are_separate(self, storage):
        """Test that equal ids in different tables do not collide"""
        storage.save("balances", "x", {"id": "x", "amount": 1})
        storage.save("blacklist", "x", {"id": "x", "account": "x"})
        assert storage.load("balances", "x") == {"id": "x", "amount": 1}
        assert storage.load_all("allowances") == []

    def test_large_integers_round_trip(self, storage):
        """Test that amounts beyond 64 bits survive storage"""
        amount = 2 ** 200 + 1
        storage.save("balances", "big", {"id": "big", "amount": amount})
        assert storage.load("balances", "big")["amount"] == amount

    def test_load_missing_returns_none(self, storage):
        """Test loading an absent record"""
        assert storage.load("balances", "nobody") is None

    def test_saved_data_is_copied(self, storage):
        """Test that callers cannot mutate stored records in place"""
        record = {"id": "r", "amount": 1}
        storage.save("balances", "r", record)
        record["amount"] = 2
        loaded = storage.load("balances", "r")
        loaded["amount"] = 3
        assert storage.load("balances", "r")["amount"] == 1


class TestTransactions:
    """Test atomic blocks"""

    def test_atomic_commit(self, storage):
        """Test that a clean block is committed"""
        with storage.atomic():
            storage.save("balances", "a", {"id": "a", "amount": 1})
            storage.save("balances", "b", {"id": "b", "amount": 2})
        assert len(storage.load_all("balances")) == 2

    def test_atomic_rollback(self, storage):
        """Test that a failing block leaves no trace"""
        storage.save("balances", "a", {"id": "a", "amount": 1})

        with pytest.raises(RuntimeError):
            with storage.atomic():
                storage.save("balances", "a", {"id": "a", "amount": 99})
                storage.save("balances", "b", {"id": "b", "amount": 2})
                storage.delete("balances", "a")
                raise RuntimeError("boom")

        assert storage.load("balances", "a") == {"id": "a", "amount": 1}
        assert storage.load("balances", "b") is None

    def test_rollback_without_transaction_is_noop(self, storage):
        """Test rollback outside a transaction"""
        storage.save("balances", "a", {"id": "a", "amount": 1})
        storage.rollback()
        assert storage.load("balances", "a") is not None


class TestSQLitePersistence:
    """Test that SQLite data outlives the connection"""

    def test_reopen(self, tmp_path):
        """Test reading records through a new connection"""
        db_path = tmp_path / "persist.db"
        storage = SQLiteStorage(db_path)
        storage.save("balances", "0xalice", balance_record)
        storage.close()

        reopened = SQLiteStorage(db_path)
        assert reopened.load("balances", "0xalice") == balance_record
        reopened.close()
