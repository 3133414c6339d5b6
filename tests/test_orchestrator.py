"""Tests for component wiring, the collection flow and confirmations."""

import pytest
from decimal import Decimal

from src.config import Settings, StorageSettings
from src.ledger import LedgerStore
from src.models.audit import AuditEventType
from src.models.ledger import AppSettings, Collection, ConfirmationMethod, utc_now
from src.orchestrator import CollectionFlow, create_app_components, create_storage
from src.services.confirmation import ConfirmationService
from src.services.storage import InMemoryKeyValueStore, JsonFileKeyValueStore


@pytest.fixture
def store():
    store = LedgerStore(InMemoryKeyValueStore())
    store.audit_logger.keep_history()
    return store


@pytest.fixture
def flow(store):
    return CollectionFlow(store)


class TestCollectionFlow:
    """Tests for CollectionFlow."""

    def test_record_sends_automatic_confirmation(self, store, flow):
        """Test default settings confirm over WhatsApp."""
        customer = store.add_customer({"name": "Asha", "phone": "98"})
        collection, result, over_limit = flow.record({"customer_id": customer.id, "amount": "500"})

        assert store.get_collection(collection.id) == collection
        assert result.sent is True
        assert result.method == ConfirmationMethod.WHATSAPP
        assert "Asha" in result.message
        assert collection.receipt_number in result.message
        assert over_limit is False
        assert store.audit_logger.history[-1].event_type == AuditEventType.CONFIRMATION_SENT

    def test_record_without_automatic_confirmation(self, store, flow):
        """Test auto confirmation switched off."""
        store.update_app_settings({"auto_confirmation_enabled": False})
        collection, result, _ = flow.record({"amount": 100})

        assert result is None
        assert store.get_collection(collection.id) is not None

    def test_over_lot_limit_is_advisory(self, store, flow):
        """Test amounts above the limit are still recorded."""
        store.update_app_settings({"max_lot_amount": "1000"})
        collection, _, over_limit = flow.record({"amount": "900", "penalty": "200"})

        assert over_limit is True
        assert collection.total == Decimal("1100")
        assert len(store.collections) == 1

    def test_confirm_uses_configured_method(self, store, flow):
        """Test manual confirmation over SMS."""
        store.update_app_settings({"confirmation_method": "sms", "auto_confirmation_enabled": False})
        collection, _, _ = flow.record({"amount": 100})

        result = flow.confirm(collection.id)
        assert result.success is True
        assert result.method == ConfirmationMethod.SMS

    def test_confirm_missing_collection(self, flow):
        """Test manual confirmation of an unknown collection."""
        assert flow.confirm("missing") is None

    def test_confirm_after_customer_deleted(self, store, flow):
        """Test confirmations still compose for orphaned collections."""
        customer = store.add_customer({"name": "Ravi"})
        collection, _, _ = flow.record({"customer_id": customer.id, "amount": 10})
        store.delete_customer(customer.id)

        result = flow.confirm(collection.id)
        assert result.sent is True
        assert "Dear customer" in result.message


class TestConfirmationService:
    """Tests for ConfirmationService."""

    def collection(self):
        return Collection(
            id="k1", amount="1500", penalty="50", receipt_number="20240501001", created_at=utc_now()
        )

    def test_compose(self):
        """Test message text."""
        service = ConfirmationService()
        text = service.compose(AppSettings(), self.collection())
        assert text == "Dear customer, we have received ₹1,550.00. Receipt no. 20240501001. Thank you."

    def test_automatic_send_respects_setting(self):
        """Test automatic sends are skipped when switched off."""
        service = ConfirmationService()
        settings = AppSettings(auto_confirmation_enabled=False)

        result = service.send(settings, self.collection(), automatic=True)
        assert result.sent is False
        assert result.success is True

    def test_manual_send_ignores_setting(self):
        """Test manual sends always go out."""
        service = ConfirmationService()
        settings = AppSettings(auto_confirmation_enabled=False)
        assert service.send(settings, self.collection()).sent is True

    def test_locale_is_used(self):
        """Test currency formatting follows the configured locale."""
        service = ConfirmationService(locale="en-US")
        text = service.compose(AppSettings(currency="USD"), self.collection())
        assert "$1,550.00" in text


class TestComponentWiring:
    """Tests for create_storage and create_app_components."""

    def test_create_storage_memory(self):
        """Test the in-memory backend."""
        assert isinstance(create_storage(StorageSettings(backend="memory")), InMemoryKeyValueStore)

    def test_create_storage_json(self, tmp_path):
        """Test the JSON-file backend."""
        storage = create_storage(StorageSettings(backend="json", data_dir=tmp_path))
        assert isinstance(storage, JsonFileKeyValueStore)
        assert storage.data_dir == tmp_path

    def test_create_app_components(self):
        """Test wiring with an injected backend."""
        storage = InMemoryKeyValueStore()
        store, flow, app_config = create_app_components(Settings(), storage=storage)

        collection, _, _ = flow.record({"amount": 100})
        assert store.get_collection(collection.id) is not None
        assert storage.read("collections")[0]["id"] == collection.id
        assert app_config.locale

    def test_each_call_builds_a_new_store(self):
        """Test there is no shared global ledger."""
        first, _, _ = create_app_components(Settings(), storage=InMemoryKeyValueStore())
        second, _, _ = create_app_components(Settings(), storage=InMemoryKeyValueStore())
        first.add_customer({"name": "Only here"})
        assert second.customers == []
