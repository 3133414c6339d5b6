"""
Main Orchestrator for Collection Agent Ledger

Ties the components together and defines the flows the UI drives:
1. Collection (record -> lot-limit advisory -> auto confirmation)
2. Component wiring (settings -> storage -> audit -> store)

The LedgerStore is created here once and handed to the UI. Nothing in the
package reaches for a global store.
"""

from collections.abc import Mapping
from typing import Any, Optional

import structlog

from src.audit import AuditLogger, configure_logging
from src.config import AppConfig, Settings, StorageSettings, get_settings
from src.ledger import LedgerStore
from src.models.ledger import Collection
from src.reporting import exceeds_lot_limit
from src.services.confirmation import ConfirmationResult, ConfirmationService
from src.services.storage import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStore,
)

logger = structlog.get_logger(__name__)


class CollectionFlow:
    """
    Orchestrates recording a collection.

    Flow:
    1. Save the collection (receipt number assigned by the store)
    2. Warn when the amount is above the advisory lot limit
    3. Send the automatic confirmation if enabled in app settings
    """

    def __init__(
        self,
        store: LedgerStore,
        confirmation: Optional[ConfirmationService] = None,
    ):
        self._store = store
        self._confirmation = confirmation or ConfirmationService(store.audit_logger)

    def record(
        self,
        data: Mapping[str, Any],
    ) -> tuple[Collection, Optional[ConfirmationResult], bool]:
        """
        Record a collection.

        Returns:
            (collection, confirmation_result, over_lot_limit)
        """
        collection = self._store.add_collection(data)
        settings = self._store.app_settings

        over_limit = exceeds_lot_limit(collection.total, settings)
        if over_limit:
            logger.warning(
                "lot_limit_exceeded",
                collection_id=collection.id,
                amount=str(collection.total),
                max_lot_amount=str(settings.max_lot_amount),
            )

        result = None
        if settings.auto_confirmation_enabled:
            customer = self._store.get_customer(collection.customer_id)
            result = self._confirmation.send(settings, collection, customer, automatic=True)

        return collection, result, over_limit

    def confirm(self, collection_id: str) -> Optional[ConfirmationResult]:
        """Manually (re)send a confirmation. None if the collection is gone."""
        collection = self._store.get_collection(collection_id)
        if collection is None:
            return None
        customer = self._store.get_customer(collection.customer_id)
        return self._confirmation.send(self._store.app_settings, collection, customer)


def create_storage(storage_settings: StorageSettings) -> KeyValueStore:
    """Build the configured key-value backend."""
    if storage_settings.backend == "memory":
        return InMemoryKeyValueStore()
    return JsonFileKeyValueStore(storage_settings.data_dir, indent=storage_settings.indent)


def create_app_components(
    settings: Optional[Settings] = None,
    storage: Optional[KeyValueStore] = None,
) -> tuple[LedgerStore, CollectionFlow, AppConfig]:
    """
    Factory function to create all application components.

    Args:
        settings: Settings to use; defaults to get_settings()
        storage: Storage backend override (tests, embedding)

    Returns:
        (store, collection_flow, app_config)
    """
    settings = settings or get_settings()
    app_config = settings.app
    configure_logging(app_config.log_level, app_config.json_logs)

    storage = storage or create_storage(settings.storage)
    audit_logger = AuditLogger()
    store = LedgerStore(storage, audit_logger=audit_logger)

    confirmation = ConfirmationService(audit_logger, locale=app_config.locale)
    collection_flow = CollectionFlow(store, confirmation)

    logger.info(
        "app_components_created",
        environment=app_config.environment,
        storage=type(storage).__name__,
    )
    return store, collection_flow, app_config
