"""
Ledger Store

The single owner and single writer of the ledger: customers, collections,
deposits, the agent profile and the app settings.

GUARANTEES:
- State is loaded once at construction, falling back to defaults for any
  key that is absent or unreadable
- Every mutation is all-or-nothing against the in-memory state: validation
  happens before anything is touched
- Every successful mutation re-persists the whole snapshot
- A failed write is logged and reflected in `last_save_ok`; the in-memory
  state stays authoritative for the session
- Not-found is an absence result (None / False), not an exception

The store is constructed explicitly and handed to whoever needs it; there
is no module-level instance.
"""

from collections.abc import Mapping
from datetime import datetime
from decimal import Decimal
from typing import Any, NoReturn, Optional, TypeVar

import structlog
from pydantic import ValidationError

from src.audit import AuditLogger
from src.ledger.identifiers import (
    generate_id,
    is_valid_short_code,
    next_receipt_number,
    next_short_code,
    same_short_code,
)
from src.models.ledger import (
    AgentProfile,
    AppSettings,
    Collection,
    Customer,
    Deposit,
    LedgerRecord,
    LedgerStats,
    utc_now,
)
from src.services.storage import KeyValueStore, StorageError, StorageKey

logger = structlog.get_logger(__name__)

R = TypeVar("R", bound=LedgerRecord)

# Never taken from caller-supplied updates
IMMUTABLE_FIELDS = frozenset({"id", "created_at"})


class LedgerError(Exception):
    """Base exception for ledger operations."""
    pass


class LedgerValidationError(LedgerError):
    """A mutation was refused; the ledger is unchanged."""
    pass


class InvalidShortCodeError(LedgerValidationError):
    """Short code is not a number starting from 1."""
    pass


class DuplicateShortCodeError(LedgerValidationError):
    """Short code already belongs to another customer."""
    pass


class UnknownFieldError(LedgerValidationError):
    """Input names a field the record does not have."""
    pass


class LedgerStore:
    """
    In-memory ledger backed by a key-value store.

    Usage:
        store = LedgerStore(JsonFileKeyValueStore(Path("data")))
        customer = store.add_customer({"name": "Asha", "phone": "98450"})
        store.add_collection({"customer_id": customer.id, "amount": "500"})
        store.compute_stats().balance
    """

    def __init__(
        self,
        storage: KeyValueStore,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._audit = audit_logger or AuditLogger()
        self._last_save_ok = True

        self._agent_profile = self._load_singleton(StorageKey.AGENT_PROFILE, AgentProfile)
        self._customers: list[Customer] = self._load_records(StorageKey.CUSTOMERS, Customer)
        self._collections: list[Collection] = self._load_records(StorageKey.COLLECTIONS, Collection)
        self._deposits: list[Deposit] = self._load_records(StorageKey.DEPOSITS, Deposit)
        self._app_settings = self._load_singleton(StorageKey.APP_SETTINGS, AppSettings)

        logger.info(
            "ledger_loaded",
            customers=len(self._customers),
            collections=len(self._collections),
            deposits=len(self._deposits),
        )

    # =========================================================================
    # LOADING
    # =========================================================================

    def _read(self, key: StorageKey) -> Optional[Any]:
        try:
            return self._storage.read(key.value)
        except StorageError as e:
            logger.warning("storage_read_failed", key=key.value, error=str(e))
            return None

    def _load_singleton(self, key: StorageKey, model: type[R]) -> R:
        raw = self._read(key)
        if raw is None:
            return model()
        if not isinstance(raw, dict):
            logger.warning("stored_value_malformed", key=key.value, found=type(raw).__name__)
            return model()
        try:
            return model.model_validate(raw)
        except ValidationError as e:
            logger.warning("stored_value_invalid", key=key.value, errors=e.error_count())
            return model()

    def _load_records(self, key: StorageKey, model: type[R]) -> list[R]:
        raw = self._read(key)
        if raw is None:
            return []
        if not isinstance(raw, list):
            logger.warning("stored_value_malformed", key=key.value, found=type(raw).__name__)
            return []

        records = []
        for index, item in enumerate(raw):
            try:
                records.append(model.model_validate(item))
            except ValidationError as e:
                logger.warning(
                    "stored_record_skipped",
                    key=key.value,
                    index=index,
                    errors=e.error_count(),
                )
        return records

    # =========================================================================
    # PERSISTENCE
    # =========================================================================

    def snapshot(self) -> dict[str, Any]:
        """The full ledger as JSON-ready documents, keyed by storage key."""
        return {
            StorageKey.AGENT_PROFILE.value: self._agent_profile.to_document(),
            StorageKey.CUSTOMERS.value: [c.to_document() for c in self._customers],
            StorageKey.COLLECTIONS.value: [c.to_document() for c in self._collections],
            StorageKey.DEPOSITS.value: [d.to_document() for d in self._deposits],
            StorageKey.APP_SETTINGS.value: self._app_settings.to_document(),
        }

    def save(self) -> bool:
        """
        Write the whole snapshot to storage.

        Returns True if every key was written. Failures are logged and do
        not touch the in-memory state.
        """
        failed = []
        for key, value in self.snapshot().items():
            try:
                written = self._storage.write(key, value)
            except StorageError as e:
                logger.error("storage_write_failed", key=key, error=str(e))
                failed.append(key)
                continue
            if not written:
                logger.error("storage_write_refused", key=key)
                failed.append(key)

        self._last_save_ok = not failed
        if failed:
            self._audit.log_save_failed(failed)
        return self._last_save_ok

    @property
    def last_save_ok(self) -> bool:
        """False if the most recent save did not reach storage."""
        return self._last_save_ok

    # =========================================================================
    # READ ACCESS
    # =========================================================================

    @property
    def agent_profile(self) -> AgentProfile:
        return self._agent_profile

    @property
    def app_settings(self) -> AppSettings:
        return self._app_settings

    @property
    def customers(self) -> list[Customer]:
        return list(self._customers)

    @property
    def collections(self) -> list[Collection]:
        return list(self._collections)

    @property
    def deposits(self) -> list[Deposit]:
        return list(self._deposits)

    @property
    def audit_logger(self) -> AuditLogger:
        return self._audit

    @property
    def modifications_allowed(self) -> bool:
        """Whether the UI should offer edit/delete actions."""
        return self._app_settings.allow_modifications

    def get_customer(self, customer_id: str) -> Optional[Customer]:
        return _find(self._customers, customer_id)

    def get_customer_by_short_code(self, short_code: str) -> Optional[Customer]:
        for customer in self._customers:
            if same_short_code(customer.short_code, short_code):
                return customer
        return None

    def get_collection(self, collection_id: str) -> Optional[Collection]:
        return _find(self._collections, collection_id)

    def get_deposit(self, deposit_id: str) -> Optional[Deposit]:
        return _find(self._deposits, deposit_id)

    def collections_for_customer(self, customer_id: str) -> list[Collection]:
        return [c for c in self._collections if c.customer_id == customer_id]

    def next_short_code(self) -> str:
        """Short code the next auto-numbered customer would get."""
        return next_short_code(self._customers)

    def next_receipt_number(self, on: Optional[datetime] = None) -> str:
        """Receipt number the next collection on that day would get."""
        return next_receipt_number(self._collections, on)

    # =========================================================================
    # VALIDATION HELPERS
    # =========================================================================

    def _reject(
        self,
        error: LedgerValidationError,
        entity_type: str,
        entity_id: Optional[str] = None,
    ) -> NoReturn:
        self._audit.log_validation_rejected(entity_type, str(error), entity_id)
        raise error

    def _fields(
        self,
        model: type[LedgerRecord],
        data: Mapping[str, Any],
        entity_type: str,
        entity_id: Optional[str] = None,
        keep: frozenset = frozenset(),
    ) -> dict[str, Any]:
        """Map input keys (names or camelCase aliases) to attribute names."""
        fields = {}
        unknown = []
        for key, value in data.items():
            name = model.field_for_key(key)
            if name is None:
                unknown.append(key)
            elif name not in IMMUTABLE_FIELDS or name in keep:
                fields[name] = value
        if unknown:
            self._reject(
                UnknownFieldError(f"Unknown {entity_type} field(s): {', '.join(sorted(unknown))}"),
                entity_type,
                entity_id,
            )
        return fields

    def _build(
        self,
        model: type[R],
        payload: dict[str, Any],
        entity_type: str,
        entity_id: Optional[str] = None,
    ) -> R:
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            self._audit.log_validation_rejected(entity_type, str(e), entity_id)
            raise

    def _check_short_code(self, short_code: str, exclude_id: Optional[str] = None) -> None:
        if not is_valid_short_code(short_code):
            self._reject(
                InvalidShortCodeError(
                    f"Short code must be a number starting from 1, got: {short_code!r}"
                ),
                "customer",
                exclude_id,
            )
        for customer in self._customers:
            if customer.id != exclude_id and same_short_code(customer.short_code, short_code):
                self._reject(
                    DuplicateShortCodeError(f"Short code {short_code} already exists"),
                    "customer",
                    exclude_id,
                )

    # =========================================================================
    # GENERIC RECORD OPERATIONS
    # =========================================================================

    def _commit(self, entity_type: str, action: str, entity_id: str, details: Optional[dict] = None) -> None:
        self.save()
        self._audit.log_entity_changed(entity_type, action, entity_id, details)

    def _update(
        self,
        records: list[R],
        model: type[R],
        entity_type: str,
        record_id: str,
        updates: Mapping[str, Any],
    ) -> Optional[R]:
        index = _index_of(records, record_id)
        if index is None:
            logger.info("record_not_found", entity_type=entity_type, id=record_id)
            return None

        existing = records[index]
        fields = self._fields(model, updates, entity_type, record_id)
        if entity_type == "customer" and "short_code" in fields:
            fields["short_code"] = str(fields["short_code"] or "").strip()
            self._check_short_code(fields["short_code"], exclude_id=record_id)

        merged = self._build(model, {**existing.model_dump(), **fields}, entity_type, record_id)
        records[index] = merged
        self._commit(entity_type, "updated", record_id, {"fields": sorted(fields)})
        return merged

    def _delete(self, records: list[R], entity_type: str, record_id: str) -> bool:
        index = _index_of(records, record_id)
        if index is None:
            logger.info("record_not_found", entity_type=entity_type, id=record_id)
            return False
        del records[index]
        self._commit(entity_type, "deleted", record_id)
        return True

    # =========================================================================
    # CUSTOMERS
    # =========================================================================

    def add_customer(self, data: Mapping[str, Any]) -> Customer:
        """
        Add a customer.

        A blank short code is replaced with the next free one. id and
        created_at are always generated here.

        Raises:
            InvalidShortCodeError: short code is not a number >= 1
            DuplicateShortCodeError: short code belongs to another customer
            UnknownFieldError: data names a field Customer does not have
            ValidationError: a field value is malformed
        """
        fields = self._fields(Customer, data, "customer")
        short_code = str(fields.get("short_code") or "").strip()
        if not short_code:
            short_code = self.next_short_code()
        self._check_short_code(short_code)

        customer = self._build(
            Customer,
            {**fields, "short_code": short_code, "id": generate_id(), "created_at": utc_now()},
            "customer",
        )
        self._customers.append(customer)
        self._commit("customer", "added", customer.id, {"short_code": customer.short_code})
        return customer

    def update_customer(self, customer_id: str, updates: Mapping[str, Any]) -> Optional[Customer]:
        """
        Shallow-merge updates over a customer. Returns None if not found.

        A short code in updates must be valid and not used by any other
        customer. id and created_at are never changed.
        """
        return self._update(self._customers, Customer, "customer", customer_id, updates)

    def delete_customer(self, customer_id: str) -> bool:
        """Remove a customer. Their collections are kept as they are."""
        return self._delete(self._customers, "customer", customer_id)

    # =========================================================================
    # COLLECTIONS
    # =========================================================================

    def add_collection(self, data: Mapping[str, Any]) -> Collection:
        """
        Record a collection.

        created_at may be supplied to backdate; it defaults to now. A blank
        receipt number is replaced with the next one for that calendar day.
        """
        fields = self._fields(Collection, data, "collection", keep=frozenset({"created_at"}))
        payload = {**fields, "id": generate_id()}
        if not payload.get("created_at"):
            payload["created_at"] = utc_now()

        collection = self._build(Collection, payload, "collection")
        if not collection.receipt_number:
            collection = collection.model_copy(
                update={"receipt_number": self.next_receipt_number(collection.created_at)}
            )

        self._collections.append(collection)
        self._commit(
            "collection",
            "added",
            collection.id,
            {"receipt_number": collection.receipt_number, "amount": str(collection.amount)},
        )
        return collection

    def update_collection(self, collection_id: str, updates: Mapping[str, Any]) -> Optional[Collection]:
        """Shallow-merge updates over a collection. Returns None if not found."""
        return self._update(self._collections, Collection, "collection", collection_id, updates)

    def delete_collection(self, collection_id: str) -> bool:
        return self._delete(self._collections, "collection", collection_id)

    # =========================================================================
    # DEPOSITS
    # =========================================================================

    def add_deposit(self, data: Mapping[str, Any]) -> Deposit:
        """Record a bank deposit. created_at may be supplied to backdate."""
        fields = self._fields(Deposit, data, "deposit", keep=frozenset({"created_at"}))
        payload = {**fields, "id": generate_id()}
        if not payload.get("created_at"):
            payload["created_at"] = utc_now()

        deposit = self._build(Deposit, payload, "deposit")
        self._deposits.append(deposit)
        self._commit("deposit", "added", deposit.id, {"amount": str(deposit.amount)})
        return deposit

    def update_deposit(self, deposit_id: str, updates: Mapping[str, Any]) -> Optional[Deposit]:
        """Shallow-merge updates over a deposit. Returns None if not found."""
        return self._update(self._deposits, Deposit, "deposit", deposit_id, updates)

    def delete_deposit(self, deposit_id: str) -> bool:
        return self._delete(self._deposits, "deposit", deposit_id)

    # =========================================================================
    # SINGLETONS
    # =========================================================================

    def update_agent_profile(self, updates: Mapping[str, Any]) -> AgentProfile:
        """Overwrite agent profile fields."""
        fields = self._fields(AgentProfile, updates, "agent_profile")
        self._agent_profile = self._build(
            AgentProfile, {**self._agent_profile.model_dump(), **fields}, "agent_profile"
        )
        self.save()
        self._audit.log_singleton_updated("agent_profile", sorted(fields))
        return self._agent_profile

    def update_app_settings(self, updates: Mapping[str, Any]) -> AppSettings:
        """Overwrite app settings fields."""
        fields = self._fields(AppSettings, updates, "app_settings")
        self._app_settings = self._build(
            AppSettings, {**self._app_settings.model_dump(), **fields}, "app_settings"
        )
        self.save()
        self._audit.log_singleton_updated("app_settings", sorted(fields))
        return self._app_settings

    # =========================================================================
    # AGGREGATES
    # =========================================================================

    def compute_stats(self) -> LedgerStats:
        """
        Totals over the current ledger, recomputed on every call.

        total_collections = sum(amount + penalty), total_deposits = sum(amount),
        balance = total_collections - total_deposits.
        """
        total_collections = sum((c.amount + c.penalty for c in self._collections), Decimal("0"))
        total_deposits = sum((d.amount for d in self._deposits), Decimal("0"))
        return LedgerStats(
            total_collections=total_collections,
            total_deposits=total_deposits,
            balance=total_collections - total_deposits,
        )


def _index_of(records: list[R], record_id: str) -> Optional[int]:
    for index, record in enumerate(records):
        if record.id == record_id:
            return index
    return None


def _find(records: list[R], record_id: str) -> Optional[R]:
    index = _index_of(records, record_id)
    return None if index is None else records[index]
