"""The application's domain store.

``InventoryStore`` owns the in-memory copies of the asset and stock
collections plus the login session, and is the only thing that writes to the
blob store. Every mutation is a read-modify-write of the whole collection:
load it, change it, save it, then refresh the in-memory copy.

Each FastAPI app constructs exactly one store (see ``assetdesk.create_app``);
there is no module-level instance.

Failures follow one rule: the session's ``error`` is set to a short message
and the exception is re-raised for the caller to display. Nothing is retried
and nothing in memory changes unless the save went through.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Iterator, Mapping, Sequence, TypeVar, get_args
from urllib.parse import urlencode
from uuid import uuid4

from pydantic import BaseModel, ValidationError

from ..core.config import AppSettings, get_settings
from ..core.errors import (
    InvalidCredentials,
    InvalidEmail,
    InvalidOrExpiredToken,
    NotFound,
    OperationFailed,
    UnknownAccount,
)
from ..core.passwords import hash_password, verify_password
from ..core.reset_tokens import ResetTokenRegistry
from ..db.blobstore import BlobStore, Collection
from ..schemas.asset import Asset, AssetCreate, AssetUpdate
from ..schemas.common import CamelModel
from ..schemas.dashboard import DashboardStats
from ..schemas.stock import QuantityUpdate, StockItem, StockItemCreate, StockItemUpdate
from ..schemas.user import (
    PasswordResetComplete,
    ResetToken,
    SessionState,
    SignupRequest,
    SocialProfile,
    SocialProvider,
    User,
)
from ..services.mailer import LogMailer, Mailer, password_reset_message
from . import seed

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

SOCIAL_PROVIDERS: tuple[str, ...] = get_args(SocialProvider)


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


def _coerce(model: type[M], data: M | Mapping[str, Any]) -> M:
    if isinstance(data, model):
        return data
    return model.model_validate(data)


def _aware(moment: datetime) -> datetime:
    return moment if moment.tzinfo else moment.replace(tzinfo=timezone.utc)


class InventoryStore:
    def __init__(
        self,
        blobs: BlobStore,
        *,
        settings: AppSettings | None = None,
        mailer: Mailer | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.blobs = blobs
        self.settings = settings or get_settings()
        self.mailer = mailer or LogMailer()
        self.clock = clock
        self.reset_tokens = ResetTokenRegistry(
            blobs,
            clock=clock,
            ttl_seconds=self.settings.RESET_TOKEN_TTL_SECONDS,
        )
        self.session = SessionState()
        self.assets: list[Asset] = []
        self.stock_items: list[StockItem] = []
        # Dashboard trends compare against this snapshot.
        self.previous_stats: DashboardStats | None = None

    # ------------------------------------------------------------------ helpers

    @contextmanager
    def _operation(self, failure_message: str | None = None) -> Iterator[None]:
        self.session.loading = True
        self.session.error = None
        try:
            yield
        except Exception as exc:
            self.session.error = failure_message or str(exc)
            raise
        finally:
            self.session.loading = False

    def _touch(self, previous: datetime) -> datetime:
        """Current time, nudged forward so ``updated_at`` always moves."""
        now = _aware(self.clock())
        previous = _aware(previous)
        if now <= previous:
            return previous + timedelta(milliseconds=1)
        return now

    @staticmethod
    def _id_factory(taken: set[str]) -> Callable[[], str]:
        def new_id() -> str:
            candidate = str(uuid4())
            while candidate in taken:
                candidate = str(uuid4())
            taken.add(candidate)
            return candidate

        return new_id

    def _parse(self, model: type[M], collection: str, records: list[dict[str, Any]]) -> list[M]:
        parsed: list[M] = []
        for raw in records:
            try:
                parsed.append(model.model_validate(raw))
            except ValidationError:
                logger.warning(
                    "store.invalid_record",
                    extra={"extra_data": {"collection": collection, "id": raw.get("id")}},
                )
        return parsed

    def _load(self, model: type[M], collection: str) -> list[M]:
        return self._parse(model, collection, self.blobs.load(collection))

    def _save(self, collection: str, records: Sequence[CamelModel]) -> None:
        self.blobs.save(collection, [record.to_record() for record in records])

    @staticmethod
    def _index_of(records: list[Any], record_id: str, label: str) -> int:
        for index, record in enumerate(records):
            if record.id == record_id:
                return index
        raise NotFound(f"{label} {record_id} not found")

    # ------------------------------------------------------------------ assets

    def fetch_assets(self) -> list[Asset]:
        with self._operation("Failed to fetch assets"):
            raw = self.blobs.load(Collection.ASSETS)
            if raw:
                assets = self._parse(Asset, Collection.ASSETS, raw)
            else:
                assets = seed.first_fetch_assets(self.clock(), self._id_factory(set()))
                self._save(Collection.ASSETS, assets)
                logger.info("assets.seeded", extra={"extra_data": {"count": len(assets)}})
            self.assets = assets
            return list(assets)

    def get_asset(self, asset_id: str) -> Asset:
        with self._operation("Failed to fetch asset"):
            assets = self._load(Asset, Collection.ASSETS)
            return assets[self._index_of(assets, asset_id, "Asset")]

    def add_asset(self, data: AssetCreate | Mapping[str, Any]) -> Asset:
        with self._operation("Failed to add asset"):
            payload = _coerce(AssetCreate, data)
            assets = self._load(Asset, Collection.ASSETS)
            now = self.clock()
            new_id = self._id_factory({a.id for a in assets})
            asset = Asset(**payload.model_dump(), id=new_id(), created_at=now, updated_at=now)
            updated = [*assets, asset]
            self._save(Collection.ASSETS, updated)
            self.assets = updated
            logger.info("asset.created", extra={"extra_data": {"asset_id": asset.id}})
            return asset

    def update_asset(self, asset_id: str, changes: AssetUpdate | Mapping[str, Any]) -> Asset:
        with self._operation("Failed to update asset"):
            patch = _coerce(AssetUpdate, changes)
            assets = self._load(Asset, Collection.ASSETS)
            index = self._index_of(assets, asset_id, "Asset")
            current = assets[index]
            merged = Asset.model_validate(
                {**current.model_dump(), **patch.changes(), "updated_at": self._touch(current.updated_at)}
            )
            assets[index] = merged
            self._save(Collection.ASSETS, assets)
            self.assets = assets
            logger.info(
                "asset.updated",
                extra={"extra_data": {"asset_id": asset_id, "fields": sorted(patch.model_fields_set)}},
            )
            return merged

    def delete_asset(self, asset_id: str) -> None:
        with self._operation("Failed to delete asset"):
            assets = self._load(Asset, Collection.ASSETS)
            del assets[self._index_of(assets, asset_id, "Asset")]
            self._save(Collection.ASSETS, assets)
            self.assets = assets
            logger.info("asset.deleted", extra={"extra_data": {"asset_id": asset_id}})

    # ------------------------------------------------------------------ stock

    def fetch_stock_items(self) -> list[StockItem]:
        with self._operation("Failed to fetch stock items"):
            raw = self.blobs.load(Collection.STOCK_ITEMS)
            if raw:
                items = self._parse(StockItem, Collection.STOCK_ITEMS, raw)
            else:
                items = seed.demo_stock_items(self.clock(), self._id_factory(set()))
                self._save(Collection.STOCK_ITEMS, items)
                logger.info("stock.seeded", extra={"extra_data": {"count": len(items)}})
            self.stock_items = items
            return list(items)

    def get_stock_item(self, item_id: str) -> StockItem:
        with self._operation("Failed to fetch stock item"):
            items = self._load(StockItem, Collection.STOCK_ITEMS)
            return items[self._index_of(items, item_id, "Stock item")]

    def add_stock_item(self, data: StockItemCreate | Mapping[str, Any]) -> StockItem:
        with self._operation("Failed to add stock item"):
            payload = _coerce(StockItemCreate, data)
            items = self._load(StockItem, Collection.STOCK_ITEMS)
            now = self.clock()
            new_id = self._id_factory({i.id for i in items})
            fields = payload.model_dump()
            fields["last_restocked"] = fields["last_restocked"] or now
            item = StockItem(**fields, id=new_id(), created_at=now, updated_at=now)
            updated = [*items, item]
            self._save(Collection.STOCK_ITEMS, updated)
            self.stock_items = updated
            logger.info("stock.created", extra={"extra_data": {"item_id": item.id}})
            return item

    def _replace_stock_item(self, item_id: str, changes: dict[str, Any]) -> StockItem:
        items = self._load(StockItem, Collection.STOCK_ITEMS)
        index = self._index_of(items, item_id, "Stock item")
        current = items[index]
        merged = StockItem.model_validate(
            {**current.model_dump(), **changes, "updated_at": self._touch(current.updated_at)}
        )
        items[index] = merged
        self._save(Collection.STOCK_ITEMS, items)
        self.stock_items = items
        return merged

    def update_stock_item(self, item_id: str, changes: StockItemUpdate | Mapping[str, Any]) -> StockItem:
        with self._operation("Failed to update stock item"):
            patch = _coerce(StockItemUpdate, changes)
            item = self._replace_stock_item(item_id, patch.changes())
            logger.info(
                "stock.updated",
                extra={"extra_data": {"item_id": item_id, "fields": sorted(patch.model_fields_set)}},
            )
            return item

    def update_stock_quantity(self, item_id: str, quantity: int) -> StockItem:
        with self._operation("Failed to update stock quantity"):
            checked = QuantityUpdate(quantity=quantity)
            item = self._replace_stock_item(item_id, {"quantity": checked.quantity})
            logger.info(
                "stock.quantity_set",
                extra={"extra_data": {"item_id": item_id, "quantity": checked.quantity}},
            )
            return item

    def restock(self, item_id: str) -> StockItem:
        """Refill a line to twice its reorder threshold."""
        with self._operation("Failed to restock item"):
            items = self._load(StockItem, Collection.STOCK_ITEMS)
            current = items[self._index_of(items, item_id, "Stock item")]
            item = self._replace_stock_item(
                item_id,
                {"quantity": current.min_quantity * 2, "last_restocked": self.clock()},
            )
            logger.info("stock.restocked", extra={"extra_data": {"item_id": item_id, "quantity": item.quantity}})
            return item

    def delete_stock_item(self, item_id: str) -> None:
        with self._operation("Failed to delete stock item"):
            items = self._load(StockItem, Collection.STOCK_ITEMS)
            del items[self._index_of(items, item_id, "Stock item")]
            self._save(Collection.STOCK_ITEMS, items)
            self.stock_items = items
            logger.info("stock.deleted", extra={"extra_data": {"item_id": item_id}})

    # ------------------------------------------------------------------ auth

    def _start_session(self, user: User) -> None:
        self.session.current_user = user
        self.session.is_authenticated = True

    def _hash(self, plain: str) -> str:
        return hash_password(plain, rounds=self.settings.BCRYPT_ROUNDS)

    def login(self, email: str, password: str) -> User:
        with self._operation("Login failed"):
            users = self._load(User, Collection.USERS)
            user = next((u for u in users if u.email == email and verify_password(password, u.password)), None)
            if user is None:
                logger.warning("auth.login_failed", extra={"extra_data": {"email": email}})
                raise InvalidCredentials()
            self._start_session(user)
            logger.info("auth.login", extra={"extra_data": {"user_id": user.id}})
            return user

    def signup(self, data: SignupRequest | Mapping[str, Any]) -> User:
        with self._operation("Signup failed"):
            request = _coerce(SignupRequest, data)
            users = self._load(User, Collection.USERS)
            new_id = self._id_factory({u.id for u in users})
            user = User(
                id=new_id(),
                name=request.name,
                email=request.email,
                role=request.role,
                department=request.department,
                password=self._hash(request.password),
                provider=request.provider,
            )
            users.append(user)
            self._save(Collection.USERS, users)
            if len(users) == 1:
                self._bootstrap_demo_data()
            self._start_session(user)
            logger.info("auth.signup", extra={"extra_data": {"user_id": user.id}})
            return user

    def _bootstrap_demo_data(self) -> None:
        """First account ever: give the empty collections something to show."""
        now = self.clock()
        if not self.blobs.load(Collection.ASSETS):
            self.assets = seed.signup_assets(now, self._id_factory(set()))
            self._save(Collection.ASSETS, self.assets)
        if not self.blobs.load(Collection.STOCK_ITEMS):
            self.stock_items = seed.demo_stock_items(now, self._id_factory(set()))
            self._save(Collection.STOCK_ITEMS, self.stock_items)
        logger.info("store.bootstrapped")

    def social_login(self, provider: str, profile: SocialProfile | Mapping[str, Any]) -> User:
        with self._operation("Social login failed"):
            if provider not in SOCIAL_PROVIDERS:
                raise InvalidCredentials(f"Unsupported provider: {provider}")
            identity = _coerce(SocialProfile, profile)
            users = self._load(User, Collection.USERS)
            user = next((u for u in users if u.provider == provider and u.provider_id == identity.id), None)
            if user is None:
                new_id = self._id_factory({u.id for u in users})
                user = User(
                    id=new_id(),
                    name=identity.name,
                    email=identity.email,
                    role="staff",
                    department="General",
                    # Federated accounts never sign in with a password.
                    password=self._hash(str(uuid4())),
                    provider=provider,
                    provider_id=identity.id,
                )
                users.append(user)
                self._save(Collection.USERS, users)
                logger.info("auth.social_signup", extra={"extra_data": {"user_id": user.id, "provider": provider}})
            self._start_session(user)
            return user

    def reset_password(self, email: str) -> ResetToken:
        with self._operation():
            if not email or "@" not in email:
                raise InvalidEmail()
            users = self._load(User, Collection.USERS)
            if not any(u.email == email for u in users):
                raise UnknownAccount()
            issued = self.reset_tokens.generate(email)
            query = urlencode({"token": issued.token, "email": email})
            link = f"{self.settings.reset_link_base}?{query}"
            message = password_reset_message(
                email,
                link,
                expires_in_minutes=self.settings.RESET_TOKEN_TTL_SECONDS // 60,
            )
            result = self.mailer.send(message)
            if not result.ok:
                raise OperationFailed(result.error or "Failed to send reset link")
            logger.info("auth.reset_requested", extra={"extra_data": {"email": email}})
            return issued

    def complete_password_reset(self, token: str, email: str, new_password: str) -> None:
        with self._operation("Password reset failed"):
            request = PasswordResetComplete(token=token, email=email, new_password=new_password)
            if not self.reset_tokens.validate(request.token, request.email):
                raise InvalidOrExpiredToken()
            users = self._load(User, Collection.USERS)
            index = next((i for i, u in enumerate(users) if u.email == request.email), None)
            if index is None:
                raise UnknownAccount("User not found")
            users[index] = users[index].model_copy(update={"password": self._hash(request.new_password)})
            self._save(Collection.USERS, users)
            self.reset_tokens.remove(request.token)
            current = self.session.current_user
            if current is not None and current.id == users[index].id:
                self.session.current_user = users[index]
            logger.info("auth.password_reset", extra={"extra_data": {"user_id": users[index].id}})

    def logout(self) -> None:
        self.session = SessionState()
