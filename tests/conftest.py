"""
Fixtures compartilhadas para testes.

Os services recebem repositórios em memória e uma fonte remota falsa; os
repositórios reais rodam contra um SQLite descartável (aiosqlite). Nada
aqui precisa de PostgreSQL, Redis ou serviços externos.
"""

import asyncio
import uuid
from datetime import datetime, timedelta
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from library_holds.core.locks import ItemLockRegistry
from library_holds.core.security import create_access_token
from library_holds.db.session import Base
from library_holds.models.enums import HoldStatus, ItemStatus, ReservationStatus, UserRole
from library_holds.models.hold import Hold
from library_holds.models.reservation import Reservation
from library_holds.schemas.remote import (
    AvailabilityResult,
    LoanRecord,
    LoansResult,
    ProfileResult,
)


# ==========================================
# Event loop configuration
# ==========================================

@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


# ==========================================
# Relógio controlado
# ==========================================

class FrozenClock:
    """Relógio parado que só anda quando o teste manda."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(datetime(2024, 3, 1, 12, 0, 0))


# ==========================================
# Database fixtures
# ==========================================

@pytest.fixture
async def test_engine(tmp_path):
    """
    Engine de teste num arquivo SQLite descartável, com as tabelas criadas.

    NullPool: cada sessão abre e fecha a própria conexão.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'holds.db'}",
        echo=False,
        poolclass=NullPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def test_db(session_factory):
    """Sessão de banco para testes de repositório."""
    async with session_factory() as session:
        yield session


# ==========================================
# Repositórios em memória
# ==========================================

class FakeHoldRepository:
    """Mesma interface do HoldRepository, guardando holds num dict."""

    def __init__(self):
        self.rows: dict[uuid.UUID, Hold] = {}
        self.fail_positions_for: set[uuid.UUID] = set()
        self.rollback = AsyncMock()

    def _open(self, item_id: str) -> list[Hold]:
        return [
            h for h in self.rows.values()
            if h.item_id == item_id and h.status != HoldStatus.CANCELLED
        ]

    async def get_by_id(self, id):
        return self.rows.get(id)

    async def list_all(self):
        return sorted(self.rows.values(), key=lambda h: h.created_at, reverse=True)

    async def create(self, **kwargs):
        if any(
            h.user_id == kwargs["user_id"] and h.item_id == kwargs["item_id"] and h.is_open
            for h in self.rows.values()
        ):
            raise IntegrityError("INSERT INTO holds", {}, Exception("uq_holds_user_item_open"))
        kwargs.setdefault("id", uuid.uuid4())
        kwargs.setdefault("updated_at", kwargs["created_at"])
        hold = Hold(**kwargs)
        self.rows[hold.id] = hold
        return hold

    async def get_open_by_user_and_item(self, user_id, item_id):
        for hold in self._open(item_id):
            if hold.user_id == user_id:
                return hold
        return None

    async def count_open_by_item(self, item_id):
        # Cede o event loop como uma consulta real, expondo corridas
        await asyncio.sleep(0)
        return len(self._open(item_id))

    async def get_queue(self, item_id):
        return sorted(self._open(item_id), key=lambda h: (h.position, h.created_at))

    async def get_queue_by_creation(self, item_id):
        return sorted(self._open(item_id), key=lambda h: (h.created_at, str(h.id)))

    async def get_by_user(self, user_id):
        return [h for h in self.rows.values() if h.user_id == user_id]

    async def get_item_ids_with_open_holds(self):
        return sorted({h.item_id for h in self.rows.values() if h.is_open})

    async def delete_if_exists(self, hold_id):
        return self.rows.pop(hold_id, None) is not None

    async def set_position(self, hold_id, position):
        if hold_id in self.fail_positions_for:
            raise RuntimeError("falha simulada ao gravar posição")
        hold = self.rows.get(hold_id)
        if hold is None:
            return False
        hold.position = position
        return True

    async def update_status(self, hold, status, notified):
        hold.status = status
        hold.notified = notified
        return hold


class FakeReservationRepository:
    """Mesma interface do ReservationRepository, em memória."""

    def __init__(self):
        self.rows: dict[uuid.UUID, Reservation] = {}
        self.fail_transition_for: set[uuid.UUID] = set()
        self.rollback = AsyncMock()

    async def get_by_id(self, id):
        return self.rows.get(id)

    async def list_all(self):
        return sorted(self.rows.values(), key=lambda r: r.created_at, reverse=True)

    async def create(self, **kwargs):
        if any(
            r.user_id == kwargs["user_id"] and r.item_id == kwargs["item_id"] and r.is_active
            for r in self.rows.values()
        ):
            raise IntegrityError(
                "INSERT INTO reservations", {}, Exception("uq_reservations_user_item_active")
            )
        kwargs.setdefault("id", uuid.uuid4())
        kwargs.setdefault("updated_at", kwargs["created_at"])
        reservation = Reservation(**kwargs)
        self.rows[reservation.id] = reservation
        return reservation

    async def get_active_by_user_and_item(self, user_id, item_id):
        for reservation in self.rows.values():
            if (
                reservation.user_id == user_id
                and reservation.item_id == item_id
                and reservation.is_active
            ):
                return reservation
        return None

    async def get_by_user(self, user_id):
        return [r for r in self.rows.values() if r.user_id == user_id]

    async def get_expired_active_ids(self, now):
        return [r.id for r in self.rows.values() if r.is_expired_at(now)]

    async def transition_if_active(self, reservation_id, status):
        if reservation_id in self.fail_transition_for:
            raise RuntimeError("falha simulada na transição")
        reservation = self.rows.get(reservation_id)
        if reservation is None or reservation.status != ReservationStatus.ACTIVE:
            return False
        reservation.status = status
        return True

    def add(self, clock, user_id="user_1", item_id="BK-1", **kwargs) -> Reservation:
        """Insere uma reserva ACTIVE criada em clock() com validade de 7 dias."""
        now = clock()
        reservation = Reservation(
            id=uuid.uuid4(),
            user_id=user_id,
            item_id=item_id,
            status=kwargs.pop("status", ReservationStatus.ACTIVE),
            created_at=now,
            updated_at=now,
            expires_at=kwargs.pop("expires_at", now + timedelta(days=7)),
        )
        self.rows[reservation.id] = reservation
        return reservation


@pytest.fixture
def hold_repo() -> FakeHoldRepository:
    return FakeHoldRepository()


@pytest.fixture
def reservation_repo() -> FakeReservationRepository:
    return FakeReservationRepository()


# ==========================================
# Fonte remota falsa
# ==========================================

class FakeSync:
    """
    Substituto do RemoteSyncService.

    `availability` guarda o status por item; item ausente significa
    catálogo fora do ar (disponibilidade indeterminada).
    """

    def __init__(self):
        self.availability: dict[str, str] = {}
        self.loans: dict[str, list[LoanRecord]] = {}
        self.loans_available = True
        self.profiles: dict[str, dict] = {}

    async def get_availability(self, item_id):
        status = self.availability.get(item_id)
        if status is None:
            return AvailabilityResult(success=False, error="Fonte catálogo não configurada")
        return AvailabilityResult(
            success=True,
            available=status == ItemStatus.AVAILABLE.value,
            status=status,
        )

    async def sync_user_loans(self, user_id):
        if not self.loans_available:
            return LoansResult(success=False, error="diretório fora do ar")
        return LoansResult(success=True, loans=self.loans.get(user_id, []))

    async def get_user_profile(self, user_id):
        profile = self.profiles.get(user_id)
        if profile is None:
            return ProfileResult(success=False, error="perfil indisponível")
        return ProfileResult(success=True, data=profile, from_cache=True)


@pytest.fixture
def fake_sync() -> FakeSync:
    return FakeSync()


@pytest.fixture
def mock_db():
    """Mock da sessão do banco."""
    return AsyncMock()


@pytest.fixture
def eligibility(mock_db, fake_sync, hold_repo, reservation_repo):
    from library_holds.services.eligibility import EligibilityService

    service = EligibilityService(mock_db, sync=fake_sync)
    service.hold_repo = hold_repo
    service.reservation_repo = reservation_repo
    return service


@pytest.fixture
def hold_service(mock_db, fake_sync, eligibility, hold_repo, clock):
    from library_holds.services.holds import HoldService

    service = HoldService(
        mock_db,
        sync=fake_sync,
        eligibility=eligibility,
        locks=ItemLockRegistry(),
        clock=clock,
    )
    service.hold_repo = hold_repo
    return service


@pytest.fixture
def reservation_service(mock_db, fake_sync, eligibility, reservation_repo, clock):
    from library_holds.services.reservations import ReservationService

    service = ReservationService(
        mock_db,
        sync=fake_sync,
        eligibility=eligibility,
        clock=clock,
    )
    service.reservation_repo = reservation_repo
    return service


# ==========================================
# Auth fixtures
# ==========================================

@pytest.fixture
def admin_token() -> str:
    """Token JWT de admin para testes."""
    return create_access_token(
        subject="admin_1",
        extra_data={"role": UserRole.ADMIN.value},
    )


@pytest.fixture
def user_token() -> str:
    """Token JWT de usuário comum para testes."""
    return create_access_token(
        subject="user_1",
        extra_data={"role": UserRole.USER.value},
    )


@pytest.fixture
def auth_headers(admin_token: str) -> dict:
    """Headers de autenticação com token admin."""
    return {"Authorization": f"Bearer {admin_token}"}


@pytest.fixture
def user_headers(user_token: str) -> dict:
    """Headers de autenticação com token usuário."""
    return {"Authorization": f"Bearer {user_token}"}
