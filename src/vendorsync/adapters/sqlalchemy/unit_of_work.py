"""SQLAlchemy-backed unit of work for catalog reconciliation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from vendorsync.adapters.sqlalchemy.mappings import start_mappers
from vendorsync.adapters.sqlalchemy.migrations import upgrade_head
from vendorsync.adapters.sqlalchemy.repositories import (
    SqlAlchemyProductRepository,
    SqlAlchemyVendorMappingRepository,
    SqlAlchemyVendorRepository,
    translate_errors,
)
from vendorsync.config import get_database_config
from vendorsync.domain.ports.unit_of_work import CatalogRepositories

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine


class StartupError(RuntimeError):
    """Raised when the catalog store is used before ``startup()``."""


@dataclass(slots=True)
class _EngineBinding:
    engine: Engine
    sessions: sessionmaker[Session]


@dataclass(slots=True)
class _Store:
    binding: _EngineBinding | None = None


_STORE = _Store()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Bind the catalog store to an engine and migrate it to the latest schema."""

    if _STORE.binding is not None and not force:
        raise StartupError("Catalog store already started. Pass force=True to rebind.")

    resolved_engine = engine or create_engine(
        database_uri or get_database_config().uri, future=True
    )
    start_mappers()
    upgrade_head(engine=resolved_engine)
    _STORE.binding = _EngineBinding(
        engine=resolved_engine,
        sessions=sessionmaker(bind=resolved_engine, expire_on_commit=False),
    )


def configured_engine() -> Engine | None:
    return _STORE.binding.engine if _STORE.binding is not None else None


def is_started() -> bool:
    return _STORE.binding is not None


def shutdown() -> None:
    """Dispose the bound engine (primarily for tests)."""

    if _STORE.binding is not None:
        _STORE.binding.engine.dispose()
    _STORE.binding = None


def _session_factory() -> sessionmaker[Session]:
    if _STORE.binding is None:
        raise StartupError(
            "Catalog store not started. Call "
            "vendorsync.adapters.sqlalchemy.unit_of_work.startup() first."
        )
    return _STORE.binding.sessions


class SqlAlchemyCatalogUnitOfWork:
    """One session over vendors, master products and vendor mappings.

    Leaving the block with an exception rolls back; commits are explicit.
    """

    def __init__(self, session_factory: sessionmaker[Session] | None = None) -> None:
        self.session_factory = session_factory or _session_factory()
        self._session: Session | None = None
        self._repositories: CatalogRepositories | None = None

    def __enter__(self) -> SqlAlchemyCatalogUnitOfWork:
        if self._session is not None:
            raise StartupError("Unit of work is already open")
        session = self.session_factory()
        self._session = session
        self._repositories = CatalogRepositories(
            vendors=SqlAlchemyVendorRepository(session),
            products=SqlAlchemyProductRepository(session),
            mappings=SqlAlchemyVendorMappingRepository(session),
        )
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        session = self.session
        try:
            if exc_type is not None:
                session.rollback()
        finally:
            session.close()
            self._session = None
            self._repositories = None
        return False

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work is not open")
        return self._session

    @property
    def repositories(self) -> CatalogRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work is not open")
        return self._repositories

    def commit(self) -> None:
        with translate_errors("commit"):
            self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


if TYPE_CHECKING:
    from vendorsync.domain.ports.unit_of_work import CatalogUnitOfWork

    _uow_check: CatalogUnitOfWork = SqlAlchemyCatalogUnitOfWork()
