from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import create_engine, event
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import scoped_session, sessionmaker
from sqlalchemy.pool import StaticPool

from models.base_model import Base
from models.chirp import Chirp
from models.refresh_token import RefreshToken
from models.user import User
from utils.exceptions import DuplicateToken, NotFound, StoreUnavailable
from utils.session_manager import RefreshTokenRecord

# Map model names for easy querying
classes = {
    "User": User,
    "Chirp": Chirp,
    "RefreshToken": RefreshToken,
}


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite hands back naive datetimes; everything stored is UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class DBStorage:
    """Engine + scoped session for one application instance."""

    def __init__(self, database_url: str, echo: bool = False):
        """Initialize engine for the given database URL"""
        engine_kwargs = {"echo": echo}
        if database_url.startswith("sqlite"):
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if ":memory:" in database_url or database_url in ("sqlite://", "sqlite:///"):
                # one shared connection, otherwise each checkout sees an empty db
                engine_kwargs["poolclass"] = StaticPool
        else:
            engine_kwargs["pool_pre_ping"] = True

        self.__engine = create_engine(database_url, **engine_kwargs)
        self.__session = None

        # Enable SQLite foreign keys (needed for ON DELETE CASCADE)
        if self.__engine.url.get_backend_name() == "sqlite":
            @event.listens_for(self.__engine, "connect")
            def _set_sqlite_pragma(dbapi_connection, connection_record):
                cursor = dbapi_connection.cursor()
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.close()

    def reload(self):
        """Create tables and start session"""
        with self._guard():
            Base.metadata.create_all(self.__engine)
        session_factory = sessionmaker(bind=self.__engine, expire_on_commit=False)
        self.__session = scoped_session(session_factory)

    @contextmanager
    def _guard(self):
        """Translate connectivity failures into StoreUnavailable."""
        try:
            yield
        except (OperationalError, InterfaceError) as exc:
            if self.__session is not None:
                self.__session.rollback()
            raise StoreUnavailable(str(exc.orig)) from exc

    def new(self, obj):
        """Add object to session"""
        self.__session.add(obj)

    def save(self):
        """Commit session"""
        try:
            with self._guard():
                self.__session.commit()
        except SQLAlchemyError:
            self.__session.rollback()
            raise

    def delete(self, obj=None):
        """Delete object if exists (hard delete)"""
        if obj:
            self.__session.delete(obj)

    def get(self, cls, id):
        """Fetch one object by class and ID"""
        if cls in classes.values():
            with self._guard():
                return self.__session.get(cls, id)
        return None

    def count(self, cls):
        with self._guard():
            return self.__session.query(cls).count()

    def delete_all(self, cls):
        """Bulk delete every row of `cls`; foreign keys cascade."""
        with self._guard():
            deleted = self.__session.query(cls).delete(synchronize_session=False)
        self.save()
        return deleted

    def close(self):
        """Remove session (for API teardown)"""
        if self.__session is not None:
            self.__session.remove()

    # expose the SQLAlchemy session for advanced querying (joins, filters, etc.)
    def get_session(self):
        return self.__session

    # --- session manager store contract ---

    def get_user_by_email(self, email: str) -> User:
        with self._guard():
            user = self.__session.query(User).filter(User.email == email).first()
        if user is None:
            raise NotFound(f"no user with email {email!r}")
        return user

    def insert_refresh_token(self, token: str, user_id: str, expires_at: datetime) -> None:
        if self.get(RefreshToken, token) is not None:
            raise DuplicateToken("refresh token already exists")
        self.new(RefreshToken(token=token, user_id=user_id, expires_at=expires_at))
        try:
            self.save()
        except IntegrityError as exc:
            message = str(exc.orig).lower()
            if "unique" in message or "duplicate key" in message:
                raise DuplicateToken("refresh token already exists") from exc
            raise

    def get_refresh_token(self, token: str) -> RefreshTokenRecord:
        row = self.get(RefreshToken, token)
        if row is None:
            raise NotFound("unknown refresh token")
        return RefreshTokenRecord(
            user_id=row.user_id,
            expires_at=_as_utc(row.expires_at),
            revoked_at=_as_utc(row.revoked_at),
        )

    def revoke_refresh_token(self, token: str) -> None:
        now = datetime.now(timezone.utc)
        with self._guard():
            (
                self.__session.query(RefreshToken)
                .filter(RefreshToken.token == token, RefreshToken.revoked_at.is_(None))
                .update({"revoked_at": now, "updated_at": now}, synchronize_session="fetch")
            )
        self.save()
