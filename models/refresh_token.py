"""
RefreshToken model: opaque refresh tokens issued at login.
Fields:
- token (primary key, 64 hex chars)
- user_id (String(36)) - FK to users.id
- expires_at
- revoked_at (null while the token is live)
- created_at, updated_at

Rows are only ever revoked, never deleted, except when the owning user
is removed.
"""
from sqlalchemy import Column, String, DateTime, ForeignKey
from models.base_model import Base, TimestampMixin


class RefreshToken(TimestampMixin, Base):
    __tablename__ = "refresh_tokens"

    token = Column(String(64), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    revoked_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<RefreshToken user={self.user_id} revoked={self.revoked_at is not None}>"
