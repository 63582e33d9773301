from __future__ import annotations

from sqlalchemy import Column, Text

from ..db.session import Base


class Blob(Base):
    """One named collection serialized as a JSON array."""

    __tablename__ = "blobs"

    key = Column(Text, primary_key=True)
    value = Column(Text, nullable=False, default="[]")
    updated_at = Column(Text, nullable=False)
