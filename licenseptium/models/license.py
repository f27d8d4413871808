import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Integer, LargeBinary, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from licenseptium.db.base import Base


class License(Base):
    __tablename__ = "licenses"
    __table_args__ = (CheckConstraint("ip_limit > 0", name="ip_limit_positive"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    key: Mapped[uuid.UUID] = mapped_column(Uuid, unique=True, index=True, nullable=False, default=uuid.uuid4)
    comment: Mapped[str] = mapped_column(Text, nullable=False, default="")
    ip_limit: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    checksum: Mapped[bytes | None] = mapped_column(LargeBinary, nullable=True)
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    activations = relationship(
        "Activation",
        back_populates="license",
        cascade="all, delete-orphan",
    )
