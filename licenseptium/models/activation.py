from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from licenseptium.db.base import Base


class Activation(Base):
    __tablename__ = "activations"

    address: Mapped[str] = mapped_column(String(15), primary_key=True)
    license_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("licenses.id", ondelete="CASCADE"), primary_key=True, index=True
    )
    activated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    license = relationship("License", back_populates="activations")
