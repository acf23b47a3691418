"""
db/models/product.py

Catalog product model. Products are managed by the catalog CRUD surface;
review ingestion only reads them.
"""

from typing import TYPE_CHECKING

from sqlalchemy import Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, TimestampMixin

if TYPE_CHECKING:
    from db.models.review import Review


class Product(Base, TimestampMixin):
    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    image_url: Mapped[str | None] = mapped_column(
        String(500),
        nullable=True,
        comment="Display image shown alongside reviews",
    )

    reviews: Mapped[list["Review"]] = relationship(
        "Review",
        back_populates="product",
        cascade="all, delete-orphan",
        lazy="select",
    )

    __table_args__ = (Index("ix_products_name", "name"),)

    def __repr__(self) -> str:
        return f"<Product id={self.id} name={self.name!r}>"
