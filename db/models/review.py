"""
db/models/review.py

Review row keyed by product, reviewer name, rating and comment.
"""

from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, SmallInteger, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.domain.reviews import MAX_REVIEWER_NAME_LENGTH
from db.base import Base, TimestampMixin

if TYPE_CHECKING:
    from db.models.product import Product


class Review(Base, TimestampMixin):
    __tablename__ = "reviews"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    product_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
    )

    user_id: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
        comment="Authoring user; NULL for reviews fetched from external sources",
    )

    user_name: Mapped[str] = mapped_column(String(MAX_REVIEWER_NAME_LENGTH), nullable=False)

    rating: Mapped[int] = mapped_column(SmallInteger, nullable=False)

    comment: Mapped[str | None] = mapped_column(Text, nullable=True)

    product: Mapped["Product"] = relationship("Product", back_populates="reviews")

    __table_args__ = (
        CheckConstraint("rating BETWEEN 1 AND 5", name="rating_range"),
        Index("ix_reviews_product_id", "product_id"),
        Index("ix_reviews_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Review id={self.id} product_id={self.product_id} rating={self.rating}>"
