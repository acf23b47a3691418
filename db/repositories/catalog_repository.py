"""
Catalog Store implementation over SQLAlchemy for review ingestion.
"""

from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.reviews import CatalogProduct, CommittedReview
from db.models.product import Product
from db.models.review import Review
from db.repositories.errors import (
    CatalogStoreUnavailableError,
    ReviewNotFoundError,
    ReviewPersistenceError,
)

logger = logging.getLogger(__name__)


class CatalogRepository:
    """
    Reads catalog products and commits reviews one row at a time.

    Each insert commits independently; an earlier committed review is not
    rolled back when a later insert fails.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def list_products(self, *, limit: int, order_random: bool = False) -> list[CatalogProduct]:
        stmt = select(Product.id, Product.name)
        if order_random:
            stmt = stmt.order_by(func.random())
        else:
            stmt = stmt.order_by(Product.id)
        stmt = stmt.limit(max(1, limit))

        try:
            rows = self._session.execute(stmt).all()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise CatalogStoreUnavailableError(f"Failed to list catalog products: {exc}") from exc
        return [CatalogProduct(id=row.id, name=row.name) for row in rows]

    def insert_review(
        self,
        *,
        product_id: int,
        reviewer_name: str,
        rating: int,
        comment: str,
    ) -> int:
        review = Review(
            product_id=product_id,
            user_name=reviewer_name,
            rating=rating,
            comment=comment,
        )
        try:
            self._session.add(review)
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            logger.error(
                "Failed to insert review product_id=%s reviewer=%s error=%s",
                product_id,
                reviewer_name,
                exc,
            )
            raise ReviewPersistenceError(f"Failed to insert review for product {product_id}: {exc}") from exc
        return review.id

    def get_review_with_product(self, review_id: int) -> CommittedReview:
        stmt = (
            select(
                Review.id,
                Review.product_id,
                Review.user_name,
                Review.rating,
                Review.comment,
                Review.created_at,
                Product.name.label("product_name"),
                Product.image_url.label("product_image"),
            )
            .join(Product, Review.product_id == Product.id)
            .where(Review.id == review_id)
        )
        try:
            row = self._session.execute(stmt).one_or_none()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise ReviewPersistenceError(f"Failed to read review {review_id}: {exc}") from exc

        if row is None:
            raise ReviewNotFoundError(f"Review {review_id} was not found.")

        return CommittedReview(
            id=row.id,
            product_id=row.product_id,
            reviewer_name=row.user_name,
            rating=row.rating,
            comment=row.comment,
            created_at=row.created_at,
            product_name=row.product_name,
            product_image=row.product_image,
        )
