"""Implementation of RatingRepository using SQLAlchemy"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from chessmatch.db.schema import DBRating


class SQLRatingRepository:
    """Data stored using SQL / methods implemented using SQLAlchemy"""

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    def get_rating(self, identity: str) -> int | None:
        """Rating of the identity, if record exists."""
        rating_db = self._fetch_rating(identity)
        if rating_db:
            return rating_db.rating
        return None

    def set_rating(self, identity: str, rating: int) -> None:
        """Create the record, or update the existing one."""
        rating_db = self._fetch_rating(identity)
        if rating_db is None:
            self.db.add(DBRating(identity=identity, rating=rating))
        else:
            rating_db.rating = rating
        self.db.commit()

    def _fetch_rating(self, identity: str) -> DBRating | None:
        query = select(DBRating).where(DBRating.identity == identity)
        return self.db.scalar(query)
