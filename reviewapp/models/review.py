"""Review table model."""

from sqlalchemy import BigInteger, Column, Integer, String, Text

from reviewapp.db.base import Base


class ReviewRow(Base):
    """Stored review. ``reviewed_date`` holds ISO text (see core.dates)."""

    __tablename__ = "reviews"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=False)
    review_text = Column(Text)
    author_name = Column(String(255))
    review_source = Column(String(255))
    review_title = Column(Text)
    product_name = Column(String(255))
    reviewed_date = Column(String(32))  # YYYY-MM-DD or YYYY-MM-DDTHH:MM:SS[+HH:MM]
    rating = Column(Integer)
