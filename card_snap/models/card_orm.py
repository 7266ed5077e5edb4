"""SQLAlchemy ORM model for the local card store"""
from sqlalchemy import Column, String, Integer, Text, Index
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class CardRecordORM(Base):
    """One stored card document, keyed by card id"""
    __tablename__ = 'loyalty_cards'

    # Primary key - the card id
    id = Column(String, primary_key=True)

    # Insertion sequence; kept when a record is replaced
    position = Column(Integer, nullable=False)

    # JSON text of LoyaltyCardModel.to_json()
    payload = Column(Text, nullable=False)

    __table_args__ = (
        Index('idx_position', position),
    )

    def __repr__(self):
        return f"<CardRecordORM(id='{self.id}', position={self.position})>"
