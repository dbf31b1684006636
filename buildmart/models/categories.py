import uuid
from sqlalchemy import Column, String, ForeignKey
from sqlalchemy.orm import relationship

from buildmart.database import Base


class ItemCategory(Base):
    """
    Category for items and tenders.
    parent_id allows one level of subcategory nesting.
    """
    __tablename__ = "item_category"

    id = Column(String(64), primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    category = Column(String(100), nullable=False)
    type = Column(String(20), nullable=False)  # product / service / tender
    parent_id = Column(String(64), ForeignKey("item_category.id"), nullable=True)

    parent = relationship("ItemCategory", remote_side=[id], backref="subcategories")
