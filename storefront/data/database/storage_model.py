"""Client-scoped key/value storage model."""
from sqlalchemy import Column, Integer, String, Text, DateTime, UniqueConstraint
from sqlalchemy.sql import func
from storefront.data.database.connection import Base


class ClientStorageEntry(Base):
    """One stored value for one browsing client."""
    
    __tablename__ = "client_storage"
    __table_args__ = (
        UniqueConstraint("client_id", "key", name="uq_client_storage_client_key"),
    )
    
    id = Column(Integer, primary_key=True, index=True)
    client_id = Column(String(64), nullable=False, index=True)
    key = Column(String(255), nullable=False)
    value = Column(Text, nullable=False)
    
    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
    
    def __repr__(self):
        return f"<ClientStorageEntry(client_id='{self.client_id}', key='{self.key}')>"
