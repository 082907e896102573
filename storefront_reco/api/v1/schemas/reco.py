# storefront_reco/api/v1/schemas/reco.py
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional

from storefront_reco.domain.services.constants import DEFAULT_GROUP_LIMIT, MAX_LIMIT

class ProductOut(BaseModel):
    id: str
    name: str
    description: str
    price: float
    category: str
    image: str
    brand: Optional[str] = None
    stock: int
    rating: float
    numReviews: int
    createdAt: Optional[datetime] = None

class GroupSimilarIn(BaseModel):
    product_ids: List[str] = Field(alias="productIds", min_length=1)
    limit: int = Field(DEFAULT_GROUP_LIMIT, ge=1, le=MAX_LIMIT)

    model_config = ConfigDict(populate_by_name=True)

class VectorRemovedOut(BaseModel):
    product_id: str
    removed: bool

class SyncReportOut(BaseModel):
    total: int
    synced: int
    skipped: int
    failed: int
    purged: bool
    skipped_reason: Optional[str] = None
    errors: List[str] = Field(default_factory=list)
    processing_time_ms: float
