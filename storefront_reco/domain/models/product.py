from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Optional, List
from datetime import datetime

class Product(BaseModel):
    """
    Catalog entry as seen by the recommendation engine.
    Serialized with camelCase aliases (numReviews, createdAt, ...) like the storefront API.
    """
    id: str
    name: str
    description: str = ""
    price: float = Field(default=0.0, ge=0)
    category: str = ""
    image: str = ""
    brand: Optional[str] = None
    stock: int = 0
    rating: float = Field(default=0.0, ge=0, le=5)
    num_reviews: int = Field(default=0, alias="numReviews")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    external_vector_id: Optional[str] = Field(default=None, alias="externalVectorId")

    model_config = ConfigDict(frozen=True, populate_by_name=True)  # immuable = safe

    @classmethod
    def from_document(cls, doc: dict) -> "Product":
        """Build a Product from a raw Mongo document (`_id` -> `id`, legacy vector id fields)."""
        data = {k: v for k, v in doc.items() if k != "_id"}
        data["id"] = str(doc.get("_id", doc.get("id")))
        if not data.get("externalVectorId"):
            legacy = doc.get("pineconeId") or doc.get("weaviateId")
            if legacy:
                data["externalVectorId"] = str(legacy)
        return cls.model_validate(data)

    @property
    def vector_id(self) -> str:
        """Id of this product's record in the vector store."""
        return self.external_vector_id or self.id

    def embedding_text(self) -> str:
        """Text sent to the embedding model (name, then description); empty when both are blank."""
        name, description = (self.name or "").strip(), (self.description or "").strip()
        if not name and not description:
            return ""
        return f"{name}. {description}".strip()

    def public(self) -> dict:
        """Normalized projection returned to API callers."""
        return self.model_dump(by_alias=True, exclude={"external_vector_id"})


class VectorMetadata(BaseModel):
    productId: str
    name: Optional[str] = None
    category: Optional[str] = None
    brand: Optional[str] = None
    price: Optional[float] = None
    image: Optional[str] = None
    createdAt: Optional[str] = None


class VectorRecord(BaseModel):
    id: str
    values: List[float]
    metadata: VectorMetadata

    model_config = {"frozen": True}

    @classmethod
    def for_product(cls, product: Product, values: List[float]) -> "VectorRecord":
        return cls(
            id=product.vector_id,
            values=values,
            metadata=VectorMetadata(
                productId=product.id,
                name=product.name,
                category=product.category,
                brand=product.brand,
                price=product.price,
                image=product.image,
                createdAt=product.created_at.isoformat() if product.created_at else None,
            ),
        )


class VectorMatch(BaseModel):
    id: str
    score: float = 0.0
    metadata: dict[str, Any] = Field(default_factory=dict)

    model_config = {"frozen": True}

    @property
    def product_id(self) -> str:
        """Canonical catalog id: metadata.productId, legacy metadata.mongoId, else the match id."""
        return str(self.metadata.get("productId") or self.metadata.get("mongoId") or self.id)


class StoredVector(BaseModel):
    id: str
    values: List[float]
    metadata: dict[str, Any] = Field(default_factory=dict)


class SyncReport(BaseModel):
    total: int = 0
    synced: int = 0
    skipped: int = 0
    failed: int = 0
    purged: bool = False
    skipped_reason: Optional[str] = None
    errors: List[str] = Field(default_factory=list)
