# storefront_reco/domain/services/vector_sync_svc.py

from __future__ import annotations
from itertools import islice
import logging
import time

from storefront_reco.core.errors import EmbeddingError, VectorBackendError
from storefront_reco.domain.models.product import Product, SyncReport, VectorRecord

logger = logging.getLogger(__name__)


def _chunks(seq, n):
    it = iter(seq)
    while True:
        batch = list(islice(it, n))
        if not batch:
            break
        yield batch


class VectorSyncService:
    """
    Keeps the vector store in step with the catalog.

    - ensure_synced: embed + upsert one product (used for lazy resync on a cache miss)
    - remove: drop one product's vector
    - sync_catalog: full rebuild, batched, skipped when the namespace is already populated
    """

    def __init__(self, catalog, vectors, embedder, *, batch_size: int = 25, purge_on_sync: bool = True):
        self.catalog = catalog
        self.vectors = vectors
        self.embedder = embedder
        self.batch_size = max(1, batch_size)
        self.purge_on_sync = purge_on_sync

    async def build_record(self, product: Product) -> VectorRecord | None:
        text = product.embedding_text()
        if not text:
            return None
        values = await self.embedder.embed(text)
        return VectorRecord.for_product(product, values)

    async def ensure_synced(self, product: Product) -> bool:
        """
        Embed and upsert `product`. Returns False when there is nothing to embed.
        Raises EmbeddingError / VectorBackendError; callers decide how to degrade.
        """
        record = await self.build_record(product)
        if record is None:
            logger.info(f"Nothing to embed for product_id={product.id}")
            return False

        await self.vectors.upsert([record])
        logger.info(f"Vector upserted for product_id={product.id} vector_id={record.id}")

        if product.external_vector_id != record.id:
            await self.catalog.set_vector_id(product.id, record.id)
        return True

    async def remove(self, product_id: str) -> bool:
        if not product_id:
            return False
        product = await self.catalog.get_by_id(product_id)
        vector_id = product.vector_id if product else product_id
        await self.vectors.delete([vector_id])
        logger.info(f"Vector deleted for product_id={product_id} vector_id={vector_id}")
        return True

    async def sync_catalog(self, *, force: bool = False) -> SyncReport:
        start_ts = time.perf_counter()
        products = await self.catalog.find_all()
        report = SyncReport(total=len(products))
        if not products:
            return report

        existing = await self.vectors.namespace_vector_count()
        if existing and existing == len(products) and not force:
            logger.info(f"[vector_sync] namespace already holds {existing} vectors; skipping")
            report.skipped = len(products)
            report.skipped_reason = "namespace_populated"
            return report

        logger.info(f"[vector_sync] syncing {len(products)} products (existing={existing})")

        if self.purge_on_sync:
            try:
                await self.vectors.purge_namespace()
                report.purged = True
                logger.info("[vector_sync] cleared existing vectors for namespace")
            except VectorBackendError as e:
                # a failed purge leaves stale vectors around but does not block the rebuild
                logger.error(f"[vector_sync] namespace purge failed: {e}")

        for batch in _chunks(products, self.batch_size):
            records: list[VectorRecord] = []
            for product in batch:
                try:
                    record = await self.build_record(product)
                except EmbeddingError as e:
                    report.failed += 1
                    report.errors.append(f"embed {product.id}: {e}")
                    logger.warning(f"[vector_sync] embedding failed for product_id={product.id}: {e}")
                    continue
                if record is None:
                    report.skipped += 1
                    continue
                records.append(record)

            if not records:
                continue

            await self.vectors.upsert(records)
            await self.catalog.set_vector_ids(
                (r.metadata.productId, r.id) for r in records
            )
            report.synced += len(records)
            logger.info(f"[vector_sync] progress {report.synced}/{report.total}")

        elapsed_ms = (time.perf_counter() - start_ts) * 1000.0
        logger.info(
            f"[vector_sync] done total={report.total} synced={report.synced} skipped={report.skipped} "
            f"failed={report.failed} time_ms={elapsed_ms:.1f}"
        )
        return report
