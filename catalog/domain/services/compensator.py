import logging
from typing import Optional, Sequence

from catalog.domain.exceptions import CompensationError, StoreError
from catalog.infra.observability.metrics import compensation_storage_failures_total, compensations_total
from infrastructure.storage import StorageException

logger = logging.getLogger(__name__)

OUTCOME_CLEAN = "clean"
OUTCOME_STORAGE_INCOMPLETE = "storage_incomplete"
OUTCOME_ROW_DELETE_FAILED = "row_delete_failed"


class Compensator:
    """
    Undoes a partially completed product write.

    Removes the stored image objects first, then the product row. A failed
    update passes no row, only its new uploads. Nothing here raises: failures
    are logged and counted, and the caller reports its original error.
    """

    def __init__(self, store, storage):
        self.store = store
        self.storage = storage

    def compensate(self, product_id: Optional[str], storage_paths: Sequence[str], reason: str) -> str:
        """
        Roll back a create, or the uploads of an update.

        Args:
            product_id: Row to delete, or None when no row was written
            storage_paths: Object keys uploaded for the product
            reason: The failure that triggered the rollback (logged)

        Returns:
            Outcome label: ``clean``, ``storage_incomplete`` or ``row_delete_failed``
        """
        subject = f"product {product_id}" if product_id is not None else "uploads"
        failed_paths = []
        for path in storage_paths:
            try:
                self.storage.delete(path)
            except StorageException as e:
                failed_paths.append(path)
                compensation_storage_failures_total.inc()
                logger.warning(f"Could not remove {path} while rolling back {subject}: {e}")

        row_error = None
        if product_id is not None:
            try:
                self.store.delete(product_id)
            except StoreError as e:
                row_error = CompensationError(f"Product row {product_id} was not deleted: {e}")

        if row_error is not None:
            outcome = OUTCOME_ROW_DELETE_FAILED
        elif failed_paths:
            outcome = OUTCOME_STORAGE_INCOMPLETE
        else:
            outcome = OUTCOME_CLEAN
        compensations_total.labels(outcome=outcome).inc()

        extra = {
            "product_id": product_id,
            "reason": reason,
            "outcome": outcome,
            "removed_objects": len(storage_paths) - len(failed_paths),
            "orphaned_objects": failed_paths,
        }
        if outcome == OUTCOME_CLEAN:
            logger.info(f"Rolled back {subject} after: {reason}", extra=extra)
        else:
            logger.error(
                f"Incomplete rollback of {subject} ({outcome}) after: {reason}"
                + (f"; {row_error}" if row_error else ""),
                extra=extra,
            )
        return outcome
