import logging
from typing import Optional

from bson import json_util
from pymongo.asynchronous.database import AsyncDatabase

from cursor_stream.extract.base_extractor import AsyncMongoExtractor
from cursor_stream.extract.cancellation import CancellationToken, OperationCancelledError
from cursor_stream.schemas.export_models import ExportRequest, ExportResult

# Setup Logger
logger = logging.getLogger(__name__)

PROGRESS_EVERY = 10000


async def export_collection(
    db: AsyncDatabase,
    request: ExportRequest,
    cancellation_token: Optional[CancellationToken] = None,
) -> ExportResult:
    """
    Streams a collection into a JSON Lines file, one Extended JSON document per line.

    Memory stays bounded by one cursor batch. Cancellation is observed between
    batches: the documents of the batch already fetched are still written, then
    the export stops and reports `cancelled=True`. Any other failure propagates
    and leaves the partial file on disk.
    """
    output_path = request.resolved_output_path()
    output_path.parent.mkdir(parents=True, exist_ok=True)

    logger.info(
        f"🚀 Export [{request.collection}] -> {output_path} (batch_size={request.batch_size})"
    )

    written = 0
    cancelled = False
    extractor = AsyncMongoExtractor(db)
    documents = extractor.fetch_documents(
        request.collection,
        request.query,
        request.projection,
        request.batch_size,
        cancellation_token,
    )
    with open(output_path, "w", encoding="utf-8") as out:
        try:
            async with documents as stream:
                async for document in stream:
                    out.write(json_util.dumps(document))
                    out.write("\n")
                    written += 1

                    if written % PROGRESS_EVERY == 0:
                        logger.debug(f"   ...exported {written} documents")
        except OperationCancelledError:
            cancelled = True
            logger.warning(f"⏹️ Export [{request.collection}] cancelled after {written} documents.")

    if not cancelled:
        logger.info(f"✅ Export [{request.collection}] finished: {written} documents.")

    return ExportResult(
        collection=request.collection,
        output_path=output_path,
        documents_written=written,
        cancelled=cancelled,
    )
