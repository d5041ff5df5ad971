import asyncio
import signal
import sys
from typing import Callable

from pydantic import ValidationError

from cursor_stream.config.mongo_client import mongo_client
from cursor_stream.extract.cancellation import CancellationToken
from cursor_stream.jobs.export_collection import export_collection
from cursor_stream.schemas.export_models import ExportRequest
from cursor_stream.utils.logger import setup_logger

logger = setup_logger()

USAGE = "Usage: python -m cursor_stream.main export <collection> [output_path]"


def cancel_on_sigint(token: CancellationToken, loop: asyncio.AbstractEventLoop) -> Callable[[], None]:
    """
    Routes SIGINT to `token.cancel` on `loop`.

    Returns a callable that restores the previous SIGINT behaviour.
    """
    try:
        loop.add_signal_handler(signal.SIGINT, token.cancel)
    except NotImplementedError:
        # Windows event loops do not support signal handlers
        return lambda: None
    return lambda: loop.remove_signal_handler(signal.SIGINT)


async def run_export(request: ExportRequest) -> int:
    """
    Runs one export; Ctrl+C cancels it between batches.

    Returns 0 on success and 130 when the export was cancelled.
    Failures propagate after the connection is closed.
    """
    token = CancellationToken()
    restore_sigint = cancel_on_sigint(token, asyncio.get_running_loop())

    try:
        db = await mongo_client.get_async_db()
        result = await export_collection(db, request, token)
    finally:
        restore_sigint()
        await mongo_client.aclose()

    logger.info(
        f"Export summary: collection={result.collection} "
        f"documents={result.documents_written} cancelled={result.cancelled} "
        f"file={result.output_path}"
    )
    return 130 if result.cancelled else 0


def main(argv=None) -> int:
    """
    Main Entry Point for Background Jobs.
    See USAGE for the command line.
    """
    args = sys.argv[1:] if argv is None else argv
    if len(args) < 2:
        logger.error(f"No job specified. {USAGE}")
        return 1

    job_name, collection = args[0], args[1]
    output_path = args[2] if len(args) > 2 else None

    if job_name != "export":
        logger.warning(f"Job {job_name} not recognized.")
        return 1

    try:
        request = ExportRequest(collection=collection, output_path=output_path)
    except ValidationError as e:
        logger.error(f"Invalid export request: {e}")
        return 1

    logger.info(f"Starting cursor_stream. Job: {job_name} | Collection: {collection}")

    try:
        return asyncio.run(run_export(request))
    except Exception:
        logger.exception("Critical Job Failure")
        return 1


if __name__ == "__main__":
    sys.exit(main())
