import logging
import threading
from typing import IO, Dict, Iterable, Optional

from config import EngineConfig
from message_queue import InMemoryQueue
from models import ClientAccount, DecodeFailure, ProcessingResult, ProcessingStats, Record
from state_manager import StateManager
from transaction_processor import TransactionProcessor
from transaction_reader import TransactionReader

logger = logging.getLogger(__name__)


class PaymentsEngine:
    """
    Runs the reader and the processor as a publisher-consumer pipeline.

    One publisher thread decodes the input into a bounded queue; the calling thread
    consumes it strictly in arrival order. Decode failures travel the same queue so
    they stay ordered relative to valid records, and are counted and skipped here.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self._config = config or EngineConfig()
        self._state = StateManager()
        self._processor = TransactionProcessor(self._state, self._config)
        self._stats = ProcessingStats()
        self._publisher_error: Optional[BaseException] = None

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def process_file(self, filepath: str) -> Dict[int, ClientAccount]:
        """Process CSV file and return final account states."""
        # Opened here so a missing file fails before any thread starts.
        # Binary mode: the reader decodes row by row so one bad byte only loses its row.
        with open(filepath, "rb") as f:
            return self.process_stream(f)

    def process_stream(self, stream: IO) -> Dict[int, ClientAccount]:
        queue = InMemoryQueue(self._config.queue_capacity)
        self._publisher_error = None

        publisher_thread = threading.Thread(
            target=self._publish_records, args=(stream, queue), name="transaction-publisher", daemon=True
        )
        publisher_thread.start()

        try:
            self._consume_records(queue)
        except BaseException:
            queue.abort()
            raise
        finally:
            publisher_thread.join()

        if self._publisher_error is not None:
            raise self._publisher_error

        self._log_summary()
        return self._state.get_all_accounts()

    def process_records(self, records: Iterable[Record]) -> Dict[int, ClientAccount]:
        """Apply an already decoded record stream synchronously, in iteration order."""
        for record in records:
            self._handle_record(record)
        self._log_summary()
        return self._state.get_all_accounts()

    def get_all_accounts(self) -> Dict[int, ClientAccount]:
        return self._state.get_all_accounts()

    def _publish_records(self, stream: IO, queue: InMemoryQueue) -> None:
        """Read CSV and publish records to queue."""
        try:
            for record in TransactionReader(stream, self._config):
                if not queue.publish_message(record):
                    logger.info("Consumer aborted, publisher stopping")
                    return
        except Exception as e:
            self._publisher_error = e
        finally:
            queue.close()

    def _consume_records(self, queue: InMemoryQueue) -> None:
        """Consumer loop: pull from queue until it is closed and drained."""
        while True:
            record = queue.consume_message()
            if record is None:
                break
            self._handle_record(record)

    def _handle_record(self, record: Record) -> None:
        if isinstance(record, DecodeFailure):
            logger.warning(f"Corrupted transaction skipped, {record}")
            self._stats.record(ProcessingResult.MALFORMED)
            return

        result = self._processor.process_transaction(record)
        self._stats.record(result)

    def _log_summary(self) -> None:
        logger.info(
            f"Processing complete. {self._stats}, "
            f"clients: {self._state.client_count()}, stored transactions: {self._state.transaction_count()}"
        )
