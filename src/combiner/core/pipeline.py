# src/combiner/core/pipeline.py
import logging
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import List, Optional, Tuple, Union

from combiner.config import EMIT_BUFFERED, CombinerConfig
from combiner.core.admission import AdmissionFilter
from combiner.core.matcher import get_matcher
from combiner.core.output import OutputWriter
from combiner.core.processor import process_file
from combiner.core.statistics import StatisticsAggregator
from combiner.core.walker import Walker, get_walker
from combiner.errors import FileProcessingError, OutputError
from combiner.models import CombineResult, Entry, FileRecord, SkipRecord
from combiner.utils.tokenizer import Tokenizer

logger = logging.getLogger(__name__)

# What a worker hands back: a record (with its content when buffered) or a skip
_Outcome = Union[Tuple[FileRecord, Optional[str]], SkipRecord]


class Combiner:
    """
    Runs one combine: walks the tree on the calling thread, fans admitted
    files out to a thread pool and collects records and statistics.
    """

    def __init__(
        self,
        config: CombinerConfig,
        tokenizer: Optional[Tokenizer] = None,
        walker: Optional[Walker] = None,
    ):
        self.config = config
        # Resolve the tokenizer before touching the output file
        self.tokenizer = tokenizer or Tokenizer.for_scheme(config.tokenizer)
        self.walker = walker or get_walker(config.walk_mode, config.directory, config.output_file)
        self.admission = AdmissionFilter(
            ignore_patterns=config.ignore_patterns,
            include_patterns=config.include_patterns,
            matcher=get_matcher(config.match_mode),
            extensions=config.extensions,
            output_prefix=config.output_prefix,
            include_hidden=config.include_hidden,
        )
        self.buffered = config.emission == EMIT_BUFFERED or config.sort_output

    def _process(self, entry: Entry, stats: StatisticsAggregator, writer: OutputWriter) -> _Outcome:
        logger.debug("Processing file: %s", entry.rel_path)
        try:
            processed = process_file(entry.path, self.tokenizer, entry.rel_path)
        except FileProcessingError as e:
            logger.debug("Skipped file due to error: %s - %s", entry.rel_path, e.reason)
            stats.increment_skipped()
            return SkipRecord(path=entry.rel_path, reason=e.reason)

        record = FileRecord(
            path=entry.rel_path,
            token_count=processed.token_count,
            byte_size=processed.byte_size,
        )
        if self.buffered:
            content = processed.content
        else:
            writer.write_record(entry.rel_path, processed.content)
            content = None
        stats.update_token_stats(record.token_count, record.path)
        stats.increment_processed()
        return record, content

    def run(self) -> CombineResult:
        config = self.config
        stats = StatisticsAggregator(config.output_file)
        files: List[FileRecord] = []
        skipped: List[SkipRecord] = []
        buffer: List[Tuple[str, str]] = []

        with OutputWriter(config.output_file) as writer:
            with ThreadPoolExecutor(max_workers=config.worker_count) as pool:
                futures: List[Future] = []
                for entry in self.walker.walk():
                    if entry.is_dir:
                        stats.increment_directories_visited()
                        continue
                    reason = self.admission.skip_reason(entry.rel_path, entry.path)
                    if reason is not None:
                        logger.debug("Skipping %s: %s", entry.rel_path, reason)
                        continue
                    futures.append(pool.submit(self._process, entry, stats, writer))

                for future in as_completed(futures):
                    # Anything other than a per-file failure aborts the run here
                    outcome = future.result()
                    if isinstance(outcome, SkipRecord):
                        skipped.append(outcome)
                        continue
                    record, content = outcome
                    files.append(record)
                    if content is not None:
                        buffer.append((record.path, content))

            if self.buffered:
                if config.sort_output:
                    buffer.sort(key=lambda item: item[0])
                writer.write_records(buffer)

            if writer.records_written != len(files):
                raise OutputError(
                    config.output_file,
                    RuntimeError(f"wrote {writer.records_written} records for {len(files)} files"),
                )

        statistics = stats.finalize()
        logger.debug(
            "Combined %d files (%d skipped) into %s",
            statistics.files_processed,
            statistics.files_skipped,
            config.output_file,
        )
        return CombineResult(statistics=statistics, files=files, skipped=skipped)


def combine(config: CombinerConfig, tokenizer: Optional[Tokenizer] = None) -> CombineResult:
    return Combiner(config, tokenizer=tokenizer).run()
