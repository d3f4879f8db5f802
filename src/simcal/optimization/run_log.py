# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2024-2026 SIMCAL Team

"""
Append-only run log of objective evaluations.

Two independently checkable streams are kept per calibration:

- the parameter stream: one row per evaluation with step, status, loss and
  the parameter values;
- the comparison stream: one row per (evaluation, year) with the simulated
  value of the calibration target.

:class:`RunLog` is the storage abstraction (append a record, ask whether
anything has been written yet, read the streams back). :class:`CsvRunLog`
stores both streams as CSV files that are only ever appended to; the header
is written when a file is new or blank, so a restarted process keeps
appending to the same files without repeating it. :class:`RunLogger` puts the
failure policy on top: I/O and parse errors become warnings unless logging
is strict.
"""

import logging
import os
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence

import pandas as pd

from simcal.core.constants import OutputFiles
from simcal.core.exceptions import LoggingFailure

from .objective import EvaluationRecord

PARAMETER_STREAM_FIXED = ['run_id', 'step', 'status', 'loss', 'timestamp']
COMPARISON_STREAM_COLUMNS = ['run_id', 'step', 'variable', 'year', 'value']
UNREADABLE_CSV_ERRORS = (pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError)

logger = logging.getLogger(__name__)


def default_run_id() -> str:
    return datetime.now().strftime('%Y%m%dT%H%M%S')


class RunLog(ABC):
    """Storage for evaluation records."""

    def __init__(self, parameter_names: Sequence[str], run_id: Optional[str] = None):
        self.parameter_names = list(parameter_names)
        self.run_id = run_id or default_run_id()

    @property
    def parameter_columns(self) -> List[str]:
        return PARAMETER_STREAM_FIXED + self.parameter_names

    @abstractmethod
    def append(self, record: EvaluationRecord) -> None:
        """Append one record to both streams."""

    @abstractmethod
    def has_records(self) -> bool:
        """True once any record exists in the parameter stream."""

    @abstractmethod
    def read_parameter_stream(self) -> pd.DataFrame:
        pass

    @abstractmethod
    def read_comparison_stream(self) -> pd.DataFrame:
        pass

    def last_step(self) -> int:
        """Highest step recorded for this log's run_id, 0 if none."""
        df = self.read_parameter_stream()
        if df.empty:
            return 0
        own = df[df['run_id'].astype(str) == self.run_id]
        return int(own['step'].max()) if not own.empty else 0

    def _parameter_row(self, record: EvaluationRecord) -> dict:
        row = {
            'run_id': self.run_id,
            'step': record.step,
            'status': record.status,
            'loss': record.loss,
            'timestamp': record.timestamp.isoformat(timespec='seconds'),
        }
        for name in self.parameter_names:
            row[name] = record.parameters.get(name)
        return row

    def _comparison_rows(self, record: EvaluationRecord) -> List[dict]:
        return [
            {'run_id': self.run_id, 'step': record.step, 'variable': record.variable,
             'year': year, 'value': value}
            for year, value in record.comparison_series
        ]


class InMemoryRunLog(RunLog):
    """Run log kept in memory; for tests and dry runs."""

    def __init__(self, parameter_names: Sequence[str], run_id: Optional[str] = None):
        super().__init__(parameter_names, run_id)
        self.records: List[EvaluationRecord] = []
        self._parameter_rows: List[dict] = []
        self._comparison_rows_buffer: List[dict] = []

    def append(self, record: EvaluationRecord) -> None:
        self.records.append(record)
        self._parameter_rows.append(self._parameter_row(record))
        self._comparison_rows_buffer.extend(self._comparison_rows(record))

    def has_records(self) -> bool:
        return bool(self.records)

    def read_parameter_stream(self) -> pd.DataFrame:
        return pd.DataFrame(self._parameter_rows, columns=self.parameter_columns)

    def read_comparison_stream(self) -> pd.DataFrame:
        return pd.DataFrame(self._comparison_rows_buffer, columns=COMPARISON_STREAM_COLUMNS)


class CsvRunLog(RunLog):
    """Run log stored as two append-only CSV files in ``directory``.

    Comparison rows of an evaluation are written before its parameter row, so
    a step present in the parameter stream always has its comparison rows.
    A file left blank by an interrupted run is started over with a fresh
    header; a row cut off mid-line is closed with a newline before the next
    row is appended.
    """

    def __init__(
        self,
        directory: Path,
        parameter_names: Sequence[str],
        run_id: Optional[str] = None,
    ):
        super().__init__(parameter_names, run_id)
        self.directory = Path(directory)
        self.parameter_path = self.directory / OutputFiles.PARAMETER_LOG
        self.comparison_path = self.directory / OutputFiles.COMPARISON_LOG
        self._header_checked = False

    @staticmethod
    def _needs_header(path: Path) -> bool:
        """True when the file is missing or holds nothing but whitespace."""
        if not path.exists():
            return True
        with open(path, 'rb') as f:
            for chunk in iter(lambda: f.read(65536), b''):
                if chunk.strip():
                    return False
        return True

    @staticmethod
    def _terminate_partial_line(path: Path) -> None:
        with open(path, 'rb+') as f:
            f.seek(-1, os.SEEK_END)
            last = f.read(1)
            if last != b'\n':
                f.seek(0, os.SEEK_END)
                f.write(b'\n')
                logger.warning(f"Run log {path} ended with an incomplete row; continuing on a new line")

    def _prepare_for_append(self, path: Path) -> bool:
        """Make ``path`` ready for appending; returns whether a header is needed."""
        if self._needs_header(path):
            if path.exists():
                path.write_text('')
            return True
        self._terminate_partial_line(path)
        return False

    def _read_csv(self, path: Path, **kwargs) -> pd.DataFrame:
        try:
            return pd.read_csv(path, **kwargs)
        except UNREADABLE_CSV_ERRORS as e:
            raise LoggingFailure(f"Run log {path} could not be parsed: {e}") from e

    def _check_existing_header(self) -> None:
        """Refuse to append rows whose columns differ from an existing file's header."""
        if self._header_checked:
            return
        if not self._needs_header(self.parameter_path):
            existing = list(self._read_csv(self.parameter_path, nrows=0).columns)
            if existing != self.parameter_columns:
                raise LoggingFailure(
                    f"Existing run log {self.parameter_path} has columns {existing}, "
                    f"expected {self.parameter_columns}"
                )
        self._header_checked = True

    def append(self, record: EvaluationRecord) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        self._check_existing_header()

        comparison_rows = self._comparison_rows(record)
        if comparison_rows:
            comp_df = pd.DataFrame(comparison_rows, columns=COMPARISON_STREAM_COLUMNS)
            header = self._prepare_for_append(self.comparison_path)
            comp_df.to_csv(self.comparison_path, mode='a', index=False, header=header)

        params_df = pd.DataFrame([self._parameter_row(record)], columns=self.parameter_columns)
        header = self._prepare_for_append(self.parameter_path)
        params_df.to_csv(self.parameter_path, mode='a', index=False, header=header)

    def has_records(self) -> bool:
        if self._needs_header(self.parameter_path):
            return False
        return not self.read_parameter_stream().empty

    def _read(self, path: Path, columns: List[str]) -> pd.DataFrame:
        if self._needs_header(path):
            return pd.DataFrame(columns=columns)
        return self._read_csv(path, dtype={'run_id': str})

    def read_parameter_stream(self) -> pd.DataFrame:
        return self._read(self.parameter_path, self.parameter_columns)

    def read_comparison_stream(self) -> pd.DataFrame:
        return self._read(self.comparison_path, COMPARISON_STREAM_COLUMNS)


class RunLogger:
    """Records evaluations to a RunLog with a best-effort failure policy.

    Args:
        run_log: Storage backend.
        strict: Raise LoggingFailure on I/O or parse errors instead of warning.
        logger: Logger instance.
    """

    def __init__(self, run_log: RunLog, strict: bool = False,
                 logger: Optional[logging.Logger] = None):
        self.run_log = run_log
        self.strict = strict
        self.logger = logger or logging.getLogger(__name__)
        self.records_written = 0
        self.failure_count = 0

    def has_records(self) -> bool:
        """Whether the log already holds records; an unreadable log counts as empty."""
        try:
            return self.run_log.has_records()
        except (OSError, LoggingFailure) as e:
            if self.strict:
                if isinstance(e, LoggingFailure):
                    raise
                raise LoggingFailure(f"Could not read run log: {e}") from e
            self.logger.warning(f"Run log could not be read back; treating it as empty: {e}")
            return False

    def record(self, entry: EvaluationRecord) -> None:
        try:
            self.run_log.append(entry)
        except (OSError, LoggingFailure) as e:
            self.failure_count += 1
            if self.strict:
                if isinstance(e, LoggingFailure):
                    raise
                raise LoggingFailure(f"Could not write run log record for step {entry.step}: {e}") from e
            self.logger.warning(
                f"Run log write failed for step {entry.step} ({self.failure_count} failures so far): {e}"
            )
            return
        self.records_written += 1
