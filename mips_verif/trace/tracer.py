#    Copyright 2026 Two Sigma Open Source, LLC
#
#    Licensed under the Apache License, Version 2.0 (the "License");
#    you may not use this file except in compliance with the License.
#    You may obtain a copy of the License at
#
#        http://www.apache.org/licenses/LICENSE-2.0
#
#    Unless required by applicable law or agreed to in writing, software
#    distributed under the License is distributed on an "AS IS" BASIS,
#    WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#    See the License for the specific language governing permissions and
#    limitations under the License.

"""Swimlane trace writer.

Tracer
======

Writes pipeline-stage events as a trace-event JSON array that trace viewers
(chrome://tracing, Perfetto) display with one lane per pipeline stage.

Artifact Layout:
    {"otherData":{},"traceEvents": [
    {"cat":"a","dur":1,"name":"DUMMY","ph":"X","pid":"out","tid":"Fetch","ts":0},
    ... one placeholder per stage ...
    {"cat":"write","dur":1000,"name":"F","ph":"X","pid":"out","tid":"Fetch","ts":1500,"args":{...}},
    ... ]}

    - Placeholders give every stage a lane even if it never fires
    - Timestamps are simulation time scaled by TRACE_TIME_SCALE so events
      one half cycle apart stay distinguishable against EVENT_DURATION
    - In fragment mode the enclosing {"traceEvents": [ ... ]} is omitted so
      several fragments can be concatenated

Record Limit:
    At most TRACE_EVENT_LIMIT event records are written; later calls are
    dropped without affecting the simulation.

Finalization:
    Records are comma separated and the last one is terminated by a space
    when destroy() closes the envelope. The placeholders are written even in
    fragment mode, so an opened artifact always has a record to terminate.
"""

import json
import logging
from pathlib import Path
from types import TracebackType
from typing import Any, TextIO

from mips_verif.config import (
    PLACEHOLDER_DURATION,
    STAGE_NAMES,
    TRACE_EVENT_LIMIT,
    TRACE_FILE_SUFFIX,
    TRACE_TIME_SCALE,
)
from mips_verif.trace.stage_formatter import TraceArg

log = logging.getLogger(__name__)

ENVELOPE_OPEN = '{"otherData":{},"traceEvents": ['
ENVELOPE_CLOSE = "]}"
RECORD_SEPARATOR = ","


def _dumps(record: dict[str, Any]) -> str:
    return json.dumps(record, separators=(",", ":"))


class SwimlaneTracer:
    """Accumulate formatted stage events into a bounded trace artifact.

    Usage:
        tracer = SwimlaneTracer("out/nqueens")
        with tracer:
            tracer.record("Fetch", "F", time, EVENT_DURATION, TraceArg("pc", "00000000"))
    """

    def __init__(
        self,
        output_base: str | None,
        fragment: bool = False,
        limit: int = TRACE_EVENT_LIMIT,
    ) -> None:
        """Initialize tracer.

        Args:
            output_base: Artifact path without suffix; None disables tracing
            fragment: Omit the enclosing envelope
            limit: Maximum number of event records
        """
        self.output_base = output_base
        self.fragment = fragment
        self.limit = limit
        self.event_count = 0
        self.dropped_records = 0
        self._file: TextIO | None = None
        self._separator_pending = False

    @property
    def enabled(self) -> bool:
        return self.output_base is not None

    @property
    def path(self) -> Path | None:
        if self.output_base is None:
            return None
        return Path(self.output_base + TRACE_FILE_SUFFIX)

    @property
    def is_open(self) -> bool:
        return self._file is not None

    def create(self) -> None:
        """Open the artifact and write the envelope and lane placeholders."""
        if self.path is None or self._file is not None:
            return
        self._file = open(self.path, "w", encoding="utf-8")
        if not self.fragment:
            self._file.write(ENVELOPE_OPEN)
        for stage in STAGE_NAMES:
            self._write_record(
                {
                    "cat": "a",
                    "dur": PLACEHOLDER_DURATION,
                    "name": "DUMMY",
                    "ph": "X",
                    "pid": self.output_base,
                    "tid": stage,
                    "ts": 0,
                }
            )

    def record(
        self,
        lane: str,
        name: str,
        timestamp: int,
        duration: int,
        *args: TraceArg,
    ) -> bool:
        """Append one event record.

        Args:
            lane: Stage name (trace thread id)
            name: Display label
            timestamp: Raw simulation time (scaled on output)
            duration: Record duration
            args: Trace arguments; invisible ones are omitted

        Returns:
            True if the record was written, False if tracing is disabled or
            the record limit has been reached.
        """
        if self._file is None:
            return False
        if self.event_count >= self.limit:
            if self.dropped_records == 0:
                log.debug("Trace record limit %d reached, dropping further records", self.limit)
            self.dropped_records += 1
            return False

        record: dict[str, Any] = {
            "cat": "write",
            "dur": duration,
            "name": name,
            "ph": "X",
            "pid": self.output_base,
            "tid": lane,
            "ts": timestamp * TRACE_TIME_SCALE,
        }
        visible = {arg.key: arg.value for arg in args if arg.visible}
        if args:
            record["args"] = visible
        self._write_record(record)
        self.event_count += 1
        return True

    def destroy(self) -> None:
        """Trim the trailing separator, close the envelope and the file."""
        if self._file is None:
            return
        if self._separator_pending:
            self._file.write(" ")
        else:
            log.warning("Trace %s has no records to terminate", self.path)
        if not self.fragment:
            self._file.write(ENVELOPE_CLOSE)
        self._file.close()
        self._file = None
        self._separator_pending = False
        log.info('Wrote trace to "%s"', self.path)

    def _write_record(self, record: dict[str, Any]) -> None:
        assert self._file is not None
        # Separator is deferred so destroy() can replace the last one.
        if self._separator_pending:
            self._file.write(RECORD_SEPARATOR)
        self._file.write(_dumps(record))
        self._separator_pending = True

    def __enter__(self) -> "SwimlaneTracer":
        self.create()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.destroy()
