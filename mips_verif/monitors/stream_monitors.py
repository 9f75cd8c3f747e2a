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

"""Golden-stream monitors for externally visible events.

Stream Monitors
===============

This module implements the oracle channels that compare the hardware
model's externally visible events against golden reference files recorded
by an earlier, trusted run.

How Monitors Work:
    Every live event is pushed into its channel's monitor, which:
    1. Opens the channel's golden file on first use (missing file is fatal)
    2. Reads the next golden record of the same shape as the live event
    3. Raises StreamExhausted if no record remains
    4. Compares field by field and raises ValueMismatch on any difference
    5. Counts the event on a match

Checking is strictly sequential and exact: no reordering, no windowing.

Channels Provided:
    - PcStreamMonitor: retired program counters (<benchmark>.pc.txt, 1 value)
    - WriteBackStreamMonitor: memory write-backs (<benchmark>.wb.txt, addr data)
    - LoadStoreStreamMonitor: load/store accesses (<benchmark>.ls.txt, op addr data)

Dump Mode:
    With dumping enabled, every live event is also written to
    <benchmark>.<channel>.dump.txt in the golden file format, so an accepted
    behavior change can be promoted to the next golden reference. Dump level
    2 prefixes every line with the decimal simulation time.
"""

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

from mips_verif.config import DUMP_WITH_TIME_LEVEL, MASK32, HarnessOptions
from mips_verif.errors import MissingReferenceFile, StreamExhausted, ValueMismatch

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class StreamChannel:
    """Shape of one verified event class."""

    name: str
    suffix: str
    fields: tuple[str, ...]
    print_prefix: str = ""

    @property
    def width(self) -> int:
        return len(self.fields)


PC_CHANNEL = StreamChannel("pc", "pc", ("pc",))
WRITE_BACK_CHANNEL = StreamChannel("write back", "wb", ("addr", "data"), "wb ")
LOAD_STORE_CHANNEL = StreamChannel("load store", "ls", ("op", "addr", "data"), "ls ")


class GoldenStreamReader:
    """Sequential reader of whitespace-separated hex values."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self._file: TextIO | None = None
        self._tokens: Iterator[tuple[int, str]] | None = None
        self._exhausted = False

    def open(self) -> None:
        """Open the golden file.

        Non-ASCII bytes decode to U+FFFD and then fail as malformed values.

        Raises:
            FileNotFoundError: If the file does not exist.
        """
        self._file = open(self.path, encoding="ascii", errors="replace")
        self._tokens = self._iter_tokens(self._file)

    @property
    def is_open(self) -> bool:
        return self._file is not None

    @staticmethod
    def _iter_tokens(f: TextIO) -> Iterator[tuple[int, str]]:
        for line_number, line in enumerate(f, start=1):
            for token in line.split():
                yield line_number, token

    def read_record(self, width: int) -> tuple[int, ...] | None:
        """Return the next width values, or None once the stream has ended.

        A malformed value ends the stream, the same as running out of values.
        """
        if self._tokens is None or self._exhausted:
            return None
        values = []
        for _ in range(width):
            try:
                line_number, token = next(self._tokens)
            except StopIteration:
                self._exhausted = True
                return None
            try:
                values.append(int(token, 16) & MASK32)
            except ValueError:
                log.warning(
                    "%s:%d: malformed value %r ends the stream", self.path, line_number, token
                )
                self._exhausted = True
                return None
        return tuple(values)

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None
            self._tokens = None


class StreamDumper:
    """Writer of live events in the golden file format."""

    def __init__(self, path: Path, with_time: bool = False) -> None:
        self.path = path
        self.with_time = with_time
        self._file: TextIO | None = None

    def write(self, values: tuple[int, ...], time: int) -> None:
        """Append one record, opening the file on first use."""
        if self._file is None:
            self._file = open(self.path, "w", encoding="ascii")
        prefix = f"{time} " if self.with_time else ""
        self._file.write(prefix + " ".join(f"{value:x}" for value in values) + "\n")

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None


class StreamMonitor:
    """Compare one channel of live events against its golden stream.

    Subclasses fix the channel and give observe() a typed signature; the
    checking itself is shared.
    """

    channel: StreamChannel

    def __init__(
        self,
        golden_path: Path,
        check: bool = True,
        dump_path: Path | None = None,
        dump_level: int = 0,
        print_events: bool = False,
    ) -> None:
        """Initialize monitor.

        Args:
            golden_path: Golden stream file for this channel
            check: Compare live events against the golden stream
            dump_path: Where live events are dumped
            dump_level: 0 = no dump, 1 = dump, 2 = dump with time column
            print_events: Echo live events to the console
        """
        self.check = check
        self.print_events = print_events
        self.reader = GoldenStreamReader(golden_path)
        self.dumper: StreamDumper | None = None
        if dump_level > 0 and dump_path is not None:
            self.dumper = StreamDumper(dump_path, with_time=dump_level >= DUMP_WITH_TIME_LEVEL)
        self.observed = 0

    @property
    def name(self) -> str:
        return self.channel.name

    def _observe(self, values: tuple[int, ...], time: int) -> None:
        """Print, dump and check one live event.

        Raises:
            MissingReferenceFile: The golden file cannot be opened.
            StreamExhausted: The golden stream has no record left.
            ValueMismatch: The golden record differs from the live event.
        """
        values = tuple(value & MASK32 for value in values)
        if self.print_events:
            fields = " ".join(f"{k}={v:x}" for k, v in zip(self.channel.fields, values))
            print(f"-- EVENT {self.channel.print_prefix}{fields}", flush=True)
        if self.dumper is not None:
            self.dumper.write(values, time)
        if self.check:
            self._check(values, time)
        self.observed += 1

    def _check(self, values: tuple[int, ...], time: int) -> None:
        if not self.reader.is_open:
            try:
                self.reader.open()
            except FileNotFoundError as e:
                raise MissingReferenceFile(self.name, self.reader.path) from e

        actual = dict(zip(self.channel.fields, values))
        expected_values = self.reader.read_record(self.channel.width)
        if expected_values is None:
            raise StreamExhausted(self.name, actual, time)
        expected = dict(zip(self.channel.fields, expected_values))
        if expected != actual:
            raise ValueMismatch(self.name, expected, actual, time)

    def close(self) -> None:
        self.reader.close()
        if self.dumper is not None:
            self.dumper.close()


class PcStreamMonitor(StreamMonitor):
    """Retired program counter channel; observed counts retired instructions."""

    channel = PC_CHANNEL

    def observe(self, pc: int, time: int) -> None:
        self._observe((pc,), time)


class WriteBackStreamMonitor(StreamMonitor):
    """Memory write-back channel."""

    channel = WRITE_BACK_CHANNEL

    def observe(self, addr: int, data: int, time: int) -> None:
        self._observe((addr, data), time)


class LoadStoreStreamMonitor(StreamMonitor):
    """Load/store access channel."""

    channel = LOAD_STORE_CHANNEL

    def observe(self, op: int, addr: int, data: int, time: int) -> None:
        self._observe((op, addr, data), time)


@dataclass
class StreamMonitors:
    """The three oracle channels of one run."""

    pc: PcStreamMonitor
    write_back: WriteBackStreamMonitor
    load_store: LoadStoreStreamMonitor

    @classmethod
    def from_options(cls, options: HarnessOptions) -> "StreamMonitors":
        """Build the channels for a run's benchmark and stream options."""

        def build(monitor_cls: type[StreamMonitor]) -> StreamMonitor:
            suffix = monitor_cls.channel.suffix
            return monitor_cls(
                golden_path=options.golden_path(suffix),
                check=options.check_streams,
                dump_path=options.dump_path(suffix),
                dump_level=options.dump_streams,
                print_events=options.print_events,
            )

        return cls(
            pc=build(PcStreamMonitor),  # type: ignore[arg-type]
            write_back=build(WriteBackStreamMonitor),  # type: ignore[arg-type]
            load_store=build(LoadStoreStreamMonitor),  # type: ignore[arg-type]
        )

    def close(self) -> None:
        for monitor in (self.pc, self.write_back, self.load_store):
            monitor.close()
