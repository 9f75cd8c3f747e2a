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

"""Exceptions raised by the harness.

Fatal-immediate errors (ConfigurationError, MissingReferenceFile) propagate to
the caller. Stream divergences are caught by the simulation context at the
callback boundary and turned into a drain request.
"""

from pathlib import Path


class HarnessError(Exception):
    """Base class for all harness errors."""


class ConfigurationError(HarnessError):
    """Invalid option or broken encoding contract."""


class MissingReferenceFile(HarnessError):
    """A golden stream file required for checking does not exist."""

    def __init__(self, channel: str, path: Path) -> None:
        self.channel = channel
        self.path = path
        super().__init__(f"Failed to open {channel} golden file: {path}")


class StreamDivergence(HarnessError):
    """Live stream diverged from its golden reference."""

    def __init__(self, channel: str, time: int, message: str) -> None:
        self.channel = channel
        self.time = time
        super().__init__(message)


class StreamExhausted(StreamDivergence):
    """More live events than golden records."""

    def __init__(self, channel: str, actual: dict[str, int], time: int) -> None:
        self.actual = actual
        fields = " ".join(f"{name}=0x{value:x}" for name, value in actual.items())
        message = (
            f"Ran out of expected {channel}.\n"
            f"!! More {channel} events are executed than expected\n"
            f"!! Additional {fields}"
        )
        super().__init__(channel, time, message)


class ValueMismatch(StreamDivergence):
    """A live event differs from the golden record at the same position."""

    def __init__(
        self,
        channel: str,
        expected: dict[str, int],
        actual: dict[str, int],
        time: int,
    ) -> None:
        self.expected = expected
        self.actual = actual
        if len(actual) == 1:
            ((name, value),) = actual.items()
            message = (
                f"[{time}] expected_{name}=0x{expected[name]:x} "
                f"mismatches {name}=0x{value:x}"
            )
        else:
            exp = " ".join(f"{k}=0x{v:x}" for k, v in expected.items())
            act = " ".join(f"{k}=0x{v:x}" for k, v in actual.items())
            message = (
                f"[{time}] expected {channel} mismatches\n"
                f"!! [{time}] expected {exp}\n"
                f"!! [{time}] actual   {act}"
            )
        super().__init__(channel, time, message)
