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

"""Adapters between a cocotb DUT handle and the harness.

DUT Adapter
===========

In a Verilator binding the hardware model calls the EventSink itself from
inside eval(). Under cocotb the RTL cannot call Python, so the events are
exposed as valid/data output ports and sampled after every rising clock
edge instead:

    Harness.begin_half_cycle()     clk/rst_n written through CocotbModelAdapter
    await Timer(TIME_QUANTUM)      the simulator evaluates the RTL
    EventPortSampler.sample()      valid ports -> SimulationContext callbacks
    Harness.end_half_cycle()       time advances, stop requests are honored

Port names come from EventPortNames. Ports missing from the DUT are skipped,
so a core that does not expose e.g. a BTB port still runs.
"""

from typing import Any

import cocotb

from mips_verif.config import EventPortNames
from mips_verif.encoders.stage_events import Stage, unpack_stage_words
from mips_verif.models.interfaces import EventSink


def _get_signal(dut: Any, path: str) -> Any | None:
    """Get a nested signal by dotted path, or None if not found."""
    obj = dut
    for part in path.split("."):
        if not hasattr(obj, part):
            return None
        obj = getattr(obj, part)
    return obj


def _read_int(signal: Any) -> int | None:
    """Read a signal as int, return None if absent or not resolvable."""
    if signal is None:
        return None
    value = signal.value
    if value.is_resolvable:
        return int(value)
    return None


def _is_set(signal: Any) -> bool:
    return bool(_read_int(signal))


class CocotbModelAdapter:
    """Present a cocotb DUT handle as a HardwareModel.

    Writing clk or rst_n drives the DUT input. eval() does nothing: the
    simulator evaluates the design while the test coroutine awaits.
    """

    def __init__(self, dut: Any, ports: EventPortNames | None = None) -> None:
        self.dut = dut
        self.ports = ports or EventPortNames()
        self._clk = _get_signal(dut, self.ports.clock)
        self._rst_n = _get_signal(dut, self.ports.reset_n)
        self._done = _get_signal(dut, self.ports.done)
        if self._clk is None or self._rst_n is None:
            raise RuntimeError(
                f"DUT has no clock/reset ports {self.ports.clock!r}/{self.ports.reset_n!r}"
            )
        if self._done is None:
            cocotb.log.warning(f"DUT has no {self.ports.done!r} port; run ends on stop only")
        self._clk_value = 0
        self._rst_n_value = 0

    @property
    def clk(self) -> int:
        return self._clk_value

    @clk.setter
    def clk(self, value: int) -> None:
        self._clk_value = value
        self._clk.value = value

    @property
    def rst_n(self) -> int:
        return self._rst_n_value

    @rst_n.setter
    def rst_n(self, value: int) -> None:
        self._rst_n_value = value
        self._rst_n.value = value

    @property
    def done(self) -> bool:
        return _is_set(self._done)

    def eval(self) -> None:
        pass

    def final(self) -> None:
        pass


class NullMemoryService:
    """MemoryService for testbenches whose memories are part of the RTL."""

    def drive_reset(self) -> None:
        pass

    def consume(self, time: int) -> None:
        pass

    def drive(self, time: int) -> None:
        pass

    def process(self, time: int) -> None:
        pass


class EventPortSampler:
    """Read the DUT's event ports and forward them to an EventSink."""

    def __init__(self, dut: Any, sink: EventSink, ports: EventPortNames | None = None) -> None:
        """Resolve every event port once.

        Args:
            dut: cocotb DUT handle
            sink: Receiver of the sampled events (the SimulationContext)
            ports: Port naming, defaults to EventPortNames()
        """
        self.dut = dut
        self.sink = sink
        self.ports = ports or EventPortNames()
        p = self.ports

        self.stage_ports: list[tuple[Stage, Any, Any]] = []
        for stage in Stage:
            suffix = stage.name.lower()
            valid = _get_signal(dut, f"{p.stage_valid_prefix}{suffix}")
            data = _get_signal(dut, f"{p.stage_data_prefix}{suffix}")
            if valid is not None and data is not None:
                self.stage_ports.append((stage, valid, data))

        self.pc = (_get_signal(dut, p.pc_valid), _get_signal(dut, p.pc))
        self.wb = (
            _get_signal(dut, p.wb_valid),
            _get_signal(dut, p.wb_addr),
            _get_signal(dut, p.wb_data),
        )
        self.ls = (
            _get_signal(dut, p.ls_valid),
            _get_signal(dut, p.ls_op),
            _get_signal(dut, p.ls_addr),
            _get_signal(dut, p.ls_data),
        )
        self.bp = (
            _get_signal(dut, p.bp_valid),
            _get_signal(dut, p.bp_predicted),
            _get_signal(dut, p.bp_actual),
        )
        self.btb = (_get_signal(dut, p.btb_valid), _get_signal(dut, p.btb_hit))
        self.stats_pulses = [
            (_get_signal(dut, port), label) for port, label in p.stats_pulses.items()
        ]

        missing = [
            name
            for name, handles in (
                ("pc", self.pc),
                ("wb", self.wb),
                ("ls", self.ls),
                ("bp", self.bp),
                ("btb", self.btb),
            )
            if any(h is None for h in handles)
        ]
        if missing:
            cocotb.log.info(f"EventPortSampler: channels not exposed by DUT: {missing}")
        cocotb.log.info(f"EventPortSampler: sampling {len(self.stage_ports)} stage ports")

    def sample(self) -> None:
        """Dispatch every event whose valid port is set."""
        for stage, valid, data in self.stage_ports:
            if _is_set(valid):
                words = unpack_stage_words(_read_int(data) or 0)
                self.sink.stage_event(int(stage), *words)

        if self._channel_valid(self.pc):
            self.sink.pc_event(self._field(self.pc[1]))
        if self._channel_valid(self.wb):
            self.sink.wb_event(self._field(self.wb[1]), self._field(self.wb[2]))
        if self._channel_valid(self.ls):
            self.sink.ls_event(
                self._field(self.ls[1]), self._field(self.ls[2]), self._field(self.ls[3])
            )
        if self._channel_valid(self.bp):
            self.sink.predictor_event(self._field(self.bp[1]), self._field(self.bp[2]))
        if self._channel_valid(self.btb):
            self.sink.btb_event(self._field(self.btb[1]))

        for signal, label in self.stats_pulses:
            if _is_set(signal):
                self.sink.stats_event(label)

    @staticmethod
    def _channel_valid(handles: tuple[Any, ...]) -> bool:
        return all(h is not None for h in handles) and _is_set(handles[0])

    @staticmethod
    def _field(signal: Any) -> int:
        # X/Z on a valid channel is reported as 0
        return _read_int(signal) or 0
