from types import SimpleNamespace

import pytest

from pynes.utils.trace import TraceRecorder


def _state(**kwargs):
    defaults = {"pc": 0x8000, "a": 0x00, "x": 0x00, "y": 0x00, "sp": 0xFD, "status": 0x24}
    defaults.update(kwargs)
    return SimpleNamespace(**defaults)


def test_trace_recorder_overwrites_old_entries():
    recorder = TraceRecorder(capacity=2)

    recorder.record_step(_state(pc=0x8000, a=0x11), 0xA9, 2, mnemonic="LDA")
    recorder.record_step(_state(pc=0x8002, x=0x22), 0xAA, 2, mnemonic="TAX")
    recorder.record_step(_state(pc=0x8003, y=0x33), 0xA8, 2, mnemonic="TAY", note="nmi")

    lines = list(recorder.format_entries())
    assert len(recorder) == 2
    assert len(lines) == 2
    assert "pc=8002" in lines[0]
    assert "TAX" in lines[0]
    assert "pc=8003" in lines[1]
    assert "Y=33" in lines[1]
    assert lines[1].endswith("note=nmi")


def test_trace_recorder_handles_missing_opcode():
    recorder = TraceRecorder(1)
    recorder.record_step(_state(), None, 0)

    lines = list(recorder.format_entries())
    assert len(lines) == 1
    assert "opcode=--" in lines[0]
    assert lines[0].endswith("note=-")


def test_entries_limit_and_last_entry():
    recorder = TraceRecorder(4)
    for offset in range(3):
        recorder.record_step(_state(pc=0x8000 + offset), 0xEA, 2, mnemonic="NOP")

    assert [entry.pc for entry in recorder.entries(2)] == [0x8001, 0x8002]
    assert recorder.last_entry().pc == 0x8002

    recorder.clear()
    assert recorder.last_entry() is None
    assert list(recorder.entries()) == []


def test_capacity_must_be_positive():
    assert TraceRecorder(3).capacity == 3
    with pytest.raises(ValueError):
        TraceRecorder(0)
