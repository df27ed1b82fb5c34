"""Test helper modules.

- node_fakes: in-memory NodeCreationIO, clock, ID generator and editor fakes
"""

from .node_fakes import FakeNodeIO, FixedIDGenerator, RecordingEditor, SequenceClock

__all__ = [
    'FakeNodeIO',
    'FixedIDGenerator',
    'RecordingEditor',
    'SequenceClock',
]
