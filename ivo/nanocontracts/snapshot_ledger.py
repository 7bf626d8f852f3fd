# Copyright 2025 Hathor Labs
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#    http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Append-only history of values keyed by a monotonic counter.

Each subject (an account, or the total supply) owns an ordered sequence of
`(counter, value)` records. The counter is the block height at write time,
so several writes in the same block collapse into a single record and the
sequence stays strictly increasing.
"""

from bisect import bisect_right
from typing import Iterator, NamedTuple

from ivo.nanocontracts.exception import FutureQuery, InvariantViolation


class Snapshot(NamedTuple):
    counter: int
    value: int


class SnapshotLedger:
    """Per-subject snapshot history with "value at or before counter" lookups."""

    def __init__(self) -> None:
        self._counters: dict[bytes, list[int]] = {}
        self._values: dict[bytes, list[int]] = {}

    def write_snapshot(self, subject_id: bytes, counter: int, value: int) -> None:
        """Record `value` for `subject_id` at `counter`.

        A write at the same counter as the last record overwrites it. A write
        at a lower counter raises `InvariantViolation`.
        """
        if value < 0:
            raise InvariantViolation(f'negative snapshot value {value}')
        counters = self._counters.setdefault(subject_id, [])
        values = self._values.setdefault(subject_id, [])
        if counters:
            last = counters[-1]
            if counter < last:
                raise InvariantViolation(f'snapshot counter {counter} is lower than {last}')
            if counter == last:
                values[-1] = value
                return
        counters.append(counter)
        values.append(value)

    def value_at(self, subject_id: bytes, counter: int, current_counter: int) -> int:
        """Return the value of the latest record with a counter <= `counter`, or 0.

        `current_counter` is the counter of the environment right now; asking
        for a later one raises `FutureQuery` since that value can still change.
        """
        if counter > current_counter:
            raise FutureQuery(f'counter {counter} is in the future (current is {current_counter})')
        counters = self._counters.get(subject_id)
        if not counters:
            return 0
        position = bisect_right(counters, counter)
        if position == 0:
            return 0
        return self._values[subject_id][position - 1]

    def latest(self, subject_id: bytes) -> int:
        values = self._values.get(subject_id)
        return values[-1] if values else 0

    def history(self, subject_id: bytes) -> list[Snapshot]:
        counters = self._counters.get(subject_id, [])
        values = self._values.get(subject_id, [])
        return [Snapshot(counter, value) for counter, value in zip(counters, values)]

    def subjects(self) -> Iterator[bytes]:
        return iter(self._counters)

    def __len__(self) -> int:
        return len(self._counters)
