from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

from ...attendance.model import AttendanceRecord
from ...core.constants import MONEY_QUANTUM
from ...core.enums import RecordType
from ..model import WorkSession, WorkStats
from .base import PayrollCalculator


def round_2(value: Decimal) -> Decimal:
    return value.quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


class ForwardPairingCalculator(PayrollCalculator):
    """Each arrival takes the first unused departure after it.

    The departure does not have to be the next record. An arrival with no
    departure left contributes nothing and departures with no arrival are
    skipped, so edited/deleted histories never raise.
    """

    def pair(self, records: Sequence[AttendanceRecord]) -> list[WorkSession]:
        used: set[int] = set()
        sessions: list[WorkSession] = []

        for i, record in enumerate(records):
            if record.type != RecordType.ARRIVAL:
                continue

            departure = None
            for j in range(i + 1, len(records)):
                if records[j].type == RecordType.DEPARTURE and j not in used:
                    used.add(j)
                    departure = records[j]
                    break

            sessions.append(WorkSession(arrival=record, departure=departure))

        return sessions

    def compute(self, records: Sequence[AttendanceRecord], rate: Decimal) -> WorkStats:
        if not records:
            return WorkStats(hours=round_2(Decimal("0")), payment=round_2(Decimal("0")))

        total_seconds = sum(s.seconds for s in self.pair(records))
        hours = round_2(Decimal(str(total_seconds)) / Decimal(3600))
        payment = round_2(hours * Decimal(rate))
        return WorkStats(hours=hours, payment=payment)
