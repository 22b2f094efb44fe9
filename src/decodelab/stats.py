"""Throughput statistics accumulated over decode repetitions."""

import math
import statistics
from dataclasses import dataclass, field

_EPSILON = 1e-9


@dataclass
class StatsSummary:
    """Central tendency of the per-repetition elapsed times."""

    central_tendency: float
    min: float
    max: float
    variability: float
    kind: str


@dataclass
class RunStatistics:
    """Run-scoped accumulator: elapsed time, image size and output size.

    Mutated once per repetition by the strategy selector and read once at the
    end of the run.
    """

    elapsed: list[float] = field(default_factory=list)
    xsize: int = 0
    ysize: int = 0
    file_size: int = 0

    def notify_elapsed(self, elapsed_seconds: float) -> None:
        self.elapsed.append(max(elapsed_seconds, 0.0))

    def set_image_size(self, xsize: int, ysize: int) -> None:
        self.xsize = xsize
        self.ysize = ysize

    def set_file_size(self, file_size: int) -> None:
        self.file_size = file_size

    def summary(self) -> StatsSummary | None:
        """Summarize elapsed times; ``None`` if nothing was measured."""
        if not self.elapsed:
            return None

        fastest, slowest = min(self.elapsed), max(self.elapsed)
        if len(self.elapsed) == 1:
            return StatsSummary(self.elapsed[0], fastest, slowest, 0.0, "")
        if len(self.elapsed) == 2:
            return StatsSummary(fastest, fastest, slowest, 0.0, "min: ")

        geomean = statistics.geometric_mean([max(t, _EPSILON) for t in self.elapsed])
        mean = statistics.mean(self.elapsed)
        variability = statistics.stdev(self.elapsed) / mean if mean > 0 else 0.0
        return StatsSummary(geomean, fastest, slowest, variability, "geomean: ")

    @staticmethod
    def _rate(amount: float, unit: str, s: StatsSummary, with_range: bool) -> str:
        text = f"{s.kind}{amount / max(s.central_tendency, _EPSILON):.3f} {unit}/s"
        if with_range:
            # slowest repetition gives the lowest rate
            text += (
                f" [{amount / max(s.max, _EPSILON):.2f},"
                f" {amount / max(s.min, _EPSILON):.2f}]"
            )
        return text

    def report(self, worker_threads: int) -> str | None:
        """Return the final one-line throughput report."""
        s = self.summary()
        if s is None:
            return None

        with_range = len(self.elapsed) > 2
        parts = [self._rate(self.xsize * self.ysize * 1e-6, "MP", s, with_range)]
        if self.file_size:
            parts.append(self._rate(self.file_size * 1e-6, "MB", s, with_range))
        variability = ""
        if s.variability != 0.0 and not math.isnan(s.variability):
            variability = f" (var {s.variability:.2f})"

        return (
            f"{self.xsize} x {self.ysize}, {', '.join(parts)}{variability}, "
            f"{len(self.elapsed)} reps, {worker_threads} threads."
        )
