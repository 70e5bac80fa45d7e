"""Performance profiling for parse operations.

Records wall-clock timing and resident-memory deltas (via psutil) for each
profiled parse, and aggregates sessions into a report.
"""

import json
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import psutil

from mini_html_parser.api import MiniHTMLParser
from mini_html_parser.parsing import ParseResult
from mini_html_parser.shared import ParserConfig, get_logger


@dataclass
class PhaseTiming:
    """Timing and memory for one named phase of a profiled operation."""

    phase_name: str
    start_time: float
    end_time: float = 0.0
    memory_start: int = 0  # bytes
    memory_end: int = 0  # bytes

    @property
    def duration_ms(self) -> float:
        return (self.end_time - self.start_time) * 1000

    @property
    def memory_delta(self) -> int:
        return self.memory_end - self.memory_start


@dataclass
class ProfilingSession:
    """Container for a single profiled parse."""

    session_id: str
    start_time: float
    end_time: float = 0.0
    input_size: int = 0  # characters
    phases: List[PhaseTiming] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def total_duration_ms(self) -> float:
        return (self.end_time - self.start_time) * 1000

    @property
    def throughput_chars_per_s(self) -> float:
        duration_s = self.end_time - self.start_time
        if duration_s <= 0:
            return 0.0
        return self.input_size / duration_s

    def to_dict(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "input_size": self.input_size,
            "total_duration_ms": self.total_duration_ms,
            "throughput_chars_per_s": self.throughput_chars_per_s,
            "metadata": self.metadata,
            "phases": [
                {
                    "phase_name": phase.phase_name,
                    "duration_ms": phase.duration_ms,
                    "memory_delta": phase.memory_delta,
                }
                for phase in self.phases
            ],
        }


@dataclass
class PerformanceReport:
    """Aggregate over profiled sessions."""

    sessions: List[ProfilingSession]
    generation_time: float

    @property
    def session_count(self) -> int:
        return len(self.sessions)

    @property
    def average_duration_ms(self) -> float:
        if not self.sessions:
            return 0.0
        return sum(s.total_duration_ms for s in self.sessions) / len(self.sessions)

    @property
    def total_input_size(self) -> int:
        return sum(s.input_size for s in self.sessions)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generation_time": self.generation_time,
            "summary": {
                "session_count": self.session_count,
                "average_duration_ms": self.average_duration_ms,
                "total_input_size": self.total_input_size,
            },
            "sessions": [session.to_dict() for session in self.sessions],
        }

    def format_text(self) -> str:
        """Human-readable report, one line per session."""
        lines = [
            f"Profiled {self.session_count} parse(s), "
            f"average {self.average_duration_ms:.2f}ms",
            "-" * 60,
        ]
        for session in self.sessions:
            lines.append(
                f"{session.session_id}: {session.total_duration_ms:.2f}ms, "
                f"{session.input_size} chars, "
                f"{session.metadata.get('nodes_created', 0)} nodes"
            )
            for phase in session.phases:
                lines.append(
                    f"   {phase.phase_name}: {phase.duration_ms:.2f}ms, "
                    f"memory {phase.memory_delta:+d} bytes"
                )
        return "\n".join(lines)


class PhaseProfiler:
    """Context manager recording one phase into a session."""

    def __init__(self, profiler: "PerformanceProfiler", session: ProfilingSession,
                 phase_name: str):
        self.profiler = profiler
        self.session = session
        self.phase_name = phase_name
        self.phase: Optional[PhaseTiming] = None

    def __enter__(self) -> PhaseTiming:
        self.phase = PhaseTiming(
            phase_name=self.phase_name,
            start_time=time.time(),
            memory_start=self.profiler.memory_usage(),
        )
        return self.phase

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.phase is None:
            return
        self.phase.end_time = time.time()
        self.phase.memory_end = self.profiler.memory_usage()
        self.session.phases.append(self.phase)


class PerformanceProfiler:
    """Profiler for parse operations.

    Examples:
        >>> profiler = PerformanceProfiler()
        >>> result = profiler.profile_parse("<p>hello</p>", "sample")
        >>> profiler.generate_report().session_count
        1
    """

    def __init__(self, enable_memory_tracking: bool = True,
                 config: Optional[ParserConfig] = None):
        self.enable_memory_tracking = enable_memory_tracking
        self.parser = MiniHTMLParser(config)
        self.sessions: List[ProfilingSession] = []
        self.logger = get_logger(__name__, None, "performance_profiler")
        self._process = psutil.Process() if enable_memory_tracking else None

    def memory_usage(self) -> int:
        """Resident set size of this process in bytes, 0 when not tracking."""
        if self._process is None:
            return 0
        return self._process.memory_info().rss

    def start_session(self, session_id: str, input_size: int = 0) -> ProfilingSession:
        return ProfilingSession(
            session_id=session_id,
            start_time=time.time(),
            input_size=input_size,
        )

    def end_session(self, session: ProfilingSession) -> None:
        session.end_time = time.time()
        self.sessions.append(session)
        self.logger.debug(
            "Ended profiling session",
            extra={
                "session_id": session.session_id,
                "duration_ms": session.total_duration_ms,
            }
        )

    def profile_phase(self, session: ProfilingSession, phase_name: str) -> PhaseProfiler:
        return PhaseProfiler(self, session, phase_name)

    def profile_parse(
        self, content: Union[str, bytes], session_id: Optional[str] = None
    ) -> ParseResult:
        """Parse ``content`` while recording a session.

        The parse runs in a "parse" phase and the tree release in a
        "release" phase, so the memory delta of each is visible. The
        returned result has already been released.
        """
        session_id = session_id or f"session_{len(self.sessions) + 1}"
        session = self.start_session(session_id, input_size=len(content))

        with self.profile_phase(session, "parse"):
            result = self.parser.parse(content)

        session.metadata.update({
            "success": result.success,
            "failure_kind": result.failure_kind.value if result.failure_kind else None,
            "nodes_created": result.performance.nodes_created,
            "elements_created": result.performance.elements_created,
        })

        with self.profile_phase(session, "release"):
            result.release()

        self.end_session(session)
        return result

    def generate_report(self) -> PerformanceReport:
        return PerformanceReport(
            sessions=self.sessions.copy(),
            generation_time=time.time(),
        )

    def save_report(self, report: PerformanceReport, output_path: Path) -> None:
        output_path.write_text(json.dumps(report.to_dict(), indent=2))
        self.logger.info(
            "Saved performance report",
            extra={
                "output_path": str(output_path),
                "session_count": report.session_count,
            }
        )

    def clear_sessions(self) -> None:
        self.sessions.clear()
