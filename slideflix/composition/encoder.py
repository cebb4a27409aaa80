"""
Encoder orchestration: run ffmpeg for a built filter graph.

One ``execute`` call is a blocking unit from the caller's point of view:

    SPAWNED -> RUNNING -> COMPLETED | FAILED | TIMED_OUT
    (spawn failure)    -> SPAWN_ERROR

ffmpeg's stderr is drained on a helper thread into a bounded buffer and only
used for failure reports. Success is decided by the exit code and by the
output file actually existing with a non-zero size.
"""

import logging
import subprocess
import threading
import time
from collections import deque
from contextlib import contextmanager, nullcontext
from pathlib import Path
from typing import IO, Iterator, List, Optional

from .exceptions import EncodeError, EncodeTimeoutError
from .filter_graph import FilterGraph, format_number
from .models import CompositionOptions, EncodeJob, EncodeOutcome, EncodePolicy, EncodeState

logger = logging.getLogger(__name__)

READER_JOIN_SECONDS = 5.0


class DiagnosticBuffer:
    """Line buffer capped in bytes; the oldest lines are evicted first."""

    def __init__(self, max_bytes: int = 65536):
        self.max_bytes = max(1, int(max_bytes))
        self._lines: deque = deque()
        self._size = 0
        self._lock = threading.Lock()
        self.evicted_bytes = 0

    def append(self, line: str) -> None:
        raw = line.encode("utf-8", errors="replace")
        if len(raw) > self.max_bytes:
            # A single oversized line keeps only its tail, cut on a character boundary
            line = raw[-self.max_bytes:].decode("utf-8", errors="ignore")
            raw = line.encode("utf-8")
        encoded = len(raw)
        with self._lock:
            self._lines.append((line, encoded))
            self._size += encoded
            while self._size > self.max_bytes and self._lines:
                _, dropped = self._lines.popleft()
                self._size -= dropped
                self.evicted_bytes += dropped

    @property
    def size(self) -> int:
        with self._lock:
            return self._size

    def lines(self) -> List[str]:
        with self._lock:
            return [line for line, _ in self._lines]

    def tail(self, count: int = 20) -> str:
        return "\n".join(self.lines()[-count:])

    def text(self) -> str:
        return "\n".join(self.lines())


class EncodeOrchestrator:
    """
    Builds and runs ffmpeg invocations with a hard timeout.

    Concurrency: encodes are unrestricted unless ``max_concurrent`` > 0, in
    which case a bounded semaphore admits at most that many at once and later
    callers block until a slot frees up.
    """

    def __init__(
        self,
        ffmpeg_binary: Optional[str] = None,
        policy: Optional[EncodePolicy] = None,
        timeout: float = 120.0,
        diagnostic_buffer_bytes: int = 65536,
        max_concurrent: int = 0,
    ):
        if ffmpeg_binary is None:
            from slideflix.media.ffmpeg_utils import find_ffmpeg
            ffmpeg_binary = find_ffmpeg()
        self.ffmpeg_binary = ffmpeg_binary
        self.policy = policy or EncodePolicy()
        self.timeout = timeout
        self.diagnostic_buffer_bytes = diagnostic_buffer_bytes
        self.max_concurrent = max(0, int(max_concurrent))
        self._slots = threading.BoundedSemaphore(self.max_concurrent) if self.max_concurrent else None

    @classmethod
    def from_options(cls, options: CompositionOptions, ffmpeg_binary: Optional[str] = None,
                     max_concurrent: Optional[int] = None) -> "EncodeOrchestrator":
        if max_concurrent is None:
            from slideflix import settings
            max_concurrent = settings.get_max_concurrent_encodes()
        return cls(
            ffmpeg_binary=ffmpeg_binary,
            policy=options.encode,
            timeout=options.encode_timeout,
            diagnostic_buffer_bytes=options.diagnostic_buffer_bytes,
            max_concurrent=max_concurrent,
        )

    def build_job(self, graph: FilterGraph, output_path: Path, timeout: Optional[float] = None) -> EncodeJob:
        """
        Assemble the argument vector: inputs, filter graph, output policy,
        explicit duration cap, destination.
        """
        policy = self.policy
        argv = [
            self.ffmpeg_binary,
            "-hide_banner",
            "-nostdin",
            "-nostats",
            "-y",
            *graph.input_args(),
            "-filter_complex", graph.serialize(),
            "-map", f"[{graph.output_label}]",
            "-c:v", policy.codec,
            "-pix_fmt", policy.pixel_format,
            "-preset", policy.preset,
            "-crf", str(policy.crf),
        ]
        if policy.faststart:
            argv += ["-movflags", "+faststart"]
        argv += [
            "-t", format_number(graph.total_duration),
            "-an",
            str(output_path),
        ]
        return EncodeJob(
            argv=argv,
            output_path=Path(output_path),
            timeout=timeout if timeout is not None else self.timeout,
            expected_duration=graph.total_duration,
        )

    def run(self, graph: FilterGraph, output_path: Path, timeout: Optional[float] = None) -> EncodeOutcome:
        """
        Encode ``graph`` into ``output_path``.

        Raises:
            EncodeError: Spawn failure, non-zero exit, or missing/empty output
            EncodeTimeoutError: The encoder ran past ``timeout`` and was killed
        """
        return self.execute(self.build_job(graph, output_path, timeout))

    @contextmanager
    def _admission(self) -> Iterator[None]:
        if self._slots is None:
            with nullcontext():
                yield
            return

        if not self._slots.acquire(blocking=False):
            logger.info(f"Encode slots busy ({self.max_concurrent} running), waiting")
            self._slots.acquire()
        try:
            yield
        finally:
            self._slots.release()

    @staticmethod
    def _drain(stream: IO[str], buffer: DiagnosticBuffer) -> None:
        for line in stream:
            line = line.rstrip()
            if line:
                buffer.append(line)

    def execute(self, job: EncodeJob) -> EncodeOutcome:
        """Run a prepared job. See :meth:`run` for the failure contract."""
        with self._admission():
            return self._execute(job)

    def _execute(self, job: EncodeJob) -> EncodeOutcome:
        buffer = DiagnosticBuffer(self.diagnostic_buffer_bytes)
        logger.info(f"Executing FFmpeg: {job.command_line}")
        started = time.monotonic()

        try:
            process = subprocess.Popen(
                job.argv,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                text=True,
                errors="replace",
            )
        except OSError as e:
            outcome = EncodeOutcome(
                state=EncodeState.SPAWN_ERROR,
                elapsed_seconds=time.monotonic() - started,
                diagnostics=str(e),
            )
            logger.error(f"   ✗ Error spawning FFmpeg: {e}")
            raise EncodeError(f"Could not start encoder: {e}", diagnostics=str(e), outcome=outcome) from e

        outcome = EncodeOutcome(state=EncodeState.SPAWNED, pid=process.pid, output_path=job.output_path)
        reader = threading.Thread(
            target=self._drain, args=(process.stderr, buffer),
            name=f"ffmpeg-stderr-{process.pid}", daemon=True,
        )

        with process:
            reader.start()
            outcome.state = EncodeState.RUNNING
            try:
                outcome.returncode = process.wait(timeout=job.timeout)
            except subprocess.TimeoutExpired:
                process.kill()
                outcome.returncode = process.wait()
                outcome.state = EncodeState.TIMED_OUT
            except BaseException:
                # Interrupted while waiting: never leave the encoder running
                process.kill()
                process.wait()
                raise
            finally:
                reader.join(READER_JOIN_SECONDS)

        outcome.elapsed_seconds = time.monotonic() - started
        outcome.diagnostics = buffer.text()

        if outcome.state is EncodeState.TIMED_OUT:
            logger.error(f"   ✗ FFmpeg timed out after {job.timeout}s (pid {outcome.pid} killed)")
            logger.error(f"   Stderr tail:\n{buffer.tail()}")
            raise EncodeTimeoutError(
                f"Encoder exceeded {job.timeout}s and was terminated",
                timeout=job.timeout,
                diagnostics=outcome.diagnostics,
                outcome=outcome,
            )

        if outcome.returncode != 0:
            outcome.state = EncodeState.FAILED
            logger.error(f"   ✗ FFmpeg error, exit code: {outcome.returncode}")
            logger.error(f"   Stderr tail:\n{buffer.tail()}")
            raise EncodeError(
                f"Encoder exited with code {outcome.returncode}",
                diagnostics=outcome.diagnostics,
                outcome=outcome,
            )

        output = job.output_path
        size = output.stat().st_size if output.is_file() else 0
        if size == 0:
            outcome.state = EncodeState.FAILED
            logger.error(f"   ✗ FFmpeg exited cleanly but produced no usable output at {output}")
            raise EncodeError(
                "Encoder reported success but the output file is missing or empty",
                diagnostics=outcome.diagnostics,
                outcome=outcome,
                details={"output_path": str(output)},
            )

        outcome.state = EncodeState.COMPLETED
        outcome.output_bytes = size
        logger.info(f"   ✓ FFmpeg completed in {outcome.elapsed_seconds:.2f}s ({size} bytes)")
        return outcome
