"""Evaluate a file of arithmetic expressions using worker processes."""
from multiprocessing import Pipe, Process, cpu_count
from multiprocessing.connection import Connection, wait
from pathlib import Path
from typing import List, NamedTuple, Optional, TextIO

from pydantic import BaseModel, ConfigDict, Field, FilePath

from keypad_calculator.batch.reader import load_expressions
from keypad_calculator.batch.worker import WorkerProcess
from keypad_calculator.common.logger import logger
from keypad_calculator.common.operations import OperationResult

WORKER_CRASHED = "worker_crashed"


class ActiveWorker(NamedTuple):
    process: Process
    conn: Connection
    line_number: int
    expression: str


class BatchEvaluator(BaseModel):
    """
    Evaluate every expression of an input file and write one result line per expression.

    Features:
        - Spawns one worker process per expression.
        - Writes results immediately to disk as soon as a worker finishes.
        - Ensures each worker is joined immediately after finishing.
        - Keeps at most ``max_workers`` workers alive at once.
    """

    model_config = ConfigDict(frozen=True)

    input_file: FilePath = Field(..., description="Text file or archive containing one expression per line")
    output_file: Path = Field(..., description="Path to write computation results")
    max_workers: Optional[int] = Field(default=None, ge=1, description="Worker limit, CPU count when unset")

    def _spawn_worker(self, expr: str, line_number: int) -> ActiveWorker:
        """
        Spawn a WorkerProcess for the given expression.

        :param str expr: Arithmetic expression
        :param int line_number: Line number of expression in input

        :return: Running process with the parent end of its pipe
        :rtype: ActiveWorker
        """
        parent_conn, child_conn = Pipe(duplex=False)
        worker = WorkerProcess(conn=child_conn, expression=expr, line_number=line_number)
        process = Process(target=worker.run)
        process.start()
        # Only the child may hold the sending end, so a dead worker shows up as EOF
        child_conn.close()
        return ActiveWorker(process, parent_conn, line_number, expr)

    def _receive_result(self, worker: ActiveWorker) -> OperationResult:
        """Read the worker payload, or build an error record if it exited without one."""
        try:
            payload = worker.conn.recv()
        except EOFError:
            logger.error(f"👷💥 Worker on line {worker.line_number} exited without a result")
            return OperationResult(
                line=worker.line_number,
                expression=worker.expression,
                error="Worker exited without a result",
                error_kind=WORKER_CRASHED,
            )
        return OperationResult.model_validate(payload)

    def _collect_finished_workers(
        self,
        active_workers: List[ActiveWorker],
        f_out: TextIO,
        results: List[OperationResult],
    ) -> None:
        """
        Block until at least one worker has reported, then collect every finished worker.

        Finished workers are removed from the active_workers list, and their
        results are written to the output file and appended to ``results``.

        :param list active_workers: Workers still running
        :param TextIO f_out: Open file handle for writing results
        :param list results: Collected results
        """
        ready = wait([worker.conn for worker in active_workers])

        # Iterate in reverse to safely remove finished workers while iterating
        for i in reversed(range(len(active_workers))):
            worker = active_workers[i]
            if worker.conn not in ready:
                continue

            outcome = self._receive_result(worker)
            worker.conn.close()
            worker.process.join()
            active_workers.pop(i)

            # Write output immediately
            f_out.write(outcome.to_line() + "\n")
            f_out.flush()
            results.append(outcome)

    def run(self) -> List[OperationResult]:
        """
        Evaluate all expressions of the input file.

        Steps:
            1. Load expressions from the text file or archive.
            2. Spawn worker processes for each expression, respecting the worker limit.
            3. Write results to the output file as soon as each worker finishes.

        :return: Results ordered by line number
        :rtype: List[OperationResult]
        """
        expressions: List[str] = load_expressions(self.input_file)
        results: List[OperationResult] = []

        logger.info(f"🗂️ Evaluating {len(expressions)} expressions from {self.input_file}")

        with self.output_file.open("w", encoding="utf-8") as f_out:
            # Limit number of active workers to CPU cores or number of expressions
            max_workers: int = max(1, min(self.max_workers or cpu_count(), len(expressions)))
            active_workers: List[ActiveWorker] = []

            for line_number, expr in enumerate(expressions, start=1):
                # Wait until a worker slot is available
                while len(active_workers) >= max_workers:
                    self._collect_finished_workers(active_workers, f_out, results)

                active_workers.append(self._spawn_worker(expr, line_number))

            # Collect remaining active workers
            while active_workers:
                self._collect_finished_workers(active_workers, f_out, results)

        failed = sum(1 for outcome in results if not outcome.ok)
        logger.info(f"🗂️✅ Results written to {self.output_file} ({failed} failed)")
        return sorted(results, key=lambda outcome: outcome.line)
