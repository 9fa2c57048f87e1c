"""TCP server evaluating infix expressions in worker processes."""
from multiprocessing import Pipe, Process, cpu_count
from multiprocessing.connection import Connection
from pathlib import Path
import socket
from typing import Any, Dict, List, TextIO, Tuple

from pydantic import BaseModel, ConfigDict, Field, IPvAnyAddress

from shunting_yard.common.logger import logger
from shunting_yard.common.models import EngineConfig
from shunting_yard.service.worker import EvaluationWorker


ActiveWorker = Tuple[Process, Connection]


def format_payload(payload: Dict[str, Any]) -> str:
    """
    Render a worker payload as one output line.

    :param dict payload: Payload sent by an EvaluationWorker

    :return: ``"<expr> = <result>"`` or ``"<expr> -> ERROR: <message>"``, newline terminated
    :rtype: str
    """
    if "result" in payload:
        return f"{payload['expression']} = {payload['result']}\n"
    return f"{payload['expression']} -> ERROR: {payload['error']}\n"


class EvaluationServer(BaseModel):
    """
    TCP socket server evaluating the expressions sent by one client.

    Features:
        - One worker process per non-blank line, at most one per CPU core at a time.
        - Results are written to disk as soon as a worker finishes.
        - The whole result file is sent back to the client at the end.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    host: IPvAnyAddress = Field(default="127.0.0.1", description="Server host address")
    port: int = Field(default=9000, ge=1, le=65535, description="Server TCP port")
    output_file: Path = Field(..., description="Path to write evaluation results")
    config: EngineConfig = Field(default_factory=EngineConfig, description="Engine options given to every worker")

    def _receive_data(self, conn: socket.socket) -> List[str]:
        """
        Receive all data from the client connection and return non-blank lines.

        :param socket.socket conn: Connected client socket

        :return: Stripped expression lines
        :rtype: List[str]
        """
        chunks: List[bytes] = []
        while True:
            chunk: bytes = conn.recv(4096)
            if not chunk:
                break
            chunks.append(chunk)
        lines: List[str] = b"".join(chunks).decode().splitlines()
        return [line.strip() for line in lines if line.strip()]

    def _spawn_worker(self, expr: str, line_number: int) -> ActiveWorker:
        """
        Start an EvaluationWorker process for the given expression.

        :param str expr: Infix expression
        :param int line_number: Line number of the expression in the input

        :return: Tuple of (Process, parent end of the pipe)
        :rtype: ActiveWorker
        """
        parent_conn, child_conn = Pipe()
        worker = EvaluationWorker(conn=child_conn, expression=expr, line_number=line_number, config=self.config)
        process = Process(target=worker.run)
        process.start()
        return process, parent_conn

    def _collect_finished_workers(self, active_workers: List[ActiveWorker], f_out: TextIO) -> None:
        """
        Write the payloads of workers that have sent one and drop them from ``active_workers``.

        Payloads are read as soon as they are available: a worker blocks in ``send`` until its
        payload fits the pipe buffer, so waiting for it to exit first could hang.

        :param list active_workers: List of (Process, Connection) tuples, updated in place
        :param TextIO f_out: Open result file
        """
        # Reverse order so popping does not shift pending indexes
        for i in reversed(range(len(active_workers))):
            proc, pipe_conn = active_workers[i]
            if not pipe_conn.poll():
                continue
            payload = pipe_conn.recv()
            pipe_conn.close()
            proc.join()
            active_workers.pop(i)

            f_out.write(format_payload(payload))
            f_out.flush()

    def evaluate_lines(self, lines: List[str], f_out: TextIO) -> None:
        """
        Evaluate every line with worker processes and write results as they complete.

        :param List[str] lines: Non-blank expressions
        :param TextIO f_out: Open result file
        """
        max_workers: int = max(1, min(cpu_count(), len(lines)))
        active_workers: List[ActiveWorker] = []

        for line_number, expr in enumerate(lines, start=1):
            while len(active_workers) >= max_workers:
                self._collect_finished_workers(active_workers, f_out)
            active_workers.append(self._spawn_worker(expr, line_number))

        while active_workers:
            self._collect_finished_workers(active_workers, f_out)

    def start(self) -> None:
        """
        Serve a single client.

        Steps:
            1. Bind and listen on the configured host and port.
            2. Accept one client and read all of its expressions.
            3. Evaluate them, writing each result line to ``output_file``.
            4. Send the result file back to the client.

        :return: None
        """
        logger.info(f"🖥️ Starting server on {self.host}:{self.port}")

        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            s.bind((str(self.host), self.port))
            s.listen()
            logger.info("🖥️ Server listening")

            conn, _ = s.accept()
            with conn:
                lines: List[str] = self._receive_data(conn)
                with self.output_file.open("w", encoding="utf-8") as f_out:
                    self.evaluate_lines(lines, f_out)

                try:
                    conn.sendall(self.output_file.read_bytes())
                    logger.info("✉️ Results sent to client")
                except OSError as exc:
                    logger.error(f"🔌❌ Client disconnected before receiving results: {exc}")
