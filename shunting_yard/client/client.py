"""TCP client sending expression files to the evaluation server."""
from pathlib import Path
import socket
import tarfile
import tempfile
import zipfile

import py7zr
from pydantic import BaseModel, ConfigDict, Field, FilePath, IPvAnyAddress


def _first_txt(names: list[str], archive_kind: str) -> str:
    """Return the first ``.txt`` member name, or fail."""
    txt_files = [name for name in names if name.endswith(".txt")]
    if not txt_files:
        raise ValueError(f"📄❌ No .txt file found in {archive_kind} archive")
    return txt_files[0]


def read_expressions(input_file: Path) -> str:
    """
    Read expressions from a plain text file or from the first ``.txt`` file of an archive.

    Supported archives: ``.zip``, ``.tar.xz``, ``.7z``.

    :param Path input_file: Text file or archive

    :return: File content, one expression per line
    :rtype: str
    :raises ValueError: If the archive format is unsupported or holds no .txt file
    """
    if input_file.suffix == ".txt":
        return input_file.read_text()

    with tempfile.TemporaryDirectory() as tmpdir:
        tmpdir_path = Path(tmpdir)

        if input_file.suffix == ".zip":
            with zipfile.ZipFile(input_file, "r") as zf:
                member = _first_txt(zf.namelist(), "zip")
                zf.extract(member, path=tmpdir_path)

        elif input_file.suffixes[-2:] == [".tar", ".xz"]:
            with tarfile.open(input_file, "r:xz") as tf:
                member = _first_txt(tf.getnames(), "tar.xz")
                tf.extract(member, path=tmpdir_path, filter="data")

        elif input_file.suffix == ".7z":
            with py7zr.SevenZipFile(input_file, mode="r") as archive:
                member = _first_txt(archive.getnames(), "7z")
                archive.extract(path=tmpdir_path, targets=[member])

        else:
            raise ValueError(f"📄❌ Unsupported archive format: {input_file.suffix}")

        return (tmpdir_path / member).read_text()


class EvaluationClient(BaseModel):
    """
    TCP client sending infix expressions to the server and saving the evaluated results.

    The client:
    - reads expressions from a plain text file or an archive
    - sends them over a TCP socket and half-closes the connection
    - streams the server reply into an output file
    """

    # The target server must not change during a transfer
    model_config = ConfigDict(frozen=True)

    host: IPvAnyAddress = Field(default="127.0.0.1", description="Server host address")
    port: int = Field(default=9000, ge=1, le=65535, description="Server TCP port")

    def send_file(self, input_file: FilePath, output_file: Path) -> None:
        """
        Send an expression file to the server and write the results to ``output_file``.

        :param FilePath input_file: Text file or archive of expressions
        :param Path output_file: Destination of the results

        :return: None
        :raises ValueError: If the archive format is unsupported or holds no .txt file
        """
        content = read_expressions(input_file)

        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            s.connect((str(self.host), self.port))
            s.sendall(content.encode())
            # No more expressions, the server starts evaluating on EOF
            s.shutdown(socket.SHUT_WR)

            with output_file.open("w", encoding="utf-8") as f_out:
                while True:
                    chunk = s.recv(4096)
                    if not chunk:
                        break
                    f_out.write(chunk.decode())
                    # Keep partial results if interrupted
                    f_out.flush()
