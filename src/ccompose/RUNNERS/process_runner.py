# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Execution of the `container` binary, with captured or attached output.
"""
import logging
import subprocess
from typing import List, Optional, Sequence

from pydantic import TypeAdapter, ValidationError

from ..MODELS.inspection import InspectionResult
from ..exceptions import InspectionError
from .command_translator import format_command

logger = logging.getLogger(__name__)

DEFAULT_BINARY = "container"

_inspection_list = TypeAdapter(List[InspectionResult])


def parse_inspection(service: str, output: str) -> Optional[InspectionResult]:
    """
    Decodes the JSON array printed by `container inspect`.

    Args:
        service (str): Name of the inspected service, for error messages.
        output (str): Captured stdout.

    Returns:
        Optional[InspectionResult]: The first record, or None for an empty array.

    Raises:
        InspectionError: If the output is not an array of inspection records.
    """
    try:
        records = _inspection_list.validate_json(output)
    except ValidationError as e:
        raise InspectionError(service, f"unexpected inspect output: {e.errors()[0]['msg']}") from e
    if not records:
        return None
    return records[0]


class ContainerRunner:
    """
    Runs the `container` binary.
    """
    def __init__(self, binary: str = DEFAULT_BINARY):
        """
        Initializes the runner.

        Args:
            binary (str): Name or path of the container CLI.
        """
        self.binary = binary

    def run(self, args: Sequence[str]) -> subprocess.CompletedProcess:
        """
        Runs the binary with stdout and stderr captured.

        Both pipes are drained while waiting for the process to exit, so a
        chatty child never blocks on a full pipe. Output is decoded as UTF-8
        with undecodable bytes replaced.

        Args:
            args (Sequence[str]): Arguments, without the binary name.

        Returns:
            subprocess.CompletedProcess: Result with text stdout and stderr.

        Raises:
            OSError: If the binary cannot be started.
        """
        command = [self.binary, *args]
        logger.debug("Running %s", format_command(self.binary, args))
        return subprocess.run(
            command,
            stdin=subprocess.DEVNULL,
            capture_output=True,
            encoding="utf-8",
            errors="replace",
            # Arguments come from the compose file; never hand them to a shell
            shell=False,
        )

    def run_attached(self, args: Sequence[str]) -> int:
        """
        Runs the binary attached to this process's stdin, stdout and stderr.

        Args:
            args (Sequence[str]): Arguments, without the binary name.

        Returns:
            int: Exit code of the process.

        Raises:
            OSError: If the binary cannot be started.
        """
        return subprocess.run([self.binary, *args], shell=False).returncode

    def inspect(self, service: str, args: Sequence[str]) -> Optional[InspectionResult]:
        """
        Runs an inspect command and decodes its output.

        Args:
            service (str): Name of the inspected service.
            args (Sequence[str]): Inspect arguments, without the binary name.

        Returns:
            Optional[InspectionResult]: The record, or None if the runtime knows
            no container of that name.

        Raises:
            InspectionError: If the process fails or its output is malformed.
        """
        try:
            result = self.run(args)
        except OSError as e:
            raise InspectionError(service, str(e)) from e
        if result.returncode != 0:
            raise InspectionError(service, describe_failure(result), result.returncode)
        return parse_inspection(service, result.stdout)


def describe_failure(result: subprocess.CompletedProcess) -> str:
    """
    Best human readable cause for a failed invocation.
    """
    stderr = (result.stderr or "").strip()
    if stderr:
        return stderr
    return f"exit status {result.returncode}"


