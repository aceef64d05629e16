"""
Lifecycle management for the container of a single service.
"""
import logging
from typing import Optional, Sequence
from ..MODELS.service_definition import ServiceDefinition
from ..MODELS.inspection import InspectionResult
from ..RUNNERS.command_translator import CommandTranslator, StartIntent, StopIntent, InspectIntent, format_command
from ..RUNNERS.process_runner import ContainerRunner, describe_failure
from ..exceptions import LaunchError, StopError

logger = logging.getLogger(__name__)

class ContainerManager:
    """
    Manages the container of a single service.
    """
    def __init__(self,
                 service_def: ServiceDefinition,
                 runner: ContainerRunner,
                 translator: CommandTranslator):
        """
        Initializes the container manager for a service.

        :param service_def: Definition of the service.
        :param runner: Runner for the container binary.
        :param translator: Builds the argument vectors.
        """
        self.service_def = service_def
        self.runner = runner
        self.translator = translator

    @property
    def name(self) -> str:
        return self.service_def.name

    def inspect(self) -> Optional[InspectionResult]:
        """
        Queries the runtime for the service's container.

        :return: The inspection record, or None if there is no container.
        :raises InspectionError: If the runtime could not be queried.
        """
        args = self.translator.translate(self.service_def, InspectIntent())
        return self.runner.inspect(self.name, args)

    def launch(self):
        """
        Starts the container in the background.

        :raises LaunchError: If `container run` fails.
        """
        args = self.translator.translate(self.service_def, StartIntent(detached=True))
        logger.info("%s", format_command(self.runner.binary, args))
        try:
            result = self.runner.run(args)
        except OSError as e:
            raise LaunchError(self.name, str(e)) from e
        if result.returncode != 0:
            raise LaunchError(self.name, describe_failure(result), result.returncode)
        logger.debug("[%s] %s", self.name, result.stdout.strip())

    def stop(self):
        """
        Stops the container.

        :raises StopError: If `container stop` fails.
        """
        args = self.translator.translate(self.service_def, StopIntent())
        try:
            result = self.runner.run(args)
        except OSError as e:
            raise StopError(self.name, str(e)) from e
        if result.returncode != 0:
            raise StopError(self.name, describe_failure(result), result.returncode)

    def run_foreground(self, extra_args: Sequence[str] = ()) -> int:
        """
        Runs the container attached to the terminal until it exits.

        :param extra_args: Arguments appended after the service command.
        :return: Exit code of `container run`.
        :raises LaunchError: If the container binary cannot be started.
        """
        args = self.translator.translate(self.service_def, StartIntent(detached=False, extra_args=tuple(extra_args)))
        logger.info("%s", format_command(self.runner.binary, args))
        try:
            return self.runner.run_attached(args)
        except OSError as e:
            raise LaunchError(self.name, str(e)) from e
