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
Orchestration of start, stop, status and run across all declared services.
"""
import logging
from typing import Dict, List, Sequence
from ..MODELS.orchestration_config import OrchestrationConfig
from ..MODELS.batch_outcome import BatchOutcome, ServiceOutcome, ServiceState
from ..RUNNERS.command_translator import CommandTranslator
from ..RUNNERS.process_runner import ContainerRunner
from ..exceptions import InspectionError, LaunchError
from .container_manager import ContainerManager

logger = logging.getLogger(__name__)

class ServiceOrchestrator:
    """
    Orchestrates the containers of every service in a compose file.

    Services are handled one at a time, in declaration order.
    """
    def __init__(self,
                 config: OrchestrationConfig,
                 runner: ContainerRunner,
                 translator: CommandTranslator):
        """
        Initializes the orchestrator.

        :param config: Configuration for all services.
        :param runner: Runner for the container binary.
        :param translator: Builds the argument vectors.
        """
        self.config = config
        self.translator = translator
        self.managers: Dict[str, ContainerManager] = {}

        for name, svc_def in config.ordered_services():
            self.managers[name] = ContainerManager(svc_def, runner, translator)

    def start(self) -> BatchOutcome:
        """
        Starts every service that is not already running.

        A failure is recorded and the remaining services are still started.

        :return: Outcome per service; check `failed` once the batch is done.
        """
        batch = BatchOutcome()
        for name, manager in self.managers.items():
            warnings = self._unsupported_warnings(manager)
            try:
                record = manager.inspect()
            except InspectionError as e:
                logger.debug("Inspecting %s failed, starting it: %s", name, e.cause)
                record = None

            if record is not None and record.is_running:
                logger.info("Service %s is already running", name)
                batch.add(ServiceOutcome(name=name, state=ServiceState.ALREADY_RUNNING, warnings=warnings))
                continue

            logger.info("Starting service %s", name)
            try:
                manager.launch()
            except LaunchError as e:
                logger.error("ERROR: %s", e)
                batch.add(ServiceOutcome(name=name, state=ServiceState.FAILED, detail=e.cause, warnings=warnings))
                continue
            batch.add(ServiceOutcome(name=name, state=ServiceState.STARTED, warnings=warnings))
        return batch

    def status(self) -> BatchOutcome:
        """
        Reports the runtime status of every service.

        Inspection failures are reported per service and never fail the batch.
        """
        batch = BatchOutcome()
        for name, manager in self.managers.items():
            try:
                record = manager.inspect()
            except InspectionError as e:
                logger.info("Service %s: %s", name, e.cause)
                batch.add(ServiceOutcome(name=name, state=ServiceState.UNKNOWN, detail=e.cause))
                continue
            if record is None:
                logger.info("Service %s: not found", name)
                batch.add(ServiceOutcome(name=name, state=ServiceState.NOT_FOUND))
            else:
                logger.info("Service %s: %s", name, record.status)
                batch.add(ServiceOutcome(name=name, state=ServiceState.REPORTED, detail=record.status))
        return batch

    def stop(self) -> BatchOutcome:
        """
        Stops every service.

        Unlike start, the first failure aborts the remaining stops.

        :raises StopError: If a service could not be stopped.
        """
        batch = BatchOutcome()
        for name, manager in self.managers.items():
            logger.info("Stopping service %s", name)
            manager.stop()
            batch.add(ServiceOutcome(name=name, state=ServiceState.STOPPED))
        return batch

    def run(self, name: str, extra_args: Sequence[str] = ()) -> int:
        """
        Runs one service in the foreground.

        :param name: The service to run.
        :param extra_args: Arguments appended to the service command.
        :return: Exit code of the container.
        :raises ServiceNotFound: If no service has that name.
        :raises LaunchError: If the container binary cannot be started.
        """
        self.config.get(name)
        manager = self.managers[name]
        self._unsupported_warnings(manager)
        logger.info("Running service %s", name)
        exit_code = manager.run_foreground(extra_args)
        logger.info("Service %s exited with status %d", name, exit_code)
        return exit_code

    def _unsupported_warnings(self, manager: ContainerManager) -> List[str]:
        """
        Logs and returns a warning for each service field that is not applied.
        """
        warnings = []
        for field in self.translator.unsupported_fields(manager.service_def):
            message = f"Service {manager.name}: '{field}' is not supported by the container CLI and is ignored"
            logger.warning(message)
            warnings.append(message)
        return warnings
