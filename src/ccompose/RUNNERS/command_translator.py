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
Translation of service definitions into `container` command-line arguments.

The translator only builds argument vectors; it never runs anything.
The vectors exclude the binary name itself.

A start vector looks like::

    run --name web --rm --dns-domain test [--detach] [--arch arm64]
        [--workdir /app] [--memory 512m] [--env K=V ...] [--volume /h:/c ...]
        <image> [command ...] [extra args ...]
"""
import shlex
from dataclasses import dataclass
from typing import List, Sequence, Tuple, Union

from ..MODELS.service_definition import ServiceDefinition

DNS_DOMAIN = "test"


@dataclass(frozen=True)
class StartIntent:
    """Start a container. extra_args are appended after the command."""

    detached: bool = True
    extra_args: Tuple[str, ...] = ()


@dataclass(frozen=True)
class StopIntent:
    """Stop a container."""


@dataclass(frozen=True)
class InspectIntent:
    """Inspect a container."""


Intent = Union[StartIntent, StopIntent, InspectIntent]


class CommandTranslator:
    """
    Builds `container` argument vectors for a service.
    """

    # ServiceDefinition fields that have no flag
    UNSUPPORTED_FIELDS = ("ports",)

    def __init__(self, host_cwd: str):
        """
        Initializes the translator.

        Args:
            host_cwd: Directory relative volume paths are resolved against.
        """
        self.host_cwd = host_cwd

    def translate(self, service: ServiceDefinition, intent: Intent) -> List[str]:
        """
        Builds the argument vector for an intent.

        Args:
            service: The service to act on.
            intent: What to do with it.

        Returns:
            List[str]: Arguments for the `container` binary.
        """
        if isinstance(intent, StartIntent):
            return self.start_args(service, detached=intent.detached, extra_args=intent.extra_args)
        if isinstance(intent, StopIntent):
            return ["stop", service.name]
        if isinstance(intent, InspectIntent):
            return ["inspect", service.name]
        raise TypeError(f"Unknown intent: {intent!r}")

    def start_args(self,
                   service: ServiceDefinition,
                   detached: bool = True,
                   extra_args: Sequence[str] = ()) -> List[str]:
        """
        Builds a `container run` argument vector.

        Flags come in a fixed order, followed by the image, the service command
        and finally extra_args.
        """
        args = ["run", "--name", service.name, "--rm", "--dns-domain", DNS_DOMAIN]
        if detached:
            args.append("--detach")

        arch = service.normalized_arch()
        if arch:
            args.extend(["--arch", arch])
        if service.working_dir:
            args.extend(["--workdir", service.working_dir])
        if service.memory_limit:
            args.extend(["--memory", service.memory_limit])

        for env in service.environment:
            args.extend(["--env", env])
        for volume in service.normalized_volumes(self.host_cwd):
            args.extend(["--volume", volume])

        args.append(service.image)
        args.extend(service.normalized_command())
        args.extend(extra_args)
        return args

    def unsupported_fields(self, service: ServiceDefinition) -> List[str]:
        """
        Populated fields of the service that the start vector cannot express.
        """
        return [f for f in service.untranslated_fields() if f in self.UNSUPPORTED_FIELDS]


def format_command(binary: str, args: Sequence[str]) -> str:
    """
    Renders a full command line for log output.
    """
    return shlex.join([binary, *args])
