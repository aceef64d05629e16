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
Parsers for Docker Compose YAML files.
"""
import os
import logging
import yaml
from dotenv import dotenv_values
from pydantic import ValidationError
from typing import Dict, Any, List, Optional
from ..MODELS.orchestration_config import OrchestrationConfig
from ..MODELS.service_definition import ServiceDefinition
from ..UTILS.string_interpolation import EnvironmentInterpolator
from ..exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_COMPOSE_FILE = "docker-compose.yml"

class ComposeParser:
    """
    Parser for docker-compose.yml files.
    """
    def __init__(self, context: Optional[Dict[str, str]] = None):
        """
        Initializes the parser with an optional environment context for interpolation.

        :param context: A dictionary of environment variables for interpolation.
                        Defaults to the process environment, overlaid on the
                        .env file next to the compose file.
        """
        self.context = context

    def parse(self, compose_path: str = DEFAULT_COMPOSE_FILE) -> OrchestrationConfig:
        """
        Parses a compose file from a path.

        :param compose_path: Path to the compose file.
        :return: Parsed configuration.
        :raises ConfigError: If the file is missing or invalid.
        """
        try:
            with open(compose_path, 'r') as f:
                content = f.read()
        except FileNotFoundError:
            raise ConfigError(f"{compose_path} not found") from None
        except OSError as e:
            raise ConfigError(f"Cannot read {compose_path}: {e}") from e

        context = self.context
        if context is None:
            context = self._load_context(os.path.dirname(os.path.abspath(compose_path)))
        return self.parse_from_string(content, context)

    def parse_from_string(self, content: str, context: Optional[Dict[str, str]] = None) -> OrchestrationConfig:
        """
        Parses a compose file from a string.

        :param content: YAML content of the compose file.
        :param context: Interpolation context, overrides the parser's own.
        :return: Parsed configuration.
        :raises ConfigError: If the content is not a valid compose file.
        """
        if context is None:
            context = self.context if self.context is not None else dict(os.environ)

        try:
            data = yaml.safe_load(content)
        except (yaml.YAMLError, ValueError) as e:
            raise ConfigError(f"Failed to parse compose file: {e}") from e
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError("Compose file must be a mapping")

        services_spec = data.get('services') or {}
        if not isinstance(services_spec, dict):
            raise ConfigError("'services' must be a mapping of service names")

        services = {}
        for name, spec in services_spec.items():
            name = str(name)
            if not isinstance(spec, dict):
                raise ConfigError(f"Service {name} must be a mapping")
            spec = self._interpolate(spec, context)
            try:
                services[name] = self._parse_service(name, spec)
            except ValidationError as e:
                raise ConfigError(f"Invalid service {name}: {e}") from e

        logger.debug("Parsed %d services", len(services))
        return OrchestrationConfig(services=services)

    def _parse_service(self, name: str, spec: Dict[str, Any]) -> ServiceDefinition:
        """
        Parses a single service definition from a compose file.

        :param name: The name of the service.
        :param spec: The service specification dictionary.
        :return: A ServiceDefinition instance.
        """
        # Volumes
        volumes = []
        for v in self._to_list(spec.get('volumes')):
            if isinstance(v, dict):
                volumes.append(self._long_volume(name, v))
            else:
                volumes.append(str(v))

        # Ports
        ports = []
        for p in self._to_list(spec.get('ports')):
            if isinstance(p, dict):
                target = p.get('target', '')
                published = p.get('published')
                ports.append(f"{published}:{target}" if published else str(target))
            else:
                ports.append(str(p))

        # Environment
        env_spec = spec.get('environment') or []
        if isinstance(env_spec, dict):
            environment = [str(k) if v is None else f"{k}={self._scalar(v)}" for k, v in env_spec.items()]
        else:
            environment = [self._scalar(e) for e in self._to_list(env_spec)]

        # Command
        command = spec.get('command')
        if isinstance(command, list):
            command = [self._scalar(c) for c in command]
        elif command is not None:
            command = self._scalar(command)

        return ServiceDefinition(
            name=name,
            image=self._optional(spec.get('image')) or '',
            platform=self._optional(spec.get('platform')),
            working_dir=self._optional(spec.get('working_dir')),
            environment=environment,
            command=command,
            volumes=volumes,
            memory_limit=self._memory_limit(spec),
            ports=ports,
        )

    def _memory_limit(self, spec: Dict[str, Any]) -> Optional[str]:
        """
        Reads deploy.resources.limits.memory, falling back to mem_limit.
        """
        limits = spec
        for key in ('deploy', 'resources', 'limits'):
            limits = limits.get(key) if isinstance(limits, dict) else None
        if not isinstance(limits, dict):
            limits = {}
        return self._optional(limits.get('memory', spec.get('mem_limit')))

    def _long_volume(self, service: str, v: Dict[str, Any]) -> str:
        """
        Converts a long syntax volume entry into 'source:target[:ro]'.
        """
        if 'target' not in v:
            raise ConfigError(f"Volume of service {service} has no target")
        mount = f"{v['source']}:{v['target']}" if v.get('source') else str(v['target'])
        if v.get('read_only'):
            mount += ":ro"
        return mount

    def _interpolate(self, value: Any, context: Dict[str, str]) -> Any:
        """
        Interpolates every string value of a parsed YAML tree.
        """
        if isinstance(value, str):
            return EnvironmentInterpolator.interpolate(value, context)
        if isinstance(value, dict):
            return {k: self._interpolate(v, context) for k, v in value.items()}
        if isinstance(value, list):
            return [self._interpolate(v, context) for v in value]
        return value

    def _load_context(self, project_dir: str) -> Dict[str, str]:
        """
        Builds the interpolation context from the .env file and the process environment.
        The process environment wins.
        """
        context = {}
        env_file = os.path.join(project_dir, '.env')
        if os.path.isfile(env_file):
            logger.debug("Loading %s", env_file)
            context.update({k: v for k, v in dotenv_values(env_file).items() if v is not None})
        context.update(os.environ)
        return context

    def _scalar(self, val: Any) -> str:
        """
        Renders a YAML scalar the way it was most likely written.
        """
        if isinstance(val, bool):
            return 'true' if val else 'false'
        return str(val)

    def _optional(self, val: Any) -> Optional[str]:
        if val is None or val == '':
            return None
        return self._scalar(val)

    def _to_list(self, val: Any) -> List[Any]:
        """
        Helper to ensure a value is a list.

        :param val: The value to convert.
        :return: A list.
        """
        if val is None:
            return []
        if isinstance(val, (list, tuple)):
            return list(val)
        return [val]
