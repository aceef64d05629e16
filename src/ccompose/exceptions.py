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
Exceptions raised by ccompose.
"""
from typing import Optional


class ComposeError(Exception):
    """Base exception for all ccompose errors."""
    pass


class ConfigError(ComposeError):
    """The compose file is missing or cannot be decoded."""
    def __init__(self, message: str = "Compose file not found in current directory"):
        self.message = message
        super().__init__(self.message)


class ServiceError(ComposeError):
    """
    An operation on a single service failed.

    :param service: Name of the service.
    :param cause: Human readable cause, usually the tool's stderr.
    """
    action = "operate on"

    def __init__(self, service: str, cause: str, returncode: Optional[int] = None):
        self.service = service
        self.cause = cause
        self.returncode = returncode
        super().__init__(f"Failed to {self.action} service {service}: {cause}")


class InspectionError(ServiceError):
    """`container inspect` failed or produced output that could not be decoded."""
    action = "inspect"


class LaunchError(ServiceError):
    """`container run` failed."""
    action = "start"


class StopError(ServiceError):
    """`container stop` failed."""
    action = "stop"


class ServiceNotFound(ComposeError, LookupError):
    """A service requested by name is not declared in the compose file."""
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"No such service: {name}")
