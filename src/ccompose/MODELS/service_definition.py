"""
Models for defining services, including the normalization rules applied before
a service is translated into `container` arguments.
"""
import os
from typing import List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field

LINUX_PLATFORM_PREFIX = "linux/"
RELATIVE_PREFIX = "./"


def normalize_volume(volume: str, host_cwd: str) -> str:
    """
    Makes the host side of a mount spec absolute.

    The host side is everything before the first ':' (or the whole entry for a
    bare path). A leading './' is removed once, then a relative host path is
    joined onto host_cwd. The container side and mode suffix are untouched.

    :param volume: Mount spec such as './data:/data:ro' or '/srv/logs'.
    :param host_cwd: Directory relative host paths are resolved against.
    :return: The mount spec with an absolute host path.
    """
    host, sep, rest = volume.partition(":")
    if host.startswith(RELATIVE_PREFIX):
        host = host[len(RELATIVE_PREFIX):]
    if not os.path.isabs(host):
        host = os.path.join(host_cwd, host)
    return host + sep + rest


class ServiceDefinition(BaseModel):
    """
    The definition of a single service, as declared in a compose file.
    """
    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    image: str = Field(min_length=1)
    platform: Optional[str] = None
    working_dir: Optional[str] = None

    # KEY=VALUE entries, passed through as written
    environment: List[str] = []
    # Either a shell-style string or an explicit token list
    command: Union[str, List[str], None] = None
    volumes: List[str] = []

    memory_limit: Optional[str] = None

    # Accepted but not translated, see untranslated_fields()
    ports: List[str] = []

    def normalized_command(self) -> List[str]:
        """
        Returns the command as a token list.

        A string command is split on whitespace. Quoting is not supported, so
        an argument containing spaces has to be written in the list form.
        """
        if not self.command:
            return []
        if isinstance(self.command, str):
            return self.command.split()
        return list(self.command)

    def normalized_volumes(self, host_cwd: str) -> List[str]:
        """
        Returns the volumes with absolute host paths.

        :param host_cwd: Directory relative host paths are resolved against.
        """
        return [normalize_volume(v, host_cwd) for v in self.volumes]

    def normalized_arch(self) -> Optional[str]:
        """
        Returns the architecture part of the platform, or None if unset.

        Only the 'linux/' prefix is understood; anything else is returned as is.
        """
        if not self.platform:
            return None
        if self.platform.startswith(LINUX_PLATFORM_PREFIX):
            return self.platform[len(LINUX_PLATFORM_PREFIX):]
        return self.platform

    def untranslated_fields(self) -> List[str]:
        """
        Names of populated fields that have no `container run` equivalent.
        """
        fields = []
        if self.ports:
            fields.append("ports")
        return fields
