"""
Utilities for string interpolation using environment variables.
"""
import re
import logging
from typing import Dict

from ..exceptions import ConfigError

logger = logging.getLogger(__name__)

class EnvironmentInterpolator:
    """
    Utility for interpolating environment variables in compose files.
    Supports $VAR, ${VAR}, ${VAR:-default}, ${VAR-default}, ${VAR:+value},
    ${VAR+value}, ${VAR:?message}, ${VAR?message} and the $$ escape.
    """
    # Group 'escaped': $$
    # Group 'named': $VAR
    # Group 'braced': VAR, 'op': one of :- - :+ + :? ?, 'arg': the rest
    # Group 'invalid': a lone $ or an unterminated ${
    pattern = re.compile(
        r"""\$(?:
            (?P<escaped>\$) |
            (?P<named>[A-Za-z_][A-Za-z0-9_]*) |
            \{(?P<braced>[A-Za-z_][A-Za-z0-9_]*)(?P<op>:?[-+?])?(?P<arg>[^}]*)\} |
            (?P<invalid>)
        )""",
        re.VERBOSE,
    )

    @classmethod
    def interpolate(cls, template: str, context: Dict[str, str]) -> str:
        """
        Interpolates environment variables in the template string using the provided context.

        Unset variables without a default resolve to an empty string, with a warning.
        A lone '$' that does not start a reference is kept as is.

        :param template: The string containing $VAR or ${VAR} placeholders.
        :param context: The environment variables context.
        :return: The interpolated string.
        :raises ConfigError: If a ${VAR:?message} variable is unset.
        """
        def replace(match: re.Match) -> str:
            if match.group("escaped") is not None:
                return "$"
            if match.group("named") is not None:
                return cls._lookup(match.group("named"), context)
            if match.group("braced") is not None:
                return cls._substitute(match.group("braced"), match.group("op"), match.group("arg"), context)
            return match.group(0)

        return cls.pattern.sub(replace, template)

    @staticmethod
    def _lookup(name: str, context: Dict[str, str]) -> str:
        value = context.get(name)
        if value is None:
            logger.warning("The %s variable is not set. Defaulting to a blank string.", name)
            return ""
        return value

    @classmethod
    def _substitute(cls, name: str, op: str, arg: str, context: Dict[str, str]) -> str:
        value = context.get(name)
        if op is None:
            if arg:
                # ${VAR!} and the like
                raise ConfigError(f"Invalid interpolation format: ${{{name}{arg}}}")
            return cls._lookup(name, context)

        # With ':' an empty value counts as unset
        unset = value is None or (op.startswith(":") and value == "")
        kind = op[-1]
        if kind == "-":
            return arg if unset else value
        if kind == "+":
            return "" if unset else arg
        if unset:
            raise ConfigError(arg or f"Required variable {name} is not set")
        return value
