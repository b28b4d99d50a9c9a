"""Assembly of the variable context handed to the renderer."""
from pathlib import Path
from typing import Any, Dict, Iterable, List, Sequence, Union

import yaml

from tgscaffold.core.errors import VarParseError
from tgscaffold.core.logger import get_logger

logger = get_logger(__name__)

# Keys the default template reads; scaffolding metadata always wins over user input
PARSED_INPUTS_KEY = "parsedInputs"
MODULE_URL_KEY = "moduleUrl"
RESERVED_KEYS = (PARSED_INPUTS_KEY, MODULE_URL_KEY)


def parse_inline_vars(assignments: Iterable[str]) -> Dict[str, Any]:
    """Parse NAME=VALUE assignments. Later assignments win.

    VALUE is read as YAML, so `replicas=3` yields an int and `zones=[a, b]` a
    list. An empty VALUE is the empty string.

    Raises:
        VarParseError: If an assignment has no '=', an empty name, or a value that is not valid YAML
    """
    parsed: Dict[str, Any] = {}
    for assignment in assignments:
        name, sep, value = assignment.partition("=")
        name = name.strip()
        if not sep or not name:
            raise VarParseError(f"Invalid variable assignment '{assignment}', expected NAME=VALUE")
        parsed[name] = _parse_value(name, value)
    return parsed


def _parse_value(name: str, raw: str) -> Any:
    if not raw.strip():
        return ""
    try:
        return yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise VarParseError(f"Invalid value for variable '{name}'", cause=e) from e


def load_var_file(path: Union[str, Path]) -> Dict[str, Any]:
    """Load a YAML variable file into a dict.

    An empty file yields no variables.

    Raises:
        VarParseError: If the file cannot be read, is not valid YAML, or is not a mapping
    """
    path = Path(path)
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise VarParseError(f"Failed to read variable file {path}", cause=e) from e
    except yaml.YAMLError as e:
        raise VarParseError(f"Invalid YAML in variable file {path}", cause=e) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise VarParseError(
            f"Variable file {path} must contain a mapping, got {type(data).__name__}"
        )
    return {str(key): value for key, value in data.items()}


def parse_vars(
    inline_vars: Sequence[str] = (),
    var_files: Sequence[Union[str, Path]] = (),
) -> Dict[str, Any]:
    """Merge variable files (in order) and then inline assignments.

    Later sources override earlier ones on key collision.
    """
    merged: Dict[str, Any] = {}
    for var_file in var_files:
        merged.update(load_var_file(var_file))
    merged.update(parse_inline_vars(inline_vars))
    return merged


class ContextBuilder:
    """Builds the VariableContext for a scaffolding run."""

    def build(
        self,
        variables: List[str],
        module_url: str,
        inline_vars: Sequence[str] = (),
        var_files: Sequence[Union[str, Path]] = (),
    ) -> Dict[str, Any]:
        """Merge user variables with scaffolding metadata.

        Args:
            variables: Discovered variable names, in render order
            module_url: Module locator the configuration points at
            inline_vars: NAME=VALUE assignments
            var_files: YAML variable files

        Returns:
            Variable context; reserved keys hold the discovered names and module locator

        Raises:
            VarParseError: On malformed user input
        """
        context = parse_vars(inline_vars, var_files)

        for key in RESERVED_KEYS:
            if key in context:
                logger.warning(f"Ignoring user variable '{key}': the name is reserved for scaffolding metadata")

        context[PARSED_INPUTS_KEY] = list(variables)
        context[MODULE_URL_KEY] = module_url
        return context
