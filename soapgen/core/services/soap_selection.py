"""
SOAP selection — datasource, service, binding and operation choices.

Each resolver takes the current candidates and, when the config file
supplied an answer, looks it up by exact name; otherwise it asks the
prompter.  Channel-independent: the CLI supplies a click-backed
prompter, tests supply a scripted one.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Protocol, Union

from soapgen.core.config.loader import ALL_OPERATIONS, ConfigError
from soapgen.core.models.workspace import DataSource
from soapgen.core.services.wsdl_loader import WsdlError

logger = logging.getLogger(__name__)

Validator = Callable[[list[str]], Union[str, None]]

DATASOURCE_PROMPT = "Select the datasource for SOAP discovery"
SERVICE_PROMPT = "Select the service:"
BINDING_PROMPT = "Select the binding:"
OPERATIONS_PROMPT = "Select operations to be generated:"


class Prompter(Protocol):
    """Asks the operator to pick from a list of choices."""

    def select_one(self, message: str, choices: list[str]) -> str:
        ...

    def select_many(self, message: str, choices: list[str], validate: Validator) -> list[str]:
        ...


def validate_operation_selection(operations: list[str]) -> str | None:
    """Return an error message for an empty selection, else None."""
    if not operations:
        return "Please select at least one operation."
    return None


def resolve_datasource(
    candidates: list[DataSource],
    configured: str | None,
    prompter: Prompter,
) -> DataSource:
    if configured is not None:
        for ds in candidates:
            if ds.name == configured:
                logger.info("SOAP datasource being set to %s", ds.name)
                return ds
        raise ConfigError(
            "No datasource found with the name provided by the configuration file!"
        )

    answer = prompter.select_one(DATASOURCE_PROMPT, [ds.name for ds in candidates])
    return next(ds for ds in candidates if ds.name == answer)


def _require(candidates: list[str], message: str) -> None:
    """An empty level cannot be prompted for or matched."""
    if not candidates:
        raise WsdlError(message)


def resolve_service(candidates: list[str], configured: str | None, prompter: Prompter) -> str:
    _require(candidates, "No services found in the WSDL.")
    if configured is not None:
        if configured not in candidates:
            raise ConfigError("Service name provided by configuration file does not exist!")
        logger.info("SOAP service being set to %s", configured)
        return configured
    return prompter.select_one(SERVICE_PROMPT, candidates)


def resolve_binding(candidates: list[str], configured: str | None, prompter: Prompter) -> str:
    _require(candidates, "No bindings found for the selected service.")
    if configured is not None:
        if configured not in candidates:
            raise ConfigError("Binding name provided by configuration file does not exist!")
        logger.info("SOAP binding being set to %s", configured)
        return configured
    return prompter.select_one(BINDING_PROMPT, candidates)


def resolve_operations(
    candidates: list[str],
    configured: Any,
    prompter: Prompter,
) -> list[str]:
    """Pick operations: ``"all"``, a list filtered to candidates, or a prompt.

    A configured list keeps candidate order; unknown names are dropped.

    Raises:
        WsdlError: The binding has no operations.
        ConfigError: Bad operations value, or nothing left after filtering.
    """
    _require(candidates, "No operations found for the selected binding.")

    if configured is None:
        return prompter.select_many(OPERATIONS_PROMPT, candidates, validate_operation_selection)

    if configured == ALL_OPERATIONS:
        operations = list(candidates)
    elif isinstance(configured, list):
        operations = [op for op in candidates if op in configured]
    else:
        raise ConfigError(
            "Operation config must be either an array of available operations "
            "or all, to indicate all operations."
        )

    if not operations:
        raise ConfigError(
            "No operations found that match values given in the configuration file."
        )

    logger.info("The following SOAP operations are being built: %s", ", ".join(operations))
    return operations
