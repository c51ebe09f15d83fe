"""
Error types for the t2022 CLI
"""

from typing import Optional


class T2022CliError(Exception):
    """Base class for all errors raised by the CLI"""

    exit_code = 1
    title = "Error"

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class ArgumentError(T2022CliError):
    """Raised when an address, amount or other argument cannot be parsed"""

    exit_code = 2
    title = "Argument Error"


class KeyLoadError(T2022CliError):
    """Raised when a keypair file is missing, unreadable or malformed"""

    exit_code = 3
    title = "Key Error"


class RemoteCallError(T2022CliError):
    """Raised for RPC failures, missing accounts and undecodable account data"""

    exit_code = 4
    title = "RPC Error"


class AccountDataError(RemoteCallError):
    """Raised when fetched account data is not a valid token record"""


class InstructionBuildError(T2022CliError):
    """Raised when instruction parameters are rejected"""

    exit_code = 5
    title = "Instruction Error"
