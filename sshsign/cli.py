"""ssh-sign CLI application with Typer.

Git runs the configured ``gpg.ssh.program`` with ssh-keygen style flags::

    ssh-sign -Y sign -n git -f <key-id> <buffer-file>
    ssh-sign -Y find-principals -f <allowed-signers> -s <sig-file> -Overify-time=...
    ssh-sign -Y verify -n git -f <allowed-signers> -I <principal> -s <sig-file>
    ssh-sign -Y check-novalidate -n git -s <sig-file>

Results go to stdout; every failure prints one diagnostic line to stderr
and exits with status 1.
"""

import logging
import sys
from pathlib import Path
from typing import Annotated, NoReturn

import typer
from pydantic import ValidationError

from sshsign import __version__
from sshsign.bootstrap import ApplicationContainer, bootstrap_application
from sshsign.config import Settings, get_settings
from sshsign.errors import SSHSignError, SignatureVerificationError
from sshsign.sshsig import NAMESPACE, NO_PRINCIPAL_MATCHED

logger = logging.getLogger(__name__)

ACTIONS = ("sign", "find-principals", "verify", "check-novalidate")

app = typer.Typer(
    name="ssh-sign",
    help="SSHSIG commit signing and verification for git, backed by Keeper Secrets Manager",
    add_completion=False,
)


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        typer.echo(f"ssh-sign version {__version__}")
        raise typer.Exit()


def _fail(message: str) -> NoReturn:
    typer.secho(message, fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


def _require(value: object, flag: str, action: str) -> None:
    if value is None or value == "":
        _fail(f"Missing required option {flag} for {action}")


def _configure_logging(level: str) -> None:
    logging.basicConfig(format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)
    logging.getLogger("sshsign").setLevel(level)


def _read_stdin() -> bytes:
    return sys.stdin.buffer.read()


def _load_settings() -> Settings:
    try:
        return get_settings()
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        )
        _fail(f"Invalid configuration: {problems}")


def _run_sign(container: ApplicationContainer, key_id: str, files: list[Path]) -> None:
    service = container.signing_service
    if not files:
        armored = service.sign_bytes(key_id, _read_stdin())
        typer.echo(armored.decode("ascii"), nl=False)
        return

    for path in files:
        if not path.is_file():
            _fail(f"No commit file found at {path}")
    service.sign_files(key_id, files)


def _run_find_principals(
    container: ApplicationContainer, allowed_signers: Path, signature_file: Path
) -> None:
    principals = container.verification_service.find_principals(allowed_signers, signature_file)
    if not principals:
        _fail("No matching principals found")
    for principal in principals:
        typer.echo(principal)


def _run_verify(
    container: ApplicationContainer,
    allowed_signers: Path,
    signature_file: Path,
    principal: str,
) -> None:
    data = None
    if container.settings.verify_signed_data and not sys.stdin.isatty():
        data = _read_stdin() or None
    if data is None:
        logger.debug("No payload on stdin; checking the principal fingerprint only")

    try:
        report = container.verification_service.verify(
            allowed_signers, signature_file, principal, data
        )
    except SignatureVerificationError as exc:
        _fail(f"{exc}: payload read from stdin does not match the signature")
    typer.echo(report.render())


def _run_check_novalidate(container: ApplicationContainer, signature_file: Path) -> None:
    report = container.verification_service.check_novalidate(signature_file)
    typer.echo(report.render())
    typer.echo(NO_PRINCIPAL_MATCHED)


@app.command()
def main(
    action: Annotated[
        str | None,
        typer.Option("-Y", help=f"Action to perform: {', '.join(ACTIONS)}"),
    ] = None,
    namespace: Annotated[
        str | None,
        typer.Option("-n", help="Signature namespace (only 'git' is supported)"),
    ] = None,
    key_file: Annotated[
        str | None,
        typer.Option(
            "-f",
            help="sign: private key file or vault record UID; otherwise the allowed signers file",
        ),
    ] = None,
    signature_file: Annotated[
        Path | None,
        typer.Option("-s", help="Signature file to verify"),
    ] = None,
    principal: Annotated[
        str | None,
        typer.Option("-I", help="Principal to verify"),
    ] = None,
    options: Annotated[
        list[str] | None,
        typer.Option("-O", help="ssh-keygen option (accepted and ignored, e.g. verify-time)"),
    ] = None,
    use_agent: Annotated[
        bool,
        typer.Option("-U", help="Key is held by an agent (accepted and ignored)"),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Write debug diagnostics to stderr"),
    ] = False,
    version: Annotated[
        bool | None,
        typer.Option("--version", callback=version_callback, is_eager=True),
    ] = None,
    files: Annotated[
        list[Path] | None,
        typer.Argument(help="sign: files to sign (stdin when omitted)"),
    ] = None,
) -> None:
    """Sign commits or answer git's SSH signature verification stages."""
    settings = _load_settings()
    _configure_logging("DEBUG" if verbose else settings.log_level)
    if options:
        logger.debug("Ignoring options: %s", options)

    if action is None:
        _fail(
            "This program is not intended to be run directly. "
            "It is called by git when signing or verifying commits."
        )
    if action not in ACTIONS:
        _fail(f"Unsupported action '{action}'. Supported actions: {', '.join(ACTIONS)}")
    if namespace is not None and namespace != NAMESPACE:
        _fail(f"Only the '{NAMESPACE}' namespace is supported.")

    container = bootstrap_application(settings)
    try:
        if action == "sign":
            _require(key_file, "-f", action)
            _run_sign(container, key_file, list(files or []))
        elif action == "find-principals":
            _require(key_file, "-f", action)
            _require(signature_file, "-s", action)
            _run_find_principals(container, Path(key_file), signature_file)
        elif action == "verify":
            _require(key_file, "-f", action)
            _require(signature_file, "-s", action)
            _require(principal, "-I", action)
            _run_verify(container, Path(key_file), signature_file, principal)
        else:
            _require(signature_file, "-s", action)
            _run_check_novalidate(container, signature_file)
    except SSHSignError as exc:
        logger.debug("%s failed", action, exc_info=True)
        _fail(str(exc))


if __name__ == "__main__":
    app()
