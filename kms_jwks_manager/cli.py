#!/usr/bin/env python3
"""Command-line interface for the KMS JWKS Manager."""

import argparse
import json
import logging
import os
import sys
from typing import Any, Callable, NoReturn, Optional

from kms_jwks_manager.config import KmsClientConfig
from kms_jwks_manager.constants import Constants
from kms_jwks_manager.context import CallContext
from kms_jwks_manager.exceptions import (
    KeyExportError,
    KeyRotationError,
    KeyTooYoungError,
    KmsJwksError,
    ValidationError,
)
from kms_jwks_manager.key_manager import PREFIX_ENV_VARIABLE, KeyManager
from kms_jwks_manager.services import KeyStore, KmsKeyStore
from kms_jwks_manager.validation_utils import parse_duration, validate_alias_prefix

logger = logging.getLogger(__name__)

_EXIT_FAILURE = 1
_EXIT_DELETION_FAILED = 3  # argparse uses 2 for usage errors


class KmsJwksCLI:
    """Command-line interface for rotating and exporting KMS signing keys."""

    def __init__(
        self,
        *,
        key_store_factory: Callable[[KmsClientConfig], KeyStore] | None = None
    ) -> None:
        """Initialize the CLI.

        Args:
            key_store_factory: Builds the key store from client settings
                (default: AWS KMS)
        """
        self._parser = self._create_parser()
        self._key_store_factory = key_store_factory or KmsKeyStore.from_config
        self._pretty = False

    def _create_parser(self) -> argparse.ArgumentParser:
        """Create the argument parser.

        Returns:
            Configured argument parser
        """
        parser = argparse.ArgumentParser(
            prog="kms-jwks-manager",
            description="Rotate KMS signing keys and export them as a JWKS",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Keys are addressed by the aliases alias/<prefix>-current, alias/<prefix>-next
and alias/<prefix>-previous.

Examples:
  # Rotate keys, creating them on first use
  kms-jwks-manager -k my-service rotate

  # Rotate regardless of the current key's age
  kms-jwks-manager -k my-service rotate --force

  # Rotate with ECDSA keys once the current key is a week old
  kms-jwks-manager -k my-service rotate --minimum-age 168h --key-spec ECC_NIST_P256

  # Export the public keys for verifiers
  kms-jwks-manager -k my-service export --algorithm RS256 > jwks.json
            """,
        )

        # Global arguments
        parser.add_argument(
            "-k",
            "--key-alias-prefix",
            default=os.getenv(PREFIX_ENV_VARIABLE),
            help=(
                "Alias prefix to use when operating on keys; aliases get '-current', "
                f"'-next' and '-previous' suffixes (default: ${PREFIX_ENV_VARIABLE})"
            ),
        )
        parser.add_argument(
            "--region",
            help="AWS region (default: boto3 configuration)",
        )
        parser.add_argument(
            "--profile",
            help="AWS profile name (default: boto3 configuration)",
        )
        parser.add_argument(
            "--endpoint-url",
            help="Override the KMS endpoint URL",
        )
        parser.add_argument(
            "--timeout",
            type=float,
            default=Constants.DEFAULT_CALL_TIMEOUT(),
            help=f"Timeout in seconds for each KMS call (default: {Constants.DEFAULT_CALL_TIMEOUT():g})",
        )
        parser.add_argument(
            "--deadline",
            type=float,
            help=(
                "Stop issuing KMS calls once this many seconds have passed; a call already "
                "in flight is bounded by --timeout, which is capped at the deadline "
                "(default: no deadline)"
            ),
        )
        parser.add_argument(
            "--pretty",
            action="store_true",
            help="Pretty-print JSON outputs",
        )
        verbosity = parser.add_mutually_exclusive_group()
        verbosity.add_argument(
            "-v",
            "--verbose",
            action="store_true",
            help="Log debug messages to stderr",
        )
        verbosity.add_argument(
            "-q",
            "--quiet",
            action="store_true",
            help="Only log warnings and errors",
        )

        # Subcommands
        subparsers = parser.add_subparsers(
            dest="command",
            help="Available commands",
        )

        # Export command
        export_parser = subparsers.add_parser(
            "export",
            help="Export KMS keys as JWKS",
        )
        export_parser.add_argument(
            "-a",
            "--algorithm",
            required=True,
            help=(
                "Intended algorithm to use with the exported keys (e.g. RS256). Must be "
                "provided explicitly to avoid 'algorithm confusion' attacks."
            ),
        )

        # Rotate command
        rotate_parser = subparsers.add_parser(
            "rotate",
            help="Rotate KMS keys; will create new keys if necessary",
        )
        rotate_parser.add_argument(
            "--minimum-age",
            default="24h",
            help="Minimum age the 'current' key must have to be considered for rotation (default: 24h)",
        )
        rotate_parser.add_argument(
            "--force",
            action="store_true",
            help="Force rotation of keys regardless of age",
        )
        rotate_parser.add_argument(
            "--key-spec",
            default=Constants.DEFAULT_KEY_SPEC(),
            choices=Constants.SIGNING_KEY_SPECS(),
            help=f"Key specification to use for new keys (default: {Constants.DEFAULT_KEY_SPEC()})",
        )
        rotate_parser.add_argument(
            "--pending-window-days",
            type=int,
            help=(
                "Days KMS waits before deleting the retired key "
                f"({Constants.MIN_PENDING_WINDOW_DAYS()}-{Constants.MAX_PENDING_WINDOW_DAYS()}, "
                "default: KMS default)"
            ),
        )

        return parser

    def _validate_required_args(self, args: argparse.Namespace) -> None:
        """Validate that required arguments are provided.

        Raises:
            ValidationError: If required arguments are missing or invalid
        """
        if not args.key_alias_prefix:
            raise ValidationError(
                f"Key alias prefix (-k/--key-alias-prefix or ${PREFIX_ENV_VARIABLE}) is required"
            )
        validate_alias_prefix(args.key_alias_prefix)

        if args.deadline is not None and args.deadline <= 0:
            raise ValidationError("Deadline must be positive")

    def _get_manager(self, args: argparse.Namespace) -> KeyManager:
        """Get KeyManager instance based on arguments."""
        timeout = args.timeout
        if args.deadline is not None:
            timeout = min(timeout, args.deadline)
        client_config = KmsClientConfig(
            region_name=args.region,
            profile_name=args.profile,
            endpoint_url=args.endpoint_url,
            timeout=timeout,
        )
        return KeyManager(args.key_alias_prefix, self._key_store_factory(client_config))

    def _print_error(
        self,
        *,
        message: str,
        code: str = "error",
        extra: dict[str, Any] | None = None,
        exit_code: int = _EXIT_FAILURE
    ) -> NoReturn:
        """Print a JSON error to stderr and exit non-zero."""
        error_obj = {
            "success": False,
            "error_code": code,
            "message": message,
        }
        if extra:
            error_obj["data"] = extra
        print(json.dumps(error_obj, indent=2), file=sys.stderr)
        sys.exit(exit_code)

    def _handle_export(self, args: argparse.Namespace, ctx: CallContext) -> None:
        """Handle export command."""
        manager = self._get_manager(args)
        key_set = manager.export(algorithm=args.algorithm, ctx=ctx)
        print(key_set.to_json(pretty=self._pretty))

    def _handle_rotate(self, args: argparse.Namespace, ctx: CallContext) -> None:
        """Handle rotate command."""
        minimum_age = parse_duration(args.minimum_age)
        manager = self._get_manager(args)
        outcome = manager.rotate(
            minimum_age=minimum_age,
            force=args.force,
            key_spec=args.key_spec,
            pending_window_days=args.pending_window_days,
            ctx=ctx,
        )

        if outcome.deletion_error is not None:
            self._print_error(
                message=f"Rotation completed but {outcome.deletion_error}",
                code="deletion_schedule_failed",
                extra=outcome.to_dict(),
                exit_code=_EXIT_DELETION_FAILED,
            )

    @staticmethod
    def _configure_logging(args: argparse.Namespace) -> None:
        """Send log records to stderr; stdout carries the JWKS document."""
        level = logging.INFO
        if args.verbose:
            level = logging.DEBUG
        elif args.quiet:
            level = logging.WARNING
        logging.basicConfig(
            level=level,
            stream=sys.stderr,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

    def run(self, args: Optional[list[str]] = None, *, configure_logging: bool = False) -> None:
        """Run the CLI with given arguments."""
        try:
            parsed_args = self._parser.parse_args(args)
            self._pretty = bool(getattr(parsed_args, "pretty", False))

            if configure_logging:
                self._configure_logging(parsed_args)

            if not parsed_args.command:
                self._print_error(message="No command specified", code="missing_command")

            # Validate required arguments
            self._validate_required_args(parsed_args)

            ctx = CallContext(timeout=parsed_args.deadline)

            # Handle commands
            if parsed_args.command == "export":
                self._handle_export(parsed_args, ctx)
            elif parsed_args.command == "rotate":
                self._handle_rotate(parsed_args, ctx)
            else:
                self._print_error(message=f"Unknown command: {parsed_args.command}", code="unknown_command")

        except ValidationError as e:
            self._print_error(message=str(e), code="validation_error")
        except KeyTooYoungError as e:
            self._print_error(
                message=str(e),
                code="key_too_young",
                extra={
                    "key_id": e.key_id,
                    "age_seconds": int(e.age.total_seconds()),
                    "minimum_age_seconds": int(e.minimum_age.total_seconds()),
                },
            )
        except KeyRotationError as e:
            self._print_error(message=str(e), code="rotation_error")
        except KeyExportError as e:
            self._print_error(message=str(e), code="export_error")
        except KmsJwksError as e:
            self._print_error(message=str(e), code="key_store_error")
        except KeyboardInterrupt:
            self._print_error(message="Operation cancelled by user", code="cancelled")
        except Exception as e:
            logger.exception("Unexpected error")
            self._print_error(message=str(e), code="unexpected_error")


def main() -> None:
    """Main entry point for the CLI."""
    cli = KmsJwksCLI()
    cli.run(configure_logging=True)


if __name__ == "__main__":
    main()
