"""Three-generation key rotation engine."""

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Callable, Iterator, Optional

from kms_jwks_manager.aliases import AliasResolver
from kms_jwks_manager.config import RotationConfig
from kms_jwks_manager.constants import Constants
from kms_jwks_manager.context import CallContext
from kms_jwks_manager.exceptions import (
    DeletionScheduleError,
    KeyNotFoundError,
    KeyRotationError,
    KeyTooYoungError,
    KmsJwksError,
)
from kms_jwks_manager.models import Generation, ManagedKey, RotationOutcome
from kms_jwks_manager.services.key_store import KeyStore

logger = logging.getLogger(__name__)


class RotationEngine:
    """Advances the previous, current and next aliases of one prefix.

    A rotation moves ``previous`` to the outgoing current key, promotes the
    standby key to ``current``, creates a fresh standby under ``next`` and
    finally schedules deletion of the key that was displaced from
    ``previous``. Every step before the deletion is additive or an alias
    upsert, so a failed run is re-run rather than rolled back. A re-run that
    finds the aliases of an interrupted rotation resumes it from the step that
    failed instead of rotating again.

    Concurrent rotations of the same prefix race on alias updates and must
    be serialized by the caller.
    """

    def __init__(
        self,
        key_store: KeyStore,
        alias_prefix: str,
        *,
        clock: Callable[[], datetime] | None = None
    ) -> None:
        """Initialize the rotation engine.

        Args:
            key_store: Store holding the keys and aliases
            alias_prefix: Prefix the generation aliases are derived from
            clock: Returns the current UTC time; used for the age check

        Raises:
            ValidationError: If the alias prefix is invalid
        """
        self._key_store = key_store
        self._alias_prefix = alias_prefix
        self._aliases = AliasResolver.resolve_all(alias_prefix)
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    @contextmanager
    def _step(self, description: str) -> Iterator[None]:
        """Wrap store failures of one rotation step with the step description.

        Raises:
            KeyRotationError: If the step fails
        """
        try:
            yield
        except KeyRotationError:
            raise
        except KmsJwksError as e:
            logger.error(f"Rotation step failed: {description}", extra={
                "alias_prefix": self._alias_prefix,
                "error": str(e),
                "event": "rotation_step_failed"
            })
            raise KeyRotationError(f"{description}: {e}") from e

    def rotate(
        self,
        config: RotationConfig | None = None,
        *,
        ctx: CallContext | None = None
    ) -> RotationOutcome:
        """Rotate the keys of this prefix.

        Args:
            config: Rotation options; defaults to ``RotationConfig()``
            ctx: Call context threaded through every store call

        Returns:
            Ids of the keys involved; ``deletion_error`` is set when the
            rotation succeeded but the retired key could not be scheduled for
            deletion

        Raises:
            KeyTooYoungError: If the current key is younger than the minimum age and force is not set
            KeyRotationError: If any step before the deletion fails
        """
        config = config or RotationConfig()
        ctx = ctx or CallContext.background()

        with self._step("getting current key"):
            current = self._get_or_create(Generation.CURRENT, config, ctx)

        with self._step("getting previous key"):
            previous = self._find(Generation.PREVIOUS, ctx)

        with self._step("getting next key"):
            standby = self._find(Generation.NEXT, ctx)

        resumed = self._resume_interrupted(current, previous, standby, config, ctx)
        if resumed is not None:
            return resumed

        if not config.force:
            self._check_age(current, config)

        with self._step("updating alias for previous key"):
            self._upsert_alias(Generation.PREVIOUS, current.key_id, ctx)

        with self._step("getting next key"):
            standby = self._get_or_create(Generation.NEXT, config, ctx)

        with self._step("updating alias for current key"):
            self._upsert_alias(Generation.CURRENT, standby.key_id, ctx)

        new_standby = self._replace_standby(config, ctx)

        outcome = RotationOutcome(
            old_current_id=current.key_id,
            old_next_id=standby.key_id,
            old_previous_id=previous.key_id if previous else None,
            new_next_id=new_standby.key_id,
        )

        # Deletion is irreversible, so it runs only once every alias is in place
        if previous is not None:
            self._retire(previous, config, outcome, ctx)

        logger.info(f"Key rotation completed for prefix {self._alias_prefix}", extra={
            "alias_prefix": self._alias_prefix,
            **outcome.to_dict(),
            "event": "rotation_completed"
        })
        return outcome

    def _resume_interrupted(
        self,
        current: ManagedKey,
        previous: Optional[ManagedKey],
        standby: Optional[ManagedKey],
        config: RotationConfig,
        ctx: CallContext
    ) -> Optional[RotationOutcome]:
        """Finish a rotation an earlier run left half done.

        The alias layout identifies the step that failed:

        - ``previous`` equals ``current``: failed after moving ``previous``.
        - ``next`` equals ``current``: failed after promoting the standby.
        - ``next`` missing while ``previous`` exists: failed after deleting ``next``.

        The key displaced from ``previous`` by the interrupted run is no
        longer referenced by any alias and cannot be identified, so it is not
        scheduled for deletion.

        Returns:
            The outcome of the completed rotation, or None when the aliases
            are consistent and a new rotation should start
        """
        if previous is not None and previous.key_id == current.key_id:
            self._log_resume("previous alias update")
            with self._step("getting next key"):
                standby = self._get_or_create(Generation.NEXT, config, ctx)
            with self._step("updating alias for current key"):
                self._upsert_alias(Generation.CURRENT, standby.key_id, ctx)
            new_standby = self._replace_standby(config, ctx)
            old_current_id, old_next_id = current.key_id, standby.key_id
        elif standby is not None and standby.key_id == current.key_id and previous is not None:
            self._log_resume("current alias update")
            new_standby = self._replace_standby(config, ctx)
            old_current_id, old_next_id = previous.key_id, current.key_id
        elif standby is None and previous is not None:
            self._log_resume("next alias deletion")
            with self._step("creating new key"):
                new_standby = self._get_or_create(Generation.NEXT, config, ctx)
            old_current_id, old_next_id = previous.key_id, current.key_id
        else:
            return None

        outcome = RotationOutcome(
            old_current_id=old_current_id,
            old_next_id=old_next_id,
            old_previous_id=None,
            new_next_id=new_standby.key_id,
            resumed=True,
        )
        logger.info(f"Interrupted key rotation completed for prefix {self._alias_prefix}", extra={
            "alias_prefix": self._alias_prefix,
            **outcome.to_dict(),
            "event": "rotation_resumed"
        })
        return outcome

    def _log_resume(self, completed_step: str) -> None:
        logger.warning(
            f"Resuming rotation interrupted after {completed_step}; "
            f"the key it displaced from {self._aliases[Generation.PREVIOUS]} was not scheduled for deletion",
            extra={
                "alias_prefix": self._alias_prefix,
                "completed_step": completed_step,
                "event": "rotation_resume"
            },
        )

    def _check_age(self, current: ManagedKey, config: RotationConfig) -> None:
        """Refuse to rotate a current key younger than the configured minimum.

        Raises:
            KeyTooYoungError: If the key is too young
        """
        age = current.age(self._clock())
        if age < config.minimum_age:
            raise KeyTooYoungError(current.key_id, age, config.minimum_age)

    def _replace_standby(self, config: RotationConfig, ctx: CallContext) -> ManagedKey:
        """Drop the ``next`` alias from the promoted key and alias a fresh standby."""
        with self._step("deleting next alias"):
            self._key_store.delete_alias(self._aliases[Generation.NEXT], ctx=ctx)

        with self._step("creating new key"):
            return self._get_or_create(Generation.NEXT, config, ctx)

    def _retire(
        self,
        previous: ManagedKey,
        config: RotationConfig,
        outcome: RotationOutcome,
        ctx: CallContext
    ) -> None:
        """Schedule deletion of the key displaced from ``previous``.

        A failure here is recorded on ``outcome`` rather than raised: the new
        aliases are already in place.
        """
        try:
            self._key_store.schedule_deletion(
                previous.key_id,
                ctx=ctx,
                pending_window_days=config.pending_window_days,
            )
        except KmsJwksError as e:
            error = DeletionScheduleError(f"scheduling deletion of previous key {previous.key_id}: {e}")
            error.__cause__ = e
            outcome.deletion_error = error
            logger.error(f"Failed to schedule deletion of key {previous.key_id}", extra={
                "key_id": previous.key_id,
                "error": str(e),
                "event": "deletion_schedule_failed"
            })
            return

        outcome.deletion_scheduled = True
        logger.info(f"Scheduled deletion of key {previous.key_id}", extra={
            "key_id": previous.key_id,
            "pending_window_days": config.pending_window_days,
            "event": "deletion_scheduled"
        })

    def _find(self, generation: Generation, ctx: CallContext) -> Optional[ManagedKey]:
        """Describe the key of ``generation``, or None if its alias does not exist."""
        try:
            return self._key_store.describe_by_alias(self._aliases[generation], ctx=ctx)
        except KeyNotFoundError:
            return None

    def _get_or_create(
        self,
        generation: Generation,
        config: RotationConfig,
        ctx: CallContext
    ) -> ManagedKey:
        """Describe the key of ``generation``, creating key and alias if absent."""
        alias = self._aliases[generation]
        existing = self._find(generation, ctx)
        if existing is not None:
            return existing

        logger.info(f"Key does not exist, creating: {alias}", extra={
            "key_alias": alias,
            "key_spec": config.key_spec,
            "event": "key_create"
        })
        key = self._key_store.create_signing_key(
            config.key_spec,
            {Constants.MANAGED_BY_TAG_KEY(): Constants.MANAGED_BY_TAG_VALUE()},
            ctx=ctx,
        )
        self._key_store.create_alias(alias, key.key_id, ctx=ctx)
        logger.info(f"Created key {key.key_id} for alias {alias}", extra={
            "key_alias": alias,
            **key.to_dict(),
            "event": "key_created"
        })
        return self._key_store.describe_by_alias(alias, ctx=ctx)

    def _upsert_alias(self, generation: Generation, key_id: str, ctx: CallContext) -> None:
        """Point the alias of ``generation`` at ``key_id``, creating it if absent."""
        alias = self._aliases[generation]
        try:
            self._key_store.update_alias(alias, key_id, ctx=ctx)
        except KeyNotFoundError:
            self._key_store.create_alias(alias, key_id, ctx=ctx)
            logger.debug(f"Created alias {alias} -> {key_id}", extra={
                "key_alias": alias,
                "key_id": key_id,
                "event": "alias_created"
            })
            return

        logger.debug(f"Updated alias {alias} -> {key_id}", extra={
            "key_alias": alias,
            "key_id": key_id,
            "event": "alias_updated"
        })
