"""Patch applier for the hunkstage staging engine.

Applies a patch to the git index (never the working tree) by walking an
ordered list of ``git apply`` strategies until one succeeds.

Contains:
- ApplyStrategy: A named set of git apply options
- HUNK_STRATEGIES / LINE_STRATEGIES: Fallback chains for the two staging paths
- temporary_patch_file: Write a patch to a temp file that is always removed
- PatchApplier: Runs a fallback chain and records every attempt
"""

import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional, Sequence

from hunkstage.git.exceptions import GitError
from hunkstage.git.runner import GitRunner
from hunkstage.logging_utils import logger
from hunkstage.staging.exceptions import StagingFailedError
from hunkstage.staging.models import ApplyAttempt, ApplyRecord


@dataclass(frozen=True)
class ApplyStrategy:
    """A named set of git apply options."""

    name: str
    options: tuple[str, ...]


EXACT = ApplyStrategy("exact", ("--cached",))
THREE_WAY = ApplyStrategy("three-way", ("--cached", "--3way"))
# Accepts partial application and leaves .rej files for the rest
REJECT = ApplyStrategy("reject", ("--cached", "--reject"))
IGNORE_WHITESPACE = ApplyStrategy("ignore-whitespace", ("--cached", "--ignore-whitespace"))

# Whole-hunk patches supplied by a caller
HUNK_STRATEGIES: tuple[ApplyStrategy, ...] = (EXACT, THREE_WAY, REJECT)
# Hunks extracted for a selected line range
LINE_STRATEGIES: tuple[ApplyStrategy, ...] = (EXACT, THREE_WAY, IGNORE_WHITESPACE)


@contextmanager
def temporary_patch_file(patch_text: str) -> Iterator[Path]:
    """Write a patch to a uniquely named temporary file.

    The file is removed when the context exits, whether or not the body
    raised.

    Args:
        patch_text: Patch content.

    Yields:
        Path of the temporary patch file.
    """
    with tempfile.NamedTemporaryFile(
        mode="w",
        encoding="utf-8",
        newline="",
        prefix="hunkstage-",
        suffix=".patch",
        delete=False,
    ) as temp_file:
        temp_file.write(patch_text)
        patch_path = Path(temp_file.name)

    try:
        yield patch_path
    finally:
        patch_path.unlink(missing_ok=True)


class PatchApplier:
    """Apply patches to the index with an ordered fallback chain."""

    def __init__(self, git: GitRunner):
        self.git = git

    async def apply(
        self,
        patch_text: str,
        strategies: Sequence[ApplyStrategy] = HUNK_STRATEGIES,
    ) -> ApplyRecord:
        """Apply a patch to the index.

        Strategies are tried one at a time, in order. The next one runs only
        after the previous one failed.

        Args:
            patch_text: The patch to apply.
            strategies: The fallback chain.

        Returns:
            The ApplyRecord; its last attempt is the one that succeeded.

        Raises:
            StagingFailedError: If every strategy failed. It is chained to the
                last git error and carries the ApplyRecord.
        """
        if not strategies:
            raise ValueError("At least one apply strategy is required")

        record = ApplyRecord()
        last_error: Optional[GitError] = None

        with temporary_patch_file(patch_text) as patch_path:
            logger.debug(f"Wrote patch to: {patch_path}\n{patch_text}")

            for strategy in strategies:
                attempt = ApplyAttempt(strategy=strategy.name, options=list(strategy.options))
                record.attempts.append(attempt)
                try:
                    await self.git.raw_apply(list(strategy.options), patch_path)
                except GitError as e:
                    attempt.error = e.stderr.strip() or str(e)
                    last_error = e
                    logger.info(f"git apply ({strategy.name}) failed: {attempt.error}")
                    continue

                attempt.succeeded = True
                logger.info(f"git apply succeeded ({strategy.name})")
                return record

        tried = ", ".join(a.strategy for a in record.attempts)
        raise StagingFailedError(
            f"Failed to stage hunk after trying {tried}: {record.attempts[-1].error}",
            record=record,
        ) from last_error
