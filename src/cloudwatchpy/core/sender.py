"""Value clamping and batch accumulation.

CloudWatch documents a wider range, but experimentally only magnitudes in
[1E-108, 1E108] (plus zero) are accepted, and one PutMetricData call takes
at most 20 datapoints.
"""

import logging
import math
from collections.abc import Callable, Sequence

from cloudwatchpy.core.exceptions import DeliveryError
from cloudwatchpy.core.models import Batch, Datapoint, Dimension, StandardUnit

logger = logging.getLogger(__name__)

SMALLEST_SENDABLE = 1e-108
LARGEST_SENDABLE = 1e108
MAX_BATCH_SIZE = 20

Deliver = Callable[[str, Sequence[Datapoint]], None]


def clamp(value: float) -> float:
    """Force a value into the range CloudWatch accepts.

    Zero passes through; other magnitudes below SMALLEST_SENDABLE or above
    LARGEST_SENDABLE are replaced by the bound, keeping their sign.
    """
    magnitude = abs(value)
    if 0 < magnitude < SMALLEST_SENDABLE:
        return math.copysign(SMALLEST_SENDABLE, value)
    if magnitude > LARGEST_SENDABLE:
        return math.copysign(LARGEST_SENDABLE, value)
    return value


class ValueSender:
    """Clamps values into datapoints and delivers them in bounded batches.

    Each clamp direction is logged only the first time it happens over the
    lifetime of the sender.

    Args:
        deliver: Called with (namespace, datapoints) for every full or
            flushed batch. May raise.
        max_batch_size: Datapoints per delivery.
    """

    def __init__(self, deliver: Deliver, max_batch_size: int = MAX_BATCH_SIZE) -> None:
        self._deliver = deliver
        self._max_batch_size = max_batch_size
        self.sent_too_small = False
        self.sent_too_large = False
        self.skipped_nan = False

    def _clamp(self, name: str, value: float) -> float:
        clamped = clamp(value)
        if clamped == value:
            return value
        if abs(clamped) == SMALLEST_SENDABLE and not self.sent_too_small:
            logger.debug(
                "Value for %s is smaller than what CloudWatch supports; trimming to %s. "
                "Further small values won't be logged.",
                name,
                clamped,
            )
            self.sent_too_small = True
        elif abs(clamped) == LARGEST_SENDABLE and not self.sent_too_large:
            logger.debug(
                "Value for %s is larger than what CloudWatch supports; trimming to %s. "
                "Further large values won't be logged.",
                name,
                clamped,
            )
            self.sent_too_large = True
        return clamped

    def send(
        self,
        batch: Batch,
        name: str,
        value: float,
        unit: StandardUnit,
        dimensions: Sequence[Dimension] = (),
    ) -> Batch:
        """Queue one datapoint, delivering the batch once it is full.

        Args:
            batch: The open batch.
            name: Full datapoint name.
            value: Raw value, clamped before queueing.
            unit: Unit tag.
            dimensions: Dimension tags.

        Returns:
            ``batch`` if it still has room, otherwise a new empty batch.
            NaN values are dropped, since CloudWatch rejects the whole batch
            holding them.

        Raises:
            DeliveryError: If delivering the full batch failed.
        """
        value = float(value)
        if math.isnan(value):
            if not self.skipped_nan:
                logger.warning(
                    "Value for %s is NaN, which CloudWatch rejects; skipping it. "
                    "Further NaN values won't be logged.",
                    name,
                )
                self.skipped_nan = True
            return batch
        datapoint = Datapoint(
            name=name,
            timestamp=batch.timestamp,
            value=self._clamp(name, value),
            unit=unit,
            dimensions=tuple(dimensions),
        )
        logger.debug("Sending to CloudWatch %s", datapoint)
        batch.datapoints.append(datapoint)

        if len(batch) >= self._max_batch_size:
            self.flush(batch)
            return batch.empty_copy()
        return batch

    def flush(self, batch: Batch) -> int:
        """Deliver a batch if it holds anything.

        Returns:
            Number of datapoints delivered.

        Raises:
            DeliveryError: If the transport raised.
        """
        if not batch.datapoints:
            return 0
        try:
            self._deliver(batch.namespace, list(batch.datapoints))
        except Exception as e:
            logger.warning(
                "Failed writing %d datapoints to CloudWatch namespace %s: %s",
                len(batch),
                batch.namespace,
                e,
            )
            raise DeliveryError(batch.namespace, len(batch), str(e)) from e
        return len(batch)
