from collections import deque
from datetime import datetime, timezone
from typing import Deque, Optional

from pydantic import BaseModel, Field


class PendingImage(BaseModel):
    data: bytes
    received_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class PendingImageBuffer:
    """
    Bounded arrival-order buffer for images uploaded over HTTP.

    When full, new images are rejected and the buffered ones are kept, so the
    oldest images are the ones that survive.
    """

    def __init__(self, capacity: int = 10):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self._images: Deque[PendingImage] = deque()

    def push(self, data: bytes) -> bool:
        if len(self._images) >= self.capacity:
            return False
        self._images.append(PendingImage(data=data))
        return True

    def pop(self) -> Optional[PendingImage]:
        if not self._images:
            return None
        return self._images.popleft()

    def requeue(self, image: PendingImage) -> None:
        """Put an image that could not be delivered back at the head of the buffer."""
        # Always kept: it is older than anything pushed since it was popped.
        self._images.appendleft(image)

    def __len__(self) -> int:
        return len(self._images)
