from abc import ABC, abstractmethod

from ..pixels import PixelBuffer
from ..schema import StructuredText


class ITxtRecognizer(ABC):
    """Interface for text-recognition engines that read one RGBA frame."""

    name = "none"

    @abstractmethod
    def recognize(self, buf: PixelBuffer) -> StructuredText:
        """Return the block/line/word hierarchy read from buf. Raise RecognizerFailure on engine errors."""
        ...
