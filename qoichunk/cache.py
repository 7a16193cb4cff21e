from .pixel import Pixel
from .qoi import QOI


class PixelCache:
    """
    Direct-mapped table of the last pixel seen in each of 64 hash slots.

    A newer pixel silently evicts the older one sharing its slot. The encoder
    and the decoder must write to it at exactly the same points for their
    tables to stay identical.
    """

    __slots__ = ("_slots",)

    def __init__(self):
        # Index array: 64 pixels, initialized to (0, 0, 0, 0)
        self._slots = [Pixel.transparent()] * QOI.QOI_INDEX_SIZE

    @staticmethod
    def hash(pixel) -> int:
        """Calculates the index position for the color array."""
        return Pixel.hash(pixel)

    def get(self, index: int) -> Pixel:
        return self._slots[index]

    def set(self, index: int, pixel: Pixel) -> None:
        self._slots[index] = pixel

    def store(self, pixel: Pixel) -> int:
        """Write ``pixel`` into its own slot and return that slot."""
        index = self.hash(pixel)
        self._slots[index] = pixel
        return index

    def snapshot(self) -> tuple:
        return tuple(self._slots)

    def __getitem__(self, index: int) -> Pixel:
        return self._slots[index]

    def __len__(self) -> int:
        return len(self._slots)

    def __eq__(self, other):
        if not isinstance(other, PixelCache):
            return NotImplemented
        return self._slots == other._slots
