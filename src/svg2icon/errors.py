from __future__ import annotations

from typing import Optional, Union


class Svg2IconError(Exception):
    pass


class RasterizationError(Svg2IconError):
    """Raised when a single icon entry could not be rendered."""

    def __init__(
        self,
        label: Union[int, str, None],
        size: int,
        cause: Optional[BaseException] = None,
    ) -> None:
        self.label = label
        self.size = size
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        if isinstance(label, str):
            message = f"Failed to render {label} ({size}x{size}){detail}"
        else:
            message = f"Failed to render {size}x{size}{detail}"
        super().__init__(message)


class SerializationError(Svg2IconError):
    pass


class RasterizerUnavailableError(RasterizationError):
    """Raised when the SVG rendering backend cannot be loaded.

    Nothing was rendered, so ``label`` is ``None`` and ``size`` is 0.
    """

    def __init__(self, message: str) -> None:
        self.label = None
        self.size = 0
        self.cause = None
        Svg2IconError.__init__(self, message)
