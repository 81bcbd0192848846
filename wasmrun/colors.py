from typing import Optional


class ColorFormatter:
    default = '00'
    darkgray = '30;01'
    red = '31;01'
    green = '32;01'
    yellow = '33;01'

    def __init__(self, use_colors: bool) -> None:
        self._use_colors = use_colors

    def set(self, color: Optional[str], s: str) -> str:
        if color is None or not self._use_colors:
            return s
        code = getattr(self, color, color)
        return f'\x1b[{code}m{s}\x1b[00m'
