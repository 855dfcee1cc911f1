import typing as tp

from textual.reactive import reactive
from textual.app import RenderResult
from textual.widget import Widget

from . import config

def renderBar(
    fraction: float, width: int,
    symbols: tp.Sequence[str] = config.PROGRESS_SYMBOLS,
) -> str:
    '''
    `symbols` is (remaining, elapsed).
    '''
    if width <= 0:
        return ''
    fraction = min(max(fraction, 0.0), 1.0)
    filled = round(fraction * width)
    return symbols[1] * filled + symbols[0] * (width - filled)

class ProgressAscii(Widget):
    fraction: reactive[float] = reactive(0.0)
    caption: reactive[str] = reactive('')

    def __init__(
        self, symbols: tp.Sequence[str] = config.PROGRESS_SYMBOLS,
        *args, **kw,
    ) -> None:
        super().__init__(*args, **kw)

        self.symbols = tuple(symbols)
        for s in self.symbols:
            if len(s) != 1:
                print(f'Warning: ProgressAscii symbols should be single char. Ensure {s} is intended.')

    def render(self) -> RenderResult:
        W = self.size.width
        if not self.caption:
            return renderBar(self.fraction, W, self.symbols)
        bar_width = max(W - len(self.caption) - 1, 0)
        return self.caption + ' ' + renderBar(
            self.fraction, bar_width, self.symbols,
        )
