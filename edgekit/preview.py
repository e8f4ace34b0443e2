"""Side-by-side before/after figure for quick visual checks."""

from pathlib import Path
from typing import Union

import numpy as np
from matplotlib.figure import Figure

from edgekit.buffer import Buffer

CAPTION_FONTSIZE = 12
FIGSIZE = (10, 5)


def _as_rgb_or_gray(buffer: Buffer) -> np.ndarray:
    if buffer.channels == 1:
        return buffer.data
    return buffer.data[:, :, 2::-1]  # BGR(A) -> RGB for display


def save_panels(original: Buffer, result: Buffer, path: Union[str, Path],
                title: str = "Edge detection") -> None:
    """
    Save a two-panel figure (input, output) to ``path``.

    The figure is built without pyplot, so the host program's backend is
    left alone.
    """
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    panels = [("Input", original), ("Output", result)]

    fig = Figure(figsize=FIGSIZE)
    fig.suptitle(title, fontsize=CAPTION_FONTSIZE + 2, fontweight="bold")
    for ax, (caption, buf) in zip(fig.subplots(1, 2), panels):
        ax.imshow(_as_rgb_or_gray(buf), cmap="gray", vmin=0, vmax=255)
        ax.set_title(caption, fontsize=CAPTION_FONTSIZE)
        ax.axis("off")
    fig.savefig(str(path), dpi=150, bbox_inches="tight")
