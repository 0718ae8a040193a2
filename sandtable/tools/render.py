import logging
import os

import cv2
import numpy as np

logger = logging.getLogger(__name__)


def to_grayscale(cells: np.ndarray) -> np.ndarray:
    """
    Map heights to 8-bit gray: 0 -> black, the highest cell -> white.
    Returns a uint8 array with the same (rows, cols) shape.
    """
    cells = np.asarray(cells, dtype=np.float64)
    max_h = float(np.max(cells)) if cells.size else 0.0
    logger.debug("Rendering heightfield: max height %.4f", max_h)

    if max_h <= 0.0:
        return np.zeros(cells.shape, dtype=np.uint8)

    gray = np.rint(cells * 255.0 / max_h)
    return np.clip(gray, 0, 255).astype(np.uint8)


def supported_extension(path: str) -> bool:
    """True if OpenCV has an encoder for this file's extension."""
    ext = os.path.splitext(path)[1]
    if not ext:
        return False
    return bool(cv2.haveImageWriter(path))


def save_image(path: str, image: np.ndarray) -> str:
    """Write a grayscale image. Returns the absolute path written."""
    if not supported_extension(path):
        raise ValueError(f"Unsupported image format: {path}")

    out_dir = os.path.dirname(path)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)

    if not cv2.imwrite(path, image):
        raise RuntimeError(f"Could not write image at: {path}")

    abs_path = os.path.abspath(path)
    logger.info("Image saved to %s", abs_path)
    return abs_path


def show_heightfield(cells: np.ndarray, title: str = "Sand table") -> None:
    import matplotlib.pyplot as plt

    fig, ax = plt.subplots(figsize=(8, 8))
    ax.imshow(to_grayscale(cells), cmap="gray", vmin=0, vmax=255)
    ax.set_title(title)
    ax.set_axis_off()
    plt.show()
