import json
import logging
import os

import numpy as np

logger = logging.getLogger(__name__)


def write_heightfield(cells: np.ndarray, bin_path: str, meta_path: str, settings) -> dict:
    """
    Write the raw heights as float32 (row-major, ny rows of nx cells) plus a JSON
    sidecar describing the grid. Returns the metadata written.
    """
    heights = np.asarray(cells, dtype=np.float32)

    for p in (bin_path, meta_path):
        out_dir = os.path.dirname(p)
        if out_dir:
            os.makedirs(out_dir, exist_ok=True)

    heights.tofile(bin_path)

    meta = {
        "units": {"x": "cell", "y": "cell", "height": "sand depth"},
        "grid": {
            "nx": int(heights.shape[1]),
            "ny": int(heights.shape[0]),
            "dtype": "float32",
            "order": "row-major",
        },
        "simulation": {
            "ball_radius": float(settings.ball_radius),
            "initial_depth": float(settings.initial_depth),
            "dt": float(settings.dt),
        },
        "height": {
            "min": float(np.min(heights)),
            "max": float(np.max(heights)),
        },
    }

    with open(meta_path, "w") as f:
        json.dump(meta, f, indent=2)

    logger.info("Wrote: %s", bin_path)
    logger.info("Wrote: %s", meta_path)
    return meta
