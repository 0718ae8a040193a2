"""Output path resolution for rendered images and raw heightfield exports."""

import os


def stem(path: str) -> str:
    return os.path.splitext(path)[0]


def heightfield_bin_path(image_path: str) -> str:
    return f"{stem(image_path)}_heightfield.bin"


def heightfield_json_path(image_path: str) -> str:
    return f"{stem(image_path)}_heightfield.json"
