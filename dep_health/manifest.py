"""Reading declared dependencies out of a package.json manifest."""

import json
from pathlib import Path
from typing import Any, Dict

DEPENDENCY_SECTIONS = ("dependencies", "devDependencies")


def load_package_json(file_path: Path) -> Dict[str, str]:
    """Collect name -> version specifier pairs from a package.json file.

    ``dependencies`` come first, then ``devDependencies``; a name declared in
    both keeps its position and takes the dev specifier.

    Args:
        file_path: Path to the package.json file

    Returns:
        Ordered mapping of package name to version specifier

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not a JSON object
    """
    if not file_path.is_file():
        raise FileNotFoundError(f"File not found: {file_path}")

    with open(file_path, 'r', encoding='utf-8') as f:
        data: Any = json.load(f)

    if not isinstance(data, dict):
        raise ValueError(f"{file_path} does not contain a JSON object")

    dependencies: Dict[str, str] = {}
    for section in DEPENDENCY_SECTIONS:
        entries = data.get(section)
        if not isinstance(entries, dict):
            continue
        for name, specifier in entries.items():
            dependencies[name] = specifier if isinstance(specifier, str) else ""

    return dependencies
