import os
import tempfile
from pathlib import Path  # noqa: TC003 - Used in runtime type annotations

import orjson


def read_json_object(file_path: Path) -> dict[str, object] | None:
    """Read a file holding a single JSON object.

    Returns:
        The object, or None if the content is not JSON or not an object.

    Raises:
        OSError: If the file cannot be read.
    """
    try:
        data: object = orjson.loads(file_path.read_bytes())
    except orjson.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


def write_json_file(file_path: Path, data: object) -> None:
    """Atomically replace ``file_path`` with indented JSON.

    The payload goes to a sibling temp file first, so a reader in another
    pawnctl process sees either the old record or the new one.

    Raises:
        OSError: If the directory or file cannot be written.
        TypeError: If ``data`` is not JSON-serializable.
    """
    payload = orjson.dumps(data, option=orjson.OPT_INDENT_2)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    fd, temp_name = tempfile.mkstemp(
        prefix=f".{file_path.name}.", dir=file_path.parent
    )
    try:
        with os.fdopen(fd, "wb") as handle:
            _ = handle.write(payload)
        os.replace(temp_name, file_path)
    except BaseException:
        Path(temp_name).unlink(missing_ok=True)
        raise
