import json
import sys

import atheris

with atheris.instrument_imports():
    from lifegrid.editor.annotations import parse_cell_data
    from lifegrid.editor.colors import accept_hex_input, normalize_hex, suggest_color
    from lifegrid.editor.coordinates import InvalidCellKeyError, from_cell_key, to_cell_key


def TestOneInput(data: bytes) -> None:
    """Fuzz cell key, hex color and persisted cell data parsing."""
    value = data.decode("utf-8", errors="ignore")

    # Parsing must be the exact inverse of construction
    try:
        row, year_offset = from_cell_key(value)
    except InvalidCellKeyError:
        pass  # Expected for malformed keys
    else:
        assert to_cell_key(row, year_offset) == value

    # Hex input filtering never raises
    typed = accept_hex_input(value)
    if typed is not None:
        assert typed == typed.upper()
    color = normalize_hex(value)
    if color is not None:
        suggest_color([color, value])

    # Persisted payloads degrade to a partial map instead of raising
    try:
        payload = json.loads(value)
    except (ValueError, RecursionError):
        return
    parse_cell_data(payload)


def main() -> None:
    atheris.Setup(sys.argv, TestOneInput)
    atheris.Fuzz()


if __name__ == "__main__":
    main()
