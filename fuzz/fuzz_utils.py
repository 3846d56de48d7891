import sys

import atheris

with atheris.instrument_imports():
    from lifegrid.datetime_utils import parse_birth_date
    from lifegrid.utils import (
        parse_bool,
        parse_float,
        parse_int,
        strip_or_none,
    )


def TestOneInput(data: bytes) -> None:
    """Fuzz utility parsing functions with arbitrary input."""
    value = data.decode("utf-8", errors="ignore")

    # Test parsers with default fallbacks (should never raise)
    parse_bool(value)
    parse_int(value, default=0)
    parse_float(value, default=0.0)
    strip_or_none(value)

    # Birth dates from the API return None instead of raising
    parse_birth_date(value)


def main() -> None:
    atheris.Setup(sys.argv, TestOneInput)
    atheris.Fuzz()


if __name__ == "__main__":
    main()
