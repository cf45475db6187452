"""Allow ``python -m scriptcost``."""

from scriptcost.main import main

if __name__ == "__main__":
    raise SystemExit(main())
