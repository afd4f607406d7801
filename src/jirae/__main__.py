from __future__ import annotations

from jirae.cli import main


if __name__ == "__main__":
    main()
