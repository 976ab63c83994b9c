"""mdx executable module.

Error handling lives in cli.main(), which is also the console script entry
point; this module only delegates to it.
"""

from __future__ import annotations

import sys

from .cli import main


if __name__ == "__main__":
    sys.exit(main())
