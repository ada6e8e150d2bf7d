# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""CLI entry point for chainsql.

Usage:
    python -m chainsql --help
    python -m chainsql --db sqlite:app.db select users --where "age >= 18"
"""

from .cli import main

if __name__ == "__main__":
    main()
