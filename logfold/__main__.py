"""Allow ``python -m logfold``."""

from logfold.cli.main import main

raise SystemExit(main())
