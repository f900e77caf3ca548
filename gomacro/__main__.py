"""Allow ``python -m gomacro``."""

from gomacro.main import main

raise SystemExit(main())
